"""スキーマバージョン取得と補完パイプライン"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import aclosing
from typing import TypeVar

import structlog

from .classifier import raise_for_status
from .client import RegistryClient
from .compatibility import CompatibilityResolver
from .exceptions import CompatibilityUnresolvedError, RegistryUnavailableError, SchemaNotFoundError
from .models import LATEST, SchemaVersionRecord, VersionSelector
from .resolver import ClusterResolver

URL_SUBJECTS = "/subjects"
URL_SUBJECT_VERSIONS = "/subjects/{subject}/versions"
URL_SUBJECT_BY_VERSION = "/subjects/{subject}/versions/{version}"

DEFAULT_MAX_CONCURRENCY = 256

logger = structlog.stdlib.get_logger(__name__)

T = TypeVar("T")


async def _stream(
    fetch: Callable[[T], Awaitable[SchemaVersionRecord]],
    items: list[T],
    ordered: bool,
    max_concurrency: int,
) -> AsyncIterator[SchemaVersionRecord]:
    """items ごとの取得を最大 max_concurrency 件まで並行実行し、完了順または入力順で返す。

    最初の失敗で残りのタスクをキャンセルしてその例外を送出する。
    """
    semaphore = asyncio.Semaphore(max_concurrency)

    async def bounded(item: T) -> SchemaVersionRecord:
        async with semaphore:
            return await fetch(item)

    tasks = [asyncio.ensure_future(bounded(item)) for item in items]
    try:
        if ordered:
            for task in tasks:
                yield await task
        else:
            for next_done in asyncio.as_completed(tasks):
                yield await next_done
    finally:
        pending = [t for t in tasks if not t.done()]
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)


class SchemaEnrichmentPipeline:
    """レジストリのスキーマバージョンにスキーマタイプと互換性レベルを補完する。"""

    def __init__(
        self,
        resolver: ClusterResolver,
        client: RegistryClient,
        compatibility: CompatibilityResolver,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
    ) -> None:
        if max_concurrency <= 0:
            raise ValueError("max_concurrency must be positive")
        self._resolver = resolver
        self._client = client
        self._compatibility = compatibility
        self._max_concurrency = max_concurrency

    async def fetch_version(
        self,
        cluster_name: str,
        subject: str,
        version: VersionSelector = LATEST,
    ) -> SchemaVersionRecord:
        """subject のバージョン（番号または "latest"）を補完済みレコードとして取得する。

        Raises:
            ClusterNotFoundError: クラスタ名が未知の場合
            SchemaNotFoundError: subject またはバージョンが存在しない場合
        """
        endpoint = self._resolver.resolve(cluster_name)
        return await self._fetch_at(endpoint, subject, version)

    async def _fetch_at(
        self,
        endpoint: str,
        subject: str,
        version: VersionSelector,
    ) -> SchemaVersionRecord:
        # バージョン取得と互換性解決に順序依存はない。取得失敗時は解決を打ち切る
        level_task = asyncio.ensure_future(self._compatibility.resolve(endpoint, subject))
        try:
            resp = await self._client.get(
                endpoint,
                URL_SUBJECT_BY_VERSION,
                {"subject": subject, "version": version},
            )
            raise_for_status(resp, subject=subject, version=version)
            if not isinstance(resp.body, dict):
                raise RegistryUnavailableError(
                    message=f"Malformed schema response for {subject} version {version}",
                    status_code=resp.status_code,
                )
            level = await level_task
        finally:
            if not level_task.done():
                level_task.cancel()
                await asyncio.gather(level_task, return_exceptions=True)
        if level is None:
            raise CompatibilityUnresolvedError(subject)
        return SchemaVersionRecord.from_dict(resp.body, level.value)

    async def list_subjects(self, cluster_name: str) -> list[str]:
        endpoint = self._resolver.resolve(cluster_name)
        return await self._list_subjects_at(endpoint, cluster_name)

    async def _list_subjects_at(self, endpoint: str, cluster_name: str) -> list[str]:
        resp = await self._client.get(endpoint, URL_SUBJECTS)
        if resp.is_not_found:
            raise SchemaNotFoundError(None, cluster_name=cluster_name)
        raise_for_status(resp)
        return [str(s) for s in resp.body or []]

    async def list_all_latest(self, cluster_name: str) -> AsyncIterator[SchemaVersionRecord]:
        """全 subject の最新バージョンを取得完了順に返す。

        同時に実行するレコード取得は max_concurrency 件まで。
        1 subject でも取得に失敗した場合はシーケンス全体が失敗する（残りはキャンセル）。
        """
        endpoint = self._resolver.resolve(cluster_name)
        subjects = await self._list_subjects_at(endpoint, cluster_name)
        logger.debug("fetching latest versions", cluster=cluster_name, subjects=len(subjects))

        async def fetch_latest(subject: str) -> SchemaVersionRecord:
            return await self._fetch_at(endpoint, subject, LATEST)

        stream = _stream(
            fetch_latest, subjects, ordered=False, max_concurrency=self._max_concurrency
        )
        async with aclosing(stream) as records:
            async for record in records:
                yield record

    async def list_versions(self, cluster_name: str, subject: str) -> list[int]:
        endpoint = self._resolver.resolve(cluster_name)
        return await self._list_versions_at(endpoint, subject)

    async def _list_versions_at(self, endpoint: str, subject: str) -> list[int]:
        resp = await self._client.get(endpoint, URL_SUBJECT_VERSIONS, {"subject": subject})
        raise_for_status(resp, subject=subject)
        return [int(v) for v in resp.body or []]

    async def list_all_versions(
        self,
        cluster_name: str,
        subject: str,
    ) -> AsyncIterator[SchemaVersionRecord]:
        """subject の全バージョンをレジストリの一覧順で返す。"""
        endpoint = self._resolver.resolve(cluster_name)
        versions = await self._list_versions_at(endpoint, subject)

        async def fetch_numbered(version: int) -> SchemaVersionRecord:
            return await self._fetch_at(endpoint, subject, version)

        stream = _stream(
            fetch_numbered, versions, ordered=True, max_concurrency=self._max_concurrency
        )
        async with aclosing(stream) as records:
            async for record in records:
                yield record
