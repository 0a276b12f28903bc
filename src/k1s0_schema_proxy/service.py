"""クラスタ単位の Schema Registry プロキシサービス"""

from __future__ import annotations

from collections.abc import AsyncIterator

import structlog

from .classifier import raise_for_status
from .client import RegistryClient
from .compatibility import URL_CONFIG, URL_SUBJECT_CONFIG, CompatibilityResolver
from .config import ProxyConfig
from .enrichment import (
    DEFAULT_MAX_CONCURRENCY,
    URL_SUBJECT_BY_VERSION,
    SchemaEnrichmentPipeline,
)
from .exceptions import InvalidSchemaError, RegistryUnavailableError
from .http_client import HttpRegistryClient
from .logger import new_logger
from .models import (
    LATEST,
    CompatibilityCheckResult,
    CompatibilityLevel,
    NewSchemaRequest,
    SchemaVersionRecord,
    VersionSelector,
)
from .registration import URL_SUBJECT, RegistrationWorkflow
from .resolver import ClusterResolver, ClustersStorage, InMemoryClustersStorage

URL_COMPATIBILITY_LATEST = "/compatibility/subjects/{subject}/versions/latest"

logger = structlog.stdlib.get_logger(__name__)


class SchemaRegistryService:
    """API 層から呼ばれる非同期操作の集合。

    全操作はまずクラスタ名を解決するため、未知のクラスタはネットワーク呼び出し前に
    ClusterNotFoundError となる。
    """

    def __init__(
        self,
        storage: ClustersStorage,
        client: RegistryClient,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
    ) -> None:
        self._client = client
        self._resolver = ClusterResolver(storage)
        self._compatibility = CompatibilityResolver(client)
        self._pipeline = SchemaEnrichmentPipeline(
            self._resolver, client, self._compatibility, max_concurrency
        )
        self._registration = RegistrationWorkflow(self._resolver, client, self._pipeline)

    @classmethod
    def from_config(cls, config: ProxyConfig) -> SchemaRegistryService:
        """設定からサービスを構築する。ログ設定もここで適用する。"""
        log = config.observability.log
        new_logger(level=log.level, format=log.format)
        return cls(
            InMemoryClustersStorage.from_config(config),
            HttpRegistryClient(timeout_seconds=config.registry.timeout_seconds),
            max_concurrency=config.registry.max_concurrency,
        )

    # --- 参照 ---

    async def get_all_subject_names(self, cluster_name: str) -> list[str]:
        return await self._pipeline.list_subjects(cluster_name)

    def get_all_latest_versions(self, cluster_name: str) -> AsyncIterator[SchemaVersionRecord]:
        return self._pipeline.list_all_latest(cluster_name)

    def get_all_versions_by_subject(
        self,
        cluster_name: str,
        subject: str,
    ) -> AsyncIterator[SchemaVersionRecord]:
        return self._pipeline.list_all_versions(cluster_name, subject)

    async def get_schema_by_version(
        self,
        cluster_name: str,
        subject: str,
        version: VersionSelector,
    ) -> SchemaVersionRecord:
        return await self._pipeline.fetch_version(cluster_name, subject, version)

    async def get_latest_schema(self, cluster_name: str, subject: str) -> SchemaVersionRecord:
        return await self._pipeline.fetch_version(cluster_name, subject, LATEST)

    # --- 登録・削除 ---

    async def register_schema(
        self,
        cluster_name: str,
        request: NewSchemaRequest,
    ) -> SchemaVersionRecord:
        return await self._registration.register(cluster_name, request)

    async def delete_schema_version(
        self,
        cluster_name: str,
        subject: str,
        version: VersionSelector,
    ) -> None:
        endpoint = self._resolver.resolve(cluster_name)
        resp = await self._client.delete(
            endpoint,
            URL_SUBJECT_BY_VERSION,
            {"subject": subject, "version": version},
        )
        raise_for_status(resp, subject=subject, version=version)
        logger.info("schema version deleted", cluster=cluster_name, subject=subject, version=version)

    async def delete_latest_schema(self, cluster_name: str, subject: str) -> None:
        await self.delete_schema_version(cluster_name, subject, LATEST)

    async def delete_subject(self, cluster_name: str, subject: str) -> None:
        endpoint = self._resolver.resolve(cluster_name)
        resp = await self._client.delete(endpoint, URL_SUBJECT, {"subject": subject})
        raise_for_status(resp, subject=subject)
        logger.info("subject deleted", cluster=cluster_name, subject=subject)

    # --- 互換性 ---

    async def update_compatibility(
        self,
        cluster_name: str,
        level: CompatibilityLevel | str,
        subject: str | None = None,
    ) -> None:
        """subject（未指定時はグローバル）の互換性レベルを更新する。

        Raises:
            InvalidSchemaError: 未知の互換性レベル、またはレジストリが拒否した場合
        """
        endpoint = self._resolver.resolve(cluster_name)
        try:
            body = {"compatibility": CompatibilityLevel(level).value}
        except ValueError as e:
            raise InvalidSchemaError(subject, f"unknown compatibility level: {level}") from e
        if subject is None:
            resp = await self._client.put(endpoint, URL_CONFIG, body=body)
        else:
            resp = await self._client.put(endpoint, URL_SUBJECT_CONFIG, {"subject": subject}, body)
        raise_for_status(resp, subject=subject)
        logger.info("compatibility updated", cluster=cluster_name, subject=subject, level=level)

    async def get_compatibility(
        self,
        cluster_name: str,
        subject: str | None = None,
    ) -> CompatibilityLevel | None:
        """単一スコープの設定値を返す。未設定・取得失敗時は None。"""
        endpoint = self._resolver.resolve(cluster_name)
        return await self._compatibility.get_level(endpoint, subject)

    async def get_global_compatibility(self, cluster_name: str) -> CompatibilityLevel | None:
        return await self.get_compatibility(cluster_name, None)

    async def resolve_compatibility(
        self,
        cluster_name: str,
        subject: str | None = None,
    ) -> CompatibilityLevel | None:
        """subject → グローバルの順に解決する。どちらも無ければ None。"""
        endpoint = self._resolver.resolve(cluster_name)
        return await self._compatibility.resolve(endpoint, subject)

    async def check_compatibility(
        self,
        cluster_name: str,
        subject: str,
        request: NewSchemaRequest,
    ) -> CompatibilityCheckResult:
        """スキーマが subject の最新バージョンと互換か検査する。

        Raises:
            SchemaNotFoundError: subject が存在しない場合
        """
        endpoint = self._resolver.resolve(cluster_name)
        resp = await self._client.post(
            endpoint,
            URL_COMPATIBILITY_LATEST,
            {"subject": subject},
            request.to_payload(),
        )
        raise_for_status(resp, subject=subject)
        if not isinstance(resp.body, dict):
            raise RegistryUnavailableError(
                message=f"Malformed compatibility response for {subject}",
                status_code=resp.status_code,
            )
        return CompatibilityCheckResult.from_dict(resp.body)
