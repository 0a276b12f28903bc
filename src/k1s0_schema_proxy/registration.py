"""重複チェック付きスキーマ登録ワークフロー"""

from __future__ import annotations

from typing import Any

import structlog

from .classifier import raise_for_status
from .client import RegistryClient
from .enrichment import URL_SUBJECT_VERSIONS, SchemaEnrichmentPipeline
from .exceptions import DuplicateSchemaError
from .models import LATEST, NewSchemaRequest, SchemaVersionRecord
from .resolver import ClusterResolver

URL_SUBJECT = "/subjects/{subject}"

logger = structlog.stdlib.get_logger(__name__)


class RegistrationWorkflow:
    """重複チェック → 作成 → 最新バージョン再取得 を順に実行する。

    各段階は前段の成功時のみ実行される。重複チェックを経ない書き込みは発生しない。
    作成 API のレスポンス（ID のみ）は破棄し、通常の取得経路と同じ補完済みレコードを返す。
    """

    def __init__(
        self,
        resolver: ClusterResolver,
        client: RegistryClient,
        pipeline: SchemaEnrichmentPipeline,
    ) -> None:
        self._resolver = resolver
        self._client = client
        self._pipeline = pipeline

    async def register(self, cluster_name: str, request: NewSchemaRequest) -> SchemaVersionRecord:
        """新しいスキーマを登録して最新バージョンを返す。

        Raises:
            ClusterNotFoundError: クラスタ名が未知の場合
            DuplicateSchemaError: 同一スキーマが登録済みの場合
            InvalidSchemaError: レジストリがスキーマを拒否した場合
        """
        endpoint = self._resolver.resolve(cluster_name)
        payload = request.to_payload()
        await self._check_duplicate(endpoint, request.subject, payload)
        schema_id = await self._submit(endpoint, request.subject, payload)
        logger.info(
            "schema registered",
            cluster=cluster_name,
            subject=request.subject,
            schema_id=schema_id,
        )
        return await self._pipeline.fetch_version(cluster_name, request.subject, LATEST)

    async def _check_duplicate(self, endpoint: str, subject: str, payload: dict[str, Any]) -> None:
        resp = await self._client.post(endpoint, URL_SUBJECT, {"subject": subject}, payload)
        if resp.is_not_found:
            return
        raise_for_status(resp, subject=subject)
        if isinstance(resp.body, dict) and resp.body.get("id") is not None:
            logger.info("duplicate schema rejected", subject=subject, schema_id=resp.body["id"])
            raise DuplicateSchemaError(subject)

    async def _submit(self, endpoint: str, subject: str, payload: dict[str, Any]) -> int | None:
        resp = await self._client.post(
            endpoint, URL_SUBJECT_VERSIONS, {"subject": subject}, payload
        )
        raise_for_status(resp, subject=subject)
        if isinstance(resp.body, dict) and resp.body.get("id") is not None:
            return int(resp.body["id"])
        return None
