"""互換性レベルの解決（subject → グローバルのフォールバック）"""

from __future__ import annotations

import structlog

from .client import RegistryClient
from .exceptions import RegistryUnavailableError
from .models import CompatibilityLevel

URL_CONFIG = "/config"
URL_SUBJECT_CONFIG = "/config/{subject}"

logger = structlog.stdlib.get_logger(__name__)


class CompatibilityResolver:
    """互換性レベルを 2 段階で解決する。

    1. subject 指定時は subject スコープ (/config/{subject})、未指定時はグローバル (/config)
    2. subject スコープで値が得られなければグローバルへフォールバック

    値が得られなければ None（意見なし）を返す。設定の直接参照ではそのまま返し、
    レコード補完では呼び出し側が内部不整合として扱う。
    """

    def __init__(self, client: RegistryClient) -> None:
        self._client = client

    async def get_level(self, endpoint: str, subject: str | None = None) -> CompatibilityLevel | None:
        """単一スコープの互換性レベルを取得する。失敗時は理由を問わず None。"""
        try:
            if subject is None:
                resp = await self._client.get(endpoint, URL_CONFIG)
            else:
                resp = await self._client.get(endpoint, URL_SUBJECT_CONFIG, {"subject": subject})
        except RegistryUnavailableError as e:
            logger.warning("compatibility lookup failed", subject=subject, error=str(e))
            return None
        if not resp.is_success or not isinstance(resp.body, dict):
            logger.debug("compatibility not configured", subject=subject, status=resp.status_code)
            return None
        value = resp.body.get("compatibilityLevel") or resp.body.get("compatibility")
        try:
            return CompatibilityLevel(value)
        except ValueError:
            logger.warning("unknown compatibility level", subject=subject, value=value)
            return None

    async def resolve(self, endpoint: str, subject: str | None = None) -> CompatibilityLevel | None:
        level = await self.get_level(endpoint, subject)
        if level is not None or subject is None:
            return level
        logger.debug("falling back to global compatibility", subject=subject)
        return await self.get_level(endpoint, None)
