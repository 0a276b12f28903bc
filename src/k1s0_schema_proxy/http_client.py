"""Schema Registry HTTP クライアント実装"""

from __future__ import annotations

import time
from typing import Any
from urllib.parse import quote

import httpx
import structlog

from .client import PathParams, RegistryClient, RegistryResponse
from .exceptions import RegistryUnavailableError
from .metrics import (
    registry_errors_total,
    registry_request_duration_seconds,
    registry_requests_total,
)

CONTENT_TYPE = "application/vnd.schemaregistry.v1+json"

logger = structlog.stdlib.get_logger(__name__)


def expand_path(path: str, path_params: PathParams | None = None) -> str:
    """パステンプレートにパスパラメータを URL エンコードして埋め込む。"""
    if not path_params:
        return path
    quoted = {key: quote(str(value), safe="") for key, value in path_params.items()}
    return path.format(**quoted)


class HttpRegistryClient(RegistryClient):
    """httpx を使った Schema Registry HTTP クライアント。"""

    def __init__(self, timeout_seconds: float = 10.0) -> None:
        self._timeout_seconds = timeout_seconds
        self._headers: dict[str, str] = {
            "Accept": CONTENT_TYPE,
            "Content-Type": CONTENT_TYPE,
        }

    def _make_client(self, endpoint: str) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=endpoint,
            headers=self._headers,
            timeout=self._timeout_seconds,
        )

    @staticmethod
    def _to_response(resp: httpx.Response) -> RegistryResponse:
        body: Any = None
        if resp.content:
            try:
                body = resp.json()
            except ValueError:
                body = None
        return RegistryResponse(status_code=resp.status_code, body=body, text=resp.text)

    async def _request(
        self,
        method: str,
        endpoint: str,
        path: str,
        path_params: PathParams | None,
        body: Any = None,
    ) -> RegistryResponse:
        url = expand_path(path, path_params)
        started = time.perf_counter()
        try:
            async with self._make_client(endpoint) as client:
                if body is None:
                    resp = await client.request(method, url)
                else:
                    resp = await client.request(method, url, json=body)
        except httpx.HTTPError as e:
            registry_errors_total.add(1, {"method": method, "error_type": type(e).__name__})
            logger.warning(
                "schema registry request failed",
                method=method,
                endpoint=endpoint,
                path=url,
                error=str(e),
            )
            raise RegistryUnavailableError(
                message=f"Failed to call schema registry {method} {endpoint}{url}: {e}",
                cause=e,
            ) from e
        elapsed = time.perf_counter() - started
        registry_requests_total.add(1, {"method": method, "status": resp.status_code})
        registry_request_duration_seconds.record(elapsed, {"method": method})
        logger.debug(
            "schema registry request",
            method=method,
            endpoint=endpoint,
            path=url,
            status=resp.status_code,
            elapsed=round(elapsed, 4),
        )
        return self._to_response(resp)

    async def get(
        self,
        endpoint: str,
        path: str,
        path_params: PathParams | None = None,
    ) -> RegistryResponse:
        return await self._request("GET", endpoint, path, path_params)

    async def post(
        self,
        endpoint: str,
        path: str,
        path_params: PathParams | None = None,
        body: Any = None,
    ) -> RegistryResponse:
        return await self._request("POST", endpoint, path, path_params, body)

    async def put(
        self,
        endpoint: str,
        path: str,
        path_params: PathParams | None = None,
        body: Any = None,
    ) -> RegistryResponse:
        return await self._request("PUT", endpoint, path, path_params, body)

    async def delete(
        self,
        endpoint: str,
        path: str,
        path_params: PathParams | None = None,
    ) -> RegistryResponse:
        return await self._request("DELETE", endpoint, path, path_params)
