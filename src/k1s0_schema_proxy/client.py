"""Schema Registry クライアントアダプタ抽象基底クラス"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

PathParams = Mapping[str, str | int]


@dataclass
class RegistryResponse:
    """レジストリのレスポンス。ステータスの解釈は classifier が行う。"""

    status_code: int
    body: Any = None
    text: str = ""

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404


class RegistryClient(ABC):
    """Schema Registry HTTP API へのアダプタ。

    HTTP ステータスはレスポンスとして返し、例外にはしない。
    接続・タイムアウト等のトランスポート障害のみ RegistryUnavailableError を送出する。
    """

    @abstractmethod
    async def get(
        self,
        endpoint: str,
        path: str,
        path_params: PathParams | None = None,
    ) -> RegistryResponse: ...

    @abstractmethod
    async def post(
        self,
        endpoint: str,
        path: str,
        path_params: PathParams | None = None,
        body: Any = None,
    ) -> RegistryResponse: ...

    @abstractmethod
    async def put(
        self,
        endpoint: str,
        path: str,
        path_params: PathParams | None = None,
        body: Any = None,
    ) -> RegistryResponse: ...

    @abstractmethod
    async def delete(
        self,
        endpoint: str,
        path: str,
        path_params: PathParams | None = None,
    ) -> RegistryResponse: ...
