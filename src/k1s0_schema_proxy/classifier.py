"""レジストリの HTTP ステータスをドメインエラーに変換する"""

from __future__ import annotations

from .client import RegistryResponse
from .exceptions import InvalidSchemaError, RegistryUnavailableError, SchemaNotFoundError


def rejection_detail(response: RegistryResponse) -> str:
    """レジストリのエラーボディから拒否理由を取り出す。"""
    if isinstance(response.body, dict):
        message = response.body.get("message")
        if message:
            return str(message)
    return response.text


def raise_for_status(
    response: RegistryResponse,
    *,
    subject: str | None = None,
    version: int | str | None = None,
) -> None:
    """2xx 以外のレスポンスをドメインエラーとして送出する。

    404 → SchemaNotFoundError、422 → InvalidSchemaError、その他 → RegistryUnavailableError。
    クラスタ名の解決失敗はこの段階に到達しない（resolver で検出済み）。
    """
    if response.is_success:
        return
    if response.is_not_found:
        raise SchemaNotFoundError(subject, version)
    if response.status_code == 422:
        raise InvalidSchemaError(subject, rejection_detail(response))
    raise RegistryUnavailableError(
        message=f"Schema registry returned HTTP {response.status_code}: {response.text}",
        status_code=response.status_code,
    )
