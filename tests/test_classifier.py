"""ステータス → ドメインエラー変換のユニットテスト"""

import pytest
from k1s0_schema_proxy.classifier import raise_for_status, rejection_detail
from k1s0_schema_proxy.client import RegistryResponse
from k1s0_schema_proxy.exceptions import (
    InvalidSchemaError,
    RegistryUnavailableError,
    SchemaNotFoundError,
)


@pytest.mark.parametrize("status", [200, 201, 204])
def test_success_does_not_raise(status: int) -> None:
    """2xx では例外が発生しないこと。"""
    raise_for_status(RegistryResponse(status_code=status))


def test_not_found() -> None:
    """404 で subject とバージョン付きの SchemaNotFoundError になること。"""
    with pytest.raises(SchemaNotFoundError) as exc_info:
        raise_for_status(RegistryResponse(status_code=404), subject="orders-v1", version="latest")
    assert exc_info.value.subject == "orders-v1"
    assert exc_info.value.version == "latest"
    assert "orders-v1" in str(exc_info.value)
    assert "latest" in str(exc_info.value)


def test_unprocessable() -> None:
    """422 でレジストリのメッセージ付き InvalidSchemaError になること。"""
    resp = RegistryResponse(
        status_code=422,
        body={"error_code": 42201, "message": "Either the input schema or one its references is invalid"},
        text="...",
    )
    with pytest.raises(InvalidSchemaError) as exc_info:
        raise_for_status(resp, subject="orders-v1")
    assert exc_info.value.detail == "Either the input schema or one its references is invalid"


@pytest.mark.parametrize("status", [401, 409, 500, 503])
def test_other_status(status: int) -> None:
    """その他のエラーステータスは RegistryUnavailableError になること。"""
    with pytest.raises(RegistryUnavailableError) as exc_info:
        raise_for_status(RegistryResponse(status_code=status, text="oops"))
    assert exc_info.value.status_code == status


def test_rejection_detail_falls_back_to_text() -> None:
    """message が無い場合は本文テキストが使われること。"""
    assert rejection_detail(RegistryResponse(status_code=422, text="bad schema")) == "bad schema"
