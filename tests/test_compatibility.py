"""CompatibilityResolver のユニットテスト"""

from unittest.mock import AsyncMock

from k1s0_schema_proxy.client import RegistryClient, RegistryResponse
from k1s0_schema_proxy.compatibility import URL_CONFIG, URL_SUBJECT_CONFIG, CompatibilityResolver
from k1s0_schema_proxy.exceptions import RegistryUnavailableError
from k1s0_schema_proxy.models import CompatibilityLevel

ENDPOINT = "http://schema-registry:8081"

NOT_CONFIGURED = RegistryResponse(
    status_code=404,
    body={"error_code": 40408, "message": "Subject level compatibility not configured"},
)


def level_response(level: str) -> RegistryResponse:
    return RegistryResponse(status_code=200, body={"compatibilityLevel": level})


def make_resolver(*responses: RegistryResponse | Exception) -> tuple[CompatibilityResolver, AsyncMock]:
    client = AsyncMock(spec=RegistryClient)
    client.get.side_effect = list(responses)
    return CompatibilityResolver(client), client


async def test_subject_level_wins() -> None:
    """subject レベルが設定されていればグローバルを参照しないこと。"""
    resolver, client = make_resolver(level_response("FULL"))
    assert await resolver.resolve(ENDPOINT, "orders-v1") == CompatibilityLevel.FULL
    client.get.assert_awaited_once_with(ENDPOINT, URL_SUBJECT_CONFIG, {"subject": "orders-v1"})


async def test_falls_back_to_global() -> None:
    """subject レベル未設定時はグローバル値になること。"""
    resolver, client = make_resolver(NOT_CONFIGURED, level_response("BACKWARD"))
    assert await resolver.resolve(ENDPOINT, "orders-v1") == CompatibilityLevel.BACKWARD
    assert client.get.await_count == 2
    assert client.get.await_args_list[1].args == (ENDPOINT, URL_CONFIG)


async def test_falls_back_on_network_error() -> None:
    """subject レベル取得のネットワークエラーでもグローバルへフォールバックすること。"""
    resolver, _ = make_resolver(RegistryUnavailableError("down"), level_response("FORWARD"))
    assert await resolver.resolve(ENDPOINT, "orders-v1") == CompatibilityLevel.FORWARD


async def test_falls_back_on_malformed_body() -> None:
    """不正なボディ・未知の値はグローバルへフォールバックすること。"""
    resolver, _ = make_resolver(
        RegistryResponse(status_code=200, body={"compatibilityLevel": "SIDEWAYS"}),
        level_response("NONE"),
    )
    assert await resolver.resolve(ENDPOINT, "orders-v1") == CompatibilityLevel.NONE


async def test_global_only_when_no_subject() -> None:
    """subject 未指定時はグローバルのみ参照すること。"""
    resolver, client = make_resolver(level_response("FULL_TRANSITIVE"))
    assert await resolver.resolve(ENDPOINT) == CompatibilityLevel.FULL_TRANSITIVE
    client.get.assert_awaited_once_with(ENDPOINT, URL_CONFIG)


async def test_no_opinion() -> None:
    """両方取得できない場合は None を返すこと。"""
    resolver, _ = make_resolver(NOT_CONFIGURED, RegistryUnavailableError("down"))
    assert await resolver.resolve(ENDPOINT, "orders-v1") is None


async def test_global_no_opinion_does_not_retry() -> None:
    """グローバル参照の失敗では再試行しないこと。"""
    resolver, client = make_resolver(RegistryResponse(status_code=500, text="error"))
    assert await resolver.resolve(ENDPOINT) is None
    assert client.get.await_count == 1


async def test_get_level_reads_compatibility_key() -> None:
    """PUT レスポンス形式の compatibility キーも読めること。"""
    resolver, _ = make_resolver(RegistryResponse(status_code=200, body={"compatibility": "FULL"}))
    assert await resolver.get_level(ENDPOINT, None) == CompatibilityLevel.FULL


async def test_get_level_does_not_fall_back() -> None:
    """get_level は単一スコープのみ参照すること。"""
    resolver, client = make_resolver(NOT_CONFIGURED)
    assert await resolver.get_level(ENDPOINT, "orders-v1") is None
    assert client.get.await_count == 1
