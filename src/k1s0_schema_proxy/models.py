"""Schema Registry プロキシのデータモデル"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Literal

from .exceptions import InvalidSchemaError

LATEST = "latest"

VersionSelector = int | Literal["latest"]


class SchemaType(StrEnum):
    """スキーマタイプ。"""

    AVRO = "AVRO"
    JSON = "JSON"
    PROTOBUF = "PROTOBUF"


# レジストリは schemaType 省略時に AVRO とみなす
BASELINE_SCHEMA_TYPE = SchemaType.AVRO


class CompatibilityLevel(StrEnum):
    """互換性レベル。"""

    BACKWARD = "BACKWARD"
    BACKWARD_TRANSITIVE = "BACKWARD_TRANSITIVE"
    FORWARD = "FORWARD"
    FORWARD_TRANSITIVE = "FORWARD_TRANSITIVE"
    FULL = "FULL"
    FULL_TRANSITIVE = "FULL_TRANSITIVE"
    NONE = "NONE"


def normalize_schema_type(
    value: str | SchemaType | None,
    subject: str | None = None,
) -> SchemaType:
    """省略されたスキーマタイプをベースライン (AVRO) に補完する。

    読み取り経路と登録経路の両方で使う唯一の正規化関数。

    Raises:
        InvalidSchemaError: 未知のスキーマタイプ文字列の場合
    """
    if value is None or value == "":
        return BASELINE_SCHEMA_TYPE
    try:
        return SchemaType(value)
    except ValueError as e:
        raise InvalidSchemaError(subject, f"unknown schema type: {value}") from e


def wire_schema_type(
    value: str | SchemaType | None,
    subject: str | None = None,
) -> SchemaType | None:
    """送信ペイロード用のスキーマタイプ。ベースラインの場合は None（省略）を返す。"""
    schema_type = normalize_schema_type(value, subject)
    if schema_type == BASELINE_SCHEMA_TYPE:
        return None
    return schema_type


@dataclass(frozen=True)
class Cluster:
    """クラスタとその Schema Registry エンドポイント。"""

    name: str
    schema_registry: str


@dataclass
class SchemaVersionRecord:
    """互換性レベルとスキーマタイプを補完済みのスキーマバージョン。"""

    subject: str
    version: int
    id: int
    schema: str
    schema_type: SchemaType
    compatibility_level: str

    @classmethod
    def from_dict(cls, data: dict[str, Any], compatibility_level: str) -> SchemaVersionRecord:
        return cls(
            subject=data["subject"],
            version=int(data["version"]),
            id=int(data["id"]),
            schema=data["schema"],
            schema_type=normalize_schema_type(data.get("schemaType"), data.get("subject")),
            compatibility_level=compatibility_level,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "subject": self.subject,
            "version": self.version,
            "id": self.id,
            "schema": self.schema,
            "schemaType": self.schema_type.value,
            "compatibilityLevel": self.compatibility_level,
        }


@dataclass
class NewSchemaRequest:
    """スキーマ登録リクエスト。"""

    subject: str
    schema: str
    schema_type: SchemaType | None = None

    def to_payload(self) -> dict[str, Any]:
        """レジストリへ送るボディ。ベースラインタイプは schemaType を省略する。"""
        payload: dict[str, Any] = {"schema": self.schema}
        schema_type = wire_schema_type(self.schema_type, self.subject)
        if schema_type is not None:
            payload["schemaType"] = schema_type.value
        return payload


@dataclass
class CompatibilityCheckResult:
    """最新バージョンに対する互換性チェック結果。"""

    is_compatible: bool

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CompatibilityCheckResult:
        return cls(is_compatible=bool(data.get("is_compatible", False)))
