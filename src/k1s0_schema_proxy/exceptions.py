"""schema_proxy ライブラリの例外型定義"""

from __future__ import annotations


class SchemaProxyError(Exception):
    """schema_proxy ライブラリのエラー基底クラス。"""

    def __init__(
        self,
        code: str,
        message: str,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        return f"{self.code}: {super().__str__()}"


class SchemaProxyErrorCodes:
    """SchemaProxyError のエラーコード定数。"""

    CLUSTER_NOT_FOUND: str = "CLUSTER_NOT_FOUND"
    SCHEMA_NOT_FOUND: str = "SCHEMA_NOT_FOUND"
    DUPLICATE_SCHEMA: str = "DUPLICATE_SCHEMA"
    INVALID_SCHEMA: str = "INVALID_SCHEMA"
    REGISTRY_UNAVAILABLE: str = "REGISTRY_UNAVAILABLE"
    COMPATIBILITY_UNRESOLVED: str = "COMPATIBILITY_UNRESOLVED"


class ClusterNotFoundError(SchemaProxyError):
    """クラスタ名が設定に存在しない。"""

    def __init__(self, cluster_name: str) -> None:
        self.cluster_name = cluster_name
        super().__init__(
            code=SchemaProxyErrorCodes.CLUSTER_NOT_FOUND,
            message=f"No such cluster: {cluster_name}",
        )


class SchemaNotFoundError(SchemaProxyError):
    """subject または subject のバージョンがレジストリに存在しない。"""

    def __init__(
        self,
        subject: str | None,
        version: int | str | None = None,
        cluster_name: str | None = None,
    ) -> None:
        self.subject = subject
        self.version = version
        self.cluster_name = cluster_name
        if subject is None:
            message = f"No subject listing on cluster {cluster_name}"
        elif version is None:
            message = f"No such schema {subject}"
        else:
            message = f"No such schema {subject} with version {version}"
        super().__init__(code=SchemaProxyErrorCodes.SCHEMA_NOT_FOUND, message=message)


class DuplicateSchemaError(SchemaProxyError):
    """同一スキーマが subject に登録済み。"""

    def __init__(self, subject: str) -> None:
        self.subject = subject
        super().__init__(
            code=SchemaProxyErrorCodes.DUPLICATE_SCHEMA,
            message=f"Such schema already exists: {subject}",
        )


class InvalidSchemaError(SchemaProxyError):
    """レジストリがスキーマ内容を拒否した（不正 or 非互換）。"""

    def __init__(self, subject: str | None, detail: str = "") -> None:
        self.subject = subject
        self.detail = detail
        if subject is None:
            message = "Invalid request"
        else:
            message = f"Invalid schema for subject {subject}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(code=SchemaProxyErrorCodes.INVALID_SCHEMA, message=message)


class RegistryUnavailableError(SchemaProxyError):
    """レジストリへの接続失敗、または想定外のステータス。"""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.status_code = status_code
        super().__init__(
            code=SchemaProxyErrorCodes.REGISTRY_UNAVAILABLE,
            message=message,
            cause=cause,
        )


class CompatibilityUnresolvedError(SchemaProxyError):
    """subject / グローバルいずれの互換性レベルも取得できなかった。

    クラスタには必ずグローバルのデフォルトがあるため、内部不整合として扱う。
    """

    def __init__(self, subject: str | None) -> None:
        self.subject = subject
        super().__init__(
            code=SchemaProxyErrorCodes.COMPATIBILITY_UNRESOLVED,
            message=f"No compatibility level resolved for subject {subject} or globally",
        )


class ConfigError(SchemaProxyError):
    """設定ファイルの読み込み・検証エラー。"""


class ConfigErrorCodes:
    """ConfigError のエラーコード定数。"""

    READ_FILE: str = "READ_FILE_ERROR"
    PARSE_YAML: str = "PARSE_YAML_ERROR"
    VALIDATION: str = "VALIDATION_ERROR"
