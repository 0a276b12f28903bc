"""インメモリ Schema Registry クライアント（テスト用）"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from .client import PathParams, RegistryClient, RegistryResponse


@dataclass
class _StoredVersion:
    id: int
    version: int
    schema: str
    schema_type: str | None = None

    def to_body(self, subject: str) -> dict[str, Any]:
        body: dict[str, Any] = {
            "subject": subject,
            "version": self.version,
            "id": self.id,
            "schema": self.schema,
        }
        # AVRO の場合レジストリは schemaType を返さない
        if self.schema_type is not None:
            body["schemaType"] = self.schema_type
        return body


@dataclass
class _Call:
    method: str
    path: str
    path_params: dict[str, str | int] = field(default_factory=dict)
    body: Any = None


def _not_found(message: str) -> RegistryResponse:
    return RegistryResponse(
        status_code=404,
        body={"error_code": 40401, "message": message},
        text=message,
    )


def _ok(body: Any) -> RegistryResponse:
    return RegistryResponse(status_code=200, body=body, text=json.dumps(body))


class InMemoryRegistryClient(RegistryClient):
    """Schema Registry の REST 振る舞いを模倣するインメモリクライアント。

    エンドポイントは区別せず単一のレジストリとして振る舞う。呼び出しは calls に記録される。
    """

    def __init__(self, global_compatibility: str | None = "BACKWARD") -> None:
        self._subjects: dict[str, list[_StoredVersion]] = {}
        self._global_compatibility = global_compatibility
        self._subject_compatibility: dict[str, str] = {}
        self._next_id = 1
        self.calls: list[_Call] = []

    def add_schema(self, subject: str, schema: str, schema_type: str | None = None) -> int:
        """テスト用にスキーマを直接登録して ID を返す。"""
        versions = self._subjects.setdefault(subject, [])
        stored = _StoredVersion(
            id=self._next_id,
            version=versions[-1].version + 1 if versions else 1,
            schema=schema,
            schema_type=schema_type,
        )
        self._next_id += 1
        versions.append(stored)
        return stored.id

    def set_subject_compatibility(self, subject: str, level: str) -> None:
        self._subject_compatibility[subject] = level

    def count_calls(self, method: str, path: str) -> int:
        return sum(1 for c in self.calls if c.method == method and c.path == path)

    def _find_version(self, subject: str, version: str | int) -> _StoredVersion | None:
        versions = self._subjects.get(subject)
        if not versions:
            return None
        if version == "latest":
            return versions[-1]
        for stored in versions:
            if stored.version == int(version):
                return stored
        return None

    def _find_identical(self, subject: str, body: dict[str, Any]) -> _StoredVersion | None:
        for stored in self._subjects.get(subject, []):
            if stored.schema == body["schema"] and stored.schema_type == body.get("schemaType"):
                return stored
        return None

    @staticmethod
    def _is_valid(body: dict[str, Any]) -> bool:
        if body.get("schemaType") == "PROTOBUF":
            return bool(body.get("schema"))
        try:
            json.loads(body["schema"])
        except (KeyError, TypeError, ValueError):
            return False
        return True

    async def get(
        self,
        endpoint: str,
        path: str,
        path_params: PathParams | None = None,
    ) -> RegistryResponse:
        params = dict(path_params or {})
        self.calls.append(_Call("GET", path, params))
        if path == "/subjects":
            return _ok(list(self._subjects))
        if path == "/subjects/{subject}/versions":
            versions = self._subjects.get(str(params["subject"]))
            if not versions:
                return _not_found("Subject not found.")
            return _ok([v.version for v in versions])
        if path == "/subjects/{subject}/versions/{version}":
            subject = str(params["subject"])
            stored = self._find_version(subject, params["version"])
            if stored is None:
                return _not_found("Version not found.")
            return _ok(stored.to_body(subject))
        if path == "/config":
            if self._global_compatibility is None:
                return _not_found("Config not found.")
            return _ok({"compatibilityLevel": self._global_compatibility})
        if path == "/config/{subject}":
            level = self._subject_compatibility.get(str(params["subject"]))
            if level is None:
                return _not_found("Subject level compatibility not configured.")
            return _ok({"compatibilityLevel": level})
        return _not_found(f"HTTP 404 Not Found: {path}")

    async def post(
        self,
        endpoint: str,
        path: str,
        path_params: PathParams | None = None,
        body: Any = None,
    ) -> RegistryResponse:
        params = dict(path_params or {})
        self.calls.append(_Call("POST", path, params, body))
        subject = str(params.get("subject", ""))
        if path == "/subjects/{subject}":
            if subject not in self._subjects:
                return _not_found("Subject not found.")
            stored = self._find_identical(subject, body)
            if stored is None:
                return _not_found("Schema not found.")
            return _ok(stored.to_body(subject))
        if path == "/subjects/{subject}/versions":
            if not self._is_valid(body):
                return RegistryResponse(
                    status_code=422,
                    body={"error_code": 42201, "message": "Invalid schema"},
                    text="Invalid schema",
                )
            stored = self._find_identical(subject, body)
            if stored is None:
                schema_id = self.add_schema(subject, body["schema"], body.get("schemaType"))
                return _ok({"id": schema_id})
            return _ok({"id": stored.id})
        if path == "/compatibility/subjects/{subject}/versions/latest":
            if subject not in self._subjects:
                return _not_found("Subject not found.")
            return _ok({"is_compatible": self._is_valid(body)})
        return _not_found(f"HTTP 404 Not Found: {path}")

    async def put(
        self,
        endpoint: str,
        path: str,
        path_params: PathParams | None = None,
        body: Any = None,
    ) -> RegistryResponse:
        params = dict(path_params or {})
        self.calls.append(_Call("PUT", path, params, body))
        if path == "/config":
            self._global_compatibility = body["compatibility"]
            return _ok(body)
        if path == "/config/{subject}":
            self._subject_compatibility[str(params["subject"])] = body["compatibility"]
            return _ok(body)
        return _not_found(f"HTTP 404 Not Found: {path}")

    async def delete(
        self,
        endpoint: str,
        path: str,
        path_params: PathParams | None = None,
    ) -> RegistryResponse:
        params = dict(path_params or {})
        self.calls.append(_Call("DELETE", path, params))
        subject = str(params.get("subject", ""))
        if path == "/subjects/{subject}":
            versions = self._subjects.pop(subject, None)
            if not versions:
                return _not_found("Subject not found.")
            self._subject_compatibility.pop(subject, None)
            return _ok([v.version for v in versions])
        if path == "/subjects/{subject}/versions/{version}":
            stored = self._find_version(subject, params["version"])
            if stored is None:
                return _not_found("Version not found.")
            self._subjects[subject].remove(stored)
            if not self._subjects[subject]:
                del self._subjects[subject]
            return _ok(stored.version)
        return _not_found(f"HTTP 404 Not Found: {path}")
