"""プロキシ設定型定義（pydantic BaseModel）"""

from __future__ import annotations

from typing import Literal

from pydantic import AnyHttpUrl, BaseModel, Field, field_validator

from .models import Cluster


class ClusterSection(BaseModel):
    """クラスタ設定。"""

    name: str = Field(min_length=1)
    schema_registry: AnyHttpUrl

    def to_cluster(self) -> Cluster:
        return Cluster(name=self.name, schema_registry=str(self.schema_registry).rstrip("/"))


class RegistrySection(BaseModel):
    """Schema Registry HTTP 接続設定。"""

    timeout_seconds: float = Field(default=10.0, gt=0)
    # 一覧取得時に同時実行するレコード取得数の上限
    max_concurrency: int = Field(default=256, gt=0)


class LogSection(BaseModel):
    """ログ設定。"""

    level: str = "INFO"
    format: Literal["json", "text"] = "json"


class ObservabilitySection(BaseModel):
    """可観測性設定。"""

    log: LogSection = Field(default_factory=LogSection)


class ProxyConfig(BaseModel):
    """プロキシ設定全体。"""

    clusters: list[ClusterSection] = Field(default_factory=list)
    registry: RegistrySection = Field(default_factory=RegistrySection)
    observability: ObservabilitySection = Field(default_factory=ObservabilitySection)

    @field_validator("clusters")
    @classmethod
    def _unique_cluster_names(cls, clusters: list[ClusterSection]) -> list[ClusterSection]:
        seen: set[str] = set()
        for cluster in clusters:
            if cluster.name in seen:
                raise ValueError(f"duplicate cluster name: {cluster.name}")
            seen.add(cluster.name)
        return clusters
