"""クラスタ名から Schema Registry エンドポイントを解決する"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable

from .config import ProxyConfig
from .exceptions import ClusterNotFoundError
from .models import Cluster


class ClustersStorage(ABC):
    """クラスタ設定ストレージ抽象基底クラス。"""

    @abstractmethod
    def get_cluster_by_name(self, name: str) -> Cluster | None:
        """名前でクラスタを取得する。存在しなければ None。"""
        ...


class InMemoryClustersStorage(ClustersStorage):
    """読み込み済み設定から構築するインメモリストレージ。"""

    def __init__(self, clusters: Iterable[Cluster] = ()) -> None:
        self._clusters: dict[str, Cluster] = {c.name: c for c in clusters}

    @classmethod
    def from_config(cls, config: ProxyConfig) -> InMemoryClustersStorage:
        return cls(section.to_cluster() for section in config.clusters)

    def get_cluster_by_name(self, name: str) -> Cluster | None:
        return self._clusters.get(name)


class ClusterResolver:
    """クラスタ名 → Schema Registry ベース URL。ネットワークアクセスなし。"""

    def __init__(self, storage: ClustersStorage) -> None:
        self._storage = storage

    def resolve(self, cluster_name: str) -> str:
        """クラスタの Schema Registry ベース URL を返す。

        Raises:
            ClusterNotFoundError: クラスタ名が未知の場合
        """
        cluster = self._storage.get_cluster_by_name(cluster_name)
        if cluster is None:
            raise ClusterNotFoundError(cluster_name)
        return cluster.schema_registry
