"""プロキシ設定ファイル（ベース + 環境別オーバーレイ）の読み込み"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .config import ProxyConfig
from .exceptions import ConfigError, ConfigErrorCodes


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """辞書を再帰的にマージした新しい辞書を返す。override 側のスカラー・リストが優先。"""
    merged: dict[str, Any] = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def merge_clusters(
    base: list[dict[str, Any]],
    overlay: list[dict[str, Any]],
) -> list[dict[str, Any]]:
    """クラスタ定義を name 単位でマージする。

    同名のクラスタはフィールド単位で上書きし、新しい名前は末尾に追加する。
    オーバーレイに現れないクラスタはそのまま残る。
    """
    merged = [dict(c) for c in base]
    index = {c.get("name"): i for i, c in enumerate(merged) if c.get("name")}
    for cluster in overlay:
        position = index.get(cluster.get("name"))
        if position is None:
            index[cluster.get("name")] = len(merged)
            merged.append(dict(cluster))
        else:
            merged[position] = deep_merge(merged[position], cluster)
    return merged


def _is_mapping_list(value: Any) -> bool:
    return isinstance(value, list) and all(isinstance(v, dict) for v in value)


def apply_overlay(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    """環境別オーバーレイをベース設定に適用する。clusters のみ name でマージする。"""
    overlay = dict(overlay)
    clusters = overlay.pop("clusters", None)
    merged = deep_merge(base, overlay)
    if clusters is not None:
        base_clusters = merged.get("clusters") or []
        if not _is_mapping_list(clusters) or not _is_mapping_list(base_clusters):
            raise ConfigError(
                code=ConfigErrorCodes.VALIDATION,
                message="clusters must be a list of mappings in both base and overlay",
            )
        merged["clusters"] = merge_clusters(base_clusters, clusters)
    return merged


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(
            code=ConfigErrorCodes.READ_FILE,
            message=f"Failed to read config file: {path}",
            cause=e,
        ) from e
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigError(
            code=ConfigErrorCodes.PARSE_YAML,
            message=f"Failed to parse YAML: {path}",
            cause=e,
        ) from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(
            code=ConfigErrorCodes.PARSE_YAML,
            message=f"Top level of {path} must be a mapping",
        )
    return data


def load(base_path: Path, env_path: Path | None = None) -> ProxyConfig:
    """設定ファイルを読み込んで ProxyConfig を返す。

    base_path: ベース設定ファイルパス（必須）
    env_path: 環境別オーバーレイ（オプション）。存在する場合のみ適用する。

    Raises:
        ConfigError: 読み込み・YAML 解析・検証（不正な URL やクラスタ名重複を含む）に失敗した場合
    """
    data = _read_yaml(base_path)
    if env_path is not None and env_path.exists():
        data = apply_overlay(data, _read_yaml(env_path))
    try:
        return ProxyConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(
            code=ConfigErrorCodes.VALIDATION,
            message=f"Config validation failed: {e}",
            cause=e,
        ) from e
