from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict

import yaml

from upmconv.io.upm_writer import COLLISION_POLICIES


def load_yaml(path: str | Path) -> Dict[str, Any]:
    """Load YAML config into a dict."""
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Config {path} must be a mapping at the top level")
    return data


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged: Dict[str, Any] = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


@dataclass
class AppConfig:
    raw: Dict[str, Any]

    @classmethod
    def from_files(cls, *paths: str | Path) -> "AppConfig":
        merged: Dict[str, Any] = {}
        for path in paths:
            merged = deep_merge(merged, load_yaml(path))
        return cls(raw=merged)


def _typed(section: Dict[str, Any], key: str, kind: type, default: Any) -> Any:
    value = section.get(key, default)
    if not isinstance(value, kind):
        raise ValueError(f"convert.{key} must be a {kind.__name__}, got {value!r}")
    return value


@dataclass
class ConvertConfig:
    strict: bool = False
    collision_policy: str = "overwrite"
    root_dir_format: str = "{name}"
    include_meta: bool = False
    strip_assets_prefix: bool = True

    def __post_init__(self) -> None:
        if self.collision_policy not in COLLISION_POLICIES:
            raise ValueError(
                f"collision_policy must be one of {', '.join(COLLISION_POLICIES)}, got {self.collision_policy!r}"
            )

    @classmethod
    def from_app_config(cls, cfg: AppConfig) -> "ConvertConfig":
        section = cfg.raw.get("convert") or {}
        if not isinstance(section, dict):
            raise ValueError("convert config must be a mapping")
        return cls(
            strict=_typed(section, "strict", bool, False),
            collision_policy=_typed(section, "collision_policy", str, "overwrite"),
            root_dir_format=_typed(section, "root_dir_format", str, "{name}"),
            include_meta=_typed(section, "include_meta", bool, False),
            strip_assets_prefix=_typed(section, "strip_assets_prefix", bool, True),
        )
