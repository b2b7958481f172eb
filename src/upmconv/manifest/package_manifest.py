from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from upmconv.errors import ManifestReadError


@dataclass(frozen=True)
class PackageManifest:
    """A package.json blob plus the fields needed to name the package root."""

    raw: bytes
    name: str
    version: Optional[str] = None


def parse_manifest(raw: bytes, source: str = "package.json") -> PackageManifest:
    if not raw.strip():
        raise ManifestReadError(f"Manifest {source} is empty")
    try:
        document = json.loads(raw.decode("utf-8-sig"))
    except UnicodeDecodeError as exc:
        raise ManifestReadError(f"Manifest {source} is not valid UTF-8: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ManifestReadError(
            f"Manifest {source} is not valid JSON (line {exc.lineno}, column {exc.colno}): {exc.msg}"
        ) from exc
    if not isinstance(document, dict):
        raise ManifestReadError(f"Manifest {source} must be a JSON object")

    name = document.get("name")
    if not isinstance(name, str) or not name.strip():
        raise ManifestReadError(f"Manifest {source} must define a non-empty name")
    version = document.get("version")
    if not isinstance(version, str) or not version.strip():
        version = None
    return PackageManifest(raw=raw, name=name.strip(), version=version.strip() if version else None)


def load_manifest(path: str | Path) -> PackageManifest:
    path = Path(path)
    try:
        raw = path.read_bytes()
    except OSError as exc:
        raise ManifestReadError(f"Failed to read manifest {path}: {exc}") from exc
    return parse_manifest(raw, str(path))


def root_dir_name(manifest: PackageManifest, fmt: str = "{name}") -> str:
    if "{version}" in fmt and manifest.version is None:
        raise ManifestReadError("Manifest must define a version to build the package directory name")
    try:
        root_name = fmt.format(name=manifest.name, version=manifest.version or "")
    except (KeyError, IndexError, ValueError) as exc:
        raise ManifestReadError(f"Invalid package directory format {fmt!r}: {exc}") from exc
    if not root_name or "/" in root_name or "\\" in root_name or root_name in (".", ".."):
        raise ManifestReadError(f"Package name {root_name!r} cannot be used as a directory name")
    return root_name
