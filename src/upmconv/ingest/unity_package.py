from __future__ import annotations

import gzip
import io
import logging
import tarfile
import zlib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from upmconv.errors import (
    ArchiveParseError,
    DecompressionError,
    MalformedEntryError,
    MalformedEntryWarning,
)

logger = logging.getLogger(__name__)

ASSETS_PREFIX = "Assets/"
IGNORED_PARTS = {"preview.png"}


def split_relative_path(path: str) -> Tuple[str, ...]:
    """Split a slash separated path, rejecting anything that could escape the package root."""
    clean = path.replace("\\", "/")
    if not clean or clean.startswith("/"):
        raise ValueError(f"Unsafe relative path: {path!r}")
    parts = tuple(clean.split("/"))
    if any(part in ("", ".", "..") for part in parts):
        raise ValueError(f"Unsafe relative path: {path!r}")
    if parts[0].endswith(":"):
        raise ValueError(f"Unsafe relative path: {path!r}")
    return parts


@dataclass(frozen=True)
class LogicalEntry:
    identifier: str
    relative_path: Tuple[str, ...]
    payload: bytes

    def __post_init__(self) -> None:
        if not self.relative_path:
            raise ValueError(f"Entry {self.identifier} has an empty relative path")
        split_relative_path("/".join(self.relative_path))

    @property
    def path(self) -> str:
        return "/".join(self.relative_path)


@dataclass
class ReadResult:
    entries: Tuple[LogicalEntry, ...]
    warnings: List[MalformedEntryWarning] = field(default_factory=list)


@dataclass
class _AssetParts:
    asset: Optional[bytes] = None
    asset_meta: Optional[bytes] = None
    pathname: Optional[bytes] = None


def _member_parts(name: str) -> List[str]:
    return [part for part in name.replace("\\", "/").split("/") if part not in ("", ".")]


def _decode_pathname(raw: bytes) -> str:
    # Older exporters append a second line after the path.
    text = raw.decode("utf-8")
    lines = text.splitlines()
    return lines[0].rstrip() if lines else ""


def _decompress(data: bytes) -> bytes:
    try:
        return gzip.decompress(data)
    except (OSError, EOFError, zlib.error) as exc:
        raise DecompressionError(f"Source archive is not valid gzip data: {exc}") from exc


def _build_index(raw: bytes) -> Dict[str, _AssetParts]:
    index: Dict[str, _AssetParts] = {}
    try:
        with tarfile.open(fileobj=io.BytesIO(raw), mode="r:") as tar:
            for member in tar:
                if not member.isfile():
                    continue
                parts = _member_parts(member.name)
                if len(parts) != 2:
                    if len(parts) > 2:
                        logger.debug("Skipping unexpected member %r", member.name)
                    continue
                identifier, part = parts
                if part in IGNORED_PARTS:
                    continue
                if part not in ("asset", "asset.meta", "pathname"):
                    logger.debug("Skipping unrecognized asset component %r in %s", part, identifier)
                    continue

                extracted = tar.extractfile(member)
                content = extracted.read() if extracted is not None else b""
                group = index.setdefault(identifier, _AssetParts())
                if part == "asset":
                    group.asset = content
                elif part == "asset.meta":
                    group.asset_meta = content
                else:
                    group.pathname = content
    except tarfile.TarError as exc:
        raise ArchiveParseError(f"Source archive is not a valid tar stream: {exc}") from exc
    return index


def _resolve_path(pathname: str, strip_assets_prefix: bool) -> str:
    if not strip_assets_prefix:
        return pathname
    if pathname.startswith(ASSETS_PREFIX):
        return pathname[len(ASSETS_PREFIX):]
    logger.warning("Keeping non-asset path %r as is", pathname)
    return pathname


def read_unity_package(
    data: bytes,
    *,
    strict: bool = False,
    include_meta: bool = False,
    strip_assets_prefix: bool = True,
) -> ReadResult:
    """Resolve a .unitypackage byte stream into logical entries.

    Members are grouped by GUID directory before anything is resolved, so the
    member order inside the tar does not matter. Groups without a usable
    pathname or asset are reported as warnings (or raised when ``strict``).
    """
    index = _build_index(_decompress(data))

    entries: List[LogicalEntry] = []
    warnings: List[MalformedEntryWarning] = []

    def _skip(identifier: str, reason: str, pathname: Optional[str] = None) -> None:
        warning = MalformedEntryWarning(identifier=identifier, reason=reason, pathname=pathname)
        if strict:
            raise MalformedEntryError(warning)
        logger.debug("Skipping %s", warning)
        warnings.append(warning)

    for identifier, group in index.items():
        if group.pathname is None:
            _skip(identifier, "missing pathname")
            continue

        try:
            pathname = _decode_pathname(group.pathname)
        except UnicodeDecodeError:
            _skip(identifier, "undecodable pathname")
            continue
        resolved = _resolve_path(pathname, strip_assets_prefix)
        try:
            relative_path = split_relative_path(resolved)
        except ValueError:
            _skip(identifier, "unsafe pathname", pathname)
            continue

        if include_meta and group.asset_meta is not None:
            meta_path = relative_path[:-1] + (relative_path[-1] + ".meta",)
            if group.asset is not None:
                entries.append(LogicalEntry(identifier, relative_path, group.asset))
            entries.append(LogicalEntry(identifier, meta_path, group.asset_meta))
            if group.asset is None:
                _skip(identifier, "missing asset", pathname)
            continue

        if group.asset is None:
            _skip(identifier, "missing asset", pathname)
            continue
        entries.append(LogicalEntry(identifier, relative_path, group.asset))

    logger.info("Resolved %d entries from %d asset groups", len(entries), len(index))
    return ReadResult(entries=tuple(entries), warnings=warnings)


def load_unity_package(path: str | Path, **kwargs) -> ReadResult:
    with open(path, "rb") as f:
        data = f.read()
    return read_unity_package(data, **kwargs)
