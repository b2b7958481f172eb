from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from upmconv.errors import ArchiveWriteError, MalformedEntryWarning, SourceReadError
from upmconv.ingest.unity_package import read_unity_package
from upmconv.io.upm_writer import write_upm_package
from upmconv.manifest.package_manifest import PackageManifest, load_manifest, root_dir_name
from upmconv.utils.config import ConvertConfig

logger = logging.getLogger(__name__)


@dataclass
class ConversionResult:
    archive: bytes
    root_name: str
    entries_written: int
    warnings: List[MalformedEntryWarning] = field(default_factory=list)


def convert_package(
    package: bytes,
    manifest: PackageManifest,
    config: Optional[ConvertConfig] = None,
) -> ConversionResult:
    config = config or ConvertConfig()
    root_name = root_dir_name(manifest, config.root_dir_format)

    result = read_unity_package(
        package,
        strict=config.strict,
        include_meta=config.include_meta,
        strip_assets_prefix=config.strip_assets_prefix,
    )
    archive = write_upm_package(
        result.entries,
        root_name,
        manifest.raw,
        collision_policy=config.collision_policy,
    )
    written = len({entry.path for entry in result.entries})
    return ConversionResult(archive=archive, root_name=root_name, entries_written=written, warnings=result.warnings)


def write_atomic(path: Path, data: bytes) -> None:
    """Write to a sibling temp file and move it into place, leaving nothing behind on failure."""
    tmp_path = path.with_name(path.name + ".tmp")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path.write_bytes(data)
        os.replace(tmp_path, path)
    except OSError as exc:
        tmp_path.unlink(missing_ok=True)
        raise ArchiveWriteError(f"Failed to write {path}: {exc}") from exc


def convert_files(
    package_path: str | Path,
    manifest_path: str | Path,
    output_path: str | Path,
    config: Optional[ConvertConfig] = None,
) -> ConversionResult:
    # Manifest errors surface before the source is read.
    config = config or ConvertConfig()
    manifest = load_manifest(manifest_path)
    root_dir_name(manifest, config.root_dir_format)

    package_path = Path(package_path)
    logger.info("Converting %s", package_path)
    try:
        package = package_path.read_bytes()
    except OSError as exc:
        raise SourceReadError(f"Failed to open Unity package {package_path}: {exc}") from exc

    result = convert_package(package, manifest, config)
    write_atomic(Path(output_path), result.archive)
    return result
