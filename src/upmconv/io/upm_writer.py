from __future__ import annotations

import io
import logging
import zipfile
from typing import BinaryIO, Dict, Iterable, Set

from upmconv.errors import ArchiveWriteError, WriteConflictError
from upmconv.ingest.unity_package import LogicalEntry

logger = logging.getLogger(__name__)

MANIFEST_NAME = "package.json"
COLLISION_POLICIES = ("overwrite", "error")


class PackageBuilder:
    """Zip writer that places every appended file under one root directory."""

    def __init__(self, stream: BinaryIO, root_name: str) -> None:
        if not root_name or "/" in root_name or "\\" in root_name or root_name in (".", ".."):
            raise ValueError(f"Invalid package root directory name: {root_name!r}")
        self.root_name = root_name
        self._names: Set[str] = set()
        self._zip = zipfile.ZipFile(stream, "w", compression=zipfile.ZIP_DEFLATED)

    def _write(self, arcname: str, data: bytes) -> None:
        if arcname in self._names:
            raise WriteConflictError(arcname)
        try:
            self._zip.writestr(arcname, data)
        except (OSError, ValueError, zipfile.BadZipFile) as exc:
            raise ArchiveWriteError(f"Failed to write {arcname!r}: {exc}") from exc
        self._names.add(arcname)

    def append_manifest(self, manifest: bytes) -> None:
        self._write(MANIFEST_NAME, manifest)

    def append(self, path: str, data: bytes) -> None:
        self._write(f"{self.root_name}/{path}", data)

    def finish(self) -> None:
        try:
            self._zip.close()
        except (OSError, ValueError, zipfile.BadZipFile) as exc:
            raise ArchiveWriteError(f"Failed to finish zip archive: {exc}") from exc


def _dedupe(entries: Iterable[LogicalEntry], collision_policy: str) -> Dict[str, LogicalEntry]:
    by_path: Dict[str, LogicalEntry] = {}
    for entry in entries:
        previous = by_path.get(entry.path)
        if previous is not None:
            if collision_policy == "error":
                raise WriteConflictError(entry.path)
            logger.warning(
                "%s overwrites %s at %r", entry.identifier, previous.identifier, entry.path
            )
        by_path[entry.path] = entry
    return by_path


def write_upm_package(
    entries: Iterable[LogicalEntry],
    root_name: str,
    manifest: bytes,
    *,
    collision_policy: str = "overwrite",
) -> bytes:
    """Serialize entries and the manifest blob into a zip archive.

    With the ``overwrite`` policy the later of two entries sharing a path wins;
    with ``error`` the collision raises WriteConflictError.
    """
    if collision_policy not in COLLISION_POLICIES:
        raise ValueError(f"Unknown collision policy: {collision_policy!r}")

    by_path = _dedupe(entries, collision_policy)
    buffer = io.BytesIO()
    builder = PackageBuilder(buffer, root_name)
    builder.append_manifest(manifest)
    for path, entry in by_path.items():
        builder.append(path, entry.payload)
    builder.finish()
    logger.info("Wrote %d entries under %s/", len(by_path), root_name)
    return buffer.getvalue()
