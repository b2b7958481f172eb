from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


class ConversionError(Exception):
    """Fatal error that aborts a conversion run."""

    stage = "conversion"


class ManifestReadError(ConversionError):
    stage = "manifest"


class SourceReadError(ConversionError):
    stage = "reading"


class DecompressionError(ConversionError):
    stage = "decompression"


class ArchiveParseError(ConversionError):
    stage = "parsing"


class MalformedEntryError(ArchiveParseError):
    """Raised in strict mode instead of recording a MalformedEntryWarning."""

    def __init__(self, warning: "MalformedEntryWarning") -> None:
        super().__init__(str(warning))
        self.warning = warning


class WriteConflictError(ConversionError):
    stage = "writing"

    def __init__(self, path: str) -> None:
        super().__init__(f"Duplicate output path {path!r}")
        self.path = path


class ArchiveWriteError(ConversionError):
    stage = "writing"


@dataclass(frozen=True)
class MalformedEntryWarning:
    identifier: str
    reason: str
    pathname: Optional[str] = None

    def __str__(self) -> str:
        if self.pathname:
            return f"{self.identifier} ({self.pathname}): {self.reason}"
        return f"{self.identifier}: {self.reason}"
