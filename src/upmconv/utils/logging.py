"""Logging setup for the command-line entry point."""

from __future__ import annotations

import logging
import sys

DEFAULT_FORMAT = "%(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "WARNING", format_string: str | None = None) -> None:
    """Send log records to stderr so stdout stays free for results.

    Args:
        level: Logging level name, case-insensitive.
        format_string: Custom format; defaults to ``DEFAULT_FORMAT``.
    """
    numeric_level = getattr(logging, level.upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f"Invalid log level: {level}")

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(format_string or DEFAULT_FORMAT))
    logging.basicConfig(level=numeric_level, handlers=[handler], force=True)
