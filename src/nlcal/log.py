"""Structured logging setup for nlcal.

One stderr handler with ISO 8601 timestamps and pipe-separated fields::

    2026-03-02T14:00:00 | WARNING  | nlcal.pipeline | Compile failed at ...
"""

from __future__ import annotations

import logging
import sys
from typing import TextIO

_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"

# Marks the handler installed here so repeated calls reuse it and leave
# externally added handlers alone.
_HANDLER_ATTR = "_nlcal_log_handler"


def setup_logging(level: str = "INFO", stream: TextIO | None = None) -> None:
    """Configure the root logger with the nlcal formatter.

    Safe to call repeatedly: the existing nlcal handler has its level
    updated instead of a second handler being added.

    Args:
        level: A standard logging level name (e.g. ``"DEBUG"``).
        stream: Destination for log records.  Defaults to ``sys.stderr``
            as it is at call time.

    Raises:
        ValueError: If *level* is not a recognised logging level name.
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Invalid log level: {level!r}")

    root = logging.getLogger()
    root.setLevel(numeric_level)

    existing = next(
        (h for h in root.handlers if getattr(h, _HANDLER_ATTR, False)), None
    )
    if existing is not None:
        existing.setLevel(numeric_level)
        if stream is not None and isinstance(existing, logging.StreamHandler):
            existing.setStream(stream)
        return

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(numeric_level)
    handler.setFormatter(logging.Formatter(_LOG_FORMAT, datefmt=_DATE_FORMAT))
    setattr(handler, _HANDLER_ATTR, True)
    root.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    """Return the named logger (typically ``__name__`` of the caller)."""
    return logging.getLogger(name)
