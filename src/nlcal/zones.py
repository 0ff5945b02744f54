"""IANA time zone lookup helpers."""

from __future__ import annotations

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


def load_zone(name: str) -> ZoneInfo | None:
    """Return the :class:`ZoneInfo` for *name*, or ``None`` if unrecognised.

    Blank names, malformed keys (e.g. absolute paths) and names missing from
    the zone database all count as unrecognised.
    """
    if not isinstance(name, str) or not name.strip() or name != name.strip():
        return None
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError, OSError):
        return None


def is_known_zone(name: str) -> bool:
    """Whether *name* is a recognised IANA time zone identifier."""
    return load_zone(name) is not None
