"""Resolve front-end date-time expressions into absolute instants.

Relative phrases ("tomorrow", "next Friday") are the NL front-end's job;
by the time an expression reaches :func:`resolve` it must already be an
ISO 8601 date-time.  This module only validates such strings and converts
them to UTC-aware ``datetime`` values, refusing to guess:

- a date without a time fails (no silent 09:00 default);
- a local wall time that falls in a DST gap or fold fails;
- an offset outside +-14:00 fails.

A bare time of day (``"14:30"``) is accepted and anchored to the reference
instant's local date in the target zone.
"""

from __future__ import annotations

import logging
import re
from datetime import date, datetime, time, timedelta, timezone, tzinfo

from nlcal.exceptions import InvalidTimeExpression
from nlcal.zones import load_zone

logger = logging.getLogger(__name__)

_DATE_ONLY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$", re.ASCII)

_TIME_PART = r"(?P<time>\d{2}:\d{2}(?::\d{2}(?:\.\d{1,6})?)?)"
_OFFSET_PART = r"(?P<offset>Z|z|[+-]\d{2}:?\d{2})?"

_DATETIME_RE = re.compile(
    r"^(?P<date>\d{4}-\d{2}-\d{2})[Tt ]" + _TIME_PART + _OFFSET_PART + r"$",
    re.ASCII,
)
_TIME_ONLY_RE = re.compile(r"^" + _TIME_PART + _OFFSET_PART + r"$", re.ASCII)

_MAX_OFFSET = timedelta(hours=14)


def resolve(expr: str, reference: datetime, zone: str) -> datetime:
    """Resolve *expr* to an absolute UTC instant.

    Args:
        expr: ISO 8601 date-time (``YYYY-MM-DDTHH:MM[:SS[.ffffff]]`` with an
            optional ``Z``/``+HH:MM`` offset) or a bare ``HH:MM[:SS]``.
        reference: Timezone-aware reference instant.  Only used to supply
            the date for a bare time of day.
        zone: IANA zone in which offset-less wall times are interpreted.

    Returns:
        A timezone-aware ``datetime`` in UTC.

    Raises:
        InvalidTimeExpression: If the expression is empty, date-only,
            malformed, out of range, ambiguous or nonexistent in *zone*, or
            if *zone* is not a recognised zone.
    """
    if not isinstance(expr, str) or not expr.strip():
        raise InvalidTimeExpression("Time expression is empty", expression=str(expr or ""))

    text = expr.strip()
    tz = load_zone(zone)
    if tz is None:
        raise InvalidTimeExpression(
            f"Cannot interpret {text!r}: unknown time zone {zone!r}", expression=text
        )

    if _DATE_ONLY_RE.match(text):
        raise InvalidTimeExpression(
            f"{text!r} has a date but no time; an explicit time is required",
            expression=text,
        )

    match = _DATETIME_RE.match(text)
    if match:
        day = _parse_date(match.group("date"), text)
    else:
        match = _TIME_ONLY_RE.match(text)
        if match is None:
            raise InvalidTimeExpression(
                f"{text!r} is not an ISO 8601 date-time", expression=text
            )
        if reference.tzinfo is None or reference.utcoffset() is None:
            raise InvalidTimeExpression(
                "A timezone-aware reference instant is required to anchor a bare time",
                expression=text,
            )
        day = reference.astimezone(tz).date()
        logger.debug("Anchoring bare time %r to reference date %s", text, day)

    wall = _parse_time(match.group("time"), text)
    offset = match.group("offset")

    if offset:
        aware = datetime.combine(day, wall, tzinfo=_parse_offset(offset, text))
    else:
        aware = _localize(datetime.combine(day, wall), tz, text)
    return _to_utc(aware, tz, text)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _parse_date(value: str, text: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise InvalidTimeExpression(f"Invalid date in {text!r}: {exc}", expression=text) from exc


def _parse_time(value: str, text: str) -> time:
    if "." in value:
        head, fraction = value.split(".", 1)
        value = f"{head}.{fraction.ljust(6, '0')}"
    try:
        return time.fromisoformat(value)
    except ValueError as exc:
        raise InvalidTimeExpression(f"Invalid time in {text!r}: {exc}", expression=text) from exc


def _parse_offset(value: str, text: str) -> tzinfo:
    if value in ("Z", "z"):
        return timezone.utc

    sign = -1 if value[0] == "-" else 1
    digits = value[1:].replace(":", "")
    hours, minutes = int(digits[:2]), int(digits[2:])
    if minutes >= 60:
        raise InvalidTimeExpression(f"Invalid UTC offset in {text!r}", expression=text)

    delta = timedelta(hours=hours, minutes=minutes)
    if delta > _MAX_OFFSET:
        raise InvalidTimeExpression(
            f"UTC offset {value} in {text!r} is out of range", expression=text
        )
    return timezone(sign * delta)


def _localize(naive: datetime, tz: tzinfo, text: str) -> datetime:
    """Attach *tz* to a naive wall time, rejecting DST gaps and folds."""
    early = naive.replace(tzinfo=tz, fold=0)
    late = naive.replace(tzinfo=tz, fold=1)

    if early.utcoffset() == late.utcoffset():
        return early

    # The two folds disagree: either the wall time happens twice or never.
    round_trip = _to_utc(early, tz, text).astimezone(tz).replace(tzinfo=None)
    if round_trip != naive:
        raise InvalidTimeExpression(
            f"{text!r} does not exist in {tz} (skipped by a DST transition)",
            expression=text,
        )
    raise InvalidTimeExpression(
        f"{text!r} is ambiguous in {tz} (repeated by a DST transition); "
        "supply an explicit UTC offset",
        expression=text,
    )


def _to_utc(aware: datetime, tz: tzinfo, text: str) -> datetime:
    """Convert to UTC, failing if the instant is unrepresentable here or in *tz*."""
    try:
        instant = aware.astimezone(timezone.utc)
        instant.astimezone(tz)
    except OverflowError as exc:
        raise InvalidTimeExpression(
            f"{text!r} is outside the supported date range", expression=text
        ) from exc
    return instant
