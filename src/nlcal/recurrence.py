"""Validate and canonicalise RFC 5545 recurrence expressions.

Accepted grammar (key order irrelevant, each key at most once)::

    [RRULE:]FREQ=<DAILY|WEEKLY|MONTHLY|YEARLY>
            [;BYDAY=<MO,TU,...>]
            [;BYMONTHDAY=<int>]          (MONTHLY only)
            [;COUNT=<int> | ;UNTIL=<timestamp>]

Keys and values are case-insensitive.  ``UNTIL`` may be ``YYYYMMDD``,
``YYYYMMDDTHHMMSS`` (floating, read in the event zone) or
``YYYYMMDDTHHMMSSZ``.  A date-only ``UNTIL`` covers the whole of that day.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from datetime import datetime, time, timezone

from pydantic import ValidationError

from nlcal.exceptions import InvalidRecurrenceRule
from nlcal.models.event import Frequency, RecurrenceRule, Weekday
from nlcal.zones import load_zone

logger = logging.getLogger(__name__)

_PREFIX = "RRULE:"
_KNOWN_KEYS = frozenset({"FREQ", "BYDAY", "BYMONTHDAY", "COUNT", "UNTIL"})

_INT_RE = re.compile(r"^[+-]?\d+$", re.ASCII)
_UNTIL_RE = re.compile(
    r"^(?P<date>\d{8})(?:T(?P<time>\d{6})(?P<utc>Z)?)?$",
    re.ASCII,
)


def normalize(exprs: Sequence[str], zone: str = "UTC") -> tuple[RecurrenceRule, ...]:
    """Normalise a sequence of recurrence expressions.

    Args:
        exprs: RRULE expressions, with or without the ``RRULE:`` prefix.
        zone: IANA zone used to read floating and date-only ``UNTIL``
            values.  Defaults to ``"UTC"``.

    Returns:
        One :class:`RecurrenceRule` per expression, in input order.

    Raises:
        InvalidRecurrenceRule: On the first expression that violates the
            grammar or the rule invariants.
    """
    rules = tuple(normalize_one(expr, zone=zone) for expr in exprs)
    logger.debug("Normalised %d recurrence rule(s)", len(rules))
    return rules


def normalize_one(expr: str, zone: str = "UTC") -> RecurrenceRule:
    """Normalise a single recurrence expression.  See :func:`normalize`."""
    if not isinstance(expr, str) or not expr.strip():
        raise InvalidRecurrenceRule("Recurrence expression is empty", expression=str(expr or ""))

    text = expr.strip()
    body = text[len(_PREFIX):] if text.upper().startswith(_PREFIX) else text
    fields = _split_fields(body, text)

    if "FREQ" not in fields:
        raise InvalidRecurrenceRule(f"FREQ is required in {text!r}", expression=text)

    try:
        frequency = Frequency(fields["FREQ"])
    except ValueError:
        raise InvalidRecurrenceRule(
            f"Unsupported FREQ {fields['FREQ']!r} in {text!r}", expression=text
        ) from None

    if "COUNT" in fields and "UNTIL" in fields:
        raise InvalidRecurrenceRule(
            f"COUNT and UNTIL are mutually exclusive in {text!r}", expression=text
        )
    if "BYMONTHDAY" in fields and frequency is not Frequency.MONTHLY:
        raise InvalidRecurrenceRule(
            f"BYMONTHDAY is only allowed with FREQ=MONTHLY in {text!r}", expression=text
        )

    by_day = _parse_by_day(fields["BYDAY"], text) if "BYDAY" in fields else frozenset()

    by_month_day = None
    if "BYMONTHDAY" in fields:
        by_month_day = _parse_int(fields["BYMONTHDAY"], "BYMONTHDAY", text)
        if by_month_day == 0 or abs(by_month_day) > 31:
            raise InvalidRecurrenceRule(
                f"BYMONTHDAY must be within 1..31 or -31..-1 in {text!r}", expression=text
            )

    count = None
    if "COUNT" in fields:
        count = _parse_int(fields["COUNT"], "COUNT", text)
        if count <= 0:
            raise InvalidRecurrenceRule(f"COUNT must be positive in {text!r}", expression=text)

    until = _parse_until(fields["UNTIL"], zone, text) if "UNTIL" in fields else None

    try:
        return RecurrenceRule(
            frequency=frequency,
            by_day=by_day,
            by_month_day=by_month_day,
            count=count,
            until=until,
        )
    except ValidationError as exc:
        raise InvalidRecurrenceRule(f"Invalid rule {text!r}: {exc}", expression=text) from exc


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _split_fields(body: str, text: str) -> dict[str, str]:
    fields: dict[str, str] = {}
    for segment in body.split(";"):
        segment = segment.strip()
        if not segment:
            raise InvalidRecurrenceRule(f"Empty segment in {text!r}", expression=text)
        key, sep, value = segment.partition("=")
        key, value = key.strip().upper(), value.strip().upper()
        if not sep or not key or not value:
            raise InvalidRecurrenceRule(
                f"Segment {segment!r} is not KEY=VALUE in {text!r}", expression=text
            )
        if key not in _KNOWN_KEYS:
            raise InvalidRecurrenceRule(f"Unsupported key {key!r} in {text!r}", expression=text)
        if key in fields:
            raise InvalidRecurrenceRule(f"Duplicate key {key!r} in {text!r}", expression=text)
        fields[key] = value
    return fields


def _parse_int(value: str, key: str, text: str) -> int:
    if not _INT_RE.match(value):
        raise InvalidRecurrenceRule(f"{key} must be an integer in {text!r}", expression=text)
    return int(value)


def _parse_by_day(value: str, text: str) -> frozenset[Weekday]:
    days: list[Weekday] = []
    for item in value.split(","):
        item = item.strip()
        try:
            day = Weekday(item)
        except ValueError:
            raise InvalidRecurrenceRule(
                f"Invalid BYDAY entry {item!r} in {text!r}", expression=text
            ) from None
        if day in days:
            raise InvalidRecurrenceRule(f"Duplicate BYDAY entry {item!r} in {text!r}", expression=text)
        days.append(day)
    return frozenset(days)


def _parse_until(value: str, zone: str, text: str) -> datetime:
    match = _UNTIL_RE.match(value)
    if match is None:
        raise InvalidRecurrenceRule(f"Invalid UNTIL {value!r} in {text!r}", expression=text)

    try:
        day = datetime.strptime(match.group("date"), "%Y%m%d").date()
        wall = (
            datetime.strptime(match.group("time"), "%H%M%S").time()
            if match.group("time")
            else None
        )
    except ValueError as exc:
        raise InvalidRecurrenceRule(f"Invalid UNTIL {value!r} in {text!r}: {exc}", expression=text) from exc

    if match.group("utc"):
        return datetime.combine(day, wall, tzinfo=timezone.utc)

    tz = load_zone(zone)
    if tz is None:
        raise InvalidRecurrenceRule(
            f"Cannot read floating UNTIL {value!r}: unknown time zone {zone!r}",
            expression=text,
        )
    if wall is None:
        # Inclusive end of the named day.
        wall = time.max.replace(microsecond=0)
    try:
        return datetime.combine(day, wall, tzinfo=tz).astimezone(timezone.utc)
    except OverflowError as exc:
        raise InvalidRecurrenceRule(
            f"UNTIL {value!r} in {text!r} is outside the supported date range",
            expression=text,
        ) from exc
