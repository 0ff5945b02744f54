"""Map resolved events to the calendar submission payload.

Converts a :class:`~nlcal.models.event.ResolvedEvent` into the ``dict`` a
calendar submission service accepts:

- **summary** and **description** (empty string when absent).
- **start / end** as local ISO 8601 date-times with the event's IANA zone.
- **recurrence** as canonical ``RRULE:`` strings, only for recurring events.
"""

from __future__ import annotations

import logging
from datetime import datetime

from nlcal.models.event import ResolvedEvent

logger = logging.getLogger(__name__)


def map_to_calendar_body(event: ResolvedEvent) -> dict:
    """Convert a resolved event into a calendar event body.

    Args:
        event: A validated :class:`ResolvedEvent`.

    Returns:
        A JSON-serialisable ``dict`` with ``summary``, ``description``,
        ``start``, ``end`` and, for recurring events, ``recurrence``.
    """
    body: dict = {
        "summary": event.summary,
        "description": event.description or "",
        "start": _format_datetime(event.local_start, event.time_zone),
        "end": _format_datetime(event.local_end, event.time_zone),
    }

    if event.recurrence_rules:
        body["recurrence"] = [rule.to_rrule() for rule in event.recurrence_rules]

    logger.debug(
        "Mapped event '%s' (%s -> %s) to calendar body",
        event.summary,
        body["start"]["dateTime"],
        body["end"]["dateTime"],
    )
    return body


def _format_datetime(dt: datetime, timezone: str) -> dict:
    return {
        "dateTime": dt.isoformat(),
        "timeZone": timezone,
    }
