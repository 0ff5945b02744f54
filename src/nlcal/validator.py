"""Structural and semantic checks on a candidate event.

Hard failures raise an :class:`~nlcal.exceptions.EventValidationError`
subclass.  Soft anomalies are attached to the returned
:class:`~nlcal.models.event.ResolvedEvent` as
:class:`~nlcal.models.event.EventWarning` entries and never block the
scheduling action.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime, timedelta

from nlcal.exceptions import EmptySummary, NonPositiveDuration, UnknownTimeZone
from nlcal.models.event import EventWarning, RecurrenceRule, ResolvedEvent
from nlcal.models.request import CandidateEvent
from nlcal.zones import is_known_zone

logger = logging.getLogger(__name__)

DEFAULT_MAX_DURATION = timedelta(hours=24)

EXCESSIVE_DURATION = "EXCESSIVE_DURATION"
RECURRENCE_ENDS_BEFORE_START = "RECURRENCE_ENDS_BEFORE_START"


def validate(
    candidate: CandidateEvent,
    resolved_start: datetime,
    resolved_end: datetime,
    rules: Sequence[RecurrenceRule],
    *,
    time_zone: str | None = None,
    max_duration: timedelta = DEFAULT_MAX_DURATION,
) -> ResolvedEvent:
    """Validate a candidate against its resolved instants and rules.

    Args:
        candidate: The front-end proposal supplying summary, description
            and zone.
        resolved_start: Aware start instant from the time resolver.
        resolved_end: Aware end instant from the time resolver.
        rules: Normalised recurrence rules.
        time_zone: Effective zone to validate, overriding
            ``candidate.time_zone`` (the pipeline passes the request default
            when the candidate names none).
        max_duration: Non-recurring events longer than this are flagged
            with an ``EXCESSIVE_DURATION`` warning.

    Returns:
        The validated :class:`ResolvedEvent`.

    Raises:
        EmptySummary: If the summary is blank after trimming.
        NonPositiveDuration: If ``resolved_end`` is not after ``resolved_start``.
        UnknownTimeZone: If the zone is not a recognised IANA identifier.
    """
    zone = candidate.time_zone if time_zone is None else time_zone
    return _build(
        summary=candidate.summary,
        description=candidate.description,
        start=resolved_start,
        end=resolved_end,
        zone=zone,
        rules=tuple(rules),
        max_duration=max_duration,
    )


def revalidate(
    event: ResolvedEvent,
    *,
    max_duration: timedelta = DEFAULT_MAX_DURATION,
) -> ResolvedEvent:
    """Run the validator over an already-resolved event.

    Validation holds no state, so the result equals *event* whenever the
    same *max_duration* is used.
    """
    return _build(
        summary=event.summary,
        description=event.description,
        start=event.start_instant,
        end=event.end_instant,
        zone=event.time_zone,
        rules=event.recurrence_rules,
        max_duration=max_duration,
    )


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _build(
    summary: str,
    description: str | None,
    start: datetime,
    end: datetime,
    zone: str,
    rules: tuple[RecurrenceRule, ...],
    max_duration: timedelta,
) -> ResolvedEvent:
    title = (summary or "").strip()
    if not title:
        raise EmptySummary()

    if end <= start:
        raise NonPositiveDuration(
            f"End ({end.isoformat()}) must be strictly after start ({start.isoformat()})"
        )

    if not is_known_zone(zone):
        raise UnknownTimeZone(zone)

    warnings = _collect_warnings(start, end, rules, max_duration)
    for warning in warnings:
        logger.warning("Event '%s': %s", title, warning.message)

    return ResolvedEvent(
        summary=title,
        description=(description or "").strip() or None,
        start_instant=start,
        end_instant=end,
        time_zone=zone,
        recurrence_rules=rules,
        warnings=warnings,
    )


def _collect_warnings(
    start: datetime,
    end: datetime,
    rules: tuple[RecurrenceRule, ...],
    max_duration: timedelta,
) -> tuple[EventWarning, ...]:
    warnings: list[EventWarning] = []

    duration = end - start
    if not rules and duration > max_duration:
        warnings.append(
            EventWarning(
                code=EXCESSIVE_DURATION,
                message=(
                    f"Event lasts {_format_duration(duration)}, longer than the "
                    f"{_format_duration(max_duration)} maximum"
                ),
            )
        )

    for rule in rules:
        if rule.until is not None and rule.until < start:
            warnings.append(
                EventWarning(
                    code=RECURRENCE_ENDS_BEFORE_START,
                    message=(
                        f"{rule.to_rrule()} ends at {rule.until.isoformat()}, "
                        "before the first occurrence"
                    ),
                )
            )

    return tuple(warnings)


def _format_duration(delta: timedelta) -> str:
    hours = delta.total_seconds() / 3600
    return f"{hours:g}h"
