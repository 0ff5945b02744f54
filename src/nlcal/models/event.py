"""Output value models of the compiler.

- :class:`RecurrenceRule` -- one canonicalised RRULE.
- :class:`EventWarning` -- a soft anomaly that does not block scheduling.
- :class:`ResolvedEvent` -- the validated event descriptor handed to the
  calendar submission service.

All models are frozen; instants are stored as UTC-aware ``datetime`` values
and rendered in the event's zone on demand.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from nlcal.zones import is_known_zone, load_zone


class Frequency(str, Enum):
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"
    YEARLY = "YEARLY"


class Weekday(str, Enum):
    """RFC 5545 two-letter weekday codes, Monday first."""

    MO = "MO"
    TU = "TU"
    WE = "WE"
    TH = "TH"
    FR = "FR"
    SA = "SA"
    SU = "SU"


_WEEKDAY_ORDER = {day: idx for idx, day in enumerate(Weekday)}


def _to_utc(value: datetime) -> datetime:
    if value.tzinfo is None or value.utcoffset() is None:
        raise ValueError("datetime must be timezone-aware")
    return value.astimezone(timezone.utc)


class RecurrenceRule(BaseModel):
    """A validated recurrence rule.

    Invariants: at most one of ``count`` and ``until`` is set, and
    ``by_month_day`` is only set for monthly rules.

    Attributes:
        frequency: Base repetition frequency.
        by_day: Weekdays the event repeats on (may be empty).
        by_month_day: Day of month (``1..31`` or ``-31..-1``), monthly only.
        count: Total number of occurrences.
        until: Last allowed occurrence instant (UTC).
    """

    model_config = ConfigDict(frozen=True)

    frequency: Frequency
    by_day: frozenset[Weekday] = frozenset()
    by_month_day: int | None = None
    count: int | None = Field(default=None, gt=0)
    until: datetime | None = None

    @field_validator("until")
    @classmethod
    def _until_is_utc(cls, value: datetime | None) -> datetime | None:
        return None if value is None else _to_utc(value)

    @field_validator("by_month_day")
    @classmethod
    def _month_day_in_range(cls, value: int | None) -> int | None:
        if value is not None and not (1 <= abs(value) <= 31):
            raise ValueError("by_month_day must be within 1..31 or -31..-1")
        return value

    @model_validator(mode="after")
    def _check_invariants(self) -> RecurrenceRule:
        if self.count is not None and self.until is not None:
            raise ValueError("count and until are mutually exclusive")
        if self.by_month_day is not None and self.frequency is not Frequency.MONTHLY:
            raise ValueError("by_month_day is only valid for MONTHLY rules")
        return self

    @property
    def sorted_days(self) -> list[Weekday]:
        """``by_day`` in Monday-first order."""
        return sorted(self.by_day, key=_WEEKDAY_ORDER.__getitem__)

    def to_rrule(self) -> str:
        """Render the canonical ``RRULE:`` string for this rule."""
        parts = [f"FREQ={self.frequency.value}"]
        if self.by_day:
            parts.append("BYDAY=" + ",".join(day.value for day in self.sorted_days))
        if self.by_month_day is not None:
            parts.append(f"BYMONTHDAY={self.by_month_day}")
        if self.count is not None:
            parts.append(f"COUNT={self.count}")
        if self.until is not None:
            parts.append(f"UNTIL={self.until.strftime('%Y%m%dT%H%M%SZ')}")
        return "RRULE:" + ";".join(parts)


class EventWarning(BaseModel):
    """A soft anomaly attached to a successfully resolved event.

    Attributes:
        code: Stable identifier, e.g. ``"EXCESSIVE_DURATION"``.
        message: Human-readable explanation for the user.
    """

    model_config = ConfigDict(frozen=True)

    code: str
    message: str


class ResolvedEvent(BaseModel):
    """A validated, normalised calendar event descriptor.

    This is the exact input contract of the calendar submission service.

    Attributes:
        summary: Trimmed, non-empty title.
        description: Trimmed description, or ``None``.
        start_instant: Event start (UTC).
        end_instant: Event end (UTC), strictly after ``start_instant``.
        time_zone: IANA zone the event is displayed in.
        recurrence_rules: Normalised rules in source order.
        warnings: Soft anomalies the caller should surface.
    """

    model_config = ConfigDict(frozen=True)

    summary: str
    description: str | None = None
    start_instant: datetime
    end_instant: datetime
    time_zone: str
    recurrence_rules: tuple[RecurrenceRule, ...] = ()
    warnings: tuple[EventWarning, ...] = ()

    @field_validator("start_instant", "end_instant")
    @classmethod
    def _instants_are_utc(cls, value: datetime) -> datetime:
        return _to_utc(value)

    @model_validator(mode="after")
    def _check_invariants(self) -> ResolvedEvent:
        if self.start_instant >= self.end_instant:
            raise ValueError("start_instant must be before end_instant")
        if not is_known_zone(self.time_zone):
            raise ValueError(f"unknown time zone {self.time_zone!r}")
        return self

    @property
    def duration(self) -> timedelta:
        return self.end_instant - self.start_instant

    @property
    def is_recurring(self) -> bool:
        return bool(self.recurrence_rules)

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)

    @property
    def local_start(self) -> datetime:
        """``start_instant`` expressed in the event's zone."""
        return self.start_instant.astimezone(load_zone(self.time_zone))

    @property
    def local_end(self) -> datetime:
        """``end_instant`` expressed in the event's zone."""
        return self.end_instant.astimezone(load_zone(self.time_zone))
