"""Data models for nlcal."""

from __future__ import annotations

from nlcal.models.event import (
    EventWarning,
    Frequency,
    RecurrenceRule,
    ResolvedEvent,
    Weekday,
)
from nlcal.models.request import CandidateEvent, SchedulingRequest
from nlcal.models.stage import RetryStrategy, Stage

__all__ = [
    "CandidateEvent",
    "EventWarning",
    "Frequency",
    "RecurrenceRule",
    "ResolvedEvent",
    "RetryStrategy",
    "SchedulingRequest",
    "Stage",
    "Weekday",
]
