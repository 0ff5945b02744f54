"""nlcal: natural-language-to-calendar-event compiler.

Validates and normalises the output of a natural-language front-end into
calendar event descriptors, independent of any model or calendar vendor.
"""

from __future__ import annotations

from nlcal.exceptions import (
    CompileError,
    EmptySummary,
    EventValidationError,
    InvalidRecurrenceRule,
    InvalidTimeExpression,
    MalformedResponseError,
    NLParseError,
    NonPositiveDuration,
    StageError,
    SubmissionError,
    UnknownTimeZone,
)
from nlcal.models import (
    CandidateEvent,
    EventWarning,
    Frequency,
    RecurrenceRule,
    ResolvedEvent,
    RetryStrategy,
    SchedulingRequest,
    Stage,
    Weekday,
)
from nlcal.pipeline import CompileResult, compile_event, run_compile

__version__ = "0.1.0"

__all__ = [
    "CandidateEvent",
    "CompileError",
    "CompileResult",
    "EmptySummary",
    "EventValidationError",
    "EventWarning",
    "Frequency",
    "InvalidRecurrenceRule",
    "InvalidTimeExpression",
    "MalformedResponseError",
    "NLParseError",
    "NonPositiveDuration",
    "RecurrenceRule",
    "ResolvedEvent",
    "RetryStrategy",
    "SchedulingRequest",
    "Stage",
    "StageError",
    "SubmissionError",
    "UnknownTimeZone",
    "Weekday",
    "compile_event",
    "run_compile",
]
