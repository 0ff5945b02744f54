"""Exception taxonomy for the nlcal compiler.

Stage errors are raised by the individual compiler components and wrapped
by the pipeline in a :class:`CompileError` that records the originating
stage::

    StageError
    +-- InvalidTimeExpression     (Time Resolver)
    +-- InvalidRecurrenceRule     (Recurrence Normalizer)
    +-- EventValidationError      (Event Descriptor Validator)
        +-- EmptySummary
        +-- NonPositiveDuration
        +-- UnknownTimeZone

Collaborator errors (:class:`MalformedResponseError`, :class:`NLParseError`,
:class:`SubmissionError`) belong to the adapters around the compiler and are
never raised by :func:`~nlcal.pipeline.compile_event` itself.
"""

from __future__ import annotations

from nlcal.models.stage import RetryStrategy, Stage, retry_strategy_for


class StageError(Exception):
    """Base class for failures raised by a single compiler stage."""

    @property
    def code(self) -> str:
        """Stable machine-readable name of the failure (the class name)."""
        return type(self).__name__


class InvalidTimeExpression(StageError):
    """Raised when a date-time expression cannot be resolved to an instant.

    Attributes:
        expression: The offending input text.
    """

    def __init__(self, message: str, expression: str = "") -> None:
        super().__init__(message)
        self.expression = expression


class InvalidRecurrenceRule(StageError):
    """Raised when a recurrence expression does not match the RRULE grammar.

    Attributes:
        expression: The offending input text.
    """

    def __init__(self, message: str, expression: str = "") -> None:
        super().__init__(message)
        self.expression = expression


class EventValidationError(StageError):
    """Base for structural and semantic failures of a candidate event."""


class EmptySummary(EventValidationError):
    """Raised when the event summary is empty after trimming."""

    def __init__(self, message: str = "Event summary must not be empty") -> None:
        super().__init__(message)


class NonPositiveDuration(EventValidationError):
    """Raised when the event end is not strictly after its start."""


class UnknownTimeZone(EventValidationError):
    """Raised when the event time zone is not a recognised IANA identifier.

    Attributes:
        zone: The unrecognised zone name.
    """

    def __init__(self, zone: str) -> None:
        super().__init__(f"Unknown time zone: {zone!r}")
        self.zone = zone


class CompileError(Exception):
    """A compile failure tagged with the stage at which it occurred.

    Attributes:
        stage: The stage the pipeline was attempting to reach.
        cause: The underlying :class:`StageError`.
    """

    def __init__(self, stage: Stage, cause: StageError) -> None:
        super().__init__(f"{stage.value}: {cause.code}: {cause}")
        self.stage = stage
        self.cause = cause

    @property
    def retry_strategy(self) -> RetryStrategy:
        """Whether the caller should re-prompt the front-end or reject."""
        return retry_strategy_for(self.stage)


class MalformedResponseError(Exception):
    """Raised when NL front-end output cannot be parsed into a candidate.

    Covers empty output, JSON parse failures and schema validation errors.

    Attributes:
        raw_response: The raw front-end output that failed to parse.
    """

    def __init__(self, message: str, raw_response: str = "") -> None:
        super().__init__(message)
        self.raw_response = raw_response


class NLParseError(Exception):
    """Raised by an NL front-end that could not produce a candidate event."""


class SubmissionError(Exception):
    """Raised by a calendar submission service that rejected an event."""
