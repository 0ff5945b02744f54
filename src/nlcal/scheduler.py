"""End-to-end scheduling: NL front-end -> compiler -> calendar submission.

:func:`schedule_request` is the thin adapter the presentation layer calls.
It owns no parsing or validation logic of its own; it sequences the
collaborators around :func:`~nlcal.pipeline.run_compile` and collects every
outcome into a :class:`ScheduleResult`.  Timeouts and retries of the
collaborators remain the caller's concern.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from datetime import timedelta

from nlcal.exceptions import CompileError, MalformedResponseError, NLParseError, SubmissionError
from nlcal.frontend import CalendarSubmitter, NLFrontEnd, SubmissionReceipt
from nlcal.models.event import ResolvedEvent
from nlcal.models.request import CandidateEvent, SchedulingRequest
from nlcal.pipeline import run_compile
from nlcal.validator import DEFAULT_MAX_DURATION

logger = logging.getLogger(__name__)

STATUS_PARSED = "parsed"
STATUS_CREATED = "created"
STATUS_FAILED = "failed"


@dataclass
class ScheduleResult:
    """Aggregated outcome of one scheduling attempt.

    Attributes:
        request: The originating request.
        status: ``"parsed"`` (compiled, not submitted), ``"created"``
            (submitted) or ``"failed"``.
        candidate: The front-end's proposal, if it produced one.
        event: The compiled event, if compilation succeeded.
        receipt: The submission receipt, if the event was created.
        compile_error: The compiler failure, if any.
        errors: Human-readable errors from any step.
        warnings: Human-readable soft warnings to surface to the user.
        duration_seconds: Wall-clock time for the whole attempt.
    """

    request: SchedulingRequest
    status: str = STATUS_FAILED
    candidate: CandidateEvent | None = None
    event: ResolvedEvent | None = None
    receipt: SubmissionReceipt | None = None
    compile_error: CompileError | None = None
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    duration_seconds: float = 0.0

    @property
    def succeeded(self) -> bool:
        return self.status != STATUS_FAILED


def schedule_request(
    request: SchedulingRequest,
    front_end: NLFrontEnd,
    submitter: CalendarSubmitter | None = None,
    max_duration: timedelta = DEFAULT_MAX_DURATION,
) -> ScheduleResult:
    """Parse, compile and optionally submit a scheduling request.

    Without a *submitter* the result stops at ``"parsed"``: the event is
    compiled and returned so the caller can show it or submit it later.

    Args:
        request: The user's request.
        front_end: Interpreter producing the candidate event.
        submitter: Calendar service, or ``None`` to skip submission.
        max_duration: Threshold for the excessive-duration warning.

    Returns:
        A :class:`ScheduleResult`; collaborator and compile failures are
        recorded in it rather than raised.
    """
    started = time.monotonic()
    result = ScheduleResult(request=request)

    # Step 1: NL front-end
    logger.info("Parsing request: %r", request.raw_text)
    try:
        result.candidate = front_end.parse(request.raw_text, request.reference_instant)
    except (NLParseError, MalformedResponseError) as exc:
        _fail(result, f"Front-end could not parse request: {exc}")
        return _finish(result, started)

    # Step 2: compile
    compiled = run_compile(request, result.candidate, max_duration=max_duration)
    if compiled.error is not None:
        result.compile_error = compiled.error
        _fail(result, f"Compile failed: {compiled.error}")
        return _finish(result, started)

    result.event = compiled.event
    result.warnings.extend(w.message for w in compiled.warnings)
    result.status = STATUS_PARSED

    # Step 3: submission
    if submitter is None:
        logger.info("No calendar submitter configured, stopping after compile")
        return _finish(result, started)

    try:
        result.receipt = submitter.submit(result.event)
    except SubmissionError as exc:
        _fail(result, f"Failed to add event to calendar: {exc}")
        return _finish(result, started)

    result.status = STATUS_CREATED
    logger.info("Created event %s (%s)", result.receipt.id, result.receipt.link)
    return _finish(result, started)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _fail(result: ScheduleResult, message: str) -> None:
    result.status = STATUS_FAILED
    result.errors.append(message)
    logger.warning(message)


def _finish(result: ScheduleResult, started: float) -> ScheduleResult:
    result.duration_seconds = time.monotonic() - started
    return result
