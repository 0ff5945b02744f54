"""Compiler pipeline: candidate event -> validated event descriptor.

Runs the stages in a fixed order with no backtracking::

    RECEIVED -> TIME_RESOLVED -> RECURRENCE_NORMALIZED -> VALIDATED -> DONE

Any stage error moves the pipeline to ``FAILED`` and is wrapped in a
:class:`~nlcal.exceptions.CompileError` tagged with the stage that was being
attempted.  The pipeline performs no I/O and holds no state between calls,
so it can be invoked from any number of threads or from async code (e.g.
via ``asyncio.to_thread``) without coordination.

Two entry points are provided:

- :func:`compile_event` returns the :class:`ResolvedEvent` or raises.
- :func:`run_compile` never raises for stage errors and returns a
  :class:`CompileResult` that records the full stage history.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import timedelta

from nlcal.exceptions import CompileError, StageError
from nlcal.models.event import EventWarning, ResolvedEvent
from nlcal.models.request import CandidateEvent, SchedulingRequest
from nlcal.models.stage import RetryStrategy, Stage
from nlcal.recurrence import normalize
from nlcal.time_resolver import resolve
from nlcal.validator import DEFAULT_MAX_DURATION, validate
from nlcal.zones import is_known_zone

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Result dataclass
# ---------------------------------------------------------------------------


@dataclass
class CompileResult:
    """Outcome of a single :func:`run_compile` call.

    Attributes:
        stages: Every stage entered, in order, starting with ``RECEIVED``
            and ending with ``DONE`` or ``FAILED``.
        event: The resolved event on success, else ``None``.
        error: The wrapped failure, else ``None``.
    """

    stages: list[Stage] = field(default_factory=lambda: [Stage.RECEIVED])
    event: ResolvedEvent | None = None
    error: CompileError | None = None

    @property
    def final_stage(self) -> Stage:
        return self.stages[-1]

    @property
    def succeeded(self) -> bool:
        return self.final_stage is Stage.DONE

    @property
    def failed_stage(self) -> Stage | None:
        """Stage at which the pipeline failed, or ``None`` on success."""
        return self.error.stage if self.error is not None else None

    @property
    def retry_strategy(self) -> RetryStrategy | None:
        return self.error.retry_strategy if self.error is not None else None

    @property
    def warnings(self) -> tuple[EventWarning, ...]:
        return self.event.warnings if self.event is not None else ()


# ---------------------------------------------------------------------------
# Pipeline entry points
# ---------------------------------------------------------------------------


def compile_event(
    request: SchedulingRequest,
    candidate: CandidateEvent,
    max_duration: timedelta = DEFAULT_MAX_DURATION,
) -> ResolvedEvent:
    """Compile a front-end candidate into a validated event.

    Args:
        request: The originating request (reference instant, default zone).
        candidate: The untrusted event proposal from the NL front-end.
        max_duration: Threshold for the ``EXCESSIVE_DURATION`` warning.

    Returns:
        The :class:`ResolvedEvent`, possibly carrying soft warnings.

    Raises:
        CompileError: If any stage fails.  ``error.stage`` identifies the
            stage and ``error.cause`` the underlying stage error.
    """
    result = run_compile(request, candidate, max_duration=max_duration)
    if result.event is None:
        raise result.error
    return result.event


def run_compile(
    request: SchedulingRequest,
    candidate: CandidateEvent,
    max_duration: timedelta = DEFAULT_MAX_DURATION,
) -> CompileResult:
    """Compile a candidate and record the stage history.

    Same semantics as :func:`compile_event`, but stage failures are returned
    in :attr:`CompileResult.error` instead of raised.
    """
    result = CompileResult()
    zone = _effective_zone(request, candidate)
    # A zone the resolver cannot load is reported by the validator; resolve
    # wall times in the request default meanwhile.
    resolution_zone = zone if is_known_zone(zone) else request.default_time_zone

    logger.debug("Compiling '%s' (zone=%s)", candidate.summary, zone)

    stage = Stage.TIME_RESOLVED
    try:
        start = resolve(candidate.start_expr, request.reference_instant, resolution_zone)
        end = resolve(candidate.end_expr, request.reference_instant, resolution_zone)
        _advance(result, stage)

        stage = Stage.RECURRENCE_NORMALIZED
        rules = normalize(candidate.recurrence, zone=resolution_zone)
        _advance(result, stage)

        stage = Stage.VALIDATED
        event = validate(
            candidate,
            start,
            end,
            rules,
            time_zone=zone,
            max_duration=max_duration,
        )
        _advance(result, stage)
    except StageError as exc:
        result.error = CompileError(stage, exc)
        result.stages.append(Stage.FAILED)
        logger.warning(
            "Compile failed at %s (%s): %s",
            stage.value,
            exc.code,
            exc,
        )
        return result

    result.event = event
    _advance(result, Stage.DONE)
    logger.info(
        "Compiled '%s': %s -> %s %s, %d rule(s), %d warning(s)",
        event.summary,
        event.local_start.isoformat(),
        event.local_end.isoformat(),
        event.time_zone,
        len(event.recurrence_rules),
        len(event.warnings),
    )
    return result


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _effective_zone(request: SchedulingRequest, candidate: CandidateEvent) -> str:
    """The candidate's zone, or the request default when it names none."""
    return candidate.time_zone.strip() or request.default_time_zone


def _advance(result: CompileResult, stage: Stage) -> None:
    logger.debug("Stage %s -> %s", result.final_stage.value, stage.value)
    result.stages.append(stage)
