"""Console and JSON rendering of compile results.

:func:`format_compile_result` renders a
:class:`~nlcal.pipeline.CompileResult` as a human-readable report: the stage
trail, the resolved event (or the failure and its retry strategy), and any
warnings.  :func:`compile_result_to_dict` produces the machine-readable
equivalent used by ``nlcal compile --json``.
"""

from __future__ import annotations

import sys

from nlcal.event_mapper import map_to_calendar_body
from nlcal.models.event import ResolvedEvent
from nlcal.pipeline import CompileResult

_BANNER_WIDTH = 60
_SEPARATOR = "=" * _BANNER_WIDTH


def format_compile_result(result: CompileResult) -> str:
    """Render a :class:`CompileResult` for the console.

    Args:
        result: The compile result to format.

    Returns:
        A multi-line string ready for display.
    """
    lines: list[str] = [_SEPARATOR, "  NL CALENDAR COMPILER", _SEPARATOR, ""]

    trail = " -> ".join(stage.value for stage in result.stages)
    lines.append(f"  Stages: {trail}")
    lines.append("")

    if result.event is not None:
        _append_event(lines, result.event)
    elif result.error is not None:
        lines.append("--- FAILED ---")
        lines.append(f"  Stage: {result.error.stage.value}")
        lines.append(f"  Error: {result.error.cause.code}")
        lines.append(f"  Detail: {result.error.cause}")
        lines.append(f"  Suggested action: {result.error.retry_strategy.value}")

    if result.warnings:
        lines.append("")
        lines.append("--- WARNINGS ---")
        for warning in result.warnings:
            lines.append(f"  [!] {warning.code}: {warning.message}")

    lines.append(_SEPARATOR)
    return "\n".join(lines)


def print_compile_result(result: CompileResult) -> None:
    """Format and print a :class:`CompileResult` to stdout."""
    sys.stdout.write(format_compile_result(result) + "\n")


def compile_result_to_dict(result: CompileResult) -> dict:
    """Convert a :class:`CompileResult` to a JSON-serialisable ``dict``.

    Successful results carry the calendar body under ``"event"``; failures
    carry ``stage``, ``code``, ``message`` and ``retry`` under ``"error"``.
    """
    data: dict = {
        "status": result.final_stage.value,
        "stages": [stage.value for stage in result.stages],
        "warnings": [w.model_dump() for w in result.warnings],
    }
    if result.event is not None:
        data["event"] = map_to_calendar_body(result.event)
    if result.error is not None:
        data["error"] = {
            "stage": result.error.stage.value,
            "code": result.error.cause.code,
            "message": str(result.error.cause),
            "retry": result.error.retry_strategy.value,
        }
    return data


def _append_event(lines: list[str], event: ResolvedEvent) -> None:
    lines.append("--- EVENT ---")
    lines.append(f"  Summary: {event.summary}")
    if event.description:
        lines.append(f"  Description: {event.description}")
    lines.append(f"  Start: {event.local_start.isoformat()} ({event.time_zone})")
    lines.append(f"  End:   {event.local_end.isoformat()} ({event.time_zone})")
    lines.append(f"  Duration: {event.duration}")
    if event.recurrence_rules:
        for rule in event.recurrence_rules:
            lines.append(f"  Repeats: {rule.to_rrule()}")
    else:
        lines.append("  Repeats: no")
