"""Input models for a single compile invocation.

- :class:`SchedulingRequest` -- the caller's raw text plus the reference
  instant and default zone.  A plain frozen dataclass: it is built by
  trusted code, never from model output.
- :class:`CandidateEvent` -- the NL front-end's proposal.  A Pydantic model
  because it arrives as untrusted JSON; it accepts the front-end's JSON keys
  (``start``, ``end``, ``timeZone``, ``recurrence``) as well as the Python
  field names.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from nlcal.zones import is_known_zone


@dataclass(frozen=True)
class SchedulingRequest:
    """A free-text scheduling instruction and the context to resolve it in.

    Attributes:
        raw_text: The user's instruction, e.g. ``"Team sync tomorrow at 2pm"``.
        reference_instant: Timezone-aware "now" against which partial
            expressions are anchored.
        default_time_zone: IANA zone used when the candidate names none.
            Must be a known zone.
    """

    raw_text: str
    reference_instant: datetime
    default_time_zone: str = "UTC"

    def __post_init__(self) -> None:
        if self.reference_instant.tzinfo is None or self.reference_instant.utcoffset() is None:
            raise ValueError("reference_instant must be timezone-aware")
        if not is_known_zone(self.default_time_zone):
            raise ValueError(f"Unknown default time zone: {self.default_time_zone!r}")


class CandidateEvent(BaseModel):
    """An event proposal produced by the NL front-end.

    Nothing here is trusted: every string is re-checked by the compiler.

    Attributes:
        summary: Event title (may be blank; the validator rejects that).
        description: Optional free-text description.
        start_expr: ISO 8601 start expression.
        end_expr: ISO 8601 end expression.
        time_zone: IANA zone name, or ``""`` to use the request default.
        recurrence: RRULE expressions in front-end order.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    summary: str
    description: str | None = None
    start_expr: str = Field(alias="start")
    end_expr: str = Field(alias="end")
    time_zone: str = Field(default="", alias="timeZone")
    recurrence: tuple[str, ...] = ()

    @field_validator("recurrence", mode="before")
    @classmethod
    def _null_recurrence_is_empty(cls, value: Any) -> Any:
        if value is None:
            return ()
        if isinstance(value, str):
            return (value,)
        return value

    @field_validator("time_zone", mode="before")
    @classmethod
    def _null_zone_is_blank(cls, value: Any) -> Any:
        return "" if value is None else value
