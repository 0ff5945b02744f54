"""Collaborator interfaces around the compiler, and front-end output parsing.

The compiler depends on two external services that are specified here only
as protocols:

- :class:`NLFrontEnd` turns raw text into a :class:`CandidateEvent`.
- :class:`CalendarSubmitter` persists a :class:`ResolvedEvent`.

:func:`parse_candidate_response` is the vendor-neutral half of a front-end:
it converts a language model's text reply into a candidate, so a concrete
front-end only has to send :func:`~nlcal.prompts.build_parse_prompt` to its
model and hand the reply over.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol, runtime_checkable

from pydantic import ValidationError

from nlcal.exceptions import MalformedResponseError
from nlcal.models.event import ResolvedEvent
from nlcal.models.request import CandidateEvent

logger = logging.getLogger(__name__)

# ```json ... ``` fences some models wrap around JSON despite instructions.
_FENCE_RE = re.compile(r"^```[a-zA-Z]*\s*\n?(?P<body>.*?)\n?```$", re.DOTALL)


@dataclass(frozen=True)
class SubmissionReceipt:
    """Acknowledgement from the calendar submission service.

    Attributes:
        id: Service-assigned event identifier.
        link: URL of the created event.
    """

    id: str
    link: str


@runtime_checkable
class NLFrontEnd(Protocol):
    """Natural-language interpreter producing candidate events."""

    def parse(self, raw_text: str, reference: datetime) -> CandidateEvent:
        """Interpret *raw_text* relative to *reference*.

        Raises:
            NLParseError: If no candidate can be produced.
        """
        ...


@runtime_checkable
class CalendarSubmitter(Protocol):
    """Calendar service that persists resolved events."""

    def submit(self, event: ResolvedEvent) -> SubmissionReceipt:
        """Create *event* in the calendar.

        Raises:
            SubmissionError: If the service rejects the event.
        """
        ...


def parse_candidate_response(raw_text: str) -> CandidateEvent:
    """Parse a front-end model reply into a :class:`CandidateEvent`.

    Accepts a bare JSON object, optionally wrapped in a Markdown code fence.

    Args:
        raw_text: The model's raw reply.

    Returns:
        The parsed (still unvalidated) candidate.

    Raises:
        MalformedResponseError: If the reply is empty, not JSON, not an
            object, or does not match the candidate schema.
    """
    if not raw_text or not raw_text.strip():
        raise MalformedResponseError("Empty response from front-end", raw_response=raw_text or "")

    text = raw_text.strip()
    fenced = _FENCE_RE.match(text)
    if fenced:
        text = fenced.group("body").strip()

    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise MalformedResponseError(f"Invalid JSON: {exc}", raw_response=raw_text) from exc

    if not isinstance(data, dict):
        raise MalformedResponseError(
            f"Expected a JSON object, got {type(data).__name__}", raw_response=raw_text
        )

    try:
        candidate = CandidateEvent.model_validate(data)
    except ValidationError as exc:
        raise MalformedResponseError(
            f"Schema validation failed: {exc}", raw_response=raw_text
        ) from exc

    logger.debug("Parsed candidate '%s' from front-end response", candidate.summary)
    return candidate
