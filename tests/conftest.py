"""Shared fixtures for nlcal tests."""

from __future__ import annotations

import logging
from collections.abc import Generator
from datetime import datetime, timezone

import pytest

from nlcal.models.request import CandidateEvent, SchedulingRequest

REFERENCE = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture()
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove all nlcal-related environment variables.

    Patches ``load_dotenv`` so a real ``.env`` file cannot re-inject values
    that the test explicitly removed.
    """
    monkeypatch.setattr("nlcal.config.load_dotenv", lambda *_a, **_kw: None)
    for key in ("DEFAULT_TIMEZONE", "MAX_EVENT_DURATION_HOURS", "LOG_LEVEL"):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture()
def request_ny() -> SchedulingRequest:
    """A request made on 2025-06-01 with a New York default zone."""
    return SchedulingRequest(
        raw_text="Team meeting Monday at 2pm",
        reference_instant=REFERENCE,
        default_time_zone="America/New_York",
    )


@pytest.fixture()
def make_candidate():
    """Factory for :class:`CandidateEvent` with sensible defaults."""

    def _make(**overrides: object) -> CandidateEvent:
        data: dict = {
            "summary": "Team meeting",
            "start": "2025-06-02T14:00:00",
            "end": "2025-06-02T15:00:00",
            "timeZone": "America/New_York",
        }
        data.update(overrides)
        return CandidateEvent.model_validate(data)

    return _make


@pytest.fixture(autouse=True)
def _reset_root_logger() -> Generator[None, None, None]:
    """Reset the root logger after each test to prevent handler leaks."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    yield
    root.handlers = original_handlers
    root.setLevel(original_level)
