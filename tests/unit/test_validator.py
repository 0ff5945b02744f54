"""Tests for the event descriptor validator."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from nlcal.exceptions import EmptySummary, NonPositiveDuration, UnknownTimeZone
from nlcal.models.event import Frequency, RecurrenceRule
from nlcal.validator import (
    EXCESSIVE_DURATION,
    RECURRENCE_ENDS_BEFORE_START,
    revalidate,
    validate,
)

START = datetime(2025, 6, 2, 18, 0, tzinfo=timezone.utc)
END = START + timedelta(hours=1)


class TestHardFailures:
    """Structural violations raise EventValidationError subclasses."""

    @pytest.mark.parametrize("summary", ["", "   ", "\t\n"])
    def test_blank_summary(self, make_candidate, summary: str) -> None:
        with pytest.raises(EmptySummary):
            validate(make_candidate(summary=summary), START, END, ())

    def test_end_equal_to_start(self, make_candidate) -> None:
        with pytest.raises(NonPositiveDuration, match="strictly after"):
            validate(make_candidate(), START, START, ())

    def test_end_before_start(self, make_candidate) -> None:
        with pytest.raises(NonPositiveDuration):
            validate(make_candidate(), END, START, ())

    def test_unknown_zone(self, make_candidate) -> None:
        with pytest.raises(UnknownTimeZone) as exc_info:
            validate(make_candidate(timeZone="Eastern Standard Time"), START, END, ())

        assert exc_info.value.zone == "Eastern Standard Time"

    def test_summary_checked_before_duration(self, make_candidate) -> None:
        with pytest.raises(EmptySummary):
            validate(make_candidate(summary=""), END, START, ())

    def test_duration_checked_before_zone(self, make_candidate) -> None:
        with pytest.raises(NonPositiveDuration):
            validate(make_candidate(timeZone="Bogus/Zone"), END, START, ())

    def test_time_zone_override_is_validated(self, make_candidate) -> None:
        with pytest.raises(UnknownTimeZone):
            validate(make_candidate(), START, END, (), time_zone="Bogus/Zone")


class TestResolvedEventFields:
    """Successful validation produces a normalised ResolvedEvent."""

    def test_summary_and_description_trimmed(self, make_candidate) -> None:
        candidate = make_candidate(summary="  Standup  ", description="  daily sync \n")

        event = validate(candidate, START, END, ())

        assert event.summary == "Standup"
        assert event.description == "daily sync"

    def test_blank_description_becomes_none(self, make_candidate) -> None:
        event = validate(make_candidate(description="   "), START, END, ())

        assert event.description is None

    def test_instants_and_zone_carried_through(self, make_candidate) -> None:
        event = validate(make_candidate(), START, END, ())

        assert event.start_instant == START
        assert event.end_instant == END
        assert event.time_zone == "America/New_York"

    def test_time_zone_override(self, make_candidate) -> None:
        event = validate(make_candidate(timeZone=""), START, END, (), time_zone="Europe/London")

        assert event.time_zone == "Europe/London"

    def test_rules_preserved_in_order(self, make_candidate) -> None:
        rules = (
            RecurrenceRule(frequency=Frequency.DAILY, count=3),
            RecurrenceRule(frequency=Frequency.YEARLY),
        )

        event = validate(make_candidate(), START, END, list(rules))

        assert event.recurrence_rules == rules


class TestWarnings:
    """Soft anomalies are returned as warnings, not failures."""

    def test_no_warnings_for_ordinary_event(self, make_candidate) -> None:
        event = validate(make_candidate(), START, END, ())

        assert event.warnings == ()
        assert event.has_warnings is False

    def test_excessive_duration_flagged(self, make_candidate) -> None:
        event = validate(make_candidate(), START, START + timedelta(hours=30), ())

        assert [w.code for w in event.warnings] == [EXCESSIVE_DURATION]
        assert "30h" in event.warnings[0].message

    def test_exactly_max_duration_not_flagged(self, make_candidate) -> None:
        event = validate(make_candidate(), START, START + timedelta(hours=24), ())

        assert event.warnings == ()

    def test_custom_max_duration(self, make_candidate) -> None:
        event = validate(
            make_candidate(), START, START + timedelta(hours=3), (), max_duration=timedelta(hours=2)
        )

        assert [w.code for w in event.warnings] == [EXCESSIVE_DURATION]

    def test_recurring_events_exempt_from_duration_warning(self, make_candidate) -> None:
        rules = (RecurrenceRule(frequency=Frequency.WEEKLY, count=4),)

        event = validate(make_candidate(), START, START + timedelta(hours=48), rules)

        assert event.warnings == ()

    def test_until_before_start_flagged(self, make_candidate) -> None:
        rules = (RecurrenceRule(frequency=Frequency.DAILY, until=START - timedelta(days=1)),)

        event = validate(make_candidate(), START, END, rules)

        assert [w.code for w in event.warnings] == [RECURRENCE_ENDS_BEFORE_START]

    def test_warning_is_logged(self, make_candidate, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level("WARNING", logger="nlcal.validator"):
            validate(make_candidate(), START, START + timedelta(hours=30), ())

        assert "longer than" in caplog.text


class TestIdempotence:
    """Re-validating a resolved event yields the same event."""

    def test_revalidate_plain_event(self, make_candidate) -> None:
        event = validate(make_candidate(), START, END, ())

        assert revalidate(event) == event

    def test_revalidate_event_with_rules_and_warnings(self, make_candidate) -> None:
        rules = (RecurrenceRule(frequency=Frequency.DAILY, until=START - timedelta(days=1)),)
        event = validate(make_candidate(description="x"), START, END, rules)

        again = revalidate(event)

        assert again == event
        assert revalidate(again) == again

    def test_revalidate_excessive_duration_keeps_warning(self, make_candidate) -> None:
        event = validate(make_candidate(), START, START + timedelta(hours=30), ())

        assert revalidate(event).warnings == event.warnings
