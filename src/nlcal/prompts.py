"""Prompt builder for the NL front-end.

The compiler never interprets natural language itself.  Whatever model sits
in front of it is asked, with the prompt built here, to turn the user's text
into the JSON shape :func:`~nlcal.frontend.parse_candidate_response` expects.
The prompt asks for explicit times and offset-free local wall times so the
compiler can resolve them in the stated zone.
"""

from __future__ import annotations

from datetime import datetime

from nlcal.zones import load_zone

_RRULE_EXAMPLES = """\
- Daily for 30 days: RRULE:FREQ=DAILY;COUNT=30
- Mon/Wed/Fri, 10 times: RRULE:FREQ=WEEKLY;BYDAY=MO,WE,FR;COUNT=10
- 1st of every month for a year: RRULE:FREQ=MONTHLY;BYMONTHDAY=1;COUNT=12
- Weekdays until 31 March 2026: RRULE:FREQ=WEEKLY;BYDAY=MO,TU,WE,TH,FR;UNTIL=20260331"""


def build_parse_prompt(
    raw_text: str,
    reference: datetime,
    default_time_zone: str = "UTC",
) -> str:
    """Build the instruction sent to the NL front-end.

    Args:
        raw_text: The user's scheduling request, verbatim.
        reference: Timezone-aware "now", shown to the model both in UTC and
            in *default_time_zone* so it can resolve "tomorrow" and friends.
        default_time_zone: IANA zone to use when the request names none.

    Returns:
        The complete prompt string.
    """
    local_reference = reference
    zone = load_zone(default_time_zone)
    if zone is not None and reference.tzinfo is not None:
        local_reference = reference.astimezone(zone)

    return f"""\
Parse this calendar request and extract the event details.
Return ONLY a JSON object with this exact structure (no markdown, no preamble):
{{
  "summary": "event title",
  "description": "event description (optional)",
  "start": "YYYY-MM-DDTHH:MM:SS",
  "end": "YYYY-MM-DDTHH:MM:SS",
  "timeZone": "{default_time_zone}",
  "recurrence": ["RRULE:..."]
}}

## Current Date and Time

Now is {local_reference.isoformat()} ({default_time_zone}).
Resolve relative dates ("tomorrow", "next Friday", "in two weeks") against it.

## Rules

- "start" and "end" are local wall times in "timeZone", without a UTC offset.
- Always give an explicit time of day. Never return a date on its own.
- If the request gives a start time but no duration, the event lasts one hour.
- Use "{default_time_zone}" for "timeZone" unless the request names another
  IANA time zone.
- "recurrence" is an empty list for one-off events. Otherwise use RFC 5545
  RRULE strings with only FREQ (DAILY, WEEKLY, MONTHLY, YEARLY), BYDAY
  (two-letter weekday codes, no numeric prefixes), BYMONTHDAY (MONTHLY only),
  and at most one of COUNT or UNTIL.

## Recurrence Examples

{_RRULE_EXAMPLES}

## Request

"{raw_text.strip()}"

Return ONLY the JSON, nothing else."""
