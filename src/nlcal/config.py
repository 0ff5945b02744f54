"""Configuration loading for nlcal.

Reads optional settings from environment variables (with .env support via
python-dotenv).  Every setting has a default; only malformed values are
errors.
"""

from __future__ import annotations

import logging
import math
import os
from dataclasses import dataclass
from datetime import timedelta

from dotenv import load_dotenv

from nlcal.zones import is_known_zone


class ConfigError(Exception):
    """Raised when configuration values are invalid."""


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment variables.

    Attributes:
        default_timezone: IANA zone used when a candidate names none
            (default ``"UTC"``).
        max_event_duration_hours: Non-recurring events longer than this are
            flagged with a warning (default ``24``).
        log_level: Logging level (default ``"INFO"``).
    """

    default_timezone: str = "UTC"
    max_event_duration_hours: float = 24.0
    log_level: str = "INFO"

    @property
    def max_event_duration(self) -> timedelta:
        return duration_from_hours(self.max_event_duration_hours)


def duration_from_hours(hours: float) -> timedelta:
    """Convert a positive, finite number of hours to a :class:`timedelta`.

    Raises:
        ValueError: If *hours* is not positive, not finite, or too large
            for a ``timedelta``.
    """
    if not math.isfinite(hours) or hours <= 0:
        raise ValueError(f"must be positive and finite, got {hours!r}")
    try:
        return timedelta(hours=hours)
    except OverflowError as exc:
        raise ValueError(f"is out of range, got {hours!r}") from exc


def load_settings() -> Settings:
    """Load and validate settings from environment variables.

    Calls :func:`dotenv.load_dotenv` so a ``.env`` file in the project root
    is picked up automatically.  Recognised variables are
    ``DEFAULT_TIMEZONE``, ``MAX_EVENT_DURATION_HOURS`` and ``LOG_LEVEL``;
    unset or blank variables keep their defaults.

    Returns:
        A validated :class:`Settings` instance.

    Raises:
        ConfigError: If any variable holds an invalid value.  The error
            message names **all** invalid variables.
    """
    load_dotenv()

    values: dict[str, object] = {}
    invalid: list[str] = []

    timezone = os.environ.get("DEFAULT_TIMEZONE", "").strip()
    if timezone:
        if is_known_zone(timezone):
            values["default_timezone"] = timezone
        else:
            invalid.append(f"DEFAULT_TIMEZONE={timezone!r} (unknown time zone)")

    raw_hours = os.environ.get("MAX_EVENT_DURATION_HOURS", "").strip()
    if raw_hours:
        try:
            hours = float(raw_hours)
            duration_from_hours(hours)
        except ValueError:
            invalid.append(
                f"MAX_EVENT_DURATION_HOURS={raw_hours!r} (expected a positive number)"
            )
        else:
            values["max_event_duration_hours"] = hours

    log_level = os.environ.get("LOG_LEVEL", "").strip()
    if log_level:
        if isinstance(logging.getLevelName(log_level.upper()), int):
            values["log_level"] = log_level.upper()
        else:
            invalid.append(f"LOG_LEVEL={log_level!r} (unknown level)")

    if invalid:
        raise ConfigError("Invalid environment variables: " + ", ".join(invalid))

    return Settings(**values)
