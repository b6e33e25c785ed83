"""Shared time and date helpers used across the availability engine."""

import re
from datetime import date

from availability_engine.errors import InvalidInterval

MINUTES_PER_DAY = 1440

WEEKDAY_ABBREVIATIONS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")

_TIME_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})(?::\d{2})?$")


def parse_time(value: str, allow_end_of_day: bool = False) -> int:
    """Convert ``HH:MM`` (or ``HH:MM:SS`` as stored by databases) to minutes since midnight.

    ``24:00`` is accepted only when ``allow_end_of_day`` is set, for interval ends.

    Examples:
        >>> parse_time("09:30")
        570
        >>> parse_time("13:00:00")
        780
    """
    if not isinstance(value, str):
        raise InvalidInterval(f"Time must be an HH:MM string, got {value!r}")
    match = _TIME_PATTERN.match(value.strip())
    if not match:
        raise InvalidInterval(f"Time must be in HH:MM format, got {value!r}")
    hours, minutes = int(match.group(1)), int(match.group(2))
    if minutes > 59:
        raise InvalidInterval(f"Invalid minutes in {value!r}")
    total = hours * 60 + minutes
    limit = MINUTES_PER_DAY if allow_end_of_day else MINUTES_PER_DAY - 1
    if total > limit:
        raise InvalidInterval(f"Time {value!r} is outside the day")
    return total


def format_time(minutes: int) -> str:
    """Convert minutes since midnight to ``HH:MM``.

    Examples:
        >>> format_time(570)
        '09:30'
        >>> format_time(1440)
        '24:00'
    """
    hours, mins = divmod(minutes, 60)
    return f"{hours:02d}:{mins:02d}"


def format_date(day: date) -> str:
    """Render a date the way reasons shown to end users do (dd/mm/YYYY)."""
    return day.strftime("%d/%m/%Y")


def parse_date(value: str) -> date:
    """Parse a ``YYYY-MM-DD`` string."""
    try:
        return date.fromisoformat(value.strip())
    except (ValueError, AttributeError):
        raise ValueError(f"Date must be in YYYY-MM-DD format, got {value!r}") from None
