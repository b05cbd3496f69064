"""
Time-of-day arithmetic utilities.

Slots and events carry clock times as "HH:MM" strings; all arithmetic is done
in minutes since midnight. "24:00" is accepted as an end-of-day boundary.
"""

import math
import re
from datetime import date, datetime
from typing import Optional, Union

MINUTES_PER_DAY = 24 * 60

_HHMM_RE = re.compile(r"^(\d{1,2}):(\d{2})$")


def is_hhmm(value: str) -> bool:
    """Check that a string is a valid clock time (00:00 - 24:00)."""
    match = _HHMM_RE.match(value or "")
    if not match:
        return False
    hours, minutes = int(match.group(1)), int(match.group(2))
    if minutes >= 60:
        return False
    return hours < 24 or (hours == 24 and minutes == 0)


def time_to_minutes(value: str) -> int:
    """
    Convert "HH:MM" to minutes since midnight.

    Raises:
        ValueError: If the string is not a valid clock time
    """
    if not is_hhmm(value):
        raise ValueError(f"Invalid time: {value!r}")
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def normalize_hhmm(value: str) -> str:
    """
    Zero-pad a clock time ("9:00" -> "09:00").

    Raises:
        ValueError: If the string is not a valid clock time
    """
    return minutes_to_time(time_to_minutes(value.strip()))


def minutes_to_time(minutes: int) -> str:
    """Convert minutes since midnight to "HH:MM" (1440 renders as "24:00")."""
    if minutes == MINUTES_PER_DAY:
        return "24:00"
    minutes %= MINUTES_PER_DAY
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def minutes_to_hours(minutes: int) -> float:
    """Minutes as hours rounded half-up to one decimal place."""
    return math.floor(minutes / 6 + 0.5) / 10


def parse_time_range(value: str) -> tuple[str, str]:
    """
    Split "HH:MM-HH:MM" into its zero-padded start and end.

    Raises:
        ValueError: If the range is malformed or ends before it starts
    """
    parts = [part.strip() for part in (value or "").split("-")]
    if len(parts) != 2:
        raise ValueError(f"Invalid time range: {value!r}")
    start, end = normalize_hhmm(parts[0]), normalize_hhmm(parts[1])
    if time_to_minutes(end) <= time_to_minutes(start):
        raise ValueError(f"Time range ends before it starts: {value!r}")
    return start, end


def overlap_minutes(start_a: int, end_a: int, start_b: int, end_b: int) -> int:
    """Length of the intersection of two half-open minute intervals."""
    return max(0, min(end_a, end_b) - max(start_a, start_b))


def parse_calendar_moment(value: Union[str, date, datetime]) -> tuple[date, Optional[int]]:
    """
    Split a calendar timestamp into (date, minutes since midnight).

    Handles:
    - ISO datetimes with or without offset: "2025-01-13T09:00:00+09:00"
    - 'Z' suffixed UTC datetimes: "2025-01-13T00:00:00Z"
    - Bare dates for all-day entries: "2025-01-13" (minutes is None)

    The wall-clock time of the timestamp is kept as-is; no timezone
    conversion is done.

    Raises:
        ValueError: If the value cannot be parsed
    """
    if isinstance(value, datetime):
        return value.date(), value.hour * 60 + value.minute
    if isinstance(value, date):
        return value, None

    text = value.strip()
    if "T" not in text and " " not in text:
        return date.fromisoformat(text), None

    parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    return parsed.date(), parsed.hour * 60 + parsed.minute
