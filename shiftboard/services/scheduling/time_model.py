"""
Conversion between decimal hours (9.5) and stored clock strings ("09:30:00").

Scheduling logic only ever sees decimal hours, the database only ever sees
clock strings. Values are snapped to whole minutes in both directions so a
shift read back from storage compares equal to the one that was written.
"""

import math
import re

MINUTES_PER_HOUR = 60
HOURS_PER_DAY = 24

_CLOCK_RE = re.compile(r"^\s*(\d{1,2}):(\d{2})(?::(\d{2}))?\s*$")


def _to_minutes(value: float) -> int:
    if value is None or isinstance(value, bool) or not math.isfinite(value):
        raise ValueError(f"Invalid hour value: {value!r}")
    if value < 0 or value > HOURS_PER_DAY:
        raise ValueError(f"Hour value out of range 0-24: {value!r}")
    return int(round(value * MINUTES_PER_HOUR))


def hour_to_clock(value: float) -> str:
    """9.5 -> '09:30:00'. 24 is allowed as an end-of-day marker."""
    hours, minutes = divmod(_to_minutes(value), MINUTES_PER_HOUR)
    return f"{hours:02d}:{minutes:02d}:00"


def clock_to_hour(value: str) -> float:
    """'09:30' or '09:30:00' -> 9.5."""
    match = _CLOCK_RE.match(value or "")
    if not match:
        raise ValueError(f"Invalid clock time: {value!r}")
    hours = int(match.group(1))
    minutes = int(match.group(2))
    seconds = int(match.group(3) or 0)
    if minutes > 59 or seconds > 59 or hours > HOURS_PER_DAY:
        raise ValueError(f"Invalid clock time: {value!r}")
    if hours == HOURS_PER_DAY and (minutes or seconds):
        raise ValueError(f"Invalid clock time: {value!r}")
    total_minutes = hours * MINUTES_PER_HOUR + minutes + round(seconds / 60)
    return total_minutes / MINUTES_PER_HOUR


def normalize_hour(value: float) -> float:
    """Snap a decimal hour to the nearest whole minute."""
    return _to_minutes(value) / MINUTES_PER_HOUR


def format_hour(value: float) -> str:
    """9.5 -> '9:30am', 17 -> '5pm'."""
    hours, minutes = divmod(_to_minutes(value), MINUTES_PER_HOUR)
    period = "pm" if 12 <= hours < 24 else "am"
    display = hours % 12 or 12
    if minutes == 0:
        return f"{display}{period}"
    return f"{display}:{minutes:02d}{period}"


def format_range(start: float, end: float) -> str:
    return f"{format_hour(start)}-{format_hour(end)}"
