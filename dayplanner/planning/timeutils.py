"""Wall-clock helpers for the day planner.

All times are naive "HH:MM" strings on the plan's date. Hours are not wrapped
at midnight, so a plan running late renders as "24:30" rather than "00:30".
"""

import math
import re

_HHMM_RE = re.compile(r"^(\d{1,2}):(\d{2})$")

UNKNOWN_DURATION = "?? min"


def to_minutes(hhmm: str) -> int:
    """Convert an "HH:MM" string to minutes since midnight.

    Raises:
        ValueError: If the string is not a valid wall-clock time
    """
    match = _HHMM_RE.match(hhmm.strip()) if isinstance(hhmm, str) else None
    if match is None:
        raise ValueError(f"Invalid time {hhmm!r}, expected HH:MM")

    hours, minutes = int(match.group(1)), int(match.group(2))
    if minutes >= 60:
        raise ValueError(f"Invalid time {hhmm!r}, minutes must be below 60")
    return hours * 60 + minutes


def from_minutes(minutes: int) -> str:
    """Convert minutes since midnight to a zero-padded "HH:MM" string."""
    if minutes < 0:
        raise ValueError(f"Minutes must be non-negative, got {minutes}")
    hours, mins = divmod(minutes, 60)
    return f"{hours:02d}:{mins:02d}"


def is_valid_time(hhmm: str) -> bool:
    """Check whether a string parses as "HH:MM"."""
    try:
        to_minutes(hhmm)
    except ValueError:
        return False
    return True


def format_duration(minutes: float | None) -> str:
    """Render a duration for display.

    Unresolved durations (None, negative, NaN) render as "?? min" so callers
    can display transit segments that are still being reconciled.

    Examples:
        45 -> "45 min", 120 -> "2 hr", 95 -> "1 hr 35 min"
    """
    if minutes is None or math.isnan(minutes) or minutes < 0:
        return UNKNOWN_DURATION

    total = int(minutes)
    if total < 60:
        return f"{total} min"

    hours, mins = divmod(total, 60)
    if mins == 0:
        return f"{hours} hr"
    return f"{hours} hr {mins} min"


def format_total_duration(minutes: int) -> str:
    """Render the plan total as "{h}h {m}m".

    Manual overrides can put the last end before the first start; such a
    total keeps its sign, so -30 renders as "-0h 30m".
    """
    sign = "-" if minutes < 0 else ""
    hours, mins = divmod(abs(minutes), 60)
    return f"{sign}{hours}h {mins}m"


def format_distance(meters: int) -> str:
    """Render a distance as metres below 1 km, else kilometres to one decimal."""
    if meters < 1000:
        return f"{meters} m"
    return f"{meters / 1000:.1f} km"
