"""
Date/time helpers shared by the normalizer, solver and validator.

All instants are naive datetimes in UTC. Timezone-aware inputs are converted
to UTC first so that every comparison happens in one frame.
"""

import math
import re
from datetime import date, datetime, time, timedelta, timezone
from typing import Iterable, Optional

from .types import TimeBlock


ONE_DAY = timedelta(days=1)
SECONDS_IN_HOUR = 3600

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def to_datetime(value) -> Optional[datetime]:
    """Parse a timestamp-ish value. Returns None if it can't be read."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            return value.astimezone(timezone.utc).replace(tzinfo=None)
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    return to_datetime(parsed)


def _leading_int(text: str) -> int:
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else 0


def combine(date_value, time_value) -> Optional[datetime]:
    """
    Combine a calendar day with a time of day.

    A time value that is already a full timestamp is used as-is. A bare
    "HH:MM" (minutes optional) is applied to the parsed day.
    """
    if not date_value and not time_value:
        return None

    if isinstance(time_value, datetime):
        return to_datetime(time_value)
    if isinstance(time_value, str):
        timestamp = to_datetime(time_value)
        if timestamp is not None:
            return timestamp

    base = to_datetime(date_value)
    if base is None:
        return to_datetime(time_value)

    if not time_value:
        return base

    if isinstance(time_value, time):
        hours, minutes = time_value.hour, time_value.minute
    elif isinstance(time_value, str):
        parts = time_value.split(":")
        hours = _leading_int(parts[0])
        minutes = _leading_int(parts[1]) if len(parts) > 1 else 0
    else:
        hours, minutes = 0, 0

    # out-of-range parts roll over like a wall clock would
    midnight = base.replace(hour=0, minute=0, second=0, microsecond=0)
    return midnight + timedelta(hours=hours, minutes=minutes)


def normalize_range(start, end) -> tuple[Optional[datetime], Optional[datetime]]:
    """Returns (None, None) if either end is unreadable; wraps overnight ranges."""
    start_dt = to_datetime(start)
    end_dt = to_datetime(end)
    if start_dt is None or end_dt is None:
        return None, None

    if end_dt <= start_dt:
        return start_dt, end_dt + ONE_DAY
    return start_dt, end_dt


def hours_between(start, end) -> float:
    range_start, range_end = normalize_range(start, end)
    if range_start is None:
        return 0.0
    diff = (range_end - range_start).total_seconds() / SECONDS_IN_HOUR
    return diff if math.isfinite(diff) else 0.0


def covers(window_start: datetime, window_end: datetime, start, end) -> bool:
    """True if the window fully contains the normalized (start, end) range."""
    range_start, range_end = normalize_range(start, end)
    if range_start is None or window_start is None or window_end is None:
        return False
    return window_start <= range_start and window_end >= range_end


def overlaps(blocks: Iterable[TimeBlock], start, end) -> bool:
    """
    True if (start, end) intersects any block.

    Both sides are overnight-normalized first. A block that still ends at or
    before its start never matches.
    """
    if not blocks:
        return False
    candidate_start, candidate_end = normalize_range(start, end)
    if candidate_start is None:
        return False

    for block in blocks:
        block_start, block_end = normalize_range(block.start, block.end)
        if block_start is None or block_end <= block_start:
            continue
        if block_start < candidate_end and candidate_start < block_end:
            return True
    return False
