"""Timestamp parsing and duration formatting helpers."""
from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Any, Optional

_SECONDS_PER_DAY = 24 * 3600

_COMMON_TIMESTAMP_FORMATS = [
    "%Y-%m-%d %H:%M:%S.%f",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y/%m/%d %H:%M:%S",
    "%d/%m/%Y %H:%M:%S",
    "%m/%d/%Y %H:%M:%S",
]

_TIME_OF_DAY = re.compile(r"^(\d{1,2}):(\d{1,2})(?::(\d{1,2}(?:\.\d+)?))?$")


def parse_timestamp_flexible(ts: Any) -> datetime | None:
    """Parse a timestamp from various formats.

    Returns a naive UTC datetime or None if parsing fails.
    Supports: ISO 8601 (with or without offset) and common strftime formats.
    """
    if isinstance(ts, datetime):
        return _to_naive_utc(ts)
    if not isinstance(ts, str):
        return None

    ts_str = ts.strip()
    if not ts_str:
        return None

    try:
        return _to_naive_utc(datetime.fromisoformat(ts_str.replace("Z", "+00:00")))
    except ValueError:
        pass

    for fmt in _COMMON_TIMESTAMP_FORMATS:
        try:
            return datetime.strptime(ts_str, fmt)
        except ValueError:
            continue
    return None


def _to_naive_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def split_timestamp(ts: Optional[str]) -> Optional[tuple[str, str]]:
    """Split "date time" on the first space; None when either part is missing."""
    if not ts or not isinstance(ts, str):
        return None
    parts = ts.strip().split(" ")
    if len(parts) < 2 or not parts[0] or not parts[1]:
        return None
    return parts[0], parts[1]


def time_of_day_seconds(value: str) -> Optional[float]:
    """Seconds since midnight for "HH:MM[:SS[.fff]]", None if malformed."""
    match = _TIME_OF_DAY.match(value.strip()) if value else None
    if not match:
        return None
    hours, minutes = int(match.group(1)), int(match.group(2))
    seconds = float(match.group(3) or 0)
    if hours > 23 or minutes > 59 or seconds >= 60:
        return None
    return hours * 3600 + minutes * 60 + seconds


def time_of_day_diff_seconds(start_time: str, end_time: str) -> int:
    """Whole seconds from start_time to end_time on the clock face.

    Dates are ignored: when the end time is earlier than the start time a
    single day is added, so runs longer than 24 hours wrap.
    """
    start = time_of_day_seconds(start_time)
    end = time_of_day_seconds(end_time)
    if start is None or end is None:
        return 0
    if end < start:
        end += _SECONDS_PER_DAY
    return int(end - start)


def seconds_to_duration(seconds: float) -> str:
    """Format seconds as zero-padded "HH:MM:SS" (hours may exceed 24)."""
    total = max(0, int(seconds))
    hours, rem = divmod(total, 3600)
    minutes, secs = divmod(rem, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def duration_to_seconds(duration: str) -> int:
    """Inverse of seconds_to_duration; malformed strings count as zero."""
    parts = duration.split(":") if duration else []
    if len(parts) != 3:
        return 0
    try:
        hours, minutes, secs = (int(float(p)) for p in parts)
    except ValueError:
        return 0
    return hours * 3600 + minutes * 60 + secs


def format_duration_with_units(seconds: float) -> str:
    """Human readable duration, e.g. "1d 2h 3m 4s", "5m 0s", "42s"."""
    total = max(0, int(seconds))
    days, rem = divmod(total, _SECONDS_PER_DAY)
    hours, rem = divmod(rem, 3600)
    minutes, secs = divmod(rem, 60)
    if days > 0:
        return f"{days}d {hours}h {minutes}m {secs}s"
    if hours > 0:
        return f"{hours}h {minutes}m {secs}s"
    if minutes > 0:
        return f"{minutes}m {secs}s"
    return f"{secs}s"
