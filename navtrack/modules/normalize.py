"""Track row normalization and validation.

Turns raw header-keyed records into typed TrackRow objects. Rows that cannot
anchor an interval (no navigation status, no "date time" timestamp) are
rejected here and nowhere else.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Iterable, Optional

from navtrack.config import settings, split_aliases
from navtrack.models.track_row import TrackRow
from navtrack.utils.timefmt import parse_timestamp_flexible, split_timestamp

NAV_STATUS_MARKER = "navstatus"


@dataclass(frozen=True)
class ColumnMap:
    """Resolved source columns for the fields the engine reads.

    A merged batch can mix header styles, so every field but the time column
    keeps all matching columns in alias order; a row reads the first one that
    holds a value.
    """
    time: str
    nav_status: tuple[str, ...] = ()
    lat: tuple[str, ...] = ()
    lon: tuple[str, ...] = ()
    speed: tuple[str, ...] = ()


def find_nav_status_columns(headers: Iterable[str]) -> tuple[str, ...]:
    """Headers whose name contains "navstatus" (case-insensitive), in order."""
    return tuple(h for h in headers if NAV_STATUS_MARKER in h.lower())


def find_nav_status_column(headers: Iterable[str]) -> Optional[str]:
    """First header whose name contains "navstatus" (case-insensitive)."""
    found = find_nav_status_columns(headers)
    return found[0] if found else None


def _find_aliases(headers: list[str], aliases: list[str]) -> tuple[str, ...]:
    # Exact matches first, then case-insensitive ones
    found = [alias for alias in aliases if alias in headers]
    for alias in aliases:
        for header in headers:
            if header.lower() == alias.lower() and header not in found:
                found.append(header)
    return tuple(found)


def resolve_columns(
    headers: Iterable[str],
    time_column: str | None = None,
    lat_aliases: list[str] | None = None,
    lon_aliases: list[str] | None = None,
    speed_aliases: list[str] | None = None,
) -> ColumnMap:
    headers = list(headers)
    return ColumnMap(
        time=time_column or settings.TIME_COLUMN,
        nav_status=find_nav_status_columns(headers),
        lat=_find_aliases(headers, lat_aliases or split_aliases(settings.LAT_COLUMNS)),
        lon=_find_aliases(headers, lon_aliases or split_aliases(settings.LON_COLUMNS)),
        speed=_find_aliases(headers, speed_aliases or split_aliases(settings.SPEED_COLUMNS)),
    )


def parse_float(value: Any) -> Optional[float]:
    """Finite float or None for missing, blank, or non-numeric values."""
    if value is None:
        return None
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        result = float(value)
    else:
        text = str(value).strip()
        if not text:
            return None
        try:
            result = float(text)
        except ValueError:
            return None
    return result if math.isfinite(result) else None


def parse_latitude(value: Any) -> Optional[float]:
    lat = parse_float(value)
    if lat is None or not (-90 <= lat <= 90):
        return None
    return lat


def parse_longitude(value: Any) -> Optional[float]:
    lon = parse_float(value)
    if lon is None or not (-180 <= lon <= 180):
        return None
    return lon


def parse_speed(value: Any) -> Optional[float]:
    """Speed in knots; negative readings are treated as not available."""
    speed = parse_float(value)
    if speed is None or speed < 0:
        return None
    return speed


def _cell(record: dict[str, Any], columns: Iterable[str]) -> Any:
    for column in columns:
        value = record.get(column)
        if value is not None and str(value).strip():
            return value
    return None


def validate_track_record(record: dict[str, Any], columns: ColumnMap) -> str | None:
    """
    Validate a single raw record.
    Returns an error string if the row cannot anchor an interval, None if valid.
    """
    if _cell(record, columns.nav_status) is None:
        return "Missing navigation status"

    ts = record.get(columns.time)
    if ts is None:
        return "Missing timestamp"
    if split_timestamp(str(ts)) is None:
        return f"Timestamp without date and time parts {ts!r}"
    return None


def to_track_row(record: dict[str, Any], columns: ColumnMap) -> TrackRow | None:
    """Typed row for a valid record, None when validate_track_record rejects it."""
    if validate_track_record(record, columns) is not None:
        return None

    ts = str(record[columns.time]).strip()
    date_part, time_part = split_timestamp(ts)
    return TrackRow(
        timestamp=ts,
        date=date_part,
        time=time_part,
        latitude=parse_latitude(_cell(record, columns.lat)),
        longitude=parse_longitude(_cell(record, columns.lon)),
        speed=parse_speed(_cell(record, columns.speed)),
        nav_status=str(_cell(record, columns.nav_status)).strip(),
        moment=parse_timestamp_flexible(ts),
    )
