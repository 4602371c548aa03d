"""Interval segmentation engine.

Scans chronologically sorted track rows and cuts them into intervals: a run
closes when the navigation status changes, when the time between two
consecutive rows exceeds MAX_GAP_SECONDS, or when the data ends.

Each closed run is summarised with its duration, average speed, sample
count, endpoint coordinates, nearby ports, in-run positions and path length.
"""
from __future__ import annotations

import logging
from datetime import datetime
from statistics import fmean
from typing import Iterable, Optional, Sequence

from pydantic import BaseModel

from navtrack.models.base import EndReason
from navtrack.models.interval import CoordinatePoint, Interval
from navtrack.models.port import PortAnalysis
from navtrack.models.track_row import TrackRow
from navtrack.modules.port_catalog import PortCatalog
from navtrack.utils.geo import path_length_km, round_km
from navtrack.utils.timefmt import (
    parse_timestamp_flexible,
    seconds_to_duration,
    time_of_day_diff_seconds,
)

logger = logging.getLogger(__name__)


class SegmenterConfig(BaseModel):
    max_gap_seconds: float = 0.6
    port_tag_max_km: float = 5.0

    model_config = {"frozen": True}

    @classmethod
    def from_settings(cls) -> "SegmenterConfig":
        from navtrack.config import settings
        return cls(
            max_gap_seconds=settings.MAX_GAP_SECONDS,
            port_tag_max_km=settings.PORT_TAG_MAX_KM,
        )


def has_time_gap(prev: TrackRow, current: TrackRow, max_gap_seconds: float) -> bool:
    """True when both timestamps parse and lie more than max_gap_seconds apart."""
    if prev.moment is None or current.moment is None:
        return False
    return abs((current.moment - prev.moment).total_seconds()) > max_gap_seconds


def segment_intervals(
    rows: Iterable[TrackRow],
    catalog: Optional[PortCatalog] = None,
    config: Optional[SegmenterConfig] = None,
) -> list[Interval]:
    """Cut a time-ordered row stream into intervals.

    A gap closes the open run at the previous row and starts a new run at the
    current row, whatever its status. A status change closes the run before
    the current row, which becomes the first row of the next run.
    """
    catalog = catalog or PortCatalog.default()
    config = config or SegmenterConfig()

    intervals: list[Interval] = []
    run: list[TrackRow] = []
    prev: Optional[TrackRow] = None

    for row in rows:
        if run and has_time_gap(prev, row, config.max_gap_seconds):
            intervals.append(_close_run(run, EndReason.TIME_GAP, catalog, config))
            run = [row]
        elif not run:
            run = [row]
        elif row.nav_status != run[0].nav_status:
            intervals.append(_close_run(run, EndReason.STATUS_CHANGE, catalog, config))
            run = [row]
        else:
            run.append(row)
        prev = row

    if run:
        intervals.append(_close_run(run, EndReason.END_OF_DATA, catalog, config))

    logger.debug("Segmented %d intervals", len(intervals))
    return sort_intervals(intervals)


def _close_run(
    run: Sequence[TrackRow],
    reason: EndReason,
    catalog: PortCatalog,
    config: SegmenterConfig,
) -> Interval:
    first, last = run[0], run[-1]
    seconds = time_of_day_diff_seconds(first.time, last.time)

    coordinates = [
        CoordinatePoint(
            lat=r.latitude,
            lon=r.longitude,
            timestamp=r.timestamp,
            speed=r.speed,
            nav_status=r.nav_status,
        )
        for r in run
        if r.has_position
    ]
    total_distance = path_length_km((p.lat, p.lon) for p in coordinates)
    start_nearest = catalog.nearest_port(first.latitude, first.longitude)
    end_nearest = catalog.nearest_port(last.latitude, last.longitude)

    return Interval(
        start_date=first.date,
        start_time=first.time,
        end_date=last.date,
        end_time=last.time,
        nav_status=first.nav_status,
        duration=seconds_to_duration(seconds),
        duration_seconds=seconds,
        avg_speed=average_speed(run),
        sample_count=len(run),
        start_lat=first.latitude,
        start_lon=first.longitude,
        end_lat=last.latitude,
        end_lon=last.longitude,
        end_reason=reason,
        start_port=_within(start_nearest, config.port_tag_max_km),
        end_port=_within(end_nearest, config.port_tag_max_km),
        start_nearest_port=start_nearest,
        end_nearest_port=end_nearest,
        coordinates=coordinates,
        total_distance=round_km(total_distance),
    )


def _within(port: Optional[PortAnalysis], max_km: float) -> Optional[PortAnalysis]:
    if port is None or port.distance > max_km:
        return None
    return port


def average_speed(rows: Sequence[TrackRow]) -> Optional[float]:
    """Mean of the available speeds, rounded to 2 decimals; None if there are none."""
    speeds = [r.speed for r in rows if r.speed is not None and r.speed >= 0]
    if not speeds:
        return None
    return round(fmean(speeds), 2)


def _start_sort_key(interval: Interval) -> tuple[bool, datetime, str]:
    raw = interval.start_timestamp
    moment = parse_timestamp_flexible(raw)
    return (moment is None, moment or datetime.min, raw)


def sort_intervals(intervals: list[Interval]) -> list[Interval]:
    """Stable sort by start date-time; unparseable starts go last, lexicographically."""
    return sorted(intervals, key=_start_sort_key)
