"""Route assembly.

A route runs from a berth (docked interval that starts and ends at the same
port) reached after being under way, up to the next such berth. Routes are
built independently of journey indices and need not agree with them.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from statistics import fmean
from typing import Optional, Sequence

from navtrack.models.base import UNDERWAY_STATUSES, NavStatus
from navtrack.models.interval import Interval
from navtrack.models.route import Route
from navtrack.modules.activity import UNKNOWN_PORT, activity_breakdown, interval_seconds
from navtrack.modules.classifier import DEFAULT_THRESHOLDS, ClassificationThresholds
from navtrack.utils.geo import haversine_km, is_valid_coordinate, round_km
from navtrack.utils.timefmt import seconds_to_duration

logger = logging.getLogger(__name__)

MIN_INTERVALS_FOR_ROUTES = 3


@dataclass
class _OpenRoute:
    origin: str
    intervals: list[Interval] = field(default_factory=list)


def _is_berth(interval: Interval) -> bool:
    return (
        interval.nav_status == NavStatus.DOCKED
        and interval.start_port is not None
        and interval.end_port is not None
        and interval.start_port.name == interval.end_port.name
    )


def _is_underway(interval: Optional[Interval]) -> bool:
    return interval is not None and interval.status in UNDERWAY_STATUSES


def build_routes(
    intervals: Sequence[Interval],
    thresholds: ClassificationThresholds = DEFAULT_THRESHOLDS,
) -> list[Route]:
    """Scan time-ordered intervals and return the port-to-port routes found."""
    routes: list[Route] = []
    if len(intervals) < MIN_INTERVALS_FOR_ROUTES:
        return routes

    current: Optional[_OpenRoute] = None
    last = len(intervals) - 1
    for i, interval in enumerate(intervals):
        prev = intervals[i - 1] if i > 0 else None
        nxt = intervals[i + 1] if i < last else None

        # Arrival at a berth after moving: close any open route, start a new one
        if _is_berth(interval) and _is_underway(prev):
            if current is not None:
                _complete_route(current, routes, thresholds)
            current = _OpenRoute(origin=interval.start_port.name)

        if current is None:
            continue
        current.intervals.append(interval)

        # Berth at another port right before leaving again ends the route here
        if (
            _is_berth(interval)
            and interval.start_port.name != current.origin
            and _is_underway(nxt)
        ):
            _complete_route(current, routes, thresholds)
            current = None

    if current is not None:
        _complete_route(current, routes, thresholds)

    logger.debug("Built %d routes from %d intervals", len(routes), len(intervals))
    return routes


def _complete_route(
    route: _OpenRoute, routes: list[Route], thresholds: ClassificationThresholds,
) -> None:
    if not route.intervals:
        return
    first, final = route.intervals[0], route.intervals[-1]
    origin = first.start_port.name if first.start_port else UNKNOWN_PORT

    destination = origin
    for interval in reversed(route.intervals):
        if interval.end_port is not None and interval.end_port.name != origin:
            destination = interval.end_port.name
            break

    total_seconds = sum(interval_seconds(iv) for iv in route.intervals)

    speeds = [iv.avg_speed for iv in route.intervals if iv.avg_speed is not None and iv.avg_speed > 0]
    avg_speed = round(fmean(speeds), 2) if speeds else None

    distance = 0.0
    if is_valid_coordinate(first.start_lat, first.start_lon) and is_valid_coordinate(final.end_lat, final.end_lon):
        distance = round_km(haversine_km(first.start_lat, first.start_lon, final.end_lat, final.end_lon))

    routes.append(Route(
        id=f"route_{len(routes) + 1}",
        start_port=origin,
        end_port=destination,
        start_time=first.start_timestamp,
        end_time=final.end_timestamp,
        total_duration=seconds_to_duration(total_seconds),
        total_seconds=total_seconds,
        avg_speed=avg_speed,
        distance=distance,
        intervals=list(route.intervals),
        activity_breakdown=activity_breakdown(route.intervals, thresholds),
    ))
