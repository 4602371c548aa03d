"""Journey index assignment.

A journey starts whenever the vessel is docked close to a port it has not
just departed from. Intervals before the first such departure carry index 0.
"""
from __future__ import annotations

import logging
from typing import Optional, Sequence

from navtrack.models.base import NavStatus
from navtrack.models.interval import Interval
from navtrack.models.journey import Journey

logger = logging.getLogger(__name__)

INITIAL_JOURNEY_INDEX = 0
UNKNOWN_PORT = "Unknown"


def _is_departure(interval: Interval, position: int, last_port: Optional[str], max_km: float) -> bool:
    port = interval.start_port
    if interval.nav_status != NavStatus.DOCKED or port is None or port.distance > max_km:
        return False
    return position == 0 or port.name != last_port


def assign_journey_indices(
    intervals: Sequence[Interval], departure_max_km: float = 3.0,
) -> list[Interval]:
    """Return copies of the intervals with journey_index filled in.

    The input list is not modified.
    """
    current_index = INITIAL_JOURNEY_INDEX
    last_port: Optional[str] = None
    result: list[Interval] = []

    for position, interval in enumerate(intervals):
        if _is_departure(interval, position, last_port, departure_max_km):
            current_index += 1
            last_port = interval.start_port.name
        result.append(interval.model_copy(update={"journey_index": current_index}))

    logger.debug("Assigned %d journey indices over %d intervals", current_index, len(result))
    return result


def build_journeys(intervals: Sequence[Interval]) -> list[Journey]:
    """Summarise indexed intervals as one Journey per index, ordered by index.

    The journey's start port is taken from the first interval carrying the
    index; intervals without an index count toward journey 0.
    """
    journeys: dict[int, Journey] = {}
    for interval in intervals:
        index = interval.journey_index or INITIAL_JOURNEY_INDEX
        journey = journeys.get(index)
        if journey is None:
            start_port = interval.start_port.name if interval.start_port else UNKNOWN_PORT
            journeys[index] = Journey(index=index, start_port=start_port, interval_count=1)
        else:
            journey.interval_count += 1
    return [journeys[i] for i in sorted(journeys)]
