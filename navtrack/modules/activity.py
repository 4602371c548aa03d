"""Port activity breakdown.

Classifies intervals and totals the time spent per activity (docked at a
port, maneuvering at a port, transit between two ports, undefined), the
figures behind the activity pie chart.
"""
from __future__ import annotations

from typing import Iterable

from unidecode import unidecode

from navtrack.models.activity import ActivityShare
from navtrack.models.base import ActivityType
from navtrack.models.interval import Classification, Interval
from navtrack.modules.classifier import (
    DEFAULT_THRESHOLDS,
    REASON_CONDITIONS_NOT_MET,
    REASON_NO_PORT_DATA,
    ClassificationThresholds,
    classify_interval,
)
from navtrack.utils.timefmt import duration_to_seconds

UNKNOWN_PORT = "Unknown"


def port_slug(name: str) -> str:
    """Lower-case ASCII name without spaces, e.g. "Tánger Med" -> "tangermed"."""
    return "".join(unidecode(name).lower().split())


def activity_id(classification: Classification) -> str:
    kind = classification.type
    if kind in (ActivityType.DOCKED, ActivityType.MANEUVERING):
        return f"{kind.value}_{port_slug(classification.start_port)}"
    if kind == ActivityType.TRANSIT:
        return f"transit_{port_slug(classification.start_port)}_{port_slug(classification.end_port)}"
    return ActivityType.UNDEFINED.value


def _activity_port(classification: Classification) -> str:
    kind = classification.type
    if kind in (ActivityType.DOCKED, ActivityType.MANEUVERING):
        return classification.start_port
    if kind == ActivityType.TRANSIT:
        return f"{classification.start_port} → {classification.end_port}"
    if classification.reason == REASON_CONDITIONS_NOT_MET:
        return UNKNOWN_PORT
    return classification.label


def interval_seconds(interval: Interval) -> int:
    if interval.duration_seconds:
        return interval.duration_seconds
    return duration_to_seconds(interval.duration)


def activity_breakdown(
    intervals: Iterable[Interval],
    thresholds: ClassificationThresholds = DEFAULT_THRESHOLDS,
) -> list[ActivityShare]:
    """Group classified intervals by activity, longest total first.

    Intervals with no port on either end are left out.
    """
    groups: dict[str, ActivityShare] = {}
    for interval in intervals:
        classification = classify_interval(interval, thresholds)
        if classification.reason == REASON_NO_PORT_DATA:
            continue
        key = activity_id(classification)
        share = groups.get(key)
        if share is None:
            share = ActivityShare(
                id=key,
                name=classification.label,
                type=classification.type,
                port=_activity_port(classification),
                seconds=0,
                count=0,
            )
            groups[key] = share
        share.seconds += interval_seconds(interval)
        share.count += 1
    return sorted(groups.values(), key=lambda s: s.seconds, reverse=True)
