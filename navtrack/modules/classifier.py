"""Interval classification rules.

Maps (navigation status, start port, end port) to one of docked,
maneuvering, transit or undefined. Every consumer (interval annotation,
activity breakdown, route status breakdown) goes through classify().
"""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel

from navtrack.models.base import ActivityType, NavStatus
from navtrack.models.interval import Classification, Interval
from navtrack.models.port import PortAnalysis

REASON_NO_PORT_DATA = "no port data available"
REASON_TOO_FAR = "more than {km:g} km from any port"
REASON_CONDITIONS_NOT_MET = "conditions not met"


class ClassificationThresholds(BaseModel):
    """Distance ceilings (km). Comparisons are strict: a port at exactly
    docked_max_km does not count as docked."""
    docked_max_km: float = 4.0
    maneuvering_max_km: float = 10.0
    undefined_beyond_km: float = 40.0

    model_config = {"frozen": True}

    @classmethod
    def from_settings(cls) -> "ClassificationThresholds":
        from navtrack.config import settings
        return cls(
            docked_max_km=settings.DOCKED_MAX_KM,
            maneuvering_max_km=settings.MANEUVERING_MAX_KM,
            undefined_beyond_km=settings.UNDEFINED_BEYOND_KM,
        )


DEFAULT_THRESHOLDS = ClassificationThresholds()


def classify(
    nav_status: str,
    start_port: Optional[PortAnalysis],
    end_port: Optional[PortAnalysis],
    thresholds: ClassificationThresholds = DEFAULT_THRESHOLDS,
) -> Classification:
    """Classify one interval from its status code and endpoint ports."""
    if start_port is None or end_port is None:
        return Classification(
            type=ActivityType.UNDEFINED,
            label="Undefined",
            reason=REASON_NO_PORT_DATA,
        )

    same_port = start_port.name == end_port.name

    if (
        nav_status == NavStatus.DOCKED
        and same_port
        and start_port.distance < thresholds.docked_max_km
        and end_port.distance < thresholds.docked_max_km
    ):
        return Classification(
            type=ActivityType.DOCKED,
            label=f"Docked at {start_port.name}",
            start_port=start_port.name,
            end_port=end_port.name,
        )

    if (
        nav_status == NavStatus.MANEUVERING
        and same_port
        and start_port.distance < thresholds.maneuvering_max_km
        and end_port.distance < thresholds.maneuvering_max_km
    ):
        return Classification(
            type=ActivityType.MANEUVERING,
            label=f"Maneuvering at {start_port.name}",
            start_port=start_port.name,
            end_port=end_port.name,
        )

    if nav_status == NavStatus.NAVIGATING and not same_port:
        return Classification(
            type=ActivityType.TRANSIT,
            label=f"Transit {start_port.name} → {end_port.name}",
            start_port=start_port.name,
            end_port=end_port.name,
        )

    if max(start_port.distance, end_port.distance) > thresholds.undefined_beyond_km:
        return Classification(
            type=ActivityType.UNDEFINED,
            label="Undefined state",
            reason=REASON_TOO_FAR.format(km=thresholds.undefined_beyond_km),
        )
    return Classification(
        type=ActivityType.UNDEFINED,
        label="Undefined",
        reason=REASON_CONDITIONS_NOT_MET,
    )


def classify_interval(
    interval: Interval, thresholds: ClassificationThresholds = DEFAULT_THRESHOLDS,
) -> Classification:
    start_port, end_port = interval.classification_ports
    return classify(interval.nav_status, start_port, end_port, thresholds)
