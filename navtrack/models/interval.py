"""Interval: one contiguous run of samples sharing a navigation status."""
from __future__ import annotations

from typing import Optional

from pydantic import Field

from navtrack.models.base import ActivityType, CamelModel, EndReason, NavStatus
from navtrack.models.port import PortAnalysis


class CoordinatePoint(CamelModel):
    lat: float
    lon: float
    timestamp: str
    speed: Optional[float] = None
    nav_status: str


class Classification(CamelModel):
    type: ActivityType
    label: str
    start_port: Optional[str] = None
    end_port: Optional[str] = None
    reason: Optional[str] = None


class Interval(CamelModel):
    start_date: str
    start_time: str
    end_date: str
    end_time: str
    nav_status: str
    duration: str
    duration_seconds: int = Field(ge=0)
    avg_speed: Optional[float] = None
    sample_count: int = Field(ge=1)
    start_lat: Optional[float] = None
    start_lon: Optional[float] = None
    end_lat: Optional[float] = None
    end_lon: Optional[float] = None
    end_reason: EndReason
    start_port: Optional[PortAnalysis] = None
    end_port: Optional[PortAnalysis] = None
    # nearest port with no distance ceiling, used for classification
    start_nearest_port: Optional[PortAnalysis] = None
    end_nearest_port: Optional[PortAnalysis] = None
    journey_index: Optional[int] = None
    classification: Optional[Classification] = None
    coordinates: list[CoordinatePoint] = Field(default_factory=list)
    total_distance: float = Field(default=0.0, ge=0)

    @property
    def status(self) -> Optional[NavStatus]:
        return NavStatus.from_code(self.nav_status)

    @property
    def start_timestamp(self) -> str:
        return f"{self.start_date} {self.start_time}"

    @property
    def end_timestamp(self) -> str:
        return f"{self.end_date} {self.end_time}"

    @property
    def classification_ports(self) -> tuple[Optional[PortAnalysis], Optional[PortAnalysis]]:
        """Endpoint ports for classification, falling back to the tagged ports."""
        return (
            self.start_nearest_port or self.start_port,
            self.end_nearest_port or self.end_port,
        )
