"""Port-to-port route aggregate."""
from __future__ import annotations

from typing import Optional

from pydantic import Field

from navtrack.models.activity import ActivityShare
from navtrack.models.base import CamelModel
from navtrack.models.interval import Interval


class Route(CamelModel):
    id: str
    start_port: str
    end_port: str
    start_time: str
    end_time: str
    total_duration: str
    total_seconds: int = Field(ge=0)
    avg_speed: Optional[float] = None
    # Straight line between the first start and the last end position (km)
    distance: float = Field(ge=0)
    intervals: list[Interval] = Field(default_factory=list)
    activity_breakdown: list[ActivityShare] = Field(default_factory=list)
