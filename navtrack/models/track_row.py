"""Typed track sample, validated once at the parse boundary."""
from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import Field

from navtrack.models.base import CamelModel, NavStatus
from navtrack.models.port import PortAnalysis


class TrackRow(CamelModel):
    timestamp: str
    date: str
    time: str
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    speed: Optional[float] = None
    nav_status: str
    # Parsed date-time of `timestamp`; None when the string is not a date-time
    moment: Optional[datetime] = Field(default=None, exclude=True)

    @property
    def status(self) -> Optional[NavStatus]:
        return NavStatus.from_code(self.nav_status)

    @property
    def has_position(self) -> bool:
        return self.latitude is not None and self.longitude is not None


class RawDataRow(TrackRow):
    """A track sample exported together with its closest port and original columns."""

    closest_port: Optional[PortAnalysis] = None
    columns: dict[str, Any] = Field(default_factory=dict)
