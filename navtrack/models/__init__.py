"""Domain models shared by the engine, the API and the CLI."""
from navtrack.models.base import ActivityType, CamelModel, EndReason, NavStatus
from navtrack.models.port import Port, PortAnalysis
from navtrack.models.track_row import RawDataRow, TrackRow
from navtrack.models.interval import Classification, CoordinatePoint, Interval
from navtrack.models.journey import Journey
from navtrack.models.activity import ActivityShare
from navtrack.models.route import Route

__all__ = [
    "ActivityShare",
    "ActivityType",
    "CamelModel",
    "Classification",
    "CoordinatePoint",
    "EndReason",
    "Interval",
    "Journey",
    "NavStatus",
    "Port",
    "PortAnalysis",
    "RawDataRow",
    "Route",
    "TrackRow",
]
