"""Pydantic schemas for the analysis result handed to rendering code."""
from __future__ import annotations

from typing import Optional

from pydantic import Field

from navtrack.models.activity import ActivityShare
from navtrack.models.base import CamelModel
from navtrack.models.interval import Interval
from navtrack.models.journey import Journey
from navtrack.models.port import Port, PortAnalysis
from navtrack.models.route import Route
from navtrack.models.track_row import RawDataRow


class ProcessedFile(CamelModel):
    file: str
    rows: int


class AnalysisMeta(CamelModel):
    processed_files: list[ProcessedFile] = []
    errors: list[str] = []


class AnalysisSummary(CamelModel):
    total_intervals: int
    total_rows: int
    files_processed: int
    navigation_intervals: int
    anchored_intervals: int
    status_counts: dict[str, int] = {}
    total_coordinate_points: int = 0


class AnalysisData(CamelModel):
    intervals: list[Interval]
    summary: AnalysisSummary


class AnalysisResult(CamelModel):
    success: bool
    data: Optional[AnalysisData] = None
    error: Optional[str] = None
    meta: AnalysisMeta = Field(default_factory=AnalysisMeta)


class RawDataMeta(AnalysisMeta):
    total_rows: int = 0
    files_processed: int = 0


class RawDataResult(CamelModel):
    success: bool
    data: Optional[list[RawDataRow]] = None
    error: Optional[str] = None
    meta: RawDataMeta = Field(default_factory=RawDataMeta)


class JourneysResponse(CamelModel):
    journeys: list[Journey]
    intervals: list[Interval]


class RoutesResponse(CamelModel):
    routes: list[Route]


class ActivitiesResponse(CamelModel):
    activities: list[ActivityShare]
    total_seconds: int


class NearestPortResponse(CamelModel):
    nearest: Optional[PortAnalysis] = None
    all_distances: list[PortAnalysis] = []


class PortsResponse(CamelModel):
    ports: list[Port]
