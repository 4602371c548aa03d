"""Batch analysis pipeline.

One call turns a batch of (filename, text) pairs into the interval timeline:
parse → merge/sort → validate rows → segment → journey indices →
classification. Every call is independent; nothing is cached between calls.
"""
from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Iterable, Optional

from navtrack.models.base import NavStatus
from navtrack.models.interval import Interval
from navtrack.models.track_row import RawDataRow, TrackRow
from navtrack.modules.classifier import ClassificationThresholds, classify_interval
from navtrack.modules.ingest import read_file_contents
from navtrack.modules.journey_assembler import assign_journey_indices
from navtrack.modules.normalize import resolve_columns, to_track_row
from navtrack.modules.port_catalog import PortCatalog
from navtrack.modules.segmenter import SegmenterConfig, segment_intervals
from navtrack.schemas.analysis import (
    AnalysisData,
    AnalysisMeta,
    AnalysisResult,
    AnalysisSummary,
    ProcessedFile,
    RawDataMeta,
    RawDataResult,
)

logger = logging.getLogger(__name__)

NO_VALID_ROWS_ERROR = "no valid rows could be read"


@dataclass
class AnalysisOptions:
    """Everything the engine needs besides the input files."""
    catalog: PortCatalog = field(default_factory=PortCatalog.default)
    segmenter: SegmenterConfig = field(default_factory=SegmenterConfig)
    thresholds: ClassificationThresholds = field(default_factory=ClassificationThresholds)
    journey_departure_max_km: float = 3.0
    time_column: Optional[str] = None

    @classmethod
    def from_settings(cls, catalog: Optional[PortCatalog] = None) -> "AnalysisOptions":
        from navtrack.config import settings
        from navtrack.modules.port_catalog import load_port_catalog
        return cls(
            catalog=catalog if catalog is not None else load_port_catalog(),
            segmenter=SegmenterConfig.from_settings(),
            thresholds=ClassificationThresholds.from_settings(),
            journey_departure_max_km=settings.JOURNEY_DEPARTURE_MAX_KM,
            time_column=settings.TIME_COLUMN,
        )


def _read_rows(
    file_contents: Iterable[tuple[str, str]],
    delimiter: str,
    options: AnalysisOptions,
    extra_errors: Optional[list[str]] = None,
) -> tuple[list[tuple[TrackRow, dict]], AnalysisMeta, int]:
    batch = read_file_contents(file_contents, delimiter, options.time_column)
    meta = AnalysisMeta(
        processed_files=[ProcessedFile(**pf) for pf in batch.processed_files],
        errors=list(extra_errors or []) + batch.errors,
    )
    if not batch.records:
        return [], meta, 0

    columns = resolve_columns(batch.records[0].keys(), time_column=options.time_column)
    rows: list[tuple[TrackRow, dict]] = []
    dropped = 0
    for record in batch.records:
        row = to_track_row(record, columns)
        if row is None:
            dropped += 1
            continue
        rows.append((row, record))
    if dropped:
        logger.debug("Dropped %d rows without navigation status or timestamp", dropped)
    return rows, meta, len(batch.records)


def process_csv_data(
    file_contents: Iterable[tuple[str, str]],
    delimiter: str = ",",
    options: Optional[AnalysisOptions] = None,
    extra_errors: Optional[list[str]] = None,
) -> AnalysisResult:
    """
    Analyse a batch of CSV files.

    Returns a failed result (never raises) when no file yields a usable row;
    per-file problems are listed in meta.errors either way.
    """
    options = options or AnalysisOptions()
    rows, meta, _ = _read_rows(file_contents, delimiter, options, extra_errors)
    if not rows:
        logger.warning("Analysis failed: %s (%d file errors)", NO_VALID_ROWS_ERROR, len(meta.errors))
        return AnalysisResult(success=False, error=NO_VALID_ROWS_ERROR, meta=meta)

    track_rows = [row for row, _ in rows]
    intervals = segment_intervals(track_rows, options.catalog, options.segmenter)
    intervals = assign_journey_indices(intervals, options.journey_departure_max_km)
    intervals = annotate_classification(intervals, options.thresholds)

    summary = summarize(intervals, total_rows=len(track_rows), files_processed=len(meta.processed_files))
    logger.info(
        "Analysis complete: %d intervals from %d rows across %d files (%d errors)",
        summary.total_intervals, summary.total_rows, summary.files_processed, len(meta.errors),
    )
    return AnalysisResult(
        success=True,
        data=AnalysisData(intervals=intervals, summary=summary),
        meta=meta,
    )


def annotate_classification(
    intervals: list[Interval], thresholds: ClassificationThresholds,
) -> list[Interval]:
    return [
        iv.model_copy(update={"classification": classify_interval(iv, thresholds)})
        for iv in intervals
    ]


def summarize(intervals: list[Interval], total_rows: int, files_processed: int) -> AnalysisSummary:
    status_counts = Counter(iv.nav_status for iv in intervals)
    return AnalysisSummary(
        total_intervals=len(intervals),
        total_rows=total_rows,
        files_processed=files_processed,
        navigation_intervals=status_counts.get(NavStatus.MANEUVERING.value, 0),
        anchored_intervals=status_counts.get(NavStatus.DOCKED.value, 0),
        status_counts=dict(sorted(status_counts.items())),
        total_coordinate_points=sum(len(iv.coordinates) for iv in intervals),
    )


def read_raw_data(
    file_contents: Iterable[tuple[str, str]],
    delimiter: str = ",",
    options: Optional[AnalysisOptions] = None,
    extra_errors: Optional[list[str]] = None,
) -> RawDataResult:
    """Export every valid row with typed fields, original columns and closest port."""
    options = options or AnalysisOptions()
    rows, meta, _ = _read_rows(file_contents, delimiter, options, extra_errors)
    raw_meta = RawDataMeta(
        processed_files=meta.processed_files,
        errors=meta.errors,
        total_rows=len(rows),
        files_processed=len(meta.processed_files),
    )
    if not rows:
        return RawDataResult(success=False, error=NO_VALID_ROWS_ERROR, meta=raw_meta)

    data = [
        RawDataRow(
            **row.model_dump(),
            moment=row.moment,
            closest_port=options.catalog.nearest_port(row.latitude, row.longitude),
            columns=record,
        )
        for row, record in rows
    ]
    return RawDataResult(success=True, data=data, meta=raw_meta)
