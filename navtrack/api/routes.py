from __future__ import annotations

import logging
from functools import lru_cache
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile

from navtrack.config import settings
from navtrack.modules.activity import activity_breakdown
from navtrack.modules.ingest import resolve_delimiter
from navtrack.modules.journey_assembler import build_journeys
from navtrack.modules.pipeline import AnalysisOptions, process_csv_data, read_raw_data
from navtrack.modules.port_catalog import PortCatalog, load_port_catalog
from navtrack.modules.route_assembler import build_routes
from navtrack.schemas.analysis import (
    ActivitiesResponse,
    AnalysisResult,
    JourneysResponse,
    NearestPortResponse,
    PortsResponse,
    RoutesResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@lru_cache(maxsize=1)
def get_catalog() -> PortCatalog:
    return load_port_catalog()


def get_options(catalog: PortCatalog = Depends(get_catalog)) -> AnalysisOptions:
    return AnalysisOptions.from_settings(catalog=catalog)


def _check_upload_size(file: UploadFile) -> None:
    """Reject uploads exceeding MAX_UPLOAD_SIZE_MB."""
    file.file.seek(0, 2)  # seek to end
    size_mb = file.file.tell() / (1024 * 1024)
    file.file.seek(0)  # reset
    if size_mb > settings.MAX_UPLOAD_SIZE_MB:
        raise HTTPException(
            status_code=413,
            detail=f"File too large ({size_mb:.1f} MB). Max: {settings.MAX_UPLOAD_SIZE_MB} MB.",
        )


def _read_uploads(files: list[UploadFile]) -> tuple[list[tuple[str, str]], list[str]]:
    """Decode uploads as UTF-8 text; undecodable files become error entries."""
    contents: list[tuple[str, str]] = []
    errors: list[str] = []
    for file in files:
        _check_upload_size(file)
        name = file.filename or "upload.csv"
        try:
            contents.append((name, file.file.read().decode("utf-8-sig")))
        except UnicodeDecodeError as exc:
            logger.warning("Could not decode upload %s: %s", name, exc)
            errors.append(f"Error processing {name}: {exc}")
    return contents, errors


def _analyze_uploads(files: list[UploadFile], delimiter: str, options: AnalysisOptions) -> AnalysisResult:
    contents, errors = _read_uploads(files)
    return process_csv_data(contents, resolve_delimiter(delimiter), options, extra_errors=errors)


def _require_success(result: AnalysisResult) -> AnalysisResult:
    if not result.success:
        raise HTTPException(
            status_code=422,
            detail={"error": result.error, "errors": result.meta.errors},
        )
    return result


# ---------------------------------------------------------------------------
# Analysis
# ---------------------------------------------------------------------------

@router.post("/analyze", tags=["analysis"])
def analyze(
    files: list[UploadFile] = File(...),
    delimiter: str = Form(","),
    options: AnalysisOptions = Depends(get_options),
):
    """Segment uploaded CSV files into intervals with ports, journeys and classification."""
    result = _analyze_uploads(files, delimiter, options)
    return result.model_dump(by_alias=True)


@router.post("/raw", tags=["analysis"])
def raw_data(
    files: list[UploadFile] = File(...),
    delimiter: str = Form(","),
    options: AnalysisOptions = Depends(get_options),
):
    """Return every valid row with typed fields, original columns and closest port."""
    contents, errors = _read_uploads(files)
    result = read_raw_data(contents, resolve_delimiter(delimiter), options, extra_errors=errors)
    return result.model_dump(by_alias=True)


@router.post("/journeys", tags=["analysis"])
def journeys(
    files: list[UploadFile] = File(...),
    delimiter: str = Form(","),
    options: AnalysisOptions = Depends(get_options),
):
    """Journey summaries plus the indexed intervals."""
    result = _require_success(_analyze_uploads(files, delimiter, options))
    intervals = result.data.intervals
    return JourneysResponse(journeys=build_journeys(intervals), intervals=intervals).model_dump(by_alias=True)


@router.post("/routes", tags=["analysis"])
def routes(
    files: list[UploadFile] = File(...),
    delimiter: str = Form(","),
    options: AnalysisOptions = Depends(get_options),
):
    """Port-to-port routes found in the uploaded tracks."""
    result = _require_success(_analyze_uploads(files, delimiter, options))
    found = build_routes(result.data.intervals, options.thresholds)
    return RoutesResponse(routes=found).model_dump(by_alias=True)


@router.post("/activities", tags=["analysis"])
def activities(
    files: list[UploadFile] = File(...),
    delimiter: str = Form(","),
    options: AnalysisOptions = Depends(get_options),
):
    """Time spent per activity (docked, maneuvering, transit, undefined)."""
    result = _require_success(_analyze_uploads(files, delimiter, options))
    shares = activity_breakdown(result.data.intervals, options.thresholds)
    return ActivitiesResponse(
        activities=shares, total_seconds=sum(s.seconds for s in shares),
    ).model_dump(by_alias=True)


# ---------------------------------------------------------------------------
# Ports
# ---------------------------------------------------------------------------

@router.get("/ports", tags=["ports"])
def list_ports(catalog: PortCatalog = Depends(get_catalog)):
    return PortsResponse(ports=list(catalog.ports)).model_dump(by_alias=True)


@router.get("/ports/nearest", tags=["ports"])
def nearest_port(
    lat: float = Query(..., ge=-90, le=90),
    lon: float = Query(..., ge=-180, le=180),
    catalog: PortCatalog = Depends(get_catalog),
    max_km: Optional[float] = Query(None, ge=0),
):
    """Nearest port to a coordinate, optionally capped at max_km, plus every port distance."""
    if max_km is None:
        nearest = catalog.nearest_port(lat, lon)
    else:
        nearest = catalog.nearest_port_within(lat, lon, max_km)
    return NearestPortResponse(
        nearest=nearest, all_distances=catalog.all_distances(lat, lon),
    ).model_dump(by_alias=True)
