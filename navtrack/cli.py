"""navtrack CLI: vessel track analysis from GPS/AIS CSV logs.

Commands:
  analyze     segment files into intervals (table or JSON)
  journeys    journey summaries
  routes      port-to-port routes
  activities  time spent per activity
  raw         normalized rows with their closest port (JSON)
  ports       port catalog or nearest-port lookup
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from navtrack.config import settings
from navtrack.models.base import nav_status_label
from navtrack.modules.activity import activity_breakdown
from navtrack.modules.ingest import load_files, resolve_delimiter
from navtrack.modules.journey_assembler import build_journeys
from navtrack.modules.pipeline import AnalysisOptions, process_csv_data, read_raw_data
from navtrack.modules.port_catalog import PortCatalog, load_port_catalog
from navtrack.modules.route_assembler import build_routes
from navtrack.schemas.analysis import AnalysisResult
from navtrack.utils.timefmt import format_duration_with_units

app = typer.Typer(
    name="navtrack",
    help="Vessel track analysis: intervals, ports, journeys and routes.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)
console = Console()


@app.callback()
def main(
    ctx: typer.Context,
    log_level: str = typer.Option(settings.LOG_LEVEL, "--log-level", help="Logging level"),
    ports_config: Optional[Path] = typer.Option(None, "--ports", help="Port catalog YAML"),
):
    logging.basicConfig(level=log_level.upper())
    ctx.obj = {"ports_config": ports_config}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _catalog(ctx: typer.Context) -> PortCatalog:
    path = (ctx.obj or {}).get("ports_config")
    try:
        return load_port_catalog(path)
    except ValueError as exc:
        console.print(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(1)


def _options(ctx: typer.Context, max_gap: Optional[float] = None) -> AnalysisOptions:
    options = AnalysisOptions.from_settings(catalog=_catalog(ctx))
    if max_gap is not None:
        options.segmenter = options.segmenter.model_copy(update={"max_gap_seconds": max_gap})
    return options


def _analyze(files: list[Path], delimiter: str, options: AnalysisOptions) -> AnalysisResult:
    contents, errors = load_files(files)
    return process_csv_data(contents, resolve_delimiter(delimiter), options, extra_errors=errors)


def _print_errors(errors: list[str]) -> None:
    for err in errors:
        console.print(f"[yellow]{escape(err)}[/yellow]")


def _require_success(result: AnalysisResult) -> AnalysisResult:
    _print_errors(result.meta.errors)
    if not result.success:
        console.print(f"[red]Analysis failed: {escape(result.error or '')}[/red]")
        raise typer.Exit(1)
    return result


def _fmt(value, digits: int = 2) -> str:
    if value is None:
        return "-"
    if isinstance(value, float):
        return f"{value:.{digits}f}"
    return str(value)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

FilesArg = typer.Argument(..., help="CSV files to analyse")
DelimiterOpt = typer.Option(",", "--delimiter", "-d", help="Column separator (use 'tab' for tabs)")


@app.command("analyze")
def analyze(
    ctx: typer.Context,
    files: list[Path] = FilesArg,
    delimiter: str = DelimiterOpt,
    max_gap: Optional[float] = typer.Option(None, "--max-gap", help="Gap in seconds that closes an interval"),
    as_json: bool = typer.Option(False, "--json", help="Print the full result as JSON"),
):
    """Segment track files into navigation-status intervals."""
    result = _analyze(files, delimiter, _options(ctx, max_gap))
    if as_json:
        typer.echo(result.model_dump_json(by_alias=True, indent=2))
        if not result.success:
            raise typer.Exit(1)
        return

    result = _require_success(result)
    summary = result.data.summary
    table = Table(title=f"Intervals ({summary.total_intervals})")
    table.add_column("Journey", style="cyan")
    table.add_column("Status")
    table.add_column("Start")
    table.add_column("End")
    table.add_column("Duration")
    table.add_column("Avg kn")
    table.add_column("Start port")
    table.add_column("End port")
    table.add_column("Activity")
    for iv in result.data.intervals:
        table.add_row(
            _fmt(iv.journey_index),
            nav_status_label(iv.nav_status),
            iv.start_timestamp,
            iv.end_timestamp,
            iv.duration,
            _fmt(iv.avg_speed),
            f"{iv.start_port.name} ({iv.start_port.distance} km)" if iv.start_port else "-",
            f"{iv.end_port.name} ({iv.end_port.distance} km)" if iv.end_port else "-",
            iv.classification.label if iv.classification else "-",
        )
    console.print(table)
    console.print(
        f"[green]{summary.total_rows} rows from {summary.files_processed} files, "
        f"{summary.total_intervals} intervals[/green]"
    )


@app.command("journeys")
def journeys(ctx: typer.Context, files: list[Path] = FilesArg, delimiter: str = DelimiterOpt):
    """List journeys (departures from a port) found in the tracks."""
    result = _require_success(_analyze(files, delimiter, _options(ctx)))
    found = build_journeys(result.data.intervals)
    table = Table(title=f"Journeys ({len(found)})")
    table.add_column("Index", style="cyan")
    table.add_column("Start port")
    table.add_column("Intervals")
    for journey in found:
        table.add_row(str(journey.index), journey.start_port, str(journey.interval_count))
    console.print(table)


@app.command("routes")
def routes(ctx: typer.Context, files: list[Path] = FilesArg, delimiter: str = DelimiterOpt):
    """List port-to-port routes."""
    options = _options(ctx)
    result = _require_success(_analyze(files, delimiter, options))
    found = build_routes(result.data.intervals, options.thresholds)
    if not found:
        console.print("[yellow]No routes found[/yellow]")
        return
    table = Table(title=f"Routes ({len(found)})")
    table.add_column("ID", style="cyan")
    table.add_column("From")
    table.add_column("To")
    table.add_column("Start")
    table.add_column("End")
    table.add_column("Duration")
    table.add_column("Avg kn")
    table.add_column("Distance (km)")
    for route in found:
        table.add_row(
            route.id, route.start_port, route.end_port, route.start_time, route.end_time,
            route.total_duration, _fmt(route.avg_speed), _fmt(route.distance),
        )
    console.print(table)


@app.command("activities")
def activities(ctx: typer.Context, files: list[Path] = FilesArg, delimiter: str = DelimiterOpt):
    """Show how long the vessel spent docked, maneuvering and in transit."""
    options = _options(ctx)
    result = _require_success(_analyze(files, delimiter, options))
    shares = activity_breakdown(result.data.intervals, options.thresholds)
    total = sum(s.seconds for s in shares)
    table = Table(title="Activity breakdown")
    table.add_column("Activity", style="cyan")
    table.add_column("Port")
    table.add_column("Intervals")
    table.add_column("Time")
    table.add_column("Share")
    for share in shares:
        pct = (share.seconds / total * 100) if total else 0.0
        table.add_row(
            share.name, share.port or "-", str(share.count),
            format_duration_with_units(share.seconds), f"{pct:.1f}%",
        )
    console.print(table)


@app.command("raw")
def raw(
    ctx: typer.Context,
    files: list[Path] = FilesArg,
    delimiter: str = DelimiterOpt,
    limit: Optional[int] = typer.Option(None, "--limit", min=1, help="Only print the first N rows"),
):
    """Print normalized rows with their closest port as JSON."""
    contents, errors = load_files(files)
    result = read_raw_data(contents, resolve_delimiter(delimiter), _options(ctx), extra_errors=errors)
    if limit is not None and result.data is not None:
        result = result.model_copy(update={"data": result.data[:limit]})
    typer.echo(result.model_dump_json(by_alias=True, indent=2))
    if not result.success:
        raise typer.Exit(1)


@app.command("ports")
def ports(
    ctx: typer.Context,
    lat: Optional[float] = typer.Option(None, "--lat", min=-90, max=90),
    lon: Optional[float] = typer.Option(None, "--lon", min=-180, max=180),
):
    """Show the port catalog, or distances from a coordinate with --lat/--lon."""
    catalog = _catalog(ctx)

    if (lat is None) != (lon is None):
        console.print("[red]Provide both --lat and --lon[/red]")
        raise typer.Exit(1)

    if lat is None:
        table = Table(title=f"Ports ({len(catalog)})")
        table.add_column("Name", style="cyan")
        table.add_column("Lat")
        table.add_column("Lon")
        for port in catalog:
            table.add_row(port.name, f"{port.lat:.6f}", f"{port.lon:.6f}")
        console.print(table)
        return

    distances = catalog.all_distances(lat, lon)
    table = Table(title=f"Distances from ({lat:.4f}, {lon:.4f})")
    table.add_column("Port", style="cyan")
    table.add_column("Distance (km)")
    for entry in distances:
        table.add_row(entry.name, f"{entry.distance:.2f}")
    console.print(table)
    console.print(f"Nearest: [bold]{distances[0].name}[/bold] ({distances[0].distance:.2f} km)")


if __name__ == "__main__":
    app()
