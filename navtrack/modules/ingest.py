"""Track CSV ingestion module.

Splits delimited text into header-keyed records, validates the header, and
merges several files into one chronologically sorted record list. Invalid
files are reported as error strings, never raised.
"""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Optional

import polars as pl

from navtrack.config import settings
from navtrack.modules.normalize import find_nav_status_column
from navtrack.utils.timefmt import parse_timestamp_flexible

logger = logging.getLogger(__name__)

TAB_TOKENS = frozenset({"\\t", "tab", "\t"})

_MOMENT_COLUMN = "__moment"
_FALLBACK_COLUMN = "__raw_sort_key"


def resolve_delimiter(delimiter: Optional[str]) -> str:
    """Map the user-facing delimiter selector to the actual separator."""
    if delimiter is None or delimiter == "":
        return settings.DEFAULT_DELIMITER
    if delimiter in TAB_TOKENS or delimiter.lower() == "tab":
        return "\t"
    return delimiter


def parse_csv_text(
    text: str, delimiter: str = ",", time_column: str | None = None,
) -> list[dict[str, Any]]:
    """
    Split CSV text into records keyed by header name.

    Returns an empty list when the text has no data rows or when the header
    lacks a "navstatus" column or an exact time column.
    """
    if not text or not text.strip():
        return []
    time_column = time_column or settings.TIME_COLUMN
    sep = resolve_delimiter(delimiter)

    # Handle UTF-8 BOM left over from Excel exports
    text = text.lstrip("\ufeff")
    lines = text.replace("\r\n", "\n").replace("\r", "\n").strip().split("\n")
    if len(lines) < 2:
        return []

    headers = [h.strip() for h in lines[0].split(sep)]
    if find_nav_status_column(headers) is None or time_column not in headers:
        return []
    keys = [h or f"column_{idx}" for idx, h in enumerate(headers)]

    records: list[dict[str, Any]] = []
    for line in lines[1:]:
        values = [v.strip() for v in line.split(sep)]
        row: dict[str, Any] = {}
        for idx, key in enumerate(keys):
            value = values[idx] if idx < len(values) else None
            row[key] = value if value else None
        records.append(row)
    return records


@dataclass
class FileBatch:
    """Per-file outcome of reading a batch."""
    records: list[dict[str, Any]] = field(default_factory=list)
    processed_files: list[dict[str, Any]] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


def read_file_contents(
    file_contents: Iterable[tuple[str, str]],
    delimiter: str = ",",
    time_column: str | None = None,
) -> FileBatch:
    """Parse every (name, text) pair; unusable files land in errors."""
    batch = FileBatch()
    per_file: list[list[dict[str, Any]]] = []
    for name, content in file_contents:
        try:
            rows = parse_csv_text(content, delimiter, time_column)
        except Exception as exc:
            logger.warning("Failed to parse %s: %s", name, exc)
            batch.errors.append(f"Error processing {name}: {exc}")
            continue
        if not rows:
            logger.warning("File has no valid data: %s", name)
            batch.errors.append(f"File has no valid data: {name}")
            continue
        per_file.append(rows)
        batch.processed_files.append({"file": name, "rows": len(rows)})

    batch.records = merge_sorted(per_file, time_column)
    return batch


def merge_sorted(
    per_file: list[list[dict[str, Any]]], time_column: str | None = None,
) -> list[dict[str, Any]]:
    """Concatenate record lists and sort them by timestamp.

    Rows with a parseable timestamp come first in chronological order; the
    rest follow in lexicographic order of the raw string. The sort is stable,
    so equal timestamps keep their file order.
    """
    time_column = time_column or settings.TIME_COLUMN
    frames = [_records_to_frame(rows) for rows in per_file if rows]
    if not frames:
        return []

    df = pl.concat(frames, how="diagonal")
    moments = pl.Series(
        _MOMENT_COLUMN,
        [parse_timestamp_flexible(ts) for ts in df[time_column].to_list()],
        dtype=pl.Datetime("us"),
    )
    # raw string is a sort key only for rows without a parsed moment
    fallback = (
        pl.when(pl.col(_MOMENT_COLUMN).is_null())
        .then(pl.col(time_column))
        .alias(_FALLBACK_COLUMN)
    )
    df = (
        df.with_columns(moments)
        .with_columns(fallback)
        .sort([_MOMENT_COLUMN, _FALLBACK_COLUMN], nulls_last=True, maintain_order=True)
        .drop([_MOMENT_COLUMN, _FALLBACK_COLUMN])
    )
    return df.to_dicts()


def _records_to_frame(rows: list[dict[str, Any]]) -> pl.DataFrame:
    columns = list(rows[0].keys())
    return pl.DataFrame(
        {col: [row.get(col) for row in rows] for col in columns},
        schema={col: pl.Utf8 for col in columns},
    )


def read_text_file(path: str | Path) -> str:
    """Read a file as text, tolerating a UTF-8 BOM."""
    return Path(path).read_text(encoding="utf-8-sig")


def load_files(
    paths: Iterable[str | Path], max_workers: int | None = None,
) -> tuple[list[tuple[str, str]], list[str]]:
    """Read files concurrently and join them in argument order.

    Returns (file_contents, errors) where unreadable files only contribute
    an error string.
    """
    paths = [Path(p) for p in paths]
    workers = max(1, max_workers or settings.FILE_READ_WORKERS)
    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = [pool.submit(read_text_file, p) for p in paths]

    contents: list[tuple[str, str]] = []
    errors: list[str] = []
    for path, future in zip(paths, futures):
        try:
            contents.append((path.name, future.result()))
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Could not read %s: %s", path, exc)
            errors.append(f"Could not read {path.name}: {exc}")
    return contents, errors
