"""CSV data source loading."""

from __future__ import annotations

import csv
import io
import logging
from pathlib import Path
from typing import Callable, List, Union

from provisioner.errors import SourceParseError, SourceReadError

logger = logging.getLogger(__name__)

TabularData = List[List[str]]
PathLike = Union[str, Path]

__all__ = ["TabularData", "load", "parse_text", "read_text"]


def read_text(path: PathLike) -> str:
    """Return the full text content of ``path``."""

    resolved = Path(path).expanduser().resolve()
    try:
        with resolved.open("r", encoding="utf-8-sig", newline="") as handle:
            return handle.read()
    except (OSError, UnicodeDecodeError) as exc:
        raise SourceReadError(f"Failed to read CSV file {path}: {exc}", path=str(path)) from exc


def parse_text(text: str, *, source: str = "<string>") -> TabularData:
    """Parse comma-delimited ``text`` into rows of raw string cells.

    Empty lines are skipped.  No header row is consumed and no value is
    coerced, so formula-like cells such as ``=SUM(A1:A3)`` pass through as-is.
    """

    reader = csv.reader(io.StringIO(text, newline=""), strict=True)
    rows: TabularData = []
    try:
        for row in reader:
            if not row:
                continue
            rows.append(row)
    except csv.Error as exc:
        raise SourceParseError(
            f"Malformed CSV in {source} near line {reader.line_num}: {exc}", path=source
        ) from exc
    return rows


def load(path: PathLike, *, read: Callable[[PathLike], str] = read_text) -> TabularData:
    """Read and parse the CSV file at ``path``."""

    rows = parse_text(read(path), source=str(path))
    logger.info("CSV file read successfully: %s (%d rows)", path, len(rows))
    return rows
