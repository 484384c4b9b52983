"""A1 notation helpers: column letters, cell references and write ranges.

Spreadsheet columns are numbered in bijective base-26: ``A`` is 1, ``Z`` is
26 and ``AA`` follows as 27.  There is no zero digit, so the conversions below
shift by one on every step instead of treating the letters as plain base-26.

Sheet titles are always emitted single-quoted with embedded quotes doubled,
which is the form the Sheets API accepts for every title including ones that
contain spaces or punctuation.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Sequence

from provisioner.errors import InvalidReference

__all__ = [
    "CellReference",
    "WriteRange",
    "column_to_number",
    "compute_end_cell",
    "max_row_length",
    "number_to_column",
    "quote_sheet_title",
    "sheet_range",
]

_CELL_PATTERN = re.compile(r"([A-Z]+)([0-9]+)")


def column_to_number(letters: str) -> int:
    """Return the 1-based column index for ``letters`` (``"AA"`` -> 27)."""

    if not letters:
        raise InvalidReference("Column letters must not be empty")
    result = 0
    for char in letters:
        if not "A" <= char <= "Z":
            raise InvalidReference(f"Invalid column letters: {letters!r}")
        result = result * 26 + (ord(char) - 64)
    return result


def number_to_column(index: int) -> str:
    """Return the column letters for a 1-based column ``index``."""

    if index < 1:
        raise InvalidReference(f"Column index must be >= 1, got {index}")
    letters: List[str] = []
    while index:
        index, remainder = divmod(index - 1, 26)
        letters.append(chr(65 + remainder))
    return "".join(reversed(letters))


@dataclass(frozen=True)
class CellReference:
    """A single cell addressed by 1-based ``column`` and ``row``."""

    column: int
    row: int

    def __post_init__(self) -> None:
        if self.column < 1 or self.row < 1:
            raise InvalidReference(
                f"Cell coordinates must be positive, got column={self.column} row={self.row}"
            )

    @classmethod
    def parse(cls, text: str) -> "CellReference":
        """Parse ``text`` such as ``"B7"`` into a :class:`CellReference`."""

        candidate = (text or "").strip().upper()
        match = _CELL_PATTERN.fullmatch(candidate)
        if not match:
            raise InvalidReference(f"Invalid cell reference: {text!r}")
        row = int(match.group(2))
        if row < 1:
            raise InvalidReference(f"Invalid cell reference: {text!r}")
        return cls(column=column_to_number(match.group(1)), row=row)

    @property
    def column_letters(self) -> str:
        return number_to_column(self.column)

    def __str__(self) -> str:
        return f"{self.column_letters}{self.row}"


def max_row_length(data: Sequence[Sequence[object]]) -> int:
    """Return the widest row length in ``data`` (0 for no rows)."""

    return max((len(row) for row in data), default=0)


def compute_end_cell(start_ref: str, data: Sequence[Sequence[object]]) -> CellReference:
    """Return the bottom-right cell covered when writing ``data`` at ``start_ref``.

    The width is taken from the longest row so ragged rows never shrink the
    region.
    """

    start = CellReference.parse(start_ref)
    width = max_row_length(data)
    if not data or width == 0:
        raise ValueError("Cannot compute a write region for empty data")
    return CellReference(column=start.column + width - 1, row=start.row + len(data) - 1)


def quote_sheet_title(title: str) -> str:
    """Return ``title`` quoted according to A1 notation rules.

    The title is taken verbatim, exactly as the sheet registry reports it;
    surrounding whitespace and quote characters are part of the name.
    """

    if not title:
        raise InvalidReference("Sheet title must not be empty")
    return "'" + title.replace("'", "''") + "'"


def sheet_range(title: str) -> str:
    """Return the A1 range addressing every cell of the sheet ``title``."""

    return quote_sheet_title(title)


@dataclass(frozen=True)
class WriteRange:
    """Rectangular target region on a named sheet."""

    sheet_name: str
    start: CellReference
    end: CellReference

    @classmethod
    def for_data(cls, sheet_name: str, start_ref: str, data: Sequence[Sequence[object]]) -> "WriteRange":
        start = CellReference.parse(start_ref)
        return cls(sheet_name=sheet_name, start=start, end=compute_end_cell(start_ref, data))

    def to_a1(self) -> str:
        return f"{quote_sheet_title(self.sheet_name)}!{self.start}:{self.end}"

    def __str__(self) -> str:
        return self.to_a1()
