"""Table structure derived from ``table`` line formats.

Consecutive lines carrying a ``table`` format form a table. A run of lines
sharing the same ``table`` value is a row, and each line of a row is a cell.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from .delta import is_set

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .document import EditorDocument, Line


@dataclass(frozen=True, slots=True)
class Table:
    rows: tuple[tuple[Line, ...], ...]
    prev_line: Line | None = None
    next_line: Line | None = None

    @property
    def lines(self) -> tuple[Line, ...]:
        return tuple(cell for row in self.rows for cell in row)

    def offset(self) -> int:
        return self.rows[0][0].index

    def length(self) -> int:
        return sum(cell.length for cell in self.lines)


@dataclass(frozen=True, slots=True)
class TablePosition:
    """Caret position expressed as table, row, cell and offset in the cell."""

    table: Table
    row: int
    cell: int
    offset: int

    @property
    def cells(self) -> tuple[Line, ...]:
        return self.table.rows[self.row]

    @property
    def line(self) -> Line:
        return self.cells[self.cell]


def _in_table(line: Line) -> bool:
    return is_set(line.formats.get("table"))


def find_table(document: EditorDocument, index: int) -> TablePosition | None:
    """Locate the table cell holding ``index``."""
    line, offset = document.get_line(index)
    if line is None or not _in_table(line):
        return None
    lines = document.lines()
    position = next(i for i, candidate in enumerate(lines) if candidate.index == line.index)
    start = position
    while start > 0 and _in_table(lines[start - 1]):
        start -= 1
    stop = position
    while stop + 1 < len(lines) and _in_table(lines[stop + 1]):
        stop += 1

    rows: list[list[Line]] = []
    row_index = cell_index = 0
    for current in lines[start : stop + 1]:
        if not rows or rows[-1][-1].formats.get("table") != current.formats.get("table"):
            rows.append([])
        rows[-1].append(current)
        if current.index == line.index:
            row_index = len(rows) - 1
            cell_index = len(rows[-1]) - 1

    table = Table(
        rows=tuple(tuple(row) for row in rows),
        prev_line=lines[start - 1] if start > 0 else None,
        next_line=lines[stop + 1] if stop + 1 < len(lines) else None,
    )
    return TablePosition(table, row_index, cell_index, offset)


def table_side(position: TablePosition) -> int | None:
    """Return -1 before the table, 1 after it, or None inside it.

    Single-row tables look at the cell (or the caret offset for single-cell
    tables); otherwise only the first and last rows are edges.
    """
    rows = position.table.rows
    if len(rows) == 1:
        if len(position.cells) == 1:
            return -1 if position.offset == 0 else 1
        return -1 if position.cell == 0 else 1
    if position.row == 0:
        return -1
    if position.row == len(rows) - 1:
        return 1
    return None


__all__ = ["Table", "TablePosition", "find_table", "table_side"]
