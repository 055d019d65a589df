from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

from openpyxl.cell.cell import MergedCell
from openpyxl.worksheet.worksheet import Worksheet

from .values import Primitive, RawCellValue, normalize, raw_cell_value

"""Row/column grid view over openpyxl worksheets.

The rewriter only needs three things from a spreadsheet: populated rows in
order, cells addressed by 0-based column index, and the ability to write a
value (and a number format) back. ``SheetGrid`` provides exactly that on top of
a worksheet loaded with formulas, paired with the same worksheet loaded with
``data_only=True`` to expose cached formula results.
"""

__all__ = [
    "GridCell",
    "GridRow",
    "SheetGrid",
    "LINEAR_NUMBER_FORMAT",
]

LINEAR_NUMBER_FORMAT = "0.00"


@dataclass
class GridCell:
    """One addressable cell of a report grid."""
    cell: Any  # openpyxl Cell / MergedCell
    cached: Any = None  # data_only 側のセル

    @property
    def is_merge_follower(self) -> bool:
        """True for non-anchor cells of a merged range."""
        return isinstance(self.cell, MergedCell)

    @property
    def coordinate(self) -> str:
        return self.cell.coordinate

    @property
    def raw(self) -> RawCellValue:
        return raw_cell_value(self.cell, self.cached)

    @property
    def value(self) -> Primitive | None:
        return normalize(self.raw)

    @property
    def number_format(self) -> str:
        return self.cell.number_format

    def write_number(self, value: float, number_format: str = LINEAR_NUMBER_FORMAT) -> None:
        self.cell.value = value
        self.cell.number_format = number_format

    def write_text(self, text: str) -> None:
        self.cell.value = text


class GridRow:
    """A populated worksheet row; columns are 0-based (A=0)."""

    def __init__(self, grid: SheetGrid, number: int) -> None:
        self.grid = grid
        self.number = number  # 1-based Excel row number

    def cell(self, column: int) -> GridCell:
        return self.grid.cell(self.number, column)

    def value(self, column: int) -> Primitive | None:
        return self.cell(column).value

    def cells(self, columns: Any) -> list[GridCell]:
        return [self.cell(c) for c in columns]


class SheetGrid:
    """Grid view of one worksheet (plus its cached-values twin)."""

    def __init__(self, worksheet: Worksheet, cached_worksheet: Worksheet | None = None) -> None:
        self.worksheet = worksheet
        self.cached_worksheet = cached_worksheet

    @property
    def title(self) -> str:
        return self.worksheet.title

    def cell(self, row: int, column: int) -> GridCell:
        cell = self.worksheet.cell(row=row, column=column + 1)
        cached = None
        if self.cached_worksheet is not None:
            cached = self.cached_worksheet.cell(row=row, column=column + 1)
        return GridCell(cell=cell, cached=cached)

    def iter_rows(self) -> Iterator[GridRow]:
        """Yield populated rows in order; rows with no value at all are skipped."""
        for row in self.worksheet.iter_rows():
            if not row:
                continue
            if any(c.value is not None for c in row):
                yield GridRow(self, row[0].row)

    def has_data(self) -> bool:
        return next(self.iter_rows(), None) is not None
