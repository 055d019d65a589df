from __future__ import annotations

import zipfile
from collections.abc import Iterator
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path

from openpyxl import Workbook, load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from .grid import SheetGrid

"""Workbook I/O for inspection reports.

The workbook is loaded twice from the same bytes:

1. with formulas, rich text and styles (this copy is mutated and saved back),
2. with ``data_only=True`` to read the values Excel cached for formulas.

openpyxl keeps merges, number formats, fonts, fills and borders on round trip,
which is what the rewritten report needs. Charts and images are not preserved
by openpyxl.
"""

__all__ = [
    "LoadedReport",
    "WorkbookReadError",
    "iter_sheet_grids",
    "load_report",
    "load_report_file",
    "save_report",
]


class WorkbookReadError(Exception):
    """Raised when bytes are not a readable .xlsx container."""


@dataclass
class LoadedReport:
    workbook: Workbook
    cached: Workbook | None = None  # data_only ビュー


def load_report(data: bytes) -> LoadedReport:
    """Load report bytes into a mutable workbook plus its cached-values view."""
    try:
        workbook = load_workbook(BytesIO(data), rich_text=True)
        cached = load_workbook(BytesIO(data), data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError, ValueError, OSError) as e:
        raise WorkbookReadError(f"not a readable .xlsx workbook: {e}") from e
    return LoadedReport(workbook=workbook, cached=cached)


def load_report_file(path: Path) -> LoadedReport:
    try:
        data = path.read_bytes()
    except OSError as e:
        raise WorkbookReadError(f"cannot read {path}: {e}") from e
    return load_report(data)


def save_report(workbook: Workbook) -> bytes:
    buffer = BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def iter_sheet_grids(report: LoadedReport) -> Iterator[SheetGrid]:
    """Yield a grid per worksheet in workbook order (chart sheets skipped)."""
    for ws in report.workbook.worksheets:
        cached_ws = None
        if report.cached is not None and ws.title in report.cached.sheetnames:
            cached_ws = report.cached[ws.title]
        yield SheetGrid(ws, cached_ws)
