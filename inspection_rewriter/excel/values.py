from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

from openpyxl.cell.rich_text import CellRichText, TextBlock
from openpyxl.worksheet.formula import ArrayFormula, DataTableFormula

"""Cell value normalization.

openpyxl hands back cell contents in several shapes: plain numbers and strings,
formula text (``"=C5+0.1"``) whose computed result lives in a second,
``data_only`` load of the workbook, rich text made of runs, and strings that
carry a hyperlink. Excel error codes (``#DIV/0!``, ``#N/A``) show up either
typed into a cell or as the cached result of a formula. :func:`raw_cell_value`
maps a cell to a closed set of variants and :func:`normalize` reduces every
variant to ``None``, a number or a string.
"""

__all__ = [
    "ErrorValue",
    "FormulaResult",
    "Hyperlink",
    "RawCellValue",
    "RichText",
    "normalize",
    "raw_cell_value",
]


@dataclass(frozen=True)
class ErrorValue:
    """Excel error code such as ``#DIV/0!``; never a measurement."""
    code: str


@dataclass(frozen=True)
class FormulaResult:
    """Cached result of a formula cell (None if the file carries no cache)."""
    result: Any


@dataclass(frozen=True)
class RichText:
    """Text made of formatted runs."""
    runs: tuple[str, ...]


@dataclass(frozen=True)
class Hyperlink:
    """Display text of a cell pointing to ``target``."""
    text: str
    target: str | None = None


Primitive = Union[int, float, str]
RawCellValue = Union[None, int, float, str, ErrorValue, FormulaResult, RichText, Hyperlink, Any]

_TYPE_ERROR = "e"


def _is_primitive(value: Any) -> bool:
    return isinstance(value, (int, float, str)) and not isinstance(value, bool)


def _cached_result(cached: Any) -> Any:
    if cached is None or cached.value is None:
        return None
    if getattr(cached, "data_type", None) == _TYPE_ERROR:
        return ErrorValue(str(cached.value))
    return cached.value


def raw_cell_value(cell: Any, cached: Any = None) -> RawCellValue:
    """Classify an openpyxl cell into a raw value variant.

    Args:
        cell: openpyxl ``Cell`` or ``MergedCell``
        cached: Cell of the same coordinate in the ``data_only`` workbook

    Returns:
        None, a primitive, an :class:`ErrorValue`, a :class:`FormulaResult`,
        :class:`RichText`, :class:`Hyperlink` or the unrecognized object itself
    """
    value = cell.value
    if value is None:
        return None
    if getattr(cell, "data_type", None) == _TYPE_ERROR:
        return ErrorValue(str(value))
    if isinstance(value, (ArrayFormula, DataTableFormula)) or getattr(cell, "data_type", None) == "f":
        return FormulaResult(_cached_result(cached))
    if isinstance(value, CellRichText):
        return RichText(tuple(run.text if isinstance(run, TextBlock) else str(run) for run in value))
    link = getattr(cell, "hyperlink", None)
    if link is not None and isinstance(value, str):
        return Hyperlink(text=value, target=link.target)
    return value


def normalize(raw: RawCellValue) -> Primitive | None:
    """Reduce a raw cell value to None, a number or a string."""
    if raw is None:
        return None
    if _is_primitive(raw):
        return raw
    if isinstance(raw, ErrorValue):
        return None
    if isinstance(raw, FormulaResult):
        # ネストした構造体の結果は扱わない
        return raw.result if _is_primitive(raw.result) else None
    if isinstance(raw, RichText):
        return "".join(raw.runs)
    if isinstance(raw, Hyperlink):
        return raw.text
    return None
