from __future__ import annotations

from datetime import datetime

import pytest
from openpyxl import Workbook
from openpyxl.cell.rich_text import CellRichText, TextBlock
from openpyxl.cell.text import InlineFont

from inspection_rewriter.excel.values import (
    ErrorValue,
    FormulaResult,
    Hyperlink,
    RichText,
    normalize,
    raw_cell_value,
)


@pytest.mark.parametrize(
    "raw,expected",
    [
        (None, None),
        (12.5, 12.5),
        (3, 3),
        ("10.5 / 10.8", "10.5 / 10.8"),
        (FormulaResult(12.5), 12.5),
        (FormulaResult("30°15'"), "30°15'"),
        (FormulaResult(None), None),
        (FormulaResult(True), None),
        (ErrorValue("#DIV/0!"), None),
        (FormulaResult(ErrorValue("#N/A")), None),
        (RichText(("12", ",5")), "12,5"),
        (Hyperlink("12.5", "https://example.com"), "12.5"),
        (True, None),
        (datetime(2024, 1, 1), None),
    ],
)
def test_normalize(raw, expected):
    assert normalize(raw) == expected


def test_raw_cell_value_variants():
    wb = Workbook()
    ws = wb.active
    ws["A1"] = 12.5
    ws["A2"] = "=A1+1"
    ws["A3"] = CellRichText([TextBlock(InlineFont(b=True), "12"), ",5"])
    ws["A4"] = "12.5"
    ws["A4"].hyperlink = "https://example.com/a4"
    ws.merge_cells("B1:B2")

    assert raw_cell_value(ws["A1"]) == 12.5
    cached_ws = Workbook().active
    cached_ws["A2"] = 13.5
    assert raw_cell_value(ws["A2"], cached=cached_ws["A2"]) == FormulaResult(13.5)
    # openpyxl が書いたファイルにはキャッシュ値が無い
    assert normalize(raw_cell_value(ws["A2"])) is None
    assert raw_cell_value(ws["A3"]) == RichText(("12", ",5"))
    assert raw_cell_value(ws["A4"]) == Hyperlink("12.5", "https://example.com/a4")
    assert raw_cell_value(ws["B2"]) is None
    assert raw_cell_value(ws["C9"]) is None


def test_error_codes_are_not_values():
    wb = Workbook()
    ws = wb.active
    ws["A1"] = "#DIV/0!"
    ws["A2"] = "=1/0"
    cached_ws = Workbook().active
    cached_ws["A2"] = "#DIV/0!"

    assert ws["A1"].data_type == "e"
    assert raw_cell_value(ws["A1"]) == ErrorValue("#DIV/0!")
    assert normalize(raw_cell_value(ws["A1"])) is None
    # 数式のキャッシュ結果がエラーの場合も同様
    assert raw_cell_value(ws["A2"], cached=cached_ws["A2"]) == FormulaResult(ErrorValue("#DIV/0!"))
    assert normalize(raw_cell_value(ws["A2"], cached=cached_ws["A2"])) is None
