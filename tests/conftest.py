# Shared pytest fixtures
from __future__ import annotations

import random
import tempfile
from collections.abc import Iterable
from io import BytesIO
from pathlib import Path

import pytest
from openpyxl import Workbook

# Header, two linear rows sharing a vertically merged tolerance, one angular row
SAMPLE_ROWS: list[list[object]] = [
    [None, "Característica", "Tol. sup.", "Tol. inf.", "Medida", "Medida", "Medida"],
    [None, "Diametro", 15, 10, 12.5, "16", "10.5 / 10.8"],
    [None, "Diametro", None, None, 9.0, None, "=E2"],
    [None, "Ang. chanfro", "31°00'", "30°00'", "30°30'", "31°10'", None],
]


def build_report(
    rows: Iterable[Iterable[object]] | None = None,
    *,
    merges: Iterable[str] = ("C2:C3", "D2:D3"),
    extra_sheets: Iterable[str] = (),
) -> Workbook:
    """Build an inspection report workbook (first sheet 'Relatorio')."""
    wb = Workbook()
    ws = wb.active
    ws.title = "Relatorio"
    for r, row in enumerate(SAMPLE_ROWS if rows is None else rows, start=1):
        for c, value in enumerate(row, start=1):
            if value is not None:
                ws.cell(row=r, column=c, value=value)
    for rng in merges:
        ws.merge_cells(rng)
    for name in extra_sheets:
        wb.create_sheet(name)
    return wb


def report_bytes(wb: Workbook) -> bytes:
    buffer = BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


class ScriptedRandom:
    """RandomSource stub: fixed uniform() result, scripted randint() results.

    The last randint value repeats once the script is exhausted.
    """

    def __init__(self, uniform: float = 0.0, randints: Iterable[int] = (1,)) -> None:
        self.uniform_value = uniform
        self.randints = list(randints)
        self.uniform_calls = 0
        self.randint_calls = 0
        self.uniform_args: tuple[float, float] | None = None

    def uniform(self, a: float, b: float) -> float:
        self.uniform_calls += 1
        self.uniform_args = (a, b)
        return self.uniform_value

    def randint(self, a: int, b: int) -> int:
        idx = min(self.randint_calls, len(self.randints) - 1)
        self.randint_calls += 1
        return self.randints[idx]


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """source_directory: ./data
output_directory: ./out
target_columns: [E, F, G]
output_suffix: _Gerado
seed: 1234
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "rewrite.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def sample_report(temp_workdir: Path) -> Path:
    path = temp_workdir / "data" / "relatorio.xlsx"
    build_report().save(path)
    return path


@pytest.fixture()
def seeded_rng() -> random.Random:
    return random.Random(20240601)


@pytest.fixture()
def make_report():
    return build_report


@pytest.fixture()
def to_bytes():
    return report_bytes


@pytest.fixture()
def scripted_rng():
    return ScriptedRandom
