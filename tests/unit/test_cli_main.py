from __future__ import annotations

import os
from pathlib import Path

import pytest
from openpyxl import load_workbook

from inspection_rewriter.cli import main as cli_main
from inspection_rewriter.logging.init import reset_logging


@pytest.fixture(autouse=True)
def _fresh_logging():
    # capsys の stdout にハンドラを付け直す
    reset_logging()
    yield
    reset_logging()


def test_cli_no_files_success(write_config, capsys):
    code = cli_main([])
    out = capsys.readouterr().out
    assert code == 0
    assert "INFO Processing reports from: data" in out
    assert "SUMMARY files=0/0 success=0 failed=0 rows=0 cells=0 in_spec=0 out_of_spec=0" in out


def test_cli_rewrites_directory(write_config, sample_report, temp_workdir: Path, capsys):
    code = cli_main([])
    out = capsys.readouterr().out
    assert code == 0
    assert "SUMMARY files=1/1 success=1 failed=0 rows=4 cells=6 in_spec=4 out_of_spec=3" in out
    assert "INFO relatorio.xlsx -> relatorio_Gerado.xlsx sheets=1 cells=6 in_spec=4 out_of_spec=3" in out
    generated = temp_workdir / "out" / "relatorio_Gerado.xlsx"
    ws = load_workbook(generated)["Relatorio"]
    assert ws["B2"].value == "Diametro"
    # 入力ファイルは変更しない
    assert load_workbook(sample_report)["Relatorio"]["E2"].value == 12.5


def test_cli_same_seed_same_output(write_config, sample_report, temp_workdir: Path):
    assert cli_main([]) == 0
    first = load_workbook(temp_workdir / "out" / "relatorio_Gerado.xlsx")["Relatorio"]["G2"].value
    reset_logging()
    assert cli_main([]) == 0
    second = load_workbook(temp_workdir / "out" / "relatorio_Gerado.xlsx")["Relatorio"]["G2"].value
    assert first == second


def test_cli_columns_override(write_config, sample_report, capsys):
    code = cli_main(["--columns", "E"])
    out = capsys.readouterr().out
    assert code == 0
    assert "cells=3 " in out


def test_cli_partial_failure_exit_code(write_config, sample_report, temp_workdir: Path, capsys):
    (temp_workdir / "data" / "quebrado.xlsx").write_bytes(b"not a workbook")
    code = cli_main([])
    out = capsys.readouterr().out
    assert code == 2
    assert "WARN quebrado.xlsx failed:" in out
    assert "SUMMARY files=2/2 success=1 failed=1" in out
    assert list((temp_workdir / "logs").glob("errors-*.log"))


def test_cli_explicit_files(write_config, sample_report, temp_workdir: Path, capsys):
    code = cli_main([str(sample_report)])
    out = capsys.readouterr().out
    assert code == 0
    assert "INFO Processing 1 report(s)" in out
    assert (temp_workdir / "out" / "relatorio_Gerado.xlsx").exists()


def test_cli_explicit_file_missing(write_config, temp_workdir: Path, capsys):
    code = cli_main([str(temp_workdir / "data" / "nope.xlsx")])
    assert code == 1
    assert "ERROR file not found:" in capsys.readouterr().out


def test_cli_directory_missing(write_config, temp_workdir: Path, capsys):
    text = write_config.read_text(encoding="utf-8").replace("./data", "./missing_dir")
    write_config.write_text(text, encoding="utf-8")
    code = cli_main([])
    out = capsys.readouterr().out
    assert code == 1
    assert "ERROR directory not found:" in out


def test_cli_config_from_option_and_env(temp_workdir: Path, monkeypatch, capsys):
    alt = temp_workdir / "alt.yml"
    alt.write_text("source_directory: ./data\n", encoding="utf-8")
    assert cli_main(["--config", str(alt)]) == 0

    reset_logging()
    monkeypatch.setenv("REWRITER_CONFIG", str(alt))
    assert cli_main([]) == 0
    assert "ERROR" not in capsys.readouterr().out


def test_cli_invalid_seed_env_from_dotenv(write_config, temp_workdir: Path, capsys):
    (temp_workdir / ".env").write_text("REWRITER_SEED=abc\n", encoding="utf-8")
    try:
        code = cli_main([])
    finally:
        os.environ.pop("REWRITER_SEED", None)
    assert code == 1
    assert "ERROR config: REWRITER_SEED must be an integer" in capsys.readouterr().out


def test_cli_seed_option_wins_over_env(write_config, sample_report, monkeypatch):
    monkeypatch.setenv("REWRITER_SEED", "abc")
    assert cli_main(["--seed", "5"]) == 0


def test_cli_debug_mode(write_config, capsys):
    code = cli_main(["--debug"])
    out = capsys.readouterr().out
    assert code == 0
    assert "DEBUG debug mode enabled" in out


def test_cli_inspect_data(write_config, sample_report, temp_workdir: Path, capsys):
    code = cli_main(["--inspect-data"])
    out = capsys.readouterr().out
    assert code == 0
    assert "FILE: relatorio.xlsx" in out
    assert "SHEET: Relatorio rows=4" in out
    assert "angular" in out and "linear" in out
    # 書き込みは行わない
    assert not (temp_workdir / "out").exists()
    assert "SUMMARY" not in out


def test_cli_inspect_data_unreadable_file(write_config, temp_workdir: Path, capsys):
    (temp_workdir / "data" / "quebrado.xlsx").write_bytes(b"x")
    code = cli_main(["--inspect-data"])
    out = capsys.readouterr().out
    assert code == 0
    assert "FILE: quebrado.xlsx" in out
    assert "read_error:" in out
