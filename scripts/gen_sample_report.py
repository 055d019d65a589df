#!/usr/bin/env python3
"""Generate synthetic inspection reports for manual runs and demos.

This script creates .xlsx files laid out like the reports the rewriter expects:
- Row 1: header
- Column B: characteristic description ("Ang. ..." rows are angular)
- Columns C/D: upper/lower tolerance, merged vertically over each block
- Columns E/F/G: measured values (some out of spec, some composite strings)
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

import numpy as np
from openpyxl import Workbook

LINEAR_CHARACTERISTICS = ["Diametro externo", "Diametro interno", "Comprimento", "Espessura", "Raio"]
ANGULAR_CHARACTERISTICS = ["Ang. chanfro", "Ang. conico"]


def _format_angle(value: float) -> str:
    degrees = int(value)
    minutes = int(round((value - degrees) * 60))
    if minutes == 60:
        degrees, minutes = degrees + 1, 0
    return f"{degrees:02d}°{minutes:02d}'"


def _measurements(rng: np.random.Generator, nominal: float, half_band: float, count: int, out_ratio: float) -> np.ndarray:
    values = rng.normal(nominal, half_band / 3, count)
    out_mask = rng.random(count) < out_ratio
    # 公差外サンプルは帯域の 1.1〜1.5 倍へ
    values[out_mask] = nominal + np.sign(rng.standard_normal(out_mask.sum())) * half_band * rng.uniform(
        1.1, 1.5, out_mask.sum()
    )
    return values


def build_sheet(ws, blocks: int, rows_per_block: int, out_ratio: float, rng: np.random.Generator) -> int:
    """Fill one worksheet; returns the number of measured cells written."""
    ws.append([None, "Característica", "Tol. sup.", "Tol. inf.", "Medida 1", "Medida 2", "Medida 3"])
    row = 2
    cells = 0
    for _ in range(blocks):
        angular = rng.random() < 0.25
        if angular:
            name = str(rng.choice(ANGULAR_CHARACTERISTICS))
            nominal = float(rng.integers(15, 60))
            half_band = 0.5
        else:
            name = str(rng.choice(LINEAR_CHARACTERISTICS))
            nominal = float(np.round(rng.uniform(5, 120), 1))
            half_band = float(rng.choice([0.05, 0.1, 0.2, 0.5]))
        upper = nominal + half_band
        lower = nominal - half_band

        first = row
        for i in range(rows_per_block):
            values = _measurements(rng, nominal, half_band, 3, out_ratio)
            ws.cell(row=row, column=2, value=name)
            if i == 0:
                ws.cell(row=row, column=3, value=_format_angle(upper) if angular else round(upper, 2))
                ws.cell(row=row, column=4, value=_format_angle(lower) if angular else round(lower, 2))
            for col, v in zip((5, 6, 7), values):
                if angular:
                    ws.cell(row=row, column=col, value=_format_angle(v))
                elif col == 7 and rng.random() < 0.2:
                    second = _measurements(rng, nominal, half_band, 1, out_ratio)[0]
                    ws.cell(row=row, column=col, value=f"{v:.2f} / {second:.2f}")
                else:
                    ws.cell(row=row, column=col, value=round(float(v), 2))
                cells += 1
            row += 1
        if rows_per_block > 1:
            ws.merge_cells(start_row=first, start_column=3, end_row=row - 1, end_column=3)
            ws.merge_cells(start_row=first, start_column=4, end_row=row - 1, end_column=4)
    return cells


def create_report(
    output_path: Path,
    blocks: int,
    rows_per_block: int,
    sheets: list[str] | None = None,
    out_ratio: float = 0.1,
    seed: int = 42,
) -> int:
    """Create one report file; returns the number of measured cells."""
    if sheets is None:
        sheets = ["Relatorio"]
    rng = np.random.default_rng(seed)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    wb = Workbook()
    wb.remove(wb.active)
    cells = 0
    for name in sheets:
        cells += build_sheet(wb.create_sheet(name), blocks, rows_per_block, out_ratio, rng)
    wb.save(output_path)

    print(f"Created report: {output_path}")
    print(f"  Sheets: {len(sheets)} ({', '.join(sheets)})")
    print(f"  Blocks per sheet: {blocks} x {rows_per_block} rows")
    print(f"  Measured cells: {cells:,}")
    return cells


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Generate synthetic inspection reports",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s data/peca_001.xlsx
  %(prog)s data/grande.xlsx --blocks 200 --rows-per-block 5 --sheets Op10 Op20
  %(prog)s data/ --count 10 --seed 7
        """,
    )
    parser.add_argument("output", type=Path, help="Output .xlsx path (or directory with --count)")
    parser.add_argument("--blocks", type=int, default=12, help="Characteristics per sheet (default: 12)")
    parser.add_argument("--rows-per-block", type=int, default=3, help="Rows per characteristic (default: 3)")
    parser.add_argument("--sheets", nargs="+", default=["Relatorio"], help="Sheet names (default: Relatorio)")
    parser.add_argument("--out-ratio", type=float, default=0.1, help="Share of out-of-spec values (default: 0.1)")
    parser.add_argument("--count", type=int, default=None, help="Write N reports into the output directory")
    parser.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")
    args = parser.parse_args()

    if args.blocks <= 0 or args.rows_per_block <= 0:
        print("Error: --blocks and --rows-per-block must be positive", file=sys.stderr)
        return 1
    if not 0 <= args.out_ratio <= 1:
        print("Error: --out-ratio must be between 0 and 1", file=sys.stderr)
        return 1

    try:
        if args.count:
            for i in range(args.count):
                create_report(
                    args.output / f"peca_{i + 1:03d}.xlsx",
                    args.blocks,
                    args.rows_per_block,
                    args.sheets,
                    args.out_ratio,
                    args.seed + i,
                )
        else:
            create_report(args.output, args.blocks, args.rows_per_block, args.sheets, args.out_ratio, args.seed)
    except OSError as e:
        print(f"\nError generating report: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
