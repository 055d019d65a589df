from __future__ import annotations

from dataclasses import dataclass

"""ProcessingStats model: aggregate counters of one rewrite run."""

__all__ = [
    "ProcessingStats",
]


@dataclass
class ProcessingStats:
    """Counters accumulated while rewriting a workbook.

    Counters only ever grow during a run. ``processed_cells`` counts rewritten
    cells, while the in/out-of-spec counters count decoded values (a composite
    cell such as ``"10.5 / 10.8"`` contributes two).
    """
    total_rows: int = 0  # 空行以外の訪問行数
    processed_cells: int = 0
    in_spec_count: int = 0
    out_of_spec_count: int = 0

    def add(self, other: ProcessingStats) -> None:
        """Accumulate another run's counters into this one (batch totals)."""
        self.total_rows += other.total_rows
        self.processed_cells += other.processed_cells
        self.in_spec_count += other.in_spec_count
        self.out_of_spec_count += other.out_of_spec_count

    def as_dict(self) -> dict[str, int]:
        return {
            "total_rows": self.total_rows,
            "processed_cells": self.processed_cells,
            "in_spec_count": self.in_spec_count,
            "out_of_spec_count": self.out_of_spec_count,
        }
