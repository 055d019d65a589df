from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from .processing_stats import ProcessingStats

"""Batch result models for the inspection report rewriter.

Aggregates the per-file outcome of a run into the figures printed on the
SUMMARY line.
"""


@dataclass(frozen=True)
class FileStat:
    """Per-file processing statistics (internal helper for RunResult)."""
    file_name: str
    status: str  # success/failed
    processed_cells: int
    elapsed_seconds: float
    output_name: str | None = None


@dataclass(frozen=True)
class RunResult:
    """Aggregated results and summary output for a batch rewrite."""
    success_files: int
    failed_files: int
    stats: ProcessingStats  # 成功ファイルのみ合算
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    file_stats: list[FileStat] = field(default_factory=list)

    @property
    def total_files(self) -> int:
        return self.success_files + self.failed_files
