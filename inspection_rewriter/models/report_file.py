from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from .processing_stats import ProcessingStats
from .sheet_result import SheetResult

"""ReportFile domain model and FileStatus enum.

The ReportFile is the outcome of rewriting a single inspection report during
a batch run: success with the output path, or failed with the reason.
"""


class FileStatus(Enum):
    """Final status of one report of a batch run."""
    SUCCESS = "success"
    FAILED = "failed"


@dataclass(frozen=True)
class ReportFile:
    """Processing outcome for a single report file.

    ``output_path`` is only set when the rewritten workbook was written.
    """
    path: Path                          # 入力ファイル
    name: str
    status: FileStatus
    sheets: list[SheetResult] = field(default_factory=list)
    stats: ProcessingStats = field(default_factory=ProcessingStats)
    output_path: Path | None = None
    error: str | None = None            # 失敗理由

    @property
    def rewritten_sheets(self) -> int:
        return sum(1 for s in self.sheets if not s.skipped)
