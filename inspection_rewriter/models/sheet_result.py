from __future__ import annotations

from dataclasses import dataclass, field

from .processing_stats import ProcessingStats

"""SheetResult model: outcome of rewriting one worksheet."""

__all__ = [
    "SheetResult",
]


@dataclass(frozen=True)
class SheetResult:
    """Per-sheet outcome inside a report.

    Sheets without any populated row are reported with ``skipped=True`` and
    zero counters.
    """
    sheet_name: str
    stats: ProcessingStats = field(default_factory=ProcessingStats)
    skipped: bool = False  # 空シート
