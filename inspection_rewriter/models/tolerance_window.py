from __future__ import annotations

from dataclasses import dataclass

"""ToleranceWindow model for the report rewriter.

A ToleranceWindow is the tolerance band in force for one report row. Bounds
may come from a row several lines above (vertically merged tolerance cells),
the angular flag always comes from the row itself.
"""

__all__ = [
    "ToleranceWindow",
]


@dataclass(frozen=True)
class ToleranceWindow:
    """Latched tolerance band applicable to a single row.

    Bounds are decimal degrees for angular rows, plain numbers otherwise.
    """
    upper: float  # Column C (upper tolerance)
    lower: float  # Column D (lower tolerance)
    is_angular: bool = False  # 行ごとに説明列から判定 (ラッチしない)

    @property
    def precision(self) -> int:
        """Decimal places used when regenerating values.

        Angular rows work in whole arc-minutes (0 decimals of a minute),
        linear rows in hundredths.
        """
        return 0 if self.is_angular else 2
