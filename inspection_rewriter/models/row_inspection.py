from __future__ import annotations

from dataclasses import dataclass
from typing import Any

"""RowInspection model used by the ``--inspect-data`` diagnostic."""

__all__ = [
    "RowInspection",
]


@dataclass(frozen=True)
class RowInspection:
    """Read-only view of how one populated row would be handled.

    ``lower``/``upper`` are the latched bounds in force for the row (None while
    no tolerance was seen yet).
    """
    row_number: int  # Excel row number (1-based)
    kind: str  # "angular" | "linear"
    lower: float | None
    upper: float | None
    values: dict[str, Any]  # 列文字 → 正規化済の値

    def as_record(self) -> dict[str, Any]:
        record: dict[str, Any] = {
            "row": self.row_number,
            "kind": self.kind,
            "lower": self.lower,
            "upper": self.upper,
        }
        record.update(self.values)
        return record
