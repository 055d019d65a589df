from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from typing import Any

from ..excel.grid import LINEAR_NUMBER_FORMAT, GridCell
from ..models.processing_stats import ProcessingStats
from ..models.tolerance_window import ToleranceWindow
from .angles import decode_angle, encode_angle
from .numbers import parse_number
from .randomizer import RandomSource, generate_in_spec, generate_out_of_spec, is_out_of_spec

"""Cell rewriting for measured-value columns.

A measured cell is either a clean single value (a number, a lone numeric
string, or any text in an angular row) or a composite string holding several
readings (``"10.5 / 10.8"``, ``"30°10' e 30°20'"``). Each value is classified
against the row's tolerance window and replaced by a generated value with the
same classification.
"""

__all__ = [
    "CellRewriter",
]

logger = logging.getLogger(__name__)

_CLEAN_NUMBER_RE = re.compile(r"^\s*[-+]?\d*(?:[.,]\d+)?\s*$")
_ANGLE_TOKEN_RE = re.compile(r"[-+]?\d+[°\s]\d+'?")
_LINEAR_TOKEN_RE = re.compile(r"[-+]?\d+(?:[.,]\d+)?")


class CellRewriter:
    """Rewrites the target cells of tolerance-resolved rows.

    Args:
        rng: Randomness source handed to the generators (None = ``random``)
    """

    def __init__(self, rng: RandomSource | None = None) -> None:
        self.rng = rng

    def rewrite_row(self, cells: Iterable[GridCell], window: ToleranceWindow, stats: ProcessingStats) -> None:
        for cell in cells:
            self.rewrite_cell(cell, window, stats)

    def rewrite_cell(self, cell: GridCell, window: ToleranceWindow, stats: ProcessingStats) -> bool:
        """Rewrite one cell in place; returns True if the cell was modified."""
        # 結合セルの従属側は書き換えない
        if cell.is_merge_follower:
            return False
        value = cell.value
        if value is None or value == "":
            return False

        if self._is_single_value(value, window):
            decoded = self._decode(value, window)
            if decoded is not None:
                new_value = self._regenerate(decoded, window, stats)
                if window.is_angular:
                    cell.write_text(encode_angle(new_value))
                else:
                    cell.write_number(new_value, LINEAR_NUMBER_FORMAT)
                stats.processed_cells += 1
                return True

        if isinstance(value, str):
            return self._rewrite_composite(cell, value, window, stats)
        return False

    @staticmethod
    def _is_single_value(value: Any, window: ToleranceWindow) -> bool:
        if not isinstance(value, str):
            return True
        return window.is_angular or bool(_CLEAN_NUMBER_RE.match(value))

    @staticmethod
    def _decode(raw: Any, window: ToleranceWindow) -> float | None:
        return decode_angle(raw) if window.is_angular else parse_number(raw)

    def _regenerate(self, value: float, window: ToleranceWindow, stats: ProcessingStats) -> float:
        if is_out_of_spec(value, window.lower, window.upper):
            stats.out_of_spec_count += 1
            return generate_out_of_spec(
                value,
                window.lower,
                window.upper,
                window.precision,
                angular=window.is_angular,
                rng=self.rng,
            )
        stats.in_spec_count += 1
        return generate_in_spec(
            window.lower,
            window.upper,
            window.precision,
            angular=window.is_angular,
            rng=self.rng,
        )

    def _rewrite_composite(self, cell: GridCell, text: str, window: ToleranceWindow, stats: ProcessingStats) -> bool:
        pattern = _ANGLE_TOKEN_RE if window.is_angular else _LINEAR_TOKEN_RE
        modified = False

        def _substitute(match: re.Match[str]) -> str:
            nonlocal modified
            token = match.group(0)
            decoded = self._decode(token, window)
            if decoded is None:
                return token
            new_value = self._regenerate(decoded, window, stats)
            modified = True
            if window.is_angular:
                return encode_angle(new_value)
            formatted = f"{new_value:.2f}"
            # 元トークンがカンマ区切りならカンマを維持
            return formatted.replace(".", ",") if "," in token else formatted

        new_text = pattern.sub(_substitute, text)
        if not modified:
            return False
        cell.write_text(new_text)
        stats.processed_cells += 1
        logger.debug("composite cell %s rewritten %r -> %r", cell.coordinate, text, new_text)
        return True
