from __future__ import annotations

import math
import re
from typing import Any

"""Numeric parsing for measured values and linear tolerances.

Cells arrive either as real numbers (openpyxl int/float) or as text typed by an
inspector: ``"12,50"``, ``"12.5 mm"``, ``" -0.02"``. Only the leading literal is
significant, trailing units or symbols are ignored.
"""

__all__ = [
    "parse_number",
]

# 先頭の浮動小数リテラルのみ (指数表記可)
_LEADING_FLOAT_RE = re.compile(r"^[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")


def parse_number(raw: Any) -> float | None:
    """Parse ``raw`` into a float, tolerant of a comma decimal separator.

    Returns None for blank strings, non-finite numbers, booleans and text that
    does not start with a numeric literal.
    """
    if isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        value = float(raw)
        return value if math.isfinite(value) else None
    if not isinstance(raw, str):
        return None
    text = raw.strip()
    if not text:
        return None
    match = _LEADING_FLOAT_RE.match(text.replace(",", ".", 1))
    if match is None:
        return None
    value = float(match.group(0))
    # "1e400" のような桁あふれは inf になる
    return value if math.isfinite(value) else None
