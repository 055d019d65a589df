from __future__ import annotations

import logging
import random
from typing import Protocol

"""Replacement value generation preserving in-spec / out-of-spec status.

Two strategies:

- in-spec values are replaced by a fresh uniform draw inside the tolerance
  band (inset by 5% of the band on each side),
- out-of-spec values are nudged by a few units of the last significant digit
  (hundredths, or arc-minutes for angles) while staying outside the band.

Randomness is injected through :class:`RandomSource` so tests can use a seeded
``random.Random`` or a scripted stub. The default is the process-wide
``random`` module, no reproducibility across runs is promised.
"""

__all__ = [
    "MAX_ATTEMPTS",
    "RandomSource",
    "generate_in_spec",
    "generate_out_of_spec",
    "is_out_of_spec",
    "quantize",
]

logger = logging.getLogger(__name__)

SAFE_MARGIN = 0.05  # 公差幅の 5% を両端から除外
MAX_ATTEMPTS = 50
SAME_SIDE_ATTEMPTS = 20  # これを超えたら反対側への逸脱も許容
MAX_OFFSET = 3


class RandomSource(Protocol):
    """Subset of the ``random.Random`` API used by the generators."""

    def uniform(self, a: float, b: float) -> float: ...

    def randint(self, a: int, b: int) -> int: ...


def _source(rng: RandomSource | None) -> RandomSource:
    return rng if rng is not None else random  # type: ignore[return-value]


def is_out_of_spec(value: float, lower: float, upper: float) -> bool:
    return value > upper or value < lower


def quantize(value: float, precision: int, *, angular: bool = False) -> float:
    """Round ``value`` to ``precision`` decimals.

    Angular values are rounded in arc-minutes and rebuilt as
    ``degrees + minutes / 60`` so they compare equal to what
    :func:`~inspection_rewriter.domain.angles.decode_angle` returns for the
    encoded text.
    """
    if not angular:
        return round(value, precision)
    sign = -1.0 if value < 0 else 1.0
    minutes = round(abs(value) * 60, precision)
    degrees, rest = divmod(minutes, 60)
    return sign * (degrees + rest / 60)


def _grid_step(precision: int, angular: bool) -> float:
    step = 10.0 ** -precision
    return step / 60 if angular else step


def generate_in_spec(
    lower: float,
    upper: float,
    precision: int,
    *,
    angular: bool = False,
    rng: RandomSource | None = None,
) -> float:
    """Draw a value inside ``[lower, upper]`` rounded to ``precision``.

    A zero or negative span returns ``lower``. When the 5% inset collapses the
    range the full band is sampled, so the result may touch a bound.
    """
    span = upper - lower
    if span <= 0:
        return lower

    safe_min = lower + span * SAFE_MARGIN
    safe_max = upper - span * SAFE_MARGIN
    source = _source(rng)
    if safe_max <= safe_min:
        raw = source.uniform(lower, upper)
    else:
        raw = source.uniform(safe_min, safe_max)

    value = quantize(raw, precision, angular=angular)
    if lower <= value <= upper:
        return value

    # 丸めで帯域外に出た場合: 内側の隣接グリッド点、無ければ下限
    step = _grid_step(precision, angular)
    nudged = quantize(value + step if value < lower else value - step, precision, angular=angular)
    if lower <= nudged <= upper:
        return nudged
    return lower


def generate_out_of_spec(
    original: float,
    lower: float,
    upper: float,
    precision: int,
    *,
    angular: bool = False,
    rng: RandomSource | None = None,
) -> float:
    """Shift an out-of-spec value by 1-3 units while keeping it out of spec.

    The first 21 attempts only accept candidates on the same side of the band
    as ``original``; later attempts accept either side. After
    :data:`MAX_ATTEMPTS` failures the original value is returned unchanged.
    """
    step = _grid_step(precision, angular)
    source = _source(rng)
    above = original > upper
    below = original < lower

    for attempt in range(MAX_ATTEMPTS):
        offset = source.randint(-MAX_OFFSET, MAX_OFFSET) or 1
        candidate = quantize(original + offset * step, precision, angular=angular)
        if not is_out_of_spec(candidate, lower, upper):
            continue
        same_side = (above and candidate > upper) or (below and candidate < lower)
        if (same_side or attempt > SAME_SIDE_ATTEMPTS) and candidate != original:
            return candidate

    logger.debug(
        "out-of-spec generation exhausted original=%s window=[%s, %s]; value kept",
        original,
        lower,
        upper,
    )
    return original
