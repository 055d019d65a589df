from __future__ import annotations

from typing import Any

from ..models.tolerance_window import ToleranceWindow
from .angles import DEGREE_SIGN, decode_angle
from .numbers import parse_number

"""Row classification and tolerance window latching.

Inspection reports describe a characteristic once and merge its tolerance cells
vertically over the rows holding its measurements. After loading, only the top
row of such a block carries the bounds; the rows below read as empty. The
tracker therefore keeps the last seen upper/lower bound until a row defines a
new one.
"""

__all__ = [
    "ToleranceWindowTracker",
    "is_angular_description",
]


def is_angular_description(description: Any) -> bool:
    """True if the row description denotes an angular characteristic.

    ``"Ang. chanfro"``, ``"ANGLE 30°"`` and anything containing the degree glyph
    are angular. Non-text descriptions (numbers, None) are linear.
    """
    if not isinstance(description, str):
        return False
    text = description.strip().casefold()
    return text.startswith("ang") or DEGREE_SIGN in text


class ToleranceWindowTracker:
    """Per-sheet state machine latching tolerance bounds across rows.

    Usage::

        tracker = ToleranceWindowTracker()
        for row in rows:
            window = tracker.observe(row.description, row.upper, row.lower)
            if window is None:
                continue  # no tolerance defined yet
    """

    def __init__(self) -> None:
        self.upper: float | None = None
        self.lower: float | None = None

    def reset(self) -> None:
        self.upper = None
        self.lower = None

    def observe(self, description: Any, upper_raw: Any, lower_raw: Any) -> ToleranceWindow | None:
        """Update the latch with one row and return the window in force.

        Args:
            description: Normalized value of the description cell
            upper_raw: Normalized value of the upper tolerance cell
            lower_raw: Normalized value of the lower tolerance cell

        Returns:
            The latched window, or None while no complete pair has been seen
        """
        is_angular = is_angular_description(description)
        decode = decode_angle if is_angular else parse_number
        upper = decode(upper_raw) if upper_raw is not None else None
        lower = decode(lower_raw) if lower_raw is not None else None

        # 片側ずつ独立にラッチ
        if upper is not None:
            self.upper = upper
        if lower is not None:
            self.lower = lower

        if self.upper is None or self.lower is None:
            return None
        return ToleranceWindow(upper=self.upper, lower=self.lower, is_angular=is_angular)
