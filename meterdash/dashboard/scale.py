"""
Upper bound selection for bounded gauges (bar / radial).

Auto mode walks a fixed threshold ladder; fixed modes pin the bound.
"""

import math
from dataclasses import dataclass
from typing import Optional

AUTO_THRESHOLDS = [20, 50, 100, 200, 500, 1000]
AUTO_MINIMUM = 10
FIXED_SCALES = (0.1, 0.3, 0.5, 1.0)


@dataclass(frozen=True)
class ScaleMode:
    """Auto when fixed is None, otherwise a pinned maximum."""
    fixed: Optional[float] = None

    @classmethod
    def auto(cls) -> "ScaleMode":
        return cls()

    @classmethod
    def fixed_at(cls, value: float) -> "ScaleMode":
        value = float(value)
        if value not in FIXED_SCALES:
            raise ValueError(f"fixed scale must be one of {FIXED_SCALES}, got {value}")
        return cls(fixed=value)

    @classmethod
    def parse(cls, text) -> "ScaleMode":
        """Build a mode from "auto" or a numeric fixed scale."""
        if isinstance(text, str) and text.strip().lower() == "auto":
            return cls.auto()
        try:
            value = float(text)
        except (TypeError, ValueError):
            raise ValueError(f"invalid scale mode: {text!r}") from None
        return cls.fixed_at(value)

    @property
    def is_auto(self) -> bool:
        return self.fixed is None

    def __str__(self) -> str:
        return "auto" if self.is_auto else f"{self.fixed:g}"


def derive_max(value: float, mode: ScaleMode) -> float:
    """
    Get the gauge maximum for a live value.

    Examples (auto): 5 -> 10, 15 -> 20, 999 -> 1000, 1500 -> 2000.
    """
    if not mode.is_auto:
        return mode.fixed
    if value < AUTO_MINIMUM:
        return AUTO_MINIMUM
    for threshold in AUTO_THRESHOLDS:
        if value < threshold:
            return threshold
    return math.ceil(value / 1000) * 1000


def fill_fraction(value: float, maximum: float) -> float:
    """Fraction of the gauge to fill, in [0, 1]."""
    if maximum <= 0:
        return 0.0
    return max(0.0, min(value / maximum, 1.0))
