from __future__ import annotations

import math
import re
from typing import Any, Optional

# Detector output is measured in pixels; plans are drawn at roughly this scale.
PIXELS_PER_FOOT = 25.0

DEFAULT_AREA_SQFT = 100.0

_LEADING_NUMBER = re.compile(r"^\s*([-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)")


def leading_number(value: Any) -> Optional[float]:
    """
    Numeric prefix of a free-text measurement: "8x4 ft" -> 8.0, "320 sq ft" -> 320.0.
    Returns None when the text does not start with a number.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        v = float(value)
        return v if math.isfinite(v) else None
    if value is None:
        return None
    m = _LEADING_NUMBER.match(str(value))
    if m is None:
        return None
    v = float(m.group(1))
    return v if math.isfinite(v) else None


def parse_area_sqft(area: Any, default: float = DEFAULT_AREA_SQFT) -> float:
    v = leading_number(area)
    if not v:
        return float(default)
    return v


def pixels_to_feet(pixels: float, pixels_per_foot: float = PIXELS_PER_FOOT) -> float:
    return float(pixels) / float(pixels_per_foot)


def round_half_up(value: float) -> int:
    return int(math.floor(float(value) + 0.5))
