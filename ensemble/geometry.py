from __future__ import annotations

import logging
import math
from typing import List, Sequence, Tuple

import numpy as np


logger = logging.getLogger(__name__)

Boundary = Tuple[float, float, float, float]
Point = Tuple[float, float]


def _bounds(boundary: Sequence[float]) -> Boundary:
    x1, y1, x2, y2 = [float(v) for v in boundary]
    return x1, y1, x2, y2


def grid_positions(boundary: Sequence[float], spacing: float) -> List[Point]:
    """
    Centered grid of points inside the boundary, row-major.
    A boundary narrower or shorter than one spacing yields no points.
    """
    x1, y1, x2, y2 = _bounds(boundary)
    spacing = float(spacing)
    width = x2 - x1
    height = y2 - y1
    cols = int(math.floor(width / spacing))
    rows = int(math.floor(height / spacing))
    if cols <= 0 or rows <= 0:
        return []
    x_offset = (width - (cols - 1) * spacing) / 2.0
    y_offset = (height - (rows - 1) * spacing) / 2.0
    xs = x1 + x_offset + np.arange(cols, dtype=float) * spacing
    ys = y1 + y_offset + np.arange(rows, dtype=float) * spacing
    return [(float(x), float(y)) for y in ys for x in xs]


def perimeter(boundary: Sequence[float]) -> float:
    x1, y1, x2, y2 = _bounds(boundary)
    return 2.0 * ((x2 - x1) + (y2 - y1))


def center(boundary: Sequence[float]) -> Point:
    x1, y1, x2, y2 = _bounds(boundary)
    return (x1 + x2) / 2.0, (y1 + y2) / 2.0


def distance(a: Sequence[float], b: Sequence[float]) -> float:
    return math.hypot(float(a[0]) - float(b[0]), float(a[1]) - float(b[1]))


def min_distance(point: Sequence[float], others: Sequence[Sequence[float]]) -> float:
    if not others:
        return math.inf
    arr = np.asarray(others, dtype=float).reshape(-1, 2)
    d = np.hypot(arr[:, 0] - float(point[0]), arr[:, 1] - float(point[1]))
    return float(np.min(d))


def find_open_slot(
    boundary: Sequence[float],
    existing: Sequence[Sequence[float]],
    min_separation: float = 50.0,
    start_offset: float = 50.0,
    offset_step: float = 10.0,
    max_offset: float = 200.0,
    margin: float = 50.0,
) -> Point:
    """
    Deterministic search for a point at least `min_separation` from every existing position.

    Starts at the boundary center and nudges right by a growing offset, wrapping to the
    next row at the right margin. Once the offset reaches `max_offset` the last candidate
    is returned even if it still collides.
    """
    x1, y1, x2, y2 = _bounds(boundary)
    x, y = center((x1, y1, x2, y2))
    offset = float(start_offset)
    found = False
    while not found and offset < max_offset:
        found = True
        for pos in existing:
            if distance((x, y), pos) < min_separation:
                found = False
                x += offset
                if x > x2 - margin:
                    x = x1 + margin
                    y += offset
                break
        offset += offset_step
    if not found:
        logger.debug("Slot search exhausted at offset %.0f; using (%.1f, %.1f)", offset, x, y)
    return x, y
