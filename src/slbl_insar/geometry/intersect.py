# src/slbl_insar/geometry/intersect.py
from __future__ import annotations

import numpy as np

Point = tuple[float, float]


def segment_intersection(p1: Point, p2: Point, p3: Point, p4: Point, eps: float = 1e-12) -> Point | None:
    """
    Intersection of the lines supporting segments (p1, p2) and (p3, p4).

    Solves the 2x2 linear system of the two line equations. Returns None
    when the segments are parallel. The caller checks whether the point lies
    inside the segment range it cares about.
    """
    (x1, y1), (x2, y2) = p1, p2
    (x3, y3), (x4, y4) = p3, p4

    denom = (x1 - x2) * (y3 - y4) - (y1 - y2) * (x3 - x4)
    scale = max(abs(x1 - x2) + abs(y1 - y2), 1.0) * max(abs(x3 - x4) + abs(y3 - y4), 1.0)
    if abs(denom) <= eps * scale:
        return None

    a = x1 * y2 - y1 * x2
    b = x3 * y4 - y3 * x4
    x = (a * (x3 - x4) - (x1 - x2) * b) / denom
    y = (a * (y3 - y4) - (y1 - y2) * b) / denom
    return float(x), float(y)


def intersect_polyline(
    x: np.ndarray,
    z: np.ndarray,
    start: Point,
    end: Point,
) -> Point | None:
    """
    First intersection (scanning left to right) of segment (start, end)
    with the piecewise-linear profile (x, z).

    A candidate is accepted when its horizontal coordinate lies inside the
    bracketing profile segment (bounds included).
    """
    x = np.asarray(x, dtype=float)
    z = np.asarray(z, dtype=float)
    if x.shape != z.shape:
        raise ValueError(f"x and z must have the same shape, got {x.shape} vs {z.shape}")

    lo, hi = min(start[0], end[0]), max(start[0], end[0])
    for k in range(1, x.size):
        # horizontal overlap with the searched segment
        if not (lo <= x[k] and x[k - 1] <= hi):
            continue
        hit = segment_intersection((x[k - 1], z[k - 1]), (x[k], z[k]), start, end)
        if hit is not None and x[k - 1] <= hit[0] <= x[k]:
            return hit
    return None
