"""Cubic bezier evaluation and parallel-curve helpers.

Pure functions over immutable points. Nothing here clamps the curve
parameter ``t``; callers that need ``0 <= t <= 1`` enforce it themselves.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class Point:
    """A 2D position or vector in model space."""

    x: float
    y: float

    def __add__(self, other: "Point") -> "Point":
        return Point(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Point") -> "Point":
        return Point(self.x - other.x, self.y - other.y)

    def scale(self, factor: float) -> "Point":
        """Multiply both components by ``factor``."""
        return Point(self.x * factor, self.y * factor)

    def translate(self, dx: float, dy: float) -> "Point":
        """Return the point shifted by ``(dx, dy)``."""
        return Point(self.x + dx, self.y + dy)

    def length(self) -> float:
        """Euclidean length when the point is used as a vector."""
        return math.hypot(self.x, self.y)

    def reflect_through(self, center: "Point") -> "Point":
        """Point reflection of this point through ``center``."""
        return Point(2 * center.x - self.x, 2 * center.y - self.y)

    def is_finite(self) -> bool:
        return math.isfinite(self.x) and math.isfinite(self.y)

    def as_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)


ORIGIN = Point(0.0, 0.0)


def bezier_point(p0: Point, p1: Point, p2: Point, p3: Point, t: float) -> Point:
    """Evaluate a cubic bezier with the Bernstein basis.

    Args:
        p0: Start anchor
        p1: Start anchor's outgoing handle
        p2: End anchor's incoming handle
        p3: End anchor
        t: Curve parameter (not clamped)

    Returns:
        Point on the curve; ``t=0`` yields ``p0`` and ``t=1`` yields ``p3``
        exactly.
    """
    u = 1.0 - t
    uu = u * u
    tt = t * t
    uuu = uu * u
    ttt = tt * t

    x = uuu * p0.x
    x += 3 * uu * t * p1.x
    x += 3 * u * tt * p2.x
    x += ttt * p3.x

    y = uuu * p0.y
    y += 3 * uu * t * p1.y
    y += 3 * u * tt * p2.y
    y += ttt * p3.y

    return Point(x, y)


def bezier_tangent(p0: Point, p1: Point, p2: Point, p3: Point, t: float) -> Point:
    """First derivative of the cubic at ``t`` (not normalized)."""
    u = 1.0 - t
    a = 3 * u * u
    b = 6 * u * t
    c = 3 * t * t

    x = a * (p1.x - p0.x) + b * (p2.x - p1.x) + c * (p3.x - p2.x)
    y = a * (p1.y - p0.y) + b * (p2.y - p1.y) + c * (p3.y - p2.y)
    return Point(x, y)


def unit_normal(p0: Point, p1: Point, p2: Point, p3: Point, t: float) -> Point | None:
    """Unit normal (tangent rotated +90 degrees), or None for a zero tangent."""
    tangent = bezier_tangent(p0, p1, p2, p3, t)
    length = tangent.length()
    if length == 0:
        return None
    return Point(-tangent.y / length, tangent.x / length)


def parallel_offset_point(
    p0: Point, p1: Point, p2: Point, p3: Point, t: float, distance: float
) -> Point:
    """Point at ``t`` displaced ``distance`` along the curve's unit normal.

    Coincident control points can make the tangent vanish; in that case the
    undisplaced curve point is returned.
    """
    point = bezier_point(p0, p1, p2, p3, t)
    if distance == 0:
        return point

    normal = unit_normal(p0, p1, p2, p3, t)
    if normal is None:
        return point
    return Point(point.x + normal.x * distance, point.y + normal.y * distance)


def segment_length(p0: Point, p1: Point, p2: Point, p3: Point, steps: int = 20) -> float:
    """Approximate arc length by summing a sampled polyline."""
    if steps < 1:
        raise ValueError("steps must be at least 1")

    length = 0.0
    previous = p0
    for i in range(1, steps + 1):
        current = bezier_point(p0, p1, p2, p3, i / steps)
        length += math.hypot(current.x - previous.x, current.y - previous.y)
        previous = current
    return length


def closest_point_on_segment(
    p0: Point, p1: Point, p2: Point, p3: Point, target: Point, steps: int = 10
) -> tuple[Point, float, float]:
    """Find the sampled curve point nearest to ``target``.

    Returns:
        Tuple of (point, t, distance). Earlier samples win ties.
    """
    if steps < 1:
        raise ValueError("steps must be at least 1")

    best_point = p0
    best_t = 0.0
    best_distance = math.inf
    for i in range(steps + 1):
        t = i / steps
        candidate = bezier_point(p0, p1, p2, p3, t)
        d = math.hypot(candidate.x - target.x, candidate.y - target.y)
        if d < best_distance:
            best_point, best_t, best_distance = candidate, t, d
    return best_point, best_t, best_distance
