"""Control points to SVG path data."""

from __future__ import annotations

import math
from typing import List, Sequence

from curve_kernel.geometry import Point, bezier_point, parallel_offset_point, unit_normal
from curve_kernel.hit_test import HandledPoint

# Parameter nudge used when an endpoint tangent vanishes
_ENDPOINT_NUDGE = 1e-4


def format_number(value: float) -> str:
    """Format a coordinate for path data.

    Integral values print without a decimal part; anything else uses the
    shortest repr that round-trips.
    """
    value = float(value)
    if math.isfinite(value) and value == int(value):
        return str(int(value))
    return repr(value)


def _offset_sample(p0: Point, p1: Point, p2: Point, p3: Point, t: float, distance: float) -> Point:
    if unit_normal(p0, p1, p2, p3, t) is not None:
        return parallel_offset_point(p0, p1, p2, p3, t, distance)

    # Coincident handles: take the direction from just inside the segment
    inner = t + _ENDPOINT_NUDGE if t < 0.5 else t - _ENDPOINT_NUDGE
    normal = unit_normal(p0, p1, p2, p3, inner)
    point = bezier_point(p0, p1, p2, p3, t)
    if normal is None:
        return point
    return Point(point.x + normal.x * distance, point.y + normal.y * distance)


def offset_segment(
    p0: Point, p1: Point, p2: Point, p3: Point, distance: float
) -> tuple[Point, Point, Point, Point]:
    """Fit a cubic through four samples of the parallel curve.

    The samples at t = 0, 1/3, 2/3 and 1 are interpolated exactly.
    """
    q0 = _offset_sample(p0, p1, p2, p3, 0.0, distance)
    q1 = _offset_sample(p0, p1, p2, p3, 1.0 / 3.0, distance)
    q2 = _offset_sample(p0, p1, p2, p3, 2.0 / 3.0, distance)
    q3 = _offset_sample(p0, p1, p2, p3, 1.0, distance)

    r1 = Point(27 * q1.x - 8 * q0.x - q3.x, 27 * q1.y - 8 * q0.y - q3.y)
    r2 = Point(27 * q2.x - q0.x - 8 * q3.x, 27 * q2.y - q0.y - 8 * q3.y)
    c1 = Point((2 * r1.x - r2.x) / 18.0, (2 * r1.y - r2.y) / 18.0)
    c2 = Point((2 * r2.x - r1.x) / 18.0, (2 * r2.y - r1.y) / 18.0)
    return q0, c1, c2, q3


def generate_path_data(points: Sequence[HandledPoint], offset: float = 0.0) -> str:
    """Serialize control points as ``M`` followed by one ``C`` per segment.

    Args:
        points: Control points in drawing order
        offset: Distance of a parallel curve along the left-hand normal
            (0 serializes the points themselves)

    Returns:
        Path data, or an empty string for fewer than two points
    """
    if len(points) < 2:
        return ""

    fmt = format_number

    if offset == 0:
        first = points[0].anchor
        parts: List[str] = [f"M {fmt(first.x)} {fmt(first.y)}"]
        for current, nxt in zip(points, points[1:]):
            out = current.handle_out
            into = nxt.handle_in
            end = nxt.anchor
            parts.append(
                f"C {fmt(out.x)} {fmt(out.y)} {fmt(into.x)} {fmt(into.y)} {fmt(end.x)} {fmt(end.y)}"
            )
        return " ".join(parts)

    segments = [
        offset_segment(current.anchor, current.handle_out, nxt.handle_in, nxt.anchor, offset)
        for current, nxt in zip(points, points[1:])
    ]
    start = segments[0][0]
    parts = [f"M {fmt(start.x)} {fmt(start.y)}"]
    for _, c1, c2, end in segments:
        parts.append(
            f"C {fmt(c1.x)} {fmt(c1.y)} {fmt(c2.x)} {fmt(c2.y)} {fmt(end.x)} {fmt(end.y)}"
        )
    return " ".join(parts)
