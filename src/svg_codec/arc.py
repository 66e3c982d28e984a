"""Elliptical arc to cubic bezier conversion.

Uses the endpoint-to-center parameterization from the SVG implementation
notes (F.6.5) and approximates each piece of at most 90 degrees with one
cubic.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Tuple

from curve_kernel.geometry import Point

CubicSegment = Tuple[Point, Point, Point, Point]

MAX_SEGMENT_SWEEP = math.pi / 2


@dataclass(frozen=True)
class ArcCenter:
    """Center parameterization of an elliptical arc.

    Radii are the corrected values (scaled up when the endpoints could not
    be reached with the requested ones). Angles are in radians.
    """

    center: Point
    rx: float
    ry: float
    phi: float
    theta1: float
    delta_theta: float

    def point_at(self, theta: float) -> Point:
        cos_phi = math.cos(self.phi)
        sin_phi = math.sin(self.phi)
        cos_t = math.cos(theta)
        sin_t = math.sin(theta)
        return Point(
            self.center.x + self.rx * cos_phi * cos_t - self.ry * sin_phi * sin_t,
            self.center.y + self.rx * sin_phi * cos_t + self.ry * cos_phi * sin_t,
        )

    def derivative_at(self, theta: float) -> Point:
        cos_phi = math.cos(self.phi)
        sin_phi = math.sin(self.phi)
        cos_t = math.cos(theta)
        sin_t = math.sin(theta)
        return Point(
            -self.rx * cos_phi * sin_t - self.ry * sin_phi * cos_t,
            -self.rx * sin_phi * sin_t + self.ry * cos_phi * cos_t,
        )


def _vector_angle(ux: float, uy: float, vx: float, vy: float) -> float:
    return math.atan2(ux * vy - uy * vx, ux * vx + uy * vy)


def endpoint_to_center(
    start: Point,
    end: Point,
    rx: float,
    ry: float,
    x_axis_rotation_deg: float,
    large_arc: bool,
    sweep: bool,
) -> ArcCenter:
    """Solve the ellipse center and angles for an SVG arc.

    Radii must be non-zero and the endpoints distinct; callers check both.
    """
    rx = abs(rx)
    ry = abs(ry)
    phi = math.radians(x_axis_rotation_deg % 360.0)
    cos_phi = math.cos(phi)
    sin_phi = math.sin(phi)

    # Step 1: move to the ellipse's local frame
    dx2 = (start.x - end.x) / 2.0
    dy2 = (start.y - end.y) / 2.0
    x1p = cos_phi * dx2 + sin_phi * dy2
    y1p = -sin_phi * dx2 + cos_phi * dy2

    # Radii too small to span the endpoints are scaled up uniformly
    lam = (x1p * x1p) / (rx * rx) + (y1p * y1p) / (ry * ry)
    if lam > 1:
        scale = math.sqrt(lam)
        rx *= scale
        ry *= scale

    # Step 2: center in the local frame
    rx2 = rx * rx
    ry2 = ry * ry
    numerator = rx2 * ry2 - rx2 * y1p * y1p - ry2 * x1p * x1p
    denominator = rx2 * y1p * y1p + ry2 * x1p * x1p
    coef = math.sqrt(max(0.0, numerator / denominator)) if denominator else 0.0
    if large_arc == sweep:
        coef = -coef
    cxp = coef * rx * y1p / ry
    cyp = -coef * ry * x1p / rx

    # Step 3: back to user space
    cx = cos_phi * cxp - sin_phi * cyp + (start.x + end.x) / 2.0
    cy = sin_phi * cxp + cos_phi * cyp + (start.y + end.y) / 2.0

    # Step 4: start angle and signed sweep
    ux = (x1p - cxp) / rx
    uy = (y1p - cyp) / ry
    vx = (-x1p - cxp) / rx
    vy = (-y1p - cyp) / ry
    theta1 = _vector_angle(1.0, 0.0, ux, uy)
    delta = _vector_angle(ux, uy, vx, vy)

    if not sweep and delta > 0:
        delta -= 2 * math.pi
    elif sweep and delta < 0:
        delta += 2 * math.pi

    return ArcCenter(Point(cx, cy), rx, ry, phi, theta1, delta)


def arc_to_cubics(
    start: Point,
    rx: float,
    ry: float,
    x_axis_rotation_deg: float,
    large_arc: bool,
    sweep: bool,
    end: Point,
) -> List[CubicSegment]:
    """Approximate an SVG elliptical arc with cubic segments.

    Returns an empty list for a zero radius or coincident endpoints; the
    caller decides whether that means a straight line or nothing at all.
    Each returned segment is ``(p0, c1, c2, p3)``; the first ``p0`` is
    ``start`` and the last ``p3`` is ``end`` exactly.
    """
    if rx == 0 or ry == 0 or start == end:
        return []

    arc = endpoint_to_center(start, end, rx, ry, x_axis_rotation_deg, large_arc, sweep)

    count = max(1, math.ceil(abs(arc.delta_theta) / MAX_SEGMENT_SWEEP - 1e-9))
    step = arc.delta_theta / count
    alpha = math.sin(step) * (math.sqrt(4 + 3 * math.tan(step / 2) ** 2) - 1) / 3

    segments: List[CubicSegment] = []
    theta = arc.theta1
    p0 = start
    for i in range(count):
        theta_next = theta + step
        p3 = end if i == count - 1 else arc.point_at(theta_next)
        c1 = p0 + arc.derivative_at(theta).scale(alpha)
        c2 = p3 - arc.derivative_at(theta_next).scale(alpha)
        segments.append((p0, c1, c2, p3))
        p0 = p3
        theta = theta_next
    return segments
