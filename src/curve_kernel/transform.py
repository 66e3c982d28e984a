"""Rotation/scale transforms and canvas fitting for control points."""

from __future__ import annotations

import math
from dataclasses import replace
from typing import Iterable, List, Sequence, TypeVar

import structlog

from .geometry import Point
from .hit_test import BoundingBox, HandledPoint, bounding_box

logger = structlog.get_logger(__name__)

P = TypeVar("P", bound=HandledPoint)


def transform_point(
    point: Point,
    center: Point,
    rotation_deg: float,
    scale_x: float = 1.0,
    scale_y: float = 1.0,
) -> Point:
    """Rotate ``point`` about ``center`` and then scale it about ``center``."""
    x = point.x - center.x
    y = point.y - center.y

    radians = math.radians(rotation_deg)
    cos_a = math.cos(radians)
    sin_a = math.sin(radians)
    x_rot = x * cos_a - y * sin_a
    y_rot = x * sin_a + y * cos_a

    return Point(x_rot * scale_x + center.x, y_rot * scale_y + center.y)


def transform_control_points(
    points: Sequence[P],
    center: Point,
    rotation_deg: float,
    scale_x: float = 1.0,
    scale_y: float = 1.0,
) -> List[P]:
    """Apply :func:`transform_point` to every anchor and handle.

    The inputs are left untouched; ids and other fields are preserved on the
    returned copies.
    """
    return [
        replace(
            cp,
            anchor=transform_point(cp.anchor, center, rotation_deg, scale_x, scale_y),
            handle_in=transform_point(cp.handle_in, center, rotation_deg, scale_x, scale_y),
            handle_out=transform_point(cp.handle_out, center, rotation_deg, scale_x, scale_y),
        )
        for cp in points
    ]


def _combined_box(point_lists: Iterable[Sequence[HandledPoint]]) -> BoundingBox | None:
    box = None
    for points in point_lists:
        current = bounding_box(points)
        if current is None:
            continue
        box = current if box is None else box.union(current)
    return box


def fit_to_canvas(
    objects: Sequence,
    width: float,
    height: float,
    margin: float = 0.8,
) -> float:
    """Center objects on a canvas and shrink them if they do not fit.

    Objects are mutated in place (their ``points`` lists are replaced).

    Args:
        objects: Items with a ``points`` attribute
        width: Canvas width
        height: Canvas height
        margin: Fraction of the canvas the content may occupy when scaled

    Returns:
        The scale factor that was applied (1.0 when no scaling was needed)
    """
    box = _combined_box(obj.points for obj in objects)
    if box is None:
        return 1.0

    dx = width / 2 - box.center.x
    dy = height / 2 - box.center.y

    scale = 1.0
    if box.width > width or box.height > height:
        scale = min(
            width / box.width if box.width else math.inf,
            height / box.height if box.height else math.inf,
        ) * margin

    canvas_center = Point(width / 2, height / 2)

    def _map(p: Point) -> Point:
        moved = p.translate(dx, dy)
        return Point(
            canvas_center.x + (moved.x - canvas_center.x) * scale,
            canvas_center.y + (moved.y - canvas_center.y) * scale,
        )

    for obj in objects:
        obj.points = [
            replace(cp, anchor=_map(cp.anchor), handle_in=_map(cp.handle_in), handle_out=_map(cp.handle_out))
            for cp in obj.points
        ]

    logger.debug("Fitted objects to canvas", count=len(objects), scale=scale, dx=dx, dy=dy)
    return scale
