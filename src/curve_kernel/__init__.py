"""Kernel package for bezier curve geometry.

This package provides cubic bezier evaluation, parallel offsets,
hit-testing and bounding-box utilities, point transforms, and path
summaries. It has no dependency on the path model or the SVG codec.
"""

from .geometry import (
    Point,
    bezier_point,
    bezier_tangent,
    parallel_offset_point,
    segment_length,
    closest_point_on_segment,
)
from .hit_test import (
    BoundingBox,
    ControlPointKind,
    PointMatch,
    SelectionRect,
    bounding_box,
    distance,
    nearest_control_point,
    object_in_rect,
    point_in_rect,
)
from .summary import PathSummary, summarize_object, summarize_design
from .transform import fit_to_canvas, transform_control_points, transform_point

__version__ = "0.1.0"
__all__ = [
    "Point", "bezier_point", "bezier_tangent", "parallel_offset_point",
    "segment_length", "closest_point_on_segment",
    "BoundingBox", "ControlPointKind", "PointMatch", "SelectionRect",
    "bounding_box", "distance", "nearest_control_point", "object_in_rect", "point_in_rect",
    "PathSummary", "summarize_object", "summarize_design",
    "fit_to_canvas", "transform_control_points", "transform_point",
]
