"""Geometry analysis and summary generation.

This module computes per-object summaries (counts, extents, approximate
length) used by the CLI and the MCP tools.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence

import structlog

from .geometry import segment_length
from .hit_test import BoundingBox, HandledPoint, bounding_box

logger = structlog.get_logger(__name__)


@dataclass
class PathSummary:
    """Summary of a single path object's geometry."""

    object_id: str
    name: str = ""

    # Counts
    anchors: int = 0
    segments: int = 0

    # Geometric properties
    bounding_box: Optional[BoundingBox] = None
    length: float = 0.0

    # Analysis flags
    renderable: bool = False
    has_degenerate_segments: bool = False

    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "object_id": self.object_id,
            "name": self.name,
            "anchors": self.anchors,
            "segments": self.segments,
            "bounding_box": self.bounding_box.to_dict() if self.bounding_box else None,
            "length": self.length,
            "renderable": self.renderable,
            "has_degenerate_segments": self.has_degenerate_segments,
            "warnings": list(self.warnings),
        }


def _segments(points: Sequence[HandledPoint]):
    for current, nxt in zip(points, points[1:]):
        yield current.anchor, current.handle_out, nxt.handle_in, nxt.anchor


def summarize_points(
    object_id: str,
    points: Sequence[HandledPoint],
    name: str = "",
    length_steps: int = 20,
) -> PathSummary:
    """Summarize a sequence of control points.

    Args:
        object_id: Identifier reported in the summary
        points: Control points in drawing order
        name: Display name reported in the summary
        length_steps: Samples per segment for the length estimate

    Returns:
        PathSummary instance
    """
    summary = PathSummary(object_id=object_id, name=name)
    summary.anchors = len(points)
    summary.segments = max(0, len(points) - 1)
    summary.renderable = len(points) >= 2
    summary.bounding_box = bounding_box(points)

    if not summary.renderable:
        summary.warnings.append(
            f"Object has {len(points)} anchor(s); at least 2 are needed to render"
        )
        return summary

    for p0, p1, p2, p3 in _segments(points):
        if p0 == p1 == p2 == p3:
            summary.has_degenerate_segments = True
            continue
        summary.length += segment_length(p0, p1, p2, p3, steps=length_steps)

    if summary.has_degenerate_segments:
        summary.warnings.append("Object contains zero-length segments")

    return summary


def summarize_object(obj: Any, length_steps: int = 20) -> PathSummary:
    """Summarize anything with ``id``, ``name`` and ``points`` attributes."""
    summary = summarize_points(obj.id, obj.points, name=getattr(obj, "name", ""), length_steps=length_steps)
    logger.debug(
        "Summarized path object",
        object_id=summary.object_id,
        anchors=summary.anchors,
        length=round(summary.length, 3),
    )
    return summary


def summarize_design(design: Any, length_steps: int = 20) -> List[PathSummary]:
    """Summaries for every object of a design, in z-order."""
    return [summarize_object(obj, length_steps=length_steps) for obj in design.objects]
