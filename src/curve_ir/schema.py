"""Path model schema definitions.

This module defines the entities every other component reads and writes:
control points with directional handles, stroke styles, transforms, path
objects and the ordered design collection.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import List, Optional

from curve_kernel.geometry import Point

# Interchange format versioning
SCHEMA_VERSION = "1.0"

DEFAULT_HANDLE_OFFSET = 10.0


def new_id() -> str:
    """Short random identifier for points and objects."""
    return uuid.uuid4().hex[:12]


@dataclass
class ControlPoint:
    """An anchor on the curve plus the handles shaping its two segments.

    Handles are independent points; smoothness is an editing heuristic,
    not an invariant.
    """

    id: str
    anchor: Point
    handle_in: Point
    handle_out: Point

    def __post_init__(self) -> None:
        """Validate control point after creation."""
        if not self.id:
            self.id = new_id()

    @property
    def x(self) -> float:
        return self.anchor.x

    @property
    def y(self) -> float:
        return self.anchor.y

    def move_to(self, x: float, y: float) -> None:
        """Move the anchor, carrying both handles along."""
        dx = x - self.anchor.x
        dy = y - self.anchor.y
        self.anchor = Point(x, y)
        self.handle_in = self.handle_in.translate(dx, dy)
        self.handle_out = self.handle_out.translate(dx, dy)


@dataclass
class Style:
    """Stroke style for one of an object's (parallel) curves."""

    color: str = "#000000"
    width: float = 2.0
    fill: str = "none"
    opacity: float = 1.0
    line_cap: str = "round"
    line_join: str = "round"
    dash_pattern: str = ""


@dataclass
class Transform:
    """Object-level transform; rotation is in degrees."""

    rotation: float = 0.0
    scale_x: float = 1.0
    scale_y: float = 1.0

    @property
    def is_identity(self) -> bool:
        return self.rotation == 0 and self.scale_x == 1 and self.scale_y == 1


@dataclass
class PathObject:
    """A drawable curve made of an ordered run of control points."""

    id: str
    name: str
    points: List[ControlPoint] = field(default_factory=list)
    styles: List[Style] = field(default_factory=list)
    parallel_count: int = 1
    spacing: float = 5.0
    transform: Transform = field(default_factory=Transform)
    selected: bool = False

    def __post_init__(self) -> None:
        """Fill in identity and the mandatory default style."""
        if not self.id:
            self.id = new_id()
        if not self.name:
            self.name = f"Curve {self.id[:6]}"
        if not self.styles:
            self.styles = [Style()]

    @property
    def is_renderable(self) -> bool:
        """Objects with fewer than two anchors exist only transiently."""
        return len(self.points) >= 2

    def style_for(self, index: int) -> Style:
        """Style of the ``index``-th parallel curve, falling back to the first."""
        if 0 <= index < len(self.styles):
            return self.styles[index]
        return self.styles[0]

    def get_point(self, point_id: str) -> Optional[ControlPoint]:
        for point in self.points:
            if point.id == point_id:
                return point
        return None

    def add_point(self, point: ControlPoint) -> None:
        """Append a control point; ids must be unique within the object."""
        if any(existing.id == point.id for existing in self.points):
            raise ValueError(f"Point with ID {point.id} already exists in object {self.id}")
        self.points.append(point)

    def remove_point(self, point_id: str) -> bool:
        """Remove a control point by id. Returns True if one was removed."""
        for i, point in enumerate(self.points):
            if point.id == point_id:
                del self.points[i]
                return True
        return False


@dataclass
class Design:
    """Ordered collection of path objects; order is the drawing z-order."""

    objects: List[PathObject] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.objects)

    def get_object_by_id(self, object_id: str) -> Optional[PathObject]:
        """Retrieve an object by its ID."""
        for obj in self.objects:
            if obj.id == object_id:
                return obj
        return None

    def add_object(self, obj: PathObject) -> None:
        """Add an object on top of the z-order."""
        if any(existing.id == obj.id for existing in self.objects):
            raise ValueError(f"Object with ID {obj.id} already exists")
        self.objects.append(obj)

    def remove_object(self, object_id: str) -> bool:
        for i, obj in enumerate(self.objects):
            if obj.id == object_id:
                del self.objects[i]
                return True
        return False

    def prune_empty(self) -> List[str]:
        """Destroy objects that lost all their points; returns removed ids."""
        removed = [obj.id for obj in self.objects if not obj.points]
        self.objects = [obj for obj in self.objects if obj.points]
        return removed

    def renderable_objects(self) -> List[PathObject]:
        return [obj for obj in self.objects if obj.is_renderable]


# Factory functions for common entities
def create_control_point(
    x: float,
    y: float,
    handle_offset: float = DEFAULT_HANDLE_OFFSET,
    point_id: Optional[str] = None,
) -> ControlPoint:
    """Create a control point with horizontal handles on either side."""
    return ControlPoint(
        id=point_id or new_id(),
        anchor=Point(x, y),
        handle_in=Point(x - handle_offset, y),
        handle_out=Point(x + handle_offset, y),
    )


def create_path_object(
    name: str,
    points: Optional[List[ControlPoint]] = None,
    object_id: Optional[str] = None,
    styles: Optional[List[Style]] = None,
) -> PathObject:
    """Create a path object with default style and transform."""
    return PathObject(
        id=object_id or new_id(),
        name=name,
        points=list(points or []),
        styles=list(styles or []),
    )


def create_placeholder_points(index: int = 0, size: float = 80.0) -> List[ControlPoint]:
    """Deterministic square used when a caller opts to replace unusable geometry.

    Consecutive indices are staggered by 20 units so placeholders do not
    stack exactly on top of each other.
    """
    offset = index * 20.0
    left = 100.0 + offset
    top = 100.0 + offset
    right = left + size
    bottom = top + size
    h = 20.0

    return [
        ControlPoint(new_id(), Point(left, top), Point(left - h, top), Point(left + h, top)),
        ControlPoint(new_id(), Point(right, top), Point(right - h, top), Point(right + h, top)),
        ControlPoint(new_id(), Point(right, bottom), Point(right, bottom - h), Point(right, bottom + h)),
        ControlPoint(new_id(), Point(left, bottom), Point(left + h, bottom), Point(left - h, bottom)),
    ]
