"""Lenient validation of imported objects and points.

Every problem that can be healed is healed and recorded as a
:class:`ValidationRepaired` entry rather than raised.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence

import structlog

from curve_ir.schema import ControlPoint, PathObject, Style, Transform, new_id
from curve_ir.serialize import object_to_dict, point_to_dict
from curve_kernel.geometry import Point

from .config import ImportConfig

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ValidationRepaired:
    """Record of one silent fix applied during import.

    Attributes:
        kind: What was fixed (``coordinate``, ``handle``, ``id``, ``name``,
            ``style``, ``transform``, ``points_clamped``)
        object_index: Position of the object in the imported payload
        point_index: Position of the point, or None for object-level fixes
        detail: Human-readable description
    """

    kind: str
    object_index: int
    point_index: Optional[int]
    detail: str


def _finite(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _handle(raw: Any) -> Optional[Point]:
    if isinstance(raw, Point):
        return raw if raw.is_finite() else None
    if not isinstance(raw, Mapping):
        return None
    x = _finite(raw.get("x"))
    y = _finite(raw.get("y"))
    if x is None or y is None:
        return None
    return Point(x, y)


def repair_point(
    raw: Any,
    handle_offset: float = 20.0,
    object_index: int = 0,
    point_index: int = 0,
    repairs: Optional[List[ValidationRepaired]] = None,
) -> ControlPoint:
    """Build a valid control point from a dict or an existing ControlPoint.

    Non-finite or missing coordinates become 0. Missing or invalid handles
    are placed ``handle_offset`` to the left (in) and right (out) of the
    anchor. A missing id is replaced by a new one.
    """
    repairs = repairs if repairs is not None else []

    def record(kind: str, detail: str) -> None:
        repairs.append(ValidationRepaired(kind, object_index, point_index, detail))

    if isinstance(raw, ControlPoint):
        raw = point_to_dict(raw)
    elif not isinstance(raw, Mapping):
        record("coordinate", f"point is {type(raw).__name__}, not an object")
        raw = {}

    coords = []
    for axis in ("x", "y"):
        value = _finite(raw.get(axis))
        if value is None:
            record("coordinate", f"{axis}={raw.get(axis)!r} replaced with 0")
            value = 0.0
        coords.append(value)
    anchor = Point(coords[0], coords[1])

    handle_in = _handle(raw.get("handleIn"))
    if handle_in is None:
        record("handle", "handleIn synthesized")
        handle_in = Point(anchor.x - handle_offset, anchor.y)

    handle_out = _handle(raw.get("handleOut"))
    if handle_out is None:
        record("handle", "handleOut synthesized")
        handle_out = Point(anchor.x + handle_offset, anchor.y)

    point_id = raw.get("id")
    if not point_id:
        record("id", "point id generated")
        point_id = new_id()

    return ControlPoint(str(point_id), anchor, handle_in, handle_out)


def _repair_style(raw: Any) -> Style:
    defaults = Style()
    if not isinstance(raw, Mapping):
        return defaults

    dash = raw.get("dashArray", defaults.dash_pattern)
    if isinstance(dash, (list, tuple)):
        dash = ",".join(str(v) for v in dash)

    width = _finite(raw.get("width"))
    opacity = _finite(raw.get("opacity"))
    return Style(
        color=str(raw.get("color") or defaults.color),
        width=width if width is not None and width >= 0 else defaults.width,
        fill=str(raw.get("fill") or defaults.fill),
        opacity=min(1.0, max(0.0, opacity)) if opacity is not None else defaults.opacity,
        line_cap=str(raw.get("lineCap") or defaults.line_cap),
        line_join=str(raw.get("lineJoin") or defaults.line_join),
        dash_pattern=str(dash or ""),
    )


def _repair_transform(raw: Any) -> Transform:
    if not isinstance(raw, Mapping):
        return Transform()
    rotation = _finite(raw.get("rotation"))
    scale_x = _finite(raw.get("scaleX"))
    scale_y = _finite(raw.get("scaleY"))
    return Transform(
        rotation=rotation if rotation is not None else 0.0,
        scale_x=scale_x if scale_x is not None else 1.0,
        scale_y=scale_y if scale_y is not None else 1.0,
    )


def clamp_points(
    points: Sequence[Any],
    limit: int,
    object_index: int,
    repairs: List[ValidationRepaired],
    warnings: List[str],
) -> List[Any]:
    """Keep the first ``limit`` points, recording a warning when trimming."""
    if len(points) <= limit:
        return list(points)
    detail = f"Object {object_index + 1} limited to {limit} of {len(points)} points"
    warnings.append(detail)
    repairs.append(ValidationRepaired("points_clamped", object_index, None, detail))
    logger.warning("Clamped object points", object_index=object_index, kept=limit, total=len(points))
    return list(points[:limit])


def repair_object(
    raw: Any,
    index: int,
    config: Optional[ImportConfig] = None,
    repairs: Optional[List[ValidationRepaired]] = None,
    warnings: Optional[List[str]] = None,
) -> PathObject:
    """Build a valid PathObject from an interchange dictionary.

    Args:
        raw: Object dictionary (or a PathObject, which is re-validated)
        index: Position in the payload, used for default names and records
        config: Limits and handle offset
        repairs: Collected repair records (appended to)
        warnings: Collected warnings (appended to)

    Raises:
        ValueError: If ``raw`` is not an object at all
    """
    config = config or ImportConfig()
    repairs = repairs if repairs is not None else []
    warnings = warnings if warnings is not None else []

    if isinstance(raw, PathObject):
        raw = object_to_dict(raw)
    if not isinstance(raw, Mapping):
        raise ValueError(f"Object at index {index} is {type(raw).__name__}, not an object")

    def record(kind: str, detail: str) -> None:
        repairs.append(ValidationRepaired(kind, index, None, detail))

    object_id = raw.get("id")
    if not object_id:
        object_id = new_id()
        record("id", "object id generated")

    name = raw.get("name")
    if not name:
        name = f"Imported Object {index + 1}"
        record("name", f"named '{name}'")

    raw_points = raw.get("points")
    if not isinstance(raw_points, list):
        record("coordinate", "points missing; object is empty")
        raw_points = []
    raw_points = clamp_points(raw_points, config.max_points_per_object, index, repairs, warnings)

    points = [
        repair_point(p, config.handle_offset, index, i, repairs)
        for i, p in enumerate(raw_points)
    ]

    curve_config: Dict[str, Any] = raw.get("curveConfig") if isinstance(raw.get("curveConfig"), Mapping) else {}
    raw_styles = curve_config.get("styles")
    styles = [_repair_style(s) for s in raw_styles] if isinstance(raw_styles, list) else []
    if not styles:
        record("style", "default style applied")

    parallel = _finite(curve_config.get("parallelCount"))
    spacing = _finite(curve_config.get("spacing"))

    if not isinstance(raw.get("transform"), Mapping):
        record("transform", "default transform applied")

    return PathObject(
        id=str(object_id),
        name=str(name),
        points=points,
        styles=styles,
        parallel_count=max(1, int(parallel)) if parallel is not None else 1,
        spacing=spacing if spacing is not None else 5.0,
        transform=_repair_transform(raw.get("transform")),
        selected=bool(raw.get("isSelected", False)),
    )
