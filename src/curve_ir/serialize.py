"""JSON interchange for designs.

The document shape is ``{"objects": [...]}`` with camelCase keys
(``handleIn``, ``curveConfig``, ``parallelCount``, ``scaleX`` ...). This
module is strict: it round-trips documents written by CurveBridge and
raises ``ValueError`` on structural problems. Lenient import of foreign
documents goes through ``curve_import``.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Mapping, Union

import orjson

from curve_kernel.geometry import Point

from .schema import SCHEMA_VERSION, ControlPoint, Design, PathObject, Style, Transform


def point_to_dict(point: ControlPoint) -> Dict[str, Any]:
    """Convert a control point to its interchange dictionary."""
    return {
        "id": point.id,
        "x": point.anchor.x,
        "y": point.anchor.y,
        "handleIn": {"x": point.handle_in.x, "y": point.handle_in.y},
        "handleOut": {"x": point.handle_out.x, "y": point.handle_out.y},
    }


def style_to_dict(style: Style) -> Dict[str, Any]:
    return {
        "color": style.color,
        "width": style.width,
        "fill": style.fill,
        "opacity": style.opacity,
        "lineCap": style.line_cap,
        "lineJoin": style.line_join,
        "dashArray": style.dash_pattern,
    }


def transform_to_dict(transform: Transform) -> Dict[str, float]:
    return {
        "rotation": transform.rotation,
        "scaleX": transform.scale_x,
        "scaleY": transform.scale_y,
    }


def curve_config_to_dict(obj: PathObject) -> Dict[str, Any]:
    return {
        "styles": [style_to_dict(s) for s in obj.styles],
        "parallelCount": obj.parallel_count,
        "spacing": obj.spacing,
    }


def object_to_dict(obj: PathObject) -> Dict[str, Any]:
    """Convert a path object to its interchange dictionary."""
    return {
        "id": obj.id,
        "name": obj.name,
        "points": [point_to_dict(p) for p in obj.points],
        "curveConfig": curve_config_to_dict(obj),
        "transform": transform_to_dict(obj.transform),
        "isSelected": obj.selected,
    }


def to_json_dict(design: Design) -> Dict[str, Any]:
    """Convert a design to a JSON-serializable dictionary.

    Args:
        design: The design to serialize

    Returns:
        Dictionary representation ready for JSON serialization
    """
    return {
        "version": SCHEMA_VERSION,
        "objects": [object_to_dict(obj) for obj in design.objects],
    }


def to_json_string(design: Design, pretty: bool = False) -> str:
    """Convert a design to a JSON string.

    Args:
        design: The design to serialize
        pretty: If True, format JSON with indentation

    Returns:
        JSON string representation
    """
    data = to_json_dict(design)

    if pretty:
        return json.dumps(data, indent=2, ensure_ascii=False)
    else:
        # Use orjson for faster serialization
        return orjson.dumps(data).decode('utf-8')


def dump_json(design: Design, path: Union[str, Path], pretty: bool = False) -> Path:
    """Write a design to a JSON file, creating parent directories.

    Returns:
        The path written
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    if pretty:
        path.write_text(to_json_string(design, pretty=True), encoding="utf-8")
    else:
        with open(path, 'wb') as f:
            f.write(orjson.dumps(to_json_dict(design)))
            f.write(b'\n')
    return path


def load_json(path: Union[str, Path]) -> Design:
    """Load a design from a JSON file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If JSON parsing fails or the structure is invalid
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Design file not found: {path}")

    try:
        data = orjson.loads(path.read_bytes())
    except orjson.JSONDecodeError as e:
        raise ValueError(f"Failed to parse {path}: {e}") from e

    return design_from_dict(data)


def _require_mapping(value: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise TypeError(f"{what} must be a JSON object, got {type(value).__name__}")
    return value


def _point_from_dict(data: Dict[str, Any], key: str) -> Point:
    raw = data[key]
    return Point(float(raw["x"]), float(raw["y"]))


def _dict_to_point(data: Dict[str, Any]) -> ControlPoint:
    _require_mapping(data, "point")
    return ControlPoint(
        id=str(data.get("id", "")),
        anchor=Point(float(data["x"]), float(data["y"])),
        handle_in=_point_from_dict(data, "handleIn"),
        handle_out=_point_from_dict(data, "handleOut"),
    )


def _dict_to_style(data: Dict[str, Any]) -> Style:
    _require_mapping(data, "style")
    defaults = Style()
    return Style(
        color=str(data.get("color", defaults.color)),
        width=float(data.get("width", defaults.width)),
        fill=str(data.get("fill", defaults.fill)),
        opacity=float(data.get("opacity", defaults.opacity)),
        line_cap=str(data.get("lineCap", defaults.line_cap)),
        line_join=str(data.get("lineJoin", defaults.line_join)),
        dash_pattern=str(data.get("dashArray", defaults.dash_pattern)),
    )


def _dict_to_object(data: Dict[str, Any]) -> PathObject:
    _require_mapping(data, "object")
    config = _require_mapping(data.get("curveConfig", {}), "curveConfig")
    transform = _require_mapping(data.get("transform", {}), "transform")

    return PathObject(
        id=str(data["id"]),
        name=str(data.get("name", "")),
        points=[_dict_to_point(p) for p in data.get("points", [])],
        styles=[_dict_to_style(s) for s in config.get("styles", [])],
        parallel_count=int(config.get("parallelCount", 1)),
        spacing=float(config.get("spacing", 5.0)),
        transform=Transform(
            rotation=float(transform.get("rotation", 0.0)),
            scale_x=float(transform.get("scaleX", 1.0)),
            scale_y=float(transform.get("scaleY", 1.0)),
        ),
        selected=bool(data.get("isSelected", False)),
    )


def design_from_dict(data: Any) -> Design:
    """Convert an interchange dictionary back into a Design.

    Raises:
        ValueError: If the structure is not a valid design document
    """
    if not isinstance(data, dict) or not isinstance(data.get("objects"), list):
        raise ValueError("Design document must be an object with an 'objects' array")

    objects: List[PathObject] = []
    for index, raw in enumerate(data["objects"]):
        try:
            objects.append(_dict_to_object(raw))
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"Invalid object at index {index}: {e}") from e

    return Design(objects=objects)
