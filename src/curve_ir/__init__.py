"""Curve path model (IR) package.

This package provides the schema and JSON interchange for designs made of
bezier path objects.
"""

from .schema import (
    ControlPoint,
    Design,
    PathObject,
    Style,
    Transform,
    create_control_point,
    create_path_object,
    create_placeholder_points,
)
from .serialize import to_json_dict, to_json_string, dump_json, load_json, design_from_dict

__version__ = "0.1.0"
__all__ = [
    "ControlPoint", "Design", "PathObject", "Style", "Transform",
    "create_control_point", "create_path_object", "create_placeholder_points",
    "to_json_dict", "to_json_string", "dump_json", "load_json", "design_from_dict",
]
