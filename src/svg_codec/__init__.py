"""SVG path data and document codec.

This package converts between control points and SVG: path data parsing
(including elliptical arcs), path data generation, and whole-document
import and export.
"""

from .arc import ArcCenter, arc_to_cubics, endpoint_to_center
from .commands import ARITY, CommandStream, ParseError, PathCommand, normalize_path_data, parse_commands, tokenize
from .document import SvgDocumentError, SvgShape, export_svg, read_svg_shapes, unescape_svg_content
from .parser import (
    InsufficientGeometryError,
    ParsedPath,
    ParserConfig,
    parse_path,
    setup_handles,
    simplify_points,
)
from .writer import format_number, generate_path_data

__version__ = "0.1.0"
__all__ = [
    "ArcCenter", "arc_to_cubics", "endpoint_to_center",
    "ARITY", "CommandStream", "ParseError", "PathCommand",
    "normalize_path_data", "parse_commands", "tokenize",
    "SvgDocumentError", "SvgShape", "export_svg", "read_svg_shapes", "unescape_svg_content",
    "InsufficientGeometryError", "ParsedPath", "ParserConfig",
    "parse_path", "setup_handles", "simplify_points",
    "format_number", "generate_path_data",
]
