"""Reading and writing whole SVG documents.

Exports wrap every object in a ``<g>`` that carries its curve configuration
and transform as data attributes plus the exact control points in a
``<metadata>`` element, so documents written here re-import without loss.
Foreign documents fall back to parsing each ``<path>``'s data.
"""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional

import orjson
import structlog

from curve_ir.schema import Design, PathObject, Style
from curve_ir.serialize import curve_config_to_dict, point_to_dict, transform_to_dict
from curve_kernel.hit_test import bounding_box

from .writer import format_number, generate_path_data

logger = structlog.get_logger(__name__)

SVG_NS = "http://www.w3.org/2000/svg"
CURVEBRIDGE_NS = "urn:curvebridge:svg"
DOCUMENT_VERSION = "1.0"

ET.register_namespace("curvebridge", CURVEBRIDGE_NS)

_STYLE_ATTRIBUTES = {
    "stroke": "color",
    "stroke-width": "width",
    "fill": "fill",
    "stroke-opacity": "opacity",
    "stroke-linecap": "line_cap",
    "stroke-linejoin": "line_join",
    "stroke-dasharray": "dash_pattern",
}


class SvgDocumentError(Exception):
    """The text is not a readable SVG document."""


@dataclass
class SvgShape:
    """One drawable shape found in an SVG document."""

    path_data: str
    name: Optional[str] = None
    element_id: Optional[str] = None
    style: Style = field(default_factory=Style)
    # Exact control points and configuration from our own exports
    points: Optional[List[Dict[str, Any]]] = None
    curve_config: Optional[Dict[str, Any]] = None
    transform: Optional[Dict[str, Any]] = None

    @property
    def has_metadata(self) -> bool:
        return self.points is not None

    def to_raw_object(self) -> Dict[str, Any]:
        """Interchange-shaped dictionary for the metadata-carrying case."""
        raw: Dict[str, Any] = {"points": self.points or []}
        if self.element_id:
            raw["id"] = self.element_id
        if self.name:
            raw["name"] = self.name
        if self.curve_config is not None:
            raw["curveConfig"] = self.curve_config
        if self.transform is not None:
            raw["transform"] = self.transform
        return raw


def _local_name(tag: str) -> str:
    if "}" in tag:
        return tag.rsplit("}", 1)[1]
    return tag


def _load_json_attribute(element: ET.Element, name: str) -> Optional[Any]:
    value = element.get(name)
    if not value:
        return None
    try:
        return orjson.loads(value)
    except orjson.JSONDecodeError:
        logger.warning("Ignoring unreadable attribute", attribute=name)
        return None


def _style_declarations(element: ET.Element) -> Dict[str, str]:
    declarations = {}
    for attr in _STYLE_ATTRIBUTES:
        if element.get(attr) is not None:
            declarations[attr] = element.get(attr).strip()
    # Inline CSS wins over presentation attributes
    for item in (element.get("style") or "").split(";"):
        if ":" in item:
            key, value = item.split(":", 1)
            key = key.strip()
            if key in _STYLE_ATTRIBUTES:
                declarations[key] = value.strip()
    return declarations


def _parse_style(element: ET.Element) -> Style:
    style = Style()
    for attr, value in _style_declarations(element).items():
        target = _STYLE_ATTRIBUTES[attr]
        if target in ("width", "opacity"):
            try:
                setattr(style, target, float(value.replace("px", "")))
            except ValueError:
                logger.debug("Ignoring non-numeric style value", attribute=attr, value=value)
        elif target == "dash_pattern":
            style.dash_pattern = "" if value == "none" else value
        else:
            setattr(style, target, value)
    return style


def _metadata_points(group: ET.Element) -> Optional[List[Dict[str, Any]]]:
    for element in group:
        if _local_name(element.tag) != "metadata":
            continue
        for child in element:
            if _local_name(child.tag) == "points" and child.text:
                try:
                    points = orjson.loads(child.text)
                except orjson.JSONDecodeError:
                    logger.warning("Ignoring unreadable point metadata", group=group.get("id"))
                    return None
                return points if isinstance(points, list) else None
    return None


def _shape_from_group(group: ET.Element) -> Optional[SvgShape]:
    paths = [el for el in group if _local_name(el.tag) == "path" and el.get("d")]
    points = _metadata_points(group)
    if not paths and points is None:
        return None

    # The main curve is drawn last, after its parallels
    main = paths[-1] if paths else None
    return SvgShape(
        path_data=main.get("d", "") if main is not None else "",
        name=group.get("data-name"),
        element_id=group.get("id"),
        style=_parse_style(main) if main is not None else Style(),
        points=points,
        curve_config=_load_json_attribute(group, "data-curve-config"),
        transform=_load_json_attribute(group, "data-transform"),
    )


def _walk(element: ET.Element) -> Iterator[SvgShape]:
    for child in element:
        name = _local_name(child.tag)
        if name == "g" and child.get("data-curve-config") is not None:
            shape = _shape_from_group(child)
            if shape is not None:
                yield shape
        elif name == "path":
            d = child.get("d")
            if d and d.strip():
                yield SvgShape(
                    path_data=d,
                    name=child.get("data-name") or child.get("id"),
                    element_id=child.get("id"),
                    style=_parse_style(child),
                )
        elif name not in ("metadata", "defs"):
            yield from _walk(child)


def read_svg_shapes(svg_text: str) -> List[SvgShape]:
    """Extract path shapes from an SVG document, in document order.

    Raises:
        SvgDocumentError: If the text is not well-formed XML or its root is
            not an ``<svg>`` element.
    """
    try:
        root = ET.fromstring(svg_text)
    except ET.ParseError as e:
        raise SvgDocumentError(f"Malformed SVG document: {e}") from e

    if _local_name(root.tag) != "svg":
        raise SvgDocumentError(f"Root element is <{_local_name(root.tag)}>, not <svg>")

    shapes = list(_walk(root))
    logger.debug(
        "Read SVG document",
        shapes=len(shapes),
        with_metadata=sum(1 for s in shapes if s.has_metadata),
    )
    return shapes


def _path_element(parent: ET.Element, path_data: str, style: Style) -> ET.Element:
    attrs = {
        "d": path_data,
        "stroke": style.color,
        "stroke-width": format_number(style.width),
        "fill": style.fill,
        "stroke-opacity": format_number(style.opacity),
        "stroke-linecap": style.line_cap,
        "stroke-linejoin": style.line_join,
    }
    if style.dash_pattern:
        attrs["stroke-dasharray"] = style.dash_pattern
    return ET.SubElement(parent, "path", attrs)


def _object_group(parent: ET.Element, obj: PathObject) -> ET.Element:
    box = bounding_box(obj.points)
    cx = format_number(box.center.x) if box else "0"
    cy = format_number(box.center.y) if box else "0"
    t = obj.transform

    group = ET.SubElement(parent, "g", {
        "id": obj.id,
        "data-name": obj.name,
        "data-curve-config": orjson.dumps(curve_config_to_dict(obj)).decode("utf-8"),
        "data-transform": orjson.dumps(transform_to_dict(t)).decode("utf-8"),
        "transform": (
            f"rotate({format_number(t.rotation)} {cx} {cy}) "
            f"scale({format_number(t.scale_x)} {format_number(t.scale_y)})"
        ),
    })

    for i in range(1, obj.parallel_count):
        offset_data = generate_path_data(obj.points, offset=i * obj.spacing)
        if offset_data:
            _path_element(group, offset_data, obj.style_for(i))

    _path_element(group, generate_path_data(obj.points), obj.style_for(0))

    metadata = ET.SubElement(group, "metadata")
    points = ET.SubElement(metadata, f"{{{CURVEBRIDGE_NS}}}points")
    points.text = orjson.dumps([point_to_dict(p) for p in obj.points]).decode("utf-8")
    return group


def export_svg(
    design: Design,
    width: float = 800,
    height: float = 600,
    include_background: bool = True,
) -> str:
    """Render a design as an SVG document.

    Objects with fewer than two anchors are left out.
    """
    w = format_number(width)
    h = format_number(height)
    root = ET.Element("svg", {
        "xmlns": SVG_NS,
        "width": w,
        "height": h,
        "viewBox": f"0 0 {w} {h}",
    })

    metadata = ET.SubElement(root, "metadata")
    ET.SubElement(metadata, f"{{{CURVEBRIDGE_NS}}}design", {"version": DOCUMENT_VERSION})

    if include_background:
        ET.SubElement(root, "rect", {"width": w, "height": h, "fill": "white"})

    exported = 0
    for obj in design.objects:
        if not obj.is_renderable:
            continue
        _object_group(root, obj)
        exported += 1

    logger.info("Exported SVG", objects=exported, skipped=len(design) - exported)
    return ET.tostring(root, encoding="unicode")


_ESCAPED_QUOTE_RE = re.compile(r'\\+"')
_ESCAPED_BACKSLASH_RE = re.compile(r"\\{2,}")


def unescape_svg_content(text: str) -> str:
    """Undo stray JSON-style escaping around SVG markup.

    >>> unescape_svg_content('"<path d=\\\\"M0 0\\\\"/>"')
    '<path d="M0 0"/>'
    """
    if not text:
        return text
    result = _ESCAPED_QUOTE_RE.sub('"', text)
    result = _ESCAPED_BACKSLASH_RE.sub(lambda _: "\\", result)
    if len(result) >= 2 and result.startswith('"') and result.endswith('"'):
        result = result[1:-1]
    return result
