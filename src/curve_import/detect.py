"""Payload format detection for imports."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, List, Optional

import orjson
import structlog

from curve_ir.schema import Design, PathObject
from svg_codec.commands import ParseError, parse_commands
from svg_codec.document import SvgDocumentError, read_svg_shapes, unescape_svg_content

logger = structlog.get_logger(__name__)

FORMAT_OBJECTS = "objects"
FORMAT_JSON = "json"
FORMAT_LEGACY_JSON = "legacy_json"
FORMAT_SVG_DOCUMENT = "svg_document"
FORMAT_SVG_PATH = "svg_path"

_SVG_TAG_RE = re.compile(r"<svg[\s>]", re.IGNORECASE)


class FormatError(Exception):
    """The payload is not in any importable format."""


@dataclass
class DetectedPayload:
    """Format of a payload and the per-object items it contains.

    Items are dicts or PathObjects for the object and JSON formats,
    ``SvgShape`` instances for SVG documents and path data strings for raw
    paths.
    """

    format: str
    items: List[Any] = field(default_factory=list)


def _is_object_list(value: Any) -> bool:
    return isinstance(value, (list, tuple)) and all(
        isinstance(item, (dict, PathObject)) for item in value
    )


def _detect_json_value(data: Any) -> Optional[DetectedPayload]:
    if isinstance(data, list):
        return DetectedPayload(FORMAT_JSON, list(data))
    if isinstance(data, dict):
        if isinstance(data.get("objects"), list):
            return DetectedPayload(FORMAT_JSON, list(data["objects"]))
        if isinstance(data.get("points"), list):
            # Legacy single-object documents are wrapped in one object
            return DetectedPayload(FORMAT_LEGACY_JSON, [data])
    return None


def _detect_text(text: str) -> Optional[DetectedPayload]:
    if text[0] in "[{":
        try:
            detected = _detect_json_value(orjson.loads(text))
        except orjson.JSONDecodeError as e:
            logger.debug("Payload is not JSON", error=str(e))
        else:
            if detected is not None:
                return detected

    if _SVG_TAG_RE.search(text):
        try:
            return DetectedPayload(FORMAT_SVG_DOCUMENT, read_svg_shapes(text))
        except SvgDocumentError as e:
            logger.debug("Payload is not an SVG document", error=str(e))

    try:
        stream = parse_commands(text)
    except ParseError as e:
        logger.debug("Payload is not path data", error=str(e))
        return None
    if any(cmd.is_finite for cmd in stream.commands):
        return DetectedPayload(FORMAT_SVG_PATH, [text])
    return None


def detect_format(payload: Any) -> DetectedPayload:
    """Determine the format of an import payload.

    Tried in order: object list passthrough, JSON (array, ``{objects}`` or
    legacy ``{points}``), SVG document, raw path data. The first match wins.

    Raises:
        FormatError: If nothing matches
    """
    if isinstance(payload, Design):
        return DetectedPayload(FORMAT_OBJECTS, list(payload.objects))
    if _is_object_list(payload):
        return DetectedPayload(FORMAT_OBJECTS, list(payload))
    if isinstance(payload, dict):
        detected = _detect_json_value(payload)
        if detected is not None:
            return detected
        raise FormatError("Object payload has neither 'objects' nor 'points'")

    if isinstance(payload, (bytes, bytearray)):
        try:
            payload = bytes(payload).decode("utf-8")
        except UnicodeDecodeError as e:
            raise FormatError(f"Payload is not UTF-8 text: {e}") from e

    if not isinstance(payload, str):
        raise FormatError(f"Unsupported payload type: {type(payload).__name__}")

    text = payload.strip()
    if text.startswith('"') or '\\"' in text:
        text = unescape_svg_content(text).strip()
    if not text:
        raise FormatError("Payload is empty")

    detected = _detect_text(text)
    if detected is None:
        raise FormatError(f"Unrecognized payload starting with {text[:40]!r}")

    logger.debug("Detected payload format", format=detected.format, items=len(detected.items))
    return detected
