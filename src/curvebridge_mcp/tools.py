"""MCP tools implementation with session management.

This module provides the core tools for the CurveBridge MCP server: design
import through the batch pipeline, path data parsing and generation, and
SVG export.
"""

from __future__ import annotations

import time
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import structlog

from curve_import import FormatError, ImportConfig, ImportPipeline, ImportResult
from curve_ir.schema import Design, new_id
from curve_ir.serialize import point_to_dict
from curve_kernel.summary import summarize_design
from svg_codec import (
    InsufficientGeometryError,
    ParseError,
    ParserConfig,
    export_svg,
    generate_path_data,
    parse_path,
)

logger = structlog.get_logger(__name__)

PARSER_PRESETS = {
    "full": ParserConfig.full,
    "balanced": ParserConfig.balanced,
    "safe": ParserConfig.safe,
}


class SessionError(Exception):
    """Raised when session operations fail."""
    pass


class CurveBridgeSession:
    """Session manager for imported designs."""

    def __init__(self, max_designs: int = 10):
        """Initialize session.

        Args:
            max_designs: Maximum number of designs to keep in memory
        """
        self._designs: Dict[str, Design] = {}
        self._results: Dict[str, ImportResult] = {}
        self._sources: Dict[str, str] = {}
        self._load_times: Dict[str, float] = {}
        self._max_designs = max_designs

        logger.info("CurveBridge session initialized", max_designs=max_designs)

    def cleanup_old_designs(self) -> None:
        """Remove oldest designs if we exceed the limit."""
        if len(self._designs) <= self._max_designs:
            return

        by_age = sorted(self._load_times.items(), key=lambda item: item[1])
        for design_id, _ in by_age[:-self._max_designs]:
            self.remove_design(design_id)

    def remove_design(self, design_id: str) -> None:
        """Remove a design from the session."""
        if self._designs.pop(design_id, None) is not None:
            logger.debug("Removed design from session", design_id=design_id)
        self._results.pop(design_id, None)
        self._sources.pop(design_id, None)
        self._load_times.pop(design_id, None)

    def has_design(self, design_id: str) -> bool:
        return design_id in self._designs

    def get_design(self, design_id: str) -> Design:
        """Get an imported design by ID.

        Raises:
            SessionError: If the design is not in the session
        """
        if design_id not in self._designs:
            raise SessionError(f"Design not found in session: {design_id}")
        return self._designs[design_id]

    def get_result(self, design_id: str) -> Optional[ImportResult]:
        return self._results.get(design_id)

    def get_source(self, design_id: str) -> Optional[str]:
        return self._sources.get(design_id)

    def list_designs(self) -> List[str]:
        return list(self._designs.keys())

    def get_session_stats(self) -> Dict[str, Any]:
        """Get session statistics."""
        return {
            "loaded_designs": len(self._designs),
            "max_designs": self._max_designs,
            "design_ids": list(self._designs.keys()),
        }

    def import_design(
        self,
        payload: Union[str, bytes],
        source: str = "inline",
        config: Optional[ImportConfig] = None,
    ) -> tuple[str, ImportResult]:
        """Run the import pipeline and store the resulting design.

        Returns:
            Tuple of (design_id, ImportResult)

        Raises:
            SessionError: If the payload format is not recognized
        """
        logger.info("Importing design", source=source)
        try:
            result = ImportPipeline(config).run(payload)
        except FormatError as e:
            logger.error("Failed to import design", source=source, error=str(e))
            raise SessionError(f"Failed to import design: {e}") from e

        stem = Path(source).stem if source != "inline" else "design"
        design_id = f"{stem}-{new_id()[:6]}"

        self._designs[design_id] = Design(objects=result.objects)
        self._results[design_id] = result
        self._sources[design_id] = source
        self._load_times[design_id] = time.time()
        self.cleanup_old_designs()

        logger.info(
            "Design imported successfully",
            design_id=design_id,
            format=result.format,
            objects=len(result.objects),
            skipped=len(result.skipped),
        )
        return design_id, result

    def export_svg(self, design_id: str, width: float = 800, height: float = 600) -> str:
        return export_svg(self.get_design(design_id), width=width, height=height)

    def path_data(self, design_id: str, offset: float = 0.0) -> List[Dict[str, Any]]:
        """Path data for every object of a design."""
        return [
            {
                "object_id": obj.id,
                "name": obj.name,
                "path_data": generate_path_data(obj.points, offset=offset),
            }
            for obj in self.get_design(design_id).objects
        ]


# Global session instance for MCP tools
_session = CurveBridgeSession()


def _require(params: Dict[str, Any], name: str) -> Any:
    if name not in params:
        raise ValueError(f"Missing required parameter: {name}")
    value = params[name]
    if value is None or value == "":
        raise ValueError(f"Parameter '{name}' cannot be empty")
    return value


def tool_import_design(params: Dict[str, Any]) -> Dict[str, Any]:
    """MCP tool: Import a design from a file or inline content.

    Args:
        params: Tool parameters containing 'path' or 'content', and an
            optional import 'preset'

    Returns:
        Dictionary with import results

    Raises:
        ValueError: If parameters are invalid
    """
    path = params.get("path")
    content = params.get("content")
    if not path and not content:
        raise ValueError("Missing required parameter: path or content")

    preset = params.get("preset", "default")
    try:
        config = ImportConfig.from_env(ImportConfig.preset(preset))
    except KeyError as e:
        raise ValueError(str(e)) from e

    if path:
        file_path = Path(path)
        if not file_path.exists():
            raise ValueError(f"File not found: {path}")
        payload: Union[str, bytes] = file_path.read_bytes()
        source = str(file_path)
    else:
        payload = content
        source = "inline"

    try:
        design_id, result = _session.import_design(payload, source=source, config=config)
    except SessionError as e:
        logger.error("import_design tool failed", source=source, error=str(e))
        return {
            "success": False,
            "error": str(e),
            "design_id": None,
            "source": source,
        }

    return {
        "success": True,
        "design_id": design_id,
        "source": source,
        "format": result.format,
        "object_count": len(result.objects),
        "objects": [s.to_dict() for s in summarize_design(_session.get_design(design_id))],
        "skipped": [
            {"index": s.index, "name": s.name, "reason": s.reason} for s in result.skipped
        ],
        "warnings": list(result.warnings),
        "repairs": len(result.repairs),
        "session_stats": _session.get_session_stats(),
    }


def tool_parse_path(params: Dict[str, Any]) -> Dict[str, Any]:
    """MCP tool: Parse SVG path data into control points.

    Args:
        params: Tool parameters containing 'path_data' and an optional
            parser 'preset' (full, balanced, safe)

    Returns:
        Dictionary with control points and regenerated path data

    Raises:
        ValueError: If parameters are invalid
    """
    path_data = _require(params, "path_data")

    preset = params.get("preset", "full")
    if preset not in PARSER_PRESETS:
        raise ValueError(f"Unsupported preset: {preset}. Use one of {', '.join(PARSER_PRESETS)}")

    try:
        parsed = parse_path(path_data, PARSER_PRESETS[preset]())
    except (ParseError, InsufficientGeometryError) as e:
        logger.error("parse_path tool failed", error=str(e))
        return {
            "success": False,
            "error": str(e),
            "error_type": type(e).__name__,
            "points": [],
        }

    return {
        "success": True,
        "points": [point_to_dict(p) for p in parsed.points],
        "closed": parsed.closed,
        "subpaths": parsed.subpaths,
        "commands_processed": parsed.commands_processed,
        "skipped_groups": parsed.skipped_groups,
        "truncated": parsed.truncated,
        "warnings": list(parsed.warnings),
        "path_data": generate_path_data(parsed.points),
    }


def tool_path_data(params: Dict[str, Any]) -> Dict[str, Any]:
    """MCP tool: Generate SVG path data for an imported design.

    Args:
        params: Tool parameters containing 'design_id' and an optional
            parallel 'offset'

    Returns:
        Dictionary with one path data entry per object

    Raises:
        ValueError: If parameters are invalid
    """
    design_id = _require(params, "design_id")
    offset = float(params.get("offset", 0.0))

    try:
        paths = _session.path_data(design_id, offset=offset)
    except SessionError as e:
        logger.error("path_data tool failed", design_id=design_id, error=str(e))
        return {
            "success": False,
            "error": str(e),
            "design_id": design_id,
            "paths": [],
        }

    return {
        "success": True,
        "design_id": design_id,
        "offset": offset,
        "paths": paths,
    }


def tool_export_svg(params: Dict[str, Any]) -> Dict[str, Any]:
    """MCP tool: Export an imported design as an SVG document.

    Args:
        params: Tool parameters containing 'design_id' and optional
            'out_path', 'width' and 'height'

    Returns:
        Dictionary with the SVG content or the path it was written to

    Raises:
        ValueError: If parameters are invalid
    """
    design_id = _require(params, "design_id")
    width = float(params.get("width", 800))
    height = float(params.get("height", 600))
    if width <= 0 or height <= 0:
        raise ValueError("Canvas dimensions must be positive")

    try:
        svg = _session.export_svg(design_id, width=width, height=height)
    except SessionError as e:
        logger.error("export_svg tool failed", design_id=design_id, error=str(e))
        return {
            "success": False,
            "error": str(e),
            "design_id": design_id,
            "uri": None,
        }

    out_path = params.get("out_path")
    if out_path:
        path = Path(out_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(svg, encoding="utf-8")
        logger.info("SVG written", design_id=design_id, path=str(path))
        return {
            "success": True,
            "design_id": design_id,
            "uri": path.resolve().as_uri(),
            "size_bytes": len(svg.encode("utf-8")),
        }

    return {
        "success": True,
        "design_id": design_id,
        "uri": f"memory://{design_id}.svg",
        "mime_type": "image/svg+xml",
        "data": svg,
    }


def tool_session_info(params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """MCP tool: Get session information and imported designs.

    Args:
        params: Optional parameters (unused)

    Returns:
        Dictionary with session information
    """
    designs = []
    for design_id in _session.list_designs():
        design = _session.get_design(design_id)
        result = _session.get_result(design_id)
        designs.append({
            "design_id": design_id,
            "source": _session.get_source(design_id),
            "format": result.format if result else None,
            "object_count": len(design),
        })

    return {
        "success": True,
        "session_stats": _session.get_session_stats(),
        "designs": designs,
    }
