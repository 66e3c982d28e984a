"""CurveBridge MCP Server implementation.

Provides a stdio-based MCP server that exposes design import, path data
parsing and generation, and SVG export to agent hosts.
"""

from __future__ import annotations

import sys
from typing import Any, Dict, Optional

import structlog
from mcp.server.fastmcp import FastMCP

from curvebridge.logging_setup import configure_for

from .tools import (
    tool_export_svg,
    tool_import_design,
    tool_parse_path,
    tool_path_data,
    tool_session_info,
)

logger = structlog.get_logger(__name__)

# Create FastMCP app
app = FastMCP("curvebridge")


@app.tool()
def import_design(
    path: Optional[str] = None,
    content: Optional[str] = None,
    preset: str = "default",
) -> Dict[str, Any]:
    """Import a design (JSON, SVG document or path data) into the session.

    Args:
        path: Absolute path to the file to import
        content: Inline JSON, SVG or path data, used when no path is given
        preset: Import limits preset (safe, default, balanced, full)

    Returns:
        Dictionary containing the design ID, detected format, per-object
        summaries, skipped shapes and warnings

    Example:
        >>> import_design(content="M0 0 L100 0 L100 100 Z")
        {
            "success": True,
            "design_id": "design-3f2a1c",
            "format": "svg_path",
            "object_count": 1,
            ...
        }
    """
    try:
        logger.info("MCP tool: import_design", path=path, preset=preset)
        params: Dict[str, Any] = {"preset": preset}
        if path is not None:
            params["path"] = path
        if content is not None:
            params["content"] = content

        result = tool_import_design(params)
        logger.info("MCP tool: import_design completed", success=result.get("success", False))
        return result
    except Exception as e:
        logger.error("MCP tool: import_design failed", path=path, error=str(e))
        return {
            "success": False,
            "error": f"Tool execution failed: {e}",
            "design_id": None,
            "source": path or "inline",
        }


@app.tool()
def parse_path(path_data: str, preset: str = "full") -> Dict[str, Any]:
    """Parse SVG path data into anchors with handles.

    Args:
        path_data: SVG path data (the d attribute)
        preset: Parser fidelity preset (full, balanced, safe)

    Returns:
        Dictionary containing the control points, closure flag, warnings
        and the regenerated path data
    """
    try:
        logger.info("MCP tool: parse_path", length=len(path_data), preset=preset)
        result = tool_parse_path({"path_data": path_data, "preset": preset})
        logger.info("MCP tool: parse_path completed", success=result.get("success", False))
        return result
    except Exception as e:
        logger.error("MCP tool: parse_path failed", error=str(e))
        return {
            "success": False,
            "error": f"Tool execution failed: {e}",
            "points": [],
        }


@app.tool()
def path_data(design_id: str, offset: float = 0.0) -> Dict[str, Any]:
    """Generate SVG path data for every object of an imported design.

    Args:
        design_id: Identifier returned by import_design
        offset: Parallel curve offset (0 for the curves themselves)

    Returns:
        Dictionary containing one path data string per object
    """
    try:
        logger.info("MCP tool: path_data", design_id=design_id, offset=offset)
        result = tool_path_data({"design_id": design_id, "offset": offset})
        logger.info("MCP tool: path_data completed",
                   design_id=design_id, success=result.get("success", False))
        return result
    except Exception as e:
        logger.error("MCP tool: path_data failed", design_id=design_id, error=str(e))
        return {
            "success": False,
            "error": f"Tool execution failed: {e}",
            "design_id": design_id,
            "paths": [],
        }


@app.tool()
def export_svg(
    design_id: str,
    out_path: Optional[str] = None,
    width: float = 800,
    height: float = 600,
) -> Dict[str, Any]:
    """Export an imported design as an SVG document.

    Args:
        design_id: Identifier returned by import_design
        out_path: File to write; the SVG is returned inline when omitted
        width: Canvas width
        height: Canvas height

    Returns:
        Dictionary containing the SVG URI and either its data or its size
    """
    try:
        logger.info("MCP tool: export_svg", design_id=design_id, out_path=out_path)
        params: Dict[str, Any] = {"design_id": design_id, "width": width, "height": height}
        if out_path is not None:
            params["out_path"] = out_path

        result = tool_export_svg(params)
        logger.info("MCP tool: export_svg completed",
                   design_id=design_id, success=result.get("success", False))
        return result
    except Exception as e:
        logger.error("MCP tool: export_svg failed", design_id=design_id, error=str(e))
        return {
            "success": False,
            "error": f"Tool execution failed: {e}",
            "design_id": design_id,
            "uri": None,
        }


@app.tool()
def session_info() -> Dict[str, Any]:
    """Get information about the current session and imported designs.

    Returns:
        Dictionary containing session statistics and design details
    """
    try:
        logger.info("MCP tool: session_info")
        result = tool_session_info()
        logger.info("MCP tool: session_info completed",
                   loaded_designs=len(result.get("designs", [])))
        return result
    except Exception as e:
        logger.error("MCP tool: session_info failed", error=str(e))
        return {
            "success": False,
            "error": f"Tool execution failed: {e}",
            "session_stats": {},
            "designs": [],
        }


def main() -> None:
    """Main entry point for the MCP server.

    Runs the server in stdio mode; logs go to stderr as JSON unless
    CURVEBRIDGE_LOG_ENV selects another preset.
    """
    configure_for(default="production")
    try:
        logger.info("Starting CurveBridge MCP server")
        app.run()
    except KeyboardInterrupt:
        logger.info("MCP server shutting down (keyboard interrupt)")
        sys.exit(0)
    except Exception as e:
        logger.error("MCP server startup failed", error=str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
