"""CurveBridge MCP Server package.

Provides MCP (Model Context Protocol) server implementation exposing
bezier path import, path data and SVG export.
"""

from .server import main as server_main
from .tools import CurveBridgeSession

__version__ = "0.1.0"
__all__ = ["server_main", "CurveBridgeSession"]
