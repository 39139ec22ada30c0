"""MCP server module - FastMCP tool registration and wiring."""

from figmabridge.mcp.context import AppContext
from figmabridge.mcp.server import create_mcp_server, handle_extract_figma_context

__all__ = ["AppContext", "create_mcp_server", "handle_extract_figma_context"]
