"""graphscan MCP server — exposes structural clustering as tools for AI agents."""

from graphscan.mcp.server import mcp, run_server

__all__ = ["mcp", "run_server"]
