"""MCP server exposing the Qinglong panel tools."""

from qinglong_mcp.mcp.server import create_server, run_server

__all__ = ["create_server", "run_server"]
