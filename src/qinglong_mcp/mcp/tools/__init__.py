"""MCP tool modules, one per panel resource."""

from mcp.server.fastmcp import FastMCP

from qinglong_mcp.mcp.tools import crons, dependencies, envs, scripts, subscriptions, system
from qinglong_mcp.mcp.tools.common import ClientFactory

TOOL_MODULES = (crons, envs, subscriptions, dependencies, scripts, system)


def register_all(mcp: FastMCP, get_client: ClientFactory) -> None:
    """Register every tool module on ``mcp``."""
    for module in TOOL_MODULES:
        module.register(mcp, get_client)


__all__ = ["TOOL_MODULES", "register_all"]
