"""MCP server for the Qinglong panel.

Registers one tool per panel operation (cron jobs, environment variables,
subscriptions, dependencies, scripts, logs and system) on a FastMCP server.

Security Note:
    The server defaults to the stdio transport. Network transports (sse,
    streamable-http) bind to localhost (127.0.0.1) by default and have no
    authentication of their own: anyone who can reach the port can drive the
    panel with the configured credentials.
"""

from __future__ import annotations

import logging
import os
from typing import Literal

from mcp.server.fastmcp import FastMCP

from qinglong_mcp.core.client import QinglongClient, get_client
from qinglong_mcp.core.config import QinglongConfig, load_config
from qinglong_mcp.core.constants import SERVER_NAME
from qinglong_mcp.core.exceptions import ConfigurationError
from qinglong_mcp.mcp.tools import register_all

logger = logging.getLogger(__name__)

MCP_HOST = os.getenv("QL_MCP_HOST", "127.0.0.1")
MCP_PORT = int(os.getenv("QL_MCP_PORT", "8080"))

LOCAL_HOSTS = ("127.0.0.1", "localhost", "::1")

TransportType = Literal["stdio", "sse", "streamable-http"]

INSTRUCTIONS = (
    "Tools for managing a Qinglong task panel: cron jobs, environment variables, "
    "subscriptions, dependencies, scripts, logs and notifications. List tools accept "
    "limit/offset for paging and response_format=json for structured output."
)


# =============================================================================
# MCP Server Factory
# =============================================================================


class _LazyClient:
    """Builds the panel client on first use and hands out the same instance afterwards.

    Without a config or client the process-wide client from ``get_client`` is used.
    """

    def __init__(self, config: QinglongConfig | None, client: QinglongClient | None) -> None:
        self._config = config
        self.client = client

    def __call__(self) -> QinglongClient:
        if self.client is None:
            if self._config is not None:
                self.client = QinglongClient(self._config)
            else:
                self.client = get_client()
        return self.client


def create_server(
    name: str = SERVER_NAME,
    config: QinglongConfig | None = None,
    client: QinglongClient | None = None,
) -> FastMCP:
    """Create the MCP server with all panel tools registered.

    Args:
        name: Server name for identification.
        config: Panel configuration. Loaded from the environment on first use when omitted.
        client: Pre-built client, mainly for tests.

    Returns:
        Configured FastMCP server instance.
    """
    mcp = FastMCP(name, instructions=INSTRUCTIONS)
    get_client = _LazyClient(config, client)
    register_all(mcp, get_client)
    return mcp


# =============================================================================
# Server Runner
# =============================================================================


def _log_server_config(
    config: QinglongConfig,
    transport: TransportType,
    host: str,
    port: int,
) -> None:
    """Log server configuration at startup."""
    logger.info("=" * 50)
    logger.info("Qinglong MCP Server Configuration:")
    logger.info(f"  Panel URL: {config.url}")
    logger.info(f"  Auth mode: {config.auth_mode.value}")
    logger.info(f"  Transport: {transport}")
    if transport != "stdio":
        logger.info(f"  Host: {host}")
        logger.info(f"  Port: {port}")
    logger.info("=" * 50)


def run_server(
    name: str = SERVER_NAME,
    transport: TransportType = "stdio",
    host: str | None = None,
    port: int | None = None,
    config: QinglongConfig | None = None,
) -> None:
    """Run the MCP server until the transport closes.

    Exits with status 1 when no credentials are configured, since no tool
    could succeed without them.

    Args:
        name: Server name for identification.
        transport: Transport type (stdio, sse, streamable-http).
        host: Host to bind to for network transports. Defaults to 127.0.0.1.
        port: Port to bind to for network transports. Defaults to 8080.
        config: Panel configuration. Loaded from the environment when omitted.
    """
    try:
        config = config or load_config()
        config.require_credentials()
    except ConfigurationError as e:
        logger.error(str(e))
        raise SystemExit(1) from e

    effective_host = host or MCP_HOST
    effective_port = port or MCP_PORT

    _log_server_config(config, transport, effective_host, effective_port)

    if transport != "stdio" and effective_host not in LOCAL_HOSTS:
        logger.warning(
            f"Binding to {effective_host} exposes the panel tools without authentication"
        )

    client = QinglongClient(config)
    mcp = create_server(name=name, config=config, client=client)
    if transport != "stdio":
        mcp.settings.host = effective_host
        mcp.settings.port = effective_port

    mcp.run(transport=transport)
