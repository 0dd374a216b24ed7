"""Shared fixtures for MCP server tests."""

import pytest
from mcp.types import CallToolResult

from qinglong_mcp.mcp.server import create_server


@pytest.fixture
def mcp_server(client):
    """Create a server whose tools talk to the fake panel."""
    return create_server(client=client)


def result_text(result) -> str:
    """Text of the first content block of a tool result.

    Accepts a ``CallToolResult`` from a read tool or the content sequence
    (or content/structured pair) FastMCP.call_tool returns for plain text.
    """
    if isinstance(result, CallToolResult):
        return result.content[0].text
    content = result[0] if isinstance(result, tuple) else result
    return content[0].text


@pytest.fixture
def text_of():
    """Provide the tool result reader."""
    return result_text
