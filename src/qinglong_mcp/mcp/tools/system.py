"""System tools (``/system``)."""

from datetime import datetime
from typing import Annotated, Any

from mcp.server.fastmcp import FastMCP
from mcp.types import CallToolResult
from pydantic import Field

from qinglong_mcp.core.client import QinglongClient
from qinglong_mcp.core.exceptions import QinglongError
from qinglong_mcp.mcp.tools.common import (
    CREATE,
    READ_ONLY,
    ClientFactory,
    error_text,
    tool_result,
)


def format_publish_time(value: Any) -> str:
    """Render the panel's publish time (epoch milliseconds) as local time."""
    if isinstance(value, (int, float)) and not isinstance(value, bool) and value > 0:
        return datetime.fromtimestamp(value / 1000).strftime("%Y-%m-%d %H:%M:%S")
    return "unknown"


async def get_system_info(client: QinglongClient) -> CallToolResult:
    try:
        info = await client.request("/system", "GET")
    except QinglongError as e:
        return tool_result(error_text(e))

    info = info if isinstance(info, dict) else {}
    initialized = "yes" if info.get("isInitialized") else "no"
    text = (
        "# System Information\n\n"
        f"- **Version**: {info.get('version')}\n"
        f"- **Branch**: {info.get('branch')}\n"
        f"- **Initialized**: {initialized}\n"
        f"- **Published**: {format_publish_time(info.get('publishTime'))}\n"
    )
    return tool_result(text, info)


async def send_notification(client: QinglongClient, title: str, content: str) -> str:
    try:
        await client.request("/system/notify", "PUT", {"title": title, "content": content})
    except QinglongError as e:
        return error_text(e)
    return "✅ Notification sent"


def register(mcp: FastMCP, get_client: ClientFactory) -> None:
    """Register the system tools on ``mcp``."""

    @mcp.tool(name="qinglong_get_system_info", title="Get system info", annotations=READ_ONLY)
    async def qinglong_get_system_info() -> CallToolResult:
        """Get the Qinglong panel version and system information."""
        return await get_system_info(get_client())

    @mcp.tool(name="qinglong_send_notification", title="Send notification", annotations=CREATE)
    async def qinglong_send_notification(
        title: Annotated[str, Field(min_length=1, description="Notification title")],
        content: Annotated[str, Field(min_length=1, description="Notification body")],
    ) -> str:
        """Send a notification through the panel's configured notification channel."""
        return await send_notification(get_client(), title, content)
