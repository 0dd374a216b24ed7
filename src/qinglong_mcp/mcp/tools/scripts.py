"""Script and log file tools (``/scripts``, ``/logs``).

The script and log endpoints return file trees and raw file content rather
than the enveloped lists the other resources use, so ``/scripts/detail`` and
``/logs/detail`` may answer with a bare string.
"""

from typing import Annotated, Any

from mcp.server.fastmcp import FastMCP
from mcp.types import CallToolResult
from pydantic import Field

from qinglong_mcp.core.client import QinglongClient
from qinglong_mcp.core.constants import MAX_LIMIT, ResponseFormat
from qinglong_mcp.core.exceptions import QinglongError
from qinglong_mcp.core.formatters import extract_list, to_json
from qinglong_mcp.core.transport import HttpMethod
from qinglong_mcp.mcp.tools.common import (
    ACTION,
    CREATE,
    DESTRUCTIVE,
    READ_ONLY,
    UPDATE,
    ClientFactory,
    Format,
    Limit,
    Offset,
    error_text,
    render_list,
    respond,
    tool_result,
)

Filename = Annotated[str, Field(min_length=1, description="File name")]
FilePath = Annotated[str | None, Field(description="Directory of the file, e.g. scripts/demo")]

DIR_ICON = "📁"
FILE_ICON = "📄"


def render_tree(nodes: list[dict[str, Any]], level: int = 0) -> str:
    """Render a script/log tree with two-space indentation per level."""
    text = ""
    for node in nodes:
        icon = DIR_ICON if node.get("isDir") else FILE_ICON
        text += f"{'  ' * level}{icon} {node.get('title')}\n"
        children = node.get("children")
        if isinstance(children, list) and children:
            text += render_tree(children, level + 1)
    return text


def render_log_entry(log: dict[str, Any]) -> str:
    title = log.get("title")
    return f"- {title if isinstance(title, str) else 'log'}\n"


def _drop_none(**fields: Any) -> dict[str, Any]:
    return {key: value for key, value in fields.items() if value is not None}


# =============================================================================
# Tool Implementations
# =============================================================================


async def list_scripts(
    client: QinglongClient,
    path: str | None = None,
    response_format: ResponseFormat = ResponseFormat.MARKDOWN,
) -> CallToolResult:
    try:
        response = await client.request("/scripts", "GET", query={"path": path})
    except QinglongError as e:
        return tool_result(error_text(e))

    scripts = extract_list(response).items
    if not scripts:
        return tool_result("No script files found")

    if ResponseFormat(response_format) is ResponseFormat.JSON:
        text = to_json(scripts)
    else:
        text = respond(f"# Scripts\n\n{render_tree(scripts)}")
    return tool_result(text, {"scripts": scripts})


async def list_logs(
    client: QinglongClient,
    limit: int = MAX_LIMIT,
    offset: int = 0,
    response_format: ResponseFormat = ResponseFormat.MARKDOWN,
) -> CallToolResult:
    try:
        response = await client.request("/logs", "GET")
    except QinglongError as e:
        return tool_result(error_text(e))

    return render_list(
        response,
        offset=offset,
        limit=limit,
        render_item=render_log_entry,
        title="Log Files",
        empty_message="No log files found",
        response_format=response_format,
    )


async def get_log_detail(
    client: QinglongClient, path: str | None = None, file: str | None = None
) -> CallToolResult:
    try:
        response = await client.request("/logs/detail", "GET", query={"path": path, "file": file})
    except QinglongError as e:
        return tool_result(error_text(e))

    if not response:
        return tool_result("Log file is empty", {"log": ""})
    if not isinstance(response, str):
        return tool_result(to_json(response), {"log": response})
    return tool_result(respond(response), {"log": response})


async def get_script(
    client: QinglongClient, file: str, path: str | None = None
) -> CallToolResult:
    try:
        response = await client.request(
            "/scripts/detail", "GET", query={"file": file, "path": path}
        )
    except QinglongError as e:
        return tool_result(error_text(e))

    if isinstance(response, dict):
        detail = {**response, "filename": response.get("filename") or file}
        content = response.get("content", "")
    else:
        content = "" if response is None else str(response)
        detail = {"filename": file, "path": path, "content": content}
    text = respond(f"# {detail['filename']}\n\n```\n{content}\n```")
    return tool_result(text, {"script": detail})


async def file_action(
    client: QinglongClient,
    endpoint: str,
    method: HttpMethod,
    body: dict[str, Any],
    done: str,
) -> str:
    """Send a file-level request (create/update/delete/run/stop) for one script."""
    try:
        await client.request(endpoint, method, body)
    except QinglongError as e:
        return error_text(e)
    return f"✅ {done}\n\nFile: {body.get('filename')}"


# =============================================================================
# Registration
# =============================================================================


def register(mcp: FastMCP, get_client: ClientFactory) -> None:
    """Register the script and log tools on ``mcp``."""

    @mcp.tool(name="qinglong_list_scripts", title="List scripts", annotations=READ_ONLY)
    async def qinglong_list_scripts(
        path: Annotated[str | None, Field(description="Directory to list, e.g. /scripts")] = None,
        response_format: Format = ResponseFormat.MARKDOWN,
    ) -> CallToolResult:
        """List script files and directories on the Qinglong panel."""
        return await list_scripts(get_client(), path, response_format)

    @mcp.tool(name="qinglong_list_logs", title="List log files", annotations=READ_ONLY)
    async def qinglong_list_logs(
        limit: Limit = MAX_LIMIT,
        offset: Offset = 0,
        response_format: Format = ResponseFormat.MARKDOWN,
    ) -> CallToolResult:
        """List the log files available on the Qinglong panel."""
        return await list_logs(get_client(), limit, offset, response_format)

    @mcp.tool(name="qinglong_get_log_detail", title="Get log content", annotations=READ_ONLY)
    async def qinglong_get_log_detail(
        path: Annotated[str | None, Field(description="Log directory")] = None,
        file: Annotated[str | None, Field(description="Log file name")] = None,
    ) -> CallToolResult:
        """Get the content of a log file."""
        return await get_log_detail(get_client(), path, file)

    @mcp.tool(name="qinglong_get_script", title="Get script content", annotations=READ_ONLY)
    async def qinglong_get_script(file: Filename, path: FilePath = None) -> CallToolResult:
        """Get the content of a script file."""
        return await get_script(get_client(), file, path)

    @mcp.tool(name="qinglong_create_script", title="Create script", annotations=CREATE)
    async def qinglong_create_script(
        filename: Filename,
        content: Annotated[str, Field(description="File content")],
        path: FilePath = None,
        directory: Annotated[
            str | None, Field(description="Directory name, when creating a directory")
        ] = None,
    ) -> str:
        """Create a new script file or directory."""
        body = _drop_none(filename=filename, path=path, content=content, directory=directory)
        return await file_action(get_client(), "/scripts", "POST", body, "Script created")

    @mcp.tool(name="qinglong_update_script", title="Update script", annotations=UPDATE)
    async def qinglong_update_script(
        filename: Filename,
        content: Annotated[str, Field(description="New file content")],
        path: FilePath = None,
    ) -> str:
        """Replace the content of an existing script file."""
        body = _drop_none(filename=filename, path=path, content=content)
        return await file_action(get_client(), "/scripts", "PUT", body, "Script updated")

    @mcp.tool(name="qinglong_delete_script", title="Delete script", annotations=DESTRUCTIVE)
    async def qinglong_delete_script(
        filename: Filename,
        path: FilePath = None,
        type: Annotated[str | None, Field(description="Entry type, e.g. file or directory")] = None,
    ) -> str:
        """Delete a script file or directory."""
        body = _drop_none(filename=filename, path=path, type=type)
        return await file_action(get_client(), "/scripts", "DELETE", body, "Script deleted")

    @mcp.tool(name="qinglong_run_script", title="Run script", annotations=ACTION)
    async def qinglong_run_script(
        filename: Filename,
        path: FilePath = None,
        content: Annotated[str | None, Field(description="Content to run instead")] = None,
    ) -> str:
        """Run a script immediately."""
        body = _drop_none(filename=filename, path=path, content=content)
        return await file_action(get_client(), "/scripts/run", "PUT", body, "Script started")

    @mcp.tool(name="qinglong_stop_script", title="Stop script", annotations=ACTION)
    async def qinglong_stop_script(
        filename: Filename,
        path: FilePath = None,
        pid: Annotated[int | None, Field(description="Process ID")] = None,
    ) -> str:
        """Stop a running script."""
        body = _drop_none(filename=filename, path=path, pid=pid)
        return await file_action(get_client(), "/scripts/stop", "PUT", body, "Script stopped")
