"""Cron job tools (``/crons``)."""

from typing import Annotated, Any

from mcp.server.fastmcp import FastMCP
from mcp.types import CallToolResult
from pydantic import Field

from qinglong_mcp.core.client import QinglongClient
from qinglong_mcp.core.constants import DEFAULT_LIMIT, ResponseFormat
from qinglong_mcp.core.exceptions import QinglongError
from qinglong_mcp.core.formatters import to_json
from qinglong_mcp.mcp.tools.common import (
    ACTION,
    CREATE,
    DESTRUCTIVE,
    READ_ONLY,
    UPDATE,
    ClientFactory,
    Format,
    Ids,
    ItemId,
    Limit,
    Offset,
    SearchValue,
    error_text,
    render_list,
    respond,
    run_batch_action,
    timestamp_ms,
    tool_result,
)

Name = Annotated[str, Field(min_length=1, description="Cron job name")]
Command = Annotated[str, Field(min_length=1, description="Command to execute, e.g. task demo.js")]
Schedule = Annotated[str, Field(min_length=1, description="Cron expression, e.g. 0 0 * * *")]


def render_cron(cron: dict[str, Any]) -> str:
    text = f"## {cron.get('name')} (ID: {cron.get('id')})\n"
    text += f"- **Command**: `{cron.get('command')}`\n"
    text += f"- **Schedule**: `{cron.get('schedule')}`\n"
    text += f"- **Status**: {'Disabled' if cron.get('isDisabled') else 'Enabled'}\n\n"
    return text


# =============================================================================
# Tool Implementations
# =============================================================================


async def list_crons(
    client: QinglongClient,
    search_value: str | None = None,
    limit: int = DEFAULT_LIMIT,
    offset: int = 0,
    response_format: ResponseFormat = ResponseFormat.MARKDOWN,
) -> CallToolResult:
    """List cron jobs, filtered server-side by ``search_value`` and paged locally."""
    try:
        response = await client.request(
            "/crons", "GET", query={"searchValue": search_value, "t": timestamp_ms()}
        )
    except QinglongError as e:
        return tool_result(error_text(e))

    return render_list(
        response,
        offset=offset,
        limit=limit,
        render_item=render_cron,
        title="Cron Jobs",
        empty_message="No cron jobs found",
        response_format=response_format,
    )


async def save_cron(client: QinglongClient, body: dict[str, Any], *, update: bool) -> str:
    """Create (POST) or update (PUT) a cron job."""
    try:
        cron = await client.request("/crons", "PUT" if update else "POST", body)
    except QinglongError as e:
        return error_text(e)

    cron = cron if isinstance(cron, dict) else {}
    action = "updated" if update else "created"
    return f"✅ Cron job {action}\n\nID: {cron.get('id')}\nName: {cron.get('name')}"


async def get_cron_log(client: QinglongClient, cron_id: int) -> str:
    """Return the latest log output of one cron job."""
    try:
        response = await client.request(f"/crons/{cron_id}/log", "GET")
    except QinglongError as e:
        return error_text(e)

    log = response.get("log") if isinstance(response, dict) else response
    return respond(str(log)) if log else "No log output"


async def get_cron_logs(client: QinglongClient, cron_id: int) -> CallToolResult:
    """Return all log records of one cron job as JSON, untruncated."""
    try:
        response = await client.request(f"/crons/{cron_id}/logs", "GET")
    except QinglongError as e:
        return tool_result(error_text(e))

    text = to_json(response) if response else "No log records"
    return tool_result(text, {"logs": response})


# =============================================================================
# Registration
# =============================================================================


def register(mcp: FastMCP, get_client: ClientFactory) -> None:
    """Register the cron job tools on ``mcp``."""

    @mcp.tool(name="qinglong_list_crons", title="List cron jobs", annotations=READ_ONLY)
    async def qinglong_list_crons(
        search_value: SearchValue = None,
        limit: Limit = DEFAULT_LIMIT,
        offset: Offset = 0,
        response_format: Format = ResponseFormat.MARKDOWN,
    ) -> CallToolResult:
        """List all cron jobs on the Qinglong panel, with search and pagination."""
        return await list_crons(get_client(), search_value, limit, offset, response_format)

    @mcp.tool(name="qinglong_create_cron", title="Create cron job", annotations=CREATE)
    async def qinglong_create_cron(name: Name, command: Command, schedule: Schedule) -> str:
        """Create a new cron job."""
        body = {"name": name, "command": command, "schedule": schedule}
        return await save_cron(get_client(), body, update=False)

    @mcp.tool(name="qinglong_update_cron", title="Update cron job", annotations=UPDATE)
    async def qinglong_update_cron(
        id: ItemId, name: Name, command: Command, schedule: Schedule
    ) -> str:
        """Update an existing cron job."""
        body = {"id": id, "name": name, "command": command, "schedule": schedule}
        return await save_cron(get_client(), body, update=True)

    @mcp.tool(name="qinglong_delete_crons", title="Delete cron jobs", annotations=DESTRUCTIVE)
    async def qinglong_delete_crons(ids: Ids) -> str:
        """Delete one or more cron jobs."""
        return await run_batch_action(
            get_client(), "/crons", ids, "Deleted {count} cron job(s)", method="DELETE"
        )

    @mcp.tool(name="qinglong_run_crons", title="Run cron jobs", annotations=ACTION)
    async def qinglong_run_crons(ids: Ids) -> str:
        """Run one or more cron jobs immediately."""
        return await run_batch_action(get_client(), "/crons/run", ids, "Started {count} job(s)")

    @mcp.tool(name="qinglong_stop_crons", title="Stop cron jobs", annotations=ACTION)
    async def qinglong_stop_crons(ids: Ids) -> str:
        """Stop one or more running cron jobs."""
        return await run_batch_action(get_client(), "/crons/stop", ids, "Stopped {count} job(s)")

    @mcp.tool(name="qinglong_enable_crons", title="Enable cron jobs", annotations=UPDATE)
    async def qinglong_enable_crons(ids: Ids) -> str:
        """Enable one or more cron jobs."""
        return await run_batch_action(
            get_client(), "/crons/enable", ids, "Enabled {count} job(s)"
        )

    @mcp.tool(name="qinglong_disable_crons", title="Disable cron jobs", annotations=UPDATE)
    async def qinglong_disable_crons(ids: Ids) -> str:
        """Disable one or more cron jobs."""
        return await run_batch_action(
            get_client(), "/crons/disable", ids, "Disabled {count} job(s)"
        )

    @mcp.tool(name="qinglong_get_cron_log", title="Get cron job log", annotations=READ_ONLY)
    async def qinglong_get_cron_log(id: ItemId) -> str:
        """Get the latest execution log of a cron job."""
        return await get_cron_log(get_client(), id)

    @mcp.tool(name="qinglong_get_cron_logs", title="List cron job logs", annotations=READ_ONLY)
    async def qinglong_get_cron_logs(id: ItemId) -> CallToolResult:
        """Get all log records of a cron job."""
        return await get_cron_logs(get_client(), id)
