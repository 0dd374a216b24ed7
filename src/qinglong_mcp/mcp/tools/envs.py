"""Environment variable tools (``/envs``)."""

from typing import Annotated, Any

from mcp.server.fastmcp import FastMCP
from mcp.types import CallToolResult
from pydantic import BaseModel, Field

from qinglong_mcp.core.client import QinglongClient
from qinglong_mcp.core.constants import DEFAULT_LIMIT, ResponseFormat
from qinglong_mcp.core.exceptions import QinglongError
from qinglong_mcp.mcp.tools.common import (
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
    run_batch_action,
    timestamp_ms,
    tool_result,
)

# Panel status values for an environment variable
ENV_DISABLED = 1


class EnvInput(BaseModel):
    """An environment variable to create."""

    name: str = Field(min_length=1, description="Variable name")
    value: str = Field(description="Variable value")
    remarks: str | None = Field(default=None, description="Remarks")


def render_env(env: dict[str, Any]) -> str:
    text = f"## {env.get('name')} (ID: {env.get('id')})\n"
    text += f"- **Value**: `{env.get('value')}`\n"
    if env.get("remarks"):
        text += f"- **Remarks**: {env['remarks']}\n"
    text += f"- **Status**: {'Disabled' if env.get('status') == ENV_DISABLED else 'Enabled'}\n\n"
    return text


async def list_envs(
    client: QinglongClient,
    search_value: str | None = None,
    limit: int = DEFAULT_LIMIT,
    offset: int = 0,
    response_format: ResponseFormat = ResponseFormat.MARKDOWN,
) -> CallToolResult:
    try:
        response = await client.request(
            "/envs", "GET", query={"searchValue": search_value, "t": timestamp_ms()}
        )
    except QinglongError as e:
        return tool_result(error_text(e))

    return render_list(
        response,
        offset=offset,
        limit=limit,
        render_item=render_env,
        title="Environment Variables",
        empty_message="No environment variables found",
        response_format=response_format,
    )


async def create_envs(client: QinglongClient, envs: list[EnvInput]) -> str:
    body = [env.model_dump(exclude_none=True) for env in envs]
    try:
        created = await client.request("/envs", "POST", body)
    except QinglongError as e:
        return error_text(e)

    count = len(created) if isinstance(created, list) else len(body)
    return f"✅ Created {count} environment variable(s)"


async def update_env(
    client: QinglongClient, env_id: int, name: str, value: str, remarks: str | None = None
) -> str:
    body: dict[str, Any] = {"id": env_id, "name": name, "value": value}
    if remarks is not None:
        body["remarks"] = remarks
    try:
        env = await client.request("/envs", "PUT", body)
    except QinglongError as e:
        return error_text(e)

    env = env if isinstance(env, dict) else {}
    return f"✅ Environment variable updated\n\nID: {env.get('id')}\nName: {env.get('name')}"


def register(mcp: FastMCP, get_client: ClientFactory) -> None:
    """Register the environment variable tools on ``mcp``."""

    @mcp.tool(
        name="qinglong_list_envs", title="List environment variables", annotations=READ_ONLY
    )
    async def qinglong_list_envs(
        search_value: SearchValue = None,
        limit: Limit = DEFAULT_LIMIT,
        offset: Offset = 0,
        response_format: Format = ResponseFormat.MARKDOWN,
    ) -> CallToolResult:
        """List all environment variables on the Qinglong panel."""
        return await list_envs(get_client(), search_value, limit, offset, response_format)

    @mcp.tool(
        name="qinglong_create_envs", title="Create environment variables", annotations=CREATE
    )
    async def qinglong_create_envs(
        envs: Annotated[list[EnvInput], Field(min_length=1, description="Variables to create")],
    ) -> str:
        """Create one or more environment variables."""
        return await create_envs(get_client(), envs)

    @mcp.tool(
        name="qinglong_update_env", title="Update environment variable", annotations=UPDATE
    )
    async def qinglong_update_env(
        id: ItemId,
        name: Annotated[str, Field(min_length=1, description="Variable name")],
        value: Annotated[str, Field(description="Variable value")],
        remarks: Annotated[str | None, Field(description="Remarks")] = None,
    ) -> str:
        """Update an existing environment variable."""
        return await update_env(get_client(), id, name, value, remarks)

    @mcp.tool(
        name="qinglong_delete_envs", title="Delete environment variables", annotations=DESTRUCTIVE
    )
    async def qinglong_delete_envs(ids: Ids) -> str:
        """Delete one or more environment variables."""
        return await run_batch_action(
            get_client(), "/envs", ids, "Deleted {count} environment variable(s)", method="DELETE"
        )

    @mcp.tool(
        name="qinglong_enable_envs", title="Enable environment variables", annotations=UPDATE
    )
    async def qinglong_enable_envs(ids: Ids) -> str:
        """Enable one or more environment variables."""
        return await run_batch_action(
            get_client(), "/envs/enable", ids, "Enabled {count} environment variable(s)"
        )

    @mcp.tool(
        name="qinglong_disable_envs", title="Disable environment variables", annotations=UPDATE
    )
    async def qinglong_disable_envs(ids: Ids) -> str:
        """Disable one or more environment variables."""
        return await run_batch_action(
            get_client(), "/envs/disable", ids, "Disabled {count} environment variable(s)"
        )
