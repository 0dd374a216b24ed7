"""Subscription tools (``/subscriptions``)."""

from typing import Annotated, Any

from mcp.server.fastmcp import FastMCP
from mcp.types import CallToolResult
from pydantic import Field

from qinglong_mcp.core.client import QinglongClient
from qinglong_mcp.core.constants import DEFAULT_LIMIT, ResponseFormat
from qinglong_mcp.core.exceptions import QinglongError
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
    run_batch_action,
    timestamp_ms,
    tool_result,
)

Alias = Annotated[str, Field(min_length=1, description="Subscription alias")]
SubType = Annotated[str, Field(description="Subscription type, e.g. public-repo, private-repo, file")]
RepoUrl = Annotated[
    str, Field(pattern=r"^[A-Za-z][A-Za-z0-9+.-]*://\S+$", description="Repository or file URL")
]
ScheduleType = Annotated[str, Field(description="Schedule type: crontab or interval")]
OptionalText = Annotated[str | None, Field(description="Optional value")]


def render_subscription(sub: dict[str, Any]) -> str:
    text = f"## {sub.get('alias') or sub.get('name')} (ID: {sub.get('id')})\n"
    text += f"- **Type**: {sub.get('type')}\n"
    text += f"- **URL**: {sub.get('url')}\n"
    text += f"- **Status**: {'Disabled' if sub.get('isDisabled') else 'Enabled'}\n\n"
    return text


def build_subscription_body(**fields: Any) -> dict[str, Any]:
    """Panel payload for create/update, without unset optional fields."""
    return {key: value for key, value in fields.items() if value is not None}


async def list_subscriptions(
    client: QinglongClient,
    search_value: str | None = None,
    limit: int = DEFAULT_LIMIT,
    offset: int = 0,
    response_format: ResponseFormat = ResponseFormat.MARKDOWN,
) -> CallToolResult:
    try:
        response = await client.request(
            "/subscriptions", "GET", query={"searchValue": search_value, "t": timestamp_ms()}
        )
    except QinglongError as e:
        return tool_result(error_text(e))

    return render_list(
        response,
        offset=offset,
        limit=limit,
        render_item=render_subscription,
        title="Subscriptions",
        empty_message="No subscriptions found",
        response_format=response_format,
    )


async def save_subscription(
    client: QinglongClient, body: dict[str, Any], *, update: bool
) -> str:
    try:
        sub = await client.request("/subscriptions", "PUT" if update else "POST", body)
    except QinglongError as e:
        return error_text(e)

    sub = sub if isinstance(sub, dict) else {}
    action = "updated" if update else "created"
    return f"✅ Subscription {action}\n\nID: {sub.get('id')}\nAlias: {sub.get('alias')}"


def register(mcp: FastMCP, get_client: ClientFactory) -> None:
    """Register the subscription tools on ``mcp``."""

    @mcp.tool(name="qinglong_list_subscriptions", title="List subscriptions", annotations=READ_ONLY)
    async def qinglong_list_subscriptions(
        search_value: SearchValue = None,
        limit: Limit = DEFAULT_LIMIT,
        offset: Offset = 0,
        response_format: Format = ResponseFormat.MARKDOWN,
    ) -> CallToolResult:
        """List all subscriptions on the Qinglong panel."""
        return await list_subscriptions(get_client(), search_value, limit, offset, response_format)

    @mcp.tool(name="qinglong_create_subscription", title="Create subscription", annotations=CREATE)
    async def qinglong_create_subscription(
        alias: Alias,
        type: SubType,
        url: RepoUrl,
        schedule_type: ScheduleType,
        schedule: Annotated[str | None, Field(description="Cron expression")] = None,
        branch: Annotated[str | None, Field(description="Branch")] = None,
        whitelist: Annotated[str | None, Field(description="Whitelist pattern")] = None,
        blacklist: Annotated[str | None, Field(description="Blacklist pattern")] = None,
        auto_add_cron: Annotated[
            bool | None, Field(description="Add cron jobs for new scripts")
        ] = None,
        auto_del_cron: Annotated[
            bool | None, Field(description="Delete cron jobs of removed scripts")
        ] = None,
    ) -> str:
        """Create a new subscription."""
        body = build_subscription_body(
            alias=alias,
            type=type,
            url=url,
            schedule_type=schedule_type,
            schedule=schedule,
            branch=branch,
            whitelist=whitelist,
            blacklist=blacklist,
            autoAddCron=auto_add_cron,
            autoDelCron=auto_del_cron,
        )
        return await save_subscription(get_client(), body, update=False)

    @mcp.tool(name="qinglong_update_subscription", title="Update subscription", annotations=UPDATE)
    async def qinglong_update_subscription(
        id: ItemId,
        alias: Alias,
        type: SubType,
        url: RepoUrl,
        schedule_type: ScheduleType,
        schedule: OptionalText = None,
        branch: OptionalText = None,
        whitelist: OptionalText = None,
        blacklist: OptionalText = None,
    ) -> str:
        """Update an existing subscription."""
        body = build_subscription_body(
            id=id,
            alias=alias,
            type=type,
            url=url,
            schedule_type=schedule_type,
            schedule=schedule,
            branch=branch,
            whitelist=whitelist,
            blacklist=blacklist,
        )
        return await save_subscription(get_client(), body, update=True)

    @mcp.tool(
        name="qinglong_delete_subscriptions", title="Delete subscriptions", annotations=DESTRUCTIVE
    )
    async def qinglong_delete_subscriptions(ids: Ids) -> str:
        """Delete one or more subscriptions."""
        return await run_batch_action(
            get_client(), "/subscriptions", ids, "Deleted {count} subscription(s)", method="DELETE"
        )

    @mcp.tool(name="qinglong_run_subscriptions", title="Run subscriptions", annotations=ACTION)
    async def qinglong_run_subscriptions(ids: Ids) -> str:
        """Run one or more subscriptions immediately."""
        return await run_batch_action(
            get_client(), "/subscriptions/run", ids, "Started {count} subscription(s)"
        )

    @mcp.tool(
        name="qinglong_enable_subscriptions", title="Enable subscriptions", annotations=UPDATE
    )
    async def qinglong_enable_subscriptions(ids: Ids) -> str:
        """Enable one or more subscriptions."""
        return await run_batch_action(
            get_client(), "/subscriptions/enable", ids, "Enabled {count} subscription(s)"
        )

    @mcp.tool(
        name="qinglong_disable_subscriptions", title="Disable subscriptions", annotations=UPDATE
    )
    async def qinglong_disable_subscriptions(ids: Ids) -> str:
        """Disable one or more subscriptions."""
        return await run_batch_action(
            get_client(), "/subscriptions/disable", ids, "Disabled {count} subscription(s)"
        )
