"""Dependency tools (``/dependencies``)."""

from enum import IntEnum
from typing import Annotated, Any

from mcp.server.fastmcp import FastMCP
from mcp.types import CallToolResult
from pydantic import BaseModel, Field

from qinglong_mcp.core.client import QinglongClient
from qinglong_mcp.core.constants import DEFAULT_LIMIT, ResponseFormat
from qinglong_mcp.core.exceptions import QinglongError
from qinglong_mcp.mcp.tools.common import (
    ACTION,
    CREATE,
    DESTRUCTIVE,
    READ_ONLY,
    ClientFactory,
    Format,
    Ids,
    Limit,
    Offset,
    SearchValue,
    error_text,
    render_list,
    run_batch_action,
    tool_result,
)


class DependencyType(IntEnum):
    """Package manager the panel installs a dependency with."""

    NODE_JS = 1
    PYTHON3 = 2
    LINUX = 3


TYPE_LABELS = {
    DependencyType.NODE_JS: "NodeJS",
    DependencyType.PYTHON3: "Python3",
    DependencyType.LINUX: "Linux",
}


class DependencyInput(BaseModel):
    """A dependency to install."""

    name: str = Field(min_length=1, description="Package name")
    type: DependencyType = Field(description="Dependency type: 1=NodeJS, 2=Python3, 3=Linux")
    remark: str | None = Field(default=None, description="Remark")


def render_dependency(dep: dict[str, Any]) -> str:
    dep_type = dep.get("type")
    try:
        label = TYPE_LABELS[DependencyType(dep_type)]
    except ValueError:
        label = str(dep_type)

    text = f"## {dep.get('name')} (ID: {dep.get('id')})\n"
    text += f"- **Type**: {label}\n"
    if dep.get("remark"):
        text += f"- **Remark**: {dep['remark']}\n"
    return text + "\n"


async def list_dependencies(
    client: QinglongClient,
    search_value: str | None = None,
    limit: int = DEFAULT_LIMIT,
    offset: int = 0,
    response_format: ResponseFormat = ResponseFormat.MARKDOWN,
) -> CallToolResult:
    # no cache-buster here; the filter is only sent when searching
    query = {"searchValue": search_value} if search_value else None
    try:
        response = await client.request("/dependencies", "GET", query=query)
    except QinglongError as e:
        return tool_result(error_text(e))

    return render_list(
        response,
        offset=offset,
        limit=limit,
        render_item=render_dependency,
        title="Dependencies",
        empty_message="No dependencies found",
        response_format=response_format,
    )


async def create_dependencies(client: QinglongClient, dependencies: list[DependencyInput]) -> str:
    body = [dep.model_dump(mode="json", exclude_none=True) for dep in dependencies]
    try:
        created = await client.request("/dependencies", "POST", body)
    except QinglongError as e:
        return error_text(e)

    count = len(created) if isinstance(created, list) else len(body)
    return f"✅ Created {count} dependenc{'y' if count == 1 else 'ies'}"


def register(mcp: FastMCP, get_client: ClientFactory) -> None:
    """Register the dependency tools on ``mcp``."""

    @mcp.tool(name="qinglong_list_dependencies", title="List dependencies", annotations=READ_ONLY)
    async def qinglong_list_dependencies(
        search_value: SearchValue = None,
        limit: Limit = DEFAULT_LIMIT,
        offset: Offset = 0,
        response_format: Format = ResponseFormat.MARKDOWN,
    ) -> CallToolResult:
        """List all dependencies installed through the Qinglong panel."""
        return await list_dependencies(get_client(), search_value, limit, offset, response_format)

    @mcp.tool(
        name="qinglong_create_dependencies", title="Create dependencies", annotations=CREATE
    )
    async def qinglong_create_dependencies(
        dependencies: Annotated[
            list[DependencyInput], Field(min_length=1, description="Dependencies to install")
        ],
    ) -> str:
        """Create (install) one or more dependencies."""
        return await create_dependencies(get_client(), dependencies)

    @mcp.tool(
        name="qinglong_delete_dependencies", title="Delete dependencies", annotations=DESTRUCTIVE
    )
    async def qinglong_delete_dependencies(ids: Ids) -> str:
        """Delete (uninstall) one or more dependencies."""
        return await run_batch_action(
            get_client(), "/dependencies", ids, "Deleted {count} dependency record(s)", method="DELETE"
        )

    @mcp.tool(
        name="qinglong_reinstall_dependencies", title="Reinstall dependencies", annotations=ACTION
    )
    async def qinglong_reinstall_dependencies(ids: Ids) -> str:
        """Reinstall one or more dependencies."""
        return await run_batch_action(
            get_client(), "/dependencies/reinstall", ids, "Reinstalling {count} dependency record(s)"
        )
