"""Shared pieces for the tool modules: input types, annotations and helpers."""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import Annotated, Any

from mcp.types import CallToolResult, TextContent, ToolAnnotations
from pydantic import Field

from qinglong_mcp.core.client import QinglongClient, handle_api_error
from qinglong_mcp.core.constants import MAX_LIMIT, ResponseFormat
from qinglong_mcp.core.exceptions import QinglongError
from qinglong_mcp.core.formatters import (
    PageWindow,
    extract_list,
    fit_structured,
    format_list_response,
    format_response,
    truncate_text,
)
from qinglong_mcp.core.transport import HttpMethod

ClientFactory = Callable[[], QinglongClient]

# =============================================================================
# Input Types
# =============================================================================

SearchValue = Annotated[str | None, Field(description="Search keyword")]
Limit = Annotated[int, Field(ge=1, le=MAX_LIMIT, description="Number of items to return")]
Offset = Annotated[int, Field(ge=0, description="Number of items to skip")]
Format = Annotated[
    ResponseFormat, Field(description="Output format: markdown (readable) or json (structured)")
]
ItemId = Annotated[int, Field(gt=0, description="Item ID")]
Ids = Annotated[list[Annotated[int, Field(gt=0)]], Field(min_length=1, description="Item IDs")]

# =============================================================================
# Tool Annotations
# =============================================================================

READ_ONLY = ToolAnnotations(
    readOnlyHint=True, destructiveHint=False, idempotentHint=True, openWorldHint=True
)
CREATE = ToolAnnotations(
    readOnlyHint=False, destructiveHint=False, idempotentHint=False, openWorldHint=True
)
UPDATE = ToolAnnotations(
    readOnlyHint=False, destructiveHint=False, idempotentHint=True, openWorldHint=True
)
ACTION = CREATE
DESTRUCTIVE = ToolAnnotations(
    readOnlyHint=False, destructiveHint=True, idempotentHint=False, openWorldHint=True
)

# =============================================================================
# Helpers
# =============================================================================


def timestamp_ms() -> int:
    """Millisecond timestamp, sent as ``t`` to bypass the panel's list cache."""
    return int(time.time() * 1000)


def respond(text: str) -> str:
    """Final markdown or raw text handed back to the agent, kept under the character limit.

    JSON dumps never go through here; cutting them would leave invalid JSON.
    """
    return truncate_text(text)


def error_text(error: BaseException) -> str:
    return respond(handle_api_error(error))


def tool_result(text: str, structured: dict[str, Any] | None = None) -> CallToolResult:
    """Result of a read tool: ``text`` for the agent plus the data as ``structuredContent``.

    Errors and empty results carry text only.
    """
    return CallToolResult(
        content=[TextContent(type="text", text=text)], structuredContent=structured
    )


def render_list(
    response: Any,
    *,
    offset: int,
    limit: int,
    render_item: Callable[[Any], str],
    title: str,
    empty_message: str,
    response_format: ResponseFormat,
) -> CallToolResult:
    """Normalize a list response, apply the page window and format it.

    Markdown is truncated at the character limit. A JSON page is shrunk to fit
    instead, with ``has_more``/``next_offset`` pointing at the dropped items.
    """
    view = extract_list(response)
    if not view.items:
        return tool_result(empty_message)

    rendered = format_list_response(
        view.items,
        view.total,
        PageWindow(offset=offset, limit=limit),
        render_item,
        title,
    )
    if ResponseFormat(response_format) is ResponseFormat.JSON:
        structured = fit_structured(rendered.structured)
        return tool_result(format_response(rendered.text, structured, response_format), structured)
    return tool_result(respond(rendered.text), rendered.structured)


async def run_batch_action(
    client: QinglongClient,
    endpoint: str,
    ids: list[int],
    message: str,
    method: HttpMethod = "PUT",
) -> str:
    """Send an ID list to a batch endpoint.

    Args:
        client: Panel client.
        endpoint: Batch endpoint, e.g. ``/crons/run``.
        ids: IDs to act on, sent as the JSON body.
        message: Success text with a ``{count}`` placeholder.
        method: HTTP method of the endpoint.
    """
    try:
        await client.request(endpoint, method, ids)
    except QinglongError as e:
        return error_text(e)
    return f"✅ {message.format(count=len(ids))}"
