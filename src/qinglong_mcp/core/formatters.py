"""List normalization, pagination and rendering for tool results.

List endpoints answer either with a bare array or with an object carrying
``data`` plus ``total``/``count``. ``extract_list`` turns both into a
``ListView``; ``format_list_response`` applies the caller's offset/limit window
locally and renders markdown alongside a structured view;
``format_response`` picks which of the two the agent sees, and ``fit_structured``
shrinks a JSON page that would not fit in the character limit.
"""

from __future__ import annotations

import json
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from qinglong_mcp.core.constants import CHARACTER_LIMIT, MAX_LIMIT, ResponseFormat


@dataclass(frozen=True)
class ListView:
    """Uniform view of a list response."""

    items: list[Any]
    total: int | float


class PageWindow(BaseModel):
    """The ``[offset, offset + limit)`` slice requested by the caller."""

    model_config = ConfigDict(frozen=True)

    offset: int = Field(default=0, ge=0)
    limit: int = Field(ge=1, le=MAX_LIMIT)

    @property
    def end(self) -> int:
        return self.offset + self.limit


@dataclass(frozen=True)
class RenderedList:
    """A paginated list rendered as markdown text plus a structured dict."""

    text: str
    structured: dict[str, Any]


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def extract_list(raw: Any) -> ListView:
    """Normalize a list response.

    - list -> items are the list, total is its length
    - dict -> items from ``data`` (when a list), total from ``total``, then
      ``count``, then the number of items
    - anything else -> empty
    """
    if isinstance(raw, list):
        return ListView(items=raw, total=len(raw))

    if isinstance(raw, dict):
        data = raw.get("data")
        items = data if isinstance(data, list) else []
        if _is_number(raw.get("total")):
            total = raw["total"]
        elif _is_number(raw.get("count")):
            total = raw["count"]
        else:
            total = len(items)
        return ListView(items=items, total=total)

    return ListView(items=[], total=0)


def format_list_response(
    items: Sequence[Any],
    total: int | float,
    window: PageWindow,
    render_item: Callable[[Any], str],
    title: str,
) -> RenderedList:
    """Slice ``items`` by ``window`` and render the page.

    Items are rendered in input order. ``next_offset`` is only present when
    ``has_more`` is true.
    """
    page = list(items[window.offset : window.end])
    has_more = total > window.end

    structured: dict[str, Any] = {
        "total": total,
        "count": len(page),
        "offset": window.offset,
        "items": page,
        "has_more": has_more,
    }
    if has_more:
        structured["next_offset"] = window.end

    text = f"# {title}\n\nTotal {total} (showing {len(page)})\n\n"
    text += "".join(render_item(item) for item in page)

    return RenderedList(text=text, structured=structured)


def to_json(value: Any) -> str:
    """Pretty-printed JSON as shown to the agent."""
    return json.dumps(value, indent=2, ensure_ascii=False, default=str)


def format_response(text: str, structured: Any, response_format: ResponseFormat) -> str:
    """Return the markdown ``text`` or a pretty-printed JSON dump of ``structured``."""
    if ResponseFormat(response_format) is ResponseFormat.MARKDOWN:
        return text
    return to_json(structured)


def _shrink_page(structured: dict[str, Any], items: list[Any]) -> dict[str, Any]:
    shrunk = {**structured, "count": len(items), "items": list(items)}
    if len(items) < structured["count"]:
        shrunk["has_more"] = True
        shrunk["next_offset"] = structured["offset"] + len(items)
    return shrunk


def fit_structured(structured: dict[str, Any], limit: int = CHARACTER_LIMIT) -> dict[str, Any]:
    """Drop trailing items from a page until its JSON dump fits in ``limit``.

    JSON is never cut mid-document. The page shrinks instead and the paging
    fields are rewritten so ``next_offset`` picks up at the first dropped
    item. At least one item is kept, so a single oversized item is returned
    whole.
    """
    items = list(structured["items"])
    fitted = structured
    while len(items) > 1 and len(to_json(fitted)) > limit:
        items.pop()
        fitted = _shrink_page(structured, items)
    return fitted


def truncate_text(text: str, limit: int = CHARACTER_LIMIT) -> str:
    """Cut markdown ``text`` to ``limit`` characters, noting how much was dropped."""
    if len(text) <= limit:
        return text
    omitted = len(text) - limit
    return (
        text[:limit]
        + f"\n\n... [truncated, {omitted} characters omitted; "
        "use offset/limit or a search filter to narrow the result]"
    )
