"""Request Facade - the single entry point every tool uses to call the panel.

Qinglong wraps most responses in an envelope ``{code, data, message}``. Some
endpoints (raw file and log content) return the body directly. The facade
decides between the two by one structural check, the presence of ``code``:

    Envelope(code=200, data=...)  -> data
    Envelope(code!=200, ...)      -> ApiError
    RawBody(value)                -> value unchanged
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any

import httpx

from qinglong_mcp.core.config import QinglongConfig, load_config
from qinglong_mcp.core.constants import SUCCESS_CODE
from qinglong_mcp.core.exceptions import ApiError, QinglongError
from qinglong_mcp.core.session import SessionManager
from qinglong_mcp.core.transport import HttpMethod, Transport

# =============================================================================
# Envelope Parsing
# =============================================================================


@dataclass(frozen=True)
class Envelope:
    """A response that follows the panel's ``{code, data, message}`` wrapper."""

    code: Any
    data: Any = None
    message: str | None = None


@dataclass(frozen=True)
class RawBody:
    """A response body that does not use the envelope."""

    value: Any


def parse_response(raw: Any) -> Envelope | RawBody:
    """Classify a decoded response body as an envelope or a raw body."""
    if isinstance(raw, dict) and "code" in raw:
        return Envelope(code=raw["code"], data=raw.get("data"), message=raw.get("message"))
    return RawBody(raw)


def unwrap(raw: Any) -> Any:
    """Return the payload of a response body.

    Raises:
        ApiError: If the body is an envelope with a code other than 200.
    """
    parsed = parse_response(raw)
    if isinstance(parsed, RawBody):
        return parsed.value
    if parsed.code != SUCCESS_CODE:
        code = parsed.code if isinstance(parsed.code, int) else None
        raise ApiError(parsed.message or f"API request failed ({parsed.code})", code=code)
    return parsed.data


# =============================================================================
# Client
# =============================================================================


class QinglongClient:
    """Authenticated client for the Qinglong OpenAPI.

    The transport is built on the first request and reused afterwards.

    Args:
        config: Panel configuration. Loaded from the environment when omitted.
        session: Session manager. Built from ``config`` when omitted.
        http_transport: Optional httpx transport passed to the HTTP client.
    """

    def __init__(
        self,
        config: QinglongConfig | None = None,
        session: SessionManager | None = None,
        http_transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config or load_config()
        self.session = session or SessionManager(self.config)
        self._http_transport = http_transport
        self._transport: Transport | None = None

    @property
    def transport(self) -> Transport:
        """The shared transport, created on first access."""
        if self._transport is None:
            self._transport = Transport(self.config, self.session, self._http_transport)
        return self._transport

    async def request(
        self,
        endpoint: str,
        method: HttpMethod = "GET",
        body: Any = None,
        query: dict[str, Any] | None = None,
    ) -> Any:
        """Call an OpenAPI endpoint and return its unwrapped payload.

        Args:
            endpoint: Path below ``/open``, e.g. ``/crons``.
            method: HTTP method.
            body: JSON body for POST/PUT/DELETE.
            query: Query parameters; ``None`` values are dropped.

        Returns:
            The envelope ``data`` or, for non-enveloped endpoints, the raw body.

        Raises:
            QinglongError: Any classified failure.
        """
        raw = await self.transport.send(endpoint, method, body, query)
        return unwrap(raw)

    async def aclose(self) -> None:
        """Release the HTTP connection pool."""
        if self._transport is not None:
            await self._transport.aclose()


# =============================================================================
# Process-wide Client
# =============================================================================

_client: QinglongClient | None = None
_client_lock = threading.Lock()


def get_client() -> QinglongClient:
    """Return the process-wide client, creating it from the environment once."""
    global _client
    if _client is None:
        with _client_lock:
            if _client is None:
                _client = QinglongClient()
    return _client


def reset_client() -> None:
    """Forget the process-wide client (useful for testing)."""
    global _client
    with _client_lock:
        _client = None


def handle_api_error(error: BaseException) -> str:
    """Render an exception as a message for the agent."""
    if isinstance(error, QinglongError):
        return str(error)
    if str(error):
        return f"Unexpected error: {error}"
    return f"Unexpected error: {type(error).__name__}"
