"""Transport - HTTP calls against the panel's OpenAPI with error classification.

One ``httpx.AsyncClient`` is created lazily on the first request and reused for
the lifetime of the transport. Auth headers are fetched from the session
manager on every call, so a refreshed token is picked up immediately.

Failures are mapped, in priority order, to:

- 401 -> AuthenticationError
- 403 -> PermissionDeniedError
- 404 -> NotFoundError
- 429 -> RateLimitError
- other HTTP status >= 400 -> ApiError
- timeout -> RequestTimeoutError
- connection refused -> ConnectionFailedError
- any other transport failure -> NetworkError
"""

from __future__ import annotations

import logging
from typing import Any, Literal

import httpx

from qinglong_mcp.core.config import QinglongConfig
from qinglong_mcp.core.exceptions import (
    ApiError,
    AuthenticationError,
    ConnectionFailedError,
    NetworkError,
    NotFoundError,
    PermissionDeniedError,
    QinglongError,
    RateLimitError,
    RequestTimeoutError,
)
from qinglong_mcp.core.session import SessionManager

logger = logging.getLogger(__name__)

HttpMethod = Literal["GET", "POST", "PUT", "DELETE"]


def _clean_query(query: dict[str, Any] | None) -> dict[str, Any] | None:
    """Drop ``None`` values so optional filters are not sent as empty strings."""
    if not query:
        return None
    cleaned = {key: value for key, value in query.items() if value is not None}
    return cleaned or None


def _response_message(response: httpx.Response) -> str:
    """Best-effort error message from a failed response."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    if response.text:
        return response.text[:200]
    return response.reason_phrase or f"HTTP {response.status_code}"


def classify_status_error(response: httpx.Response) -> QinglongError:
    """Map a failed HTTP response to the matching domain error."""
    status = response.status_code
    message = _response_message(response)

    if status == 401:
        return AuthenticationError(details=message, status_code=status)
    if status == 403:
        return PermissionDeniedError(details=message)
    if status == 404:
        return NotFoundError(details=message)
    if status == 429:
        return RateLimitError(details=message)
    return ApiError(f"API request failed ({status}): {message}", status_code=status)


def _is_refused(error: httpx.ConnectError) -> bool:
    """Whether a connect failure was the host refusing, as opposed to DNS or routing."""
    seen: set[int] = set()
    current: BaseException | None = error
    while current is not None and id(current) not in seen:
        if isinstance(current, ConnectionRefusedError):
            return True
        seen.add(id(current))
        current = current.__cause__ or current.__context__
    return "refused" in str(error).lower()


class Transport:
    """Sends requests to ``{QL_URL}/open`` and returns the decoded body.

    Args:
        config: Panel configuration.
        session: Session manager that supplies the auth headers.
        http_transport: Optional httpx transport, e.g. ``httpx.MockTransport`` in tests.
    """

    def __init__(
        self,
        config: QinglongConfig,
        session: SessionManager,
        http_transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self.session = session
        self._http_transport = http_transport
        self._client: httpx.AsyncClient | None = None

    @property
    def client(self) -> httpx.AsyncClient:
        """The shared HTTP client, created on first access."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.config.api_base_url,
                timeout=self.config.timeout,
                transport=self._http_transport,
            )
        return self._client

    async def send(
        self,
        endpoint: str,
        method: HttpMethod = "GET",
        body: Any = None,
        query: dict[str, Any] | None = None,
    ) -> Any:
        """Perform one request and return the raw response body.

        JSON responses are decoded; anything else is returned as text.

        Raises:
            QinglongError: A classified failure, see the module docstring.
        """
        headers = await self.session.get_auth_headers()
        params = _clean_query(query)

        logger.debug("Qinglong request", extra={"method": method, "endpoint": endpoint})
        try:
            response = await self.client.request(
                method,
                endpoint,
                headers=headers,
                params=params,
                json=body,
            )
        except httpx.TimeoutException as e:
            raise RequestTimeoutError(self.config.api_base_url + endpoint, self.config.timeout) from e
        except httpx.ConnectError as e:
            if _is_refused(e):
                raise ConnectionFailedError(self.config.url, e) from e
            raise NetworkError(f"cannot reach {self.config.url}: {e}", e) from e
        except httpx.HTTPError as e:
            raise NetworkError(str(e) or type(e).__name__, e) from e

        if response.status_code >= 400:
            error = classify_status_error(response)
            logger.warning(
                "Qinglong request failed",
                extra={
                    "method": method,
                    "endpoint": endpoint,
                    "status": response.status_code,
                },
            )
            raise error

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
