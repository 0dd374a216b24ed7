"""Session Manager - bearer token resolution and client-credential refresh.

A static ``QL_TOKEN`` is used as-is. Otherwise the manager exchanges
``QL_CLIENT_ID``/``QL_CLIENT_SECRET`` for a token at ``GET /open/auth/token``
and caches it in memory until its expiration time passes.

The cache is replaced, never mutated, on refresh. Concurrent refreshes are not
deduplicated: two callers racing on an empty cache both fetch, and the later
write wins. Any valid token is equally usable, so this only costs a request.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Callable
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict

from qinglong_mcp.core.config import AuthMode, QinglongConfig
from qinglong_mcp.core.constants import AUTH_TOKEN_ENDPOINT, SUCCESS_CODE
from qinglong_mcp.core.exceptions import AuthenticationError, ConfigurationError

logger = logging.getLogger(__name__)

TokenFetcher = Callable[[QinglongConfig], Awaitable[Any]]
Clock = Callable[[], float]

BASE_HEADERS: dict[str, str] = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}


# =============================================================================
# Session Token Model
# =============================================================================


class SessionToken(BaseModel):
    """A minted bearer token and its expiry (epoch seconds)."""

    model_config = ConfigDict(frozen=True)

    value: str
    expires_at: float

    def is_valid(self, now: float) -> bool:
        """Check whether the token is still usable at ``now``."""
        return self.expires_at > now


# =============================================================================
# Token Endpoint
# =============================================================================


def _remote_message(response: httpx.Response) -> str | None:
    try:
        body = response.json()
    except ValueError:
        return response.text or None
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return None


async def fetch_token_envelope(config: QinglongConfig) -> Any:
    """Request a token from the panel and return the raw JSON body.

    Args:
        config: Configuration holding the client id and secret.

    Returns:
        The decoded response body, normally ``{code, data: {token, expiration}}``.

    Raises:
        AuthenticationError: On any network or HTTP failure.
    """
    url = f"{config.api_base_url}{AUTH_TOKEN_ENDPOINT}"
    try:
        async with httpx.AsyncClient(timeout=config.timeout) as client:
            response = await client.get(
                url,
                params={"client_id": config.client_id, "client_secret": config.client_secret},
            )
            response.raise_for_status()
    except httpx.HTTPStatusError as e:
        raise AuthenticationError(
            f"Authentication failed: {_remote_message(e.response) or e}",
            status_code=e.response.status_code,
        ) from e
    except httpx.HTTPError as e:
        raise AuthenticationError(f"Authentication failed: {e}") from e

    try:
        return response.json()
    except ValueError as e:
        raise AuthenticationError(
            "Authentication failed: token endpoint did not return JSON",
            response.text[:500] if response.text else None,
        ) from e


# =============================================================================
# Session Manager
# =============================================================================


class SessionManager:
    """Owns the authentication state for one panel.

    Args:
        config: Panel configuration.
        fetch_token: Coroutine that performs the token request. Tests pass a fake.
        clock: Returns the current time in epoch seconds. Tests pass a fake.
    """

    def __init__(
        self,
        config: QinglongConfig,
        fetch_token: TokenFetcher | None = None,
        clock: Clock = time.time,
    ) -> None:
        self.config = config
        self._fetch_token = fetch_token or fetch_token_envelope
        self._clock = clock
        self._token: SessionToken | None = None

    @property
    def token(self) -> SessionToken | None:
        """The cached session token, if one has been minted."""
        return self._token

    async def get_auth_headers(self) -> dict[str, str]:
        """Return request headers, including ``Authorization`` when credentials exist.

        Raises:
            ConfigurationError: If no credential mode is configured.
            AuthenticationError: If a token fetch fails.
        """
        headers = dict(BASE_HEADERS)
        mode = self.config.auth_mode

        if mode is AuthMode.TOKEN:
            headers["Authorization"] = f"Bearer {self.config.token}"
        elif mode is AuthMode.CLIENT_CREDENTIALS:
            headers["Authorization"] = f"Bearer {await self.get_token()}"
        else:
            raise ConfigurationError(
                "No credentials configured: set QL_TOKEN or both QL_CLIENT_ID and QL_CLIENT_SECRET"
            )
        return headers

    async def get_token(self) -> str:
        """Return a valid client-credential token, fetching a new one if needed."""
        cached = self._token
        if cached is not None and cached.is_valid(self._clock()):
            return cached.value

        token = await self._refresh()
        return token.value

    async def _refresh(self) -> SessionToken:
        logger.info("Requesting Qinglong access token", extra={"url": self.config.url})
        body = await self._fetch_token(self.config)

        if not isinstance(body, dict) or body.get("code") != SUCCESS_CODE:
            message = body.get("message") if isinstance(body, dict) else None
            raise AuthenticationError(
                f"Failed to obtain token: {message or 'unexpected response'}",
                None if message else repr(body)[:500],
            )

        data = body.get("data")
        value = data.get("token") if isinstance(data, dict) else None
        if not value:
            raise AuthenticationError(
                "Failed to obtain token: response has no token", repr(body)[:500]
            )

        expiration = data.get("expiration")
        expires_at = float(expiration) if isinstance(expiration, (int, float)) else 0.0

        token = SessionToken(value=str(value), expires_at=expires_at)
        self._token = token
        logger.debug("Access token refreshed", extra={"expires_at": expires_at})
        return token
