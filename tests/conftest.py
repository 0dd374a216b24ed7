"""Pytest configuration and fixtures for qinglong-mcp tests."""

import json
from typing import Any

import httpx
import pytest

from qinglong_mcp.core.client import QinglongClient, reset_client
from qinglong_mcp.core.config import QinglongConfig
from qinglong_mcp.core.session import SessionManager

PANEL_URL = "http://ql.test:5700"

# =============================================================================
# Fake Panel
# =============================================================================


class FakePanel:
    """In-memory stand-in for the Qinglong OpenAPI, served through httpx.MockTransport.

    Routes are keyed by ``(method, path)`` where ``path`` is relative to
    ``/open``. A route body may be a JSON value, a plain string (sent as text),
    ``None`` (empty body) or an exception instance (raised by the transport).
    """

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], tuple[int, Any]] = {}
        self.requests: list[httpx.Request] = []

    def reply(self, method: str, path: str, body: Any = None, status: int = 200) -> None:
        self.routes[(method, path)] = (status, body)

    def ok(self, method: str, path: str, data: Any = None) -> None:
        """Reply with a successful ``{code: 200, data}`` envelope."""
        self.reply(method, path, {"code": 200, "data": data})

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.removeprefix("/open")
        status, body = self.routes.get(
            (request.method, path), (404, {"code": 404, "message": f"no route {path}"})
        )
        if isinstance(body, Exception):
            raise body
        if body is None:
            return httpx.Response(status)
        if isinstance(body, str):
            return httpx.Response(status, text=body)
        return httpx.Response(status, json=body)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self) -> Any:
        return json.loads(self.last.content)


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture
def token_config() -> QinglongConfig:
    """Configuration using a static bearer token."""
    return QinglongConfig(url=PANEL_URL, token="static-token")


@pytest.fixture
def app_config() -> QinglongConfig:
    """Configuration using OpenAPI client credentials."""
    return QinglongConfig(url=PANEL_URL, client_id="app-id", client_secret="app-secret")


# =============================================================================
# Client Fixtures
# =============================================================================


@pytest.fixture
def panel() -> FakePanel:
    """Provide an empty fake panel."""
    return FakePanel()


@pytest.fixture
def client(panel: FakePanel, token_config: QinglongConfig) -> QinglongClient:
    """Provide a client wired to the fake panel."""
    return QinglongClient(token_config, http_transport=httpx.MockTransport(panel))


@pytest.fixture
def app_client(panel: FakePanel, app_config: QinglongConfig) -> QinglongClient:
    """Provide a client-credentials client wired to the fake panel.

    The token endpoint must be registered on ``panel`` as ``GET /auth/token``.
    """
    session = SessionManager(app_config, fetch_token=_fetch_from(panel))
    return QinglongClient(app_config, session, http_transport=httpx.MockTransport(panel))


def _fetch_from(panel: FakePanel):
    async def fetch(config: QinglongConfig) -> Any:
        async with httpx.AsyncClient(transport=httpx.MockTransport(panel)) as http:
            response = await http.get(
                f"{config.api_base_url}/auth/token",
                params={"client_id": config.client_id, "client_secret": config.client_secret},
            )
        return response.json()

    return fetch


@pytest.fixture(autouse=True)
def reset_process_client():
    """Forget the process-wide client between tests."""
    reset_client()
    yield
    reset_client()


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """Remove all QL_* variables from the environment."""
    for name in ("QL_URL", "QL_TOKEN", "QL_CLIENT_ID", "QL_CLIENT_SECRET", "QL_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch
