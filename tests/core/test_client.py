"""Tests for the request facade and envelope handling."""

import pytest

from qinglong_mcp.core.client import (
    Envelope,
    RawBody,
    get_client,
    handle_api_error,
    parse_response,
    reset_client,
    unwrap,
)
from qinglong_mcp.core.exceptions import ApiError, NotFoundError, RateLimitError

# =============================================================================
# Envelope Parsing
# =============================================================================


class TestParseResponse:
    """Tests for classifying response bodies."""

    def test_object_with_code_is_envelope(self):
        """Test a dict carrying code is an envelope."""
        parsed = parse_response({"code": 200, "data": [1], "message": "ok"})

        assert parsed == Envelope(code=200, data=[1], message="ok")

    @pytest.mark.parametrize("raw", [[1, 2], "raw text", None, 42, {"filename": "a.js"}])
    def test_anything_else_is_raw(self, raw):
        """Test arrays, strings, scalars and code-less objects are raw bodies."""
        assert parse_response(raw) == RawBody(raw)


class TestUnwrap:
    """Tests for extracting the payload."""

    def test_success_returns_data(self):
        """Test code 200 returns the data field."""
        assert unwrap({"code": 200, "data": {"id": 1}}) == {"id": 1}

    def test_success_without_data_returns_none(self):
        """Test a bare success envelope returns None."""
        assert unwrap({"code": 200}) is None

    def test_raw_body_returned_unchanged(self):
        """Test a non-enveloped body passes through."""
        body = {"content": "console.log(1)"}

        assert unwrap(body) is body

    def test_error_code_uses_message(self):
        """Test a non-200 code raises ApiError with the panel message."""
        with pytest.raises(ApiError) as exc_info:
            unwrap({"code": 400, "message": "cron already exists"})

        assert str(exc_info.value) == "cron already exists"
        assert exc_info.value.code == 400

    def test_error_code_without_message(self):
        """Test a non-200 code without message gets a generic text."""
        with pytest.raises(ApiError, match=r"API request failed \(500\)"):
            unwrap({"code": 500})


# =============================================================================
# QinglongClient Tests
# =============================================================================


class TestQinglongClient:
    """Tests for the client facade."""

    @pytest.mark.asyncio
    async def test_request_returns_envelope_data(self, client, panel):
        """Test the facade unwraps an enveloped response."""
        panel.ok("GET", "/crons", [{"id": 1}])

        assert await client.request("/crons") == [{"id": 1}]

    @pytest.mark.asyncio
    async def test_request_returns_raw_text(self, client, panel):
        """Test a raw file body is returned unchanged."""
        panel.reply("GET", "/scripts/detail", "print('hi')")

        assert await client.request("/scripts/detail", query={"file": "a.py"}) == "print('hi')"

    @pytest.mark.asyncio
    async def test_request_raises_on_error_envelope(self, client, panel):
        """Test an HTTP 200 with a failing envelope raises ApiError."""
        panel.reply("POST", "/envs", {"code": 400, "message": "value required"})

        with pytest.raises(ApiError, match="value required"):
            await client.request("/envs", "POST", [{"name": "A"}])

    @pytest.mark.asyncio
    async def test_request_propagates_transport_errors(self, client, panel):
        """Test classified transport errors reach the caller unchanged."""
        panel.reply("GET", "/crons/7/log", {"message": "gone"}, status=404)

        with pytest.raises(NotFoundError):
            await client.request("/crons/7/log")

    @pytest.mark.asyncio
    async def test_transport_is_shared(self, client, panel):
        """Test the transport is built once per client."""
        panel.ok("GET", "/system", {})

        await client.request("/system")
        transport = client.transport
        await client.request("/system")

        assert client.transport is transport

    @pytest.mark.asyncio
    async def test_client_credentials_fetch_once(self, app_client, panel):
        """Test a minted token is reused across requests within its lifetime."""
        panel.ok("GET", "/auth/token", {"token": "abc", "expiration": 9_999_999_999})
        panel.ok("GET", "/system", {})

        await app_client.request("/system")
        await app_client.request("/system")

        token_calls = [r for r in panel.requests if r.url.path == "/open/auth/token"]
        api_calls = [r for r in panel.requests if r.url.path == "/open/system"]
        assert len(token_calls) == 1
        assert all(r.headers["Authorization"] == "Bearer abc" for r in api_calls)
        assert len(api_calls) == 2


# =============================================================================
# Process-wide Client
# =============================================================================


class TestGetClient:
    """Tests for the process-wide client."""

    def test_returns_same_instance(self, clean_env):
        """Test get_client returns one shared client."""
        clean_env.setenv("QL_TOKEN", "tok")

        assert get_client() is get_client()

    def test_reset_creates_new_instance(self, clean_env):
        """Test reset_client forgets the shared client."""
        clean_env.setenv("QL_TOKEN", "tok")
        first = get_client()

        reset_client()

        assert get_client() is not first


# =============================================================================
# handle_api_error Tests
# =============================================================================


class TestHandleApiError:
    """Tests for rendering errors for the agent."""

    def test_domain_error_uses_its_message(self):
        """Test QinglongError subclasses render as their message."""
        assert handle_api_error(RateLimitError()) == "Too many requests: retry later"

    def test_unexpected_error(self):
        """Test other exceptions are labelled unexpected."""
        assert handle_api_error(ValueError("bad")) == "Unexpected error: bad"

    def test_unexpected_error_without_message(self):
        """Test an empty exception falls back to its type name."""
        assert handle_api_error(KeyError()) == "Unexpected error: KeyError"
