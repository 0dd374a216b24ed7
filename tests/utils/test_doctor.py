"""Tests for the doctor module - panel checks utility."""

import io
from unittest.mock import AsyncMock, patch

import httpx
import pytest
from rich.console import Console

from qinglong_mcp.core.client import QinglongClient
from qinglong_mcp.core.config import QinglongConfig
from qinglong_mcp.utils.doctor import PanelDoctor


@pytest.fixture
def output() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def console(output) -> Console:
    """Console writing plain text to a buffer."""
    return Console(file=output, width=200, no_color=True, highlight=False)


# =============================================================================
# Initialization Tests
# =============================================================================


class TestPanelDoctorInitialization:
    """Tests for PanelDoctor initialization."""

    def test_init_creates_console(self):
        """Test initialization creates a Rich Console."""
        assert PanelDoctor().console is not None

    def test_init_sets_checks_passed_true(self):
        """Test initialization sets checks_passed to True."""
        assert PanelDoctor().checks_passed is True


# =============================================================================
# run_checks Tests
# =============================================================================


class TestPanelDoctorRunChecks:
    """Tests for run_checks."""

    def test_all_checks_pass(self, client, panel, console, output):
        """Test a reachable panel with valid credentials passes."""
        panel.ok("GET", "/system", {"version": "2.17.9"})

        result = PanelDoctor(client=client, console=console).run_checks()

        text = output.getvalue()
        assert result is True
        assert "Panel URL: http://ql.test:5700" in text
        assert "Credentials: static token" in text
        assert "Panel reachable (version 2.17.9)" in text
        assert "All checks passed" in text

    def test_missing_credentials_fail(self, panel, console, output):
        """Test a config without credentials fails without contacting the panel."""
        client = QinglongClient(
            QinglongConfig(url="http://ql.test:5700"), http_transport=httpx.MockTransport(panel)
        )

        result = PanelDoctor(client=client, console=console).run_checks()

        assert result is False
        assert "No credentials configured" in output.getvalue()
        assert panel.requests == []

    def test_rejected_token_fails(self, client, panel, console, output):
        """Test a 401 is reported as an authentication failure."""
        panel.reply("GET", "/system", {"message": "invalid token"}, status=401)

        result = PanelDoctor(client=client, console=console).run_checks()

        assert result is False
        assert "Authentication rejected" in output.getvalue()

    def test_unreachable_panel_fails(self, client, panel, console, output):
        """Test a refused connection names the panel URL."""
        panel.reply("GET", "/system", httpx.ConnectError("Connection refused"))

        result = PanelDoctor(client=client, console=console).run_checks()

        assert result is False
        assert "Cannot connect to http://ql.test:5700" in output.getvalue()

    def test_unresolvable_host_fails(self, client, panel, console, output):
        """Test a DNS failure is reported as a network error, not a refused connection."""
        panel.reply("GET", "/system", httpx.ConnectError("[Errno -2] Name or service not known"))

        result = PanelDoctor(client=client, console=console).run_checks()

        text = output.getvalue()
        assert result is False
        assert "Network error: cannot reach http://ql.test:5700" in text
        assert "Cannot connect to" not in text

    def test_other_panel_error_fails(self, client, panel, console, output):
        """Test other failures are reported with their message."""
        panel.reply("GET", "/system", {"code": 500, "message": "database locked"})

        result = PanelDoctor(client=client, console=console).run_checks()

        assert result is False
        assert "Panel request failed: database locked" in output.getvalue()

    def test_invalid_environment_fails(self, clean_env, console, output):
        """Test an invalid QL_URL is reported with its details."""
        clean_env.setenv("QL_URL", "ftp://panel")

        result = PanelDoctor(console=console).run_checks()

        assert result is False
        assert "Invalid Qinglong configuration" in output.getvalue()

    def test_environment_client_built_when_none_given(self, clean_env, console):
        """Test the panel is probed with a client built from the environment."""
        clean_env.setenv("QL_TOKEN", "tok")

        with patch.object(
            PanelDoctor, "_probe", new_callable=AsyncMock, return_value={"version": "2.17.9"}
        ) as mock_probe:
            result = PanelDoctor(console=console).run_checks()

        assert result is True
        probed_client = mock_probe.call_args.args[0]
        assert probed_client.config.token == "tok"
