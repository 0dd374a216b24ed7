"""Tests for logging setup."""

import io
import logging

import pytest
from rich.console import Console
from rich.logging import RichHandler

from qinglong_mcp.core.logger import configure_logging


@pytest.fixture(autouse=True)
def restore_root_logger():
    """Restore root and httpx logger state after each test."""
    root = logging.getLogger()
    httpx_logger = logging.getLogger("httpx")
    handlers, level, httpx_level = root.handlers[:], root.level, httpx_logger.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    httpx_logger.setLevel(httpx_level)


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_installs_rich_handler(self):
        """Test the root logger gets a single Rich handler."""
        configure_logging("INFO", console=Console(file=io.StringIO()))

        handlers = logging.getLogger().handlers
        assert len(handlers) == 1
        assert isinstance(handlers[0], RichHandler)

    def test_sets_level_from_name(self):
        """Test a level name is applied case-insensitively."""
        configure_logging("debug", console=Console(file=io.StringIO()))

        assert logging.getLogger().level == logging.DEBUG

    def test_unknown_level_falls_back_to_info(self):
        """Test an unknown level name falls back to INFO."""
        configure_logging("LOUD", console=Console(file=io.StringIO()))

        assert logging.getLogger().level == logging.INFO

    def test_httpx_kept_at_warning_or_above(self):
        """Test httpx request logging stays quiet at DEBUG."""
        configure_logging("DEBUG", console=Console(file=io.StringIO()))

        assert logging.getLogger("httpx").level == logging.WARNING

    def test_writes_to_given_console(self):
        """Test records are written to the supplied console."""
        output = io.StringIO()
        configure_logging("INFO", console=Console(file=output, width=200))

        logging.getLogger("qinglong_mcp.test").info("panel ready")

        assert "panel ready" in output.getvalue()
