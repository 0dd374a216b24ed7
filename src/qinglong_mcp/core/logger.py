"""Logging setup for the server and CLI.

All log output goes to stderr: with the stdio transport, stdout carries the
MCP protocol stream.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler

LOG_FORMAT = "%(message)s"
DATE_FORMAT = "[%X]"


def configure_logging(level: str | int = "INFO", console: Console | None = None) -> None:
    """Install a Rich handler on the root logger.

    Args:
        level: Level name or number, e.g. ``"DEBUG"``.
        console: Console to log to. Defaults to a stderr console.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
        handlers=[handler],
        force=True,
    )
    # httpx logs request URLs, including the token query string, at INFO
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))
