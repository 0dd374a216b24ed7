"""CLI entry point for Qinglong MCP."""

import typer
from rich.console import Console

from . import __version__
from .core.config import load_config
from .core.constants import SERVER_NAME
from .core.exceptions import ConfigurationError
from .core.logger import configure_logging
from .utils.doctor import PanelDoctor

app = typer.Typer(
    name="qinglong-mcp",
    help="""MCP server for the Qinglong task panel.

Exposes cron jobs, environment variables, subscriptions, dependencies,
scripts, logs and notifications as tools for an agent.

Configuration comes from the environment:
  QL_URL              panel URL (default http://localhost:5700)
  QL_TOKEN            static bearer token, or
  QL_CLIENT_ID / QL_CLIENT_SECRET   OpenAPI application credentials

Quick start:
  qinglong-mcp doctor
  qinglong-mcp serve
""",
    add_completion=False,
)
console = Console()


@app.command()
def serve(
    transport: str = typer.Option(
        "stdio",
        "--transport",
        "-t",
        help="Transport: stdio (default), sse, streamable-http",
    ),
    host: str | None = typer.Option(
        None, "--host", help="Host for network transports (default: 127.0.0.1)"
    ),
    port: int | None = typer.Option(
        None, "--port", "-p", help="Port for network transports (default: 8080)"
    ),
    name: str = typer.Option(SERVER_NAME, "--name", help="Server name"),
    log_level: str | None = typer.Option(
        None, "--log-level", "-l", help="Log level (default: QL_LOG_LEVEL or INFO)"
    ),
) -> None:
    """Run the MCP server.

    Examples:
        qinglong-mcp serve
        qinglong-mcp serve -t streamable-http -p 9000
    """
    from .mcp.server import run_server

    if transport not in ("stdio", "sse", "streamable-http"):
        console.print(f"[red]Error: unknown transport {transport!r}[/red]")
        raise typer.Exit(1)

    try:
        config = load_config()
    except ConfigurationError as e:
        configure_logging(log_level or "INFO")
        console.print(f"[red]Error: {e}[/red]", highlight=False)
        raise typer.Exit(1) from e

    configure_logging(log_level or config.log_level)
    run_server(name=name, transport=transport, host=host, port=port, config=config)  # type: ignore[arg-type]


@app.command()
def doctor() -> None:
    """Check configuration, connectivity and authentication."""
    if not PanelDoctor(console=console).run_checks():
        raise typer.Exit(1)


@app.command()
def version() -> None:
    """Show the installed version."""
    console.print(f"qinglong-mcp {__version__}")


if __name__ == "__main__":
    app()
