"""Doctor command - Check configuration, connectivity and authentication."""

import asyncio

from rich.console import Console

from qinglong_mcp.core.client import QinglongClient
from qinglong_mcp.core.config import AuthMode, QinglongConfig, load_config
from qinglong_mcp.core.exceptions import (
    AuthenticationError,
    ConfigurationError,
    ConnectionFailedError,
    QinglongError,
)


class PanelDoctor:
    """Checks that the server can talk to the configured panel."""

    def __init__(self, client: QinglongClient | None = None, console: Console | None = None):
        """Initialize doctor.

        Args:
            client: Client to probe with. Built from the environment when omitted.
            console: Console for output.
        """
        self.console = console or Console()
        self.client = client
        self.checks_passed = True

    def run_checks(self) -> bool:
        """Run all checks and return whether they passed."""
        self.console.print("[bold blue]Running Qinglong checks...[/bold blue]\n")

        config = self._check_config()
        if config is not None and self._check_credentials(config):
            self._check_panel(config)

        if self.checks_passed:
            self.console.print("\n[bold green]✓ All checks passed![/bold green]")
        else:
            self.console.print("\n[bold red]✗ Some checks failed[/bold red]")

        return self.checks_passed

    def _check_config(self) -> QinglongConfig | None:
        if self.client is not None:
            config = self.client.config
        else:
            try:
                config = load_config()
            except ConfigurationError as e:
                self.console.print(f"[red]✗[/red] {e.message}")
                if e.details:
                    self.console.print(f"  {e.details}")
                self.checks_passed = False
                return None

        self.console.print(f"[green]✓[/green] Panel URL: {config.url}")
        return config

    def _check_credentials(self, config: QinglongConfig) -> bool:
        if config.auth_mode is AuthMode.NONE:
            self.console.print("[red]✗[/red] No credentials configured")
            self.console.print(
                "  Set [cyan]QL_TOKEN[/cyan] or [cyan]QL_CLIENT_ID[/cyan] + [cyan]QL_CLIENT_SECRET[/cyan]"
            )
            self.checks_passed = False
            return False

        label = "static token" if config.auth_mode is AuthMode.TOKEN else "client credentials"
        self.console.print(f"[green]✓[/green] Credentials: {label}")
        return True

    def _check_panel(self, config: QinglongConfig) -> None:
        client = self.client or QinglongClient(config)
        try:
            info = asyncio.run(self._probe(client))
        except AuthenticationError as e:
            self.console.print(f"[red]✗[/red] Authentication rejected: {e.message}")
            self.checks_passed = False
            return
        except ConnectionFailedError:
            self.console.print(f"[red]✗[/red] Cannot connect to {config.url}")
            self.checks_passed = False
            return
        except QinglongError as e:
            self.console.print(f"[red]✗[/red] Panel request failed: {e.message}")
            self.checks_passed = False
            return

        version = info.get("version", "unknown") if isinstance(info, dict) else "unknown"
        self.console.print(f"[green]✓[/green] Panel reachable (version {version})")

    async def _probe(self, client: QinglongClient) -> object:
        try:
            return await client.request("/system", "GET")
        finally:
            await client.aclose()
