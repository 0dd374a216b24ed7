"""Allow running the CLI with ``python -m qinglong_mcp``."""

from qinglong_mcp.cli import app

if __name__ == "__main__":
    app()
