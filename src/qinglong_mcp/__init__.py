"""Qinglong MCP - agent tools for the Qinglong task panel OpenAPI."""

__version__ = "0.1.0"
