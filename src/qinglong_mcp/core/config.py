"""Configuration - panel URL and credentials loaded from the environment.

The configuration is read once at process start and never changes afterwards.

Environment Variables:
- QL_URL -> url (default http://localhost:5700)
- QL_TOKEN -> token
- QL_CLIENT_ID -> client_id
- QL_CLIENT_SECRET -> client_secret
- QL_LOG_LEVEL -> log_level

Usage:
    from qinglong_mcp.core.config import load_config

    config = load_config()
    config.require_credentials()
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from qinglong_mcp.core.constants import API_BASE_PATH, API_TIMEOUT, DEFAULT_BASE_URL
from qinglong_mcp.core.exceptions import ConfigurationError

# Format: (env_var_name, config_field)
ENV_VAR_MAPPINGS: list[tuple[str, str]] = [
    ("QL_URL", "url"),
    ("QL_TOKEN", "token"),
    ("QL_CLIENT_ID", "client_id"),
    ("QL_CLIENT_SECRET", "client_secret"),
    ("QL_LOG_LEVEL", "log_level"),
]


class AuthMode(str, Enum):
    """How requests to the panel are authenticated."""

    TOKEN = "token"
    CLIENT_CREDENTIALS = "client_credentials"
    NONE = "none"


class QinglongConfig(BaseModel):
    """Immutable connection settings for one Qinglong panel."""

    model_config = ConfigDict(frozen=True)

    url: str = Field(default=DEFAULT_BASE_URL, description="Panel base URL.")
    token: str | None = Field(default=None, description="Static bearer token.")
    client_id: str | None = Field(default=None, description="OpenAPI application client id.")
    client_secret: str | None = Field(
        default=None, description="OpenAPI application client secret.", repr=False
    )
    timeout: float = Field(default=API_TIMEOUT, gt=0, description="Request timeout in seconds.")
    log_level: str = Field(default="INFO", description="Log level name.")

    @field_validator("url")
    @classmethod
    def _normalize_url(cls, value: str) -> str:
        value = value.strip().rstrip("/")
        if not value.startswith(("http://", "https://")):
            raise ValueError(f"URL must start with http:// or https://, got {value!r}")
        return value

    @field_validator("token", "client_id", "client_secret", mode="before")
    @classmethod
    def _blank_is_unset(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("log_level")
    @classmethod
    def _upper_log_level(cls, value: str) -> str:
        return value.strip().upper() or "INFO"

    @property
    def api_base_url(self) -> str:
        """Base URL of the OpenAPI endpoints, e.g. ``http://host:5700/open``."""
        return f"{self.url}{API_BASE_PATH}"

    @property
    def auth_mode(self) -> AuthMode:
        """The active credential mode. A static token wins over client credentials."""
        if self.token:
            return AuthMode.TOKEN
        if self.client_id and self.client_secret:
            return AuthMode.CLIENT_CREDENTIALS
        return AuthMode.NONE

    def require_credentials(self) -> None:
        """Ensure one credential mode is configured.

        Raises:
            ConfigurationError: If neither a token nor a client id/secret pair is set.
        """
        if self.auth_mode is AuthMode.NONE:
            raise ConfigurationError(
                "No credentials configured: set QL_TOKEN or both QL_CLIENT_ID and QL_CLIENT_SECRET"
            )


def load_config(environ: Mapping[str, str] | None = None) -> QinglongConfig:
    """Build the configuration from environment variables.

    Args:
        environ: Mapping to read from. Defaults to ``os.environ``.

    Returns:
        The loaded configuration.

    Raises:
        ConfigurationError: If a variable holds an invalid value.
    """
    if environ is None:
        environ = os.environ

    values: dict[str, Any] = {}
    for env_var, field_name in ENV_VAR_MAPPINGS:
        value = environ.get(env_var)
        if value:
            values[field_name] = value

    try:
        return QinglongConfig(**values)
    except ValidationError as e:
        invalid_fields = [
            f"{'.'.join(str(loc) for loc in error['loc'])}: {error['msg']}" for error in e.errors()
        ]
        raise ConfigurationError(
            "Invalid Qinglong configuration", "; ".join(invalid_fields)
        ) from e
