"""Core API access layer: configuration, session, transport and formatting."""

from qinglong_mcp.core.client import QinglongClient, get_client, handle_api_error, reset_client
from qinglong_mcp.core.config import AuthMode, QinglongConfig, load_config
from qinglong_mcp.core.constants import ResponseFormat
from qinglong_mcp.core.exceptions import (
    ApiError,
    AuthenticationError,
    ConfigurationError,
    ConnectionFailedError,
    NetworkError,
    NotFoundError,
    PermissionDeniedError,
    QinglongError,
    RateLimitError,
    RequestTimeoutError,
)
from qinglong_mcp.core.formatters import (
    ListView,
    PageWindow,
    RenderedList,
    extract_list,
    format_list_response,
    format_response,
)
from qinglong_mcp.core.session import SessionManager, SessionToken

__all__ = [
    "ApiError",
    "AuthMode",
    "AuthenticationError",
    "ConfigurationError",
    "ConnectionFailedError",
    "ListView",
    "NetworkError",
    "NotFoundError",
    "PageWindow",
    "PermissionDeniedError",
    "QinglongClient",
    "QinglongConfig",
    "QinglongError",
    "RateLimitError",
    "RenderedList",
    "RequestTimeoutError",
    "ResponseFormat",
    "SessionManager",
    "SessionToken",
    "extract_list",
    "format_list_response",
    "format_response",
    "get_client",
    "handle_api_error",
    "load_config",
    "reset_client",
]
