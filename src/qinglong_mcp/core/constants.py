"""Constants shared by the API access layer and the tool modules."""

from enum import Enum

# =============================================================================
# Server
# =============================================================================

SERVER_NAME = "qinglong-mcp-server"

# =============================================================================
# Panel API
# =============================================================================

DEFAULT_BASE_URL = "http://localhost:5700"
API_BASE_PATH = "/open"
AUTH_TOKEN_ENDPOINT = "/auth/token"
API_TIMEOUT = 30.0  # seconds

# Envelope code the panel uses for a successful call
SUCCESS_CODE = 200

# =============================================================================
# Response limits
# =============================================================================

DEFAULT_LIMIT = 20
MAX_LIMIT = 100
CHARACTER_LIMIT = 25000


class ResponseFormat(str, Enum):
    """Output format for list-style tool results."""

    MARKDOWN = "markdown"
    JSON = "json"
