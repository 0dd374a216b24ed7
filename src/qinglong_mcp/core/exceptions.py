"""Exception classes for the Qinglong API access layer.

Every failure raised by the session, transport and request layers is a
``QinglongError`` subclass, so tool code can catch one type and render the
message for the agent.
"""

# =============================================================================
# Base Exception
# =============================================================================


class QinglongError(Exception):
    """Base exception for all Qinglong API errors."""

    def __init__(self, message: str, details: str | None = None):
        self.message = message
        self.details = details
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if self.details:
            return f"{self.message}\n  Details: {self.details}"
        return self.message


# =============================================================================
# Configuration and Authentication
# =============================================================================


class ConfigurationError(QinglongError):
    """Raised when credentials or the panel URL are missing or invalid."""

    pass


class AuthenticationError(QinglongError):
    """Raised on HTTP 401 or when the token endpoint rejects the credentials."""

    def __init__(
        self,
        message: str = "Authentication failed: check QL_TOKEN, QL_CLIENT_ID and QL_CLIENT_SECRET",
        details: str | None = None,
        status_code: int | None = None,
    ):
        self.status_code = status_code
        super().__init__(message, details)


# =============================================================================
# HTTP Status Errors
# =============================================================================


class PermissionDeniedError(QinglongError):
    """Raised on HTTP 403."""

    status_code = 403

    def __init__(
        self,
        message: str = "Permission denied: the credentials cannot access this resource",
        details: str | None = None,
    ):
        super().__init__(message, details)


class NotFoundError(QinglongError):
    """Raised on HTTP 404."""

    status_code = 404

    def __init__(
        self,
        message: str = "Resource not found: check the requested ID or path",
        details: str | None = None,
    ):
        super().__init__(message, details)


class RateLimitError(QinglongError):
    """Raised on HTTP 429. Nothing retries automatically; the caller decides."""

    status_code = 429

    def __init__(
        self,
        message: str = "Too many requests: retry later",
        details: str | None = None,
    ):
        super().__init__(message, details)


class ApiError(QinglongError):
    """Raised for other HTTP failures and for non-200 envelope codes.

    Attributes:
        status_code: HTTP status of the response, if the failure was HTTP level.
        code: The ``code`` field of the panel envelope, if the failure came from it.
    """

    def __init__(
        self,
        message: str,
        details: str | None = None,
        status_code: int | None = None,
        code: int | None = None,
    ):
        self.status_code = status_code
        self.code = code
        super().__init__(message, details)


# =============================================================================
# Transport Errors
# =============================================================================


class RequestTimeoutError(QinglongError):
    """Raised when a request to the panel times out."""

    def __init__(self, url: str, timeout: float):
        self.url = url
        self.timeout = timeout
        super().__init__(
            "Request timed out: check that the Qinglong panel is running",
            f"No response from {url} within {timeout} seconds",
        )


class ConnectionFailedError(QinglongError):
    """Raised when the panel refuses or cannot accept the connection."""

    def __init__(self, base_url: str, original_error: Exception | None = None):
        self.base_url = base_url
        self.original_error = original_error
        super().__init__(
            f"Connection failed: check that QL_URL ({base_url}) points at the Qinglong panel",
            str(original_error) if original_error else None,
        )


class NetworkError(QinglongError):
    """Raised for any other transport failure."""

    def __init__(self, message: str, original_error: Exception | None = None):
        self.original_error = original_error
        super().__init__(f"Network error: {message}")
