"""Error kinds raised by the API adapter and repositories."""

from __future__ import annotations


class AdminError(Exception):
    """Base class for every failure surfaced to the dashboard user."""

    default_message = "Request failed"

    def __init__(self, message: str | None = None, *, status_code: int | None = None):
        self.message = message or self.default_message
        self.status_code = status_code
        super().__init__(self.message)


class ValidationError(AdminError):
    """Required field missing or malformed, locally or as reported by the server."""

    default_message = "Please check the highlighted fields"

    def __init__(
        self,
        message: str | None = None,
        *,
        field_errors: dict[str, list[str]] | None = None,
        status_code: int | None = None,
    ):
        super().__init__(message, status_code=status_code)
        self.field_errors = field_errors or {}


class AuthError(AdminError):
    """No token present, or the server rejected the credentials."""

    default_message = "Authentication required"


class NetworkError(AdminError):
    """Transport failure: DNS, connection refused, timeout."""

    default_message = "Network error, please try again"


class ServerError(AdminError):
    """Non-2xx response that is not covered by a more specific kind."""

    default_message = "Server error, please try again"


class NotFoundError(ServerError):
    default_message = "Record not found"
