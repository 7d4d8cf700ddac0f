"""Custom exceptions for Carina."""

import copy
from typing import Any


class CarinaError(Exception):
    """Base exception for all Carina errors."""

    def with_context(self, context: str) -> "CarinaError":
        """Return a copy of this error with its message prefixed by context.

        The copy keeps the concrete type and any extra attributes so callers can
        still branch on it (e.g. NotFoundError while polling a delete).

        Args:
            context: Prefix such as "[magnum] Unable to retrieve cluster (demo)"

        Returns:
            New error of the same type
        """
        error = copy.copy(self)
        error.args = (f"{context}: {self}",)
        return error


class ConfigurationError(CarinaError):
    """Configuration-related errors."""


class AuthenticationError(CarinaError):
    """Credentials were rejected or no valid token could be obtained."""


class TokenExpiredError(AuthenticationError):
    """The backend rejected the session token (HTTP 401)."""


class UnsupportedOperationError(CarinaError):
    """Operation has no meaning for the active backend."""


class InvalidRequestError(CarinaError):
    """Arguments are not valid for the active backend."""


class NotFoundError(CarinaError):
    """Referenced resource does not exist."""


class TransientNetworkError(CarinaError):
    """Transport-level failure (connection refused, timeout, reset)."""


class ApiError(CarinaError):
    """Backend returned a non-success response."""

    def __init__(self, message: str, status_code: int | None = None):
        """Initialize API error.

        Args:
            message: Error message
            status_code: HTTP status code returned by the backend
        """
        super().__init__(message)
        self.status_code = status_code


class WaitTimeoutError(CarinaError):
    """Polling gave up before the cluster reached the expected state.

    Attributes:
        cluster: Last cluster observed before giving up
        timeout: Configured timeout in seconds
    """

    def __init__(self, message: str, cluster: Any = None, timeout: float | None = None):
        super().__init__(message)
        self.cluster = cluster
        self.timeout = timeout


class CacheError(CarinaError):
    """Credential cache could not be read or written."""
