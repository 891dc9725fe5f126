"""
Base exception classes for the Threadline backend.

Each module should define its own exceptions that inherit from these bases.
This enables consistent error handling across the application: the API
error handlers turn any ThreadlineError into a JSON body with a single
"error" string and the class's HTTP status.
"""

from typing import Optional, Any


class ThreadlineError(Exception):
    """
    Base exception for all Threadline errors.

    All custom exceptions should inherit from this class.
    """

    status_code: int = 500

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a dictionary for logging and diagnostics."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(ThreadlineError):
    """Input validation failed."""

    status_code = 400


class AuthenticationError(ThreadlineError):
    """Authentication failed (invalid or missing credentials)."""

    status_code = 401


class NotFoundError(ThreadlineError):
    """Resource not found (or not visible to the caller)."""

    status_code = 404


class ConflictError(ThreadlineError):
    """Resource already exists.

    Reported as 400 rather than 409 to stay compatible with existing clients.
    """

    status_code = 400


class RateLimitedError(ThreadlineError):
    """Too many attempts in a short period."""

    status_code = 429


class ConfigurationError(ThreadlineError):
    """Required configuration is missing or invalid."""

    status_code = 500


class ExternalServiceError(ThreadlineError):
    """Error communicating with an external service."""

    status_code = 503

    def __init__(
        self,
        message: str,
        service: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, code, details)
        self.service = service
        self.details["service"] = service
