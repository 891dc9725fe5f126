"""
Authentication module exceptions.

These exceptions are raised by the auth module and turned into
{"error": message} responses by the API error handlers.
"""

from shared.exceptions import AuthenticationError, ConflictError, RateLimitedError


class MissingTokenError(AuthenticationError):
    """Raised when no session token is provided."""

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message, code="MISSING_TOKEN")


class InvalidTokenError(AuthenticationError):
    """Raised when a session token is malformed, expired or wrongly signed.

    The cause is deliberately not distinguished.
    """

    def __init__(self, message: str = "Invalid token"):
        super().__init__(message, code="INVALID_TOKEN")


class InvalidCredentialsError(AuthenticationError):
    """Raised for an unknown email or a wrong password alike."""

    def __init__(self):
        super().__init__("Invalid credentials", code="INVALID_CREDENTIALS")


class UserAlreadyExistsError(ConflictError):
    """Raised when registering an email that is already taken."""

    def __init__(self, email: str):
        super().__init__(
            "User already exists with this email",
            code="USER_EXISTS",
            details={"email": email},
        )


class LoginRateLimitedError(RateLimitedError):
    """Raised when an email is locked out after repeated failed logins."""

    def __init__(self):
        super().__init__(
            "Too many failed login attempts. Please try again later.",
            code="LOGIN_RATE_LIMITED",
        )
