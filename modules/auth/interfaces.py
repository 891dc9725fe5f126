"""
Authentication module interface.

Other modules should depend on IAuthService, not the concrete implementation.
This enables testing with mocks and swapping the storage behind it.
"""

from typing import Protocol, Optional, runtime_checkable

from shared.models import AuthenticatedUser, User

from .models import AuthResult, LoginRequest, RegisterRequest


@runtime_checkable
class IAuthService(Protocol):
    """
    Interface for authentication operations.

    This protocol defines the contract that the auth module exposes
    to the API layer and other modules.
    """

    async def register(self, request: RegisterRequest) -> AuthResult:
        """
        Create an account and issue a session token.

        Raises:
            ValidationError: If a field is missing or breaks the input rules
            UserAlreadyExistsError: If the email is already registered
        """
        ...

    async def login(self, request: LoginRequest) -> AuthResult:
        """
        Verify credentials and issue a session token.

        Raises:
            ValidationError: If email/password are missing or malformed
            LoginRateLimitedError: If the email is locked out
            InvalidCredentialsError: For an unknown email or wrong password
        """
        ...

    def authenticate(self, token: Optional[str]) -> AuthenticatedUser:
        """
        Resolve a session token into the identity it asserts.

        Raises:
            MissingTokenError: If no token was supplied
            InvalidTokenError: If the token fails verification
        """
        ...

    async def current_user(self, token: Optional[str]) -> Optional[User]:
        """
        Resolve a session token into the full, still-active account.

        Returns None when the token is missing or invalid, or when the
        account no longer exists or was deactivated.
        """
        ...
