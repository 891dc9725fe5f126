"""
Authentication module.

Handles password hashing, session tokens, login throttling and the
register/login endpoints.

Public API:
- IAuthService: Interface for auth operations
- TokenService: Session token signing and verification
- PasswordHasher / BcryptHasher: Credential hashing
- ILoginThrottle / InMemoryLoginThrottle / RedisLoginThrottle: Lockout tracking
- Auth exceptions: InvalidCredentialsError, InvalidTokenError, etc.
"""

from .interfaces import IAuthService
from .models import (
    AuthResult,
    LoginRequest,
    PublicUser,
    RegisterRequest,
    TokenClaims,
    UserProfile,
)
from .passwords import BcryptHasher, PasswordHasher
from .throttle import ILoginThrottle, InMemoryLoginThrottle, RedisLoginThrottle
from .tokens import TokenService
from .exceptions import (
    InvalidCredentialsError,
    InvalidTokenError,
    LoginRateLimitedError,
    MissingTokenError,
    UserAlreadyExistsError,
)

__all__ = [
    # Interface
    "IAuthService",
    # Components
    "TokenService",
    "PasswordHasher",
    "BcryptHasher",
    "ILoginThrottle",
    "InMemoryLoginThrottle",
    "RedisLoginThrottle",
    # Models
    "AuthResult",
    "LoginRequest",
    "PublicUser",
    "RegisterRequest",
    "TokenClaims",
    "UserProfile",
    # Exceptions
    "InvalidCredentialsError",
    "InvalidTokenError",
    "LoginRateLimitedError",
    "MissingTokenError",
    "UserAlreadyExistsError",
]
