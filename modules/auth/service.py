"""
Authentication service implementation.

Orchestrates the password hasher, token service, login throttle and user
repository to implement signup, signin and session resolution.
"""

import logging
from typing import Optional

from shared.models import AuthenticatedUser, User
from shared.exceptions import ConflictError, ValidationError
from shared.repository import IUserRepository

from .interfaces import IAuthService
from .models import AuthResult, LoginRequest, PublicUser, RegisterRequest
from .passwords import PasswordHasher
from .throttle import ILoginThrottle, normalize_email
from .tokens import TokenService
from .validation import validate_email, validate_name, validate_password
from .exceptions import (
    InvalidCredentialsError,
    InvalidTokenError,
    LoginRateLimitedError,
    MissingTokenError,
    UserAlreadyExistsError,
)

logger = logging.getLogger(__name__)


class AuthService(IAuthService):
    """
    Implementation of the authentication service.

    Each successful register/login performs one repository write, one
    throttle mutation (login only) and returns a freshly issued token for
    the route to place in the session cookie.
    """

    def __init__(
        self,
        users: IUserRepository,
        hasher: PasswordHasher,
        tokens: TokenService,
        throttle: ILoginThrottle,
    ):
        self._users = users
        self._hasher = hasher
        self._tokens = tokens
        self._throttle = throttle

    async def register(self, request: RegisterRequest) -> AuthResult:
        if not request.email or not request.password or not request.name:
            raise ValidationError("Email, password, and name are required", code="MISSING_FIELDS")

        validate_email(request.email)
        validate_password(request.password)
        name = request.name.strip()
        validate_name(name)

        email = normalize_email(request.email)
        if await self._users.find_by_email(email) is not None:
            raise UserAlreadyExistsError(email)

        password_hash = await self._hasher.hash(request.password)
        try:
            user = await self._users.create(email=email, password_hash=password_hash, name=name)
        except ConflictError:
            # lost a race with a concurrent signup, or the email belongs to a deactivated account
            raise UserAlreadyExistsError(email)

        logger.info("Registered user %s", user.id)
        return self._issue(user)

    async def login(self, request: LoginRequest) -> AuthResult:
        if not request.email or not request.password:
            raise ValidationError("Email and password are required", code="MISSING_FIELDS")

        validate_email(request.email)

        email = normalize_email(request.email)
        if await self._throttle.is_locked(email):
            logger.warning("Rejected login for locked-out email %s", email)
            raise LoginRateLimitedError()

        user = await self._users.find_by_email(email)
        if user is None:
            await self._throttle.record_failure(email)
            logger.info("Failed login for unknown email %s", email)
            raise InvalidCredentialsError()

        if not await self._hasher.verify(request.password, user.password_hash):
            await self._throttle.record_failure(email)
            logger.info("Failed login for user %s", user.id)
            raise InvalidCredentialsError()

        await self._throttle.clear(email)
        await self._users.update_last_login(user.id)

        logger.info("User %s logged in", user.id)
        return self._issue(user)

    def authenticate(self, token: Optional[str]) -> AuthenticatedUser:
        if not token:
            raise MissingTokenError()

        claims = self._tokens.verify(token)
        if claims is None:
            raise InvalidTokenError()

        return AuthenticatedUser(id=claims.user_id, email=claims.email)

    async def current_user(self, token: Optional[str]) -> Optional[User]:
        claims = self._tokens.verify(token)
        if claims is None:
            return None
        return await self._users.find_by_id(claims.user_id)

    def _issue(self, user: User) -> AuthResult:
        token = self._tokens.issue(user.id, user.email)
        return AuthResult(user=PublicUser.from_user(user), token=token)
