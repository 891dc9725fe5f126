"""Tests for modules/auth/service.py."""

from datetime import timedelta
from unittest.mock import AsyncMock

import pytest

from modules.auth.exceptions import (
    InvalidCredentialsError,
    InvalidTokenError,
    LoginRateLimitedError,
    MissingTokenError,
    UserAlreadyExistsError,
)
from modules.auth.interfaces import IAuthService
from modules.auth.models import LoginRequest, RegisterRequest
from modules.auth.passwords import BcryptHasher
from modules.auth.service import AuthService
from modules.auth.throttle import InMemoryLoginThrottle
from modules.auth.tokens import TokenService
from shared.exceptions import ValidationError
from shared.storage import create_memory_repositories

SECRET = "service-test-secret"


def register_request(**overrides) -> RegisterRequest:
    data = {"email": "ann@example.com", "password": "secret123", "name": "Ann"}
    data.update(overrides)
    return RegisterRequest(**data)


class TestAuthService:
    @pytest.fixture
    def repos(self):
        return create_memory_repositories()

    @pytest.fixture
    def throttle(self):
        return InMemoryLoginThrottle(max_attempts=5, lockout=timedelta(minutes=15))

    @pytest.fixture
    def tokens(self):
        return TokenService(secret=SECRET)

    @pytest.fixture
    def service(self, repos, throttle, tokens):
        """Create auth service over in-memory dependencies."""
        return AuthService(
            users=repos.users,
            hasher=BcryptHasher(rounds=4),
            tokens=tokens,
            throttle=throttle,
        )

    def test_implements_interface(self, service):
        assert isinstance(service, IAuthService)

    # register

    @pytest.mark.asyncio
    async def test_register_returns_public_user_and_token(self, service, tokens):
        result = await service.register(register_request())

        assert result.user.email == "ann@example.com"
        assert result.user.name == "Ann"
        assert not hasattr(result.user, "password_hash")
        claims = tokens.verify(result.token)
        assert claims.user_id == result.user.id

    @pytest.mark.asyncio
    async def test_register_stores_hash_not_password(self, service, repos):
        await service.register(register_request())

        stored = await repos.users.find_by_email("ann@example.com")
        assert stored.password_hash.startswith("$bcrypt-sha256$$2")
        assert stored.password_hash.startswith("$2")

    @pytest.mark.asyncio
    async def test_register_normalizes_email_and_name(self, service, repos):
        result = await service.register(register_request(email="Ann@Example.COM", name="  Ann  "))

        assert result.user.email == "ann@example.com"
        assert result.user.name == "Ann"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("missing", ["email", "password", "name"])
    async def test_register_requires_all_fields(self, service, missing):
        with pytest.raises(ValidationError, match="Email, password, and name are required"):
            await service.register(register_request(**{missing: None}))

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "overrides, message",
        [
            ({"email": "not-an-email"}, "Invalid email format"),
            ({"password": "abc"}, "at least 6 characters"),
            ({"password": "abcdefgh"}, "one letter and one number"),
            ({"name": "A"}, "between 2 and 50 characters"),
            ({"name": "   A   "}, "between 2 and 50 characters"),
        ],
    )
    async def test_register_validation(self, service, repos, overrides, message):
        with pytest.raises(ValidationError, match=message):
            await service.register(register_request(**overrides))
        assert await repos.users.find_by_email("ann@example.com") is None

    @pytest.mark.asyncio
    async def test_register_duplicate_email(self, service):
        await service.register(register_request())
        with pytest.raises(UserAlreadyExistsError) as exc_info:
            await service.register(register_request(email="ANN@example.com", name="Other"))
        assert exc_info.value.status_code == 400
        assert exc_info.value.message == "User already exists with this email"

    # login

    @pytest.mark.asyncio
    async def test_login_success(self, service, repos, tokens):
        registered = await service.register(register_request())

        result = await service.login(LoginRequest(email="ann@example.com", password="secret123"))

        assert result.user.id == registered.user.id
        assert tokens.verify(result.token).email == "ann@example.com"
        assert (await repos.users.find_by_id(registered.user.id)).last_login_at is not None

    @pytest.mark.asyncio
    async def test_login_is_case_insensitive_on_email(self, service):
        await service.register(register_request())
        result = await service.login(LoginRequest(email="ANN@Example.com", password="secret123"))
        assert result.user.email == "ann@example.com"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("missing", ["email", "password"])
    async def test_login_requires_fields(self, service, missing):
        data = {"email": "ann@example.com", "password": "secret123", missing: None}
        with pytest.raises(ValidationError, match="Email and password are required"):
            await service.login(LoginRequest(**data))

    @pytest.mark.asyncio
    async def test_login_rejects_malformed_email(self, service):
        with pytest.raises(ValidationError, match="Invalid email format"):
            await service.login(LoginRequest(email="nope", password="secret123"))

    @pytest.mark.asyncio
    async def test_wrong_password_and_unknown_email_look_the_same(self, service):
        await service.register(register_request())

        with pytest.raises(InvalidCredentialsError) as wrong_password:
            await service.login(LoginRequest(email="ann@example.com", password="wrong123"))
        with pytest.raises(InvalidCredentialsError) as unknown_email:
            await service.login(LoginRequest(email="bob@example.com", password="secret123"))

        assert wrong_password.value.message == unknown_email.value.message
        assert wrong_password.value.status_code == unknown_email.value.status_code == 401

    @pytest.mark.asyncio
    async def test_failures_are_recorded(self, service, throttle):
        throttle.record_failure = AsyncMock()
        with pytest.raises(InvalidCredentialsError):
            await service.login(LoginRequest(email="Bob@Example.com", password="secret123"))
        throttle.record_failure.assert_awaited_once_with("bob@example.com")

    @pytest.mark.asyncio
    async def test_lockout_after_five_failures(self, service):
        await service.register(register_request())
        for _ in range(5):
            with pytest.raises(InvalidCredentialsError):
                await service.login(LoginRequest(email="ann@example.com", password="wrong123"))

        # Correct password is refused while locked
        with pytest.raises(LoginRateLimitedError) as exc_info:
            await service.login(LoginRequest(email="ann@example.com", password="secret123"))
        assert exc_info.value.status_code == 429

    @pytest.mark.asyncio
    async def test_success_clears_failures(self, service):
        await service.register(register_request())
        for _ in range(4):
            with pytest.raises(InvalidCredentialsError):
                await service.login(LoginRequest(email="ann@example.com", password="wrong123"))

        await service.login(LoginRequest(email="ann@example.com", password="secret123"))

        for _ in range(4):
            with pytest.raises(InvalidCredentialsError):
                await service.login(LoginRequest(email="ann@example.com", password="wrong123"))
        result = await service.login(LoginRequest(email="ann@example.com", password="secret123"))
        assert result.user.email == "ann@example.com"

    # session resolution

    @pytest.mark.asyncio
    async def test_authenticate_valid_token(self, service):
        result = await service.register(register_request())
        identity = service.authenticate(result.token)

        assert identity.id == result.user.id
        assert identity.email == "ann@example.com"

    @pytest.mark.parametrize("token", [None, ""])
    def test_authenticate_missing_token(self, service, token):
        with pytest.raises(MissingTokenError, match="Not authenticated"):
            service.authenticate(token)

    def test_authenticate_invalid_token(self, service):
        with pytest.raises(InvalidTokenError, match="Invalid token"):
            service.authenticate("not-a-token")

    def test_authenticate_foreign_token(self, service):
        token = TokenService(secret="someone-else").issue("user-1", "a@b.co")
        with pytest.raises(InvalidTokenError):
            service.authenticate(token)

    @pytest.mark.asyncio
    async def test_current_user(self, service):
        result = await service.register(register_request())
        user = await service.current_user(result.token)
        assert user.id == result.user.id

    @pytest.mark.asyncio
    async def test_current_user_invalid_token(self, service):
        assert await service.current_user("garbage") is None
        assert await service.current_user(None) is None

    @pytest.mark.asyncio
    async def test_current_user_deactivated(self, service, repos):
        result = await service.register(register_request())
        await repos.users.deactivate(result.user.id)
        assert await service.current_user(result.token) is None
