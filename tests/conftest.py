"""
Shared test fixtures and utilities.

This module provides common test infrastructure used across all test modules.
"""

from __future__ import annotations

import os

# Settings are read from the environment; fix them before any app import
TEST_JWT_SECRET = "test-secret-key-for-testing-only"
os.environ["JWT_SECRET"] = TEST_JWT_SECRET
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["STORAGE_BACKEND"] = "memory"
os.environ["THROTTLE_BACKEND"] = "memory"
os.environ.setdefault("GOOGLE_API_KEY", "test-google-api-key")

from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt  # PyJWT
import pytest

from api.dependencies import ServiceContainer, reset_container, set_container
from shared.config import Settings, get_settings
from shared.database import reset_client_cache


def create_test_token(
    user_id: str = "test-user-123",
    email: str = "test@example.com",
    expired: bool = False,
    secret: str = TEST_JWT_SECRET,
) -> str:
    """
    Create a session token the way the token service does.

    Args:
        user_id: User ID to include in the token
        email: Email to include in the token
        expired: If True, creates an expired token
        secret: Signing secret

    Returns:
        JWT token string
    """
    now = datetime.now(timezone.utc)
    exp = now - timedelta(hours=1) if expired else now + timedelta(days=7)

    payload = {
        "sub": user_id,
        "email": email,
        "exp": int(exp.timestamp()),
        "iat": int(now.timestamp()),
    }
    return jwt.encode(payload, secret, algorithm="HS256")


class FakeRedis:
    """
    In-memory stand-in for redis.asyncio.Redis (decode_responses=True).

    Implements only the commands the throttle and storage adapter issue.
    Expiry is recorded, not enforced.
    """

    def __init__(self):
        self.values: dict[str, str] = {}
        self.sets: dict[str, set[str]] = {}
        self.expiries: dict[str, int] = {}

    async def get(self, key: str) -> Optional[str]:
        return self.values.get(key)

    async def mget(self, keys: list[str]) -> list[Optional[str]]:
        return [self.values.get(k) for k in keys]

    async def set(self, key: str, value, nx: bool = False) -> Optional[bool]:
        if nx and key in self.values:
            return None
        self.values[key] = str(value)
        return True

    async def incr(self, key: str) -> int:
        count = int(self.values.get(key, "0")) + 1
        self.values[key] = str(count)
        return count

    async def expire(self, key: str, seconds: int) -> bool:
        self.expiries[key] = seconds
        return key in self.values

    async def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            removed += int(self.values.pop(key, None) is not None)
            removed += int(self.sets.pop(key, None) is not None)
            self.expiries.pop(key, None)
        return removed

    async def sadd(self, key: str, *members: str) -> int:
        bucket = self.sets.setdefault(key, set())
        before = len(bucket)
        bucket.update(members)
        return len(bucket) - before

    async def smembers(self, key: str) -> set[str]:
        return set(self.sets.get(key, set()))


@pytest.fixture(autouse=True)
def reset_singletons():
    """Reset the service container and cached settings around each test."""
    reset_container()
    get_settings.cache_clear()
    reset_client_cache()
    yield
    reset_container()
    get_settings.cache_clear()
    reset_client_cache()


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings for an isolated, in-memory application instance."""
    return Settings(
        jwt_secret=TEST_JWT_SECRET,
        bcrypt_rounds=4,
        storage_backend="memory",
        throttle_backend="memory",
        google_api_key="test-google-api-key",
        upload_dir=str(tmp_path / "uploads"),
    )


@pytest.fixture
def container(settings: Settings) -> ServiceContainer:
    """A fresh container installed as the application's container."""
    container = ServiceContainer(settings)
    set_container(container)
    return container


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def test_user_id() -> str:
    """Provide a consistent test user ID."""
    return "test-user-123"


@pytest.fixture
def test_user_email() -> str:
    """Provide a consistent test user email."""
    return "test@example.com"


@pytest.fixture
def auth_token(test_user_id: str, test_user_email: str) -> str:
    """Create a valid session token for testing."""
    return create_test_token(user_id=test_user_id, email=test_user_email)
