"""
Login throttling: per-email failed-attempt counters with temporary lockout.

Two implementations of ILoginThrottle:
- InMemoryLoginThrottle: process-local dict. Only correct for a single
  server instance; state is lost on restart.
- RedisLoginThrottle: counter keys with native TTL, shared by every
  instance pointing at the same Redis.

Both key on the normalized email (trimmed, lowercased), matching how
users are looked up, so varying the case of an address does not reset
the counter.
"""

import logging
import time
from dataclasses import dataclass
from datetime import timedelta
from typing import Callable, Protocol, runtime_checkable

import redis.asyncio as aioredis

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 5
DEFAULT_LOCKOUT = timedelta(minutes=15)


def normalize_email(email: str) -> str:
    """Canonical form used for lookups and throttle keys."""
    return email.strip().lower()


@runtime_checkable
class ILoginThrottle(Protocol):
    """Interface for failed-login tracking."""

    async def is_locked(self, email: str) -> bool:
        """Whether the email has reached the failure limit within the window."""
        ...

    async def record_failure(self, email: str) -> None:
        """Count one failed login for the email."""
        ...

    async def clear(self, email: str) -> None:
        """Forget all failures for the email (after a successful login)."""
        ...


@dataclass
class ThrottleEntry:
    """Failure counter for one email."""
    count: int
    last_attempt: float


class InMemoryLoginThrottle:
    """
    Sliding lockout window held in process memory.

    An entry expires once the lockout window has passed since its last
    failure. Concurrent requests mutate the dict without a lock; a racing
    pair of failures may be counted once. This is a soft defence against
    online guessing, not a hard security boundary.
    """

    def __init__(
        self,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        lockout: timedelta = DEFAULT_LOCKOUT,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._max_attempts = max_attempts
        self._lockout_seconds = lockout.total_seconds()
        self._clock = clock
        self._entries: dict[str, ThrottleEntry] = {}

    def _is_expired(self, entry: ThrottleEntry, now: float) -> bool:
        return now - entry.last_attempt >= self._lockout_seconds

    def _purge_expired(self, now: float) -> None:
        expired = [key for key, entry in self._entries.items() if self._is_expired(entry, now)]
        for key in expired:
            del self._entries[key]

    async def is_locked(self, email: str) -> bool:
        self._purge_expired(self._clock())
        entry = self._entries.get(normalize_email(email))
        return entry is not None and entry.count >= self._max_attempts

    async def record_failure(self, email: str) -> None:
        key = normalize_email(email)
        now = self._clock()
        entry = self._entries.get(key)
        if entry is not None and not self._is_expired(entry, now):
            entry.count += 1
            entry.last_attempt = now
        else:
            entry = ThrottleEntry(count=1, last_attempt=now)
            self._entries[key] = entry
        if entry.count >= self._max_attempts:
            logger.warning("Login locked out after %d failed attempts: %s", entry.count, key)

    async def clear(self, email: str) -> None:
        self._entries.pop(normalize_email(email), None)


class RedisLoginThrottle:
    """
    Failure counters stored in Redis with a per-key TTL.

    Every failure increments the counter and resets its expiry to the
    lockout window, so the window slides from the last failure exactly as
    the in-memory version does. INCR is atomic, so concurrent failures
    across instances are all counted.
    """

    def __init__(
        self,
        client: aioredis.Redis,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        lockout: timedelta = DEFAULT_LOCKOUT,
        key_prefix: str = "login:failures:",
    ) -> None:
        self._client = client
        self._max_attempts = max_attempts
        self._lockout_seconds = max(1, int(lockout.total_seconds()))
        self._key_prefix = key_prefix

    def _key(self, email: str) -> str:
        return f"{self._key_prefix}{normalize_email(email)}"

    async def is_locked(self, email: str) -> bool:
        raw = await self._client.get(self._key(email))
        return raw is not None and int(raw) >= self._max_attempts

    async def record_failure(self, email: str) -> None:
        key = self._key(email)
        count = await self._client.incr(key)
        await self._client.expire(key, self._lockout_seconds)
        if count >= self._max_attempts:
            logger.warning("Login locked out after %d failed attempts: %s", count, key)

    async def clear(self, email: str) -> None:
        await self._client.delete(self._key(email))
