"""Password hashing: protocol and bcrypt implementation.

BcryptHasher is CPU-bound (hundreds of ms per call at cost 12) and runs off
the event loop using anyio.to_thread.run_sync() so concurrent requests are
not blocked.

bcrypt only reads the first 72 bytes of its input, while the password
policy allows up to 128 characters. New hashes therefore run bcrypt over
base64(HMAC-SHA256(password)), which fits in 44 bytes, and carry the
PREHASH_PREFIX marker. Plain bcrypt hashes without the marker still verify.
"""

import base64
import hashlib
import hmac
from typing import Protocol, runtime_checkable

import bcrypt
from anyio import to_thread

from shared.exceptions import ValidationError

MIN_SECRET_LENGTH = 6
DEFAULT_ROUNDS = 12
BCRYPT_MAX_BYTES = 72
PREHASH_PREFIX = "$bcrypt-sha256$"
PREHASH_KEY = b"threadline-password"


@runtime_checkable
class PasswordHasher(Protocol):
    """Hash and verify passwords."""

    async def hash(self, plain: str) -> str: ...

    async def verify(self, plain: str, hashed: str) -> bool: ...


def prehash(plain: str) -> bytes:
    """Fixed-length digest of the full password, safe to feed to bcrypt."""
    digest = hmac.new(PREHASH_KEY, plain.encode("utf-8"), hashlib.sha256).digest()
    return base64.b64encode(digest)


def _legacy_encode(plain: str) -> bytes:
    # plain bcrypt hashes were made from at most 72 bytes of input
    return plain.encode("utf-8")[:BCRYPT_MAX_BYTES]


class BcryptHasher:
    """Salted bcrypt hasher with a fixed work factor."""

    def __init__(self, rounds: int = DEFAULT_ROUNDS) -> None:
        self._rounds = rounds

    async def hash(self, plain: str) -> str:
        """Hash a password. Raises ValidationError for empty or short input."""
        if not plain or len(plain) < MIN_SECRET_LENGTH:
            raise ValidationError(
                f"Password must be at least {MIN_SECRET_LENGTH} characters long",
                code="INVALID_INPUT",
            )
        encoded = prehash(plain)
        salt = bcrypt.gensalt(rounds=self._rounds)
        hashed = await to_thread.run_sync(lambda: bcrypt.hashpw(encoded, salt).decode("utf-8"))
        return PREHASH_PREFIX + hashed

    async def verify(self, plain: str, hashed: str) -> bool:
        """Return False for malformed hashes rather than propagating an error."""
        if not plain or not hashed:
            return False

        if hashed.startswith(PREHASH_PREFIX):
            encoded_plain = prehash(plain)
            hashed = hashed[len(PREHASH_PREFIX):]
        else:
            encoded_plain = _legacy_encode(plain)

        encoded_hash = hashed.encode("utf-8")
        try:
            return await to_thread.run_sync(lambda: bcrypt.checkpw(encoded_plain, encoded_hash))
        except (ValueError, TypeError):
            return False
