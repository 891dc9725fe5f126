"""
Session token service.

Issues and verifies HS256-signed JWTs binding a user id and email.
Tokens carry sub (user id), email, iat and exp claims and live for a
fixed period (7 days by default). There is no revocation list: a token
stops working when it expires or when the client drops the cookie.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

import jwt

from shared.exceptions import ConfigurationError, ValidationError

from .models import TokenClaims

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_TTL = timedelta(days=7)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class TokenService:
    """
    Signs and verifies session tokens with a single symmetric secret.

    The secret is mandatory: constructing the service without one raises
    ConfigurationError, so the application refuses to start rather than
    signing tokens with a guessable default.
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        ttl: timedelta = DEFAULT_TOKEN_TTL,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        if not secret:
            raise ConfigurationError(
                "JWT_SECRET is not configured. Set the JWT_SECRET environment variable.",
                code="MISSING_JWT_SECRET",
            )
        self._secret = secret
        self._algorithm = algorithm
        self._ttl = ttl
        self._clock = clock

    @property
    def ttl(self) -> timedelta:
        """Lifetime of issued tokens."""
        return self._ttl

    def issue(self, user_id: str, email: str) -> str:
        """
        Issue a signed token for a user.

        Raises:
            ValidationError: If user_id or email is empty
        """
        if not user_id or not email:
            raise ValidationError(
                "Token payload requires a user id and email",
                code="INVALID_INPUT",
            )

        now = self._clock()
        payload = {
            "sub": user_id,
            "email": email,
            "iat": int(now.timestamp()),
            "exp": int((now + self._ttl).timestamp()),
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify(self, token: Optional[str]) -> Optional[TokenClaims]:
        """
        Verify a token and return its claims.

        Returns None for any failure (malformed, expired, bad signature,
        missing claims). Callers treat None as "unauthenticated" and must
        not report the cause to the client.
        """
        if not token:
            return None

        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": ["sub", "email", "exp", "iat"]},
            )
        except jwt.ExpiredSignatureError:
            logger.debug("Rejected expired session token")
            return None
        except jwt.InvalidTokenError as e:
            logger.debug("Rejected invalid session token: %s", e)
            return None

        user_id = payload.get("sub")
        email = payload.get("email")
        if not isinstance(user_id, str) or not isinstance(email, str) or not user_id or not email:
            return None
        return TokenClaims(user_id=user_id, email=email)
