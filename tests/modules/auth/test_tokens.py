"""Tests for modules/auth/tokens.py."""

from datetime import datetime, timedelta, timezone

import jwt
import pytest
from jose import jwt as jose_jwt

from modules.auth.tokens import TokenService
from shared.exceptions import ConfigurationError, ValidationError

SECRET = "token-test-secret"


@pytest.fixture
def service() -> TokenService:
    return TokenService(secret=SECRET)


class TestTokenService:
    def test_requires_secret(self):
        with pytest.raises(ConfigurationError) as exc_info:
            TokenService(secret="")
        assert exc_info.value.code == "MISSING_JWT_SECRET"

    def test_issue_and_verify(self, service):
        token = service.issue("user-1", "ann@example.com")
        claims = service.verify(token)

        assert claims.user_id == "user-1"
        assert claims.email == "ann@example.com"

    def test_payload_claims(self, service):
        fixed = datetime(2026, 1, 1, tzinfo=timezone.utc)
        service = TokenService(secret=SECRET, clock=lambda: fixed)

        token = service.issue("user-1", "ann@example.com")
        payload = jwt.decode(token, SECRET, algorithms=["HS256"], options={"verify_exp": False})

        assert payload["sub"] == "user-1"
        assert payload["email"] == "ann@example.com"
        assert payload["iat"] == int(fixed.timestamp())
        assert payload["exp"] == int((fixed + timedelta(days=7)).timestamp())

    def test_default_ttl_is_seven_days(self, service):
        assert service.ttl == timedelta(days=7)

    @pytest.mark.parametrize("user_id, email", [("", "a@b.co"), ("user-1", "")])
    def test_issue_requires_payload(self, service, user_id, email):
        with pytest.raises(ValidationError):
            service.issue(user_id, email)

    def test_expired_token_rejected(self):
        past = datetime.now(timezone.utc) - timedelta(days=8)
        token = TokenService(secret=SECRET, clock=lambda: past).issue("user-1", "a@b.co")
        assert TokenService(secret=SECRET).verify(token) is None

    def test_wrong_secret_rejected(self, service):
        token = TokenService(secret="other-secret").issue("user-1", "a@b.co")
        assert service.verify(token) is None

    def test_tampered_token_rejected(self, service):
        token = service.issue("user-1", "a@b.co")
        header, payload, signature = token.split(".")
        tampered = ".".join([header, payload, signature[::-1]])
        assert service.verify(tampered) is None

    @pytest.mark.parametrize("token", [None, "", "garbage", "a.b.c"])
    def test_malformed_tokens_rejected(self, service, token):
        assert service.verify(token) is None

    def test_missing_claims_rejected(self, service):
        now = datetime.now(timezone.utc)
        token = jwt.encode(
            {"sub": "user-1", "exp": int((now + timedelta(hours=1)).timestamp()), "iat": int(now.timestamp())},
            SECRET,
            algorithm="HS256",
        )
        assert service.verify(token) is None

    def test_verifies_tokens_from_other_libraries(self, service):
        """A standard HS256 token minted independently should verify."""
        now = datetime.now(timezone.utc)
        token = jose_jwt.encode(
            {
                "sub": "user-9",
                "email": "jo@example.com",
                "iat": int(now.timestamp()),
                "exp": int((now + timedelta(hours=1)).timestamp()),
            },
            SECRET,
            algorithm="HS256",
        )
        claims = service.verify(token)
        assert claims.user_id == "user-9"

    def test_issued_tokens_decode_with_other_libraries(self, service):
        token = service.issue("user-1", "ann@example.com")
        payload = jose_jwt.decode(token, SECRET, algorithms=["HS256"])
        assert payload["sub"] == "user-1"

    def test_rejects_other_algorithms(self, service):
        now = datetime.now(timezone.utc)
        token = jwt.encode(
            {
                "sub": "user-1",
                "email": "a@b.co",
                "iat": int(now.timestamp()),
                "exp": int((now + timedelta(hours=1)).timestamp()),
            },
            SECRET,
            algorithm="HS512",
        )
        assert service.verify(token) is None
