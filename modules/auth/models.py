"""
Authentication module data models.

Request fields are optional at the schema level: the service validates
presence itself so each missing field gets its own 400 message instead of
a generic schema error.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from shared.models import APIModel, User


class TokenClaims(BaseModel):
    """Verified claims carried by a session token."""

    user_id: str = Field(..., description="Subject (user ID)")
    email: str = Field(..., description="User's email")

    model_config = {"frozen": True}


class RegisterRequest(APIModel):
    """Signup form."""

    email: Optional[str] = None
    password: Optional[str] = None
    name: Optional[str] = None


class LoginRequest(APIModel):
    """Signin form."""

    email: Optional[str] = None
    password: Optional[str] = None


class PublicUser(APIModel):
    """Public projection of an account. Never includes the password hash."""

    id: str
    email: str
    name: str

    @classmethod
    def from_user(cls, user: User) -> "PublicUser":
        return cls(id=user.id, email=user.email, name=user.name)


class UserProfile(PublicUser):
    """Public projection plus account timestamps."""

    created_at: datetime
    last_login_at: Optional[datetime] = None

    @classmethod
    def from_user(cls, user: User) -> "UserProfile":
        return cls(
            id=user.id,
            email=user.email,
            name=user.name,
            created_at=user.created_at,
            last_login_at=user.last_login_at,
        )


class AuthResult(BaseModel):
    """Outcome of a successful register/login: the user and their new token."""

    user: PublicUser
    token: str


class AuthResponse(APIModel):
    """Response body for register/login."""

    user: PublicUser


class ProfileResponse(APIModel):
    """Response body for the current-user endpoint."""

    user: UserProfile
