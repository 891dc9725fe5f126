"""
Shared data models used across modules.

These are the persisted entities (users, chats, messages) and the
request-scoped identity forwarded by the session gate. Every storage
adapter serializes them through their pydantic schema, so timestamps
round-trip as real datetimes regardless of the backend.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def new_id() -> str:
    """Generate an opaque record identifier."""
    return uuid4().hex


class AuthenticatedUser(BaseModel):
    """
    Represents an authenticated user in the system.

    This model is populated from session token claims by the session gate
    and made available to route handlers via dependency injection.
    """

    id: str = Field(..., description="User ID")
    email: str = Field(..., description="User's email address")

    model_config = {"frozen": True}


class User(BaseModel):
    """A registered account. The password is only ever stored hashed."""

    id: str = Field(default_factory=new_id)
    email: str = Field(..., description="Lowercased, unique email address")
    name: str
    password_hash: str
    created_at: datetime = Field(default_factory=utc_now)
    last_login_at: Optional[datetime] = None
    is_active: bool = True


class Chat(BaseModel):
    """A conversation thread owned by one user."""

    id: str = Field(default_factory=new_id)
    user_id: str
    title: str
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
    is_deleted: bool = False


class MessageRole(str, Enum):
    """Author of a chat message."""
    USER = "user"
    ASSISTANT = "assistant"


class Message(BaseModel):
    """A single message in a chat, optionally carrying an uploaded file."""

    id: str = Field(default_factory=new_id)
    chat_id: str
    role: MessageRole
    content: str
    file_url: Optional[str] = None
    file_name: Optional[str] = None
    file_type: Optional[str] = None
    created_at: datetime = Field(default_factory=utc_now)
    is_deleted: bool = False
    edit_history: list[str] = Field(default_factory=list)


class APIModel(BaseModel):
    """Base for request/response bodies: camelCase on the wire, snake_case in code."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
