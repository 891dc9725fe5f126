"""
Repository contracts for users, chats and messages.

Endpoints and services depend on these protocols only. The concrete
adapter (in-memory, JSON file, Redis key-value, Supabase) is chosen once
at startup by shared.storage.create_repositories().

Contract notes shared by every adapter:
- Deactivated users, deleted chats and deleted messages are invisible
  to every lookup.
- chats.update() always bumps updated_at.
- messages.update() appends the previous content to edit_history when
  the content changes.
- Adapters do NOT perform ownership checks; services do.
"""

from dataclasses import dataclass
from typing import Any, Generic, Optional, Protocol, TypeVar, runtime_checkable

from .models import Chat, Message, MessageRole, User


T = TypeVar("T")


@runtime_checkable
class IUserRepository(Protocol):
    """Persistence for registered accounts."""

    async def create(self, email: str, password_hash: str, name: str) -> User:
        """
        Create a user.

        Raises:
            ConflictError: If the email is already registered
        """
        ...

    async def find_by_email(self, email: str) -> Optional[User]: ...

    async def find_by_id(self, user_id: str) -> Optional[User]: ...

    async def update_last_login(self, user_id: str) -> Optional[User]: ...

    async def deactivate(self, user_id: str) -> Optional[User]: ...


@runtime_checkable
class IChatRepository(Protocol):
    """Persistence for chat threads."""

    async def create(self, user_id: str, title: str) -> Chat: ...

    async def find_by_id(self, chat_id: str) -> Optional[Chat]: ...

    async def find_by_user_id(self, user_id: str) -> list[Chat]:
        """Return the user's chats, most recently updated first."""
        ...

    async def update(self, chat_id: str, patch: dict[str, Any]) -> Optional[Chat]: ...

    async def delete(self, chat_id: str) -> Optional[Chat]:
        """Soft-delete a chat."""
        ...


@runtime_checkable
class IMessageRepository(Protocol):
    """Persistence for chat messages."""

    async def create(
        self,
        chat_id: str,
        role: MessageRole,
        content: str,
        file_url: Optional[str] = None,
        file_name: Optional[str] = None,
        file_type: Optional[str] = None,
    ) -> Message: ...

    async def find_by_id(self, message_id: str) -> Optional[Message]: ...

    async def find_by_chat_id(self, chat_id: str) -> list[Message]:
        """Return the chat's messages, oldest first."""
        ...

    async def update(self, message_id: str, patch: dict[str, Any]) -> Optional[Message]: ...

    async def delete(self, message_id: str) -> Optional[Message]:
        """Soft-delete a message."""
        ...


@dataclass(frozen=True)
class Repositories:
    """The set of repositories produced by one storage adapter."""

    users: IUserRepository
    chats: IChatRepository
    messages: IMessageRepository


class BaseRepository(Generic[T]):
    """
    Base class for client-backed repositories.

    Provides common functionality for database operations:
    - Client access via self._db
    - Generic type parameter for model type hints

    Subclasses implement the entity-specific contract above and handle
    row-to-model mapping internally.
    """

    def __init__(self, db: Any) -> None:
        """
        Initialize the repository with a database client.

        Args:
            db: Client instance (Supabase client, Redis client, ...).
        """
        self._db = db
