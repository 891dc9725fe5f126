"""
In-process storage adapter.

Records live in plain dicts for the lifetime of the process. This is the
default backend for development and tests; JsonFileStore builds on it to
add persistence.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

from ..exceptions import ConflictError
from ..models import Chat, Message, MessageRole, User, utc_now
from ..repository import Repositories
from .common import apply_chat_patch, apply_message_patch, sort_chats, sort_messages


class InMemoryStore:
    """
    Holds users, chats and messages keyed by id.

    All access goes through transaction(), which serializes callers with an
    asyncio.Lock. Subclasses override _load() and _save() to persist.
    """

    def __init__(self) -> None:
        self.users: dict[str, User] = {}
        self.chats: dict[str, Chat] = {}
        self.messages: dict[str, Message] = {}
        self._lock = asyncio.Lock()
        self._loaded = False

    @asynccontextmanager
    async def transaction(self, write: bool = False) -> AsyncIterator["InMemoryStore"]:
        """Hold the store lock; persist on exit when write is True."""
        async with self._lock:
            if not self._loaded:
                self._load()
                self._loaded = True
            yield self
            if write:
                try:
                    self._save()
                except OSError:
                    # discard unsaved in-memory changes; reload on next access
                    self._loaded = False
                    raise

    def _load(self) -> None:
        pass

    def _save(self) -> None:
        pass


class MemoryUserRepository:
    """User repository over an InMemoryStore."""

    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    async def create(self, email: str, password_hash: str, name: str) -> User:
        async with self._store.transaction(write=True) as store:
            if any(u.email == email for u in store.users.values()):
                raise ConflictError("User already exists with this email")
            user = User(email=email, password_hash=password_hash, name=name)
            store.users[user.id] = user
            return user

    async def find_by_email(self, email: str) -> Optional[User]:
        async with self._store.transaction() as store:
            return next(
                (u for u in store.users.values() if u.email == email and u.is_active),
                None,
            )

    async def find_by_id(self, user_id: str) -> Optional[User]:
        async with self._store.transaction() as store:
            user = store.users.get(user_id)
            return user if user and user.is_active else None

    async def update_last_login(self, user_id: str) -> Optional[User]:
        return await self._modify(user_id, last_login_at=utc_now())

    async def deactivate(self, user_id: str) -> Optional[User]:
        return await self._modify(user_id, is_active=False)

    async def _modify(self, user_id: str, **changes: Any) -> Optional[User]:
        async with self._store.transaction(write=True) as store:
            user = store.users.get(user_id)
            if user is None or not user.is_active:
                return None
            updated = user.model_copy(update=changes)
            store.users[user_id] = updated
            return updated


class MemoryChatRepository:
    """Chat repository over an InMemoryStore."""

    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    async def create(self, user_id: str, title: str) -> Chat:
        async with self._store.transaction(write=True) as store:
            chat = Chat(user_id=user_id, title=title)
            store.chats[chat.id] = chat
            return chat

    async def find_by_id(self, chat_id: str) -> Optional[Chat]:
        async with self._store.transaction() as store:
            chat = store.chats.get(chat_id)
            return chat if chat and not chat.is_deleted else None

    async def find_by_user_id(self, user_id: str) -> list[Chat]:
        async with self._store.transaction() as store:
            return sort_chats(
                [c for c in store.chats.values() if c.user_id == user_id and not c.is_deleted]
            )

    async def update(self, chat_id: str, patch: dict[str, Any]) -> Optional[Chat]:
        async with self._store.transaction(write=True) as store:
            chat = store.chats.get(chat_id)
            if chat is None or chat.is_deleted:
                return None
            updated = apply_chat_patch(chat, patch)
            store.chats[chat_id] = updated
            return updated

    async def delete(self, chat_id: str) -> Optional[Chat]:
        return await self.update(chat_id, {"is_deleted": True})


class MemoryMessageRepository:
    """Message repository over an InMemoryStore."""

    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    async def create(
        self,
        chat_id: str,
        role: MessageRole,
        content: str,
        file_url: Optional[str] = None,
        file_name: Optional[str] = None,
        file_type: Optional[str] = None,
    ) -> Message:
        async with self._store.transaction(write=True) as store:
            message = Message(
                chat_id=chat_id,
                role=role,
                content=content,
                file_url=file_url,
                file_name=file_name,
                file_type=file_type,
            )
            store.messages[message.id] = message
            return message

    async def find_by_id(self, message_id: str) -> Optional[Message]:
        async with self._store.transaction() as store:
            message = store.messages.get(message_id)
            return message if message and not message.is_deleted else None

    async def find_by_chat_id(self, chat_id: str) -> list[Message]:
        async with self._store.transaction() as store:
            return sort_messages(
                [m for m in store.messages.values() if m.chat_id == chat_id and not m.is_deleted]
            )

    async def update(self, message_id: str, patch: dict[str, Any]) -> Optional[Message]:
        async with self._store.transaction(write=True) as store:
            message = store.messages.get(message_id)
            if message is None or message.is_deleted:
                return None
            updated = apply_message_patch(message, patch)
            store.messages[message_id] = updated
            return updated

    async def delete(self, message_id: str) -> Optional[Message]:
        return await self.update(message_id, {"is_deleted": True})


def create_memory_repositories(store: Optional[InMemoryStore] = None) -> Repositories:
    """Build the three repositories over one shared store."""
    store = store or InMemoryStore()
    return Repositories(
        users=MemoryUserRepository(store),
        chats=MemoryChatRepository(store),
        messages=MemoryMessageRepository(store),
    )
