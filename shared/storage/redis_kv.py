"""
Hosted key-value storage adapter (Redis protocol).

Key layout:
- user:{id}                 JSON-encoded User
- user:email:{email}        user id; claimed with SET NX so emails stay unique
- user:{id}:chats           set of chat ids
- chat:{id}                 JSON-encoded Chat
- chat:{id}:messages        set of message ids
- message:{id}              JSON-encoded Message

Multi-key writes (record + index) are independent commands, not a
transaction. The email claim happens first, so a crash mid-create leaves
at worst an orphaned email claim and never a duplicate account.
"""

from typing import Any, Optional, TypeVar

import redis.asyncio as aioredis
from pydantic import BaseModel

from ..exceptions import ConflictError
from ..models import Chat, Message, MessageRole, User, utc_now
from ..repository import BaseRepository, Repositories
from .common import apply_chat_patch, apply_message_patch, sort_chats, sort_messages

M = TypeVar("M", bound=BaseModel)


def _user_key(user_id: str) -> str:
    return f"user:{user_id}"


def _email_key(email: str) -> str:
    return f"user:email:{email}"


def _user_chats_key(user_id: str) -> str:
    return f"user:{user_id}:chats"


def _chat_key(chat_id: str) -> str:
    return f"chat:{chat_id}"


def _chat_messages_key(chat_id: str) -> str:
    return f"chat:{chat_id}:messages"


def _message_key(message_id: str) -> str:
    return f"message:{message_id}"


class _KeyValueRepository(BaseRepository[M]):
    """Helpers for reading and writing JSON-encoded records."""

    async def _get(self, key: str, model: type[M]) -> Optional[M]:
        raw = await self._db.get(key)
        if raw is None:
            return None
        return model.model_validate_json(raw)

    async def _get_many(self, keys: list[str], model: type[M]) -> list[M]:
        if not keys:
            return []
        raws = await self._db.mget(keys)
        return [model.model_validate_json(raw) for raw in raws if raw is not None]

    async def _put(self, key: str, record: BaseModel) -> None:
        await self._db.set(key, record.model_dump_json())


class RedisUserRepository(_KeyValueRepository[User]):
    """User repository over Redis keys."""

    async def create(self, email: str, password_hash: str, name: str) -> User:
        user = User(email=email, password_hash=password_hash, name=name)
        claimed = await self._db.set(_email_key(email), user.id, nx=True)
        if not claimed:
            raise ConflictError("User already exists with this email")
        await self._put(_user_key(user.id), user)
        return user

    async def find_by_email(self, email: str) -> Optional[User]:
        user_id = await self._db.get(_email_key(email))
        if user_id is None:
            return None
        return await self.find_by_id(user_id)

    async def find_by_id(self, user_id: str) -> Optional[User]:
        user = await self._get(_user_key(user_id), User)
        return user if user and user.is_active else None

    async def update_last_login(self, user_id: str) -> Optional[User]:
        return await self._modify(user_id, last_login_at=utc_now())

    async def deactivate(self, user_id: str) -> Optional[User]:
        return await self._modify(user_id, is_active=False)

    async def _modify(self, user_id: str, **changes: Any) -> Optional[User]:
        user = await self.find_by_id(user_id)
        if user is None:
            return None
        updated = user.model_copy(update=changes)
        await self._put(_user_key(user_id), updated)
        return updated


class RedisChatRepository(_KeyValueRepository[Chat]):
    """Chat repository over Redis keys."""

    async def create(self, user_id: str, title: str) -> Chat:
        chat = Chat(user_id=user_id, title=title)
        await self._put(_chat_key(chat.id), chat)
        await self._db.sadd(_user_chats_key(user_id), chat.id)
        return chat

    async def find_by_id(self, chat_id: str) -> Optional[Chat]:
        chat = await self._get(_chat_key(chat_id), Chat)
        return chat if chat and not chat.is_deleted else None

    async def find_by_user_id(self, user_id: str) -> list[Chat]:
        chat_ids = await self._db.smembers(_user_chats_key(user_id))
        chats = await self._get_many([_chat_key(cid) for cid in chat_ids], Chat)
        return sort_chats([c for c in chats if not c.is_deleted])

    async def update(self, chat_id: str, patch: dict[str, Any]) -> Optional[Chat]:
        chat = await self.find_by_id(chat_id)
        if chat is None:
            return None
        updated = apply_chat_patch(chat, patch)
        await self._put(_chat_key(chat_id), updated)
        return updated

    async def delete(self, chat_id: str) -> Optional[Chat]:
        return await self.update(chat_id, {"is_deleted": True})


class RedisMessageRepository(_KeyValueRepository[Message]):
    """Message repository over Redis keys."""

    async def create(
        self,
        chat_id: str,
        role: MessageRole,
        content: str,
        file_url: Optional[str] = None,
        file_name: Optional[str] = None,
        file_type: Optional[str] = None,
    ) -> Message:
        message = Message(
            chat_id=chat_id,
            role=role,
            content=content,
            file_url=file_url,
            file_name=file_name,
            file_type=file_type,
        )
        await self._put(_message_key(message.id), message)
        await self._db.sadd(_chat_messages_key(chat_id), message.id)
        return message

    async def find_by_id(self, message_id: str) -> Optional[Message]:
        message = await self._get(_message_key(message_id), Message)
        return message if message and not message.is_deleted else None

    async def find_by_chat_id(self, chat_id: str) -> list[Message]:
        message_ids = await self._db.smembers(_chat_messages_key(chat_id))
        messages = await self._get_many([_message_key(mid) for mid in message_ids], Message)
        return sort_messages([m for m in messages if not m.is_deleted])

    async def update(self, message_id: str, patch: dict[str, Any]) -> Optional[Message]:
        message = await self.find_by_id(message_id)
        if message is None:
            return None
        updated = apply_message_patch(message, patch)
        await self._put(_message_key(message_id), updated)
        return updated

    async def delete(self, message_id: str) -> Optional[Message]:
        return await self.update(message_id, {"is_deleted": True})


def create_redis_client(redis_url: str, socket_timeout: float = 5.0) -> aioredis.Redis:
    """Create an asyncio Redis client that returns str values."""
    return aioredis.from_url(
        redis_url,
        decode_responses=True,
        socket_timeout=socket_timeout,
        socket_connect_timeout=socket_timeout,
    )


def create_redis_repositories(client: aioredis.Redis) -> Repositories:
    """Build repositories sharing one Redis client."""
    return Repositories(
        users=RedisUserRepository(client),
        chats=RedisChatRepository(client),
        messages=RedisMessageRepository(client),
    )
