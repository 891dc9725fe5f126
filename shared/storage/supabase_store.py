"""
Supabase storage adapter.

Encapsulates all Supabase queries and data mapping for the tables:
- users
- chats
- messages

Soft-deleted rows and deactivated users are filtered in every query.
"""

from typing import Any, Optional

from supabase import Client

from ..exceptions import ConflictError
from ..models import Chat, Message, MessageRole, User, utc_now
from ..repository import BaseRepository, Repositories
from .common import apply_chat_patch, apply_message_patch


def _row(record: Any, exclude: set[str] | None = None) -> dict[str, Any]:
    """Serialize a model into a JSON-safe row."""
    return record.model_dump(mode="json", exclude=exclude)


class SupabaseUserRepository(BaseRepository[User]):
    """User repository over the users table."""

    async def create(self, email: str, password_hash: str, name: str) -> User:
        existing = self._db.table("users").select("id").eq("email", email).execute()
        if existing.data:
            raise ConflictError("User already exists with this email")

        user = User(email=email, password_hash=password_hash, name=name)
        result = self._db.table("users").insert(_row(user)).execute()
        return User.model_validate(result.data[0])

    async def find_by_email(self, email: str) -> Optional[User]:
        result = (
            self._db.table("users")
            .select("*")
            .eq("email", email)
            .eq("is_active", True)
            .execute()
        )
        return User.model_validate(result.data[0]) if result.data else None

    async def find_by_id(self, user_id: str) -> Optional[User]:
        result = (
            self._db.table("users")
            .select("*")
            .eq("id", user_id)
            .eq("is_active", True)
            .execute()
        )
        return User.model_validate(result.data[0]) if result.data else None

    async def update_last_login(self, user_id: str) -> Optional[User]:
        return self._update(user_id, {"last_login_at": utc_now().isoformat()})

    async def deactivate(self, user_id: str) -> Optional[User]:
        return self._update(user_id, {"is_active": False})

    def _update(self, user_id: str, data: dict[str, Any]) -> Optional[User]:
        result = (
            self._db.table("users")
            .update(data)
            .eq("id", user_id)
            .eq("is_active", True)
            .execute()
        )
        return User.model_validate(result.data[0]) if result.data else None


class SupabaseChatRepository(BaseRepository[Chat]):
    """Chat repository over the chats table."""

    async def create(self, user_id: str, title: str) -> Chat:
        chat = Chat(user_id=user_id, title=title)
        result = self._db.table("chats").insert(_row(chat)).execute()
        return Chat.model_validate(result.data[0])

    async def find_by_id(self, chat_id: str) -> Optional[Chat]:
        result = (
            self._db.table("chats")
            .select("*")
            .eq("id", chat_id)
            .eq("is_deleted", False)
            .execute()
        )
        return Chat.model_validate(result.data[0]) if result.data else None

    async def find_by_user_id(self, user_id: str) -> list[Chat]:
        result = (
            self._db.table("chats")
            .select("*")
            .eq("user_id", user_id)
            .eq("is_deleted", False)
            .order("updated_at", desc=True)
            .execute()
        )
        return [Chat.model_validate(row) for row in result.data]

    async def update(self, chat_id: str, patch: dict[str, Any]) -> Optional[Chat]:
        chat = await self.find_by_id(chat_id)
        if chat is None:
            return None
        updated = apply_chat_patch(chat, patch)
        self._db.table("chats").update(_row(updated, exclude={"id"})).eq("id", chat_id).execute()
        return updated

    async def delete(self, chat_id: str) -> Optional[Chat]:
        return await self.update(chat_id, {"is_deleted": True})


class SupabaseMessageRepository(BaseRepository[Message]):
    """Message repository over the messages table."""

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
        result = self._db.table("messages").insert(_row(message)).execute()
        return Message.model_validate(result.data[0])

    async def find_by_id(self, message_id: str) -> Optional[Message]:
        result = (
            self._db.table("messages")
            .select("*")
            .eq("id", message_id)
            .eq("is_deleted", False)
            .execute()
        )
        return Message.model_validate(result.data[0]) if result.data else None

    async def find_by_chat_id(self, chat_id: str) -> list[Message]:
        result = (
            self._db.table("messages")
            .select("*")
            .eq("chat_id", chat_id)
            .eq("is_deleted", False)
            .order("created_at")
            .execute()
        )
        return [Message.model_validate(row) for row in result.data]

    async def update(self, message_id: str, patch: dict[str, Any]) -> Optional[Message]:
        message = await self.find_by_id(message_id)
        if message is None:
            return None
        updated = apply_message_patch(message, patch)
        self._db.table("messages").update(_row(updated, exclude={"id"})).eq(
            "id", message_id
        ).execute()
        return updated

    async def delete(self, message_id: str) -> Optional[Message]:
        return await self.update(message_id, {"is_deleted": True})


def create_supabase_repositories(client: Client) -> Repositories:
    """Build repositories sharing one Supabase client."""
    return Repositories(
        users=SupabaseUserRepository(client),
        chats=SupabaseChatRepository(client),
        messages=SupabaseMessageRepository(client),
    )
