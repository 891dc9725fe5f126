"""
Chat service implementation.

Ownership is enforced here, not in the repositories: every operation first
resolves the chat through get_chat(), which hides other users' chats
behind the same 404 as a missing one.
"""

import logging
from typing import Optional

from shared.exceptions import ValidationError
from shared.models import Chat, Message, MessageRole
from shared.repository import IChatRepository, IMessageRepository

from .exceptions import ChatNotFoundError, MessageNotFoundError
from .interfaces import IChatService
from .models import DEFAULT_CHAT_TITLE, CreateMessageRequest, derive_title

logger = logging.getLogger(__name__)


class ChatService(IChatService):
    """Implementation of the chat service over the chat/message repositories."""

    def __init__(self, chats: IChatRepository, messages: IMessageRepository):
        self._chats = chats
        self._messages = messages

    async def list_chats(self, user_id: str) -> list[Chat]:
        return await self._chats.find_by_user_id(user_id)

    async def create_chat(self, user_id: str, title: Optional[str] = None) -> Chat:
        chat = await self._chats.create(user_id=user_id, title=title or DEFAULT_CHAT_TITLE)
        logger.info("User %s created chat %s", user_id, chat.id)
        return chat

    async def get_chat(self, user_id: str, chat_id: str) -> Chat:
        chat = await self._chats.find_by_id(chat_id)
        if chat is None or chat.user_id != user_id:
            raise ChatNotFoundError(chat_id)
        return chat

    async def rename_chat(self, user_id: str, chat_id: str, title: Optional[str]) -> Chat:
        if not title or not title.strip():
            raise ValidationError("Title is required", code="MISSING_FIELDS")

        await self.get_chat(user_id, chat_id)
        chat = await self._chats.update(chat_id, {"title": title.strip()})
        if chat is None:
            raise ChatNotFoundError(chat_id)
        return chat

    async def delete_chat(self, user_id: str, chat_id: str) -> None:
        await self.get_chat(user_id, chat_id)
        await self._chats.delete(chat_id)
        logger.info("User %s deleted chat %s", user_id, chat_id)

    async def list_messages(self, user_id: str, chat_id: str) -> list[Message]:
        await self.get_chat(user_id, chat_id)
        return await self._messages.find_by_chat_id(chat_id)

    async def add_message(
        self,
        user_id: str,
        chat_id: str,
        request: CreateMessageRequest,
    ) -> Message:
        content = request.content or ""
        if not content.strip() and not request.file_url:
            raise ValidationError("Message content is required", code="MISSING_FIELDS")

        await self.get_chat(user_id, chat_id)
        message = await self._messages.create(
            chat_id=chat_id,
            role=MessageRole.USER,
            content=content,
            file_url=request.file_url,
            file_name=request.file_name,
            file_type=request.file_type,
        )

        # Not atomic with the message write; a failure here leaves the old title
        patch: dict = {}
        existing = await self._messages.find_by_chat_id(chat_id)
        if len(existing) == 1:
            patch["title"] = derive_title(content or request.file_name or DEFAULT_CHAT_TITLE)
        await self._chats.update(chat_id, patch)

        return message

    async def edit_message(
        self,
        user_id: str,
        chat_id: str,
        message_id: str,
        content: Optional[str],
    ) -> Message:
        if not content or not content.strip():
            raise ValidationError("Message content is required", code="MISSING_FIELDS")

        await self._owned_message(user_id, chat_id, message_id)
        message = await self._messages.update(message_id, {"content": content})
        if message is None:
            raise MessageNotFoundError(message_id)
        return message

    async def delete_message(self, user_id: str, chat_id: str, message_id: str) -> None:
        await self._owned_message(user_id, chat_id, message_id)
        await self._messages.delete(message_id)

    async def _owned_message(self, user_id: str, chat_id: str, message_id: str) -> Message:
        await self.get_chat(user_id, chat_id)
        message = await self._messages.find_by_id(message_id)
        if message is None or message.chat_id != chat_id:
            raise MessageNotFoundError(message_id)
        return message
