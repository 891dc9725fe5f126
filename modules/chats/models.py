"""
Chats module data models.

Request bodies and the wire projections of chats and messages. Everything
here serializes with camelCase keys.
"""

from datetime import datetime
from typing import Optional

from shared.models import APIModel, Chat, Message, MessageRole

DEFAULT_CHAT_TITLE = "New Chat"
TITLE_MAX_LENGTH = 50


def derive_title(content: str, limit: int = TITLE_MAX_LENGTH) -> str:
    """Title for a chat named after its first message."""
    if len(content) > limit:
        return content[:limit] + "..."
    return content


class CreateChatRequest(APIModel):
    title: Optional[str] = None


class UpdateChatRequest(APIModel):
    title: Optional[str] = None


class CreateMessageRequest(APIModel):
    """A user message, optionally pointing at a previously uploaded file."""

    content: Optional[str] = None
    file_url: Optional[str] = None
    file_name: Optional[str] = None
    file_type: Optional[str] = None


class UpdateMessageRequest(APIModel):
    content: Optional[str] = None


class ChatView(APIModel):
    """Client-facing chat."""

    id: str
    user_id: str
    title: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_chat(cls, chat: Chat) -> "ChatView":
        return cls(
            id=chat.id,
            user_id=chat.user_id,
            title=chat.title,
            created_at=chat.created_at,
            updated_at=chat.updated_at,
        )


class MessageView(APIModel):
    """Client-facing message."""

    id: str
    chat_id: str
    role: MessageRole
    content: str
    file_url: Optional[str] = None
    file_name: Optional[str] = None
    file_type: Optional[str] = None
    created_at: datetime
    edit_history: list[str] = []

    @classmethod
    def from_message(cls, message: Message) -> "MessageView":
        return cls(
            id=message.id,
            chat_id=message.chat_id,
            role=message.role,
            content=message.content,
            file_url=message.file_url,
            file_name=message.file_name,
            file_type=message.file_type,
            created_at=message.created_at,
            edit_history=list(message.edit_history),
        )


class ChatListResponse(APIModel):
    chats: list[ChatView]


class ChatResponse(APIModel):
    chat: ChatView


class MessageListResponse(APIModel):
    messages: list[MessageView]


class MessageResponse(APIModel):
    message: MessageView


class SuccessResponse(APIModel):
    success: bool = True
