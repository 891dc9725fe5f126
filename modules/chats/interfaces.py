"""
Chats module interface.

The API layer and the completion gateway depend on IChatService for
every chat and message operation. All methods are scoped to the calling
user: another user's chat behaves exactly like a missing one.
"""

from typing import Optional, Protocol, runtime_checkable

from shared.models import Chat, Message

from .models import CreateMessageRequest


@runtime_checkable
class IChatService(Protocol):
    """Interface for chat and message operations."""

    async def list_chats(self, user_id: str) -> list[Chat]:
        """Return the user's chats, most recently updated first."""
        ...

    async def create_chat(self, user_id: str, title: Optional[str] = None) -> Chat:
        """Create a chat, titled "New Chat" when no title is given."""
        ...

    async def get_chat(self, user_id: str, chat_id: str) -> Chat:
        """
        Get a chat owned by the user.

        Raises:
            ChatNotFoundError: If the chat is absent, deleted or not the user's
        """
        ...

    async def rename_chat(self, user_id: str, chat_id: str, title: Optional[str]) -> Chat:
        """
        Rename a chat.

        Raises:
            ValidationError: If the title is missing or blank
            ChatNotFoundError: If the chat is not visible to the user
        """
        ...

    async def delete_chat(self, user_id: str, chat_id: str) -> None:
        """Soft-delete a chat."""
        ...

    async def list_messages(self, user_id: str, chat_id: str) -> list[Message]:
        """Return the chat's messages, oldest first."""
        ...

    async def add_message(
        self,
        user_id: str,
        chat_id: str,
        request: CreateMessageRequest,
    ) -> Message:
        """
        Append a user message to a chat.

        The first message of a chat also renames it after its content.

        Raises:
            ValidationError: If there is neither content nor an attached file
            ChatNotFoundError: If the chat is not visible to the user
        """
        ...

    async def edit_message(
        self,
        user_id: str,
        chat_id: str,
        message_id: str,
        content: Optional[str],
    ) -> Message:
        """
        Replace a message's content, keeping the old content in its edit history.

        Raises:
            ValidationError: If content is missing
            ChatNotFoundError: If the chat is not visible to the user
            MessageNotFoundError: If the message is absent or in another chat
        """
        ...

    async def delete_message(self, user_id: str, chat_id: str, message_id: str) -> None:
        """Soft-delete a message."""
        ...
