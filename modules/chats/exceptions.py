"""
Chats module exceptions.
"""

from shared.exceptions import NotFoundError


class ChatNotFoundError(NotFoundError):
    """Raised when a chat is absent, deleted, or owned by someone else."""

    def __init__(self, chat_id: str):
        super().__init__(
            "Chat not found",
            code="CHAT_NOT_FOUND",
            details={"chat_id": chat_id},
        )


class MessageNotFoundError(NotFoundError):
    """Raised when a message is absent, deleted, or belongs to another chat."""

    def __init__(self, message_id: str):
        super().__init__(
            "Message not found",
            code="MESSAGE_NOT_FOUND",
            details={"message_id": message_id},
        )
