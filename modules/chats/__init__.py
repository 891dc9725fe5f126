"""
Chats module.

Chat threads and their messages, always scoped to the owning user.

Public API:
- IChatService: Interface for chat/message operations
- ChatService: Implementation over the storage repositories
- ChatNotFoundError / MessageNotFoundError
"""

from .interfaces import IChatService
from .service import ChatService
from .models import ChatView, MessageView, derive_title
from .exceptions import ChatNotFoundError, MessageNotFoundError

__all__ = [
    "IChatService",
    "ChatService",
    "ChatView",
    "MessageView",
    "derive_title",
    "ChatNotFoundError",
    "MessageNotFoundError",
]
