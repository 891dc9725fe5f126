"""
Patch helpers shared by every storage adapter.

Updates are applied by re-validating the merged record through its
pydantic schema, so a bad patch fails loudly instead of corrupting a
stored record.
"""

from typing import Any

from ..models import Chat, Message, utc_now

CHAT_PATCHABLE_FIELDS = frozenset({"title", "updated_at", "is_deleted"})
MESSAGE_PATCHABLE_FIELDS = frozenset(
    {"content", "file_url", "file_name", "file_type", "is_deleted"}
)


def _check_fields(patch: dict[str, Any], allowed: frozenset[str], entity: str) -> None:
    unknown = set(patch) - allowed
    if unknown:
        raise ValueError(f"Cannot patch {entity} fields: {', '.join(sorted(unknown))}")


def apply_chat_patch(chat: Chat, patch: dict[str, Any]) -> Chat:
    """Return a copy of chat with patch applied and updated_at bumped."""
    _check_fields(patch, CHAT_PATCHABLE_FIELDS, "chat")
    data = chat.model_dump()
    data.update(patch)
    data["updated_at"] = patch.get("updated_at") or utc_now()
    return Chat.model_validate(data)


def apply_message_patch(message: Message, patch: dict[str, Any]) -> Message:
    """Return a copy of message with patch applied.

    A content change pushes the previous content onto edit_history.
    """
    _check_fields(patch, MESSAGE_PATCHABLE_FIELDS, "message")
    data = message.model_dump()
    new_content = patch.get("content")
    if new_content is not None and new_content != message.content:
        data["edit_history"] = [*message.edit_history, message.content]
    data.update(patch)
    return Message.model_validate(data)


def sort_chats(chats: list[Chat]) -> list[Chat]:
    """Most recently updated first."""
    return sorted(chats, key=lambda c: c.updated_at, reverse=True)


def sort_messages(messages: list[Message]) -> list[Message]:
    """Oldest first."""
    return sorted(messages, key=lambda m: m.created_at)
