"""
Completion module data models.
"""

from typing import Optional

from pydantic import BaseModel

from modules.chats.models import MessageView
from shared.models import APIModel, Message

FALLBACK_RESPONSE = "I apologize, but I couldn't generate a proper response. Please try again."


class CompletionRequest(APIModel):
    """Prompt for the assistant in the context of one chat."""

    chat_id: Optional[str] = None
    content: Optional[str] = None


class CompletionResult(BaseModel):
    """The stored assistant message and the model that produced it."""

    message: Message
    model: str


class CompletionResponse(APIModel):
    message: MessageView
    model: str

    @classmethod
    def from_result(cls, result: CompletionResult) -> "CompletionResponse":
        return cls(message=MessageView.from_message(result.message), model=result.model)
