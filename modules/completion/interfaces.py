"""
Completion module interface.
"""

from typing import Optional, Protocol, runtime_checkable

from .models import CompletionResult


@runtime_checkable
class ICompletionGateway(Protocol):
    """Turns a prompt into a stored assistant message."""

    async def complete(
        self,
        user_id: str,
        chat_id: Optional[str],
        prompt: Optional[str],
    ) -> CompletionResult:
        """
        Generate a reply in one of the user's chats.

        Raises:
            ValidationError: If chat_id or prompt is missing
            ConfigurationError: If the provider has no API key
            ChatNotFoundError: If the chat is not visible to the user
            UpstreamUnavailableError: If every model failed
        """
        ...
