"""
Completion gateway.

Tries each configured model in order. Within one model, rate-limited
(429) and overloaded (503) answers are retried with a linear backoff of
attempt x retry_delay seconds, up to max_retries times. Any other failure,
or running out of retries, moves on to the next model. The first model
that answers wins; its reply is stored as an assistant message.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from modules.chats.exceptions import ChatNotFoundError
from providers.base import GenerationConfig, LLMProvider, ProviderError, ProviderHTTPError
from shared.exceptions import ValidationError
from shared.models import MessageRole
from shared.repository import IChatRepository, IMessageRepository

from .exceptions import UpstreamUnavailableError
from .interfaces import ICompletionGateway
from .models import FALLBACK_RESPONSE, CompletionResult

logger = logging.getLogger(__name__)

DEFAULT_MODELS = ["gemini-1.5-flash", "gemini-1.5-pro", "gemini-pro"]


class CompletionGateway(ICompletionGateway):
    """Multi-model completion with per-model retry."""

    def __init__(
        self,
        provider: LLMProvider,
        chats: IChatRepository,
        messages: IMessageRepository,
        models: Optional[list[str]] = None,
        max_retries: int = 3,
        retry_delay: float = 1.0,
        config: Optional[GenerationConfig] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self._provider = provider
        self._chats = chats
        self._messages = messages
        self._models = list(models) if models is not None else list(DEFAULT_MODELS)
        self._max_retries = max_retries
        self._retry_delay = retry_delay
        self._config = config or GenerationConfig()
        self._sleep = sleep

    @property
    def models(self) -> list[str]:
        return list(self._models)

    async def complete(
        self,
        user_id: str,
        chat_id: Optional[str],
        prompt: Optional[str],
    ) -> CompletionResult:
        if not chat_id or not prompt:
            raise ValidationError("Chat ID and content are required", code="MISSING_FIELDS")

        self._provider.check_configured()

        chat = await self._chats.find_by_id(chat_id)
        if chat is None or chat.user_id != user_id:
            raise ChatNotFoundError(chat_id)

        last_error: Optional[ProviderError] = None
        for model in self._models:
            logger.info("Trying model %s for chat %s", model, chat_id)
            try:
                text = await self._generate_with_retry(model, prompt)
            except ProviderError as e:
                logger.warning("Model %s failed: %s", model, e.message)
                last_error = e
                continue
            except Exception as e:
                logger.exception("Model %s raised an unexpected error", model)
                last_error = ProviderError(self._provider.name, f"{type(e).__name__}: {e}")
                continue

            if text is None:
                logger.warning("Model %s returned no text; storing fallback reply", model)

            message = await self._messages.create(
                chat_id=chat_id,
                role=MessageRole.ASSISTANT,
                content=text or FALLBACK_RESPONSE,
            )
            # Second, independent write: a failure here leaves the chat timestamp stale
            await self._chats.update(chat_id, {})

            logger.info("Model %s answered for chat %s", model, chat_id)
            return CompletionResult(message=message, model=model)

        logger.error(
            "All models failed for chat %s: %s",
            chat_id,
            last_error.message if last_error else "no models configured",
        )
        raise UpstreamUnavailableError(
            last_error.message if last_error else None,
            self._models,
        )

    async def _generate_with_retry(self, model: str, prompt: str) -> Optional[str]:
        attempt = 0
        while True:
            try:
                return await self._provider.generate(model, prompt, self._config)
            except ProviderHTTPError as e:
                if not e.is_transient or attempt >= self._max_retries:
                    raise
                attempt += 1
                delay = self._retry_delay * attempt
                logger.info(
                    "Model %s returned %d, retrying in %.1fs (attempt %d/%d)",
                    model,
                    e.status,
                    delay,
                    attempt,
                    self._max_retries,
                )
                await self._sleep(delay)
