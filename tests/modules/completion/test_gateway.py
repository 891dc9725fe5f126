"""Tests for modules/completion/gateway.py."""

from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio

from modules.chats.exceptions import ChatNotFoundError
from modules.completion.exceptions import UpstreamUnavailableError
from modules.completion.gateway import DEFAULT_MODELS, CompletionGateway
from modules.completion.interfaces import ICompletionGateway
from modules.completion.models import FALLBACK_RESPONSE
from providers.base import LLMProvider, ProviderError, ProviderHTTPError
from shared.exceptions import ConfigurationError, ValidationError
from shared.models import MessageRole
from shared.storage import create_memory_repositories

OWNER = "user-owner"


def http_error(status: int, message: str = "upstream says no") -> ProviderHTTPError:
    return ProviderHTTPError("gemini", status, message)


@pytest.fixture
def repos():
    return create_memory_repositories()


@pytest_asyncio.fixture
async def chat(repos):
    return await repos.chats.create(user_id=OWNER, title="Chat")


@pytest.fixture
def provider():
    provider = MagicMock(spec=LLMProvider)
    provider.generate = AsyncMock(return_value="Hello from Gemini")
    return provider


@pytest.fixture
def sleep():
    return AsyncMock()


@pytest.fixture
def gateway(provider, repos, sleep) -> CompletionGateway:
    return CompletionGateway(
        provider=provider,
        chats=repos.chats,
        messages=repos.messages,
        sleep=sleep,
    )


class TestCompletionGateway:
    def test_implements_interface(self, gateway):
        assert isinstance(gateway, ICompletionGateway)

    def test_default_model_order(self, gateway):
        assert gateway.models == ["gemini-1.5-flash", "gemini-1.5-pro", "gemini-pro"]
        assert DEFAULT_MODELS[0] == "gemini-1.5-flash"

    @pytest.mark.asyncio
    async def test_first_model_answers(self, gateway, provider, repos, chat):
        result = await gateway.complete(OWNER, chat.id, "Hi")

        assert result.model == "gemini-1.5-flash"
        assert result.message.role is MessageRole.ASSISTANT
        assert result.message.content == "Hello from Gemini"
        provider.generate.assert_awaited_once()
        assert provider.generate.await_args.args[:2] == ("gemini-1.5-flash", "Hi")

        stored = await repos.messages.find_by_chat_id(chat.id)
        assert [m.content for m in stored] == ["Hello from Gemini"]

    @pytest.mark.asyncio
    async def test_sends_fixed_generation_config(self, gateway, provider, chat):
        await gateway.complete(OWNER, chat.id, "Hi")

        config = provider.generate.await_args.args[2]
        assert config.temperature == 0.7
        assert config.top_k == 40
        assert config.top_p == 0.95
        assert config.max_output_tokens == 2048

    @pytest.mark.asyncio
    async def test_updates_chat_timestamp(self, gateway, repos, chat):
        await gateway.complete(OWNER, chat.id, "Hi")
        assert (await repos.chats.find_by_id(chat.id)).updated_at >= chat.updated_at

    @pytest.mark.asyncio
    async def test_falls_back_to_third_model(self, gateway, provider, repos, sleep, chat):
        """503 on the first two models should end on the third model's reply."""
        async def generate(model, prompt, config=None):
            if model == "gemini-pro":
                return "third time lucky"
            raise http_error(503, "The model is overloaded.")

        provider.generate.side_effect = generate

        result = await gateway.complete(OWNER, chat.id, "Hi")

        assert result.model == "gemini-pro"
        assert result.message.content == "third time lucky"
        stored = await repos.messages.find_by_chat_id(chat.id)
        assert len(stored) == 1
        # Three retries on each of the two overloaded models
        assert provider.generate.await_count == 4 + 4 + 1
        assert sleep.await_count == 6

    @pytest.mark.asyncio
    async def test_linear_backoff(self, gateway, provider, sleep, chat):
        provider.generate.side_effect = [
            http_error(429),
            http_error(503),
            "recovered",
        ]

        result = await gateway.complete(OWNER, chat.id, "Hi")

        assert result.model == "gemini-1.5-flash"
        assert [c.args[0] for c in sleep.await_args_list] == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_retry_delay_is_configurable(self, provider, repos, sleep, chat):
        gateway = CompletionGateway(
            provider=provider,
            chats=repos.chats,
            messages=repos.messages,
            models=["only-model"],
            max_retries=2,
            retry_delay=0.5,
            sleep=sleep,
        )
        provider.generate.side_effect = http_error(429)

        with pytest.raises(UpstreamUnavailableError):
            await gateway.complete(OWNER, chat.id, "Hi")

        assert [c.args[0] for c in sleep.await_args_list] == [0.5, 1.0]
        assert provider.generate.await_count == 3

    @pytest.mark.asyncio
    async def test_non_transient_error_skips_to_next_model(self, gateway, provider, sleep, chat):
        provider.generate.side_effect = [http_error(400, "bad request"), "second model"]

        result = await gateway.complete(OWNER, chat.id, "Hi")

        assert result.model == "gemini-1.5-pro"
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_transport_error_skips_to_next_model(self, gateway, provider, chat):
        provider.generate.side_effect = [ProviderError("gemini", "connection reset"), "ok"]

        result = await gateway.complete(OWNER, chat.id, "Hi")
        assert result.model == "gemini-1.5-pro"

    @pytest.mark.asyncio
    async def test_unwrapped_provider_exception_skips_to_next_model(self, gateway, provider, sleep, chat):
        provider.generate.side_effect = [RuntimeError("boom"), "ok"]

        result = await gateway.complete(OWNER, chat.id, "Hi")

        assert result.model == "gemini-1.5-pro"
        assert result.message.content == "ok"
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unwrapped_exception_is_reported_as_last_error(self, gateway, provider, chat):
        provider.generate.side_effect = ValueError("bad url")

        with pytest.raises(UpstreamUnavailableError, match="Last error: ValueError: bad url"):
            await gateway.complete(OWNER, chat.id, "Hi")
        assert provider.generate.await_count == 3

    @pytest.mark.asyncio
    async def test_all_models_fail(self, gateway, provider, repos, chat):
        provider.generate.side_effect = [
            http_error(500, "first"),
            http_error(500, "second"),
            http_error(404, "models/gemini-pro is not found"),
        ]

        with pytest.raises(UpstreamUnavailableError) as exc_info:
            await gateway.complete(OWNER, chat.id, "Hi")

        error = exc_info.value
        assert error.status_code == 503
        assert error.message == (
            "All Gemini models are currently unavailable. "
            "Last error: 404: models/gemini-pro is not found. "
            "Please try again in a few moments."
        )
        assert await repos.messages.find_by_chat_id(chat.id) == []

    @pytest.mark.asyncio
    async def test_unexpected_response_shape_stores_apology(self, gateway, provider, chat):
        provider.generate.return_value = None

        result = await gateway.complete(OWNER, chat.id, "Hi")

        assert result.message.content == FALLBACK_RESPONSE
        assert result.model == "gemini-1.5-flash"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("chat_id, prompt", [(None, "Hi"), ("chat", None), ("chat", "")])
    async def test_requires_chat_and_content(self, gateway, provider, chat_id, prompt):
        with pytest.raises(ValidationError, match="Chat ID and content are required"):
            await gateway.complete(OWNER, chat_id, prompt)
        provider.generate.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_api_key(self, gateway, provider, chat):
        provider.check_configured.side_effect = ConfigurationError("API key not configured")

        with pytest.raises(ConfigurationError, match="API key not configured"):
            await gateway.complete(OWNER, chat.id, "Hi")
        provider.generate.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_other_users_chat(self, gateway, provider, chat):
        with pytest.raises(ChatNotFoundError):
            await gateway.complete("someone-else", chat.id, "Hi")
        provider.generate.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_chat(self, gateway, provider):
        with pytest.raises(ChatNotFoundError):
            await gateway.complete(OWNER, "missing", "Hi")
