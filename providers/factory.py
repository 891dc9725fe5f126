"""Factory functions for creating generative-language providers."""

from shared.config import Settings
from shared.exceptions import ConfigurationError

from .base import LLMProvider
from .gemini import GeminiProvider


def get_provider(provider_type: str, settings: Settings) -> LLMProvider:
    """Create a provider configured from settings.

    Args:
        provider_type: Provider name, currently only "gemini"
        settings: Application settings holding keys and endpoints

    Raises:
        ConfigurationError: If the provider type is unknown
    """
    if provider_type == "gemini":
        return GeminiProvider(
            api_key=settings.google_api_key,
            api_base=settings.gemini_api_base,
            timeout=settings.completion_request_timeout,
        )
    raise ConfigurationError(
        f"Unknown provider '{provider_type}'. Expected 'gemini'",
        code="UNKNOWN_PROVIDER",
    )
