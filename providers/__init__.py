"""Generative-language provider implementations."""

from .base import (
    DEFAULT_SAFETY_SETTINGS,
    GenerationConfig,
    LLMProvider,
    ProviderError,
    ProviderHTTPError,
    SafetySetting,
)
from .factory import get_provider
from .gemini import GeminiProvider

__all__ = [
    "DEFAULT_SAFETY_SETTINGS",
    "GenerationConfig",
    "LLMProvider",
    "ProviderError",
    "ProviderHTTPError",
    "SafetySetting",
    "GeminiProvider",
    "get_provider",
]
