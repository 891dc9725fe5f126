"""Base classes and models for generative-language providers."""

from abc import ABC, abstractmethod
from typing import Optional

from pydantic import BaseModel

from shared.exceptions import ExternalServiceError

# Upstream statuses worth retrying on the same model: rate limited, overloaded
TRANSIENT_STATUSES = frozenset({429, 503})


class GenerationConfig(BaseModel):
    """Sampling parameters sent with every completion request.

    Attributes:
        temperature: Sampling temperature
        top_k: Top-k sampling cutoff
        top_p: Nucleus sampling probability mass
        max_output_tokens: Upper bound on generated tokens
    """

    model_config = {"frozen": True}

    temperature: float = 0.7
    top_k: int = 40
    top_p: float = 0.95
    max_output_tokens: int = 2048


class SafetySetting(BaseModel):
    """One content-safety filter: a harm category and its block threshold."""

    model_config = {"frozen": True}

    category: str
    threshold: str


DEFAULT_SAFETY_SETTINGS: tuple[SafetySetting, ...] = (
    SafetySetting(category="HARM_CATEGORY_HARASSMENT", threshold="BLOCK_MEDIUM_AND_ABOVE"),
    SafetySetting(category="HARM_CATEGORY_HATE_SPEECH", threshold="BLOCK_MEDIUM_AND_ABOVE"),
)


class ProviderError(ExternalServiceError):
    """Raised when a provider call fails before an HTTP status is known."""

    def __init__(self, provider: str, message: str, code: str = "PROVIDER_ERROR"):
        super().__init__(message, service=provider, code=code)
        self.provider = provider


class ProviderHTTPError(ProviderError):
    """Raised when the provider answers with a non-2xx status.

    str() renders as "{status}: {message}", the form surfaced to clients
    when every model has failed.
    """

    def __init__(self, provider: str, status: int, message: str):
        super().__init__(provider, f"{status}: {message}", code="PROVIDER_HTTP_ERROR")
        self.status = status
        self.upstream_message = message
        self.details["status"] = status

    @property
    def is_transient(self) -> bool:
        """Whether retrying the same model may succeed."""
        return self.status in TRANSIENT_STATUSES


class LLMProvider(ABC):
    """Abstract base class for generative-language providers.

    A provider turns one prompt into one block of generated text for a
    named model. Retry and fallback policy live in the caller.
    """

    name: str = "provider"

    @abstractmethod
    def check_configured(self) -> None:
        """Raise ConfigurationError when the provider cannot be called."""
        pass

    @abstractmethod
    async def generate(
        self,
        model: str,
        prompt: str,
        config: Optional[GenerationConfig] = None,
        safety_settings: tuple[SafetySetting, ...] = DEFAULT_SAFETY_SETTINGS,
    ) -> Optional[str]:
        """Generate text for a prompt.

        Args:
            model: Model identifier, e.g. "gemini-1.5-flash"
            prompt: User prompt text
            config: Sampling parameters (defaults to GenerationConfig())
            safety_settings: Content filters to apply

        Returns:
            The generated text, or None if the response carried no text

        Raises:
            ProviderHTTPError: If the provider returned a non-2xx status
            ProviderError: If the request could not be completed
        """
        pass

    async def aclose(self) -> None:
        """Release network resources held by the provider."""
        pass
