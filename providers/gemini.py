"""Google Gemini provider implementation.

Calls the Generative Language REST API directly with httpx, so callers
see the HTTP status of every failure and can tell a rate limit or an
overloaded model apart from a hard error.
"""

import logging
from typing import Any, Optional

import httpx

from shared.exceptions import ConfigurationError

from .base import (
    DEFAULT_SAFETY_SETTINGS,
    GenerationConfig,
    LLMProvider,
    ProviderError,
    ProviderHTTPError,
    SafetySetting,
)

logger = logging.getLogger(__name__)

DEFAULT_API_BASE = "https://generativelanguage.googleapis.com/v1beta"


def build_request_body(
    prompt: str,
    config: GenerationConfig,
    safety_settings: tuple[SafetySetting, ...],
) -> dict[str, Any]:
    """Build a generateContent request body."""
    return {
        "contents": [{"parts": [{"text": prompt}]}],
        "generationConfig": {
            "temperature": config.temperature,
            "topK": config.top_k,
            "topP": config.top_p,
            "maxOutputTokens": config.max_output_tokens,
        },
        "safetySettings": [
            {"category": s.category, "threshold": s.threshold} for s in safety_settings
        ],
    }


def extract_text(data: Any) -> Optional[str]:
    """Pull candidates[0].content.parts[0].text out of a response, if present."""
    try:
        text = data["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        return None
    return text if isinstance(text, str) and text else None


def extract_error_message(response: httpx.Response) -> str:
    """Read error.message from an error response body."""
    try:
        message = response.json()["error"]["message"]
    except (ValueError, KeyError, TypeError):
        return "Unknown error"
    return message if isinstance(message, str) and message else "Unknown error"


class GeminiProvider(LLMProvider):
    """Provider for Google Gemini models.

    Unlike local providers, this requires a valid API key. The key travels
    in the x-goog-api-key header, never in the URL.

    Args:
        api_key: Google AI API key
        api_base: REST API root
        timeout: Per-request timeout in seconds
        client: Optional AsyncClient to send requests with. Without one the
            provider creates its own on first use and reuses it until aclose().
            An injected client is left open for its owner to close.
    """

    name = "gemini"

    def __init__(
        self,
        api_key: str,
        api_base: str = DEFAULT_API_BASE,
        timeout: float = 60.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self._api_key = api_key
        self._api_base = api_base.rstrip("/")
        self._timeout = timeout
        self._client = client
        self._owns_client = client is None

    @property
    def client(self) -> httpx.AsyncClient:
        """The AsyncClient shared by every request (and retry) of this provider."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    async def aclose(self) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    def check_configured(self) -> None:
        if not self._api_key:
            raise ConfigurationError("API key not configured", code="MISSING_API_KEY")

    def endpoint(self, model: str) -> str:
        return f"{self._api_base}/models/{model}:generateContent"

    async def generate(
        self,
        model: str,
        prompt: str,
        config: Optional[GenerationConfig] = None,
        safety_settings: tuple[SafetySetting, ...] = DEFAULT_SAFETY_SETTINGS,
    ) -> Optional[str]:
        self.check_configured()
        body = build_request_body(prompt, config or GenerationConfig(), safety_settings)

        try:
            response = await self._post(self.client, model, body)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise ProviderError(self.name, f"Request to {model} failed: {e}")

        if response.is_error:
            raise ProviderHTTPError(self.name, response.status_code, extract_error_message(response))

        try:
            data = response.json()
        except ValueError:
            logger.warning("Model %s returned a non-JSON body", model)
            return None
        return extract_text(data)

    async def _post(self, client: httpx.AsyncClient, model: str, body: dict[str, Any]) -> httpx.Response:
        return await client.post(
            self.endpoint(model),
            json=body,
            headers={
                "x-goog-api-key": self._api_key,
                "Content-Type": "application/json",
            },
            timeout=self._timeout,
        )
