"""
Completion module.

Forwards prompts to the generative-language provider with ordered model
fallback and bounded retry, and stores the replies.

Public API:
- ICompletionGateway: Interface for completions
- CompletionGateway: Multi-model implementation
- UpstreamUnavailableError: Raised when every model failed
"""

from .interfaces import ICompletionGateway
from .gateway import DEFAULT_MODELS, CompletionGateway
from .models import FALLBACK_RESPONSE, CompletionRequest, CompletionResult
from .exceptions import UpstreamUnavailableError

__all__ = [
    "ICompletionGateway",
    "CompletionGateway",
    "DEFAULT_MODELS",
    "FALLBACK_RESPONSE",
    "CompletionRequest",
    "CompletionResult",
    "UpstreamUnavailableError",
]
