"""
Shared infrastructure for Threadline backend.

This package contains cross-cutting concerns that are used by multiple modules:
- config: Centralized settings management
- database: Supabase client factory
- exceptions: Base exception classes
- models: Persisted entities and the authenticated identity
- repository: Repository contracts
- storage: Repository adapters selected by configuration

Note: Business logic should NOT go here. This is for infrastructure only.
"""

from .config import Settings, get_settings
from .exceptions import (
    ThreadlineError,
    ValidationError,
    AuthenticationError,
    NotFoundError,
    ConflictError,
    RateLimitedError,
    ConfigurationError,
    ExternalServiceError,
)
from .models import AuthenticatedUser, Chat, Message, MessageRole, User
from .repository import (
    IUserRepository,
    IChatRepository,
    IMessageRepository,
    Repositories,
)

__all__ = [
    "Settings",
    "get_settings",
    "ThreadlineError",
    "ValidationError",
    "AuthenticationError",
    "NotFoundError",
    "ConflictError",
    "RateLimitedError",
    "ConfigurationError",
    "ExternalServiceError",
    "AuthenticatedUser",
    "Chat",
    "Message",
    "MessageRole",
    "User",
    "IUserRepository",
    "IChatRepository",
    "IMessageRepository",
    "Repositories",
]
