"""
Dependency injection setup for FastAPI.

This module provides the "container" that wires together all module
implementations. Each module exposes its service through an interface,
and this file creates the concrete implementations from Settings.

Backends (storage, login throttle) are chosen here once, from
configuration, never inside endpoints.
"""

from datetime import timedelta
from typing import TYPE_CHECKING, Optional

from shared.config import Settings, get_settings

# Type checking imports for interfaces (avoids circular imports)
if TYPE_CHECKING:
    from modules.auth.interfaces import IAuthService
    from modules.auth.passwords import PasswordHasher
    from modules.auth.throttle import ILoginThrottle
    from modules.auth.tokens import TokenService
    from modules.chats.interfaces import IChatService
    from modules.completion.interfaces import ICompletionGateway
    from modules.uploads.service import UploadService
    from providers.base import LLMProvider
    from shared.repository import Repositories


class ServiceContainer:
    """
    Container for all service instances.

    This class manages the lifecycle of service instances and their
    dependencies. Services are created lazily on first access.

    All services are cached as singletons within the container.
    Use reset() to clear all cached services for testing.
    """

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings
        self._repositories: "Repositories | None" = None
        self._hasher: "PasswordHasher | None" = None
        self._tokens: "TokenService | None" = None
        self._throttle: "ILoginThrottle | None" = None
        self._auth_service: "IAuthService | None" = None
        self._chat_service: "IChatService | None" = None
        self._provider: "LLMProvider | None" = None
        self._completion: "ICompletionGateway | None" = None
        self._uploads: "UploadService | None" = None

    @property
    def settings(self) -> Settings:
        """Get the settings this container was built from."""
        if self._settings is None:
            self._settings = get_settings()
        return self._settings

    @property
    def repositories(self) -> "Repositories":
        """Get the repositories of the configured storage backend."""
        if self._repositories is None:
            from shared.storage import create_repositories
            self._repositories = create_repositories(self.settings)
        return self._repositories

    @property
    def hasher(self) -> "PasswordHasher":
        """Get the password hasher."""
        if self._hasher is None:
            from modules.auth.passwords import BcryptHasher
            self._hasher = BcryptHasher(rounds=self.settings.bcrypt_rounds)
        return self._hasher

    @property
    def tokens(self) -> "TokenService":
        """Get the session token service. Raises ConfigurationError without a secret."""
        if self._tokens is None:
            from modules.auth.tokens import TokenService
            self._tokens = TokenService(
                secret=self.settings.jwt_secret,
                algorithm=self.settings.jwt_algorithm,
                ttl=timedelta(days=self.settings.session_ttl_days),
            )
        return self._tokens

    @property
    def throttle(self) -> "ILoginThrottle":
        """Get the login throttle for the configured backend."""
        if self._throttle is None:
            self._throttle = self._create_throttle()
        return self._throttle

    def _create_throttle(self) -> "ILoginThrottle":
        from modules.auth.throttle import InMemoryLoginThrottle, RedisLoginThrottle
        from shared.exceptions import ConfigurationError

        settings = self.settings
        lockout = timedelta(minutes=settings.login_lockout_minutes)
        backend = settings.throttle_backend.lower()

        if backend == "memory":
            return InMemoryLoginThrottle(max_attempts=settings.login_max_attempts, lockout=lockout)
        if backend == "redis":
            from shared.storage.redis_kv import create_redis_client
            return RedisLoginThrottle(
                create_redis_client(settings.redis_url),
                max_attempts=settings.login_max_attempts,
                lockout=lockout,
            )
        raise ConfigurationError(
            f"Unknown throttle backend '{settings.throttle_backend}'. Expected 'memory' or 'redis'"
        )

    @property
    def auth(self) -> "IAuthService":
        """Get the auth service instance."""
        if self._auth_service is None:
            from modules.auth.service import AuthService
            self._auth_service = AuthService(
                users=self.repositories.users,
                hasher=self.hasher,
                tokens=self.tokens,
                throttle=self.throttle,
            )
        return self._auth_service

    @property
    def chats(self) -> "IChatService":
        """Get the chat service instance."""
        if self._chat_service is None:
            from modules.chats.service import ChatService
            self._chat_service = ChatService(
                chats=self.repositories.chats,
                messages=self.repositories.messages,
            )
        return self._chat_service

    @property
    def provider(self) -> "LLMProvider":
        """Get the generative-language provider."""
        if self._provider is None:
            from providers.factory import get_provider
            self._provider = get_provider("gemini", self.settings)
        return self._provider

    @property
    def completion(self) -> "ICompletionGateway":
        """Get the completion gateway instance."""
        if self._completion is None:
            from modules.completion.gateway import CompletionGateway
            self._completion = CompletionGateway(
                provider=self.provider,
                chats=self.repositories.chats,
                messages=self.repositories.messages,
                models=self.settings.gemini_models,
                max_retries=self.settings.completion_max_retries,
                retry_delay=self.settings.completion_retry_delay,
            )
        return self._completion

    @property
    def uploads(self) -> "UploadService":
        """Get the upload service instance."""
        if self._uploads is None:
            from modules.uploads.service import UploadService
            self._uploads = UploadService.from_settings(self.settings)
        return self._uploads

    async def aclose(self) -> None:
        """Close the provider's HTTP client, if one was created."""
        if self._provider is not None:
            await self._provider.aclose()

    def reset(self) -> None:
        """
        Reset all cached services.

        This is primarily for testing - allows tests to get fresh
        service instances with different mock dependencies.
        """
        self._repositories = None
        self._hasher = None
        self._tokens = None
        self._throttle = None
        self._auth_service = None
        self._chat_service = None
        self._provider = None
        self._completion = None
        self._uploads = None


# Module-level container singleton
_container: ServiceContainer | None = None


def get_container() -> ServiceContainer:
    """Get the singleton service container."""
    global _container
    if _container is None:
        _container = ServiceContainer()
    return _container


def set_container(container: ServiceContainer) -> None:
    """Install a specific container (tests use this to inject settings)."""
    global _container
    _container = container


def reset_container() -> None:
    """
    Reset the service container.

    This clears the cached container, so the next call to get_container()
    will create a fresh container with new service instances.

    Primarily used for testing.
    """
    global _container
    _container = None


# FastAPI dependency functions
# These are the functions that should be used in route Depends() calls


def get_app_settings() -> Settings:
    """FastAPI dependency for the active settings."""
    return get_container().settings


def get_auth_service() -> "IAuthService":
    """FastAPI dependency for auth service."""
    return get_container().auth


def get_chat_service() -> "IChatService":
    """FastAPI dependency for chat service."""
    return get_container().chats


def get_completion_gateway() -> "ICompletionGateway":
    """FastAPI dependency for completion gateway."""
    return get_container().completion


def get_upload_service() -> "UploadService":
    """FastAPI dependency for upload service."""
    return get_container().uploads
