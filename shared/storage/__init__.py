"""
Storage adapters implementing the repository contracts.

Exactly one adapter is selected at startup from Settings.storage_backend:
- memory: process-local dicts (development, tests)
- json: single JSON file (single-instance deployments)
- redis: hosted key-value store
- supabase: hosted Postgres tables
"""

from ..config import Settings
from ..exceptions import ConfigurationError
from ..repository import Repositories
from .json_file import JsonFileStore, create_json_repositories
from .memory import InMemoryStore, create_memory_repositories

STORAGE_BACKENDS = ("memory", "json", "redis", "supabase")


def create_repositories(settings: Settings) -> Repositories:
    """
    Build the repositories for the configured storage backend.

    Raises:
        ConfigurationError: If the backend name is unknown
    """
    backend = settings.storage_backend.lower()

    if backend == "memory":
        return create_memory_repositories()
    if backend == "json":
        return create_json_repositories(settings.storage_path)
    if backend == "redis":
        from .redis_kv import create_redis_client, create_redis_repositories
        return create_redis_repositories(create_redis_client(settings.redis_url))
    if backend == "supabase":
        from ..database import get_supabase_client
        from .supabase_store import create_supabase_repositories
        return create_supabase_repositories(get_supabase_client(settings))

    raise ConfigurationError(
        f"Unknown storage backend '{settings.storage_backend}'. "
        f"Expected one of: {', '.join(STORAGE_BACKENDS)}"
    )


__all__ = [
    "STORAGE_BACKENDS",
    "InMemoryStore",
    "JsonFileStore",
    "create_repositories",
    "create_memory_repositories",
    "create_json_repositories",
]
