"""
Centralized configuration for the Threadline backend.

All settings are loaded from environment variables with sensible defaults.
Module-specific settings should be namespaced (e.g., LOGIN_*, GEMINI_*).
"""

from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Threadline API"
    app_version: str = "0.1.0"
    debug: bool = False
    environment: str = "development"  # "production" enables secure cookies
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    reload: bool = False

    # CORS settings
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:3000"]
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = ["*"]
    cors_allow_headers: list[str] = ["*"]

    # Session tokens (no default secret: startup refuses to run without one)
    jwt_secret: str = ""
    jwt_algorithm: str = "HS256"
    session_ttl_days: int = 7
    auth_cookie_name: str = "auth-token"

    # Password hashing
    bcrypt_rounds: int = 12

    # Login throttling
    login_max_attempts: int = 5
    login_lockout_minutes: int = 15
    throttle_backend: str = "memory"  # "memory" or "redis"
    redis_url: str = "redis://localhost:6379/0"

    # Storage
    storage_backend: str = "memory"  # "memory", "json", "redis" or "supabase"
    storage_path: str = "data/threadline.json"
    supabase_url: str = ""
    supabase_service_role_key: str = ""

    # Completion (Google Gemini)
    google_api_key: str = ""
    gemini_api_base: str = "https://generativelanguage.googleapis.com/v1beta"
    gemini_models: list[str] = ["gemini-1.5-flash", "gemini-1.5-pro", "gemini-pro"]
    completion_max_retries: int = 3
    completion_retry_delay: float = 1.0  # seconds, multiplied by attempt number
    completion_request_timeout: float = 60.0

    # File uploads
    upload_dir: str = "uploads"
    upload_url_prefix: str = "/uploads"
    upload_max_bytes: int = 10 * 1024 * 1024
    upload_allowed_types: list[str] = [
        "image/jpeg",
        "image/png",
        "image/gif",
        "image/webp",
        "text/plain",
        "application/pdf",
    ]

    @property
    def is_production(self) -> bool:
        """Whether the service runs in production mode."""
        return self.environment.lower() == "production"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()
