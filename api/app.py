"""
FastAPI application factory.

Creates and configures the FastAPI application instance.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from shared.config import get_settings
from shared.logging import setup_logging

from .dependencies import get_container
from .error_handlers import register_exception_handlers
from .middleware.auth import SessionGateMiddleware
from .routes import health
from modules.auth.routes import router as auth_router
from modules.chats.routes import router as chats_router
from modules.completion.routes import router as completion_router
from modules.uploads.routes import router as uploads_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Runs startup and shutdown logic. Building the token service here makes
    a missing JWT_SECRET stop the process before it serves a request.
    """
    # Startup
    container = get_container()
    settings = container.settings
    setup_logging(settings.log_level)
    tokens = container.tokens
    logger.info(
        "Starting %s on %s:%s (storage=%s, throttle=%s, session ttl=%s)",
        settings.app_name,
        settings.host,
        settings.port,
        settings.storage_backend,
        settings.throttle_backend,
        tokens.ttl,
    )
    yield
    # Shutdown
    await container.aclose()
    logger.info("Shutting down %s", settings.app_name)


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI instance
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Authenticated chat service with Gemini completions",
        version=settings.app_version,
        lifespan=lifespan,
        docs_url="/api/docs" if settings.debug else None,
        redoc_url="/api/redoc" if settings.debug else None,
    )

    register_exception_handlers(app)

    # Middleware added last runs first: CORS wraps the session gate
    app.add_middleware(SessionGateMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    # Register routes
    app.include_router(health.router, prefix="/api", tags=["health"])
    app.include_router(auth_router, prefix="/api/auth", tags=["auth"])
    app.include_router(chats_router, prefix="/api/chats", tags=["chats"])
    app.include_router(completion_router, prefix="/api", tags=["completion"])
    app.include_router(uploads_router, prefix="/api", tags=["uploads"])

    # Stored uploads are served publicly by their generated name
    app.mount(
        settings.upload_url_prefix,
        StaticFiles(directory=settings.upload_dir, check_dir=False),
        name="uploads",
    )

    return app


# Application instance for uvicorn
app = create_app()
