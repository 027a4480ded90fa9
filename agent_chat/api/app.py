"""FastAPI application factory with async lifespan management."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

import httpx
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from sqlalchemy.ext.asyncio import AsyncEngine

from agent_chat.chat.adapters.registry import build_default_registry
from agent_chat.db.engine import get_engine, get_session_factory
from agent_chat.settings import load_settings

logger = logging.getLogger(__name__)

APP_TITLE = "Agent Chat API"
APP_VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage FastAPI application lifespan (startup and shutdown).

    Handles initialization and cleanup of:
    - Database engine and session factory (if database_url is configured)
    - Shared HTTP client for upstream providers
    - Provider adapter registry

    Resources are stored in app.state for access by routes and dependencies.

    Args:
        app: FastAPI application instance.

    Yields:
        None during the application runtime (between startup and shutdown).
    """
    settings = load_settings()
    app.state.settings = settings
    logging.getLogger("agent_chat").setLevel(settings.log_level.upper())
    logger.info("app_startup: initializing resources, env=%s", settings.app_env)

    # Session tokens are signed by the dashboard with this secret
    if not settings.jwt_secret_key:
        raise RuntimeError(
            "JWT_SECRET_KEY must be set in environment or .env file. "
            "Use the same secret the dashboard signs session tokens with."
        )
    if not settings.api_key_encryption_key:
        logger.warning("api_key_encryption_key_missing: stored API keys cannot be decrypted")

    # Initialize database engine (optional)
    engine: Optional[AsyncEngine] = None
    if settings.database_url:
        try:
            engine = await get_engine(
                database_url=settings.database_url,
                pool_size=settings.database_pool_size,
                pool_overflow=settings.database_pool_overflow,
            )
            logger.info("db_engine_initialized: url=postgresql+asyncpg://...")
        except Exception as e:
            logger.exception("db_engine_init_error: error=%s", str(e))
            engine = None
    else:
        logger.info("db_engine_skipped: database_url not configured")

    app.state.engine = engine
    app.state.session_factory = get_session_factory(engine) if engine is not None else None

    # Shared client for provider calls; the timeout bounds connect and each read
    http_client = httpx.AsyncClient(timeout=httpx.Timeout(settings.provider_timeout_seconds))
    app.state.http_client = http_client
    app.state.adapters = build_default_registry(http_client, settings)
    logger.info(
        "provider_adapters_initialized: providers=%s, timeout_seconds=%s",
        [p.value for p in app.state.adapters.list_providers()],
        settings.provider_timeout_seconds,
    )

    logger.info("app_startup_complete: resources initialized")
    yield

    logger.info("app_shutdown: cleaning up resources")

    try:
        await http_client.aclose()
        logger.info("http_client_closed: provider connections released")
    except Exception as e:
        logger.warning("http_client_close_error: error=%s", str(e))

    if engine is not None:
        try:
            await engine.dispose()
            logger.info("db_engine_disposed: connection pool closed")
        except Exception as e:
            logger.warning("db_engine_dispose_error: error=%s", str(e))

    logger.info("app_shutdown_complete: all resources cleaned up")


def create_app() -> FastAPI:
    """Create and configure FastAPI application instance.

    Returns:
        Configured FastAPI application with lifespan, CORS, routes, and middleware.
    """
    settings = load_settings()

    app = FastAPI(
        title=APP_TITLE,
        version=APP_VERSION,
        description="Streaming chat with user-configured AI agents",
        lifespan=lifespan,
    )

    # Middleware registration order: Starlette executes in LIFO (last registered = first to run).
    # Execution order: CORS -> ErrorHandler -> RequestID -> RequestLogging

    from agent_chat.api.middleware.observability import RequestLoggingMiddleware

    app.add_middleware(RequestLoggingMiddleware)

    from agent_chat.api.middleware.request_id import RequestIdMiddleware

    app.add_middleware(RequestIdMiddleware)

    from agent_chat.api.middleware.error_handler import (
        error_handling_middleware,
        request_validation_exception_handler,
    )

    app.middleware("http")(error_handling_middleware)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)

    from agent_chat.api.middleware.cors import configure_cors

    configure_cors(app, settings)

    from agent_chat.api.routers import chat_router, health_router

    # Health checks (no prefix, paths start with /health and /ready)
    app.include_router(health_router, tags=["health"])

    # Chat endpoint (path is /{agent_id}/chat, needs /agents prefix)
    app.include_router(chat_router, prefix="/agents", tags=["chat"])

    logger.info(
        "app_created: title=%s, version=%s, routers=2, "
        "middleware=cors,error_handler,request_id,request_logging",
        APP_TITLE,
        APP_VERSION,
    )
    return app
