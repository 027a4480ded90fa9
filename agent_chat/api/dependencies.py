"""FastAPI dependency injection for settings, persistence, and the chat orchestrator."""

import logging
from typing import Optional

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from agent_chat.auth.context import JWTAuthContext
from agent_chat.chat.adapters.registry import AdapterRegistry
from agent_chat.chat.interfaces import AuthContext
from agent_chat.chat.orchestrator import StreamOrchestrator
from agent_chat.db.repositories import ConversationStore, SQLAgentStore, SQLCredentialStore
from agent_chat.settings import Settings, load_settings

logger = logging.getLogger(__name__)


def get_settings(request: Request) -> Settings:
    """
    Get application settings from app.state.settings.

    Requires app.state.settings to be initialized during lifespan (app.py).
    If not available, falls back to load_settings() which may raise.

    Args:
        request: FastAPI request object with app.state.

    Returns:
        Settings instance with application configuration.
    """
    settings = getattr(request.app.state, "settings", None)
    if settings is None:
        logger.warning(
            "get_settings_fallback: app.state.settings not initialized, loading directly"
        )
        settings = load_settings()
    return settings


def get_session_factory(request: Request) -> Optional[async_sessionmaker[AsyncSession]]:
    """
    Get the session factory from app.state.session_factory.

    Returns None when the database is not configured; callers decide whether
    that is fatal.

    Args:
        request: FastAPI request object with app.state.

    Returns:
        async_sessionmaker if the engine was initialized, None otherwise.
    """
    session_factory = getattr(request.app.state, "session_factory", None)
    if session_factory is None:
        logger.debug("get_session_factory: database not configured")
    return session_factory


def get_adapter_registry(request: Request) -> AdapterRegistry:
    """
    Get the provider adapter registry from app.state.adapters.

    Raises:
        RuntimeError: If the lifespan has not built the registry.
    """
    registry = getattr(request.app.state, "adapters", None)
    if registry is None:
        logger.error("get_adapter_registry_error: reason=registry_not_initialized")
        raise RuntimeError("Adapter registry not initialized. Ensure app lifespan has run.")
    return registry


def get_auth_context(
    request: Request,
    settings: Settings = Depends(get_settings),
    session_factory: Optional[async_sessionmaker[AsyncSession]] = Depends(get_session_factory),
) -> AuthContext:
    """
    Build the caller identity for this request from the Authorization header.

    Args:
        request: FastAPI request object.
        settings: Settings with JWT configuration.
        session_factory: Used to check that the user exists and is active.

    Returns:
        JWTAuthContext bound to this request.
    """
    return JWTAuthContext(
        authorization=request.headers.get("Authorization"),
        settings=settings,
        session_factory=session_factory,
    )


def get_orchestrator(
    settings: Settings = Depends(get_settings),
    session_factory: Optional[async_sessionmaker[AsyncSession]] = Depends(get_session_factory),
    adapters: AdapterRegistry = Depends(get_adapter_registry),
) -> StreamOrchestrator:
    """
    Wire the chat orchestrator to the SQL-backed stores.

    Args:
        settings: Application settings.
        session_factory: Factory for per-operation sessions.
        adapters: Provider adapter registry.

    Returns:
        StreamOrchestrator for this request.

    Raises:
        RuntimeError: If the database is not configured.
    """
    if session_factory is None:
        logger.error("get_orchestrator_error: reason=engine_not_initialized")
        raise RuntimeError(
            "Database engine not initialized. Ensure DATABASE_URL is set and app lifespan has run."
        )

    return StreamOrchestrator(
        agent_store=SQLAgentStore(session_factory),
        credential_store=SQLCredentialStore(session_factory, settings.api_key_encryption_key),
        conversation_store=ConversationStore(session_factory),
        adapters=adapters,
        settings=settings,
    )
