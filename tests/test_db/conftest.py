"""Fixtures for database model and repository tests."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

# Force all models to register with Base.metadata
import agent_chat.db.models  # noqa: F401
from agent_chat.db.base import Base


@pytest.fixture
def all_tables() -> set[str]:
    """Get all table names from Base metadata."""
    return set(Base.metadata.tables.keys())


@pytest.fixture
def db_session() -> AsyncMock:
    """Mock AsyncSession whose refresh() fills server-generated fields."""

    async def _refresh(instance) -> None:
        if getattr(instance, "id", None) is None:
            instance.id = uuid4()
        if getattr(instance, "created_at", None) is None:
            instance.created_at = datetime.now(timezone.utc)

    session = AsyncMock()
    session.execute = AsyncMock()
    session.commit = AsyncMock()
    session.flush = AsyncMock()
    session.refresh = AsyncMock(side_effect=_refresh)
    session.add = MagicMock()
    return session


@pytest.fixture
def session_factory(db_session: AsyncMock) -> MagicMock:
    """async_sessionmaker stand-in yielding ``db_session``."""
    factory = MagicMock()
    factory.return_value.__aenter__.return_value = db_session
    factory.return_value.__aexit__.return_value = False
    return factory
