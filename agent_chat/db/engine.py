"""Async database engine and session factory."""

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)


async def get_engine(
    database_url: str,
    pool_size: int = 5,
    pool_overflow: int = 10,
) -> AsyncEngine:
    """Create an async SQLAlchemy engine.

    Args:
        database_url: PostgreSQL connection URL (postgresql+asyncpg://...).
        pool_size: Connection pool size.
        pool_overflow: Max overflow connections beyond pool_size.

    Returns:
        Configured async engine instance.
    """
    engine = create_async_engine(
        database_url,
        pool_size=pool_size,
        max_overflow=pool_overflow,
        pool_pre_ping=True,
        pool_recycle=3600,
    )
    return engine


def get_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Build the session factory shared by the repositories.

    Repositories open one short-lived session per operation, so writes that
    happen after the HTTP response has started do not depend on a
    request-scoped session.

    Args:
        engine: SQLAlchemy async engine.

    Returns:
        Session factory with ``expire_on_commit=False``.
    """
    return async_sessionmaker(engine, expire_on_commit=False)
