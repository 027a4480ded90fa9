"""Base repository with generic read and create operations."""

from typing import Generic, Type, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from agent_chat.db.base import Base

T = TypeVar("T", bound=Base)


class BaseRepository(Generic[T]):
    """Base repository with common operations.

    Provides create for any SQLAlchemy ORM model. Transaction
    control is left to the caller; this repository uses flush() + refresh()
    rather than commit().

    Args:
        session: AsyncSession for database operations.
        model_class: The ORM model class this repository manages.
    """

    def __init__(self, session: AsyncSession, model_class: Type[T]) -> None:
        self._session = session
        self._model_class = model_class

    async def create(self, **kwargs: object) -> T:
        """Create a new record.

        Args:
            **kwargs: Field values for the new record.

        Returns:
            The created record with server-generated fields populated.
        """
        instance = self._model_class(**kwargs)
        self._session.add(instance)
        await self._session.flush()
        await self._session.refresh(instance)
        return instance
