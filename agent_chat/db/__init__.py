"""Database base classes, mixins, and engine utilities."""

from agent_chat.db.base import Base, TimestampMixin, UUIDMixin
from agent_chat.db.engine import get_engine, get_session_factory

__all__ = [
    "Base",
    "TimestampMixin",
    "UUIDMixin",
    "get_engine",
    "get_session_factory",
]
