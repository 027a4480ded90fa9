"""Unit tests for ORM model structure (no database required).

Validates table registration, column names, foreign keys, and constraints by
inspecting Base.metadata.
"""

import pytest
from sqlalchemy import CheckConstraint

from agent_chat.db.base import Base
from agent_chat.db.models import (
    AgentORM,
    ApiConnectionORM,
    ConversationORM,
    MessageORM,
    MessageRoleEnum,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _table(name: str):
    """Return a Table object from Base.metadata by name."""
    return Base.metadata.tables[name]


def _col_names(table_name: str) -> set[str]:
    """Return the set of column names for a table."""
    return {c.name for c in _table(table_name).columns}


def _fk_target_tables(table_name: str) -> set[str]:
    """Return the set of target table.column strings for all FKs on a table."""
    return {f"{fk.column.table.name}.{fk.column.name}" for fk in _table(table_name).foreign_keys}


# ---------------------------------------------------------------------------
# Tables
# ---------------------------------------------------------------------------


@pytest.mark.unit
class TestTables:
    """Every chat table is registered."""

    def test_expected_tables(self, all_tables: set[str]) -> None:
        assert {"user", "agent", "api_connection", "conversation", "message"} <= all_tables


@pytest.mark.unit
class TestColumns:
    """Column layout per table."""

    def test_agent_columns(self) -> None:
        assert {
            "id",
            "owner_id",
            "name",
            "model",
            "system_prompt",
            "temperature",
            "max_tokens",
            "created_at",
            "updated_at",
        } <= _col_names("agent")

    def test_api_connection_columns(self) -> None:
        assert {
            "id",
            "owner_id",
            "name",
            "service",
            "api_key_encrypted",
            "metadata",
            "created_at",
            "updated_at",
        } <= _col_names("api_connection")

    def test_api_connection_metadata_attribute(self) -> None:
        """The ``metadata`` column is exposed as ``metadata_json`` on the ORM class."""
        assert ApiConnectionORM.__table__.c["metadata"].key == "metadata_json"

    def test_conversation_columns(self) -> None:
        assert {
            "id",
            "agent_id",
            "owner_id",
            "title",
            "message_count",
            "last_message_at",
        } <= _col_names("conversation")

    def test_message_columns(self) -> None:
        """Messages are immutable: no updated_at."""
        columns = _col_names("message")
        assert {"id", "conversation_id", "role", "content", "model", "position", "created_at"} <= columns
        assert "updated_at" not in columns


@pytest.mark.unit
class TestRelations:
    """Foreign keys and constraints."""

    def test_foreign_keys(self) -> None:
        assert _fk_target_tables("agent") == {"user.id"}
        assert _fk_target_tables("api_connection") == {"user.id"}
        assert _fk_target_tables("conversation") == {"agent.id", "user.id"}
        assert _fk_target_tables("message") == {"conversation.id"}

    def test_message_role_check(self) -> None:
        checks = [c for c in _table("message").constraints if isinstance(c, CheckConstraint)]
        assert any("role IN" in str(c.sqltext) for c in checks)

    def test_role_enum_values(self) -> None:
        assert {r.value for r in MessageRoleEnum} == {"user", "assistant", "system"}

    def test_model_classes_map_tables(self) -> None:
        assert AgentORM.__tablename__ == "agent"
        assert ConversationORM.__tablename__ == "conversation"
        assert MessageORM.__tablename__ == "message"
