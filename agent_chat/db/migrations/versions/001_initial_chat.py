"""Initial chat schema: users, agents, API connections, conversations, messages.

Revision ID: 001
Revises:
Create Date: 2026-10-18
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_UPDATED_AT_TABLES = ("user", "agent", "api_connection", "conversation")


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
    ]


def upgrade() -> None:
    # =========================================================================
    # EXTENSIONS
    # =========================================================================
    op.execute('CREATE EXTENSION IF NOT EXISTS "pgcrypto"')

    # =========================================================================
    # TABLE 1: user
    # =========================================================================
    op.create_table(
        "user",
        sa.Column("id", sa.Uuid(), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("email", sa.Text(), nullable=False),
        sa.Column("display_name", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        *_timestamps(),
        sa.UniqueConstraint("email", name="uq_user_email"),
    )

    # =========================================================================
    # TABLE 2: agent
    # =========================================================================
    op.create_table(
        "agent",
        sa.Column("id", sa.Uuid(), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column(
            "owner_id",
            sa.Uuid(),
            sa.ForeignKey("user.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("model", sa.Text(), nullable=True),
        sa.Column("system_prompt", sa.Text(), nullable=True),
        sa.Column("temperature", sa.Float(), nullable=False, server_default=sa.text("0.7")),
        sa.Column("max_tokens", sa.Integer(), nullable=False, server_default=sa.text("1024")),
        *_timestamps(),
        sa.CheckConstraint("temperature >= 0 AND temperature <= 2", name="ck_agent_temperature"),
        sa.CheckConstraint("max_tokens > 0", name="ck_agent_max_tokens"),
    )
    op.create_index("ix_agent_owner_id", "agent", ["owner_id"])

    # =========================================================================
    # TABLE 3: api_connection
    # =========================================================================
    op.create_table(
        "api_connection",
        sa.Column("id", sa.Uuid(), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column(
            "owner_id",
            sa.Uuid(),
            sa.ForeignKey("user.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("service", sa.Text(), nullable=False),
        sa.Column("api_key_encrypted", sa.Text(), nullable=False),
        sa.Column("metadata", postgresql.JSONB(), nullable=True),
        *_timestamps(),
    )
    op.create_index("idx_api_connection_owner", "api_connection", ["owner_id", "updated_at"])

    # =========================================================================
    # TABLE 4: conversation
    # =========================================================================
    op.create_table(
        "conversation",
        sa.Column("id", sa.Uuid(), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column(
            "agent_id",
            sa.Uuid(),
            sa.ForeignKey("agent.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "owner_id",
            sa.Uuid(),
            sa.ForeignKey("user.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("title", sa.Text(), nullable=True),
        sa.Column("message_count", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column(
            "last_message_at",
            sa.DateTime(timezone=True),
            nullable=True,
            server_default=sa.text("now()"),
        ),
        *_timestamps(),
    )
    op.create_index("idx_conversation_owner_agent", "conversation", ["owner_id", "agent_id"])

    # =========================================================================
    # TABLE 5: message
    # =========================================================================
    op.create_table(
        "message",
        sa.Column("id", sa.Uuid(), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column(
            "conversation_id",
            sa.Uuid(),
            sa.ForeignKey("conversation.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("role", sa.Text(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("model", sa.Text(), nullable=True),
        sa.Column("position", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.CheckConstraint("role IN ('user', 'assistant', 'system')", name="ck_message_role"),
    )
    op.create_index(
        "idx_message_conversation_order",
        "message",
        ["conversation_id", "position"],
    )

    # =========================================================================
    # FUNCTIONS & TRIGGERS
    # =========================================================================
    op.execute("""
        CREATE OR REPLACE FUNCTION trigger_set_updated_at()
        RETURNS TRIGGER AS $$
        BEGIN
            NEW.updated_at = NOW();
            RETURN NEW;
        END;
        $$ LANGUAGE plpgsql
    """)

    for table in _UPDATED_AT_TABLES:
        op.execute(f"""
            CREATE TRIGGER set_updated_at_{table}
                BEFORE UPDATE ON "{table}"
                FOR EACH ROW EXECUTE FUNCTION trigger_set_updated_at()
        """)


def downgrade() -> None:
    # =========================================================================
    # TRIGGERS
    # =========================================================================
    for table in reversed(_UPDATED_AT_TABLES):
        op.execute(f'DROP TRIGGER IF EXISTS set_updated_at_{table} ON "{table}"')

    # =========================================================================
    # FUNCTIONS
    # =========================================================================
    op.execute("DROP FUNCTION IF EXISTS trigger_set_updated_at")

    # =========================================================================
    # TABLES (reverse order respecting FK dependencies)
    # =========================================================================
    op.drop_table("message")
    op.drop_table("conversation")
    op.drop_table("api_connection")
    op.drop_table("agent")
    op.drop_table("user")
