"""add bot engine tables

Revision ID: 3b7e1c2a9d40
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "3b7e1c2a9d40"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at", sa.DateTime(), nullable=False, server_default=sa.text("now()")
        ),
        sa.Column(
            "updated_at", sa.DateTime(), nullable=False, server_default=sa.text("now()")
        ),
    ]


def _uuid_pk() -> sa.Column:
    return sa.Column(
        "id",
        postgresql.UUID(as_uuid=True),
        primary_key=True,
        server_default=sa.text("gen_random_uuid()"),
    )


def upgrade() -> None:
    """Upgrade schema: flows, nodes, edges, sessions, message log, config, menus."""
    op.create_table(
        "bot_engine_config",
        _uuid_pk(),
        sa.Column("tenant_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column(
            "is_enabled", sa.Boolean(), nullable=False, server_default=sa.text("false")
        ),
        sa.Column("default_country_code", sa.String(length=4), nullable=True),
        sa.Column("fallback_message", sa.Text(), nullable=True),
        sa.Column("welcome_message", sa.Text(), nullable=True),
        sa.Column(
            "session_expire_minutes",
            sa.Integer(),
            nullable=True,
            server_default=sa.text("60"),
        ),
        *_timestamps(),
    )
    op.create_index(
        "ix_bot_engine_config_tenant_id", "bot_engine_config", ["tenant_id"], unique=True
    )

    op.create_table(
        "bot_flows",
        _uuid_pk(),
        sa.Column("tenant_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("category", sa.String(length=64), nullable=True),
        sa.Column(
            "trigger_type",
            sa.String(length=32),
            nullable=False,
            server_default="first_message",
        ),
        sa.Column(
            "trigger_keywords",
            postgresql.JSONB(),
            nullable=False,
            server_default=sa.text("'[]'::jsonb"),
        ),
        sa.Column(
            "is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")
        ),
        sa.Column(
            "is_default", sa.Boolean(), nullable=False, server_default=sa.text("false")
        ),
        sa.Column(
            "is_template", sa.Boolean(), nullable=False, server_default=sa.text("false")
        ),
        sa.Column("priority", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column(
            "cloned_from_template_id", postgresql.UUID(as_uuid=True), nullable=True
        ),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["cloned_from_template_id"], ["bot_flows.id"], ondelete="SET NULL"
        ),
    )
    op.create_index("ix_bot_flows_tenant_id", "bot_flows", ["tenant_id"])
    op.create_index(
        "ix_bot_flows_tenant_active_priority",
        "bot_flows",
        ["tenant_id", "is_active", "priority"],
    )

    op.create_table(
        "bot_flow_nodes",
        _uuid_pk(),
        sa.Column("flow_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("tenant_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("node_type", sa.String(length=32), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=True),
        sa.Column(
            "config",
            postgresql.JSONB(),
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
        sa.Column("position_x", sa.Float(), nullable=False, server_default=sa.text("0")),
        sa.Column("position_y", sa.Float(), nullable=False, server_default=sa.text("0")),
        sa.Column(
            "is_entry_point",
            sa.Boolean(),
            nullable=False,
            server_default=sa.text("false"),
        ),
        *_timestamps(),
        sa.ForeignKeyConstraint(["flow_id"], ["bot_flows.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_bot_flow_nodes_flow_id", "bot_flow_nodes", ["flow_id"])
    op.create_index("ix_bot_flow_nodes_tenant_id", "bot_flow_nodes", ["tenant_id"])

    op.create_table(
        "bot_flow_edges",
        _uuid_pk(),
        sa.Column("flow_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("tenant_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("source_node_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("target_node_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column(
            "condition_type",
            sa.String(length=32),
            nullable=False,
            server_default="always",
        ),
        sa.Column("condition_value", sa.Text(), nullable=True),
        sa.Column("label", sa.String(length=255), nullable=True),
        sa.Column("priority", sa.Integer(), nullable=False, server_default=sa.text("0")),
        *_timestamps(),
        sa.ForeignKeyConstraint(["flow_id"], ["bot_flows.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(
            ["source_node_id"], ["bot_flow_nodes.id"], ondelete="CASCADE"
        ),
        sa.ForeignKeyConstraint(
            ["target_node_id"], ["bot_flow_nodes.id"], ondelete="CASCADE"
        ),
    )
    op.create_index("ix_bot_flow_edges_flow_id", "bot_flow_edges", ["flow_id"])
    op.create_index("ix_bot_flow_edges_tenant_id", "bot_flow_edges", ["tenant_id"])

    op.create_table(
        "bot_sessions",
        _uuid_pk(),
        sa.Column("tenant_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("contact_phone", sa.String(length=32), nullable=False),
        sa.Column("contact_name", sa.String(length=255), nullable=True),
        sa.Column("flow_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("current_node_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column(
            "variables",
            postgresql.JSONB(),
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
        sa.Column(
            "awaiting_input",
            sa.Boolean(),
            nullable=False,
            server_default=sa.text("false"),
        ),
        sa.Column("input_variable_name", sa.String(length=128), nullable=True),
        sa.Column(
            "status", sa.String(length=16), nullable=False, server_default="active"
        ),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column(
            "started_at", sa.DateTime(), nullable=False, server_default=sa.text("now()")
        ),
        sa.Column(
            "last_activity_at",
            sa.DateTime(),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.Column("ended_at", sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["flow_id"], ["bot_flows.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(
            ["current_node_id"], ["bot_flow_nodes.id"], ondelete="SET NULL"
        ),
        sa.CheckConstraint(
            "status IN ('active', 'paused', 'completed', 'expired', 'error')",
            name="ck_bot_sessions_status",
        ),
    )
    op.create_index(
        "uq_bot_sessions_active_contact",
        "bot_sessions",
        ["tenant_id", "contact_phone"],
        unique=True,
        postgresql_where=sa.text("status = 'active'"),
    )
    op.create_index(
        "ix_bot_sessions_tenant_status", "bot_sessions", ["tenant_id", "status"]
    )

    op.create_table(
        "bot_message_logs",
        _uuid_pk(),
        sa.Column("tenant_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("session_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("direction", sa.String(length=16), nullable=False),
        sa.Column("message_content", sa.Text(), nullable=True),
        sa.Column(
            "message_type", sa.String(length=32), nullable=False, server_default="text"
        ),
        sa.Column("node_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column(
            "metadata",
            postgresql.JSONB(),
            nullable=True,
            server_default=sa.text("'{}'::jsonb"),
        ),
        sa.Column(
            "processed_at",
            sa.DateTime(),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.ForeignKeyConstraint(
            ["session_id"], ["bot_sessions.id"], ondelete="CASCADE"
        ),
        sa.CheckConstraint(
            "direction IN ('inbound', 'outbound')",
            name="ck_bot_message_logs_direction",
        ),
    )
    op.create_index("ix_bot_message_logs_tenant_id", "bot_message_logs", ["tenant_id"])
    op.create_index(
        "ix_bot_message_logs_session_processed",
        "bot_message_logs",
        ["session_id", "processed_at"],
    )

    op.create_table(
        "bot_dynamic_menus",
        _uuid_pk(),
        sa.Column("tenant_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("parent_menu_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("menu_key", sa.String(length=128), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("emoji", sa.String(length=16), nullable=True),
        sa.Column("section_title", sa.String(length=255), nullable=True),
        sa.Column(
            "menu_type", sa.String(length=32), nullable=False, server_default="submenu"
        ),
        sa.Column("target_menu_key", sa.String(length=128), nullable=True),
        sa.Column("target_flow_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("target_command", sa.String(length=255), nullable=True),
        sa.Column("target_url", sa.Text(), nullable=True),
        sa.Column("target_message", sa.Text(), nullable=True),
        sa.Column(
            "display_order", sa.Integer(), nullable=False, server_default=sa.text("0")
        ),
        sa.Column(
            "is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")
        ),
        sa.Column(
            "is_root", sa.Boolean(), nullable=False, server_default=sa.text("false")
        ),
        sa.Column(
            "show_back_button",
            sa.Boolean(),
            nullable=False,
            server_default=sa.text("true"),
        ),
        sa.Column("back_button_text", sa.String(length=64), nullable=True),
        sa.Column("header_message", sa.Text(), nullable=True),
        sa.Column("footer_message", sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["parent_menu_id"], ["bot_dynamic_menus.id"], ondelete="CASCADE"
        ),
        sa.ForeignKeyConstraint(
            ["target_flow_id"], ["bot_flows.id"], ondelete="SET NULL"
        ),
        sa.UniqueConstraint(
            "tenant_id", "menu_key", name="uq_bot_dynamic_menus_tenant_key"
        ),
    )
    op.create_index(
        "ix_bot_dynamic_menus_tenant_id", "bot_dynamic_menus", ["tenant_id"]
    )


def downgrade() -> None:
    """Downgrade schema: drop bot engine tables."""
    op.drop_index("ix_bot_dynamic_menus_tenant_id", table_name="bot_dynamic_menus")
    op.drop_table("bot_dynamic_menus")
    op.drop_index(
        "ix_bot_message_logs_session_processed", table_name="bot_message_logs"
    )
    op.drop_index("ix_bot_message_logs_tenant_id", table_name="bot_message_logs")
    op.drop_table("bot_message_logs")
    op.drop_index("ix_bot_sessions_tenant_status", table_name="bot_sessions")
    op.drop_index("uq_bot_sessions_active_contact", table_name="bot_sessions")
    op.drop_table("bot_sessions")
    op.drop_index("ix_bot_flow_edges_tenant_id", table_name="bot_flow_edges")
    op.drop_index("ix_bot_flow_edges_flow_id", table_name="bot_flow_edges")
    op.drop_table("bot_flow_edges")
    op.drop_index("ix_bot_flow_nodes_tenant_id", table_name="bot_flow_nodes")
    op.drop_index("ix_bot_flow_nodes_flow_id", table_name="bot_flow_nodes")
    op.drop_table("bot_flow_nodes")
    op.drop_index("ix_bot_flows_tenant_active_priority", table_name="bot_flows")
    op.drop_index("ix_bot_flows_tenant_id", table_name="bot_flows")
    op.drop_table("bot_flows")
    op.drop_index("ix_bot_engine_config_tenant_id", table_name="bot_engine_config")
    op.drop_table("bot_engine_config")
