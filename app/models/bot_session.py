"""BotSession model: a contact's position inside a flow."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    String,
    Text,
    Uuid,
    text,
)

from app.constants.bot_engine import SessionStatus
from app.db import Base
from app.models.mixins import JSONType, TimestampMixin


class BotSession(Base, TimestampMixin):
    """
    Runtime state of one contact's conversation with the bot.

    At most one row per (tenant_id, contact_phone) may be 'active'; the
    partial unique index enforces it for concurrent inbound messages.
    """

    __tablename__ = "bot_sessions"

    __table_args__ = (
        Index(
            "uq_bot_sessions_active_contact",
            "tenant_id",
            "contact_phone",
            unique=True,
            postgresql_where=text("status = 'active'"),
            sqlite_where=text("status = 'active'"),
        ),
        Index("ix_bot_sessions_tenant_status", "tenant_id", "status"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    tenant_id = Column(Uuid, nullable=False)
    contact_phone = Column(String(32), nullable=False)
    contact_name = Column(String(255), nullable=True)
    flow_id = Column(
        Uuid, ForeignKey("bot_flows.id", ondelete="CASCADE"), nullable=True
    )
    current_node_id = Column(
        Uuid, ForeignKey("bot_flow_nodes.id", ondelete="SET NULL"), nullable=True
    )
    variables = Column(JSONType, nullable=False, default=dict)
    awaiting_input = Column(Boolean, nullable=False, default=False)
    input_variable_name = Column(String(128), nullable=True)
    status = Column(String(16), nullable=False, default=SessionStatus.ACTIVE.value)
    error_message = Column(Text, nullable=True)
    started_at = Column(
        DateTime, nullable=False, default=lambda: datetime.now(timezone.utc)
    )
    last_activity_at = Column(
        DateTime, nullable=False, default=lambda: datetime.now(timezone.utc)
    )
    ended_at = Column(DateTime, nullable=True)
