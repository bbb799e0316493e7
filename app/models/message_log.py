"""BotMessageLog model: append-only audit of bot traffic."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Index, String, Text, Uuid

from app.db import Base
from app.models.mixins import JSONType


class BotMessageLog(Base):
    """One row per inbound message or outbound bot response."""

    __tablename__ = "bot_message_logs"

    __table_args__ = (
        Index("ix_bot_message_logs_session_processed", "session_id", "processed_at"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    tenant_id = Column(Uuid, nullable=False, index=True)
    session_id = Column(
        Uuid, ForeignKey("bot_sessions.id", ondelete="CASCADE"), nullable=True
    )
    direction = Column(String(16), nullable=False)  # 'inbound' | 'outbound'
    message_content = Column(Text, nullable=True)
    message_type = Column(String(32), nullable=False, default="text")
    node_id = Column(Uuid, nullable=True)
    extra = Column(
        "metadata", JSONType, nullable=True, default=dict
    )  # DB column "metadata"; avoid shadowing Base.metadata
    processed_at = Column(
        DateTime, nullable=False, default=lambda: datetime.now(timezone.utc)
    )

    @property
    def message_metadata(self) -> dict | None:
        return self.extra
