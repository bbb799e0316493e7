"""
Service for the bot message log.

Entries are append-only; the log is for observability and never drives
engine decisions.
"""

from __future__ import annotations

from typing import Iterable, List
from uuid import UUID

from sqlalchemy.orm import Query, Session

from app.models.message_log import BotMessageLog
from app.schemas.bot_session import MessageLogCreate


class MessageLogService:
    """Append and read message log entries. No update/delete."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def _build(self, entry: MessageLogCreate) -> BotMessageLog:
        return BotMessageLog(
            tenant_id=entry.tenant_id,
            session_id=entry.session_id,
            direction=entry.direction.value,
            message_content=entry.message_content,
            message_type=entry.message_type,
            node_id=entry.node_id,
            extra=entry.metadata or {},
        )

    def append(self, entry: MessageLogCreate) -> BotMessageLog:
        row = self._build(entry)
        self.db.add(row)
        self.db.commit()
        self.db.refresh(row)
        return row

    def append_many(self, entries: Iterable[MessageLogCreate]) -> List[BotMessageLog]:
        """Insert several entries in one commit."""
        rows = [self._build(entry) for entry in entries]
        if not rows:
            return []
        self.db.add_all(rows)
        self.db.commit()
        return rows

    def get_messages_query(self, session_id: UUID) -> Query[BotMessageLog]:
        """Query for a session's log in processing order (for pagination)."""
        return (
            self.db.query(BotMessageLog)
            .filter(BotMessageLog.session_id == session_id)
            .order_by(BotMessageLog.processed_at.asc(), BotMessageLog.id.asc())
        )

    def get_messages(
        self, session_id: UUID, limit: int = 100, offset: int = 0
    ) -> List[BotMessageLog]:
        return self.get_messages_query(session_id).offset(offset).limit(limit).all()
