"""Bot session store: lookup, atomic creation and lifecycle transitions."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Tuple
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Query, Session

from app.constants.bot_engine import SessionStatus
from app.infra.logging_config import get_logger
from app.models.bot_session import BotSession
from app.schemas.bot_session import BotSessionCreate, BotSessionUpdate
from app.utils.db.filtering import apply_filters

logger = get_logger("bot_session_service")


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def is_session_idle(
    session: BotSession,
    expire_minutes: Optional[int],
    now: Optional[datetime] = None,
) -> bool:
    """True when the session's last activity is older than `expire_minutes`."""
    if not expire_minutes or session.last_activity_at is None:
        return False
    now = now or datetime.now(timezone.utc)
    return _as_utc(session.last_activity_at) < now - timedelta(minutes=expire_minutes)


class BotSessionService:
    def __init__(self, db: Session) -> None:
        self.db = db

    def get_session(self, session_id: UUID) -> Optional[BotSession]:
        return self.db.query(BotSession).filter(BotSession.id == session_id).first()

    def get_active_session(
        self, tenant_id: UUID, contact_phone: str
    ) -> Optional[BotSession]:
        return (
            self.db.query(BotSession)
            .filter(
                BotSession.tenant_id == tenant_id,
                BotSession.contact_phone == contact_phone,
                BotSession.status == SessionStatus.ACTIVE.value,
            )
            .order_by(BotSession.last_activity_at.desc())
            .first()
        )

    def create_session(self, data: BotSessionCreate) -> Tuple[BotSession, bool]:
        """
        Open an active session for the contact. Returns (session, created).

        If another request created the contact's active session first, the
        unique index rejects this insert and the existing session is returned.
        """
        now = datetime.now(timezone.utc)
        session = BotSession(
            **data.model_dump(),
            status=SessionStatus.ACTIVE.value,
            awaiting_input=False,
            started_at=now,
            last_activity_at=now,
        )
        self.db.add(session)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            existing = self.get_active_session(data.tenant_id, data.contact_phone)
            if existing is None:
                raise
            logger.info(
                "Active session already exists for %s; reusing %s",
                data.contact_phone,
                existing.id,
            )
            return existing, False
        self.db.refresh(session)
        return session, True

    def update_session(
        self, session_id: UUID, data: BotSessionUpdate
    ) -> Optional[BotSession]:
        session = self.get_session(session_id)
        if session is None:
            return None
        update_data = data.model_dump(exclude_unset=True)
        for key, value in update_data.items():
            setattr(session, key, value)
        self.db.commit()
        self.db.refresh(session)
        return session

    def get_sessions_query(
        self,
        tenant_id: Optional[UUID] = None,
        status: Optional[str] = None,
        flow_id: Optional[UUID] = None,
        search: Optional[str] = None,
    ) -> Query[BotSession]:
        """Query for sessions with filters, most recently active first (for pagination)."""
        filters: Dict[str, Any] = {
            "tenant_id": tenant_id,
            "status": status,
            "flow_id": flow_id,
        }
        if search:
            filters["__search__"] = {
                "columns": ["contact_phone", "contact_name"],
                "q": search,
            }
        query = apply_filters(self.db.query(BotSession), BotSession, filters)
        return query.order_by(BotSession.last_activity_at.desc())

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def end_session(self, session_id: UUID) -> Optional[BotSession]:
        return self.update_session(
            session_id,
            BotSessionUpdate(
                status=SessionStatus.COMPLETED,
                awaiting_input=False,
                input_variable_name=None,
                ended_at=datetime.now(timezone.utc),
            ),
        )

    def pause_session(self, session_id: UUID) -> Optional[BotSession]:
        session = self.get_session(session_id)
        if session is None:
            return None
        if session.status != SessionStatus.ACTIVE:
            raise ValueError(f"Cannot pause a session with status '{session.status}'")
        return self.update_session(
            session_id, BotSessionUpdate(status=SessionStatus.PAUSED)
        )

    def resume_session(self, session_id: UUID) -> Optional[BotSession]:
        session = self.get_session(session_id)
        if session is None:
            return None
        if session.status != SessionStatus.PAUSED:
            raise ValueError(f"Cannot resume a session with status '{session.status}'")
        other = self.get_active_session(session.tenant_id, session.contact_phone)
        if other is not None:
            raise ValueError(
                f"Contact {session.contact_phone} already has active session {other.id}"
            )
        try:
            return self.update_session(
                session_id,
                BotSessionUpdate(
                    status=SessionStatus.ACTIVE,
                    last_activity_at=datetime.now(timezone.utc),
                ),
            )
        except IntegrityError as e:
            self.db.rollback()
            raise ValueError(
                f"Contact {session.contact_phone} already has an active session"
            ) from e

    def update_variables(
        self, session_id: UUID, variables: Dict[str, Any]
    ) -> Optional[BotSession]:
        return self.update_session(session_id, BotSessionUpdate(variables=variables))

    def expire_session(self, session: BotSession) -> BotSession:
        session.status = SessionStatus.EXPIRED.value
        session.awaiting_input = False
        session.ended_at = datetime.now(timezone.utc)
        self.db.commit()
        self.db.refresh(session)
        return session

    def expire_idle_sessions(self, tenant_id: UUID, expire_minutes: int) -> int:
        """Mark the tenant's active sessions idle for `expire_minutes` as expired."""
        if expire_minutes <= 0:
            return 0
        now = datetime.now(timezone.utc)
        cutoff = now - timedelta(minutes=expire_minutes)
        count = (
            self.db.query(BotSession)
            .filter(
                BotSession.tenant_id == tenant_id,
                BotSession.status == SessionStatus.ACTIVE.value,
                BotSession.last_activity_at < cutoff,
            )
            .update(
                {
                    BotSession.status: SessionStatus.EXPIRED.value,
                    BotSession.awaiting_input: False,
                    BotSession.ended_at: now,
                },
                synchronize_session=False,
            )
        )
        self.db.commit()
        if count:
            logger.info("Expired %d idle sessions for tenant %s", count, tenant_id)
        return count
