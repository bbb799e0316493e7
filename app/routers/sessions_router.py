"""Sessions API: list, get, message log and lifecycle transitions."""

from __future__ import annotations

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi_pagination import Page, Params
from fastapi_pagination.ext.sqlalchemy import paginate
from sqlalchemy.orm import Session

from app.constants.bot_engine import SessionStatus
from app.db import get_db
from app.models.bot_session import BotSession
from app.routers.utils.dependencies import get_bot_session_by_id
from app.schemas.bot_session import (
    BotSessionRead,
    ExpireSessionsResult,
    MessageLogRead,
    SessionVariablesUpdate,
)
from app.services.bot_session_service import BotSessionService
from app.services.message_log_service import MessageLogService

sessions_router = APIRouter(prefix="/sessions", tags=["Session"])


@sessions_router.get("", response_model=Page[BotSessionRead])
def list_sessions(
    params: Params = Depends(),
    tenant_id: Optional[UUID] = Query(None),
    status: Optional[SessionStatus] = Query(None),
    flow_id: Optional[UUID] = Query(None),
    search: Optional[str] = Query(None),
    db: Session = Depends(get_db),
) -> Page[BotSessionRead]:
    """List sessions, most recently active first."""
    query = BotSessionService(db).get_sessions_query(
        tenant_id=tenant_id,
        status=status.value if status else None,
        flow_id=flow_id,
        search=search,
    )
    return paginate(query, params=params)


@sessions_router.post("/expire", response_model=ExpireSessionsResult)
def expire_sessions(
    tenant_id: UUID = Query(...),
    expire_minutes: int = Query(..., ge=1),
    db: Session = Depends(get_db),
) -> ExpireSessionsResult:
    """Expire the tenant's active sessions idle for longer than `expire_minutes`."""
    count = BotSessionService(db).expire_idle_sessions(tenant_id, expire_minutes)
    return ExpireSessionsResult(tenant_id=tenant_id, expired=count)


@sessions_router.get("/{session_id}", response_model=BotSessionRead)
def get_session(
    session: BotSession = Depends(get_bot_session_by_id),
) -> BotSessionRead:
    """Get a session by ID."""
    return BotSessionRead.model_validate(session)


@sessions_router.get("/{session_id}/messages", response_model=Page[MessageLogRead])
def list_session_messages(
    params: Params = Depends(),
    session: BotSession = Depends(get_bot_session_by_id),
    db: Session = Depends(get_db),
) -> Page[MessageLogRead]:
    """List the session's message log with pagination."""
    query = MessageLogService(db).get_messages_query(session.id)
    return paginate(query, params=params)


@sessions_router.post("/{session_id}/end", response_model=BotSessionRead)
def end_session(
    session: BotSession = Depends(get_bot_session_by_id),
    db: Session = Depends(get_db),
) -> BotSessionRead:
    """Mark the session completed."""
    return BotSessionService(db).end_session(session.id)


@sessions_router.post("/{session_id}/pause", response_model=BotSessionRead)
def pause_session(
    session: BotSession = Depends(get_bot_session_by_id),
    db: Session = Depends(get_db),
) -> BotSessionRead:
    """Pause an active session (e.g. while a human takes over)."""
    try:
        return BotSessionService(db).pause_session(session.id)
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))


@sessions_router.post("/{session_id}/resume", response_model=BotSessionRead)
def resume_session(
    session: BotSession = Depends(get_bot_session_by_id),
    db: Session = Depends(get_db),
) -> BotSessionRead:
    """Resume a paused session."""
    try:
        return BotSessionService(db).resume_session(session.id)
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))


@sessions_router.put("/{session_id}/variables", response_model=BotSessionRead)
def update_session_variables(
    data: SessionVariablesUpdate,
    session: BotSession = Depends(get_bot_session_by_id),
    db: Session = Depends(get_db),
) -> BotSessionRead:
    """Replace the session's variables."""
    return BotSessionService(db).update_variables(session.id, data.variables)
