"""Pydantic schemas for bot sessions and the message log."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from app.constants.bot_engine import MessageDirection, SessionStatus


class BotSessionCreate(BaseModel):
    """Schema for opening a session for a contact."""

    tenant_id: UUID
    contact_phone: str = Field(..., min_length=1, max_length=32)
    contact_name: Optional[str] = None
    flow_id: Optional[UUID] = None
    current_node_id: Optional[UUID] = None
    variables: dict[str, Any] = Field(default_factory=dict)


class BotSessionUpdate(BaseModel):
    """Partial state patch written by the engine and lifecycle endpoints."""

    flow_id: Optional[UUID] = None
    current_node_id: Optional[UUID] = None
    variables: Optional[dict[str, Any]] = None
    status: Optional[SessionStatus] = None
    awaiting_input: Optional[bool] = None
    input_variable_name: Optional[str] = None
    error_message: Optional[str] = None
    last_activity_at: Optional[datetime] = None
    ended_at: Optional[datetime] = None


class BotSessionRead(BaseModel):
    id: UUID
    tenant_id: UUID
    contact_phone: str
    contact_name: Optional[str] = None
    flow_id: Optional[UUID] = None
    current_node_id: Optional[UUID] = None
    variables: dict[str, Any] = Field(default_factory=dict)
    status: SessionStatus
    awaiting_input: bool = False
    input_variable_name: Optional[str] = None
    error_message: Optional[str] = None
    started_at: datetime
    last_activity_at: datetime
    ended_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class SessionVariablesUpdate(BaseModel):
    """Replaces the session's variable bag."""

    variables: dict[str, Any]


class ExpireSessionsResult(BaseModel):
    tenant_id: UUID
    expired: int


# -----------------------------------------------------------------------------
# Message log
# -----------------------------------------------------------------------------


class MessageLogCreate(BaseModel):
    tenant_id: UUID
    session_id: Optional[UUID] = None
    direction: MessageDirection
    message_content: Optional[str] = None
    message_type: str = "text"
    node_id: Optional[UUID] = None
    metadata: Optional[dict[str, Any]] = None


class MessageLogRead(BaseModel):
    id: UUID
    tenant_id: UUID
    session_id: Optional[UUID] = None
    direction: MessageDirection
    message_content: Optional[str] = None
    message_type: str
    node_id: Optional[UUID] = None
    metadata: Optional[dict[str, Any]] = Field(
        None, validation_alias="message_metadata"
    )
    processed_at: datetime

    model_config = {"from_attributes": True, "populate_by_name": True}
