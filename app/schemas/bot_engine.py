"""Pydantic schemas for the bot engine's inbound call and its result."""

from __future__ import annotations

from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from app.constants.bot_engine import ResponseType, SessionStatus


class InboundBotMessage(BaseModel):
    """Message handed to the engine by the messaging webhook."""

    tenant_id: UUID
    contact_phone: str = Field(..., min_length=1)
    contact_name: Optional[str] = None
    message_text: str = ""
    message_type: str = "text"
    metadata: Optional[dict[str, Any]] = None


class BotButton(BaseModel):
    id: str
    text: str
    value: Optional[str] = None


class BotResponse(BaseModel):
    """
    One outbound response. Which fields are set depends on `type`:
    text -> content; image/document -> media_url (+ content caption);
    buttons -> content + buttons; delay -> delay_ms.
    """

    type: ResponseType
    content: Optional[str] = None
    media_url: Optional[str] = None
    buttons: Optional[list[BotButton]] = None
    delay_ms: Optional[int] = None


class BotEngineResult(BaseModel):
    success: bool
    session_id: Optional[UUID] = None
    responses: list[BotResponse] = Field(default_factory=list)
    session_status: Optional[SessionStatus] = None
    error: Optional[str] = None
