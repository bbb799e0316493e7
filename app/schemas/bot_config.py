"""Pydantic schemas for per-tenant bot engine configuration."""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


class BotConfigUpdate(BaseModel):
    """Schema for updating tenant config. All fields optional."""

    is_enabled: Optional[bool] = None
    default_country_code: Optional[str] = Field(None, pattern=r"^\d{1,4}$")
    fallback_message: Optional[str] = None
    welcome_message: Optional[str] = None
    session_expire_minutes: Optional[int] = Field(None, ge=0)


class BotConfigRead(BaseModel):
    id: UUID
    tenant_id: UUID
    is_enabled: bool
    default_country_code: Optional[str] = None
    fallback_message: Optional[str] = None
    welcome_message: Optional[str] = None
    session_expire_minutes: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
