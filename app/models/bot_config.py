"""BotEngineConfig model: per-tenant switches for the bot engine."""

from __future__ import annotations

import uuid

from sqlalchemy import Boolean, Column, Integer, String, Text, Uuid

from app.constants.bot_engine import DEFAULT_SESSION_EXPIRE_MINUTES
from app.db import Base
from app.models.mixins import TimestampMixin


class BotEngineConfig(Base, TimestampMixin):
    """One row per tenant. A missing row means the engine is disabled."""

    __tablename__ = "bot_engine_config"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    tenant_id = Column(Uuid, nullable=False, unique=True, index=True)
    is_enabled = Column(Boolean, nullable=False, default=False)
    default_country_code = Column(String(4), nullable=True)
    fallback_message = Column(Text, nullable=True)
    welcome_message = Column(Text, nullable=True)
    # 0 or NULL disables idle expiry
    session_expire_minutes = Column(
        Integer, nullable=True, default=DEFAULT_SESSION_EXPIRE_MINUTES
    )
