"""Per-tenant bot engine configuration."""

from __future__ import annotations

from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session

from app.constants.bot_engine import DEFAULT_SESSION_EXPIRE_MINUTES
from app.models.bot_config import BotEngineConfig
from app.schemas.bot_config import BotConfigUpdate


class BotConfigService:
    def __init__(self, db: Session) -> None:
        self.db = db

    def get_config(self, tenant_id: UUID) -> Optional[BotEngineConfig]:
        return (
            self.db.query(BotEngineConfig)
            .filter(BotEngineConfig.tenant_id == tenant_id)
            .first()
        )

    def get_or_create(self, tenant_id: UUID) -> BotEngineConfig:
        """Return the tenant's config, creating a disabled default row if missing."""
        config = self.get_config(tenant_id)
        if config is not None:
            return config
        config = BotEngineConfig(
            tenant_id=tenant_id,
            is_enabled=False,
            session_expire_minutes=DEFAULT_SESSION_EXPIRE_MINUTES,
        )
        self.db.add(config)
        self.db.commit()
        self.db.refresh(config)
        return config

    def update_config(self, tenant_id: UUID, data: BotConfigUpdate) -> BotEngineConfig:
        config = self.get_or_create(tenant_id)
        for key, value in data.model_dump(exclude_unset=True).items():
            setattr(config, key, value)
        self.db.commit()
        self.db.refresh(config)
        return config

    def is_enabled(self, tenant_id: UUID) -> bool:
        config = self.get_config(tenant_id)
        return bool(config and config.is_enabled)
