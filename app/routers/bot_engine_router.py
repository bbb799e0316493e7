"""Bot engine API: process inbound messages and manage tenant config."""

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.adapters.base import BaseNotifier
from app.commands.bot_engine.process_message_command import ProcessMessageCommand
from app.db import get_db
from app.routers.utils.dependencies import get_notifier
from app.schemas.bot_config import BotConfigRead, BotConfigUpdate
from app.schemas.bot_engine import BotEngineResult, InboundBotMessage
from app.services.bot_config_service import BotConfigService

router = APIRouter(
    prefix="/bot-engine",
    tags=["bot-engine"],
    responses={404: {"description": "Not found"}},
)


@router.post("/process", response_model=BotEngineResult, response_model_exclude_none=True)
def process_message(
    message: InboundBotMessage,
    notifier: BaseNotifier = Depends(get_notifier),
    db: Session = Depends(get_db),
) -> BotEngineResult:
    """
    Run the bot for one inbound message. Always 200: configuration problems
    and failures are reported through `success` and `error`.
    """
    return ProcessMessageCommand(db, notifier=notifier).execute(message)


@router.get("/config/{tenant_id}", response_model=BotConfigRead)
def get_bot_config(
    tenant_id: UUID,
    db: Session = Depends(get_db),
) -> BotConfigRead:
    """Get the tenant's bot config, creating the default (disabled) one if missing."""
    return BotConfigService(db).get_or_create(tenant_id)


@router.put("/config/{tenant_id}", response_model=BotConfigRead)
def update_bot_config(
    tenant_id: UUID,
    data: BotConfigUpdate,
    db: Session = Depends(get_db),
) -> BotConfigRead:
    """Update the tenant's bot config."""
    return BotConfigService(db).update_config(tenant_id, data)
