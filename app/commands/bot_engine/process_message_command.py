"""Command to run the bot engine for one inbound message."""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.orm import Session

from app.adapters.base import BaseNotifier
from app.core.flow_engine import FlowEngine
from app.schemas.bot_engine import BotEngineResult, InboundBotMessage


class ProcessMessageCommand:
    """
    Hands an inbound message to the flow engine and returns its result.
    Delivering the responses is the caller's job.
    """

    def __init__(self, db: Session, notifier: Optional[BaseNotifier] = None) -> None:
        self.db = db
        self.engine = FlowEngine(db, notifier=notifier)
        self.logger = logging.getLogger(__name__)

    def execute(self, message: InboundBotMessage) -> BotEngineResult:
        result = self.engine.handle_message(message)
        if not result.success:
            self.logger.info(
                "Bot engine returned no reply for tenant %s: %s",
                message.tenant_id,
                result.error,
            )
        return result
