from app.services.bot_config_service import BotConfigService
from app.services.bot_session_service import BotSessionService
from app.services.dynamic_menu_service import DynamicMenuService
from app.services.flow_service import FlowService
from app.services.message_log_service import MessageLogService

__all__ = [
    "BotConfigService",
    "BotSessionService",
    "DynamicMenuService",
    "FlowService",
    "MessageLogService",
]
