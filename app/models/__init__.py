from app.models.bot_config import BotEngineConfig
from app.models.bot_session import BotSession
from app.models.dynamic_menu import DynamicMenuItem
from app.models.flow import Flow, FlowEdge, FlowNode
from app.models.message_log import BotMessageLog

__all__ = [
    "BotEngineConfig",
    "BotMessageLog",
    "BotSession",
    "DynamicMenuItem",
    "Flow",
    "FlowEdge",
    "FlowNode",
]
