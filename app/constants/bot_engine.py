"""Enumerations and defaults for the bot engine."""

from enum import StrEnum


class NodeType(StrEnum):
    """Kinds of steps a flow can contain."""

    START = "start"
    MESSAGE = "message"
    INPUT = "input"
    CONDITION = "condition"
    ACTION = "action"
    DELAY = "delay"
    GOTO = "goto"
    END = "end"


class ConditionType(StrEnum):
    """How an edge decides whether it may be taken."""

    ALWAYS = "always"
    EQUALS = "equals"
    CONTAINS = "contains"
    REGEX = "regex"
    VARIABLE = "variable"


class ActionType(StrEnum):
    SET_VARIABLE = "set_variable"
    SEND_NOTIFICATION = "send_notification"
    HTTP_REQUEST = "http_request"


class TriggerType(StrEnum):
    """When a flow is selected for a new session."""

    FIRST_MESSAGE = "first_message"
    KEYWORD = "keyword"
    MANUAL = "manual"
    DEFAULT = "default"


class SessionStatus(StrEnum):
    ACTIVE = "active"
    PAUSED = "paused"
    COMPLETED = "completed"
    EXPIRED = "expired"
    ERROR = "error"


class ResponseType(StrEnum):
    """Outbound response kinds handed to the transport layer."""

    TEXT = "text"
    IMAGE = "image"
    DOCUMENT = "document"
    BUTTONS = "buttons"
    DELAY = "delay"


class MessageDirection(StrEnum):
    INBOUND = "inbound"
    OUTBOUND = "outbound"


class MenuType(StrEnum):
    """What selecting a dynamic menu item does."""

    SUBMENU = "submenu"
    FLOW = "flow"
    COMMAND = "command"
    LINK = "link"
    MESSAGE = "message"


class MenuActionType(StrEnum):
    SHOW_SUBMENU = "show_submenu"
    EXECUTE_FLOW = "execute_flow"
    EXECUTE_COMMAND = "execute_command"
    SHOW_LINK = "show_link"
    SHOW_MESSAGE = "show_message"
    BACK = "back"
    HOME = "home"
    INVALID = "invalid"


class ValidationType(StrEnum):
    """Optional validation applied by input nodes."""

    TEXT = "text"
    NUMBER = "number"
    EMAIL = "email"
    PHONE = "phone"
    DATE = "date"
    OPTION = "option"


class EngineError(StrEnum):
    """Error codes returned by the engine instead of raising."""

    BOT_DISABLED = "bot_disabled"
    NO_FLOWS = "no_flows"
    NO_NODES = "no_nodes"


DEFAULT_INPUT_PROMPT = "Por favor, digite sua resposta:"
DEFAULT_NOTIFICATION_TITLE = "Nova Notificação"
DEFAULT_NOTIFICATION_TYPE = "bot_action"
DEFAULT_CONTACT_NAME = "Cliente"
DEFAULT_DELAY_SECONDS = 1
DEFAULT_SESSION_EXPIRE_MINUTES = 60

CLONE_NAME_SUFFIX = " (cópia)"

MENU_BACK_TOKENS = frozenset({"0"})
MENU_HOME_TOKENS = frozenset({"#", "00", "##"})
DEFAULT_MENU_SECTION = "Opções"
DEFAULT_BACK_BUTTON_TEXT = "⬅️ Voltar"
DEFAULT_LIST_TITLE = "Menu"
DEFAULT_LIST_BUTTON_TEXT = "Ver Opções"
MENU_NOT_CONFIGURED = "Menu não configurado."
MENU_INVALID_OPTION = "❌ Opção inválida. Digite o *número* da opção desejada."
