"""
Node processor: runs a single flow node against the working session state.

Each node type has one handler. A handler returns the responses to send,
the next node (or None to stop) and a patch for the session state; it never
raises for malformed configuration.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, Optional
from uuid import UUID

from pydantic import ValidationError

from app.adapters.base import BaseNotifier
from app.constants.bot_engine import (
    DEFAULT_CONTACT_NAME,
    DEFAULT_DELAY_SECONDS,
    DEFAULT_INPUT_PROMPT,
    DEFAULT_NOTIFICATION_TITLE,
    DEFAULT_NOTIFICATION_TYPE,
    ActionType,
    NodeType,
    ResponseType,
    SessionStatus,
)
from app.core.conditions import evaluate_condition
from app.core.templating import interpolate_variables
from app.core.validation import validate_input
from app.infra.logging_config import get_logger
from app.models.flow import FlowEdge, FlowNode
from app.schemas.bot_engine import BotButton, BotResponse

logger = get_logger("node_processor")

MEDIA_RESPONSE_TYPES = {ResponseType.IMAGE, ResponseType.DOCUMENT}


@dataclass
class SessionState:
    """Mutable working copy of a session during one processing pass."""

    session_id: UUID
    tenant_id: UUID
    variables: dict[str, Any] = field(default_factory=dict)
    status: str = SessionStatus.ACTIVE.value
    awaiting_input: bool = False
    input_variable_name: Optional[str] = None
    ended_at: Optional[datetime] = None

    def apply(self, patch: dict[str, Any]) -> None:
        for key, value in patch.items():
            setattr(self, key, value)


@dataclass
class NodeResult:
    responses: list[BotResponse] = field(default_factory=list)
    next_node: Optional[FlowNode] = None
    patch: dict[str, Any] = field(default_factory=dict)


class FlowGraph:
    """Nodes and edges of one flow indexed by id."""

    def __init__(self, nodes: Iterable[FlowNode], edges: Iterable[FlowEdge]) -> None:
        self.nodes: list[FlowNode] = list(nodes)
        self.nodes_by_id: dict[UUID, FlowNode] = {n.id: n for n in self.nodes}
        self._outgoing: dict[UUID, list[FlowEdge]] = {}
        for edge in edges:
            self._outgoing.setdefault(edge.source_node_id, []).append(edge)
        for out in self._outgoing.values():
            out.sort(key=lambda e: e.priority or 0, reverse=True)

    def outgoing(self, node_id: UUID) -> list[FlowEdge]:
        """Edges leaving `node_id`, highest priority first."""
        return self._outgoing.get(node_id, [])

    def entry_node(self) -> Optional[FlowNode]:
        """Explicit entry point, else the first start node, else the first node."""
        for node in self.nodes:
            if node.is_entry_point:
                return node
        for node in self.nodes:
            if node.node_type == NodeType.START:
                return node
        return self.nodes[0] if self.nodes else None

    def find_next_node(
        self,
        node_id: UUID,
        input_value: Optional[str],
        variables: dict[str, Any],
    ) -> Optional[FlowNode]:
        """First outgoing edge whose condition matches and whose target exists."""
        for edge in self.outgoing(node_id):
            if not evaluate_condition(
                edge.condition_type, edge.condition_value, input_value, variables
            ):
                continue
            target = self.nodes_by_id.get(edge.target_node_id)
            if target is not None:
                return target
        return None


class NodeProcessor:
    """Dispatches a node to the handler for its type."""

    def __init__(
        self,
        notifier: Optional[BaseNotifier] = None,
        contact_phone: Optional[str] = None,
        contact_name: Optional[str] = None,
    ) -> None:
        self.notifier = notifier
        self.contact_phone = contact_phone
        self.contact_name = contact_name
        self._handlers: dict[
            NodeType,
            Callable[[FlowNode, SessionState, FlowGraph, Optional[str]], NodeResult],
        ] = {
            NodeType.START: self._process_passthrough,
            NodeType.MESSAGE: self._process_message,
            NodeType.INPUT: self._process_input,
            NodeType.CONDITION: self._process_passthrough,
            NodeType.ACTION: self._process_action,
            NodeType.DELAY: self._process_delay,
            NodeType.GOTO: self._process_goto,
            NodeType.END: self._process_end,
        }

    @property
    def handled_types(self) -> set[NodeType]:
        return set(self._handlers)

    def process(
        self,
        node: FlowNode,
        state: SessionState,
        graph: FlowGraph,
        input_value: Optional[str],
    ) -> NodeResult:
        try:
            node_type = NodeType(node.node_type)
        except ValueError:
            logger.warning("Unknown node type '%s' on node %s", node.node_type, node.id)
            return NodeResult()
        return self._handlers[node_type](node, state, graph, input_value)

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def _process_passthrough(
        self,
        node: FlowNode,
        state: SessionState,
        graph: FlowGraph,
        input_value: Optional[str],
    ) -> NodeResult:
        """start and condition nodes: no output, only edge resolution."""
        return NodeResult(
            next_node=graph.find_next_node(node.id, input_value, state.variables)
        )

    def _process_message(
        self,
        node: FlowNode,
        state: SessionState,
        graph: FlowGraph,
        input_value: Optional[str],
    ) -> NodeResult:
        config = node.config or {}
        responses: list[BotResponse] = []
        message_text = config.get("message_text")
        if message_text:
            responses.append(
                _build_message_response(
                    interpolate_variables(str(message_text), state.variables), config
                )
            )
        return NodeResult(
            responses=responses,
            next_node=graph.find_next_node(node.id, input_value, state.variables),
        )

    def _process_input(
        self,
        node: FlowNode,
        state: SessionState,
        graph: FlowGraph,
        input_value: Optional[str],
    ) -> NodeResult:
        config = node.config or {}
        variable_name = config.get("variable_name")
        if not variable_name:
            logger.warning("Input node %s has no variable_name; skipping", node.id)
            return NodeResult(
                next_node=graph.find_next_node(node.id, input_value, state.variables)
            )

        if not (state.awaiting_input and state.input_variable_name == variable_name):
            prompt = config.get("prompt_message") or DEFAULT_INPUT_PROMPT
            return NodeResult(
                responses=[_text(interpolate_variables(str(prompt), state.variables))],
                patch={"awaiting_input": True, "input_variable_name": variable_name},
            )

        value = input_value or ""
        check = validate_input(
            value, config.get("validation_type"), config.get("validation_options")
        )
        if not check.valid:
            error_text = config.get("error_message") or check.error
            return NodeResult(
                responses=[_text(interpolate_variables(str(error_text), state.variables))]
            )

        variables = {**state.variables, variable_name: value}
        return NodeResult(
            next_node=graph.find_next_node(node.id, input_value, variables),
            patch={
                "variables": variables,
                "awaiting_input": False,
                "input_variable_name": None,
            },
        )

    def _process_action(
        self,
        node: FlowNode,
        state: SessionState,
        graph: FlowGraph,
        input_value: Optional[str],
    ) -> NodeResult:
        config = node.config or {}
        action_type = config.get("action_type")
        variables = state.variables
        patch: dict[str, Any] = {}

        if action_type == ActionType.SET_VARIABLE:
            var_to_set = config.get("variable_to_set")
            if var_to_set:
                variables = {
                    **state.variables,
                    var_to_set: interpolate_variables(
                        str(config.get("variable_value") or ""), state.variables
                    ),
                }
                patch["variables"] = variables
        elif action_type == ActionType.SEND_NOTIFICATION:
            self._send_notification(config, state)
        elif action_type == ActionType.HTTP_REQUEST:
            logger.info("http_request action on node %s is not implemented", node.id)
        else:
            logger.warning("Unknown action type '%s' on node %s", action_type, node.id)

        return NodeResult(
            next_node=graph.find_next_node(node.id, input_value, variables),
            patch=patch,
        )

    def _process_delay(
        self,
        node: FlowNode,
        state: SessionState,
        graph: FlowGraph,
        input_value: Optional[str],
    ) -> NodeResult:
        config = node.config or {}
        try:
            seconds = float(config.get("delay_seconds") or DEFAULT_DELAY_SECONDS)
        except (TypeError, ValueError):
            seconds = DEFAULT_DELAY_SECONDS
        return NodeResult(
            responses=[
                BotResponse(type=ResponseType.DELAY, delay_ms=int(seconds * 1000))
            ],
            next_node=graph.find_next_node(node.id, input_value, state.variables),
        )

    def _process_goto(
        self,
        node: FlowNode,
        state: SessionState,
        graph: FlowGraph,
        input_value: Optional[str],
    ) -> NodeResult:
        # Switching flows is not supported; the session simply ends here.
        logger.info("goto node %s reached; completing session %s", node.id, state.session_id)
        return NodeResult(
            patch={
                "status": SessionStatus.COMPLETED.value,
                "ended_at": datetime.now(timezone.utc),
            }
        )

    def _process_end(
        self,
        node: FlowNode,
        state: SessionState,
        graph: FlowGraph,
        input_value: Optional[str],
    ) -> NodeResult:
        config = node.config or {}
        responses: list[BotResponse] = []
        end_message = config.get("end_message")
        if end_message:
            responses.append(_text(interpolate_variables(str(end_message), state.variables)))
        return NodeResult(
            responses=responses,
            patch={
                "status": SessionStatus.COMPLETED.value,
                "ended_at": datetime.now(timezone.utc),
            },
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _send_notification(self, config: dict[str, Any], state: SessionState) -> None:
        """Best effort: failures are logged and never interrupt the flow."""
        if self.notifier is None:
            logger.info("No notifier configured; dropping notification")
            return

        title = config.get("notification_title") or DEFAULT_NOTIFICATION_TITLE
        body = interpolate_variables(
            str(config.get("notification_body") or ""), state.variables
        )
        phone = state.variables.get("phone") or self.contact_phone or ""
        name = state.variables.get("name") or self.contact_name or DEFAULT_CONTACT_NAME
        data = {
            "type": config.get("notification_type") or DEFAULT_NOTIFICATION_TYPE,
            "contact_phone": phone,
            "contact_name": name,
            "session_id": str(state.session_id),
        }
        try:
            result = self.notifier.notify(
                state.tenant_id, title, f"{body}\n📱 {name} ({phone})", data
            )
        except Exception:
            logger.exception("Notification dispatch failed for session %s", state.session_id)
            return
        if result.error:
            logger.warning(
                "Notification for session %s not delivered: %s",
                state.session_id,
                result.error,
            )


def _text(content: str) -> BotResponse:
    return BotResponse(type=ResponseType.TEXT, content=content)


def _build_message_response(content: str, config: dict[str, Any]) -> BotResponse:
    """Text response carrying any media/buttons configured on the node."""
    try:
        response_type = ResponseType(config.get("message_type") or ResponseType.TEXT)
    except ValueError:
        response_type = ResponseType.TEXT
    if response_type == ResponseType.DELAY:
        response_type = ResponseType.TEXT

    media_url = config.get("media_url") or None
    if response_type in MEDIA_RESPONSE_TYPES and not media_url:
        response_type = ResponseType.TEXT

    return BotResponse(
        type=response_type,
        content=content,
        media_url=media_url,
        buttons=_parse_buttons(config.get("buttons")),
    )


def _parse_buttons(raw: Any) -> Optional[list[BotButton]]:
    if not isinstance(raw, list) or not raw:
        return None
    buttons: list[BotButton] = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        try:
            buttons.append(BotButton.model_validate(item))
        except ValidationError:
            logger.warning("Skipping malformed button config: %s", item)
    return buttons or None
