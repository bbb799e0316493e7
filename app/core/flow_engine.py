"""
Flow engine: turns one inbound message into bot responses.

Resolves (or opens) the contact's active session, walks the flow graph from
the session's current node until it needs input, completes, runs out of
edges, or hits the iteration cap, then persists the session and logs
the traffic. `handle` never raises.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional, Sequence
from uuid import UUID

from sqlalchemy.orm import Session

from app.adapters.base import BaseNotifier
from app.config import Settings, get_settings
from app.constants.bot_engine import (
    EngineError,
    MessageDirection,
    NodeType,
    ResponseType,
    SessionStatus,
    TriggerType,
)
from app.core.node_processor import FlowGraph, NodeProcessor, SessionState
from app.core.phone import normalize_phone
from app.infra.logging_config import get_logger
from app.models.bot_config import BotEngineConfig
from app.models.bot_session import BotSession
from app.models.flow import Flow, FlowNode
from app.schemas.bot_engine import BotEngineResult, BotResponse, InboundBotMessage
from app.schemas.bot_session import BotSessionCreate, BotSessionUpdate, MessageLogCreate
from app.services.bot_config_service import BotConfigService
from app.services.bot_session_service import BotSessionService, is_session_idle
from app.services.flow_service import FlowService
from app.services.message_log_service import MessageLogService

logger = get_logger("flow_engine")


def select_flow(flows: Sequence[Flow], message_text: str) -> Optional[Flow]:
    """
    Pick the flow for a new session from active flows ordered by priority:
    the first keyword flow whose keyword appears in the message, else the
    default flow, else the first flow.
    """
    if not flows:
        return None
    lowered = (message_text or "").strip().lower()
    for flow in flows:
        if flow.trigger_type != TriggerType.KEYWORD:
            continue
        keywords = [k for k in (flow.trigger_keywords or []) if k]
        if any(str(k).lower() in lowered for k in keywords):
            return flow
    for flow in flows:
        if flow.is_default:
            return flow
    return flows[0]


def _is_awaiting_node(node: FlowNode, state: SessionState) -> bool:
    return (
        node.node_type == NodeType.INPUT
        and (node.config or {}).get("variable_name") == state.input_variable_name
    )


class FlowEngine:
    def __init__(
        self,
        db: Session,
        notifier: Optional[BaseNotifier] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self.db = db
        self.notifier = notifier
        self.settings = settings or get_settings()
        self.configs = BotConfigService(db)
        self.flows = FlowService(db)
        self.sessions = BotSessionService(db)
        self.message_log = MessageLogService(db)

    def handle_message(self, message: InboundBotMessage) -> BotEngineResult:
        return self.handle(
            tenant_id=message.tenant_id,
            contact_phone=message.contact_phone,
            contact_name=message.contact_name,
            message_text=message.message_text,
            message_type=message.message_type,
            metadata=message.metadata,
        )

    def handle(
        self,
        tenant_id: UUID,
        contact_phone: str,
        contact_name: Optional[str] = None,
        message_text: str = "",
        message_type: str = "text",
        metadata: Optional[dict[str, Any]] = None,
    ) -> BotEngineResult:
        try:
            return self._handle(
                tenant_id,
                contact_phone,
                contact_name,
                message_text or "",
                message_type or "text",
                metadata,
            )
        except Exception as e:
            self.db.rollback()
            logger.exception("Bot engine failed for tenant %s", tenant_id)
            return BotEngineResult(success=False, error=str(e))

    def _handle(
        self,
        tenant_id: UUID,
        contact_phone: str,
        contact_name: Optional[str],
        message_text: str,
        message_type: str,
        metadata: Optional[dict[str, Any]],
    ) -> BotEngineResult:
        config = self.configs.get_config(tenant_id)
        if config is None or not config.is_enabled:
            return BotEngineResult(success=False, error=EngineError.BOT_DISABLED.value)

        phone = normalize_phone(
            contact_phone,
            config.default_country_code or self.settings.default_country_code,
        )
        logger.info("Processing message from %s for tenant %s", phone, tenant_id)

        session, flow = self._resume_session(config, phone)
        responses: list[BotResponse] = []

        if session is None:
            flow = select_flow(
                self.flows.get_flows_for_tenant(tenant_id, active_only=True),
                message_text,
            )
            if flow is None:
                return BotEngineResult(success=False, error=EngineError.NO_FLOWS.value)
            session, created = self.sessions.create_session(
                BotSessionCreate(
                    tenant_id=tenant_id,
                    contact_phone=phone,
                    contact_name=contact_name,
                    flow_id=flow.id,
                    variables={"phone": phone, "name": contact_name or ""},
                )
            )
            if created:
                logger.info("Created session %s on flow '%s'", session.id, flow.name)
                if config.welcome_message:
                    responses.append(
                        BotResponse(type=ResponseType.TEXT, content=config.welcome_message)
                    )
            else:
                flow = self.flows.get_flow(session.flow_id) if session.flow_id else None
                if flow is None:
                    return BotEngineResult(success=False, error=EngineError.NO_FLOWS.value)

        graph = FlowGraph(self.flows.get_nodes(flow.id), self.flows.get_edges(flow.id))
        if not graph.nodes:
            return BotEngineResult(
                success=False, session_id=session.id, error=EngineError.NO_NODES.value
            )

        current = None
        if session.current_node_id is not None:
            current = graph.nodes_by_id.get(session.current_node_id)
        if current is None:
            current = graph.entry_node()

        self.message_log.append(
            MessageLogCreate(
                tenant_id=tenant_id,
                session_id=session.id,
                direction=MessageDirection.INBOUND,
                message_content=message_text,
                message_type=message_type,
                node_id=current.id,
                metadata=metadata or {},
            )
        )

        state = SessionState(
            session_id=session.id,
            tenant_id=tenant_id,
            variables=dict(session.variables or {}),
            status=session.status,
            awaiting_input=bool(session.awaiting_input),
            input_variable_name=session.input_variable_name,
            ended_at=session.ended_at,
        )
        if state.awaiting_input and not _is_awaiting_node(current, state):
            # The node that prompted is gone or changed; forget the pending input
            state.awaiting_input = False
            state.input_variable_name = None
        processor = NodeProcessor(
            notifier=self.notifier, contact_phone=phone, contact_name=contact_name
        )

        max_iterations = self.settings.bot_engine_max_iterations
        iterations = 0
        while iterations < max_iterations:
            iterations += 1
            result = processor.process(current, state, graph, message_text)
            responses.extend(result.responses)
            state.apply(result.patch)

            if result.patch.get("awaiting_input") or state.status != SessionStatus.ACTIVE:
                break
            if result.next_node is None:
                break
            current = result.next_node
        else:
            logger.warning(
                "Session %s hit the %d node iteration cap", session.id, max_iterations
            )

        if (
            not responses
            and config.fallback_message
            and state.status == SessionStatus.ACTIVE
            and not state.awaiting_input
        ):
            responses.append(
                BotResponse(type=ResponseType.TEXT, content=config.fallback_message)
            )

        self.sessions.update_session(
            session.id,
            BotSessionUpdate(
                current_node_id=current.id,
                variables=state.variables,
                status=SessionStatus(state.status),
                awaiting_input=state.awaiting_input,
                input_variable_name=state.input_variable_name,
                ended_at=state.ended_at,
                last_activity_at=datetime.now(timezone.utc),
            ),
        )

        self.message_log.append_many(
            MessageLogCreate(
                tenant_id=tenant_id,
                session_id=session.id,
                direction=MessageDirection.OUTBOUND,
                message_content=response.content,
                message_type=response.type.value,
                metadata=response.model_dump(
                    mode="json", exclude_none=True, exclude={"type", "content"}
                ),
            )
            for response in responses
            if response.type != ResponseType.DELAY
        )

        logger.info(
            "Session %s: %d nodes, %d responses, status %s",
            session.id,
            iterations,
            len(responses),
            state.status,
        )
        return BotEngineResult(
            success=True,
            session_id=session.id,
            responses=responses,
            session_status=SessionStatus(state.status),
        )

    def _resume_session(
        self, config: BotEngineConfig, phone: str
    ) -> tuple[Optional[BotSession], Optional[Flow]]:
        """The contact's usable active session and its flow, expiring stale ones."""
        session = self.sessions.get_active_session(config.tenant_id, phone)
        if session is None:
            return None, None

        if is_session_idle(session, config.session_expire_minutes):
            logger.info("Session %s idle past expiry; starting over", session.id)
            self.sessions.expire_session(session)
            return None, None

        flow = self.flows.get_flow(session.flow_id) if session.flow_id else None
        if flow is None:
            logger.warning("Session %s has no flow; closing it", session.id)
            self.sessions.update_session(
                session.id,
                BotSessionUpdate(
                    status=SessionStatus.ERROR,
                    error_message="flow not found",
                    ended_at=datetime.now(timezone.utc),
                ),
            )
            return None, None
        return session, flow
