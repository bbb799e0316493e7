from uuid import UUID

from fastapi import Depends, HTTPException
from sqlalchemy.orm import Session

from app.adapters.base import BaseNotifier
from app.adapters.notification import HttpNotifier
from app.db import get_db
from app.models.bot_session import BotSession
from app.models.dynamic_menu import DynamicMenuItem
from app.models.flow import Flow, FlowEdge, FlowNode
from app.services.bot_session_service import BotSessionService
from app.services.dynamic_menu_service import DynamicMenuService
from app.services.flow_service import FlowService


def get_notifier() -> BaseNotifier:
    """FastAPI dependency for the notification collaborator."""
    return HttpNotifier()


def get_flow_by_id(
    flow_id: UUID,
    db: Session = Depends(get_db),
) -> Flow:
    """FastAPI dependency to get a flow by ID."""
    flow = FlowService(db).get_flow(flow_id)
    if flow is None:
        raise HTTPException(status_code=404, detail="Flow not found")
    return flow


def get_node_by_id(
    node_id: UUID,
    flow: Flow = Depends(get_flow_by_id),
    db: Session = Depends(get_db),
) -> FlowNode:
    """FastAPI dependency to get a node of the flow in the path."""
    node = FlowService(db).get_node(node_id)
    if node is None or node.flow_id != flow.id:
        raise HTTPException(status_code=404, detail="Node not found")
    return node


def get_edge_by_id(
    edge_id: UUID,
    flow: Flow = Depends(get_flow_by_id),
    db: Session = Depends(get_db),
) -> FlowEdge:
    """FastAPI dependency to get an edge of the flow in the path."""
    edge = FlowService(db).get_edge(edge_id)
    if edge is None or edge.flow_id != flow.id:
        raise HTTPException(status_code=404, detail="Edge not found")
    return edge


def get_bot_session_by_id(
    session_id: UUID,
    db: Session = Depends(get_db),
) -> BotSession:
    """FastAPI dependency to get a bot session by ID."""
    session = BotSessionService(db).get_session(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return session


def get_menu_item_by_id(
    item_id: UUID,
    db: Session = Depends(get_db),
) -> DynamicMenuItem:
    """FastAPI dependency to get a menu item by ID."""
    item = DynamicMenuService(db).get_menu_item(item_id)
    if item is None:
        raise HTTPException(status_code=404, detail="Menu item not found")
    return item
