"""Flow store: flows, their nodes and edges, cloning and tenant reset."""

from __future__ import annotations

import uuid
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import or_
from sqlalchemy.orm import Query, Session

from app.constants.bot_engine import CLONE_NAME_SUFFIX
from app.infra.logging_config import get_logger
from app.models.bot_session import BotSession
from app.models.flow import Flow, FlowEdge, FlowNode
from app.schemas.flow import (
    FlowCreate,
    FlowEdgeCreate,
    FlowEdgeUpdate,
    FlowNodeCreate,
    FlowNodeUpdate,
    FlowUpdate,
)
from app.utils.db.filtering import apply_filters

logger = get_logger("flow_service")


class FlowService:
    def __init__(self, db: Session) -> None:
        self.db = db

    # ------------------------------------------------------------------
    # Flows
    # ------------------------------------------------------------------

    def get_flow(self, flow_id: UUID) -> Optional[Flow]:
        return self.db.query(Flow).filter(Flow.id == flow_id).first()

    def get_flows_query(
        self,
        tenant_id: Optional[UUID] = None,
        is_active: Optional[bool] = None,
        is_template: Optional[bool] = None,
        search: Optional[str] = None,
    ) -> Query[Flow]:
        """Query for flows with filters, highest priority first (for pagination)."""
        filters: Dict[str, Any] = {
            "tenant_id": tenant_id,
            "is_active": is_active,
            "is_template": is_template,
        }
        if search:
            filters["__search__"] = {"columns": ["name", "description"], "q": search}
        query = apply_filters(self.db.query(Flow), Flow, filters)
        return query.order_by(Flow.priority.desc(), Flow.created_at.asc())

    def get_flows_for_tenant(
        self, tenant_id: UUID, active_only: bool = True
    ) -> List[Flow]:
        """The tenant's own flows (templates excluded), highest priority first."""
        query = self.db.query(Flow).filter(
            Flow.tenant_id == tenant_id, Flow.is_template.is_(False)
        )
        if active_only:
            query = query.filter(Flow.is_active.is_(True))
        return query.order_by(Flow.priority.desc(), Flow.created_at.asc()).all()

    def get_templates(self) -> List[Flow]:
        return (
            self.db.query(Flow)
            .filter(Flow.is_template.is_(True))
            .order_by(Flow.name.asc())
            .all()
        )

    def create_flow(self, data: FlowCreate) -> Flow:
        flow = Flow(**data.model_dump())
        if flow.is_default:
            self._clear_default(data.tenant_id)
        self.db.add(flow)
        self.db.commit()
        self.db.refresh(flow)
        return flow

    def update_flow(self, flow_id: UUID, data: FlowUpdate) -> Optional[Flow]:
        flow = self.get_flow(flow_id)
        if flow is None:
            return None
        update_data = data.model_dump(exclude_unset=True)
        if update_data.get("is_default"):
            self._clear_default(flow.tenant_id, exclude_id=flow.id)
        for key, value in update_data.items():
            setattr(flow, key, value)
        self.db.commit()
        self.db.refresh(flow)
        return flow

    def delete_flow(self, flow_id: UUID) -> bool:
        """Delete a flow with its nodes, edges and sessions."""
        flow = self.get_flow(flow_id)
        if flow is None:
            return False
        self.db.query(BotSession).filter(BotSession.flow_id == flow_id).delete(
            synchronize_session=False
        )
        # nodes and edges go through the relationship cascade
        self.db.delete(flow)
        self.db.commit()
        return True

    def set_default_flow(self, flow_id: UUID) -> Optional[Flow]:
        """Make `flow_id` the tenant's only default flow."""
        flow = self.get_flow(flow_id)
        if flow is None:
            return None
        self._clear_default(flow.tenant_id, exclude_id=flow.id)
        flow.is_default = True
        self.db.commit()
        self.db.refresh(flow)
        return flow

    def _clear_default(self, tenant_id: UUID, exclude_id: Optional[UUID] = None) -> None:
        query = self.db.query(Flow).filter(
            Flow.tenant_id == tenant_id, Flow.is_default.is_(True)
        )
        if exclude_id is not None:
            query = query.filter(Flow.id != exclude_id)
        query.update({Flow.is_default: False}, synchronize_session="fetch")

    def clone_flow(
        self, flow_id: UUID, tenant_id: Optional[UUID] = None
    ) -> Optional[Flow]:
        """
        Copy a flow (or template) with its nodes and edges into `tenant_id`.

        Nodes get fresh ids; edges are rewired through the old->new node id
        map and dropped when either endpoint is not part of the copy. The
        copy starts inactive and non-default.
        """
        source = self.get_flow(flow_id)
        if source is None:
            return None
        target_tenant = tenant_id or source.tenant_id

        clone = Flow(
            id=uuid.uuid4(),
            tenant_id=target_tenant,
            name=source.name if source.is_template else f"{source.name}{CLONE_NAME_SUFFIX}",
            description=source.description,
            category=source.category,
            trigger_type=source.trigger_type,
            trigger_keywords=list(source.trigger_keywords or []),
            is_active=False,
            is_default=False,
            is_template=False,
            priority=source.priority,
            cloned_from_template_id=source.id if source.is_template else None,
        )
        self.db.add(clone)

        node_ids: Dict[UUID, UUID] = {}
        for node in self.get_nodes(source.id):
            new_id = uuid.uuid4()
            node_ids[node.id] = new_id
            self.db.add(
                FlowNode(
                    id=new_id,
                    flow_id=clone.id,
                    tenant_id=target_tenant,
                    node_type=node.node_type,
                    name=node.name,
                    config=dict(node.config or {}),
                    position_x=node.position_x,
                    position_y=node.position_y,
                    is_entry_point=node.is_entry_point,
                )
            )

        copied_edges = 0
        for edge in self.get_edges(source.id):
            source_id = node_ids.get(edge.source_node_id)
            target_id = node_ids.get(edge.target_node_id)
            if source_id is None or target_id is None:
                continue
            self.db.add(
                FlowEdge(
                    id=uuid.uuid4(),
                    flow_id=clone.id,
                    tenant_id=target_tenant,
                    source_node_id=source_id,
                    target_node_id=target_id,
                    condition_type=edge.condition_type,
                    condition_value=edge.condition_value,
                    label=edge.label,
                    priority=edge.priority,
                )
            )
            copied_edges += 1

        self.db.commit()
        self.db.refresh(clone)
        logger.info(
            "Cloned flow %s into %s (%d nodes, %d edges)",
            source.id,
            clone.id,
            len(node_ids),
            copied_edges,
        )
        return clone

    def reset_flows(self, tenant_id: UUID) -> int:
        """Delete every session, edge, node and flow of the tenant. Returns flows removed."""
        self.db.query(BotSession).filter(BotSession.tenant_id == tenant_id).delete(
            synchronize_session=False
        )
        self.db.query(FlowEdge).filter(FlowEdge.tenant_id == tenant_id).delete(
            synchronize_session=False
        )
        self.db.query(FlowNode).filter(FlowNode.tenant_id == tenant_id).delete(
            synchronize_session=False
        )
        count = (
            self.db.query(Flow)
            .filter(Flow.tenant_id == tenant_id)
            .delete(synchronize_session=False)
        )
        self.db.commit()
        logger.info("Reset %d flows for tenant %s", count, tenant_id)
        return count

    # ------------------------------------------------------------------
    # Nodes
    # ------------------------------------------------------------------

    def get_node(self, node_id: UUID) -> Optional[FlowNode]:
        return self.db.query(FlowNode).filter(FlowNode.id == node_id).first()

    def get_nodes(self, flow_id: UUID) -> List[FlowNode]:
        """Nodes in creation order."""
        return (
            self.db.query(FlowNode)
            .filter(FlowNode.flow_id == flow_id)
            .order_by(FlowNode.created_at.asc(), FlowNode.id.asc())
            .all()
        )

    def create_node(self, flow: Flow, data: FlowNodeCreate) -> FlowNode:
        node = FlowNode(flow_id=flow.id, tenant_id=flow.tenant_id, **data.model_dump())
        if node.is_entry_point:
            self._clear_entry_point(flow.id)
        self.db.add(node)
        self.db.commit()
        self.db.refresh(node)
        return node

    def update_node(self, node_id: UUID, data: FlowNodeUpdate) -> Optional[FlowNode]:
        node = self.get_node(node_id)
        if node is None:
            return None
        update_data = data.model_dump(exclude_unset=True)
        if update_data.get("is_entry_point"):
            self._clear_entry_point(node.flow_id, exclude_id=node.id)
        for key, value in update_data.items():
            setattr(node, key, value)
        self.db.commit()
        self.db.refresh(node)
        return node

    def delete_node(self, node_id: UUID) -> bool:
        """Delete a node and every edge touching it."""
        node = self.get_node(node_id)
        if node is None:
            return False
        self.db.query(FlowEdge).filter(
            or_(FlowEdge.source_node_id == node_id, FlowEdge.target_node_id == node_id)
        ).delete(synchronize_session=False)
        self.db.query(BotSession).filter(BotSession.current_node_id == node_id).update(
            {BotSession.current_node_id: None}, synchronize_session=False
        )
        self.db.delete(node)
        self.db.commit()
        return True

    def _clear_entry_point(self, flow_id: UUID, exclude_id: Optional[UUID] = None) -> None:
        query = self.db.query(FlowNode).filter(
            FlowNode.flow_id == flow_id, FlowNode.is_entry_point.is_(True)
        )
        if exclude_id is not None:
            query = query.filter(FlowNode.id != exclude_id)
        query.update({FlowNode.is_entry_point: False}, synchronize_session="fetch")

    # ------------------------------------------------------------------
    # Edges
    # ------------------------------------------------------------------

    def get_edge(self, edge_id: UUID) -> Optional[FlowEdge]:
        return self.db.query(FlowEdge).filter(FlowEdge.id == edge_id).first()

    def get_edges(self, flow_id: UUID) -> List[FlowEdge]:
        return (
            self.db.query(FlowEdge)
            .filter(FlowEdge.flow_id == flow_id)
            .order_by(FlowEdge.priority.desc(), FlowEdge.created_at.asc())
            .all()
        )

    def _ensure_nodes_in_flow(self, flow_id: UUID, *node_ids: UUID) -> None:
        found = {
            row.id
            for row in self.db.query(FlowNode.id).filter(
                FlowNode.flow_id == flow_id, FlowNode.id.in_(node_ids)
            )
        }
        missing = [str(n) for n in node_ids if n not in found]
        if missing:
            raise ValueError(
                f"Edge endpoints must be nodes of flow {flow_id}: {', '.join(missing)}"
            )

    def create_edge(self, flow: Flow, data: FlowEdgeCreate) -> FlowEdge:
        self._ensure_nodes_in_flow(flow.id, data.source_node_id, data.target_node_id)
        edge = FlowEdge(flow_id=flow.id, tenant_id=flow.tenant_id, **data.model_dump())
        self.db.add(edge)
        self.db.commit()
        self.db.refresh(edge)
        return edge

    def update_edge(self, edge_id: UUID, data: FlowEdgeUpdate) -> Optional[FlowEdge]:
        edge = self.get_edge(edge_id)
        if edge is None:
            return None
        update_data = data.model_dump(exclude_unset=True)
        endpoints = [
            update_data[k]
            for k in ("source_node_id", "target_node_id")
            if update_data.get(k) is not None
        ]
        if endpoints:
            self._ensure_nodes_in_flow(edge.flow_id, *endpoints)
        for key, value in update_data.items():
            setattr(edge, key, value)
        self.db.commit()
        self.db.refresh(edge)
        return edge

    def delete_edge(self, edge_id: UUID) -> bool:
        edge = self.get_edge(edge_id)
        if edge is None:
            return False
        self.db.delete(edge)
        self.db.commit()
        return True
