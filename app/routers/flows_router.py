"""Flows API: CRUD for flows and their nodes and edges, cloning and reset."""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi_pagination import Page, Params
from fastapi_pagination.ext.sqlalchemy import paginate
from sqlalchemy.orm import Session

from app.db import get_db
from app.infra.logging_config import get_logger
from app.models.flow import Flow, FlowEdge, FlowNode
from app.routers.utils.dependencies import (
    get_edge_by_id,
    get_flow_by_id,
    get_node_by_id,
)
from app.schemas.flow import (
    FlowCloneRequest,
    FlowCreate,
    FlowEdgeCreate,
    FlowEdgeRead,
    FlowEdgeUpdate,
    FlowNodeCreate,
    FlowNodeRead,
    FlowNodeUpdate,
    FlowRead,
    FlowResetResult,
    FlowUpdate,
)
from app.services.flow_service import FlowService

logger = get_logger("flows")

router = APIRouter(
    prefix="/flows",
    tags=["flows"],
    responses={404: {"description": "Not found"}},
)


@router.get("", response_model=Page[FlowRead])
def list_flows(
    params: Params = Depends(),
    tenant_id: Optional[UUID] = Query(None),
    is_active: Optional[bool] = Query(None),
    is_template: Optional[bool] = Query(None),
    search: Optional[str] = Query(None),
    db: Session = Depends(get_db),
) -> Page[FlowRead]:
    """List flows with optional filters, highest priority first."""
    query = FlowService(db).get_flows_query(
        tenant_id=tenant_id,
        is_active=is_active,
        is_template=is_template,
        search=search,
    )
    return paginate(query, params=params)


@router.post("", response_model=FlowRead, status_code=201)
def create_flow(
    data: FlowCreate,
    db: Session = Depends(get_db),
) -> FlowRead:
    """Create a flow."""
    return FlowService(db).create_flow(data)


@router.get("/templates", response_model=List[FlowRead])
def list_templates(db: Session = Depends(get_db)) -> List[FlowRead]:
    """List template flows available for cloning."""
    return FlowService(db).get_templates()


@router.post("/reset", response_model=FlowResetResult)
def reset_flows(
    tenant_id: UUID = Query(...),
    db: Session = Depends(get_db),
) -> FlowResetResult:
    """Delete every flow, node, edge and session of a tenant."""
    count = FlowService(db).reset_flows(tenant_id)
    return FlowResetResult(tenant_id=tenant_id, flows_deleted=count)


@router.get("/{flow_id}", response_model=FlowRead)
def get_flow(flow: Flow = Depends(get_flow_by_id)) -> FlowRead:
    """Get a flow by ID."""
    return flow


@router.patch("/{flow_id}", response_model=FlowRead)
def update_flow(
    data: FlowUpdate,
    flow: Flow = Depends(get_flow_by_id),
    db: Session = Depends(get_db),
) -> FlowRead:
    """Update a flow."""
    return FlowService(db).update_flow(flow.id, data)


@router.delete("/{flow_id}", status_code=204)
def delete_flow(
    flow: Flow = Depends(get_flow_by_id),
    db: Session = Depends(get_db),
) -> None:
    """Delete a flow with its nodes, edges and sessions."""
    FlowService(db).delete_flow(flow.id)


@router.post("/{flow_id}/default", response_model=FlowRead)
def set_default_flow(
    flow: Flow = Depends(get_flow_by_id),
    db: Session = Depends(get_db),
) -> FlowRead:
    """Make this flow the tenant's default."""
    return FlowService(db).set_default_flow(flow.id)


@router.post("/{flow_id}/clone", response_model=FlowRead, status_code=201)
def clone_flow(
    data: Optional[FlowCloneRequest] = None,
    flow: Flow = Depends(get_flow_by_id),
    db: Session = Depends(get_db),
) -> FlowRead:
    """Clone a flow or template, with its nodes and edges."""
    tenant_id = data.tenant_id if data else None
    clone = FlowService(db).clone_flow(flow.id, tenant_id=tenant_id)
    logger.info("Flow %s cloned as %s", flow.id, clone.id)
    return clone


# --- Nodes ---


@router.get("/{flow_id}/nodes", response_model=List[FlowNodeRead])
def list_nodes(
    flow: Flow = Depends(get_flow_by_id),
    db: Session = Depends(get_db),
) -> List[FlowNodeRead]:
    """List the flow's nodes in creation order."""
    return FlowService(db).get_nodes(flow.id)


@router.post("/{flow_id}/nodes", response_model=FlowNodeRead, status_code=201)
def create_node(
    data: FlowNodeCreate,
    flow: Flow = Depends(get_flow_by_id),
    db: Session = Depends(get_db),
) -> FlowNodeRead:
    """Add a node to the flow."""
    return FlowService(db).create_node(flow, data)


@router.patch("/{flow_id}/nodes/{node_id}", response_model=FlowNodeRead)
def update_node(
    data: FlowNodeUpdate,
    node: FlowNode = Depends(get_node_by_id),
    db: Session = Depends(get_db),
) -> FlowNodeRead:
    """Update a node."""
    return FlowService(db).update_node(node.id, data)


@router.delete("/{flow_id}/nodes/{node_id}", status_code=204)
def delete_node(
    node: FlowNode = Depends(get_node_by_id),
    db: Session = Depends(get_db),
) -> None:
    """Delete a node and the edges touching it."""
    FlowService(db).delete_node(node.id)


# --- Edges ---


@router.get("/{flow_id}/edges", response_model=List[FlowEdgeRead])
def list_edges(
    flow: Flow = Depends(get_flow_by_id),
    db: Session = Depends(get_db),
) -> List[FlowEdgeRead]:
    """List the flow's edges, highest priority first."""
    return FlowService(db).get_edges(flow.id)


@router.post("/{flow_id}/edges", response_model=FlowEdgeRead, status_code=201)
def create_edge(
    data: FlowEdgeCreate,
    flow: Flow = Depends(get_flow_by_id),
    db: Session = Depends(get_db),
) -> FlowEdgeRead:
    """Connect two nodes of the flow."""
    try:
        return FlowService(db).create_edge(flow, data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.patch("/{flow_id}/edges/{edge_id}", response_model=FlowEdgeRead)
def update_edge(
    data: FlowEdgeUpdate,
    edge: FlowEdge = Depends(get_edge_by_id),
    db: Session = Depends(get_db),
) -> FlowEdgeRead:
    """Update an edge."""
    try:
        return FlowService(db).update_edge(edge.id, data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.delete("/{flow_id}/edges/{edge_id}", status_code=204)
def delete_edge(
    edge: FlowEdge = Depends(get_edge_by_id),
    db: Session = Depends(get_db),
) -> None:
    """Delete an edge."""
    FlowService(db).delete_edge(edge.id)
