from uuid import uuid4

import pytest

from app.constants.bot_engine import CLONE_NAME_SUFFIX, ConditionType, NodeType
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
from app.services.flow_service import FlowService


def test_create_flow_strips_keywords(db, tenant_id):
    """Blank keywords are dropped and the rest trimmed."""
    flow = FlowService(db).create_flow(
        FlowCreate(tenant_id=tenant_id, name="Vendas", trigger_keywords=[" preço ", "", "  "])
    )

    assert flow.id is not None
    assert flow.trigger_keywords == ["preço"]
    assert flow.is_active is True


def test_only_one_default_flow_per_tenant(db, tenant_id, make_flow):
    """A tenant keeps a single default flow."""
    service = FlowService(db)
    first = service.create_flow(FlowCreate(tenant_id=tenant_id, name="A", is_default=True))
    second = service.create_flow(FlowCreate(tenant_id=tenant_id, name="B", is_default=True))
    other_tenant = make_flow(tenant_id=uuid4(), is_default=True)

    db.refresh(first)
    assert first.is_default is False
    assert second.is_default is True

    service.set_default_flow(first.id)
    db.refresh(second)
    db.refresh(other_tenant)
    assert second.is_default is False
    assert other_tenant.is_default is True

    service.update_flow(second.id, FlowUpdate(is_default=True))
    db.refresh(first)
    assert first.is_default is False


def test_flows_for_tenant_exclude_templates_and_sort_by_priority(db, tenant_id, make_flow):
    """Tenant flows exclude templates and are sorted by priority."""
    low = make_flow(priority=1)
    high = make_flow(priority=5)
    make_flow(is_template=True, priority=99)
    inactive = make_flow(is_active=False, priority=50)

    service = FlowService(db)
    assert service.get_flows_for_tenant(tenant_id) == [high, low]
    assert service.get_flows_for_tenant(tenant_id, active_only=False) == [inactive, high, low]


def test_get_flows_query_search(db, tenant_id, make_flow):
    """The flows query searches names and descriptions."""
    make_flow(name="Suporte técnico")
    make_flow(name="Vendas", description="fluxo de suporte comercial")
    make_flow(name="Cobrança")

    names = [f.name for f in FlowService(db).get_flows_query(tenant_id=tenant_id, search="suporte")]

    assert sorted(names) == ["Suporte técnico", "Vendas"]


def test_update_missing_flow_returns_none(db):
    """Updating an unknown flow returns None."""
    assert FlowService(db).update_flow(uuid4(), FlowUpdate(name="x")) is None


def test_delete_flow_removes_nodes_edges_and_sessions(db, greeting_flow, make_session):
    """Deleting a flow removes its nodes, edges and sessions."""
    flow = greeting_flow["flow"]
    make_session(flow)

    assert FlowService(db).delete_flow(flow.id) is True

    assert db.query(Flow).count() == 0
    assert db.query(FlowNode).count() == 0
    assert db.query(FlowEdge).count() == 0
    assert db.query(BotSession).count() == 0
    assert FlowService(db).delete_flow(flow.id) is False


def test_clone_template_remaps_nodes_and_edges(db, tenant_id, make_flow, make_node, make_edge):
    """Cloning a template remaps edges onto the new nodes."""
    template = make_flow(tenant_id=uuid4(), name="Boas-vindas", is_template=True, category="vendas")
    start = make_node(template, NodeType.START, is_entry_point=True)
    hello = make_node(template, NodeType.MESSAGE, {"message_text": "Oi"})
    make_edge(start, hello, ConditionType.CONTAINS, "oi", priority=3)

    clone = FlowService(db).clone_flow(template.id, tenant_id)

    assert clone.tenant_id == tenant_id
    assert clone.name == "Boas-vindas"
    assert clone.category == "vendas"
    assert clone.cloned_from_template_id == template.id
    assert clone.is_template is False
    assert clone.is_active is False
    assert clone.is_default is False

    nodes = FlowService(db).get_nodes(clone.id)
    edges = FlowService(db).get_edges(clone.id)
    node_ids = {n.id for n in nodes}
    assert len(nodes) == 2
    assert node_ids.isdisjoint({start.id, hello.id})
    assert all(n.tenant_id == tenant_id for n in nodes)
    assert sorted(n.is_entry_point for n in nodes) == [False, True]
    assert len(edges) == 1
    assert edges[0].source_node_id in node_ids
    assert edges[0].target_node_id in node_ids
    assert edges[0].condition_value == "oi"
    assert edges[0].priority == 3

    # the template is untouched
    assert len(FlowService(db).get_nodes(template.id)) == 2


def test_clone_regular_flow_gets_copy_suffix(db, tenant_id, make_flow):
    """A cloned regular flow gets the copy suffix."""
    flow = make_flow(name="Atendimento", is_default=True)

    clone = FlowService(db).clone_flow(flow.id)

    assert clone.name == f"Atendimento{CLONE_NAME_SUFFIX}"
    assert clone.tenant_id == tenant_id
    assert clone.cloned_from_template_id is None
    assert clone.is_default is False


def test_clone_missing_flow(db):
    """Cloning an unknown flow returns None."""
    assert FlowService(db).clone_flow(uuid4()) is None


def test_reset_flows_only_touches_one_tenant(db, tenant_id, greeting_flow, make_flow, make_session):
    """Resetting flows leaves other tenants alone."""
    make_session(greeting_flow["flow"])
    other = make_flow(tenant_id=uuid4())

    removed = FlowService(db).reset_flows(tenant_id)

    assert removed == 1
    assert db.query(Flow).all() == [other]
    assert db.query(FlowNode).count() == 0
    assert db.query(BotSession).count() == 0


def test_single_entry_point_per_flow(db, make_flow):
    """A flow keeps a single entry point."""
    service = FlowService(db)
    flow = make_flow()
    first = service.create_node(flow, FlowNodeCreate(node_type=NodeType.START, is_entry_point=True))
    second = service.create_node(flow, FlowNodeCreate(node_type=NodeType.MESSAGE, is_entry_point=True))

    db.refresh(first)
    assert first.is_entry_point is False
    assert second.is_entry_point is True
    assert second.tenant_id == flow.tenant_id

    service.update_node(first.id, FlowNodeUpdate(is_entry_point=True))
    db.refresh(second)
    assert second.is_entry_point is False


def test_delete_node_removes_touching_edges_and_resets_sessions(db, greeting_flow, make_session):
    """Deleting a node removes its edges and resets sessions on it."""
    ask = greeting_flow["ask"]
    session = make_session(greeting_flow["flow"], current_node_id=ask.id)

    assert FlowService(db).delete_node(ask.id) is True

    edges = FlowService(db).get_edges(greeting_flow["flow"].id)
    assert len(edges) == 1  # plans -> bye
    assert all(ask.id not in (e.source_node_id, e.target_node_id) for e in edges)
    db.refresh(session)
    assert session.current_node_id is None


def test_edge_endpoints_must_belong_to_flow(db, greeting_flow, make_flow, make_node):
    """Edge endpoints must be nodes of the same flow."""
    flow = greeting_flow["flow"]
    foreign = make_node(make_flow(), NodeType.MESSAGE)
    service = FlowService(db)

    with pytest.raises(ValueError, match="Edge endpoints must be nodes of flow"):
        service.create_edge(
            flow,
            FlowEdgeCreate(source_node_id=greeting_flow["greeting"].id, target_node_id=foreign.id),
        )

    edge = service.create_edge(
        flow,
        FlowEdgeCreate(
            source_node_id=greeting_flow["greeting"].id,
            target_node_id=greeting_flow["bye"].id,
            condition_type=ConditionType.REGEX,
            condition_value="^tchau",
            priority=70,
        ),
    )
    assert edge.tenant_id == flow.tenant_id
    assert service.get_edges(flow.id)[0].id == edge.id

    with pytest.raises(ValueError):
        service.update_edge(edge.id, FlowEdgeUpdate(target_node_id=foreign.id))

    updated = service.update_edge(edge.id, FlowEdgeUpdate(label="saída"))
    assert updated.label == "saída"
    assert service.delete_edge(edge.id) is True
    assert service.get_edge(edge.id) is None
