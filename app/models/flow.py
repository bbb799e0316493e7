"""Flow graph models: a flow owns its nodes and the edges between them."""

from __future__ import annotations

import uuid

from sqlalchemy import (
    Boolean,
    Column,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import relationship

from app.constants.bot_engine import ConditionType, TriggerType
from app.db import Base
from app.models.mixins import JSONType, TimestampMixin


class Flow(Base, TimestampMixin):
    """A named conversation graph owned by a tenant."""

    __tablename__ = "bot_flows"

    __table_args__ = (
        Index("ix_bot_flows_tenant_active_priority", "tenant_id", "is_active", "priority"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    tenant_id = Column(Uuid, nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(64), nullable=True)
    trigger_type = Column(String(32), nullable=False, default=TriggerType.FIRST_MESSAGE.value)
    trigger_keywords = Column(JSONType, nullable=False, default=list)
    is_active = Column(Boolean, nullable=False, default=True)
    is_default = Column(Boolean, nullable=False, default=False)
    is_template = Column(Boolean, nullable=False, default=False)
    priority = Column(Integer, nullable=False, default=0)
    cloned_from_template_id = Column(
        Uuid, ForeignKey("bot_flows.id", ondelete="SET NULL"), nullable=True
    )

    nodes = relationship(
        "FlowNode",
        back_populates="flow",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    edges = relationship(
        "FlowEdge",
        back_populates="flow",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class FlowNode(Base, TimestampMixin):
    """A single step; `config` holds the node-type specific settings."""

    __tablename__ = "bot_flow_nodes"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    flow_id = Column(
        Uuid, ForeignKey("bot_flows.id", ondelete="CASCADE"), nullable=False, index=True
    )
    tenant_id = Column(Uuid, nullable=False, index=True)
    node_type = Column(String(32), nullable=False)
    name = Column(String(255), nullable=True)
    config = Column(JSONType, nullable=False, default=dict)
    position_x = Column(Float, nullable=False, default=0)
    position_y = Column(Float, nullable=False, default=0)
    is_entry_point = Column(Boolean, nullable=False, default=False)

    flow = relationship("Flow", back_populates="nodes")


class FlowEdge(Base, TimestampMixin):
    """Directed transition between two nodes of the same flow."""

    __tablename__ = "bot_flow_edges"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    flow_id = Column(
        Uuid, ForeignKey("bot_flows.id", ondelete="CASCADE"), nullable=False, index=True
    )
    tenant_id = Column(Uuid, nullable=False, index=True)
    source_node_id = Column(
        Uuid, ForeignKey("bot_flow_nodes.id", ondelete="CASCADE"), nullable=False
    )
    target_node_id = Column(
        Uuid, ForeignKey("bot_flow_nodes.id", ondelete="CASCADE"), nullable=False
    )
    condition_type = Column(String(32), nullable=False, default=ConditionType.ALWAYS.value)
    condition_value = Column(Text, nullable=True)
    label = Column(String(255), nullable=True)
    priority = Column(Integer, nullable=False, default=0)

    flow = relationship("Flow", back_populates="edges")
