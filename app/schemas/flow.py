"""Pydantic schemas for flows, nodes and edges."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from app.constants.bot_engine import ConditionType, NodeType, TriggerType

# -----------------------------------------------------------------------------
# Flow schemas
# -----------------------------------------------------------------------------


class FlowBase(BaseModel):
    """Base flow fields."""

    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    category: Optional[str] = Field(None, max_length=64)
    trigger_type: TriggerType = TriggerType.FIRST_MESSAGE
    trigger_keywords: list[str] = Field(default_factory=list)
    is_active: bool = True
    is_default: bool = False
    is_template: bool = False
    priority: int = 0

    @field_validator("trigger_keywords")
    @classmethod
    def strip_keywords(cls, v: list[str]) -> list[str]:
        return [k.strip() for k in v if k and k.strip()]


class FlowCreate(FlowBase):
    """Schema for creating a flow."""

    tenant_id: UUID


class FlowUpdate(BaseModel):
    """Schema for updating a flow. All fields optional."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    category: Optional[str] = Field(None, max_length=64)
    trigger_type: Optional[TriggerType] = None
    trigger_keywords: Optional[list[str]] = None
    is_active: Optional[bool] = None
    is_default: Optional[bool] = None
    is_template: Optional[bool] = None
    priority: Optional[int] = None

    @field_validator("trigger_keywords")
    @classmethod
    def strip_keywords(cls, v: Optional[list[str]]) -> Optional[list[str]]:
        if v is None:
            return v
        return [k.strip() for k in v if k and k.strip()]


class FlowRead(FlowBase):
    """Flow for API responses."""

    id: UUID
    tenant_id: UUID
    cloned_from_template_id: Optional[UUID] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class FlowCloneRequest(BaseModel):
    """Target tenant for a clone; defaults to the source flow's tenant."""

    tenant_id: Optional[UUID] = None


class FlowResetResult(BaseModel):
    tenant_id: UUID
    flows_deleted: int


# -----------------------------------------------------------------------------
# Node schemas
# -----------------------------------------------------------------------------


class FlowNodeBase(BaseModel):
    """Base node fields. `config` is interpreted per node type."""

    node_type: NodeType
    name: Optional[str] = Field(None, max_length=255)
    config: dict[str, Any] = Field(default_factory=dict)
    position_x: float = 0
    position_y: float = 0
    is_entry_point: bool = False


class FlowNodeCreate(FlowNodeBase):
    """Schema for creating a node; flow and tenant come from the path."""

    pass


class FlowNodeUpdate(BaseModel):
    node_type: Optional[NodeType] = None
    name: Optional[str] = Field(None, max_length=255)
    config: Optional[dict[str, Any]] = None
    position_x: Optional[float] = None
    position_y: Optional[float] = None
    is_entry_point: Optional[bool] = None


class FlowNodeRead(FlowNodeBase):
    id: UUID
    flow_id: UUID
    tenant_id: UUID
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


# -----------------------------------------------------------------------------
# Edge schemas
# -----------------------------------------------------------------------------


class FlowEdgeBase(BaseModel):
    """Base edge fields."""

    source_node_id: UUID
    target_node_id: UUID
    condition_type: ConditionType = ConditionType.ALWAYS
    condition_value: Optional[str] = None
    label: Optional[str] = Field(None, max_length=255)
    priority: int = 0


class FlowEdgeCreate(FlowEdgeBase):
    pass


class FlowEdgeUpdate(BaseModel):
    source_node_id: Optional[UUID] = None
    target_node_id: Optional[UUID] = None
    condition_type: Optional[ConditionType] = None
    condition_value: Optional[str] = None
    label: Optional[str] = Field(None, max_length=255)
    priority: Optional[int] = None


class FlowEdgeRead(FlowEdgeBase):
    id: UUID
    flow_id: UUID
    tenant_id: UUID
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
