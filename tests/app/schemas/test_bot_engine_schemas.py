"""Tests for bot engine and menu schemas."""

from uuid import uuid4

import pytest
from pydantic import ValidationError

from app.constants.bot_engine import ResponseType, SessionStatus
from app.schemas.bot_engine import BotEngineResult, BotResponse, InboundBotMessage
from app.schemas.dynamic_menu import DynamicMenuItemCreate
from app.schemas.flow import FlowCreate, FlowUpdate


def test_inbound_message_defaults():
    """Optional inbound fields get their defaults."""
    msg = InboundBotMessage(tenant_id=uuid4(), contact_phone="5511987654321")
    assert msg.message_text == ""
    assert msg.message_type == "text"
    assert msg.metadata is None


def test_inbound_message_requires_phone():
    """An inbound message without a phone is invalid."""
    with pytest.raises(ValidationError):
        InboundBotMessage(tenant_id=uuid4(), contact_phone="")


def test_result_serializes_enums_as_strings():
    """Result enums serialize as plain strings."""
    result = BotEngineResult(
        success=True,
        session_id=uuid4(),
        responses=[BotResponse(type=ResponseType.DELAY, delay_ms=1000)],
        session_status=SessionStatus.ACTIVE,
    )
    data = result.model_dump(mode="json", exclude_none=True)

    assert data["session_status"] == "active"
    assert data["responses"] == [{"type": "delay", "delay_ms": 1000}]


def test_flow_keywords_are_cleaned():
    """Trigger keywords are trimmed and blanks dropped."""
    flow = FlowCreate(tenant_id=uuid4(), name="x", trigger_keywords=["  oi ", "", "menu"])
    assert flow.trigger_keywords == ["oi", "menu"]
    assert FlowUpdate(trigger_keywords=None).trigger_keywords is None


def test_root_menu_item_cannot_have_parent():
    """A root menu item with a parent fails validation."""
    with pytest.raises(ValidationError):
        DynamicMenuItemCreate(
            tenant_id=uuid4(), menu_key="r", title="R", is_root=True, parent_menu_id=uuid4()
        )
