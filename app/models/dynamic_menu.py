"""DynamicMenuItem model: tenant-editable navigable menus."""

from __future__ import annotations

import uuid

from sqlalchemy import (
    Boolean,
    Column,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)

from app.constants.bot_engine import DEFAULT_BACK_BUTTON_TEXT, MenuType
from app.db import Base
from app.models.mixins import TimestampMixin


class DynamicMenuItem(Base, TimestampMixin):
    """
    A menu entry. Rows sharing a parent form one menu; the parent row's
    `menu_key` is how that menu is addressed. Root items have no parent.
    """

    __tablename__ = "bot_dynamic_menus"

    __table_args__ = (
        UniqueConstraint("tenant_id", "menu_key", name="uq_bot_dynamic_menus_tenant_key"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    tenant_id = Column(Uuid, nullable=False, index=True)
    parent_menu_id = Column(
        Uuid, ForeignKey("bot_dynamic_menus.id", ondelete="CASCADE"), nullable=True
    )
    menu_key = Column(String(128), nullable=False)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    emoji = Column(String(16), nullable=True)
    section_title = Column(String(255), nullable=True)
    menu_type = Column(String(32), nullable=False, default=MenuType.SUBMENU.value)
    target_menu_key = Column(String(128), nullable=True)
    target_flow_id = Column(
        Uuid, ForeignKey("bot_flows.id", ondelete="SET NULL"), nullable=True
    )
    target_command = Column(String(255), nullable=True)
    target_url = Column(Text, nullable=True)
    target_message = Column(Text, nullable=True)
    display_order = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    is_root = Column(Boolean, nullable=False, default=False)
    show_back_button = Column(Boolean, nullable=False, default=True)
    back_button_text = Column(String(64), nullable=True, default=DEFAULT_BACK_BUTTON_TEXT)
    header_message = Column(Text, nullable=True)
    footer_message = Column(Text, nullable=True)
