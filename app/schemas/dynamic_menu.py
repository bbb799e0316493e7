"""Pydantic schemas for dynamic menus, list messages and menu navigation."""

from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from app.constants.bot_engine import (
    DEFAULT_BACK_BUTTON_TEXT,
    MenuActionType,
    MenuType,
)

# -----------------------------------------------------------------------------
# Menu item schemas
# -----------------------------------------------------------------------------


class DynamicMenuItemBase(BaseModel):
    """Base menu item fields."""

    menu_key: str = Field(..., min_length=1, max_length=128)
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    emoji: Optional[str] = Field(None, max_length=16)
    section_title: Optional[str] = Field(None, max_length=255)
    menu_type: MenuType = MenuType.SUBMENU
    target_menu_key: Optional[str] = Field(None, max_length=128)
    target_flow_id: Optional[UUID] = None
    target_command: Optional[str] = Field(None, max_length=255)
    target_url: Optional[str] = None
    target_message: Optional[str] = None
    display_order: int = 0
    is_active: bool = True
    is_root: bool = False
    show_back_button: bool = True
    back_button_text: Optional[str] = Field(DEFAULT_BACK_BUTTON_TEXT, max_length=64)
    header_message: Optional[str] = None
    footer_message: Optional[str] = None
    parent_menu_id: Optional[UUID] = None


class DynamicMenuItemCreate(DynamicMenuItemBase):
    tenant_id: UUID

    @model_validator(mode="after")
    def root_has_no_parent(self) -> "DynamicMenuItemCreate":
        if self.is_root and self.parent_menu_id is not None:
            raise ValueError("a root menu cannot have a parent")
        return self


class DynamicMenuItemUpdate(BaseModel):
    """Schema for updating a menu item. All fields optional."""

    menu_key: Optional[str] = Field(None, min_length=1, max_length=128)
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    emoji: Optional[str] = Field(None, max_length=16)
    section_title: Optional[str] = Field(None, max_length=255)
    menu_type: Optional[MenuType] = None
    target_menu_key: Optional[str] = Field(None, max_length=128)
    target_flow_id: Optional[UUID] = None
    target_command: Optional[str] = Field(None, max_length=255)
    target_url: Optional[str] = None
    target_message: Optional[str] = None
    display_order: Optional[int] = None
    is_active: Optional[bool] = None
    is_root: Optional[bool] = None
    show_back_button: Optional[bool] = None
    back_button_text: Optional[str] = Field(None, max_length=64)
    header_message: Optional[str] = None
    footer_message: Optional[str] = None
    parent_menu_id: Optional[UUID] = None


class DynamicMenuItemRead(DynamicMenuItemBase):
    id: UUID
    tenant_id: UUID
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


# -----------------------------------------------------------------------------
# Interactive list message
# -----------------------------------------------------------------------------


class ListRow(BaseModel):
    title: str
    description: Optional[str] = None
    row_id: str


class ListSection(BaseModel):
    title: str
    rows: list[ListRow]


class ListMessage(BaseModel):
    """Structured list for providers that support interactive pickers."""

    title: str
    description: Optional[str] = None
    button_text: str
    footer_text: Optional[str] = None
    sections: list[ListSection]


# -----------------------------------------------------------------------------
# Navigation
# -----------------------------------------------------------------------------


class MenuNavigateRequest(BaseModel):
    tenant_id: UUID
    current_menu_key: Optional[str] = None
    user_input: str


class MenuAction(BaseModel):
    """Outcome of resolving user input against the current menu."""

    action: MenuActionType
    menu_key: Optional[str] = None
    flow_id: Optional[UUID] = None
    command: Optional[str] = None
    url: Optional[str] = None
    message: Optional[str] = None
    response_text: Optional[str] = None


class MenuRenderResult(BaseModel):
    menu_key: Optional[str] = None
    format: Literal["text", "list"]
    text: Optional[str] = None
    list_message: Optional[ListMessage] = None
