"""Dynamic menus API: CRUD, navigation and rendering."""

from typing import Literal, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi_pagination import Page, Params
from fastapi_pagination.ext.sqlalchemy import paginate
from sqlalchemy.orm import Session

from app.db import get_db
from app.models.dynamic_menu import DynamicMenuItem
from app.routers.utils.dependencies import get_menu_item_by_id
from app.schemas.dynamic_menu import (
    DynamicMenuItemCreate,
    DynamicMenuItemRead,
    DynamicMenuItemUpdate,
    MenuAction,
    MenuNavigateRequest,
    MenuRenderResult,
)
from app.services.dynamic_menu_service import DynamicMenuService

router = APIRouter(
    prefix="/menus",
    tags=["menus"],
    responses={404: {"description": "Not found"}},
)


@router.get("", response_model=Page[DynamicMenuItemRead])
def list_menu_items(
    params: Params = Depends(),
    tenant_id: UUID = Query(...),
    parent_menu_id: Optional[UUID] = Query(None),
    db: Session = Depends(get_db),
) -> Page[DynamicMenuItemRead]:
    """List a tenant's menu items in display order."""
    query = DynamicMenuService(db).get_menu_items_query(
        tenant_id, parent_menu_id=parent_menu_id
    )
    return paginate(query, params=params)


@router.post("", response_model=DynamicMenuItemRead, status_code=201)
def create_menu_item(
    data: DynamicMenuItemCreate,
    db: Session = Depends(get_db),
) -> DynamicMenuItemRead:
    """Create a menu item."""
    try:
        return DynamicMenuService(db).create_menu_item(data)
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.post("/navigate", response_model=MenuAction, response_model_exclude_none=True)
def navigate_menu(
    data: MenuNavigateRequest,
    db: Session = Depends(get_db),
) -> MenuAction:
    """Resolve user input against the current menu."""
    return DynamicMenuService(db).process_input(
        data.tenant_id, data.current_menu_key, data.user_input
    )


@router.get("/render", response_model=MenuRenderResult, response_model_exclude_none=True)
def render_menu(
    tenant_id: UUID = Query(...),
    menu_key: Optional[str] = Query(None),
    format: Literal["text", "list"] = Query("text"),
    db: Session = Depends(get_db),
) -> MenuRenderResult:
    """Render a menu (the root menu when no key is given) as text or a list message."""
    result = DynamicMenuService(db).render_menu(tenant_id, menu_key, fmt=format)
    if result is None:
        raise HTTPException(status_code=404, detail="Menu not configured")
    return result


@router.get("/{item_id}", response_model=DynamicMenuItemRead)
def get_menu_item(
    item: DynamicMenuItem = Depends(get_menu_item_by_id),
) -> DynamicMenuItemRead:
    """Get a menu item by ID."""
    return item


@router.patch("/{item_id}", response_model=DynamicMenuItemRead)
def update_menu_item(
    data: DynamicMenuItemUpdate,
    item: DynamicMenuItem = Depends(get_menu_item_by_id),
    db: Session = Depends(get_db),
) -> DynamicMenuItemRead:
    """Update a menu item."""
    try:
        return DynamicMenuService(db).update_menu_item(item.id, data)
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.delete("/{item_id}", status_code=204)
def delete_menu_item(
    item: DynamicMenuItem = Depends(get_menu_item_by_id),
    db: Session = Depends(get_db),
) -> None:
    """Delete a menu item and its descendants."""
    DynamicMenuService(db).delete_menu_item(item.id)
