"""Dynamic menu store and navigation."""

from __future__ import annotations

from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy.orm import Query, Session

from app.config import get_settings
from app.constants.bot_engine import (
    DEFAULT_BACK_BUTTON_TEXT,
    DEFAULT_LIST_BUTTON_TEXT,
    MENU_INVALID_OPTION,
    MENU_NOT_CONFIGURED,
    MenuActionType,
    MenuType,
)
from app.core.menu_renderer import (
    navigation_action,
    render_menu_as_list,
    render_menu_as_text,
    select_menu_item,
)
from app.infra.logging_config import get_logger
from app.models.dynamic_menu import DynamicMenuItem
from app.schemas.dynamic_menu import (
    DynamicMenuItemCreate,
    DynamicMenuItemUpdate,
    MenuAction,
    MenuRenderResult,
)

logger = get_logger("dynamic_menu_service")

MenuState = Tuple[Optional[DynamicMenuItem], List[DynamicMenuItem]]


class DynamicMenuService:
    def __init__(self, db: Session, max_depth: Optional[int] = None) -> None:
        self.db = db
        self.max_depth = max_depth or get_settings().menu_max_depth

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_menu_item(self, item_id: UUID) -> Optional[DynamicMenuItem]:
        return self.db.query(DynamicMenuItem).filter(DynamicMenuItem.id == item_id).first()

    def get_menu_items_query(
        self,
        tenant_id: UUID,
        parent_menu_id: Optional[UUID] = None,
        include_inactive: bool = True,
    ) -> Query[DynamicMenuItem]:
        """All of a tenant's items, optionally children of one parent (for pagination)."""
        query = self.db.query(DynamicMenuItem).filter(
            DynamicMenuItem.tenant_id == tenant_id
        )
        if parent_menu_id is not None:
            query = query.filter(DynamicMenuItem.parent_menu_id == parent_menu_id)
        if not include_inactive:
            query = query.filter(DynamicMenuItem.is_active.is_(True))
        return query.order_by(
            DynamicMenuItem.display_order.asc(), DynamicMenuItem.title.asc()
        )

    def get_root_menu(self, tenant_id: UUID) -> Optional[DynamicMenuItem]:
        return (
            self.db.query(DynamicMenuItem)
            .filter(
                DynamicMenuItem.tenant_id == tenant_id,
                DynamicMenuItem.is_root.is_(True),
                DynamicMenuItem.is_active.is_(True),
            )
            .first()
        )

    def get_menu_by_key(
        self, tenant_id: UUID, menu_key: str
    ) -> Optional[DynamicMenuItem]:
        return (
            self.db.query(DynamicMenuItem)
            .filter(
                DynamicMenuItem.tenant_id == tenant_id,
                DynamicMenuItem.menu_key == menu_key,
                DynamicMenuItem.is_active.is_(True),
            )
            .first()
        )

    def get_menu_items(
        self, tenant_id: UUID, parent_menu_id: Optional[UUID]
    ) -> List[DynamicMenuItem]:
        """Active direct children of `parent_menu_id` (top level when None), in display order."""
        query = self.db.query(DynamicMenuItem).filter(
            DynamicMenuItem.tenant_id == tenant_id,
            DynamicMenuItem.is_active.is_(True),
        )
        if parent_menu_id is None:
            query = query.filter(DynamicMenuItem.parent_menu_id.is_(None))
        else:
            query = query.filter(DynamicMenuItem.parent_menu_id == parent_menu_id)
        return query.order_by(
            DynamicMenuItem.display_order.asc(), DynamicMenuItem.title.asc()
        ).all()

    def get_parent_menu(self, item: DynamicMenuItem) -> Optional[DynamicMenuItem]:
        if item.parent_menu_id is None:
            return None
        return self.get_menu_item(item.parent_menu_id)

    def get_menu_for_state(
        self, tenant_id: UUID, current_menu_key: Optional[str]
    ) -> MenuState:
        """The menu addressed by `current_menu_key` and its items; root when unknown."""
        menu = None
        if current_menu_key:
            menu = self.get_menu_by_key(tenant_id, current_menu_key)
        if menu is None:
            menu = self.get_root_menu(tenant_id)
        if menu is None:
            return None, []
        return menu, self.get_menu_items(tenant_id, menu.id)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def _ensure_unique_key(
        self, tenant_id: UUID, menu_key: str, exclude_id: Optional[UUID] = None
    ) -> None:
        query = self.db.query(DynamicMenuItem).filter(
            DynamicMenuItem.tenant_id == tenant_id,
            DynamicMenuItem.menu_key == menu_key,
        )
        if exclude_id is not None:
            query = query.filter(DynamicMenuItem.id != exclude_id)
        if query.first() is not None:
            raise ValueError(f"Menu key '{menu_key}' already exists for this tenant")

    def _ensure_single_root(
        self, tenant_id: UUID, exclude_id: Optional[UUID] = None
    ) -> None:
        query = self.db.query(DynamicMenuItem).filter(
            DynamicMenuItem.tenant_id == tenant_id,
            DynamicMenuItem.is_root.is_(True),
        )
        if exclude_id is not None:
            query = query.filter(DynamicMenuItem.id != exclude_id)
        if query.first() is not None:
            raise ValueError("Tenant already has a root menu")

    def _ensure_valid_parent(
        self,
        tenant_id: UUID,
        parent_menu_id: UUID,
        item_id: Optional[UUID] = None,
    ) -> None:
        """Parent must be a same-tenant item and must not descend from `item_id`."""
        parent = self.get_menu_item(parent_menu_id)
        if parent is None or parent.tenant_id != tenant_id:
            raise ValueError(f"Parent menu {parent_menu_id} not found for this tenant")

        depth = 0
        current: Optional[DynamicMenuItem] = parent
        while current is not None:
            if item_id is not None and current.id == item_id:
                raise ValueError("A menu item cannot be its own ancestor")
            depth += 1
            if depth > self.max_depth:
                raise ValueError(f"Menu tree deeper than {self.max_depth} levels")
            current = self.get_parent_menu(current)

    def create_menu_item(self, data: DynamicMenuItemCreate) -> DynamicMenuItem:
        self._ensure_unique_key(data.tenant_id, data.menu_key)
        if data.is_root:
            self._ensure_single_root(data.tenant_id)
        if data.parent_menu_id is not None:
            self._ensure_valid_parent(data.tenant_id, data.parent_menu_id)

        item = DynamicMenuItem(**data.model_dump())
        self.db.add(item)
        self.db.commit()
        self.db.refresh(item)
        return item

    def update_menu_item(
        self, item_id: UUID, data: DynamicMenuItemUpdate
    ) -> Optional[DynamicMenuItem]:
        item = self.get_menu_item(item_id)
        if item is None:
            return None
        update_data = data.model_dump(exclude_unset=True)

        if update_data.get("menu_key"):
            self._ensure_unique_key(item.tenant_id, update_data["menu_key"], item.id)
        if update_data.get("is_root"):
            self._ensure_single_root(item.tenant_id, item.id)
        parent_id = update_data.get("parent_menu_id", item.parent_menu_id)
        if update_data.get("is_root", item.is_root) and parent_id is not None:
            raise ValueError("a root menu cannot have a parent")
        if update_data.get("parent_menu_id") is not None:
            self._ensure_valid_parent(
                item.tenant_id, update_data["parent_menu_id"], item.id
            )

        for key, value in update_data.items():
            setattr(item, key, value)
        self.db.commit()
        self.db.refresh(item)
        return item

    def delete_menu_item(self, item_id: UUID) -> bool:
        """Delete an item; its descendants go with it."""
        item = self.get_menu_item(item_id)
        if item is None:
            return False
        self.db.delete(item)
        self.db.commit()
        return True

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def render_text(
        self, menu: DynamicMenuItem, items: List[DynamicMenuItem]
    ) -> str:
        return render_menu_as_text(
            items,
            header_message=menu.header_message,
            footer_message=menu.footer_message,
            show_back_button=menu.show_back_button,
            back_button_text=menu.back_button_text or DEFAULT_BACK_BUTTON_TEXT,
        )

    def render_menu(
        self, tenant_id: UUID, menu_key: Optional[str] = None, fmt: str = "text"
    ) -> Optional[MenuRenderResult]:
        """Render the addressed menu (root when unknown); None when there is no menu."""
        menu, items = self.get_menu_for_state(tenant_id, menu_key)
        if menu is None:
            return None
        if fmt == "list":
            return MenuRenderResult(
                menu_key=menu.menu_key,
                format="list",
                list_message=render_menu_as_list(
                    items,
                    title=menu.title,
                    description=menu.header_message,
                    button_text=DEFAULT_LIST_BUTTON_TEXT,
                    footer_text=menu.footer_message,
                ),
            )
        return MenuRenderResult(
            menu_key=menu.menu_key, format="text", text=self.render_text(menu, items)
        )

    def _show(
        self, action: MenuActionType, tenant_id: UUID, menu_key: Optional[str]
    ) -> MenuAction:
        menu, items = self.get_menu_for_state(tenant_id, menu_key)
        if menu is None:
            return MenuAction(action=MenuActionType.INVALID, response_text=MENU_NOT_CONFIGURED)
        return MenuAction(
            action=action,
            menu_key=menu.menu_key,
            response_text=self.render_text(menu, items),
        )

    def process_input(
        self,
        tenant_id: UUID,
        current_menu_key: Optional[str],
        user_input: str,
    ) -> MenuAction:
        """Resolve user input against the current menu into the next action."""
        nav = navigation_action(user_input)
        if nav == MenuActionType.HOME:
            return self._show(MenuActionType.HOME, tenant_id, None)

        menu, items = self.get_menu_for_state(tenant_id, current_menu_key)

        if nav == MenuActionType.BACK:
            parent = self.get_parent_menu(menu) if menu is not None else None
            return self._show(
                MenuActionType.BACK, tenant_id, parent.menu_key if parent else None
            )

        if menu is None or not items:
            return MenuAction(action=MenuActionType.INVALID, response_text=MENU_NOT_CONFIGURED)

        selected = select_menu_item(items, user_input)
        if selected is None:
            return MenuAction(
                action=MenuActionType.INVALID,
                menu_key=menu.menu_key,
                response_text=f"{MENU_INVALID_OPTION}\n\n{self.render_text(menu, items)}",
            )

        logger.debug("Menu %s: '%s' selected %s", menu.menu_key, user_input, selected.menu_key)

        if selected.menu_type == MenuType.SUBMENU:
            return self._show(
                MenuActionType.SHOW_SUBMENU,
                tenant_id,
                selected.target_menu_key or selected.menu_key,
            )
        if selected.menu_type == MenuType.FLOW:
            return MenuAction(
                action=MenuActionType.EXECUTE_FLOW,
                menu_key=menu.menu_key,
                flow_id=selected.target_flow_id,
            )
        if selected.menu_type == MenuType.COMMAND:
            return MenuAction(
                action=MenuActionType.EXECUTE_COMMAND,
                menu_key=menu.menu_key,
                command=selected.target_command,
            )
        if selected.menu_type == MenuType.LINK:
            return MenuAction(
                action=MenuActionType.SHOW_LINK,
                menu_key=menu.menu_key,
                url=selected.target_url,
                message=f"🔗 Acesse: {selected.target_url}",
            )
        if selected.menu_type == MenuType.MESSAGE:
            return MenuAction(
                action=MenuActionType.SHOW_MESSAGE,
                menu_key=menu.menu_key,
                message=selected.target_message,
            )
        return MenuAction(action=MenuActionType.INVALID, menu_key=menu.menu_key)
