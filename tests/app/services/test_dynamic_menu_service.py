from uuid import uuid4

import pytest

from app.constants.bot_engine import (
    MENU_INVALID_OPTION,
    MENU_NOT_CONFIGURED,
    MenuActionType,
    MenuType,
)
from app.schemas.dynamic_menu import DynamicMenuItemCreate, DynamicMenuItemUpdate
from app.services.dynamic_menu_service import DynamicMenuService


def test_menu_for_state_falls_back_to_root(db, tenant_id, menu_tree):
    """An unknown menu key falls back to the root menu."""
    service = DynamicMenuService(db)

    menu, items = service.get_menu_for_state(tenant_id, "nao-existe")

    assert menu.id == menu_tree["root"].id
    assert [i.menu_key for i in items] == ["planos", "suporte", "teste"]


def test_inactive_items_are_hidden(db, tenant_id, menu_tree):
    """Inactive items are not listed."""
    menu_tree["anual"].is_active = False
    db.commit()

    _, items = DynamicMenuService(db).get_menu_for_state(tenant_id, "planos")

    assert [i.menu_key for i in items] == ["mensal"]


def test_render_root_as_text(db, tenant_id, menu_tree):
    """The root menu renders as text without a back option."""
    result = DynamicMenuService(db).render_menu(tenant_id)

    assert result.menu_key == "principal"
    assert result.format == "text"
    assert result.text.startswith("Como podemos ajudar?")
    assert "*1* - 📺 Planos" in result.text
    # the root menu hides the back option
    assert "*0* -" not in result.text


def test_render_submenu_as_list(db, tenant_id, menu_tree):
    """A submenu renders as a list message."""
    result = DynamicMenuService(db).render_menu(tenant_id, "planos", fmt="list")

    assert result.format == "list"
    assert result.text is None
    assert result.list_message.title == "Planos"
    assert [r.row_id for r in result.list_message.sections[0].rows] == ["mensal", "anual"]


def test_render_without_menus(db, tenant_id):
    """Rendering without menus returns None."""
    assert DynamicMenuService(db).render_menu(tenant_id) is None


def test_selecting_submenu_shows_it(db, tenant_id, menu_tree):
    """Choosing a submenu item shows that submenu."""
    action = DynamicMenuService(db).process_input(tenant_id, None, "1")

    assert action.action == MenuActionType.SHOW_SUBMENU
    assert action.menu_key == "planos"
    assert "*1* - Mensal" in action.response_text
    assert "*0* - ⬅️ Voltar" in action.response_text


def test_submenu_can_point_at_another_menu(db, tenant_id, menu_tree, make_menu_item):
    """A submenu item can target another menu by key."""
    make_menu_item(
        "ofertas", "Ofertas", parent=menu_tree["root"], target_menu_key="planos", display_order=9
    )

    action = DynamicMenuService(db).process_input(tenant_id, "principal", "ofertas")

    assert action.action == MenuActionType.SHOW_SUBMENU
    assert action.menu_key == "planos"


def test_message_link_and_command_items(db, tenant_id, menu_tree):
    """Message, link and command items produce their actions."""
    service = DynamicMenuService(db)

    message = service.process_input(tenant_id, "planos", "2")
    assert message.action == MenuActionType.SHOW_MESSAGE
    assert message.message == "R$ 300/ano"

    link = service.process_input(tenant_id, "principal", "suporte")
    assert link.action == MenuActionType.SHOW_LINK
    assert link.url == "https://suporte.example.com"
    assert "https://suporte.example.com" in link.message

    command = service.process_input(tenant_id, "principal", "3")
    assert command.action == MenuActionType.EXECUTE_COMMAND
    assert command.command == "trial"


def test_flow_item_returns_flow_id(db, tenant_id, menu_tree, make_menu_item, make_flow):
    """A flow item returns the flow to run."""
    flow = make_flow()
    make_menu_item(
        "vendas",
        "Falar com vendas",
        parent=menu_tree["root"],
        menu_type=MenuType.FLOW,
        target_flow_id=flow.id,
        display_order=4,
    )

    action = DynamicMenuService(db).process_input(tenant_id, None, "4")

    assert action.action == MenuActionType.EXECUTE_FLOW
    assert action.flow_id == flow.id


def test_back_and_home_navigation(db, tenant_id, menu_tree):
    """Back goes to the parent and home to the root."""
    service = DynamicMenuService(db)

    back = service.process_input(tenant_id, "planos", "0")
    assert back.action == MenuActionType.BACK
    assert back.menu_key == "principal"

    back_from_root = service.process_input(tenant_id, "principal", "0")
    assert back_from_root.menu_key == "principal"

    home = service.process_input(tenant_id, "planos", "#")
    assert home.action == MenuActionType.HOME
    assert home.menu_key == "principal"


def test_selection_uses_displayed_numbering(db, tenant_id, make_menu_item):
    """Selecting by number returns the item rendered under that number."""
    root = make_menu_item("principal", "Menu Principal", is_root=True)
    for key, section, order, reply in [
        ("alpha", "X", 1, "A"),
        ("bravo", "Y", 2, "B"),
        ("charlie", "X", 3, "C"),
    ]:
        make_menu_item(
            key,
            key.title(),
            parent=root,
            menu_type=MenuType.MESSAGE,
            section_title=section,
            display_order=order,
            target_message=reply,
        )
    service = DynamicMenuService(db)

    rendered = service.render_menu(tenant_id, "principal").text
    assert rendered.index("*2* - Charlie") < rendered.index("*3* - Bravo")

    action = service.process_input(tenant_id, "principal", "2")
    assert action.action == MenuActionType.SHOW_MESSAGE
    assert action.message == "C"


def test_invalid_option_repeats_menu(db, tenant_id, menu_tree):
    """An invalid option repeats the current menu."""
    action = DynamicMenuService(db).process_input(tenant_id, "planos", "9")

    assert action.action == MenuActionType.INVALID
    assert action.menu_key == "planos"
    assert action.response_text.startswith(MENU_INVALID_OPTION)
    assert "*1* - Mensal" in action.response_text


def test_navigation_without_menus(db, tenant_id):
    """Navigating with no menus reports that none are configured."""
    service = DynamicMenuService(db)

    for user_input in ("1", "0", "#"):
        action = service.process_input(tenant_id, None, user_input)
        assert action.action == MenuActionType.INVALID
        assert action.response_text == MENU_NOT_CONFIGURED


def test_menu_key_is_unique_per_tenant(db, tenant_id, menu_tree):
    """Menu keys are unique within a tenant."""
    service = DynamicMenuService(db)

    with pytest.raises(ValueError, match="already exists"):
        service.create_menu_item(
            DynamicMenuItemCreate(tenant_id=tenant_id, menu_key="planos", title="Outro")
        )

    other = service.create_menu_item(
        DynamicMenuItemCreate(tenant_id=uuid4(), menu_key="planos", title="Outro")
    )
    assert other.menu_key == "planos"


def test_single_root_per_tenant(db, tenant_id, menu_tree):
    """A tenant has a single root menu."""
    with pytest.raises(ValueError, match="root menu"):
        DynamicMenuService(db).create_menu_item(
            DynamicMenuItemCreate(tenant_id=tenant_id, menu_key="raiz2", title="Raiz", is_root=True)
        )


def test_root_cannot_have_parent(db, tenant_id, menu_tree):
    """Root items cannot have a parent."""
    with pytest.raises(ValueError):
        DynamicMenuService(db).update_menu_item(
            menu_tree["root"].id,
            DynamicMenuItemUpdate(parent_menu_id=menu_tree["planos"].id),
        )


def test_cycles_are_rejected(db, menu_tree):
    """Re-parenting an item under its own descendant is rejected."""
    service = DynamicMenuService(db)
    planos = menu_tree["planos"]

    with pytest.raises(ValueError, match="own ancestor"):
        service.update_menu_item(planos.id, DynamicMenuItemUpdate(parent_menu_id=menu_tree["mensal"].id))

    with pytest.raises(ValueError, match="own ancestor"):
        service.update_menu_item(planos.id, DynamicMenuItemUpdate(parent_menu_id=planos.id))


def test_depth_limit(db, tenant_id, menu_tree):
    """Menus cannot nest past the depth limit."""
    service = DynamicMenuService(db, max_depth=2)

    with pytest.raises(ValueError, match="deeper than 2"):
        service.create_menu_item(
            DynamicMenuItemCreate(
                tenant_id=tenant_id,
                menu_key="detalhes",
                title="Detalhes",
                parent_menu_id=menu_tree["mensal"].id,
            )
        )


def test_parent_must_belong_to_tenant(db, menu_tree):
    """The parent must belong to the same tenant."""
    with pytest.raises(ValueError, match="not found for this tenant"):
        DynamicMenuService(db).create_menu_item(
            DynamicMenuItemCreate(
                tenant_id=uuid4(), menu_key="x", title="X", parent_menu_id=menu_tree["root"].id
            )
        )


def test_delete_removes_descendants(db, menu_tree):
    """Deleting an item removes its descendants."""
    service = DynamicMenuService(db)

    assert service.delete_menu_item(menu_tree["planos"].id) is True

    assert service.get_menu_item(menu_tree["mensal"].id) is None
    assert service.get_menu_item(menu_tree["root"].id) is not None
    assert service.delete_menu_item(uuid4()) is False
