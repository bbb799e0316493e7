"""Rendering of dynamic menus and resolution of user selections."""

from __future__ import annotations

from typing import Optional, Sequence

from app.constants.bot_engine import (
    DEFAULT_BACK_BUTTON_TEXT,
    DEFAULT_LIST_BUTTON_TEXT,
    DEFAULT_LIST_TITLE,
    DEFAULT_MENU_SECTION,
    MENU_BACK_TOKENS,
    MENU_HOME_TOKENS,
    MenuActionType,
)
from app.models.dynamic_menu import DynamicMenuItem
from app.schemas.dynamic_menu import ListMessage, ListRow, ListSection

NAVIGATION_SEPARATOR = "────────────"
HOME_LINE = "*#* - Menu Principal"


def _group_by_section(
    items: Sequence[DynamicMenuItem],
) -> dict[str, list[DynamicMenuItem]]:
    # dicts keep insertion order, so sections appear in item order
    sections: dict[str, list[DynamicMenuItem]] = {}
    for item in items:
        sections.setdefault(item.section_title or DEFAULT_MENU_SECTION, []).append(item)
    return sections


def _label(item: DynamicMenuItem) -> str:
    emoji = f"{item.emoji} " if item.emoji else ""
    return f"{emoji}{item.title}"


def render_menu_as_text(
    items: Sequence[DynamicMenuItem],
    header_message: Optional[str] = None,
    footer_message: Optional[str] = None,
    show_back_button: bool = True,
    back_button_text: str = DEFAULT_BACK_BUTTON_TEXT,
) -> str:
    """
    Numbered plain-text listing. Section headers are only shown when there is
    more than one section; numbering runs across sections.
    """
    lines: list[str] = []
    if header_message:
        lines.extend([header_message, ""])

    sections = _group_by_section(items)
    index = 1
    for section_title, section_items in sections.items():
        if len(sections) > 1:
            lines.append(f"📌 *{section_title}*")
        for item in section_items:
            lines.append(f"*{index}* - {_label(item)}")
            if item.description:
                lines.append(f"   └ {item.description}")
            index += 1
        lines.append("")

    lines.append(NAVIGATION_SEPARATOR)
    if show_back_button:
        lines.append(f"*0* - {back_button_text or DEFAULT_BACK_BUTTON_TEXT}")
    lines.append(HOME_LINE)

    if footer_message:
        lines.extend(["", footer_message])

    return "\n".join(lines)


def render_menu_as_list(
    items: Sequence[DynamicMenuItem],
    title: str = DEFAULT_LIST_TITLE,
    description: Optional[str] = None,
    button_text: str = DEFAULT_LIST_BUTTON_TEXT,
    footer_text: Optional[str] = None,
) -> ListMessage:
    """Interactive list message; each row is addressed by the item's menu_key."""
    sections = [
        ListSection(
            title=section_title,
            rows=[
                ListRow(
                    title=_label(item),
                    description=item.description or None,
                    row_id=item.menu_key,
                )
                for item in section_items
            ],
        )
        for section_title, section_items in _group_by_section(items).items()
    ]
    return ListMessage(
        title=title,
        description=description,
        button_text=button_text,
        footer_text=footer_text,
        sections=sections,
    )


def navigation_action(user_input: str) -> Optional[MenuActionType]:
    """BACK or HOME for the universal navigation tokens, else None."""
    normalized = (user_input or "").strip().lower()
    if normalized in MENU_BACK_TOKENS:
        return MenuActionType.BACK
    if normalized in MENU_HOME_TOKENS:
        return MenuActionType.HOME
    return None


def displayed_order(items: Sequence[DynamicMenuItem]) -> list[DynamicMenuItem]:
    """Items in the order the text listing numbers them (grouped by section)."""
    return [item for group in _group_by_section(items).values() for item in group]


def select_menu_item(
    items: Sequence[DynamicMenuItem], user_input: str
) -> Optional[DynamicMenuItem]:
    """
    Match input against the displayed items: 1-based position first, then an
    exact menu_key, then a title substring in either direction.
    """
    normalized = (user_input or "").strip().lower()
    if not items or not normalized:
        return None
    items = displayed_order(items)

    if normalized.isdigit():
        position = int(normalized)
        if 1 <= position <= len(items):
            return items[position - 1]

    for item in items:
        if item.menu_key.lower() == normalized:
            return item

    for item in items:
        title = item.title.lower()
        if normalized in title or title in normalized:
            return item

    return None
