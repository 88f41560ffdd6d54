"""Discrete input surfaces: hover shortcuts and the card context menu."""

from __future__ import annotations

from dataclasses import dataclass

from taskboard.core.models.enums import ContextAction, QuickMenu

SHORTCUT_MENUS: dict[str, QuickMenu] = {
    "m": QuickMenu.ASSIGN,
    "d": QuickMenu.DUE_DATE,
    "t": QuickMenu.TAGS,
}

CONTEXT_MENU_ACTIONS: tuple[ContextAction, ...] = (ContextAction.TOGGLE_TYPE, ContextAction.DELETE)


@dataclass(frozen=True, slots=True)
class KeyPress:
    """A key press as reported by the toolkit layer."""

    key: str
    ctrl: bool = False
    alt: bool = False
    meta: bool = False
    shift: bool = False
    in_text_input: bool = False


def resolve_shortcut(press: KeyPress, *, hovered_task_id: str | None) -> QuickMenu | None:
    """Return the quick menu a key opens, or None when the key means nothing here.

    Shortcuts only fire while a card is hovered, never while typing into a
    text field and never with a modifier held.
    """
    if hovered_task_id is None or press.in_text_input:
        return None
    if press.ctrl or press.alt or press.meta:
        return None
    return SHORTCUT_MENUS.get(press.key.lower())


__all__ = ["CONTEXT_MENU_ACTIONS", "SHORTCUT_MENUS", "KeyPress", "resolve_shortcut"]
