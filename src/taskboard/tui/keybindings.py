"""Keybindings for the taskboard TUI.

The quick-action keys (m, d, t) are not bindings: the board screen routes raw
key presses through the board's shortcut resolver instead.
"""

from __future__ import annotations

from textual.binding import Binding, BindingType

APP_BINDINGS: list[BindingType] = [
    Binding("q", "quit", "Quit"),
    Binding("f12", "export_logs", "Export logs", show=False),
]

BOARD_BINDINGS: list[BindingType] = [
    Binding("n", "new_task", "New"),
    Binding("enter", "activate", "Open"),
    Binding("slash", "toggle_search", "Search", key_display="/"),
    Binding("space", "toggle_select", "Select"),
    Binding("a", "select_all", "Select all"),
    Binding("g", "grab_task", "Drag"),
    Binding("G", "grab_column", "Drag column", key_display="Shift+G", show=False),
    Binding("left_square_bracket", "move_left", "Move←", key_display="["),
    Binding("right_square_bracket", "move_right", "Move→", key_display="]"),
    Binding("left_curly_bracket", "bulk_move_left", "Bulk←", key_display="{", show=False),
    Binding("right_curly_bracket", "bulk_move_right", "Bulk→", key_display="}", show=False),
    Binding("1", "set_priority('LOW')", "Low", show=False),
    Binding("2", "set_priority('MEDIUM')", "Medium", show=False),
    Binding("3", "set_priority('HIGH')", "High", show=False),
    Binding("4", "set_priority('URGENT')", "Urgent", show=False),
    Binding("c", "context_menu", "Actions"),
    Binding("b", "toggle_type", "Bug/Task", show=False),
    Binding("x", "delete_task", "Delete"),
    # Navigation - vim style
    Binding("h", "focus_left", "Left", show=False),
    Binding("j", "focus_down", "Down", show=False),
    Binding("k", "focus_up", "Up", show=False),
    Binding("l", "focus_right", "Right", show=False),
    # Navigation - arrow keys
    Binding("left", "focus_left", "Left", show=False),
    Binding("right", "focus_right", "Right", show=False),
    Binding("down", "focus_down", "Down", show=False),
    Binding("up", "focus_up", "Up", show=False),
    Binding("escape", "escape", "", show=False),
]
