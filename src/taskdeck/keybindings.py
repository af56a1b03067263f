"""Keybindings for the Taskdeck TUI, as plain Textual ``Binding`` lists."""

from __future__ import annotations

from textual.binding import Binding, BindingType

# =============================================================================
# App Bindings
# =============================================================================

APP_BINDINGS: list[BindingType] = [
    Binding("q", "quit", "Quit"),
    Binding("ctrl+p", "command_palette", "Palette", show=False),
    Binding("f12", "toggle_debug_log", "Debug", show=False),
]

# =============================================================================
# Board Bindings
# =============================================================================

BOARD_BINDINGS: list[BindingType] = [
    Binding("q", "quit", "Quit", priority=True),
    Binding("r", "refresh", "Refresh"),
    Binding("v", "toggle_view", "Board/List"),
    Binding("enter", "open_child_tasks", "Child tasks"),
    # Keyboard drag
    Binding("space", "lift_or_drop", "Lift/Drop"),
    Binding("escape", "cancel_drag", "Cancel", show=False),
    # Direct reorder
    Binding("shift+up", "reorder(-1)", "Move up", key_display="⇧↑"),
    Binding("shift+down", "reorder(1)", "Move down", key_display="⇧↓"),
    Binding("shift+left", "shift_section(-1)", "Move left", show=False),
    Binding("shift+right", "shift_section(1)", "Move right", show=False),
    Binding("K", "reorder(-1)", "Move up", show=False),
    Binding("J", "reorder(1)", "Move down", show=False),
    Binding("H", "shift_section(-1)", "Move left", show=False),
    Binding("L", "shift_section(1)", "Move right", show=False),
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
    Binding("tab", "focus_right", "Next Section", show=False),
    Binding("shift+tab", "focus_left", "Prev Section", show=False),
]

# =============================================================================
# Modal Bindings
# =============================================================================

CHILD_TASKS_BINDINGS: list[BindingType] = [
    Binding("escape", "close", "Close"),
    Binding("shift+up", "reorder(-1)", "Move up", key_display="⇧↑"),
    Binding("shift+down", "reorder(1)", "Move down", key_display="⇧↓"),
    Binding("K", "reorder(-1)", "Move up", show=False),
    Binding("J", "reorder(1)", "Move down", show=False),
    Binding("up", "app.focus_previous", "Up", show=False),
    Binding("down", "app.focus_next", "Down", show=False),
    Binding("k", "app.focus_previous", "Up", show=False),
    Binding("j", "app.focus_next", "Down", show=False),
]

DEBUG_LOG_BINDINGS: list[BindingType] = [
    Binding("escape", "close", "Close"),
    Binding("f12", "close", "Close", show=False),
    Binding("c", "clear_logs", "Clear"),
    Binding("s", "save_logs", "Save"),
]
