"""Textual themes for Taskdeck."""

from __future__ import annotations

import os

from textual.theme import Theme

# Truecolor theme
TASKDECK_THEME = Theme(
    name="taskdeck",
    primary="#5b8def",  # cornflower
    secondary="#e0a458",  # sticky-note amber
    accent="#57c7b8",
    foreground="#cfd6e1",
    background="#11151c",
    surface="#181d26",
    panel="#202733",
    warning="#e6c07b",
    error="#e06c5a",
    success="#6cc58a",
    dark=True,
    variables={
        "border": "#2c3545",
        "border-blurred": "#2c354580",
        "text-muted": "#667085",
        "text-disabled": "#66708580",
        "scrollbar": "#2c3545",
        "scrollbar-hover": "#5b8def",
        "scrollbar-active": "#e0a458",
        "footer-key-foreground": "#667085",
        "footer-key-background": "transparent",
        "footer-description-foreground": "#66708580",
    },
)

# xterm-256 fallback
TASKDECK_THEME_256 = Theme(
    name="taskdeck-256",
    primary="#5f87d7",  # color(68)
    secondary="#d7af5f",  # color(179)
    accent="#5fd7af",  # color(79)
    foreground="#d0d0d0",
    background="#121212",
    surface="#1c1c1c",
    panel="#262626",
    warning="#d7af87",
    error="#d75f5f",
    success="#5faf87",
    dark=True,
    variables={
        "border": "#303030",
        "border-blurred": "#30303080",
        "text-muted": "#6c6c6c",
        "text-disabled": "#6c6c6c80",
        "scrollbar": "#303030",
        "scrollbar-hover": "#5f87d7",
        "scrollbar-active": "#d7af5f",
        "footer-key-foreground": "#6c6c6c",
        "footer-key-background": "transparent",
        "footer-description-foreground": "#6c6c6c80",
    },
)


_NO_TRUECOLOR_TERMINALS = frozenset({"apple_terminal"})
_TRUECOLOR_TERMINALS = frozenset({"iterm.app", "vscode", "wezterm", "ghostty", "kitty"})


def supports_truecolor() -> bool:
    """Best-effort truecolor detection (TEXTUAL_COLOR_SYSTEM wins)."""
    if os.environ.get("TEXTUAL_COLOR_SYSTEM", "").lower() == "truecolor":
        return True
    term_program = os.environ.get("TERM_PROGRAM", "").lower()
    if term_program in _NO_TRUECOLOR_TERMINALS:
        return False
    if term_program in _TRUECOLOR_TERMINALS:
        return True
    if os.environ.get("COLORTERM", "").lower() in ("truecolor", "24bit"):
        return True
    return bool(os.environ.get("WT_SESSION"))


def pick_theme() -> Theme:
    return TASKDECK_THEME if supports_truecolor() else TASKDECK_THEME_256
