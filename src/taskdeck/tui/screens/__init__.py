from taskdeck.tui.screens.board import BoardScreen

__all__ = ["BoardScreen"]
