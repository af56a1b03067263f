"""Main Taskdeck TUI application."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from textual.app import App, SystemCommand

from taskdeck.adapters.http import HttpBoardDataSource
from taskdeck.core.events import (
    BoardRefreshFailed,
    InMemoryEventBus,
    MoveCommitted,
    MoveRolledBack,
)
from taskdeck.debug_log import log as debug_log
from taskdeck.debug_log import setup_debug_logging
from taskdeck.keybindings import APP_BINDINGS
from taskdeck.paths import get_config_path
from taskdeck.theme import TASKDECK_THEME, TASKDECK_THEME_256, pick_theme
from taskdeck.tui.modals.debug_log import DebugLogModal
from taskdeck.tui.screens.board import BoardScreen

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

    from textual.screen import Screen

    from taskdeck.config import BoardViewLiteral, TaskdeckConfig
    from taskdeck.core.events import DomainEvent, EventBus
    from taskdeck.core.ports import BoardDataSource

log = logging.getLogger(__name__)


class TaskdeckApp(App):
    """Terminal board client with drag-and-drop task reordering."""

    TITLE = "taskdeck"
    CSS_PATH = "styles/taskdeck.tcss"

    BINDINGS = APP_BINDINGS

    def __init__(
        self,
        config: TaskdeckConfig,
        project_id: str,
        *,
        source: BoardDataSource | None = None,
        config_path: Path | None = None,
        event_bus: EventBus | None = None,
    ) -> None:
        super().__init__()
        self.register_theme(TASKDECK_THEME)
        self.register_theme(TASKDECK_THEME_256)
        self.theme = pick_theme().name

        self.config = config
        self.project_id = project_id
        self.config_path = config_path or get_config_path()
        self.event_bus: EventBus = event_bus or InMemoryEventBus()
        self.event_bus.add_handler(self._journal_event)
        self._owned_source: HttpBoardDataSource | None = None
        if source is None:
            self._owned_source = HttpBoardDataSource.from_config(config.api)
            source = self._owned_source
        self.source: BoardDataSource = source

    async def on_mount(self) -> None:
        setup_debug_logging()
        log.info("Opening board %s at %s", self.project_id, self.config.api.base_url)
        await self.push_screen(
            BoardScreen(
                self.source,
                self.project_id,
                board_config=self.config.board,
                initial_view=self.config.ui.last_view,
                persist_view=self.persist_view,
                event_bus=self.event_bus,
            )
        )

    async def on_unmount(self) -> None:
        self.event_bus.remove_handler(self._journal_event)
        if self._owned_source is not None:
            await self._owned_source.aclose()

    async def persist_view(self, view: BoardViewLiteral) -> None:
        """Remember the board/list choice for the next launch."""
        try:
            await self.config.update_ui_preferences(self.config_path, last_view=view)
        except OSError as exc:
            log.warning("Could not save view preference: %s", exc)
            self.notify("Could not save view preference", severity="warning")

    def _journal_event(self, event: DomainEvent) -> None:
        """Record move outcomes and sync failures in the F12 log."""
        if isinstance(event, MoveRolledBack):
            debug_log.warning(
                f"[{event.scope}] move of {event.move.task_id} rolled back: {event.reason}",
                discarded=len(event.discarded_move_ids),
            )
        elif isinstance(event, MoveCommitted):
            debug_log.info(
                f"[{event.scope}] move of {event.move.task_id} saved at index {event.move.to_index}"
            )
        elif isinstance(event, BoardRefreshFailed):
            debug_log.warning(f"[{event.scope}] refresh failed: {event.reason}")

    def action_toggle_debug_log(self) -> None:
        if isinstance(self.screen, DebugLogModal):
            self.screen.dismiss(None)
            return
        self.push_screen(DebugLogModal())

    def get_system_commands(self, screen: Screen) -> Iterable[SystemCommand]:
        yield from super().get_system_commands(screen)
        yield SystemCommand("Debug Log", "Open debug log viewer", self.action_toggle_debug_log)
        if isinstance(screen, BoardScreen):
            yield SystemCommand("Refresh", "Refetch the board", screen.action_refresh)
            yield SystemCommand(
                "Toggle view", "Switch board/list layout", screen.action_toggle_view
            )
