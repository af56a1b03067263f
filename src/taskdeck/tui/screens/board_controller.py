"""Background sync and rendering for the board screen."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from textual.containers import Horizontal
from textual.css.query import NoMatches
from textual.widgets import Static

from taskdeck.core.sync import BoardSyncState, poll_interval, transition_board_sync_state
from taskdeck.tui.widgets.column import SectionColumn

if TYPE_CHECKING:
    from textual.timer import Timer

    from taskdeck.config import BoardConfig
    from taskdeck.core.engine import BoardReorderEngine
    from taskdeck.core.models.entities import BoardSnapshot
    from taskdeck.core.sync import BoardSyncTransition
    from taskdeck.tui.screens.board import BoardScreen

log = logging.getLogger(__name__)


class BoardController:
    def __init__(
        self, screen: BoardScreen, engine: BoardReorderEngine, board_config: BoardConfig
    ) -> None:
        self.screen = screen
        self.engine = engine
        self._fast_seconds = board_config.fast_poll_seconds
        self._idle_seconds = board_config.idle_poll_seconds
        self._sync_timer: Timer | None = None
        self._sync_state = BoardSyncState.IDLE
        self._fast_ticks_remaining = 0
        self._render_dirty = False
        self._rendering = False

    @property
    def sync_state(self) -> BoardSyncState:
        return self._sync_state

    # -- background sync -----------------------------------------------------

    def start_background_sync(self) -> None:
        self.mark_activity()

    def stop_background_sync(self) -> None:
        if self._sync_timer is not None:
            self._sync_timer.stop()
            self._sync_timer = None
        self._fast_ticks_remaining = 0

    def mark_activity(self) -> None:
        """Switch to fast polling for a short window."""
        self._apply_sync_transition(
            transition_board_sync_state(
                current_state=self._sync_state,
                fast_ticks_remaining=self._fast_ticks_remaining,
                has_activity=True,
            )
        )

    def _apply_sync_transition(self, transition: BoardSyncTransition) -> None:
        self._fast_ticks_remaining = transition.fast_ticks_remaining
        if transition.state is self._sync_state and self._sync_timer is not None:
            return
        self._sync_state = transition.state
        if self._sync_timer is not None:
            self._sync_timer.stop()
        interval = poll_interval(
            transition.state, fast_seconds=self._fast_seconds, idle_seconds=self._idle_seconds
        )
        self._sync_timer = self.screen.set_interval(interval, self._background_sync_tick)
        self.screen.update_status()

    def _background_sync_tick(self) -> None:
        self._apply_sync_transition(
            transition_board_sync_state(
                current_state=self._sync_state,
                fast_ticks_remaining=self._fast_ticks_remaining,
                has_activity=self.engine.pending_count > 0,
            )
        )
        if self._has_active_refresh_worker():
            return
        self.run_refresh()

    def _has_active_refresh_worker(self) -> bool:
        return any(
            worker.group == "board-refresh" and not worker.is_finished
            for worker in self.screen.workers
        )

    def run_refresh(self) -> None:
        if not self.screen.is_mounted:
            return
        self.screen.run_worker(
            self.engine.refresh(),
            group="board-refresh",
            exclusive=True,
            exit_on_error=False,
        )

    # -- rendering -----------------------------------------------------------

    def schedule_render(self) -> None:
        """Render the engine's latest snapshot; bursts collapse into one pass."""
        self._render_dirty = True
        if self._rendering or not self.screen.is_mounted:
            return
        self._rendering = True
        self.screen.run_worker(self._render_loop(), group="board-render", exit_on_error=False)

    async def _render_loop(self) -> None:
        try:
            while self._render_dirty:
                self._render_dirty = False
                await self.render(self.engine.snapshot)
        finally:
            self._rendering = False

    async def render(self, snapshot: BoardSnapshot) -> None:
        try:
            board = self.screen.query_one("#board", Horizontal)
        except NoMatches:
            return
        columns = list(board.query(SectionColumn))
        if [c.section_id for c in columns] == list(snapshot.lane_ids()) and columns:
            for column, section in zip(columns, snapshot.sections, strict=True):
                await column.update_section(section)
        else:
            await board.remove_children()
            if snapshot.sections:
                await board.mount_all([SectionColumn(section) for section in snapshot.sections])
            else:
                empty = Static("This project has no sections yet.", classes="board-empty")
                await board.mount(empty)
        log.debug("Rendered %d sections, %d tasks", len(snapshot.sections), snapshot.task_count)
        self.screen.after_render()

    def restore_focus(self, task_id: str) -> bool:
        for column in self.screen.query(SectionColumn):
            for card in column.get_cards():
                if card.task_id == task_id:
                    card.focus()
                    return True
        return False
