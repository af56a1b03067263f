"""Main board screen: sections side by side, drag to reorder."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import TYPE_CHECKING

from textual.containers import Horizontal
from textual.errors import NoWidget
from textual.screen import Screen
from textual.widgets import Footer, Header, Static

from taskdeck.core.engine import BoardReorderEngine
from taskdeck.core.errors import BoardDataSourceError
from taskdeck.core.models.enums import DropTargetKind
from taskdeck.keybindings import BOARD_BINDINGS
from taskdeck.limits import SHUTDOWN_TIMEOUT
from taskdeck.tui.modals.child_tasks import ChildTaskModal
from taskdeck.tui.screens.board_controller import BoardController
from taskdeck.tui.widgets.card import TaskCard
from taskdeck.tui.widgets.column import SectionColumn, drop_target_for

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from textual import events
    from textual.app import ComposeResult

    from taskdeck.config import BoardConfig, BoardViewLiteral
    from taskdeck.core.engine import Severity
    from taskdeck.core.events import EventBus
    from taskdeck.core.models.entities import BoardSnapshot
    from taskdeck.core.ports import BoardDataSource

log = logging.getLogger(__name__)

type DropTarget = tuple[str, DropTargetKind]


class BoardScreen(Screen):
    """Project board with optimistic drag-and-drop reordering."""

    BINDINGS = BOARD_BINDINGS

    def __init__(
        self,
        source: BoardDataSource,
        project_id: str,
        *,
        board_config: BoardConfig,
        initial_view: BoardViewLiteral = "board",
        persist_view: Callable[[BoardViewLiteral], Awaitable[None]] | None = None,
        event_bus: EventBus | None = None,
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self.project_id = project_id
        self._source = source
        self._board_config = board_config
        self.view: BoardViewLiteral = initial_view
        self._persist_view = persist_view
        self._event_bus = event_bus
        self.engine = BoardReorderEngine(
            source,
            project_id,
            notify=self._notify_adapter,
            on_change=self._on_board_changed,
            event_bus=event_bus,
            serialize_moves=board_config.serialize_moves,
            resync_on_failure=board_config.resync_on_failure,
        )
        self.controller = BoardController(self, self.engine, board_config)
        self.load_error: str | None = None
        self._focus_task_id: str | None = None
        # Keyboard drag
        self.lifted_task_id: str | None = None
        self.drop_cursor: tuple[int, int] | None = None
        # Mouse drag
        self._mouse_task_id: str | None = None
        self._mouse_target: DropTarget | None = None

    def _notify_adapter(
        self, message: str, *, title: str = "", severity: Severity = "information"
    ) -> None:
        self.notify(message, title=title, severity=severity)

    def compose(self) -> ComposeResult:
        yield Header()
        yield Static("Loading board...", id="board-status")
        yield Horizontal(id="board", classes="list-view" if self.view == "list" else "")
        yield Footer()

    async def on_mount(self) -> None:
        self.run_worker(self._load(), group="board-load", exclusive=True, exit_on_error=False)

    async def on_unmount(self) -> None:
        self.controller.stop_background_sync()
        with contextlib.suppress(TimeoutError):
            await asyncio.wait_for(self.engine.wait_idle(), SHUTDOWN_TIMEOUT)
        await self.engine.aclose()

    async def _load(self) -> None:
        try:
            await self.engine.load()
        except BoardDataSourceError as exc:
            log.warning("Loading board %s failed: %s", self.project_id, exc)
            self.load_error = str(exc)
            self.notify(
                f"Could not load board: {exc}", title="Board unavailable", severity="error"
            )
            self.update_status()
            return
        self.load_error = None
        self.controller.start_background_sync()
        self.update_status()

    def _on_board_changed(self, _snapshot: BoardSnapshot) -> None:
        self.controller.schedule_render()
        self.update_status()

    # =========================================================================
    # Status and rendering hooks
    # =========================================================================

    def update_status(self) -> None:
        if not self.is_mounted:
            return
        pending = self.engine.pending_count
        self.sub_title = (
            f"{self.project_id} · {pending} pending · sync {self.controller.sync_state}"
        )
        status = self.query_one("#board-status", Static)
        if self.load_error is not None:
            status.update(f"Board unavailable: {self.load_error} (r to retry)")
        elif self.lifted_task_id is not None:
            status.update("Moving task: arrows choose a spot, space drops, escape cancels")
        elif self._mouse_task_id is not None:
            status.update("Dragging task: release over a card or section")
        else:
            status.update("")

    def after_render(self) -> None:
        """Called by the controller after every render pass."""
        if self._focus_task_id is None or not self.controller.restore_focus(self._focus_task_id):
            if not isinstance(self.focused, TaskCard):
                self._focus_first_card()
        self._apply_drop_highlight()
        self.update_status()

    def _focus_first_card(self) -> None:
        for column in self._columns():
            if column.focus_card(0):
                return

    # =========================================================================
    # Helpers
    # =========================================================================

    def _columns(self) -> list[SectionColumn]:
        return list(self.query(SectionColumn))

    def get_focused_card(self) -> TaskCard | None:
        focused = self.focused
        return focused if isinstance(focused, TaskCard) else None

    def _focused_position(self) -> tuple[int, int] | None:
        for column_index, column in enumerate(self._columns()):
            card_index = column.get_focused_card_index()
            if card_index is not None:
                return column_index, card_index
        return None

    def on_descendant_focus(self, event: events.DescendantFocus) -> None:
        if isinstance(event.widget, TaskCard):
            self._focus_task_id = event.widget.task_id

    def _apply_drop_highlight(self) -> None:
        target = self._keyboard_target() if self.lifted_task_id else self._mouse_target
        moving = self.lifted_task_id or self._mouse_task_id
        for column in self._columns():
            column.set_class(
                target is not None
                and target[1] is DropTargetKind.SECTION
                and target[0] == column.section_id,
                "drop-end",
            )
            for card in column.get_cards():
                card.set_class(card.task_id == moving, "lifted")
                card.set_class(
                    target is not None
                    and target[1] is DropTargetKind.TASK
                    and target[0] == card.task_id,
                    "drop-target",
                )

    def _after_move(self, task_id: str, moved: bool) -> None:
        self._focus_task_id = task_id
        if moved:
            self.controller.mark_activity()
        self._apply_drop_highlight()
        self.update_status()

    # =========================================================================
    # Navigation
    # =========================================================================

    def action_focus_left(self) -> None:
        self._navigate(-1, 0)

    def action_focus_right(self) -> None:
        self._navigate(1, 0)

    def action_focus_up(self) -> None:
        self._navigate(0, -1)

    def action_focus_down(self) -> None:
        self._navigate(0, 1)

    def _navigate(self, dx: int, dy: int) -> None:
        if self.lifted_task_id is not None:
            self._move_drop_cursor(dx, dy)
            return
        columns = self._columns()
        position = self._focused_position()
        if position is None:
            self._focus_first_card()
            return
        column_index, card_index = position
        if dy:
            columns[column_index].focus_card(card_index + dy)
            return
        index = column_index + dx
        while 0 <= index < len(columns):
            if columns[index].focus_card(card_index):
                return
            index += dx

    # =========================================================================
    # Keyboard drag
    # =========================================================================

    def _keyboard_target(self) -> DropTarget | None:
        if self.drop_cursor is None:
            return None
        sections = self.engine.snapshot.sections
        column_index, slot = self.drop_cursor
        if not 0 <= column_index < len(sections):
            return None
        section = sections[column_index]
        if slot < len(section.tasks):
            return section.tasks[slot].id, DropTargetKind.TASK
        return section.id, DropTargetKind.SECTION

    def _move_drop_cursor(self, dx: int, dy: int) -> None:
        if self.drop_cursor is None:
            return
        sections = self.engine.snapshot.sections
        if not sections:
            return
        column_index, slot = self.drop_cursor
        column_index = max(0, min(column_index + dx, len(sections) - 1))
        slot = max(0, min(slot + dy, len(sections[column_index].tasks)))
        self.drop_cursor = (column_index, slot)
        self._apply_drop_highlight()

    def _lift(self) -> None:
        card = self.get_focused_card()
        if card is None:
            return
        position = self._focused_position()
        self.lifted_task_id = card.task_id
        self.drop_cursor = position
        self.engine.drag_start(card.task_id)
        self._apply_drop_highlight()
        self.update_status()

    def _drop(self) -> None:
        task_id = self.lifted_task_id
        if task_id is None:
            return
        target = self._keyboard_target()
        over_id, over_kind = target if target is not None else (None, None)
        self.lifted_task_id = None
        self.drop_cursor = None
        move = self.engine.drag_end(task_id, over_id, over_kind)
        self._after_move(task_id, move is not None)

    def action_lift_or_drop(self) -> None:
        if self.lifted_task_id is None:
            self._lift()
        else:
            self._drop()

    def action_cancel_drag(self) -> None:
        if self.lifted_task_id is None and self._mouse_task_id is None:
            return
        self.engine.drag_cancel()
        self.lifted_task_id = None
        self.drop_cursor = None
        self._mouse_task_id = None
        self._mouse_target = None
        self._apply_drop_highlight()
        self.update_status()

    # =========================================================================
    # Mouse drag
    # =========================================================================

    def _target_at(self, screen_x: int, screen_y: int) -> DropTarget | None:
        try:
            widget, _ = self.get_widget_at(screen_x, screen_y)
        except NoWidget:
            return None
        return drop_target_for(widget)

    def on_task_card_drag_started(self, message: TaskCard.DragStarted) -> None:
        if self.lifted_task_id is not None:
            self.action_cancel_drag()
        self._mouse_task_id = message.task_id
        self.engine.drag_start(message.task_id)
        self.update_status()

    def on_task_card_drag_hover(self, message: TaskCard.DragHover) -> None:
        target = self._target_at(message.screen_x, message.screen_y)
        if target != self._mouse_target:
            self._mouse_target = target
            self._apply_drop_highlight()

    def on_task_card_drag_ended(self, message: TaskCard.DragEnded) -> None:
        target = self._target_at(message.screen_x, message.screen_y)
        over_id, over_kind = target if target is not None else (None, None)
        self._mouse_task_id = None
        self._mouse_target = None
        move = self.engine.drag_end(message.task_id, over_id, over_kind)
        self._after_move(message.task_id, move is not None)

    def on_task_card_selected(self, message: TaskCard.Selected) -> None:
        self._focus_task_id = message.task_id

    # =========================================================================
    # Direct reorder
    # =========================================================================

    def action_reorder(self, step: int) -> None:
        card = self.get_focused_card()
        if card is None or self.lifted_task_id is not None:
            return
        move = self.engine.step_task(card.task_id, step)
        self._after_move(card.task_id, move is not None)

    def action_shift_section(self, step: int) -> None:
        card = self.get_focused_card()
        if card is None or self.lifted_task_id is not None:
            return
        move = self.engine.shift_task(card.task_id, step)
        self._after_move(card.task_id, move is not None)

    # =========================================================================
    # Other actions
    # =========================================================================

    def action_refresh(self) -> None:
        if self.load_error is not None:
            self.run_worker(self._load(), group="board-load", exclusive=True, exit_on_error=False)
            return
        self.controller.mark_activity()
        self.controller.run_refresh()

    def action_toggle_view(self) -> None:
        self.view = "list" if self.view == "board" else "board"
        self.query_one("#board", Horizontal).set_class(self.view == "list", "list-view")
        if self._persist_view is not None:
            self.run_worker(
                self._persist_view(self.view), group="persist-view", exit_on_error=False
            )

    def action_open_child_tasks(self) -> None:
        if self.lifted_task_id is not None:
            self._drop()
            return
        card = self.get_focused_card()
        if card is None:
            return
        task = self.engine.snapshot.task(card.task_id)
        if task is None:
            return
        self.app.push_screen(
            ChildTaskModal(
                self._source,
                self.project_id,
                task,
                serialize_moves=self._board_config.serialize_moves,
                resync_on_failure=self._board_config.resync_on_failure,
                event_bus=self._event_bus,
            )
        )

    def action_quit(self) -> None:
        self.app.exit()
