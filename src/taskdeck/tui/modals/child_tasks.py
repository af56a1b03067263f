"""Modal listing a task's child tasks, reorderable in place."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import TYPE_CHECKING

from textual.containers import Vertical, VerticalScroll
from textual.errors import NoWidget
from textual.screen import ModalScreen
from textual.widgets import Footer, Label, Rule

from taskdeck.core.engine import ChildTaskReorderEngine
from taskdeck.core.errors import BoardDataSourceError
from taskdeck.core.models.enums import DropTargetKind
from taskdeck.keybindings import CHILD_TASKS_BINDINGS
from taskdeck.limits import SHUTDOWN_TIMEOUT
from taskdeck.tui.widgets.card import TaskCard, truncate
from taskdeck.tui.widgets.column import drop_target_for

if TYPE_CHECKING:
    from textual.app import ComposeResult

    from taskdeck.core.engine import Severity
    from taskdeck.core.events import EventBus
    from taskdeck.core.models.entities import ChildTaskBoard, Task
    from taskdeck.core.ports import BoardDataSource

log = logging.getLogger(__name__)


class ChildTaskModal(ModalScreen[None]):
    BINDINGS = CHILD_TASKS_BINDINGS

    def __init__(
        self,
        source: BoardDataSource,
        project_id: str,
        parent: Task,
        *,
        serialize_moves: bool = True,
        resync_on_failure: bool = False,
        event_bus: EventBus | None = None,
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self.parent_task = parent
        self.engine = ChildTaskReorderEngine(
            source,
            project_id,
            [parent.id],
            notify=self._notify_adapter,
            on_change=self._on_children_changed,
            event_bus=event_bus,
            serialize_moves=serialize_moves,
            resync_on_failure=resync_on_failure,
        )
        self._focus_task_id: str | None = None
        self._closing = False

    def _notify_adapter(
        self, message: str, *, title: str = "", severity: Severity = "information"
    ) -> None:
        self.notify(message, title=title, severity=severity)

    def compose(self) -> ComposeResult:
        with Vertical(id="child-tasks-container"):
            yield Label(
                f"Child tasks of {truncate(self.parent_task.title, 40)}", classes="modal-title"
            )
            yield Label(
                "[dim]shift+up/down to reorder | drag with the mouse | Escape to close[/dim]",
                classes="modal-subtitle",
            )
            yield Rule()
            loading = Label("Loading...", classes="empty-message")
            yield VerticalScroll(loading, id="child-task-list")
        yield Footer()

    async def on_mount(self) -> None:
        try:
            await self.engine.load()
        except BoardDataSourceError as exc:
            log.warning("Loading child tasks of %s failed: %s", self.parent_task.id, exc)
            await self._show_message(f"Could not load child tasks: {exc}")

    async def on_unmount(self) -> None:
        self._closing = True
        with contextlib.suppress(TimeoutError):
            await asyncio.wait_for(self.engine.wait_idle(), SHUTDOWN_TIMEOUT)
        await self.engine.aclose()

    def _on_children_changed(self, _board: ChildTaskBoard) -> None:
        if self._closing:
            return
        self.run_worker(
            self._render(), group="child-render", exclusive=True, exit_on_error=False
        )

    async def _show_message(self, text: str) -> None:
        listing = self.query_one("#child-task-list", VerticalScroll)
        await listing.remove_children()
        await listing.mount(Label(text, classes="empty-message"))

    async def _render(self) -> None:
        group = self.engine.snapshot.group(self.parent_task.id)
        tasks = group.tasks if group is not None else ()
        if not tasks:
            await self._show_message("No child tasks")
            return
        listing = self.query_one("#child-task-list", VerticalScroll)
        await listing.remove_children()
        await listing.mount_all([TaskCard(task) for task in tasks])
        focus_id = self._focus_task_id
        cards = list(listing.query(TaskCard))
        target = next((c for c in cards if c.task_id == focus_id), cards[0])
        target.focus()

    def _focused_task_id(self) -> str | None:
        focused = self.focused
        return focused.task_id if isinstance(focused, TaskCard) else None

    def action_reorder(self, step: int) -> None:
        task_id = self._focused_task_id()
        if task_id is None:
            return
        self._focus_task_id = task_id
        self.engine.step_child_task(task_id, step)

    def on_task_card_drag_ended(self, message: TaskCard.DragEnded) -> None:
        message.stop()
        try:
            widget, _ = self.get_widget_at(message.screen_x, message.screen_y)
        except NoWidget:
            widget = None
        target = drop_target_for(widget)
        if target is None and widget is not None and widget.id == "child-task-list":
            target = (self.parent_task.id, DropTargetKind.SECTION)
        over_id, over_kind = target if target is not None else (None, None)
        self._focus_task_id = message.task_id
        self.engine.drag_end(message.task_id, over_id, over_kind)

    def on_task_card_drag_started(self, message: TaskCard.DragStarted) -> None:
        message.stop()
        self.engine.drag_start(message.task_id)

    def on_task_card_drag_hover(self, message: TaskCard.DragHover) -> None:
        message.stop()

    def action_close(self) -> None:
        self.dismiss(None)
