"""TaskCard widget for a single task on the board."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

from textual.message import Message
from textual.reactive import reactive
from textual.widget import Widget
from textual.widgets import Label

from taskdeck.limits import DRAG_ACTIVATION_DISTANCE

if TYPE_CHECKING:
    from textual import events
    from textual.app import ComposeResult

    from taskdeck.core.models.entities import Task

_INVALID_ID_CHARS = re.compile(r"[^a-zA-Z0-9_-]")


def dom_id(prefix: str, raw_id: str) -> str:
    """Textual-safe widget id for an entity id."""
    return f"{prefix}-{_INVALID_ID_CHARS.sub('_', raw_id)}"


def truncate(text: str, max_length: int) -> str:
    if len(text) <= max_length:
        return text
    return text[: max_length - 3] + "..."


class TaskCard(Widget):
    """A card for one task; draggable with the mouse."""

    can_focus = True

    task_model: reactive[Task | None] = reactive(None, recompose=True)

    _pressed: bool = False
    _dragging: bool = False
    _press_x: int = 0
    _press_y: int = 0

    @dataclass
    class Selected(Message):
        task_id: str

    @dataclass
    class DragStarted(Message):
        task_id: str

    @dataclass
    class DragHover(Message):
        task_id: str
        screen_x: int
        screen_y: int

    @dataclass
    class DragEnded(Message):
        task_id: str
        screen_x: int
        screen_y: int

    def __init__(self, task: Task, **kwargs) -> None:
        super().__init__(id=dom_id("card", task.id), **kwargs)
        self.task_id = task.id
        self.set_reactive(TaskCard.task_model, task)

    def compose(self) -> ComposeResult:
        task = self.task_model
        if task is None:
            return
        yield Label(truncate(task.title, 24), classes="card-title")

        status_line = f"{task.priority.icon} {task.status.label}"
        yield Label(status_line, classes=f"card-status {task.priority.css_class}")

        meta = [f"#{task.short_id[:6]}"]
        if task.due_date is not None:
            meta.append(f"due {task.due_date:%m/%d}")
        if task.assignees:
            meta.append(truncate(", ".join(a.display_name for a in task.assignees), 14))
        yield Label("  ".join(meta), classes="card-meta")

    def on_mouse_down(self, event: events.MouseDown) -> None:
        if event.button != 1:
            return
        self._pressed = True
        self._press_x = event.screen_x
        self._press_y = event.screen_y
        self.capture_mouse()

    def on_mouse_move(self, event: events.MouseMove) -> None:
        if not self._pressed:
            return
        if not self._dragging:
            travelled = max(
                abs(event.screen_x - self._press_x), abs(event.screen_y - self._press_y)
            )
            if travelled < DRAG_ACTIVATION_DISTANCE:
                return
            self._dragging = True
            self.add_class("dragging")
            self.post_message(self.DragStarted(self.task_id))
        self.post_message(self.DragHover(self.task_id, event.screen_x, event.screen_y))

    def on_mouse_up(self, event: events.MouseUp) -> None:
        if not self._pressed:
            return
        was_dragging = self._dragging
        self._pressed = False
        self._dragging = False
        self.release_mouse()
        self.remove_class("dragging")

        if was_dragging:
            self.post_message(self.DragEnded(self.task_id, event.screen_x, event.screen_y))
        else:
            self.focus()
            self.post_message(self.Selected(self.task_id))
