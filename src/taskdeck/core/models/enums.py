"""Core domain enums."""

from __future__ import annotations

from enum import StrEnum


class TaskStatus(StrEnum):
    """Task workflow status."""

    TODO = "todo"
    IN_PROGRESS = "in_progress"
    BLOCKED = "blocked"
    DONE = "done"

    @property
    def label(self) -> str:
        return {
            self.TODO: "To do",
            self.IN_PROGRESS: "In progress",
            self.BLOCKED: "Blocked",
            self.DONE: "Done",
        }[self]


class TaskPriority(StrEnum):
    """Task priority levels."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"

    @property
    def icon(self) -> str:
        """Short display glyph."""
        return {self.LOW: "▽", self.MEDIUM: "◇", self.HIGH: "△", self.URGENT: "▲"}[self]

    @property
    def css_class(self) -> str:
        """CSS class name for styling."""
        return self.value


class MoveItemType(StrEnum):
    """Kind of item a move relocates (wire value of ``itemType``)."""

    TASK = "task"
    CHILD_TASK = "childTask"


class DropTargetKind(StrEnum):
    """What a drag ended over: a container or an item inside it."""

    SECTION = "section"
    TASK = "task"
