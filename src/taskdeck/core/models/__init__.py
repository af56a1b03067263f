"""Board domain models."""

from taskdeck.core.models.entities import (
    BoardSnapshot,
    ChildTaskBoard,
    ChildTaskGroup,
    ChildTaskMove,
    Move,
    Section,
    SectionWithTasks,
    Task,
    TaskMove,
)
from taskdeck.core.models.enums import DropTargetKind, MoveItemType, TaskPriority, TaskStatus

__all__ = [
    "BoardSnapshot",
    "ChildTaskBoard",
    "ChildTaskGroup",
    "ChildTaskMove",
    "DropTargetKind",
    "Move",
    "MoveItemType",
    "Section",
    "SectionWithTasks",
    "Task",
    "TaskMove",
    "TaskPriority",
    "TaskStatus",
]
