"""Builders for board fixtures."""

from __future__ import annotations

from taskdeck.core.models.entities import (
    BoardSnapshot,
    ChildTaskBoard,
    ChildTaskGroup,
    SectionWithTasks,
    Task,
)
from taskdeck.core.models.enums import TaskPriority, TaskStatus

PROJECT_ID = "proj-1"


def make_task(
    task_id: str,
    *,
    section_id: str | None = None,
    parent_task_id: str | None = None,
    title: str | None = None,
    priority: TaskPriority = TaskPriority.MEDIUM,
    status: TaskStatus = TaskStatus.TODO,
) -> Task:
    return Task(
        id=task_id,
        project_id=PROJECT_ID,
        section_id=section_id,
        parent_task_id=parent_task_id,
        title=title or f"Task {task_id}",
        priority=priority,
        status=status,
    )


def make_section(section_id: str, task_ids: list[str], *, order_index: int = 0) -> SectionWithTasks:
    return SectionWithTasks(
        id=section_id,
        project_id=PROJECT_ID,
        name=section_id.title(),
        order_index=order_index,
        tasks=tuple(make_task(tid, section_id=section_id) for tid in task_ids),
    )


def make_board(**sections: list[str]) -> BoardSnapshot:
    """``make_board(todo=["A", "B"], done=[])`` in keyword order."""
    return BoardSnapshot.from_sections(
        [
            make_section(section_id, task_ids, order_index=index)
            for index, (section_id, task_ids) in enumerate(sections.items())
        ]
    )


def make_child_board(**groups: list[str]) -> ChildTaskBoard:
    return ChildTaskBoard(
        groups=tuple(
            ChildTaskGroup(
                parent_task_id=parent_id,
                tasks=tuple(make_task(tid, parent_task_id=parent_id) for tid in task_ids),
            )
            for parent_id, task_ids in groups.items()
        )
    )


def arrangement(board: BoardSnapshot | ChildTaskBoard) -> dict[str, list[str]]:
    """Lane id -> task ids, for compact assertions."""
    return {lane_id: list(task_ids) for lane_id, task_ids in board.arrangement()}
