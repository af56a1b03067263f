"""Core domain entities.

Wire shapes of the board REST API, parsed into immutable models. Every
collection is a tuple so snapshots can be shared between the confirmed and
speculative views without defensive copies.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime  # noqa: TC003 - Pydantic needs runtime access
from typing import Annotated, Literal, Self

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from taskdeck.core.models.enums import MoveItemType, TaskPriority, TaskStatus


class DomainModel(BaseModel):
    """Base model with common config."""

    model_config = ConfigDict(
        from_attributes=True,
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
        extra="ignore",
    )


class UserSummary(DomainModel):
    id: str
    name: str | None = None
    email: str | None = None


class TaskAssignee(DomainModel):
    """Assignment of a user to a task."""

    user_id: str
    user: UserSummary | None = None

    @property
    def display_name(self) -> str:
        if self.user is not None:
            return self.user.name or self.user.email or self.user_id
        return self.user_id


class Section(DomainModel):
    """Ordered, named grouping of tasks within a project."""

    id: str
    project_id: str | None = None
    name: str = ""
    order_index: int = 0
    created_at: datetime | None = None


class Task(DomainModel):
    """Unit of work (board card).

    Position inside a section is the tuple position in the owning
    container; ``order_index`` is informational only.
    """

    id: str
    project_id: str | None = None
    section_id: str | None = None
    parent_task_id: str | None = None
    title: str
    description: str | None = None
    status: TaskStatus = TaskStatus.TODO
    priority: TaskPriority = TaskPriority.MEDIUM
    start_date: datetime | None = None
    due_date: datetime | None = None
    order_index: int = 0
    assignees: tuple[TaskAssignee, ...] = ()
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def short_id(self) -> str:
        """Return shortened ID for display."""
        return self.id[:8]


class SectionWithTasks(Section):
    tasks: tuple[Task, ...] = ()


class BoardSnapshot(DomainModel):
    """Ordered sections, each with its ordered tasks."""

    sections: tuple[SectionWithTasks, ...] = ()

    @classmethod
    def from_sections(cls, sections: Sequence[SectionWithTasks]) -> Self:
        return cls(sections=tuple(sections))

    def section(self, section_id: str) -> SectionWithTasks | None:
        return next((s for s in self.sections if s.id == section_id), None)

    def locate(self, task_id: str) -> tuple[str, int] | None:
        """Return ``(section_id, index)`` of a task, or None."""
        for section in self.sections:
            for index, task in enumerate(section.tasks):
                if task.id == task_id:
                    return section.id, index
        return None

    def task(self, task_id: str) -> Task | None:
        for section in self.sections:
            for task in section.tasks:
                if task.id == task_id:
                    return task
        return None

    def arrangement(self) -> tuple[tuple[str, tuple[str, ...]], ...]:
        """Section ids with their task ids, in render order."""
        return tuple((s.id, tuple(t.id for t in s.tasks)) for s in self.sections)

    @property
    def task_count(self) -> int:
        return sum(len(s.tasks) for s in self.sections)

    # Container protocol used by taskdeck.core.reorder

    def lane_ids(self) -> tuple[str, ...]:
        return tuple(s.id for s in self.sections)

    def lane_items(self, lane_id: str) -> tuple[Task, ...] | None:
        section = self.section(lane_id)
        return None if section is None else section.tasks

    def with_lane_items(self, changes: dict[str, tuple[Task, ...]]) -> Self:
        """Return a snapshot with the given sections' tasks replaced.

        Sections not named in ``changes`` are reused as-is.
        """
        sections = tuple(
            s.model_copy(update={"tasks": changes[s.id]}) if s.id in changes else s
            for s in self.sections
        )
        return self.model_copy(update={"sections": sections})

    @staticmethod
    def rebind(task: Task, lane_id: str) -> Task:
        if task.section_id == lane_id:
            return task
        return task.model_copy(update={"section_id": lane_id})


class ChildTaskGroup(DomainModel):
    """Child tasks of one parent task, in order."""

    parent_task_id: str
    tasks: tuple[Task, ...] = ()


class ChildTaskBoard(DomainModel):
    """Child-task lists of one or more parent tasks."""

    groups: tuple[ChildTaskGroup, ...] = ()

    def group(self, parent_task_id: str) -> ChildTaskGroup | None:
        return next((g for g in self.groups if g.parent_task_id == parent_task_id), None)

    def locate(self, task_id: str) -> tuple[str, int] | None:
        for group in self.groups:
            for index, task in enumerate(group.tasks):
                if task.id == task_id:
                    return group.parent_task_id, index
        return None

    def task(self, task_id: str) -> Task | None:
        location = self.locate(task_id)
        if location is None:
            return None
        group = self.group(location[0])
        assert group is not None
        return group.tasks[location[1]]

    def arrangement(self) -> tuple[tuple[str, tuple[str, ...]], ...]:
        return tuple((g.parent_task_id, tuple(t.id for t in g.tasks)) for g in self.groups)

    def lane_ids(self) -> tuple[str, ...]:
        return tuple(g.parent_task_id for g in self.groups)

    def lane_items(self, lane_id: str) -> tuple[Task, ...] | None:
        group = self.group(lane_id)
        return None if group is None else group.tasks

    def with_lane_items(self, changes: dict[str, tuple[Task, ...]]) -> Self:
        groups = tuple(
            g.model_copy(update={"tasks": changes[g.parent_task_id]})
            if g.parent_task_id in changes
            else g
            for g in self.groups
        )
        return self.model_copy(update={"groups": groups})

    @staticmethod
    def rebind(task: Task, lane_id: str) -> Task:
        if task.parent_task_id == lane_id:
            return task
        return task.model_copy(update={"parent_task_id": lane_id})


class TaskMove(DomainModel):
    """Relocate a task to ``to_index`` of section ``to_section_id``."""

    item_type: Literal[MoveItemType.TASK] = MoveItemType.TASK
    task_id: str
    to_section_id: str
    to_index: int = Field(ge=0)

    @property
    def lane_id(self) -> str:
        return self.to_section_id


class ChildTaskMove(DomainModel):
    """Relocate a child task to ``to_index`` under ``parent_task_id``."""

    item_type: Literal[MoveItemType.CHILD_TASK] = MoveItemType.CHILD_TASK
    task_id: str
    parent_task_id: str
    to_index: int = Field(ge=0)

    @property
    def lane_id(self) -> str:
        return self.parent_task_id


Move = Annotated[TaskMove | ChildTaskMove, Field(discriminator="item_type")]


class MoveBatch(DomainModel):
    """Request body of the reorder endpoint."""

    moves: tuple[Move, ...] = Field(min_length=1)


class MoveAck(DomainModel):
    """Success body of the reorder endpoint."""

    success: bool = True


class ApiErrorPayload(DomainModel):
    """Error body returned by the REST API."""

    error: str = "Unknown error"
    message: str | None = None

    @property
    def text(self) -> str:
        return self.message or self.error
