"""Contract of the external board data source."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import Sequence

    from taskdeck.core.models.entities import BoardSnapshot, Move, MoveAck, Task


class BoardDataSource(Protocol):
    """Supplies board snapshots and persists move batches.

    Implementations raise ``BoardDataSourceError`` (or a subclass) for every
    failure; the whole batch succeeds or fails together.
    """

    async def fetch_board(self, project_id: str) -> BoardSnapshot:
        """Return the sections of a project, each with its ordered tasks."""
        ...

    async def fetch_child_tasks(self, parent_task_id: str) -> tuple[Task, ...]:
        """Return the ordered child tasks of a task."""
        ...

    async def submit_moves(self, project_id: str, moves: Sequence[Move]) -> MoveAck:
        """Persist a non-empty batch of moves."""
        ...
