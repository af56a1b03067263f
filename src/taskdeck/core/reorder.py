"""Drop resolution and move application for board containers.

The same rules serve two levels: tasks inside sections and child tasks
inside parent tasks. Both are "lanes" of tasks addressed by id.

Placement rules:

- dropping on a task inserts the dragged task *before* it; the destination
  index is the over-task's index once the dragged task has been taken out
  of its lane;
- dropping on a lane appends to the end of that lane;
- a placement that lands where the task already is yields no move.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, Self

from taskdeck.core.models.entities import ChildTaskMove, TaskMove
from taskdeck.core.models.enums import DropTargetKind

if TYPE_CHECKING:
    from collections.abc import Sequence

    from taskdeck.core.models.entities import BoardSnapshot, ChildTaskBoard, Task


class Lanes(Protocol):
    """Ordered containers of tasks (sections, or child lists of parents)."""

    def lane_ids(self) -> tuple[str, ...]: ...

    def lane_items(self, lane_id: str) -> tuple[Task, ...] | None: ...

    def with_lane_items(self, changes: dict[str, tuple[Task, ...]]) -> Self: ...

    def locate(self, task_id: str) -> tuple[str, int] | None: ...

    @staticmethod
    def rebind(task: Task, lane_id: str) -> Task: ...


@dataclass(frozen=True, slots=True)
class Placement:
    """Where a dragged task comes from and where it goes."""

    task_id: str
    from_lane: str
    from_index: int
    to_lane: str
    to_index: int

    @property
    def crosses_lanes(self) -> bool:
        return self.from_lane != self.to_lane


def array_move[T](items: Sequence[T], from_index: int, to_index: int) -> tuple[T, ...]:
    """Move one element, keeping every other element's relative order."""
    moved = list(items)
    moved.insert(to_index, moved.pop(from_index))
    return tuple(moved)


def resolve_placement(
    lanes: Lanes,
    active_id: str,
    over_id: str | None,
    over_kind: DropTargetKind | None,
) -> Placement | None:
    """Translate a drag-end into a placement, or None for a no-op gesture."""
    if not over_id or over_kind is None:
        return None
    origin = lanes.locate(active_id)
    if origin is None:
        return None
    from_lane, from_index = origin

    if over_kind is DropTargetKind.SECTION:
        destination = lanes.lane_items(over_id)
        if destination is None:
            return None
        to_lane = over_id
        to_index = len(destination) - (1 if to_lane == from_lane else 0)
    elif over_kind is DropTargetKind.TASK:
        if over_id == active_id:
            return None
        target = lanes.locate(over_id)
        if target is None:
            return None
        to_lane, over_index = target
        # The over-task shifts up by one once the dragged task leaves a lane above it.
        if to_lane == from_lane and from_index < over_index:
            to_index = over_index - 1
        else:
            to_index = over_index
    else:
        return None

    if to_lane == from_lane and to_index == from_index:
        return None
    return Placement(active_id, from_lane, from_index, to_lane, to_index)


def relocate[L: Lanes](lanes: L, task_id: str, to_lane: str, to_index: int) -> L:
    """Return ``lanes`` with ``task_id`` moved to ``to_index`` of ``to_lane``.

    Total: an unknown task or lane leaves ``lanes`` unchanged, and an index
    past the end appends. Lanes that are not touched keep their identity.
    """
    origin = lanes.locate(task_id)
    destination = lanes.lane_items(to_lane)
    if origin is None or destination is None:
        return lanes
    from_lane, from_index = origin
    source = lanes.lane_items(from_lane)
    assert source is not None

    if from_lane == to_lane:
        index = min(to_index, len(source) - 1)
        if index == from_index:
            return lanes
        return lanes.with_lane_items({from_lane: array_move(source, from_index, index)})

    task = lanes.rebind(source[from_index], to_lane)
    remaining = tuple(t for t in source if t.id != task_id)
    index = min(to_index, len(destination))
    inserted = (*destination[:index], task, *destination[index:])
    return lanes.with_lane_items({from_lane: remaining, to_lane: inserted})


def step_target(
    lanes: Lanes, task_id: str, step: int
) -> tuple[str, DropTargetKind] | None:
    """Drop target that moves a task one slot up (``-1``) or down (``+1``)."""
    origin = lanes.locate(task_id)
    if origin is None:
        return None
    lane_id, index = origin
    items = lanes.lane_items(lane_id) or ()
    if step < 0:
        if index == 0:
            return None
        return items[index - 1].id, DropTargetKind.TASK
    if index >= len(items) - 1:
        return None
    if index + 2 < len(items):
        return items[index + 2].id, DropTargetKind.TASK
    return lane_id, DropTargetKind.SECTION


def neighbour_lane(lanes: Lanes, task_id: str, step: int) -> str | None:
    """Id of the lane ``step`` positions left/right of the task's lane."""
    origin = lanes.locate(task_id)
    if origin is None:
        return None
    lane_ids = lanes.lane_ids()
    position = lane_ids.index(origin[0]) + step
    if 0 <= position < len(lane_ids):
        return lane_ids[position]
    return None


def resolve_task_drop(
    snapshot: BoardSnapshot,
    active_id: str,
    over_id: str | None,
    over_kind: DropTargetKind | None,
) -> TaskMove | None:
    placement = resolve_placement(snapshot, active_id, over_id, over_kind)
    if placement is None:
        return None
    return TaskMove(
        task_id=placement.task_id,
        to_section_id=placement.to_lane,
        to_index=placement.to_index,
    )


def resolve_child_drop(
    board: ChildTaskBoard,
    active_id: str,
    over_id: str | None,
    over_kind: DropTargetKind | None,
) -> ChildTaskMove | None:
    placement = resolve_placement(board, active_id, over_id, over_kind)
    # Child tasks only reorder within their own parent.
    if placement is None or placement.crosses_lanes:
        return None
    return ChildTaskMove(
        task_id=placement.task_id,
        parent_task_id=placement.to_lane,
        to_index=placement.to_index,
    )


def apply_task_move(snapshot: BoardSnapshot, move: TaskMove) -> BoardSnapshot:
    return relocate(snapshot, move.task_id, move.to_section_id, move.to_index)


def apply_child_move(board: ChildTaskBoard, move: ChildTaskMove) -> ChildTaskBoard:
    return relocate(board, move.task_id, move.parent_task_id, move.to_index)
