"""Optimistic reorder engines.

An engine mirrors one board (or a set of child-task lists), applies drag
gestures to that mirror immediately, persists each gesture as exactly one
move, and reconciles with the data source afterwards: a refetch on success,
a rollback plus one notification on failure.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
from typing import TYPE_CHECKING, ClassVar, Literal, Protocol

from taskdeck.core.board_state import (
    Confirmed,
    acknowledge,
    contains,
    mark_in_flight,
    receive_snapshot,
    rollback,
    speculate,
)
from taskdeck.core.errors import BoardDataSourceError
from taskdeck.core.events import (
    BoardRefreshed,
    BoardRefreshFailed,
    MoveCommitted,
    MoveRolledBack,
    MoveSpeculated,
)
from taskdeck.core.models.entities import (
    BoardSnapshot,
    ChildTaskBoard,
    ChildTaskGroup,
    ChildTaskMove,
    TaskMove,
)
from taskdeck.core.models.enums import DropTargetKind
from taskdeck.core.reorder import (
    apply_child_move,
    apply_task_move,
    neighbour_lane,
    resolve_child_drop,
    resolve_task_drop,
    step_target,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Coroutine, Sequence
    from typing import Any

    from taskdeck.core.board_state import OptimisticState
    from taskdeck.core.events import DomainEvent, EventBus
    from taskdeck.core.ports import BoardDataSource

log = logging.getLogger(__name__)

type Severity = Literal["information", "warning", "error"]

MOVE_FAILED_TITLE = "Failed to move task"
MOVE_FAILED_MESSAGE = "The task could not be moved. Please try again."
REFRESH_FAILED_MESSAGE = "Could not refresh the board. Showing the last known state."


class Notify(Protocol):
    def __call__(self, message: str, *, title: str = "", severity: Severity = ...) -> None: ...


class OptimisticReorderEngine[S: (BoardSnapshot, ChildTaskBoard), M: (TaskMove, ChildTaskMove)]:
    """Shared speculate / persist / reconcile pipeline."""

    scope_kind: ClassVar[str] = "board"
    refresh_event_prefixes: ClassVar[tuple[str, ...]] = ()

    def __init__(
        self,
        source: BoardDataSource,
        project_id: str,
        *,
        notify: Notify | None = None,
        on_change: Callable[[S], None] | None = None,
        event_bus: EventBus | None = None,
        serialize_moves: bool = True,
        resync_on_failure: bool = False,
    ) -> None:
        self._source = source
        self.project_id = project_id
        self._notify = notify
        self._on_change = on_change
        self._event_bus = event_bus
        self._serialize_moves = serialize_moves
        self._resync_on_failure = resync_on_failure

        self._state: OptimisticState[S, M] = Confirmed(self._empty_snapshot())
        self._clock = 0
        self._move_ids = itertools.count(1)
        self._persist_lock = asyncio.Lock()
        self._background: set[asyncio.Task[None]] = set()
        self._refresh_failing = False
        self.active_task_id: str | None = None

    # -- hooks ---------------------------------------------------------------

    def _empty_snapshot(self) -> S:
        raise NotImplementedError

    async def _fetch(self) -> S:
        raise NotImplementedError

    def _apply(self, snapshot: S, move: M) -> S:
        raise NotImplementedError

    # -- views ---------------------------------------------------------------

    @property
    def scope(self) -> str:
        return f"{self.scope_kind}:{self.project_id}"

    @property
    def state(self) -> OptimisticState[S, M]:
        return self._state

    @property
    def snapshot(self) -> S:
        """What should be rendered right now."""
        return self._state.snapshot

    @property
    def confirmed_snapshot(self) -> S:
        return self._state.confirmed

    @property
    def pending_count(self) -> int:
        return len(self._state.pending)

    @property
    def is_speculative(self) -> bool:
        return not isinstance(self._state, Confirmed)

    # -- fetching ------------------------------------------------------------

    async def load(self) -> S:
        """Fetch and confirm the snapshot. Errors propagate to the caller."""
        issued_at = self._tick()
        snapshot = await self._fetch()
        self._adopt(snapshot, issued_at)
        return self.snapshot

    async def refresh(self) -> bool:
        """Background refetch; failures keep the current view."""
        issued_at = self._tick()
        try:
            snapshot = await self._fetch()
        except BoardDataSourceError as exc:
            log.warning("Refresh of %s failed: %s", self.scope, exc)
            if not self._refresh_failing:
                self._refresh_failing = True
                self._emit_notice(REFRESH_FAILED_MESSAGE, severity="warning")
            await self._publish(BoardRefreshFailed(self.scope, str(exc)))
            return False
        self._refresh_failing = False
        self._adopt(snapshot, issued_at)
        return True

    def schedule_refresh(self) -> None:
        self._spawn(self.refresh())

    def handle_remote_event(self, name: str, project_id: str | None = None) -> bool:
        """Schedule a refresh when a real-time event touches this board."""
        if project_id is not None and project_id != self.project_id:
            return False
        if not name.startswith(self.refresh_event_prefixes):
            return False
        log.debug("Remote event %s invalidates %s", name, self.scope)
        self.schedule_refresh()
        return True

    def _adopt(self, snapshot: S, issued_at: int) -> None:
        previous = self._state
        self._set_state(receive_snapshot(self._state, snapshot, issued_at, self._apply))
        if self._state is previous:
            log.debug("Discarded stale snapshot issued at %d for %s", issued_at, self.scope)
            return
        self._spawn(
            self._publish(BoardRefreshed(self.scope, issued_at, self.pending_count))
        )

    # -- drag surface --------------------------------------------------------

    def drag_start(self, active_id: str) -> None:
        """Remember the lifted task (drives the drag preview only)."""
        self.active_task_id = active_id

    def drag_cancel(self) -> None:
        self.active_task_id = None

    def _lands_in_place(self, task_id: str, lane_id: str, to_index: int) -> bool | None:
        """None when the task or lane is unknown; True when nothing would move."""
        snapshot = self.snapshot
        origin = snapshot.locate(task_id)
        destination = snapshot.lane_items(lane_id)
        if origin is None or destination is None:
            return None
        from_lane, from_index = origin
        if from_lane != lane_id:
            return False
        return min(to_index, len(destination) - 1) == from_index

    def submit(self, move: M) -> int:
        """Render ``move`` now and persist it in the background."""
        move_id = next(self._move_ids)
        self._set_state(speculate(self._state, move_id, move, self._apply))
        log.info("Move %d speculated on %s: %s", move_id, self.scope, move)
        self._spawn(self._persist(move_id, move))
        return move_id

    # -- persistence ---------------------------------------------------------

    async def _persist(self, move_id: int, move: M) -> None:
        await self._publish(MoveSpeculated(self.scope, move_id, move))
        if self._serialize_moves:
            async with self._persist_lock:
                await self._send(move_id, move)
        else:
            await self._send(move_id, move)

    async def _send(self, move_id: int, move: M) -> None:
        if not contains(self._state, move_id):
            log.debug("Move %d on %s was discarded before sending", move_id, self.scope)
            return
        self._set_state(mark_in_flight(self._state, move_id))
        try:
            await self._source.submit_moves(self.project_id, [move])
        except BoardDataSourceError as exc:
            await self._fail(move_id, move, str(exc))
            return
        except Exception:
            log.exception("Unexpected error persisting move %d on %s", move_id, self.scope)
            await self._fail(move_id, move, "unexpected error")
            return

        self._set_state(acknowledge(self._state, move_id, self._tick()))
        log.info("Move %d committed on %s", move_id, self.scope)
        await self._publish(MoveCommitted(self.scope, move_id, move))
        self.schedule_refresh()

    async def _fail(self, move_id: int, move: M, reason: str) -> None:
        state, discarded = rollback(self._state, move_id, self._apply)
        self._set_state(state)
        log.warning(
            "Move %d on %s failed (%s); rolled back, discarded %s",
            move_id,
            self.scope,
            reason,
            list(discarded),
        )
        self._emit_notice(MOVE_FAILED_MESSAGE, title=MOVE_FAILED_TITLE, severity="error")
        await self._publish(MoveRolledBack(self.scope, move_id, move, reason, discarded))
        if self._resync_on_failure:
            self.schedule_refresh()

    # -- lifecycle -----------------------------------------------------------

    async def wait_idle(self) -> None:
        """Wait until every scheduled persistence and refresh has finished."""
        while self._background:
            await asyncio.gather(*list(self._background))

    async def aclose(self) -> None:
        for task in list(self._background):
            task.cancel()
        await asyncio.gather(*list(self._background), return_exceptions=True)
        self._background.clear()

    # -- internals -----------------------------------------------------------

    def _tick(self) -> int:
        self._clock += 1
        return self._clock

    def _set_state(self, state: OptimisticState[S, M]) -> None:
        if state is self._state:
            return
        self._state = state
        if self._on_change is not None:
            self._on_change(state.snapshot)

    def _spawn(self, coro: Coroutine[Any, Any, Any]) -> None:
        task = asyncio.create_task(coro)
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    def _emit_notice(self, message: str, *, title: str = "", severity: Severity) -> None:
        if self._notify is not None:
            self._notify(message, title=title, severity=severity)

    async def _publish(self, event: DomainEvent) -> None:
        if self._event_bus is not None:
            await self._event_bus.publish(event)


class BoardReorderEngine(OptimisticReorderEngine[BoardSnapshot, TaskMove]):
    """Tasks across the sections of one project board."""

    scope_kind = "board"
    refresh_event_prefixes = ("section:", "task:")

    def _empty_snapshot(self) -> BoardSnapshot:
        return BoardSnapshot()

    async def _fetch(self) -> BoardSnapshot:
        return await self._source.fetch_board(self.project_id)

    def _apply(self, snapshot: BoardSnapshot, move: TaskMove) -> BoardSnapshot:
        return apply_task_move(snapshot, move)

    def drag_end(
        self,
        active_id: str,
        over_id: str | None,
        over_kind: DropTargetKind | None,
        *,
        active_kind: DropTargetKind = DropTargetKind.TASK,
    ) -> TaskMove | None:
        """Finish a gesture: speculate and persist, or ignore a no-op."""
        self.active_task_id = None
        if active_kind is not DropTargetKind.TASK:
            return None
        move = resolve_task_drop(self.snapshot, active_id, over_id, over_kind)
        if move is None:
            log.debug("Ignored no-op drop of %s over %s (%s)", active_id, over_id, over_kind)
            return None
        self.submit(move)
        return move

    def step_task(self, task_id: str, step: int) -> TaskMove | None:
        """Move a task one slot up or down within its section."""
        target = step_target(self.snapshot, task_id, step)
        if target is None:
            return None
        return self.drag_end(task_id, *target)

    def shift_task(self, task_id: str, step: int) -> TaskMove | None:
        """Move a task to the end of the section left or right of it."""
        lane_id = neighbour_lane(self.snapshot, task_id, step)
        if lane_id is None:
            return None
        return self.drag_end(task_id, lane_id, DropTargetKind.SECTION)

    def move_task(self, task_id: str, to_section_id: str, to_index: int) -> TaskMove | None:
        """Place a task at an explicit post-removal index (no drag involved)."""
        if to_index < 0 or self._lands_in_place(task_id, to_section_id, to_index) is not False:
            return None
        move = TaskMove(task_id=task_id, to_section_id=to_section_id, to_index=to_index)
        self.submit(move)
        return move


class ChildTaskReorderEngine(OptimisticReorderEngine[ChildTaskBoard, ChildTaskMove]):
    """Child tasks under one or more parent tasks."""

    scope_kind = "childtasks"
    refresh_event_prefixes = ("task:", "subtask:")

    def __init__(
        self,
        source: BoardDataSource,
        project_id: str,
        parent_task_ids: Sequence[str],
        **kwargs: Any,
    ) -> None:
        self.parent_task_ids = tuple(parent_task_ids)
        super().__init__(source, project_id, **kwargs)

    def _empty_snapshot(self) -> ChildTaskBoard:
        return ChildTaskBoard(
            groups=tuple(ChildTaskGroup(parent_task_id=pid) for pid in self.parent_task_ids)
        )

    async def _fetch(self) -> ChildTaskBoard:
        results = await asyncio.gather(
            *(self._source.fetch_child_tasks(pid) for pid in self.parent_task_ids)
        )
        return ChildTaskBoard(
            groups=tuple(
                ChildTaskGroup(parent_task_id=pid, tasks=tasks)
                for pid, tasks in zip(self.parent_task_ids, results, strict=True)
            )
        )

    def _apply(self, snapshot: ChildTaskBoard, move: ChildTaskMove) -> ChildTaskBoard:
        return apply_child_move(snapshot, move)

    def drag_end(
        self,
        active_id: str,
        over_id: str | None,
        over_kind: DropTargetKind | None,
    ) -> ChildTaskMove | None:
        self.active_task_id = None
        move = resolve_child_drop(self.snapshot, active_id, over_id, over_kind)
        if move is None:
            return None
        self.submit(move)
        return move

    def step_child_task(self, task_id: str, step: int) -> ChildTaskMove | None:
        target = step_target(self.snapshot, task_id, step)
        if target is None:
            return None
        return self.drag_end(task_id, *target)

    def move_child_task(
        self, task_id: str, parent_task_id: str, to_index: int
    ) -> ChildTaskMove | None:
        """Place a child task at an explicit index of the list it already belongs to."""
        if to_index < 0 or self._lands_in_place(task_id, parent_task_id, to_index) is not False:
            return None
        origin = self.snapshot.locate(task_id)
        if origin is None or origin[0] != parent_task_id:
            log.debug("Ignored cross-parent move of %s to %s", task_id, parent_task_id)
            return None
        move = ChildTaskMove(task_id=task_id, parent_task_id=parent_task_id, to_index=to_index)
        self.submit(move)
        return move
