"""Optimistic board state.

The rendered board is either ``Confirmed`` (exactly what the data source
last returned) or ``Speculative`` (the confirmed snapshot with pending moves
replayed on top). Transitions are pure functions returning a new state; the
engine owns the only mutable reference.

Every fetch carries the logical-clock value at which it was issued.
Results older than the current confirmed snapshot are ignored, and
acknowledged moves are only dropped from the overlay once a fetch issued
after their acknowledgement has landed.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum, auto
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable


class MovePhase(Enum):
    """Lifecycle of a pending move."""

    QUEUED = auto()
    IN_FLIGHT = auto()
    ACKNOWLEDGED = auto()


@dataclass(frozen=True)
class PendingMove[M]:
    move_id: int
    move: M
    phase: MovePhase = MovePhase.QUEUED
    acknowledged_at: int | None = None


@dataclass(frozen=True)
class Confirmed[S]:
    snapshot: S
    fetched_at: int = 0

    @property
    def confirmed(self) -> S:
        return self.snapshot

    @property
    def pending(self) -> tuple[()]:
        return ()


@dataclass(frozen=True)
class Speculative[S, M]:
    confirmed: S
    fetched_at: int
    pending: tuple[PendingMove[M], ...]
    snapshot: S


type OptimisticState[S, M] = Confirmed[S] | Speculative[S, M]
type ApplyMove[S, M] = Callable[[S, M], S]


def _replay[S, M](base: S, pending: tuple[PendingMove[M], ...], apply: ApplyMove[S, M]) -> S:
    snapshot = base
    for entry in pending:
        snapshot = apply(snapshot, entry.move)
    return snapshot


def _settle[S, M](
    confirmed: S,
    fetched_at: int,
    pending: tuple[PendingMove[M], ...],
    apply: ApplyMove[S, M],
) -> OptimisticState[S, M]:
    if not pending:
        return Confirmed(confirmed, fetched_at)
    return Speculative(confirmed, fetched_at, pending, _replay(confirmed, pending, apply))


def speculate[S, M](
    state: OptimisticState[S, M],
    move_id: int,
    move: M,
    apply: ApplyMove[S, M],
) -> Speculative[S, M]:
    """Apply ``move`` on top of what is currently rendered."""
    entry = PendingMove(move_id, move)
    return Speculative(
        confirmed=state.confirmed,
        fetched_at=state.fetched_at,
        pending=(*state.pending, entry),
        snapshot=apply(state.snapshot, move),
    )


def mark_in_flight[S, M](state: OptimisticState[S, M], move_id: int) -> OptimisticState[S, M]:
    if isinstance(state, Confirmed):
        return state
    pending = tuple(
        replace(entry, phase=MovePhase.IN_FLIGHT) if entry.move_id == move_id else entry
        for entry in state.pending
    )
    return replace(state, pending=pending)


def acknowledge[S, M](
    state: OptimisticState[S, M], move_id: int, at: int
) -> OptimisticState[S, M]:
    """Record that the data source accepted a move.

    The move stays applied until a fetch issued at or after ``at`` lands.
    """
    if isinstance(state, Confirmed):
        return state
    pending = tuple(
        replace(entry, phase=MovePhase.ACKNOWLEDGED, acknowledged_at=at)
        if entry.move_id == move_id
        else entry
        for entry in state.pending
    )
    return replace(state, pending=pending)


def rollback[S, M](
    state: OptimisticState[S, M],
    move_id: int,
    apply: ApplyMove[S, M],
) -> tuple[OptimisticState[S, M], tuple[int, ...]]:
    """Drop a failed move and every later move not yet acknowledged.

    Returns the new state and the ids of the moves discarded along with the
    failed one. Earlier moves and acknowledged later moves are kept because
    the data source already holds or will hold them.
    """
    if isinstance(state, Confirmed):
        return state, ()
    position = next(
        (i for i, entry in enumerate(state.pending) if entry.move_id == move_id), None
    )
    if position is None:
        return state, ()
    earlier = state.pending[:position]
    later = state.pending[position + 1 :]
    kept_later = tuple(e for e in later if e.phase is MovePhase.ACKNOWLEDGED)
    discarded = tuple(e.move_id for e in later if e.phase is not MovePhase.ACKNOWLEDGED)
    new_state = _settle(state.confirmed, state.fetched_at, (*earlier, *kept_later), apply)
    return new_state, discarded


def receive_snapshot[S, M](
    state: OptimisticState[S, M],
    snapshot: S,
    issued_at: int,
    apply: ApplyMove[S, M],
) -> OptimisticState[S, M]:
    """Adopt a fetched snapshot, replaying whatever it cannot yet contain."""
    if issued_at < state.fetched_at:
        return state
    pending = tuple(
        entry
        for entry in state.pending
        if entry.acknowledged_at is None or entry.acknowledged_at > issued_at
    )
    return _settle(snapshot, issued_at, pending, apply)


def contains(state: OptimisticState[object, object], move_id: int) -> bool:
    return any(entry.move_id == move_id for entry in state.pending)
