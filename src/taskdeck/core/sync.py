"""Background refetch cadence for an open board."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from taskdeck.limits import BOARD_SYNC_FAST_TICKS_AFTER_ACTIVITY


class BoardSyncState(StrEnum):
    FAST = "fast"
    IDLE = "idle"


@dataclass(frozen=True)
class BoardSyncTransition:
    state: BoardSyncState
    fast_ticks_remaining: int


def transition_board_sync_state(
    *,
    current_state: BoardSyncState,
    fast_ticks_remaining: int,
    has_activity: bool,
    fast_ticks_after_activity: int = BOARD_SYNC_FAST_TICKS_AFTER_ACTIVITY,
) -> BoardSyncTransition:
    """Poll quickly for a few ticks after local activity, then settle to idle."""
    if has_activity:
        return BoardSyncTransition(BoardSyncState.FAST, fast_ticks_after_activity)
    if current_state is BoardSyncState.FAST and fast_ticks_remaining > 1:
        return BoardSyncTransition(BoardSyncState.FAST, fast_ticks_remaining - 1)
    return BoardSyncTransition(BoardSyncState.IDLE, 0)


def poll_interval(state: BoardSyncState, *, fast_seconds: float, idle_seconds: float) -> float:
    return fast_seconds if state is BoardSyncState.FAST else idle_seconds
