"""Tests for the optimistic board state transitions."""

from __future__ import annotations

import pytest

from taskdeck.core.board_state import (
    Confirmed,
    MovePhase,
    Speculative,
    acknowledge,
    contains,
    mark_in_flight,
    receive_snapshot,
    rollback,
    speculate,
)
from taskdeck.core.models.entities import TaskMove
from taskdeck.core.reorder import apply_task_move
from tests.helpers import arrangement, make_board

pytestmark = pytest.mark.unit


def _move(task_id: str, section_id: str, index: int) -> TaskMove:
    return TaskMove(task_id=task_id, to_section_id=section_id, to_index=index)


@pytest.fixture
def board():
    return make_board(x=["A", "B", "C"], y=["D"])


class TestSpeculate:
    def test_applies_on_top_of_rendered_snapshot(self, board):
        state = speculate(Confirmed(board, 1), 1, _move("A", "y", 0), apply_task_move)
        assert isinstance(state, Speculative)
        assert arrangement(state.snapshot) == {"x": ["B", "C"], "y": ["A", "D"]}
        assert state.confirmed is board
        assert state.fetched_at == 1

    def test_stacks_gestures(self, board):
        state = speculate(Confirmed(board), 1, _move("A", "y", 0), apply_task_move)
        state = speculate(state, 2, _move("B", "y", 2), apply_task_move)
        assert [entry.move_id for entry in state.pending] == [1, 2]
        assert arrangement(state.snapshot) == {"x": ["C"], "y": ["A", "D", "B"]}

    def test_new_moves_are_queued(self, board):
        state = speculate(Confirmed(board), 1, _move("A", "y", 0), apply_task_move)
        assert state.pending[0].phase is MovePhase.QUEUED
        assert state.pending[0].acknowledged_at is None


class TestPhases:
    def test_mark_in_flight(self, board):
        state = speculate(Confirmed(board), 1, _move("A", "y", 0), apply_task_move)
        state = mark_in_flight(state, 1)
        assert state.pending[0].phase is MovePhase.IN_FLIGHT

    def test_acknowledge_records_clock(self, board):
        state = speculate(Confirmed(board), 1, _move("A", "y", 0), apply_task_move)
        state = acknowledge(state, 1, 7)
        assert state.pending[0].phase is MovePhase.ACKNOWLEDGED
        assert state.pending[0].acknowledged_at == 7
        # Still rendered until a later fetch lands.
        assert arrangement(state.snapshot)["y"] == ["A", "D"]

    def test_confirmed_state_is_left_alone(self, board):
        state = Confirmed(board)
        assert mark_in_flight(state, 1) is state
        assert acknowledge(state, 1, 3) is state

    def test_contains(self, board):
        state = speculate(Confirmed(board), 4, _move("A", "y", 0), apply_task_move)
        assert contains(state, 4)
        assert not contains(state, 5)
        assert not contains(Confirmed(board), 4)


class TestRollback:
    def test_single_move_restores_pre_drag_snapshot(self, board):
        state = speculate(Confirmed(board, 2), 1, _move("A", "y", 0), apply_task_move)
        state = mark_in_flight(state, 1)
        restored, discarded = rollback(state, 1, apply_task_move)
        assert isinstance(restored, Confirmed)
        assert restored.snapshot is board
        assert restored.fetched_at == 2
        assert discarded == ()

    def test_discards_later_unacknowledged_moves(self, board):
        state = speculate(Confirmed(board), 1, _move("A", "x", 2), apply_task_move)
        state = speculate(state, 2, _move("B", "y", 0), apply_task_move)
        state = speculate(state, 3, _move("C", "y", 0), apply_task_move)
        state = acknowledge(state, 1, 5)
        state = mark_in_flight(state, 2)

        restored, discarded = rollback(state, 2, apply_task_move)

        assert discarded == (3,)
        assert [entry.move_id for entry in restored.pending] == [1]
        assert arrangement(restored.snapshot) == {"x": ["B", "C", "A"], "y": ["D"]}

    def test_keeps_later_acknowledged_moves(self, board):
        """Without serialization a later move may be accepted first."""
        state = speculate(Confirmed(board), 1, _move("A", "y", 0), apply_task_move)
        state = speculate(state, 2, _move("C", "x", 0), apply_task_move)
        state = acknowledge(state, 2, 4)

        restored, discarded = rollback(state, 1, apply_task_move)

        assert discarded == ()
        assert [entry.move_id for entry in restored.pending] == [2]
        assert arrangement(restored.snapshot) == {"x": ["C", "A", "B"], "y": ["D"]}

    def test_unknown_move_is_ignored(self, board):
        state = speculate(Confirmed(board), 1, _move("A", "y", 0), apply_task_move)
        assert rollback(state, 99, apply_task_move) == (state, ())
        confirmed = Confirmed(board)
        assert rollback(confirmed, 1, apply_task_move) == (confirmed, ())


class TestReceiveSnapshot:
    def test_adopts_newer_snapshot(self, board):
        fresh = make_board(x=["C", "B", "A"], y=["D"])
        state = receive_snapshot(Confirmed(board, 1), fresh, 2, apply_task_move)
        assert state == Confirmed(fresh, 2)

    def test_discards_stale_snapshot(self, board):
        state = Confirmed(board, 5)
        older = make_board(x=["C"], y=[])
        assert receive_snapshot(state, older, 4, apply_task_move) is state

    def test_rebases_pending_moves_onto_fetched_snapshot(self, board):
        state = speculate(Confirmed(board, 1), 1, _move("A", "y", 1), apply_task_move)
        # Someone else moved C to y meanwhile.
        fresh = make_board(x=["A", "B"], y=["D", "C"])

        state = receive_snapshot(state, fresh, 2, apply_task_move)

        assert isinstance(state, Speculative)
        assert state.confirmed is fresh
        assert arrangement(state.snapshot) == {"x": ["B"], "y": ["D", "A", "C"]}

    def test_acknowledged_move_survives_fetch_issued_before_ack(self, board):
        state = speculate(Confirmed(board, 1), 1, _move("A", "y", 0), apply_task_move)
        state = acknowledge(state, 1, 3)

        state = receive_snapshot(state, board, 2, apply_task_move)

        assert isinstance(state, Speculative)
        assert arrangement(state.snapshot) == {"x": ["B", "C"], "y": ["A", "D"]}

    def test_acknowledged_move_cleared_by_fetch_issued_after_ack(self, board):
        state = speculate(Confirmed(board, 1), 1, _move("A", "y", 0), apply_task_move)
        state = acknowledge(state, 1, 3)
        server = apply_task_move(board, _move("A", "y", 0))

        state = receive_snapshot(state, server, 4, apply_task_move)

        assert state == Confirmed(server, 4)
