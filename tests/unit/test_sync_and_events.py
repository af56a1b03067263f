"""Tests for the board sync cadence and the in-memory event bus."""

from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from taskdeck.core.events import BoardRefreshed, BoardRefreshFailed, InMemoryEventBus
from taskdeck.core.sync import BoardSyncState, poll_interval, transition_board_sync_state
from taskdeck.limits import BOARD_SYNC_FAST_TICKS_AFTER_ACTIVITY

pytestmark = pytest.mark.unit


class TestSyncTransitions:
    def test_activity_switches_to_fast(self):
        transition = transition_board_sync_state(
            current_state=BoardSyncState.IDLE, fast_ticks_remaining=0, has_activity=True
        )
        assert transition.state is BoardSyncState.FAST
        assert transition.fast_ticks_remaining == BOARD_SYNC_FAST_TICKS_AFTER_ACTIVITY

    def test_fast_counts_down_then_idles(self):
        state, remaining = BoardSyncState.FAST, 3
        seen = []
        for _ in range(4):
            transition = transition_board_sync_state(
                current_state=state, fast_ticks_remaining=remaining, has_activity=False
            )
            state, remaining = transition.state, transition.fast_ticks_remaining
            seen.append(state)
        assert seen == [
            BoardSyncState.FAST,
            BoardSyncState.FAST,
            BoardSyncState.IDLE,
            BoardSyncState.IDLE,
        ]

    def test_poll_interval(self):
        assert poll_interval(BoardSyncState.FAST, fast_seconds=1.0, idle_seconds=5.0) == 1.0
        assert poll_interval(BoardSyncState.IDLE, fast_seconds=1.0, idle_seconds=5.0) == 5.0

    @given(
        state=st.sampled_from(list(BoardSyncState)),
        remaining=st.integers(min_value=0, max_value=20),
        activity=st.booleans(),
    )
    def test_remaining_ticks_never_negative(self, state, remaining, activity):
        transition = transition_board_sync_state(
            current_state=state, fast_ticks_remaining=remaining, has_activity=activity
        )
        assert transition.fast_ticks_remaining >= 0
        if transition.state is BoardSyncState.IDLE:
            assert transition.fast_ticks_remaining == 0


class TestEventBus:
    async def test_handlers_filter_by_type(self):
        bus = InMemoryEventBus()
        refreshed, everything = [], []
        bus.add_handler(refreshed.append, BoardRefreshed)
        bus.add_handler(everything.append)

        await bus.publish(BoardRefreshed("board:p", 3, 0))
        await bus.publish(BoardRefreshFailed("board:p", "down"))

        assert len(refreshed) == 1
        assert len(everything) == 2

    async def test_failing_handler_does_not_stop_fan_out(self):
        bus = InMemoryEventBus()
        received = []

        def broken(_event):
            raise RuntimeError("boom")

        bus.add_handler(broken)
        bus.add_handler(received.append)
        await bus.publish(BoardRefreshFailed("board:p", "down"))
        assert len(received) == 1

    async def test_remove_handler(self):
        bus = InMemoryEventBus()
        received = []
        handler = received.append
        bus.add_handler(handler)
        bus.remove_handler(handler)
        await bus.publish(BoardRefreshFailed("board:p", "down"))
        assert received == []

    async def test_handlers_run_in_registration_order(self):
        bus = InMemoryEventBus()
        order = []
        bus.add_handler(lambda _event: order.append("first"))
        bus.add_handler(lambda _event: order.append("second"))
        await bus.publish(BoardRefreshed("board:p", 7, 1))
        assert order == ["first", "second"]

    async def test_remove_bound_method_handler(self):
        class Journal:
            def __init__(self):
                self.events = []

            def record(self, event):
                self.events.append(event)

        bus = InMemoryEventBus()
        journal = Journal()
        bus.add_handler(journal.record)
        bus.remove_handler(journal.record)
        assert bus.handler_count == 0
        await bus.publish(BoardRefreshFailed("board:p", "down"))
        assert journal.events == []

    def test_events_get_unique_ids(self):
        assert BoardRefreshed("s", 1, 0).event_id != BoardRefreshed("s", 1, 0).event_id
