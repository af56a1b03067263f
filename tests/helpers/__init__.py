"""Test helpers package."""

from tests.helpers.builders import (
    PROJECT_ID,
    arrangement,
    make_board,
    make_child_board,
    make_section,
    make_task,
)
from tests.helpers.fake_source import FakeBoardSource, recording_notify
from tests.helpers.wait import wait_for_modal, wait_for_pilot, wait_until

__all__ = [
    "PROJECT_ID",
    "FakeBoardSource",
    "arrangement",
    "make_board",
    "make_child_board",
    "make_section",
    "make_task",
    "recording_notify",
    "wait_for_modal",
    "wait_for_pilot",
    "wait_until",
]
