"""Pytest fixtures for Taskdeck tests."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING

import pytest
from hypothesis import Phase, Verbosity, settings

_TEST_BASE_DIR = Path(tempfile.mkdtemp(prefix="taskdeck-tests-"))
os.environ["TASKDECK_DATA_DIR"] = str(_TEST_BASE_DIR / "data")
os.environ["TASKDECK_CONFIG_DIR"] = str(_TEST_BASE_DIR / "config")
os.environ.pop("TASKDECK_API_URL", None)
os.environ.pop("TASKDECK_API_TOKEN", None)

if TYPE_CHECKING:
    from collections.abc import Generator

    from taskdeck.core.events import InMemoryEventBus
    from tests.helpers.fake_source import FakeBoardSource


settings.register_profile(
    "ci",
    max_examples=100,
    deadline=None,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
)
settings.register_profile(
    "dev",
    max_examples=20,
    deadline=500,
)
settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    deadline=None,
)
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "dev"))


@pytest.fixture(autouse=True)
def _isolated_debug_log() -> Generator[None, None, None]:
    """Keep the global debug buffer and handler from leaking between tests."""
    from taskdeck.debug_log import clear_log_buffer, teardown_debug_logging

    yield
    teardown_debug_logging()
    clear_log_buffer()


@pytest.fixture
def event_bus() -> InMemoryEventBus:
    from taskdeck.core.events import InMemoryEventBus

    return InMemoryEventBus()


@pytest.fixture
def board_source() -> FakeBoardSource:
    """Fake data source holding a three-section board.

    ``todo``: A, B, C, D
    ``doing``: E
    ``done``: (empty)
    """
    from tests.helpers.builders import make_board
    from tests.helpers.fake_source import FakeBoardSource

    return FakeBoardSource(
        make_board(todo=["A", "B", "C", "D"], doing=["E"], done=[]),
        children={"A": ["A1", "A2", "A3"]},
    )


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    return tmp_path / "config.toml"
