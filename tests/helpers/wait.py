"""Polling helpers for engine and Textual pilot tests.

Engines persist and refetch in background tasks, and the board screen renders
from workers, so tests poll for an observable outcome instead of sleeping a
fixed amount.
"""

from __future__ import annotations

import asyncio
import os
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from textual.pilot import Pilot
    from textual.screen import Screen

# Shared CI machines run the pilot much slower than a laptop.
TIMEOUT_SCALE = 5.0 if os.environ.get("CI") else 1.0


async def _poll(
    ready: Callable[[], bool],
    idle: Callable[[float], Awaitable[object]],
    *,
    timeout: float,
    interval: float,
    description: str,
) -> None:
    budget = timeout * TIMEOUT_SCALE
    loop = asyncio.get_running_loop()
    give_up_at = loop.time() + budget
    while not ready():
        if loop.time() >= give_up_at:
            raise TimeoutError(f"{description} not reached within {budget:.1f}s")
        await idle(interval)


async def wait_until(
    predicate: Callable[[], bool],
    *,
    timeout: float = 5.0,
    check_interval: float = 0.05,
    description: str = "condition",
) -> None:
    """Poll ``predicate`` from plain asyncio code, sleeping between checks."""
    await _poll(
        predicate,
        asyncio.sleep,
        timeout=timeout,
        interval=check_interval,
        description=description,
    )


def _pump(pilot: Pilot) -> Callable[[float], Awaitable[None]]:
    async def idle(interval: float) -> None:
        await pilot.pause(interval)
        await pilot.pause()

    return idle


async def wait_for_pilot(
    pilot: Pilot,
    predicate: Callable[[], bool],
    *,
    timeout: float = 5.0,
    check_interval: float = 0.05,
    description: str = "condition",
) -> None:
    """Poll ``predicate`` while the app keeps draining its message queue."""
    await pilot.pause()
    await _poll(
        predicate,
        _pump(pilot),
        timeout=timeout,
        interval=check_interval,
        description=description,
    )


async def wait_for_modal[S: Screen](
    pilot: Pilot,
    modal_type: type[S],
    *,
    timeout: float = 5.0,
) -> S:
    """Return the first screen of ``modal_type`` once it is on the stack."""

    def find() -> S | None:
        return next(
            (screen for screen in pilot.app.screen_stack if isinstance(screen, modal_type)),
            None,
        )

    await wait_for_pilot(
        pilot,
        lambda: find() is not None,
        timeout=timeout,
        check_interval=0.1,
        description=f"{modal_type.__name__} on the screen stack",
    )
    modal = find()
    assert modal is not None
    return modal
