"""Domain events and the in-process event bus."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Protocol
from uuid import uuid4

if TYPE_CHECKING:
    from taskdeck.core.models.entities import ChildTaskMove, TaskMove

log = logging.getLogger(__name__)


def _new_event_id() -> str:
    return uuid4().hex


def _now() -> datetime:
    return datetime.now()


class DomainEvent(Protocol):
    """Base protocol for all domain events."""

    @property
    def event_id(self) -> str: ...

    @property
    def occurred_at(self) -> datetime: ...


EventHandler = Callable[[DomainEvent], None]


class EventBus(Protocol):
    """Publishes engine events to whoever listens (UI bridges, journals)."""

    async def publish(self, event: DomainEvent) -> None:
        """Deliver ``event`` to every matching handler."""
        ...

    def add_handler(
        self,
        handler: EventHandler,
        event_type: type[DomainEvent] | None = None,
    ) -> None:
        """Register a sync handler for events (UI bridges use this)."""
        ...

    def remove_handler(self, handler: EventHandler) -> None:
        """Remove a previously registered handler."""
        ...


@dataclass(frozen=True)
class MoveSpeculated:
    scope: str
    move_id: int
    move: TaskMove | ChildTaskMove
    event_id: str = field(default_factory=_new_event_id)
    occurred_at: datetime = field(default_factory=_now)


@dataclass(frozen=True)
class MoveCommitted:
    scope: str
    move_id: int
    move: TaskMove | ChildTaskMove
    event_id: str = field(default_factory=_new_event_id)
    occurred_at: datetime = field(default_factory=_now)


@dataclass(frozen=True)
class MoveRolledBack:
    scope: str
    move_id: int
    move: TaskMove | ChildTaskMove
    reason: str
    discarded_move_ids: tuple[int, ...] = ()
    event_id: str = field(default_factory=_new_event_id)
    occurred_at: datetime = field(default_factory=_now)


@dataclass(frozen=True)
class BoardRefreshed:
    scope: str
    fetched_at: int
    pending_moves: int
    event_id: str = field(default_factory=_new_event_id)
    occurred_at: datetime = field(default_factory=_now)


@dataclass(frozen=True)
class BoardRefreshFailed:
    scope: str
    reason: str
    event_id: str = field(default_factory=_new_event_id)
    occurred_at: datetime = field(default_factory=_now)


class InMemoryEventBus:
    """Synchronous fan-out of engine events to registered handlers.

    Handlers run in registration order inside ``publish``. A handler that
    raises is logged and skipped so the remaining handlers still see the event.
    """

    def __init__(self) -> None:
        self._handlers: list[tuple[EventHandler, type[DomainEvent] | None]] = []

    @property
    def handler_count(self) -> int:
        return len(self._handlers)

    async def publish(self, event: DomainEvent) -> None:
        for handler, wanted in tuple(self._handlers):
            if wanted is not None and not isinstance(event, wanted):
                continue
            try:
                handler(event)
            except Exception:
                log.exception("Handler %r failed on %s", handler, type(event).__name__)

    def add_handler(
        self,
        handler: EventHandler,
        event_type: type[DomainEvent] | None = None,
    ) -> None:
        self._handlers.append((handler, event_type))

    def remove_handler(self, handler: EventHandler) -> None:
        self._handlers = [entry for entry in self._handlers if entry[0] != handler]
