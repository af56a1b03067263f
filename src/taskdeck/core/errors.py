"""Error taxonomy for Taskdeck."""

from __future__ import annotations


class TaskdeckError(Exception):
    """Base class for all Taskdeck errors."""


class ConfigError(TaskdeckError):
    """Configuration file is unreadable or invalid."""


class BoardDataSourceError(TaskdeckError):
    """A call to the board data source failed."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def __str__(self) -> str:
        if self.status_code is None:
            return self.message
        return f"{self.message} (HTTP {self.status_code})"


class BoardUnavailableError(BoardDataSourceError):
    """Transport failure, timeout, or server-side error."""


class MoveRejectedError(BoardDataSourceError):
    """The data source refused a move batch (client-side error)."""


class ResponseShapeError(BoardDataSourceError):
    """A response body did not match the expected shape."""
