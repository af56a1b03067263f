"""In-app debug log.

Python ``logging`` records and direct ``log(...)`` calls land in one ring
buffer, shown by the F12 modal and exportable to a file.
"""

from __future__ import annotations

import logging
import time
from collections import deque
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any

from taskdeck.limits import MAX_LOG_LINES, MAX_LOG_MESSAGE_LENGTH
from taskdeck.paths import get_debug_log_path

PACKAGE_LOGGER = "taskdeck"


class LogSource(Enum):
    TEXTUAL = "TEXTUAL"
    LOGGING = "LOGGING"


@dataclass(slots=True)
class LogEntry:
    group: str  # level name
    message: str
    timestamp: float
    source: LogSource

    @property
    def time_label(self) -> str:
        return datetime.fromtimestamp(self.timestamp).strftime("%H:%M:%S")


log_buffer: deque[LogEntry] = deque(maxlen=MAX_LOG_LINES)

_buffer_generation: int = 0
_handler: DebugLogHandler | None = None


def _clip(message: str) -> str:
    if len(message) > MAX_LOG_MESSAGE_LENGTH:
        return message[:MAX_LOG_MESSAGE_LENGTH] + "... [truncated]"
    return message


class TaskdeckLogger:
    """Callable logger writing straight into the buffer and Textual devtools."""

    def __call__(self, *args: object, **kwargs: Any) -> None:
        self.info(*args, **kwargs)

    def _log(self, level: str, *args: object, **kwargs: Any) -> None:
        output = " ".join(str(arg) for arg in args)
        if kwargs:
            pairs = " ".join(f"{key}={value!r}" for key, value in kwargs.items())
            output = f"{output} {pairs}" if output else pairs
        output = _clip(output)
        log_buffer.append(LogEntry(level, output, time.time(), LogSource.TEXTUAL))

        from textual import log as textual_log

        textual_log(output)

    def debug(self, *args: object, **kwargs: Any) -> None:
        self._log("DEBUG", *args, **kwargs)

    def info(self, *args: object, **kwargs: Any) -> None:
        self._log("INFO", *args, **kwargs)

    def warning(self, *args: object, **kwargs: Any) -> None:
        self._log("WARNING", *args, **kwargs)

    def error(self, *args: object, **kwargs: Any) -> None:
        self._log("ERROR", *args, **kwargs)


class DebugLogHandler(logging.Handler):
    """Copies ``logging`` records into the debug buffer."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            message = _clip(self.format(record))
            log_buffer.append(
                LogEntry(record.levelname, message, record.created, LogSource.LOGGING)
            )
        except Exception:
            self.handleError(record)


def setup_debug_logging(level: int = logging.DEBUG) -> DebugLogHandler:
    """Attach the buffer handler to the root logger. Idempotent."""
    global _handler

    if _handler is not None:
        return _handler

    handler = DebugLogHandler()
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    logging.getLogger().addHandler(handler)
    logging.getLogger(PACKAGE_LOGGER).setLevel(level)
    _handler = handler

    log.info("Debug logging initialized - press F12 to view logs")
    return handler


def teardown_debug_logging() -> None:
    """Detach the buffer handler (used when the app exits and in tests)."""
    global _handler
    if _handler is None:
        return
    logging.getLogger().removeHandler(_handler)
    _handler = None


def clear_log_buffer() -> None:
    global _buffer_generation
    log_buffer.clear()
    _buffer_generation += 1


def get_buffer_generation() -> int:
    """Incremented on every clear so viewers know to redraw from scratch."""
    return _buffer_generation


def export_logs_to_file(file_path: str | Path | None = None) -> tuple[Path, int]:
    """Write the buffer to ``file_path`` (default: the data dir's debug.log).

    Returns:
        The path written and the number of entries.
    """
    output_path = Path(file_path) if file_path is not None else get_debug_log_path()
    output_path.parent.mkdir(parents=True, exist_ok=True)
    entries = list(log_buffer)

    with output_path.open("w", encoding="utf-8") as f:
        f.write("# Taskdeck Debug Log Export\n")
        f.write(f"# Entries: {len(entries)} (generation {_buffer_generation})\n\n")
        for entry in entries:
            stamp = datetime.fromtimestamp(entry.timestamp).strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]
            tag = "[PY]" if entry.source is LogSource.LOGGING else "[TX]"
            f.write(f"{stamp} {tag} [{entry.group}] {entry.message}\n")

    return output_path, len(entries)


log = TaskdeckLogger()
