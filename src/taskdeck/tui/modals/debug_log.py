"""Debug log viewer modal (F12)."""

from __future__ import annotations

from typing import TYPE_CHECKING

from textual.containers import Vertical
from textual.screen import ModalScreen
from textual.widgets import Footer, Label, RichLog, Rule

from taskdeck.debug_log import (
    LogEntry,
    LogSource,
    clear_log_buffer,
    export_logs_to_file,
    get_buffer_generation,
    log_buffer,
)
from taskdeck.keybindings import DEBUG_LOG_BINDINGS

if TYPE_CHECKING:
    from textual.app import ComposeResult
    from textual.timer import Timer

_LEVEL_COLORS = {
    "DEBUG": "dim",
    "INFO": "blue",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "bold red",
}


def format_entry(entry: LogEntry) -> str:
    color = _LEVEL_COLORS.get(entry.group, "white")
    source = " [PY]" if entry.source is LogSource.LOGGING else ""
    return f"[{color}]{entry.time_label} [{entry.group}]{source}[/{color}] {entry.message}"


class DebugLogModal(ModalScreen[None]):
    BINDINGS = DEBUG_LOG_BINDINGS

    _refresh_timer: Timer | None = None

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._shown = 0
        self._generation = 0

    def compose(self) -> ComposeResult:
        with Vertical(id="debug-log-container"):
            yield Label("Debug Logs", classes="modal-title")
            yield Label(
                "[dim]F12 or Escape to close | c to clear | s to save[/dim]",
                classes="modal-subtitle",
            )
            yield Rule()
            yield RichLog(id="debug-log", highlight=True, markup=True, auto_scroll=True, wrap=True)
        yield Footer()

    def on_mount(self) -> None:
        self._generation = get_buffer_generation()
        self._update_logs()
        self._refresh_timer = self.set_interval(0.5, self._update_logs)

    def on_unmount(self) -> None:
        if self._refresh_timer is not None:
            self._refresh_timer.stop()
            self._refresh_timer = None

    @property
    def rich_log(self) -> RichLog:
        return self.query_one("#debug-log", RichLog)

    def _update_logs(self) -> None:
        generation = get_buffer_generation()
        size = len(log_buffer)
        # Cleared elsewhere, or the ring buffer dropped old lines: redraw.
        if generation != self._generation or size < self._shown:
            self._generation = generation
            self._shown = 0
            self.rich_log.clear()
        if size > self._shown:
            for entry in list(log_buffer)[self._shown :]:
                self.rich_log.write(format_entry(entry))
            self._shown = size

    def action_close(self) -> None:
        self.dismiss(None)

    def action_clear_logs(self) -> None:
        clear_log_buffer()
        self._generation = get_buffer_generation()
        self._shown = 0
        self.rich_log.clear()
        self.rich_log.write("[dim]Logs cleared[/dim]")

    def action_save_logs(self) -> None:
        try:
            path, count = export_logs_to_file()
        except OSError as exc:
            self.rich_log.write(f"[red]Failed to export logs: {exc}[/red]")
            return
        self.rich_log.write(f"[green]Exported {count} log entries to {path}[/green]")
