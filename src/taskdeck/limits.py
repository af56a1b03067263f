"""Numeric limits and timeouts - no circular dependencies."""

from __future__ import annotations

HTTP_TIMEOUT = 10.0
SHUTDOWN_TIMEOUT = 5.0

BOARD_SYNC_FAST_INTERVAL_SECONDS = 1.0
BOARD_SYNC_IDLE_INTERVAL_SECONDS = 5.0
BOARD_SYNC_FAST_TICKS_AFTER_ACTIVITY = 5

# Cells the pointer must travel before a press becomes a drag.
DRAG_ACTIVATION_DISTANCE = 2

MAX_LOG_MESSAGE_LENGTH = 4096
MAX_LOG_LINES = 2000
NOTIFICATION_TITLE_MAX_LENGTH = 40
