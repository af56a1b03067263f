"""XDG-compliant path helpers for Taskdeck."""

from __future__ import annotations

import os
from pathlib import Path

from platformdirs import user_config_dir, user_data_dir


def get_data_dir() -> Path:
    """Get the data directory for Taskdeck (log exports)."""
    override = os.environ.get("TASKDECK_DATA_DIR")
    if override:
        return Path(override)
    return Path(user_data_dir("taskdeck"))


def get_config_dir() -> Path:
    """Get the config directory for Taskdeck (config.toml)."""
    override = os.environ.get("TASKDECK_CONFIG_DIR")
    if override:
        return Path(override)
    return Path(user_config_dir("taskdeck"))


def get_config_path() -> Path:
    """Get the path to the main config file."""
    return get_config_dir() / "config.toml"


def get_debug_log_path() -> Path:
    """Get the path to the debug log export file."""
    return get_data_dir() / "debug.log"


def ensure_directories() -> None:
    """Create all required directories if they don't exist."""
    get_data_dir().mkdir(parents=True, exist_ok=True)
    get_config_dir().mkdir(parents=True, exist_ok=True)
