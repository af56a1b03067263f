"""Configuration loader for Taskdeck."""

from __future__ import annotations

import asyncio
import os
import tempfile
import tomllib
from pathlib import Path
from typing import Literal

import tomlkit
from pydantic import BaseModel, Field, ValidationError, field_validator

from taskdeck.core.errors import ConfigError
from taskdeck.limits import (
    BOARD_SYNC_FAST_INTERVAL_SECONDS,
    BOARD_SYNC_IDLE_INTERVAL_SECONDS,
    HTTP_TIMEOUT,
)
from taskdeck.paths import ensure_directories, get_config_path

type BoardViewLiteral = Literal["board", "list"]

BOARD_VIEW_VALUES = frozenset({"board", "list"})
DEFAULT_API_URL = "http://localhost:5000"


def _write_atomically(path: Path, content: str) -> None:
    """Replace ``path`` with ``content`` without leaving a half-written file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=".tmp_")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(content)
        Path(tmp_name).replace(path)
    except Exception:
        Path(tmp_name).unlink(missing_ok=True)
        raise


class ApiConfig(BaseModel):
    """Connection settings for the board REST API."""

    base_url: str = Field(default=DEFAULT_API_URL, description="Base URL of the REST API")
    token: str = Field(default="", description="Bearer token (empty = no Authorization header)")
    tenant_id: str = Field(default="", description="Tenant sent as X-Tenant-Id (empty = none)")
    timeout_seconds: float = Field(default=HTTP_TIMEOUT, gt=0)

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


class BoardConfig(BaseModel):
    """Board synchronisation behaviour."""

    serialize_moves: bool = Field(
        default=True, description="Persist drag moves one at a time in gesture order"
    )
    resync_on_failure: bool = Field(
        default=False, description="Refetch the board after a move fails"
    )
    fast_poll_seconds: float = Field(default=BOARD_SYNC_FAST_INTERVAL_SECONDS, gt=0)
    idle_poll_seconds: float = Field(default=BOARD_SYNC_IDLE_INTERVAL_SECONDS, gt=0)


class UIConfig(BaseModel):
    """UI-related user preferences."""

    last_view: BoardViewLiteral = Field(default="board", description="View shown on open")

    @field_validator("last_view", mode="before")
    @classmethod
    def validate_last_view(cls, value: object) -> str:
        """Gracefully coerce unknown views to the board."""
        if isinstance(value, str) and value in BOARD_VIEW_VALUES:
            return value
        return "board"


class TaskdeckConfig(BaseModel):
    """Root configuration model."""

    api: ApiConfig = Field(default_factory=ApiConfig)
    board: BoardConfig = Field(default_factory=BoardConfig)
    ui: UIConfig = Field(default_factory=UIConfig)

    @classmethod
    def load(cls, config_path: Path | None = None) -> TaskdeckConfig:
        """Load configuration from TOML file or use defaults.

        Environment variables ``TASKDECK_API_URL`` and ``TASKDECK_API_TOKEN``
        override the file.
        """
        ensure_directories()
        if config_path is None:
            config_path = get_config_path()

        data: dict[str, object] = {}
        if config_path.exists():
            try:
                with open(config_path, "rb") as f:
                    data = tomllib.load(f)
            except (OSError, tomllib.TOMLDecodeError) as exc:
                raise ConfigError(f"Cannot read {config_path}: {exc}") from exc

        try:
            config = cls.model_validate(data)
        except ValidationError as exc:
            raise ConfigError(f"Invalid configuration in {config_path}: {exc}") from exc
        return config.with_overrides(
            api_url=os.environ.get("TASKDECK_API_URL"),
            token=os.environ.get("TASKDECK_API_TOKEN"),
        )

    def with_overrides(
        self,
        *,
        api_url: str | None = None,
        token: str | None = None,
        tenant_id: str | None = None,
    ) -> TaskdeckConfig:
        """Return a copy with the given API settings replaced (None = keep)."""
        updates: dict[str, object] = {}
        if api_url:
            updates["base_url"] = api_url.rstrip("/")
        if token is not None:
            updates["token"] = token
        if tenant_id is not None:
            updates["tenant_id"] = tenant_id
        if not updates:
            return self
        return self.model_copy(update={"api": self.api.model_copy(update=updates)})

    def to_toml(self) -> str:
        """Render the configuration as a TOML document."""
        doc = tomlkit.document()
        for section_name in ("api", "board", "ui"):
            section: BaseModel = getattr(self, section_name)
            table = tomlkit.table()
            for key, value in section.model_dump().items():
                if value is not None:
                    table[key] = value
            doc[section_name] = table
        return tomlkit.dumps(doc)

    async def save(self, path: Path) -> None:
        """Serialize current config to TOML file.

        Args:
            path: Path to write config file (created if missing)
        """
        await asyncio.to_thread(_write_atomically, path, self.to_toml())

    async def update_ui_preferences(
        self,
        path: Path,
        *,
        last_view: BoardViewLiteral | None = None,
    ) -> None:
        """Update UI preferences in existing TOML file (preserves comments).

        Args:
            path: Path to config file (created if missing)
            last_view: View to reopen next time (None = no change)
        """
        import aiofiles

        if path.exists():
            async with aiofiles.open(path, encoding="utf-8") as f:
                content = await f.read()
            doc = tomlkit.parse(content)
        else:
            doc = tomlkit.document()

        if "ui" not in doc:
            doc["ui"] = tomlkit.table()

        if last_view is not None:
            doc["ui"]["last_view"] = last_view  # type: ignore[index]
            self.ui = self.ui.model_copy(update={"last_view": last_view})

        await asyncio.to_thread(_write_atomically, path, tomlkit.dumps(doc))
