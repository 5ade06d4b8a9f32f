"""Configuration loading and validation.

This module is responsible for:

- Loading `.env` into the process environment (without overriding existing vars).
- Converting environment variables into strongly-typed Pydantic models.
- Validating values and providing actionable error messages.

The event log core never reads the environment itself; it receives these
values from the entrypoint.
"""

import logging
import os

import dotenv
from pydantic import BaseModel, Field, field_validator

_LEVEL_NAMES = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


def _get_env_str(name: str, default: str) -> str:
    """Read a string env var, treating empty values as unset."""
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip()


def _get_env_optional(name: str) -> str | None:
    """Read an optional env var; empty values become None."""
    raw = os.getenv(name, "").strip()
    return raw or None


def _get_env_bool(name: str, default: bool) -> bool:
    """Read a boolean env var with a default."""
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    normalized = raw.strip().lower()
    if normalized in {"true", "1", "yes", "y", "on"}:
        return True
    if normalized in {"false", "0", "no", "n", "off"}:
        return False
    raise ValueError(f"{name} must be a boolean (true/false). Got: {raw!r}")


class EventLogConfig(BaseModel):
    """Where events are persisted and how diagnostics are surfaced."""

    file_path: str = Field(default="event_log.txt", description="Path of the durable event file")
    console_mirror: bool = Field(default=True, description="Echo every event to stdout")
    duckdb_path: str | None = Field(default=None, description="Optional DuckDB database for a second durable copy")
    load_on_start: bool = Field(default=True, description="Reload previous events from the file on startup")
    diagnostics_level: str = Field(default="WARNING", description="Log level for storage diagnostics")

    @field_validator("file_path")
    def validate_file_path(cls, v: str) -> str:
        """Validate the event file path is set."""
        if not v or not v.strip():
            raise ValueError("EVENT_LOG_FILE_PATH must not be empty.")
        return v

    @field_validator("diagnostics_level")
    def validate_diagnostics_level(cls, v: str) -> str:
        """Validate and normalize a stdlib logging level name."""
        normalized = v.strip().upper()
        if normalized not in _LEVEL_NAMES:
            raise ValueError(
                f"EVENT_LOG_DIAGNOSTICS_LEVEL must be one of {sorted(_LEVEL_NAMES)}. Got: {v!r}"
            )
        return normalized

    @property
    def diagnostics_level_number(self) -> int:
        """The configured level as a `logging` constant."""
        return logging.getLevelName(self.diagnostics_level)


class Config(BaseModel):
    """Top-level application configuration."""

    event_log: EventLogConfig = Field(default_factory=EventLogConfig, description="Event log configuration")


def load_config() -> Config:
    """Load application configuration from environment variables.

    Notes:
    - Calls `dotenv.load_dotenv()` so local `.env` values are visible to the process.
    - Raises `ValueError` with actionable messages when a value is malformed.
    """
    # Load variables from `.env` into the process environment (without overriding
    # already-set env vars).
    dotenv.load_dotenv()

    event_log = EventLogConfig(
        file_path=_get_env_str("EVENT_LOG_FILE_PATH", "event_log.txt"),
        console_mirror=_get_env_bool("EVENT_LOG_CONSOLE_MIRROR", True),
        duckdb_path=_get_env_optional("EVENT_LOG_DUCKDB_PATH"),
        load_on_start=_get_env_bool("EVENT_LOG_LOAD_ON_START", True),
        diagnostics_level=_get_env_str("EVENT_LOG_DIAGNOSTICS_LEVEL", "WARNING"),
    )
    return Config(event_log=event_log)
