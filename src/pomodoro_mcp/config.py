"""Configuration management for Pomodoro MCP."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Annotated
import os

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from .timer.accounting import MAX_DURATION_MIN


class PomodoroSettings(BaseSettings):
    """Runtime configuration sourced from environment variables and optional .env file."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    state_path: Path = Field(
        default=Path("./storage/pomodoro.db"), validation_alias="POMODORO_STATE_PATH"
    )
    preset_paths: Annotated[tuple[Path, ...], NoDecode] = Field(
        default=(Path("presets"),), validation_alias="POMODORO_PRESET_PATHS"
    )
    log_level: str = Field(default="INFO", validation_alias="POMODORO_LOG_LEVEL")
    history_limit: int = Field(default=30, validation_alias="POMODORO_HISTORY_LIMIT")
    default_duration_min: float = Field(
        default=25, validation_alias="POMODORO_DEFAULT_DURATION_MIN"
    )
    tick_interval_minutes: int = Field(default=1, validation_alias="POMODORO_TICK_MINUTES")
    notifications_enabled: bool = Field(
        default=True, validation_alias="POMODORO_NOTIFICATIONS"
    )
    notify_command: str | None = Field(default=None, validation_alias="POMODORO_NOTIFY_COMMAND")

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        normalized = value.strip().upper()
        if normalized not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}:
            raise ValueError(
                "POMODORO_LOG_LEVEL must be one of CRITICAL, ERROR, WARNING, INFO, DEBUG"
            )
        return normalized

    @field_validator("preset_paths", mode="before")
    @classmethod
    def _parse_preset_paths(cls, value):
        if value is None or value == "":
            return (Path("presets"),)
        if isinstance(value, (list, tuple)):
            return tuple(Path(str(item)) for item in value)
        if isinstance(value, str):
            parts = [part.strip() for part in value.split(os.pathsep) if part.strip()]
            return tuple(Path(part) for part in parts) or (Path("presets"),)
        raise TypeError("POMODORO_PRESET_PATHS must be a list of paths or a path-separated string")

    @field_validator("history_limit", "tick_interval_minutes")
    @classmethod
    def _validate_positive_int(cls, value: int) -> int:
        if value < 1:
            raise ValueError("POMODORO_HISTORY_LIMIT and POMODORO_TICK_MINUTES must be >= 1")
        return value

    @field_validator("default_duration_min")
    @classmethod
    def _validate_default_duration(cls, value: float) -> float:
        if not 0 < value <= MAX_DURATION_MIN:
            raise ValueError(
                f"POMODORO_DEFAULT_DURATION_MIN must be > 0 and <= {MAX_DURATION_MIN}"
            )
        return value


@lru_cache(maxsize=1)
def get_settings() -> PomodoroSettings:
    """Return cached settings instance."""

    settings = PomodoroSettings()
    if str(settings.state_path) != ":memory:":
        settings.state_path = settings.state_path.expanduser().resolve()
    settings.preset_paths = tuple(path.expanduser().resolve() for path in settings.preset_paths)
    return settings


__all__ = ["PomodoroSettings", "get_settings"]
