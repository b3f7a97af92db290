from __future__ import annotations

from pathlib import Path
import os

import pytest
from pydantic import ValidationError

from pomodoro_mcp.config import PomodoroSettings, get_settings


def test_defaults() -> None:
    settings = PomodoroSettings()

    assert settings.history_limit == 30
    assert settings.default_duration_min == 25
    assert settings.tick_interval_minutes == 1
    assert settings.log_level == "INFO"


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("POMODORO_STATE_PATH", str(tmp_path / "state.db"))
    monkeypatch.setenv("POMODORO_LOG_LEVEL", " debug ")
    monkeypatch.setenv("POMODORO_HISTORY_LIMIT", "10")
    monkeypatch.setenv("POMODORO_PRESET_PATHS", os.pathsep.join(["a", "b"]))

    settings = PomodoroSettings()

    assert settings.state_path == tmp_path / "state.db"
    assert settings.log_level == "DEBUG"
    assert settings.history_limit == 10
    assert settings.preset_paths == (Path("a"), Path("b"))


@pytest.mark.parametrize(
    ("variable", "value"),
    [
        ("POMODORO_LOG_LEVEL", "chatty"),
        ("POMODORO_HISTORY_LIMIT", "0"),
        ("POMODORO_TICK_MINUTES", "0"),
        ("POMODORO_DEFAULT_DURATION_MIN", "-1"),
        ("POMODORO_DEFAULT_DURATION_MIN", "1e15"),
    ],
)
def test_invalid_values_rejected(monkeypatch: pytest.MonkeyPatch, variable: str, value: str) -> None:
    monkeypatch.setenv(variable, value)

    with pytest.raises(ValidationError):
        PomodoroSettings()


def test_get_settings_resolves_paths(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("POMODORO_STATE_PATH", str(tmp_path / "x" / ".." / "state.db"))
    get_settings.cache_clear()
    try:
        settings = get_settings()
    finally:
        get_settings.cache_clear()

    assert settings.state_path == (tmp_path / "state.db").resolve()
    assert all(path.is_absolute() for path in settings.preset_paths)
