from __future__ import annotations

import json
from pathlib import Path

import pytest

from pomodoro_mcp.storage import (
    IDLE_STATE,
    HistoryEntry,
    SessionState,
    StateStore,
    StoreUnavailableError,
)
from pomodoro_mcp.storage.sqlite import HISTORY_KEY, STATE_KEY


def test_read_state_defaults_to_idle() -> None:
    store = StateStore(":memory:")
    assert store.read_state() is IDLE_STATE
    assert IDLE_STATE.phase == "idle"
    assert store.read_history() == []


def test_state_survives_reopen(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "state.db"
    state = SessionState(is_running=True, start_time=1, end_time=60_001, duration_min=1, task="x")

    StateStore(path).write_state(state)

    assert StateStore(path).read_state() == state


def test_stored_fields_merge_over_defaults() -> None:
    store = StateStore(":memory:")
    store._set(STATE_KEY, {"is_running": True, "start_time": 5, "end_time": 10, "legacy_field": 1})

    state = store.read_state()

    assert state.is_running
    assert state.task == ""
    assert state.paused_remaining_ms is None


def test_invalid_state_falls_back_to_idle(caplog: pytest.LogCaptureFixture) -> None:
    store = StateStore(":memory:")
    store._set(STATE_KEY, {"is_running": False, "paused": True})

    assert store.read_state() == SessionState()
    assert any("invalid" in record.getMessage() for record in caplog.records)


def test_history_skips_invalid_entries() -> None:
    store = StateStore(":memory:")
    good = HistoryEntry(task="a", duration_min=5, started_at=0, ended_at=300_000)
    store._set(HISTORY_KEY, [good.model_dump(), {"task": "b", "duration_min": 0}, "junk"])

    assert store.read_history() == [good]


def test_write_replaces_whole_record(tmp_path: Path) -> None:
    path = tmp_path / "state.db"
    store = StateStore(path)
    store.write_state(SessionState(is_running=True, paused=True, paused_remaining_ms=5, task="x"))
    store.write_state(SessionState())

    raw = store._conn.execute("SELECT value FROM app_state WHERE key=?", (STATE_KEY,)).fetchone()[0]
    assert json.loads(raw) == SessionState().model_dump()


def test_unopenable_path_raises(tmp_path: Path) -> None:
    blocker = tmp_path / "file"
    blocker.write_text("x", encoding="utf-8")

    with pytest.raises(StoreUnavailableError):
        StateStore(blocker / "state.db")
