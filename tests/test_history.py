from __future__ import annotations

from pomodoro_mcp.storage import HistoryEntry, StateStore
from pomodoro_mcp.timer import HISTORY_LIMIT, HistoryLog


def make_entry(n: int) -> HistoryEntry:
    return HistoryEntry(task=f"task-{n}", duration_min=25, started_at=n * 1000, ended_at=n * 1000 + 500)


def test_append_is_newest_first_and_bounded() -> None:
    log = HistoryLog(StateStore(":memory:"))

    for n in range(35):
        log.append(make_entry(n))

    entries = log.list()
    assert HISTORY_LIMIT == 30
    assert len(entries) == 30
    assert entries[0].task == "task-34"
    assert entries[-1].task == "task-5"
    assert all(entry.task not in {f"task-{n}" for n in range(5)} for entry in entries)


def test_clear_empties_log() -> None:
    log = HistoryLog(StateStore(":memory:"))
    for n in range(3):
        log.append(make_entry(n))

    assert log.clear() == []
    assert log.list() == []
    assert log.clear() == []


def test_update_trims_task() -> None:
    log = HistoryLog(StateStore(":memory:"))
    log.append(make_entry(1))

    entries = log.update(0, {"task": "  refactor  "})

    assert entries[0].task == "refactor"
    assert log.list()[0].task == "refactor"


def test_update_ignores_invalid_duration() -> None:
    log = HistoryLog(StateStore(":memory:"))
    log.append(make_entry(1))

    for bad in ("45abc", 0, -3, "nan", None, "inf"):
        log.update(0, {"durationMin": bad})

    assert log.list()[0].duration_min == 25


def test_update_rounds_valid_duration() -> None:
    log = HistoryLog(StateStore(":memory:"))
    log.append(make_entry(1))

    log.update(0, {"duration_min": "44.5"})
    assert log.list()[0].duration_min == 45

    log.update(0, {"durationMin": 0.2})
    assert log.list()[0].duration_min == 1


def test_update_out_of_range_is_noop() -> None:
    log = HistoryLog(StateStore(":memory:"))
    log.append(make_entry(1))
    before = log.list()

    assert log.update(5, {"task": "x"}) == before
    assert log.update(-1, {"task": "x"}) == before
    assert log.update("abc", {"task": "x"}) == before


def test_update_leaves_timestamps_untouched() -> None:
    log = HistoryLog(StateStore(":memory:"))
    log.append(make_entry(7))

    entry = log.update(0, {"task": "new", "duration_min": 50, "started_at": 1, "ended_at": 2})[0]

    assert entry.started_at == 7000
    assert entry.ended_at == 7500
    assert entry.duration_min == 50


def test_custom_limit() -> None:
    log = HistoryLog(StateStore(":memory:"), limit=2)
    for n in range(4):
        log.append(make_entry(n))
    assert [entry.task for entry in log.list()] == ["task-3", "task-2"]


def test_update_ignores_oversized_duration() -> None:
    log = HistoryLog(StateStore(":memory:"))
    log.append(make_entry(1))

    log.update(0, {"duration_min": 10**400})
    log.update(0, {"durationMin": 1e308})

    assert log.list()[0].duration_min == 25
