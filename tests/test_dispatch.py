from __future__ import annotations

from pomodoro_mcp.storage import StateStore
from pomodoro_mcp.timer import SessionTimer
from pomodoro_mcp.tools.dispatch import UNKNOWN_MESSAGE, dispatch_message

T0 = 1_700_000_000_000
MINUTE = 60_000


class FakeClock:
    def __init__(self) -> None:
        self.now = T0

    def __call__(self) -> int:
        return self.now


def make_timer() -> tuple[SessionTimer, FakeClock]:
    clock = FakeClock()
    return SessionTimer(StateStore(":memory:"), clock=clock), clock


def test_unknown_message_returns_error() -> None:
    timer, _ = make_timer()

    assert dispatch_message(timer, {"type": "explode"}) == {"error": UNKNOWN_MESSAGE, "type": "explode"}
    assert dispatch_message(timer, {}) == {"error": UNKNOWN_MESSAGE, "type": None}
    assert dispatch_message(timer, "start") == {"error": UNKNOWN_MESSAGE, "type": None}


def test_start_accepts_camel_case_arguments() -> None:
    timer, _ = make_timer()

    state = dispatch_message(timer, {"type": "start", "durationMin": 15, "task": "review"})

    assert state["is_running"] is True
    assert state["duration_min"] == 15
    assert state["task"] == "review"
    assert dispatch_message(timer, {"type": "get_state"}) == state


def test_full_session_flow() -> None:
    timer, clock = make_timer()
    dispatch_message(timer, {"type": "start", "duration_min": 10, "task": "x"})
    clock.now += 2 * MINUTE

    assert dispatch_message(timer, {"type": "pause"})["paused"] is True
    assert dispatch_message(timer, {"type": "resume"})["paused"] is False

    result = dispatch_message(timer, {"type": "stop"})
    assert result["state"]["is_running"] is False
    assert result["entry"]["duration_min"] == 2
    assert result["history"] == [result["entry"]]

    history = dispatch_message(
        timer, {"type": "update_history_entry", "index": 0, "patch": {"task": "  done  "}}
    )
    assert history[0]["task"] == "done"

    history = dispatch_message(timer, {"type": "update_history_entry", "index": 0, "durationMin": "45abc"})
    assert history[0]["duration_min"] == 2

    assert dispatch_message(timer, {"type": "get_history"}) == history
    assert dispatch_message(timer, {"type": "clear_history"}) == []
    assert dispatch_message(timer, {"type": "get_history"}) == []


def test_reset_returns_idle_state() -> None:
    timer, _ = make_timer()
    dispatch_message(timer, {"type": "start", "durationMin": 5})

    state = dispatch_message(timer, {"type": "reset"})

    assert state["is_running"] is False
    assert dispatch_message(timer, {"type": "get_history"}) == []


def test_start_with_oversized_duration_uses_default() -> None:
    timer, _ = make_timer()

    state = dispatch_message(timer, {"type": "start", "durationMin": 10**400, "task": "x"})

    assert state["duration_min"] == 25
    assert state["end_time"] == T0 + 25 * MINUTE
