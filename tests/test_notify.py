from __future__ import annotations

from pathlib import Path

import pytest

from pomodoro_mcp.notify import (
    CompletionBus,
    DesktopNotifier,
    LoggingNotifier,
    NotifierNotFoundError,
)
from pomodoro_mcp.notify.dispatcher import notification_environment


def test_desktop_notifier_runs_executable(tmp_path: Path) -> None:
    out = tmp_path / "out.txt"
    script = tmp_path / "notify-send"
    script.write_text(f"#!/bin/sh\necho \"$@\" > {out}\n", encoding="utf-8")
    script.chmod(0o755)

    result = DesktopNotifier(script).notify("Pomodoro complete!", "Nice work!")

    assert result.ok
    assert out.read_text(encoding="utf-8").strip() == "--app-name=Pomodoro Pomodoro complete! Nice work!"


def test_desktop_notifier_reports_failure(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    script = tmp_path / "notify-send"
    script.write_text("#!/bin/sh\necho nope >&2\nexit 3\n", encoding="utf-8")
    script.chmod(0o755)

    result = DesktopNotifier(script).notify("t", "m")

    assert result.returncode == 3
    assert any("Notification command failed" in record.getMessage() for record in caplog.records)


def test_notifier_not_found(tmp_path: Path) -> None:
    with pytest.raises(NotifierNotFoundError):
        DesktopNotifier(tmp_path / "missing")


def test_logging_notifier_records() -> None:
    notifier = LoggingNotifier()
    notifier.notify("title", "body")
    assert notifier.sent == [("title", "body")]


def test_completion_bus_swallows_subscriber_errors() -> None:
    bus = CompletionBus()
    received: list[dict] = []

    def broken(event: dict) -> None:
        raise RuntimeError("popup closed")

    bus.subscribe(broken)
    unsubscribe = bus.subscribe(received.append)

    assert bus.publish({"type": "timer_ended"}) == 1
    assert received == [{"type": "timer_ended"}]

    unsubscribe()
    assert bus.publish({"type": "timer_ended"}) == 0


def test_notification_environment_strips_interpreter_vars(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PYTHONPATH", "value")
    env = notification_environment({"EXTRA": "1"})
    assert "PYTHONPATH" not in env
    assert env["EXTRA"] == "1"
