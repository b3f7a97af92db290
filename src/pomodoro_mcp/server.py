"""FastMCP server bootstrap for Pomodoro MCP."""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Optional

from fastmcp import Context, FastMCP

from . import __version__
from .alarms import AlarmScheduler, APSchedulerAlarms
from .config import PomodoroSettings, get_settings
from .notify import CompletionBus, DesktopNotifier, LoggingNotifier, Notifier, NotifierNotFoundError
from .presets import PresetLoader
from .storage import StateStore
from .timer import HistoryLog, SessionTimer, badge_text, format_clock, progress
from .tools import register_tools

RECENT_SIGNAL_LIMIT = 20


def configure_logging(level: str) -> None:
    """Configure root logging for the Pomodoro server."""

    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="[%(asctime)s] [%(levelname)s] %(name)s: %(message)s",
    )


def _build_notifier(settings: PomodoroSettings, metadata: dict[str, Any]) -> Notifier:
    if not settings.notifications_enabled:
        metadata["error"] = "disabled"
        return LoggingNotifier()
    try:
        notifier = DesktopNotifier(Path(settings.notify_command) if settings.notify_command else None)
    except NotifierNotFoundError as exc:
        metadata["error"] = str(exc)
        return LoggingNotifier()
    metadata["available"] = True
    metadata["path"] = str(notifier.executable)
    return notifier


def create_server(
    settings: Optional[PomodoroSettings] = None,
    *,
    store: StateStore | None = None,
    alarms: AlarmScheduler | None = None,
    notifier: Notifier | None = None,
    clock: Callable[[], int] | None = None,
) -> FastMCP:
    """Instantiate the FastMCP server around a restored session timer."""

    settings = settings or get_settings()

    store = store or StateStore(settings.state_path)
    alarms = alarms or APSchedulerAlarms()
    preset_loader = PresetLoader(settings.preset_paths)

    notifier_metadata: dict[str, Any] = {"available": False, "path": None, "error": None}
    if notifier is None:
        notifier = _build_notifier(settings, notifier_metadata)
    else:
        notifier_metadata["available"] = True

    recent_signals: list[dict[str, Any]] = []
    signals = CompletionBus()

    def _remember_signal(event: dict[str, Any]) -> None:
        recent_signals.append({**event, "received_at": datetime.now(timezone.utc).isoformat()})
        del recent_signals[:-RECENT_SIGNAL_LIMIT]

    signals.subscribe(_remember_signal)

    timer = SessionTimer(
        store,
        alarms=alarms,
        history=HistoryLog(store, limit=settings.history_limit),
        notifier=notifier,
        signals=signals,
        clock=clock,
        default_duration_min=settings.default_duration_min,
        tick_interval_minutes=settings.tick_interval_minutes,
    )

    bind = getattr(alarms, "bind", None)
    if callable(bind):
        bind(timer.handle_alarm)

    restore_result = timer.restore()
    if restore_result["action"] == "completed":
        logging.getLogger(__name__).warning(
            "Session expired while the server was down; recorded on startup",
            extra={"entry": restore_result.get("entry")},
        )

    server = FastMCP(
        name="Pomodoro MCP",
        version=__version__,
        instructions=(
            "Pomodoro runs fixed-length focus sessions that survive restarts and "
            "records finished sessions in a short history. Use the tools to start, "
            "pause, resume, stop, or reset the timer and to review or edit history."
        ),
    )

    handles = register_tools(
        server,
        timer=timer,
        presets=preset_loader,
        settings=settings,
    )

    def status_resource(context: Context) -> str:
        """Return a JSON string summarizing the timer."""

        state = timer.get_state()
        now = timer.now()
        remaining = timer.remaining_ms(state)
        payload = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "server_version": __version__,
            "log_level": settings.log_level,
            "state": state.model_dump(),
            "phase": state.phase,
            "remaining_ms": remaining,
            "clock": format_clock(remaining if state.is_running else 0),
            "badge": badge_text(state, now),
            "progress": progress(state, now, settings.default_duration_min),
            "history": {
                "count": len(timer.history.list()),
                "limit": timer.history.limit,
            },
            "storage": {"path": store.path},
            "notifications": notifier_metadata,
            "alarms": {
                "pending": alarms.pending() if hasattr(alarms, "pending") else None,
            },
            "restore": restore_result,
            "recent_signals": recent_signals[-5:],
            "request_id": getattr(context, "request_id", None),
        }
        return json.dumps(payload)

    server.resource(
        "resource://pomodoro/status",
        name="pomodoro_status",
        description="Provides the current timer status for the Pomodoro MCP server.",
        mime_type="application/json",
        tags={"status", "timer"},
    )(status_resource)

    setattr(server, "timer", timer)
    setattr(server, "state_store", store)
    setattr(server, "alarms", alarms)
    setattr(server, "notifier", notifier)
    setattr(server, "notifier_metadata", notifier_metadata)
    setattr(server, "preset_loader", preset_loader)
    setattr(server, "restore_result", restore_result)
    setattr(server, "recent_signals", recent_signals)
    setattr(server, "tool_handles", handles)
    setattr(server, "status_payload", status_resource)
    return server


def main() -> None:
    """Entry point for running the Pomodoro MCP server via CLI."""

    settings = get_settings()
    configure_logging(settings.log_level)

    server = create_server(settings)
    alarms = getattr(server, "alarms")
    logging.getLogger(__name__).info(
        "Launching Pomodoro MCP server",
        extra={
            "version": __version__,
            "log_level": settings.log_level,
            "state_path": str(settings.state_path),
            "notifications_available": getattr(server, "notifier_metadata", {}).get("available"),
        },
    )
    alarms.start()
    try:
        server.run()
    finally:
        alarms.shutdown()
        getattr(server, "state_store").close()


if __name__ == "__main__":
    main()
