"""Tool registration for Pomodoro MCP."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from fastmcp import Context, FastMCP

from ..config import PomodoroSettings
from ..presets import PresetLoader
from ..timer import SessionTimer
from .dispatch import dispatch_message, history_payload, state_payload, stop_result


@dataclass(slots=True)
class ToolHandles:
    get_state: Any
    start: Any
    pause: Any
    resume: Any
    reset: Any
    stop: Any
    get_history: Any
    clear_history: Any
    update_history_entry: Any
    list_presets: Any
    start_preset: Any
    send_message: Any


def register_tools(
    server: FastMCP,
    *,
    timer: SessionTimer,
    presets: PresetLoader,
    settings: PomodoroSettings,
) -> ToolHandles:
    """Register the timer's MCP tools on the server."""

    def _get_state(context: Context | None = None) -> dict[str, Any]:
        """Return the current session state."""

        state = timer.get_state()
        _emit_log(context, "debug", "Read state", extra={"phase": state.phase})
        return state_payload(state)

    def _start(
        duration_min: float | None = None,
        task: str = "",
        context: Context | None = None,
    ) -> dict[str, Any]:
        """Start a session, replacing any active one."""

        state = timer.start(duration_min, task)
        _emit_log(
            context,
            "info",
            "Started session",
            extra={"duration_min": state.duration_min, "task": state.task},
        )
        return state_payload(state)

    def _pause(context: Context | None = None) -> dict[str, Any]:
        state = timer.pause()
        _emit_log(context, "info", "Pause requested", extra={"phase": state.phase})
        return state_payload(state)

    def _resume(context: Context | None = None) -> dict[str, Any]:
        state = timer.resume()
        _emit_log(context, "info", "Resume requested", extra={"phase": state.phase})
        return state_payload(state)

    def _reset(context: Context | None = None) -> dict[str, Any]:
        state = timer.reset()
        _emit_log(context, "info", "Reset requested")
        return state_payload(state)

    def _stop(context: Context | None = None) -> dict[str, Any]:
        result = stop_result(timer)
        _emit_log(
            context,
            "info",
            "Stop requested",
            extra={"recorded": result["entry"] is not None},
        )
        return result

    tool_get_state = server.tool(
        name="get_state",
        description="Return the timer state: running/paused flags, start and end times, task label.",
    )(_get_state)

    tool_start = server.tool(
        name="start",
        description=(
            "Start a focus session of duration_min minutes with an optional task label. "
            "An active session is replaced without being recorded in history."
        ),
    )(_start)

    tool_pause = server.tool(
        name="pause",
        description="Pause the running session, freezing its remaining time.",
    )(_pause)

    tool_resume = server.tool(
        name="resume",
        description="Resume a paused session from its frozen remaining time.",
    )(_resume)

    tool_reset = server.tool(
        name="reset",
        description="Discard the current session without recording history.",
    )(_reset)

    tool_stop = server.tool(
        name="stop",
        description="End the current session early and record the minutes actually spent.",
    )(_stop)

    def _get_history(context: Context | None = None) -> list[dict[str, Any]]:
        """Return recorded sessions, newest first."""

        entries = timer.history.list()
        _emit_log(context, "debug", "Listing history", extra={"count": len(entries)})
        return history_payload(entries)

    def _clear_history(context: Context | None = None) -> list[dict[str, Any]]:
        entries = timer.history.clear()
        _emit_log(context, "info", "Cleared history")
        return history_payload(entries)

    def _update_history_entry(
        index: int,
        task: str | None = None,
        duration_min: float | str | None = None,
        context: Context | None = None,
    ) -> list[dict[str, Any]]:
        """Edit the task label and/or credited minutes of one history entry."""

        patch: dict[str, Any] = {}
        if task is not None:
            patch["task"] = task
        if duration_min is not None:
            patch["duration_min"] = duration_min
        entries = timer.history.update(index, patch)
        _emit_log(
            context,
            "info",
            "Edited history entry",
            extra={"index": index, "fields": sorted(patch)},
        )
        return history_payload(entries)

    tool_get_history = server.tool(
        name="get_history",
        description=f"List completed sessions, newest first (at most {settings.history_limit}).",
    )(_get_history)

    tool_clear_history = server.tool(
        name="clear_history",
        description="Delete every recorded session.",
    )(_clear_history)

    tool_update_history_entry = server.tool(
        name="update_history_entry",
        description=(
            "Edit a history entry by index (0 is newest). Only task and duration_min "
            "can change; invalid durations are ignored."
        ),
    )(_update_history_entry)

    def _list_presets(context: Context | None = None) -> list[dict[str, Any]]:
        """List configured session presets."""

        preset_map = presets.load_all()
        catalog = [preset.model_dump() for preset in preset_map.values()]
        _emit_log(context, "debug", "Listing presets", extra={"count": len(catalog)})
        return catalog

    def _start_preset(
        preset_id: str,
        task: str | None = None,
        context: Context | None = None,
    ) -> dict[str, Any]:
        """Start a session using a preset's duration."""

        preset = presets.get(preset_id)
        state = timer.start(preset.duration_min, task if task is not None else preset.task)
        _emit_log(
            context,
            "info",
            "Started preset",
            extra={"preset": preset.id, "duration_min": preset.duration_min},
        )
        return state_payload(state)

    def _send_message(message: dict[str, Any], context: Context | None = None) -> Any:
        """Route a {"type": ...} request to the matching timer operation."""

        result = dispatch_message(timer, message)
        if isinstance(result, dict) and result.get("error"):
            _emit_log(
                context,
                "warning",
                "Unknown message type",
                extra={"message_type": result.get("type")},
            )
        return result

    tool_list_presets = server.tool(
        name="list_presets",
        description="List named session presets loaded from YAML files.",
    )(_list_presets)

    tool_start_preset = server.tool(
        name="start_preset",
        description="Start a session with a preset's duration and default task label.",
    )(_start_preset)

    tool_send_message = server.tool(
        name="send_message",
        description=(
            "Send a raw request such as {\"type\": \"start\", \"durationMin\": 25}. "
            "Unknown types return {\"error\": \"unknown_message\"}."
        ),
    )(_send_message)

    return ToolHandles(
        get_state=tool_get_state,
        start=tool_start,
        pause=tool_pause,
        resume=tool_resume,
        reset=tool_reset,
        stop=tool_stop,
        get_history=tool_get_history,
        clear_history=tool_clear_history,
        update_history_entry=tool_update_history_entry,
        list_presets=tool_list_presets,
        start_preset=tool_start_preset,
        send_message=tool_send_message,
    )


__all__ = ["register_tools", "ToolHandles"]

logger = logging.getLogger(__name__)


def _emit_log(
    context: Context | None,
    level: str,
    message: str,
    *,
    extra: dict[str, Any] | None = None,
) -> None:
    """Best-effort logging that prefers the MCP context logger when available."""

    payload = extra or {}

    if context is not None:
        ctx_logger = getattr(context, "logger", None)
        if ctx_logger is not None:
            log_method = getattr(ctx_logger, level, None)
            if callable(log_method):
                log_method(message, extra=payload)
                return

    fallback = getattr(logger, level, logger.info)
    fallback(message, extra=payload)
