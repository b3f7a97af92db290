"""Selector-based request routing.

A request is a mapping with a ``type`` selector plus arguments; the response
is a plain JSON-compatible value. Argument keys are accepted in snake_case
or in the camelCase used by browser clients (``durationMin``).
"""

from __future__ import annotations

from typing import Any, Callable, Mapping

from ..storage import HistoryEntry, SessionState
from ..timer import SessionTimer

UNKNOWN_MESSAGE = "unknown_message"

Handler = Callable[[SessionTimer, Mapping[str, Any]], Any]


def state_payload(state: SessionState) -> dict[str, Any]:
    return state.model_dump()


def history_payload(entries: list[HistoryEntry]) -> list[dict[str, Any]]:
    return [entry.model_dump() for entry in entries]


def _pick(message: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in message:
            return message[key]
    return default


def history_patch(message: Mapping[str, Any]) -> dict[str, Any]:
    patch = message.get("patch")
    if isinstance(patch, Mapping):
        return dict(patch)
    return {key: message[key] for key in ("task", "duration_min", "durationMin") if key in message}


def _get_state(timer: SessionTimer, message: Mapping[str, Any]) -> dict[str, Any]:
    return state_payload(timer.get_state())


def _start(timer: SessionTimer, message: Mapping[str, Any]) -> dict[str, Any]:
    duration = _pick(message, "duration_min", "durationMin")
    task = _pick(message, "task", default="")
    return state_payload(timer.start(duration, task))


def _pause(timer: SessionTimer, message: Mapping[str, Any]) -> dict[str, Any]:
    return state_payload(timer.pause())


def _resume(timer: SessionTimer, message: Mapping[str, Any]) -> dict[str, Any]:
    return state_payload(timer.resume())


def _reset(timer: SessionTimer, message: Mapping[str, Any]) -> dict[str, Any]:
    return state_payload(timer.reset())


def stop_result(timer: SessionTimer) -> dict[str, Any]:
    """Stop the session; report the idle state, the new entry and the log."""

    state, entry = timer.stop()
    return {
        "state": state_payload(state),
        "entry": entry.model_dump() if entry else None,
        "history": history_payload(timer.history.list()),
    }


def _stop(timer: SessionTimer, message: Mapping[str, Any]) -> dict[str, Any]:
    return stop_result(timer)


def _get_history(timer: SessionTimer, message: Mapping[str, Any]) -> list[dict[str, Any]]:
    return history_payload(timer.history.list())


def _clear_history(timer: SessionTimer, message: Mapping[str, Any]) -> list[dict[str, Any]]:
    return history_payload(timer.history.clear())


def _update_history_entry(timer: SessionTimer, message: Mapping[str, Any]) -> list[dict[str, Any]]:
    entries = timer.history.update(message.get("index"), history_patch(message))
    return history_payload(entries)


HANDLERS: dict[str, Handler] = {
    "get_state": _get_state,
    "start": _start,
    "pause": _pause,
    "resume": _resume,
    "reset": _reset,
    "stop": _stop,
    "get_history": _get_history,
    "clear_history": _clear_history,
    "update_history_entry": _update_history_entry,
}


def dispatch_message(timer: SessionTimer, message: Any) -> Any:
    """Run the operation named by ``message["type"]`` and return its result."""

    selector = message.get("type") if isinstance(message, Mapping) else None
    handler = HANDLERS.get(selector) if isinstance(selector, str) else None
    if handler is None:
        return {"error": UNKNOWN_MESSAGE, "type": selector}
    return handler(timer, message)


__all__ = [
    "HANDLERS",
    "UNKNOWN_MESSAGE",
    "dispatch_message",
    "history_patch",
    "history_payload",
    "state_payload",
    "stop_result",
]
