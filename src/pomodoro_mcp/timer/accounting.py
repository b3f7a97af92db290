"""Duration arithmetic for closing sessions.

All values are integer epoch milliseconds. Remaining time is always derived
from absolute timestamps so it survives the process being suspended.
"""

from __future__ import annotations

import math
from typing import Any

from ..storage import SessionState

MS_PER_MINUTE = 60_000
# One year; keeps every deadline a representable datetime.
MAX_DURATION_MIN = 365 * 24 * 60


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def parse_positive_minutes(value: Any) -> float | None:
    """Return ``value`` as minutes in ``(0, MAX_DURATION_MIN]``, else ``None``.

    Strings are accepted only when they parse completely (``"45abc"`` is
    rejected). Integers too large for a float are rejected.
    """

    if value is None or isinstance(value, bool):
        return None
    try:
        minutes = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if not math.isfinite(minutes) or not 0 < minutes <= MAX_DURATION_MIN:
        return None
    return minutes


def planned_ms(state: SessionState, ended_at: int) -> int:
    minutes = parse_positive_minutes(state.duration_min)
    if minutes is not None:
        return round_half_up(minutes * MS_PER_MINUTE)
    return max(0, ended_at - (state.start_time if state.start_time is not None else ended_at))


def remaining_ms(state: SessionState, now: int) -> int:
    """Milliseconds left in the session as of ``now`` (0 when idle)."""

    if not state.is_running:
        return 0
    if state.paused:
        return max(0, state.paused_remaining_ms or 0)
    reference = state.end_time if state.end_time is not None else now
    return max(0, reference - now)


def elapsed_ms(state: SessionState, now: int) -> int:
    if not state.is_running or state.start_time is None:
        return 0
    return max(0, planned_ms(state, now) - remaining_ms(state, now))


def effective_duration_min(state: SessionState, ended_at: int) -> int:
    """Minutes credited to ``state`` if it is closed at ``ended_at``.

    A session stopped early is credited its elapsed focus time; one closed at
    its deadline gets the full planned block. Never less than one minute.
    """

    started_at = state.start_time if state.start_time is not None else ended_at
    plan_valid = parse_positive_minutes(state.duration_min) is not None
    planned = planned_ms(state, ended_at)

    if state.paused:
        frozen = state.paused_remaining_ms
        if frozen is None or not math.isfinite(frozen):
            frozen = 0
        remaining = min(max(frozen, 0), planned)
    else:
        reference = state.end_time if state.end_time is not None else ended_at
        remaining = max(0, reference - ended_at)
        if not plan_valid:
            remaining = min(remaining, max(0, reference - started_at))

    elapsed = max(0, planned - remaining)
    used = elapsed if elapsed > 0 else max(0, ended_at - started_at)
    return max(1, round_half_up(used / MS_PER_MINUTE))


def planned_duration_min(state: SessionState, ended_at: int) -> int:
    """Full planned minutes for a naturally completed session."""

    minutes = parse_positive_minutes(state.duration_min)
    if minutes is None:
        return effective_duration_min(state, ended_at)
    return max(1, round_half_up(minutes))


__all__ = [
    "MAX_DURATION_MIN",
    "MS_PER_MINUTE",
    "effective_duration_min",
    "elapsed_ms",
    "parse_positive_minutes",
    "planned_duration_min",
    "planned_ms",
    "remaining_ms",
    "round_half_up",
]
