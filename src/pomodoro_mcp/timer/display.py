"""Presentation helpers for badge and clock rendering."""

from __future__ import annotations

import math
from typing import Protocol

from ..storage import SessionState
from .accounting import MS_PER_MINUTE, parse_positive_minutes, remaining_ms

PAUSED_BADGE = "⏸"


class BadgeRenderer(Protocol):
    """Minimal badge surface the timer refreshes."""

    def set_badge(self, text: str) -> None:
        ...


def minutes_left(ms_remaining: int) -> int:
    return max(0, math.ceil(ms_remaining / MS_PER_MINUTE))


def badge_text(state: SessionState, now: int) -> str:
    if not state.is_running:
        return ""
    if state.paused:
        return PAUSED_BADGE
    return str(minutes_left(remaining_ms(state, now)))


def format_clock(ms: int) -> str:
    """Format milliseconds as ``MM:SS``."""

    seconds = max(0, int(ms // 1000))
    return f"{seconds // 60:02d}:{seconds % 60:02d}"


def progress(state: SessionState, now: int, default_duration_min: float = 25) -> float:
    """Completed fraction of the planned session, clamped to [0, 1]."""

    minutes = parse_positive_minutes(state.duration_min) or default_duration_min
    total = minutes * MS_PER_MINUTE
    if not state.is_running:
        return 0.0
    left = remaining_ms(state, now)
    return min(1.0, max(0.0, 1 - left / total))


__all__ = ["BadgeRenderer", "PAUSED_BADGE", "badge_text", "format_clock", "minutes_left", "progress"]
