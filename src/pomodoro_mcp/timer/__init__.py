"""Session timer engine, accounting, and history log."""

from .accounting import effective_duration_min, elapsed_ms, remaining_ms
from .display import BadgeRenderer, badge_text, format_clock, progress
from .engine import SessionTimer, completion_message
from .history import HISTORY_LIMIT, HistoryLog

__all__ = [
    "BadgeRenderer",
    "HISTORY_LIMIT",
    "HistoryLog",
    "SessionTimer",
    "badge_text",
    "completion_message",
    "effective_duration_min",
    "elapsed_ms",
    "format_clock",
    "progress",
    "remaining_ms",
]
