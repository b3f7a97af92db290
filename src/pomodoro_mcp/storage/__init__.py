"""Storage abstractions for Pomodoro MCP."""

from .models import IDLE_STATE, HistoryEntry, SessionState
from .sqlite import StateStore, StoreUnavailableError

__all__ = [
    "HistoryEntry",
    "IDLE_STATE",
    "SessionState",
    "StateStore",
    "StoreUnavailableError",
]
