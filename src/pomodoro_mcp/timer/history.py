"""Bounded, newest-first history of closed sessions."""

from __future__ import annotations

import logging
import threading
from typing import Any, Mapping

from ..storage import HistoryEntry, StateStore
from .accounting import parse_positive_minutes, round_half_up

HISTORY_LIMIT = 30

logger = logging.getLogger(__name__)


class HistoryLog:
    """Append/edit/clear operations over the persisted history list."""

    def __init__(self, store: StateStore, *, limit: int = HISTORY_LIMIT) -> None:
        if limit < 1:
            raise ValueError("History limit must be >= 1")
        self._store = store
        self._limit = limit
        self._lock = threading.RLock()

    @property
    def limit(self) -> int:
        return self._limit

    def list(self) -> list[HistoryEntry]:
        return self._store.read_history()

    def append(self, entry: HistoryEntry) -> list[HistoryEntry]:
        """Prepend ``entry`` and evict the oldest entries beyond the limit."""

        with self._lock:
            entries = [entry, *self._store.read_history()][: self._limit]
            self._store.write_history(entries)
        logger.info(
            "Recorded session",
            extra={"task": entry.task, "duration_min": entry.duration_min},
        )
        return entries

    def clear(self) -> list[HistoryEntry]:
        with self._lock:
            self._store.write_history([])
        logger.info("Cleared history")
        return []

    def update(self, index: Any, patch: Mapping[str, Any] | None) -> list[HistoryEntry]:
        """Apply ``task`` and/or ``duration_min`` from ``patch`` to one entry.

        Out-of-range indexes leave the log unchanged. ``task`` is trimmed;
        ``duration_min`` is applied only when it parses to a finite number > 0.
        """

        with self._lock:
            entries = self._store.read_history()
            position = _coerce_index(index)
            if position is None or not 0 <= position < len(entries):
                logger.debug("Ignoring history edit out of range", extra={"index": index})
                return entries

            patch = patch or {}
            changes: dict[str, Any] = {}
            task = _pick(patch, "task")
            if task is not None:
                changes["task"] = str(task).strip()
            minutes = parse_positive_minutes(_pick(patch, "duration_min", "durationMin"))
            if minutes is not None:
                changes["duration_min"] = max(1, round_half_up(minutes))

            if not changes:
                return entries

            entries[position] = entries[position].model_copy(update=changes)
            self._store.write_history(entries)
        logger.info("Edited history entry", extra={"index": position, "fields": sorted(changes)})
        return entries


def _coerce_index(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value.strip())
    return None


def _pick(payload: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in payload:
            return payload[key]
    return None


__all__ = ["HISTORY_LIMIT", "HistoryLog"]
