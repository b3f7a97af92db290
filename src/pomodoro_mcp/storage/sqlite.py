"""SQLite-backed key-value persistence for the timer."""

from __future__ import annotations

import json
import logging
import sqlite3
import threading
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from .models import IDLE_STATE, HistoryEntry, SessionState

logger = logging.getLogger(__name__)

STATE_KEY = "pomodoro_state"
HISTORY_KEY = "pomodoro_history"


class StoreUnavailableError(RuntimeError):
    """Raised when the backing database cannot be opened."""


class StateStore:
    """Persist one ``SessionState`` record and one history list.

    Each record is replaced whole on write; there are no partial-field
    updates.
    """

    def __init__(self, path: Path | str) -> None:
        self._path = str(path)
        self._lock = threading.Lock()
        try:
            if self._path != ":memory:":
                Path(self._path).parent.mkdir(parents=True, exist_ok=True)
            self._conn = sqlite3.connect(self._path, check_same_thread=False)
            self._conn.execute(
                """
                CREATE TABLE IF NOT EXISTS app_state (
                    key TEXT PRIMARY KEY,
                    value TEXT
                );
                """
            )
            self._conn.commit()
        except (OSError, sqlite3.Error) as exc:
            raise StoreUnavailableError(f"Cannot open state store at {self._path}: {exc}") from exc

    @property
    def path(self) -> str:
        return self._path

    def _get(self, key: str) -> Any:
        with self._lock:
            row = self._conn.execute(
                "SELECT value FROM app_state WHERE key=?",
                (key,),
            ).fetchone()
        if row is None or row[0] is None:
            return None
        try:
            return json.loads(row[0])
        except json.JSONDecodeError:
            logger.warning("Discarding unreadable stored record", extra={"key": key})
            return None

    def _set(self, key: str, value: Any) -> None:
        payload = json.dumps(value)
        with self._lock:
            self._conn.execute(
                """
                INSERT INTO app_state(key, value) VALUES(?, ?)
                ON CONFLICT(key) DO UPDATE SET value=excluded.value
                """,
                (key, payload),
            )
            self._conn.commit()

    def read_state(self) -> SessionState:
        """Return the stored state merged over the idle defaults."""

        stored = self._get(STATE_KEY)
        if not isinstance(stored, dict):
            return IDLE_STATE
        try:
            return SessionState.model_validate({**IDLE_STATE.model_dump(), **stored})
        except ValidationError as exc:
            logger.warning(
                "Stored session state is invalid; falling back to idle",
                extra={"error": str(exc)},
            )
            return IDLE_STATE

    def write_state(self, state: SessionState) -> SessionState:
        self._set(STATE_KEY, state.model_dump())
        return state

    def read_history(self) -> list[HistoryEntry]:
        """Return stored history entries, newest first, skipping invalid ones."""

        stored = self._get(HISTORY_KEY)
        if not isinstance(stored, list):
            return []
        entries: list[HistoryEntry] = []
        for index, raw in enumerate(stored):
            try:
                entries.append(HistoryEntry.model_validate(raw))
            except ValidationError as exc:
                logger.warning(
                    "Skipping invalid history entry",
                    extra={"index": index, "error": str(exc)},
                )
        return entries

    def write_history(self, entries: list[HistoryEntry]) -> list[HistoryEntry]:
        self._set(HISTORY_KEY, [entry.model_dump() for entry in entries])
        return list(entries)

    def close(self) -> None:
        with self._lock:
            try:
                self._conn.close()
            except sqlite3.Error:  # pragma: no cover - best effort
                pass


__all__ = ["StateStore", "StoreUnavailableError", "STATE_KEY", "HISTORY_KEY"]
