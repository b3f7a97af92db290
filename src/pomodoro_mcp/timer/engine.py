"""Session timer state machine.

The engine never polls. Every transition is a short read-modify-write of the
stored ``SessionState``, serialized by a lock, followed by (re)programming or
cancelling the alarm scheduler. Remaining time is always recomputed from
absolute timestamps, never from tick counts.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Any, Callable

from ..alarms import END_ALARM, TICK_ALARM, AlarmScheduler
from ..notify import CompletionBus, Notifier
from ..storage import IDLE_STATE, HistoryEntry, SessionState, StateStore
from .accounting import (
    MS_PER_MINUTE,
    effective_duration_min,
    parse_positive_minutes,
    planned_duration_min,
    remaining_ms,
    round_half_up,
)
from .display import BadgeRenderer, badge_text
from .history import HistoryLog

DEFAULT_DURATION_MIN = 25
# End alarms earlier than this before the stored deadline belong to a
# replaced session.
ALARM_EARLY_TOLERANCE_MS = 1000

COMPLETION_TITLE = "Pomodoro complete!"

logger = logging.getLogger(__name__)


def wall_clock_ms() -> int:
    return int(time.time() * 1000)


def completion_message(task: str) -> str:
    return f'Nice work on "{task}"!' if task else "Nice work!"


class SessionTimer:
    """Owns the idle/running/paused lifecycle and the history side effects."""

    def __init__(
        self,
        store: StateStore,
        *,
        alarms: AlarmScheduler | None = None,
        history: HistoryLog | None = None,
        notifier: Notifier | None = None,
        signals: CompletionBus | None = None,
        badge: BadgeRenderer | None = None,
        clock: Callable[[], int] | None = None,
        default_duration_min: float = DEFAULT_DURATION_MIN,
        tick_interval_minutes: int = 1,
    ) -> None:
        self._store = store
        self._alarms = alarms
        self._history = history or HistoryLog(store)
        self._notifier = notifier
        self._signals = signals or CompletionBus()
        self._badge = badge
        self._clock = clock or wall_clock_ms
        self._default_duration_min = default_duration_min
        self._tick_interval_minutes = tick_interval_minutes
        self._lock = threading.RLock()

    @property
    def history(self) -> HistoryLog:
        return self._history

    @property
    def signals(self) -> CompletionBus:
        return self._signals

    def now(self) -> int:
        return self._clock()

    # ----- Queries -----
    def get_state(self) -> SessionState:
        return self._store.read_state()

    def remaining_ms(self, state: SessionState | None = None) -> int:
        return remaining_ms(state or self.get_state(), self.now())

    # ----- Transitions -----
    def start(self, duration_min: Any = None, task: Any = "") -> SessionState:
        """Begin a new session, replacing any active one without recording it."""

        minutes = parse_positive_minutes(duration_min)
        if minutes is None:
            logger.debug(
                "Invalid duration; using default",
                extra={"requested": repr(duration_min), "default": self._default_duration_min},
            )
            minutes = self._default_duration_min

        with self._lock:
            previous = self._store.read_state()
            now = self.now()
            state = SessionState(
                is_running=True,
                paused=False,
                start_time=now,
                end_time=now + round_half_up(minutes * MS_PER_MINUTE),
                duration_min=minutes,
                task=str(task or "").strip(),
                paused_remaining_ms=None,
            )
            self._cancel_alarms()
            self._store.write_state(state)
            self._schedule_alarms(state.end_time)
            self._refresh_badge(state)

        if previous.is_running:
            # An active session is discarded here, not auto-stopped.
            logger.info(
                "Replaced active session without recording it",
                extra={"replaced_task": previous.task, "replaced_start": previous.start_time},
            )
        logger.info(
            "Started session",
            extra={"duration_min": minutes, "task": state.task, "end_time": state.end_time},
        )
        return state

    def pause(self) -> SessionState:
        with self._lock:
            state = self._store.read_state()
            if not state.is_running or state.paused:
                return state
            now = self.now()
            reference = state.end_time if state.end_time is not None else now
            state = state.model_copy(
                update={"paused": True, "paused_remaining_ms": max(0, reference - now)}
            )
            self._cancel_alarms()
            self._store.write_state(state)
            self._refresh_badge(state)
        logger.info("Paused session", extra={"remaining_ms": state.paused_remaining_ms})
        return state

    def resume(self) -> SessionState:
        with self._lock:
            state = self._store.read_state()
            if not state.is_running or not state.paused:
                return state
            now = self.now()
            state = state.model_copy(
                update={
                    "paused": False,
                    "end_time": now + (state.paused_remaining_ms or 0),
                    "start_time": state.start_time if state.start_time is not None else now,
                    "paused_remaining_ms": None,
                }
            )
            self._store.write_state(state)
            self._schedule_alarms(state.end_time)
            self._refresh_badge(state)
        logger.info("Resumed session", extra={"end_time": state.end_time})
        return state

    def reset(self) -> SessionState:
        """Discard any session. Never records history."""

        with self._lock:
            state = self._reset_locked()
        logger.info("Reset timer")
        return state

    def stop(self) -> tuple[SessionState, HistoryEntry | None]:
        """Close the active session early, crediting its elapsed minutes.

        Returns the idle state and the recorded entry (``None`` when idle).
        No completion notification is sent.
        """

        with self._lock:
            state = self._store.read_state()
            if not state.is_running:
                return state, None
            ended_at = self.now()
            entry = self._entry_for(state, ended_at, effective_duration_min(state, ended_at))
            self._history.append(entry)
            idle = self._reset_locked()

        logger.info(
            "Stopped session",
            extra={"task": entry.task, "duration_min": entry.duration_min},
        )
        self._signals.publish({"type": "timer_stopped", "entry": entry.model_dump()})
        return idle, entry

    # ----- Alarm delivery -----
    def handle_alarm(self, name: str) -> None:
        if name == END_ALARM:
            self.complete()
        elif name == TICK_ALARM:
            self._refresh_badge(self.get_state())
        else:
            logger.debug("Ignoring unknown alarm", extra={"alarm": name})

    def complete(self) -> HistoryEntry | None:
        """Handle the end alarm. Safe to call repeatedly.

        Only a session that is still running and due produces an entry; the
        state is reset before history and notification side effects run.
        """

        with self._lock:
            state = self._store.read_state()
            now = self.now()
            if not state.is_running or state.paused:
                logger.debug("End alarm with no running session", extra={"phase": state.phase})
                return None
            if state.end_time is not None and now < state.end_time - ALARM_EARLY_TOLERANCE_MS:
                logger.debug(
                    "Ignoring end alarm before deadline",
                    extra={"end_time": state.end_time, "now": now},
                )
                return None

            self._reset_locked()
            entry = self._entry_for(state, now, planned_duration_min(state, now))
            self._history.append(entry)

        logger.info(
            "Session complete",
            extra={"task": entry.task, "duration_min": entry.duration_min},
        )
        self._send_notification(COMPLETION_TITLE, completion_message(entry.task))
        self._signals.publish({"type": "timer_ended", "entry": entry.model_dump()})
        return entry

    def restore(self) -> dict[str, Any]:
        """Reconcile persisted state with the scheduler after a restart."""

        with self._lock:
            state = self._store.read_state()
            now = self.now()
            if not state.is_running:
                self._refresh_badge(state)
                return {"action": "idle"}
            if state.paused:
                self._refresh_badge(state)
                return {"action": "paused", "remaining_ms": state.paused_remaining_ms}
            if state.end_time is None or state.end_time <= now:
                expired = True
            else:
                expired = False
                self._cancel_alarms()
                self._schedule_alarms(state.end_time)
                self._refresh_badge(state)

        if expired:
            entry = self.complete()
            return {"action": "completed", "entry": entry.model_dump() if entry else None}
        return {"action": "rescheduled", "end_time": state.end_time}

    # ----- Internals -----
    def _entry_for(self, state: SessionState, ended_at: int, minutes: int) -> HistoryEntry:
        return HistoryEntry(
            task=state.task,
            duration_min=minutes,
            started_at=state.start_time if state.start_time is not None else ended_at,
            ended_at=ended_at,
        )

    def _reset_locked(self) -> SessionState:
        self._cancel_alarms()
        state = self._store.write_state(IDLE_STATE)
        self._refresh_badge(state)
        return state

    def _schedule_alarms(self, end_time: int | None) -> None:
        if self._alarms is None or end_time is None:
            return
        try:
            self._alarms.schedule_once(END_ALARM, end_time)
            self._alarms.schedule_repeating(TICK_ALARM, self._tick_interval_minutes)
        except Exception as exc:
            logger.warning("Failed to schedule alarms", extra={"error": str(exc)})

    def _cancel_alarms(self) -> None:
        if self._alarms is None:
            return
        for name in (END_ALARM, TICK_ALARM):
            try:
                self._alarms.cancel(name)
            except Exception as exc:
                logger.warning("Failed to cancel alarm", extra={"alarm": name, "error": str(exc)})

    def _refresh_badge(self, state: SessionState) -> None:
        if self._badge is None:
            return
        try:
            self._badge.set_badge(badge_text(state, self.now()))
        except Exception as exc:
            logger.warning("Badge update failed", extra={"error": str(exc)})

    def _send_notification(self, title: str, message: str) -> None:
        if self._notifier is None:
            return
        try:
            self._notifier.notify(title, message)
        except Exception as exc:
            logger.warning("Notification failed", extra={"error": str(exc)})


__all__ = ["ALARM_EARLY_TOLERANCE_MS", "COMPLETION_TITLE", "SessionTimer", "completion_message"]
