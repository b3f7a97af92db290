"""Alarm scheduling backed by APScheduler."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, Protocol

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.date import DateTrigger
from apscheduler.triggers.interval import IntervalTrigger

END_ALARM = "pomodoro_end"
TICK_ALARM = "pomodoro_badge_tick"

logger = logging.getLogger(__name__)


class AlarmScheduler(Protocol):
    """Protocol for the wake-up primitive the timer programs."""

    def schedule_once(self, name: str, at_ms: int) -> None:
        ...

    def schedule_repeating(self, name: str, every_minutes: int) -> None:
        ...

    def cancel(self, name: str) -> None:
        ...


class APSchedulerAlarms:
    """Named alarms mapped onto APScheduler jobs.

    The job id is the alarm name; scheduling an alarm again replaces it, also
    before the scheduler has started. Late alarms still fire
    (``misfire_grace_time=None``); the callback receives the alarm name.
    """

    def __init__(
        self,
        callback: Callable[[str], None] | None = None,
        *,
        scheduler: BackgroundScheduler | None = None,
    ) -> None:
        self._scheduler = scheduler or BackgroundScheduler(timezone=timezone.utc)
        self._callback = callback

    @property
    def scheduler(self) -> BackgroundScheduler:
        return self._scheduler

    def bind(self, callback: Callable[[str], None]) -> None:
        """Set the function invoked with the alarm name when an alarm fires."""

        self._callback = callback

    def _fire(self, name: str) -> None:
        if self._callback is None:
            logger.warning("Alarm fired with no callback bound", extra={"alarm": name})
            return
        self._callback(name)

    def schedule_once(self, name: str, at_ms: int) -> None:
        run_date = datetime.fromtimestamp(at_ms / 1000, tz=timezone.utc)
        self.cancel(name)
        self._scheduler.add_job(
            self._fire,
            trigger=DateTrigger(run_date=run_date),
            args=[name],
            id=name,
            name=name,
            replace_existing=True,
            misfire_grace_time=None,
        )
        logger.debug("Scheduled alarm", extra={"alarm": name, "run_date": run_date.isoformat()})

    def schedule_repeating(self, name: str, every_minutes: int) -> None:
        self.cancel(name)
        self._scheduler.add_job(
            self._fire,
            trigger=IntervalTrigger(minutes=every_minutes, timezone=timezone.utc),
            args=[name],
            id=name,
            name=name,
            replace_existing=True,
            coalesce=True,
        )
        logger.debug("Scheduled repeating alarm", extra={"alarm": name, "minutes": every_minutes})

    def cancel(self, name: str) -> None:
        try:
            self._scheduler.remove_job(name)
        except JobLookupError:
            return
        logger.debug("Cancelled alarm", extra={"alarm": name})

    def pending(self) -> list[str]:
        return sorted(job.id for job in self._scheduler.get_jobs())

    def start(self) -> None:
        if not self._scheduler.running:
            self._scheduler.start()

    def shutdown(self) -> None:
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)


__all__ = ["APSchedulerAlarms", "AlarmScheduler", "END_ALARM", "TICK_ALARM"]
