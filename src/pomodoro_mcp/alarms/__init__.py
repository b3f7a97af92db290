"""Alarm scheduling for the session timer."""

from .scheduler import END_ALARM, TICK_ALARM, AlarmScheduler, APSchedulerAlarms

__all__ = ["APSchedulerAlarms", "AlarmScheduler", "END_ALARM", "TICK_ALARM"]
