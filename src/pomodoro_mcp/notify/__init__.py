"""Notification and completion-signal utilities."""

from .dispatcher import (
    DesktopNotifier,
    LoggingNotifier,
    NotificationResult,
    Notifier,
    NotifierError,
    NotifierNotFoundError,
)
from .signals import CompletionBus

__all__ = [
    "CompletionBus",
    "DesktopNotifier",
    "LoggingNotifier",
    "NotificationResult",
    "Notifier",
    "NotifierError",
    "NotifierNotFoundError",
]
