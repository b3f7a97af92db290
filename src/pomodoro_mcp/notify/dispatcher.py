"""Desktop notification dispatch."""

from __future__ import annotations

import logging
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
import os
from typing import Mapping, Protocol

logger = logging.getLogger(__name__)

# Interpreter settings of the server process must not leak into notify-send.
_STRIPPED_VARS = ("PYTHONHOME", "PYTHONPATH", "VIRTUAL_ENV")


def notification_environment(overrides: Mapping[str, str] | None = None) -> dict[str, str]:
    env = {key: value for key, value in os.environ.items() if key not in _STRIPPED_VARS}
    env.update(overrides or {})
    return env


class NotifierError(RuntimeError):
    """Base class for notifier errors."""


class NotifierNotFoundError(NotifierError):
    """Raised when the notification executable cannot be located."""


class Notifier(Protocol):
    def notify(self, title: str, message: str) -> object:
        ...


@dataclass(slots=True)
class NotificationResult:
    """Holds the outcome of a notification command."""

    args: tuple[str, ...]
    returncode: int
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class DesktopNotifier:
    """Send notifications through the ``notify-send`` executable."""

    def __init__(self, executable: Path | None = None, *, app_name: str = "Pomodoro") -> None:
        self._executable_path = self._resolve_executable(executable)
        self._app_name = app_name

    @staticmethod
    def _resolve_executable(explicit: Path | None) -> Path:
        if explicit is not None:
            candidate = Path(explicit)
            if candidate.exists() and candidate.is_file():
                return candidate
            raise NotifierNotFoundError(f"Notification executable not found at {candidate}")

        binary = shutil.which("notify-send")
        if binary is None:
            raise NotifierNotFoundError("notify-send executable not found on PATH")
        return Path(binary)

    @property
    def executable(self) -> Path:
        return self._executable_path

    def notify(self, title: str, message: str) -> NotificationResult:
        cmd = [str(self._executable_path), f"--app-name={self._app_name}", title, message]
        process = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            env=notification_environment(),
        )
        result = NotificationResult(args=tuple(cmd), returncode=process.returncode, stderr=process.stderr)
        if not result.ok:
            logger.warning(
                "Notification command failed",
                extra={"returncode": result.returncode, "stderr": result.stderr.strip()[:200]},
            )
        return result


class LoggingNotifier:
    """Notifier that only writes to the log."""

    def __init__(self) -> None:
        self.sent: list[tuple[str, str]] = []

    def notify(self, title: str, message: str) -> None:
        self.sent.append((title, message))
        logger.info("Notification", extra={"title": title, "body": message})


__all__ = [
    "DesktopNotifier",
    "LoggingNotifier",
    "NotificationResult",
    "Notifier",
    "NotifierError",
    "NotifierNotFoundError",
    "notification_environment",
]
