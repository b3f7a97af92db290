"""Fire-and-forget completion signal for open clients."""

from __future__ import annotations

import logging
from typing import Any, Callable

logger = logging.getLogger(__name__)

Subscriber = Callable[[dict[str, Any]], None]


class CompletionBus:
    """Broadcast timer events to subscribers.

    Delivery is best-effort: a failing subscriber is logged and skipped.
    """

    def __init__(self) -> None:
        self._subscribers: list[Subscriber] = []

    def subscribe(self, fn: Subscriber) -> Callable[[], None]:
        self._subscribers.append(fn)

        def _unsubscribe() -> None:
            if fn in self._subscribers:
                self._subscribers.remove(fn)

        return _unsubscribe

    def publish(self, event: dict[str, Any]) -> int:
        """Deliver ``event`` and return how many subscribers accepted it."""

        delivered = 0
        for fn in list(self._subscribers):
            try:
                fn(event)
            except Exception as exc:
                logger.warning(
                    "Completion subscriber failed",
                    extra={"event_type": event.get("type"), "error": str(exc)},
                )
                continue
            delivered += 1
        return delivered


__all__ = ["CompletionBus", "Subscriber"]
