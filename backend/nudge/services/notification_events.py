"""Notification Event Bus — in-process listeners for lifecycle events."""

import logging
from collections.abc import Callable
from typing import Any

from nudge.core.domain_types import NotificationEvent

logger = logging.getLogger(__name__)

Listener = Callable[[dict[str, Any]], None]


class NotificationEventBus:
    """Synchronous fan-out; a failing listener is logged and skipped."""

    def __init__(self):
        self._listeners: dict[NotificationEvent, list[Listener]] = {
            event: [] for event in NotificationEvent
        }

    def on(self, event: NotificationEvent, listener: Listener) -> None:
        self._listeners[NotificationEvent(event)].append(listener)

    def off(self, event: NotificationEvent, listener: Listener) -> None:
        listeners = self._listeners[NotificationEvent(event)]
        if listener in listeners:
            listeners.remove(listener)

    def emit(self, event: NotificationEvent, data: dict[str, Any]) -> None:
        for listener in list(self._listeners[NotificationEvent(event)]):
            try:
                listener(data)
            except Exception as e:
                logger.warning(f"Listener for {event.value} failed: {e}")
