"""
Notification bus — transient, user-facing outcome messages.

In-process publish/subscribe over an ordered sequence of notifications.
Every post() schedules its own removal after a fixed TTL on the running
event loop; observers see the full sequence on every change (post, expiry,
dismiss). Nothing is persisted.

Usage:
    bus = NotificationBus(ttl=3.0)
    unsubscribe = bus.subscribe(lambda items: render(items))
    bus.post("Vault created successfully")
    bus.post("vault not found", NotificationKind.ERROR)
    unsubscribe()
"""

from __future__ import annotations

import asyncio
import itertools
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum

logger = logging.getLogger(__name__)

DEFAULT_TTL = 3.0


class NotificationKind(StrEnum):
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class Notification:
    id: int
    message: str
    kind: NotificationKind = NotificationKind.SUCCESS
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))


Observer = Callable[[tuple[Notification, ...]], None]


class NotificationBus:
    """Auto-expiring notification queue with any number of observers."""

    def __init__(self, ttl: float = DEFAULT_TTL) -> None:
        if ttl <= 0:
            raise ValueError("Notification TTL must be positive")
        self.ttl = ttl
        self._ids = itertools.count()
        self._items: list[Notification] = []
        self._observers: list[Observer] = []
        self._timers: dict[int, asyncio.TimerHandle] = {}

    def post(
        self, message: str, kind: NotificationKind | str = NotificationKind.SUCCESS
    ) -> Notification:
        """Append a notification and schedule its removal after the TTL.

        Must be called from a running event loop.
        """
        loop = asyncio.get_running_loop()
        notification = Notification(id=next(self._ids), message=message, kind=NotificationKind(kind))
        self._items.append(notification)
        self._timers[notification.id] = loop.call_later(self.ttl, self._expire, notification.id)
        logger.debug("Notification %d (%s): %s", notification.id, notification.kind, message)
        self._notify()
        return notification

    def dismiss(self, notification_id: int) -> bool:
        """Remove a notification before its TTL. Returns False if already gone."""
        timer = self._timers.pop(notification_id, None)
        if timer is not None:
            timer.cancel()
        return self._remove(notification_id)

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        """Register an observer. Returns a function that unregisters it."""
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def snapshot(self) -> tuple[Notification, ...]:
        return tuple(self._items)

    def close(self) -> None:
        """Cancel pending expiry timers and drop all notifications and observers."""
        for timer in self._timers.values():
            timer.cancel()
        self._timers.clear()
        self._items.clear()
        self._observers.clear()

    def _expire(self, notification_id: int) -> None:
        self._timers.pop(notification_id, None)
        self._remove(notification_id)

    def _remove(self, notification_id: int) -> bool:
        before = len(self._items)
        self._items = [n for n in self._items if n.id != notification_id]
        if len(self._items) == before:
            return False
        self._notify()
        return True

    def _notify(self) -> None:
        items = self.snapshot()
        for observer in list(self._observers):
            try:
                observer(items)
            except Exception as e:
                logger.warning("Notification observer %r failed: %s", observer, e)
