"""In-process event sink for enrichment notifications.

Hey future me - this is how the rest of the app learns "lyrics for item X changed"!
The lyrics engine calls send() once per successful save. We:
- keep a bounded history (handy for tests and for a late-joining UI to catch up)
- fan the notification out to every subscriber queue (UI refresh, now-playing reload, ...)

Subscribers get their own asyncio.Queue. A full queue drops the OLDEST event for that
subscriber instead of blocking the engine - an enrichment run must never wait on the UI.

Usage:
    sink = InProcessEventSink()
    queue = sink.subscribe()
    ...
    notification = await queue.get()
    item_id = notification.data["item_id"]
"""

import asyncio
import logging
from collections import deque

from lyricspot.domain.ports.notification import (
    INotificationProvider,
    Notification,
    NotificationResult,
    NotificationType,
)

logger = logging.getLogger(__name__)


class InProcessEventSink(INotificationProvider):
    """Event sink that records notifications and fans them out to subscribers."""

    def __init__(self, history_size: int = 100, queue_size: int = 100) -> None:
        self._history: deque[Notification] = deque(maxlen=history_size)
        self._queue_size = queue_size
        self._subscribers: list[asyncio.Queue[Notification]] = []

    @property
    def name(self) -> str:
        """Provider name."""
        return "inprocess"

    @property
    def supported_types(self) -> list[NotificationType]:
        """All notification types."""
        return []

    @property
    def history(self) -> list[Notification]:
        """Most recent notifications, oldest first."""
        return list(self._history)

    async def is_configured(self) -> bool:
        """Always available - nothing to configure."""
        return True

    def subscribe(self) -> asyncio.Queue[Notification]:
        """Register a new subscriber queue."""
        queue: asyncio.Queue[Notification] = asyncio.Queue(maxsize=self._queue_size)
        self._subscribers.append(queue)
        return queue

    def unsubscribe(self, queue: asyncio.Queue[Notification]) -> None:
        """Remove a subscriber queue (no-op if unknown)."""
        if queue in self._subscribers:
            self._subscribers.remove(queue)

    async def send(self, notification: Notification) -> NotificationResult:
        """Record and fan out a notification.

        Args:
            notification: Notification to deliver

        Returns:
            NotificationResult (always success)
        """
        self._history.append(notification)
        for queue in self._subscribers:
            if queue.full():
                queue.get_nowait()
                logger.debug("Subscriber queue full, dropped oldest event")
            queue.put_nowait(notification)

        logger.info(
            "[NOTIFICATION] %s → %d subscriber(s) %s",
            notification.type.value,
            len(self._subscribers),
            notification.data,
        )
        return NotificationResult(
            success=True,
            provider_name=self.name,
            notification_type=notification.type,
        )
