"""Notification provider interfaces for the enrichment event sink.

Hey future me - this is the PORT (interface) for the event sink!
The lyrics engine emits exactly ONE event type today (lyrics updated for an item).
Anything that wants to react to it (UI refresh, now-playing reload) implements
INotificationProvider and gets handed a Notification.

Architecture:
- LyricsEnrichmentService (Application Layer) → INotificationProvider (Port)
- InProcessEventSink → Implements INotificationProvider
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any


class NotificationType(str, Enum):
    """Types of notifications that can be sent.

    Hey future me - add new types here when you add new notification events!
    """

    LYRICS_UPDATED = "lyrics_updated"


@dataclass
class Notification:
    """Notification data object for passing to providers.

    Example:
        notif = Notification(
            type=NotificationType.LYRICS_UPDATED,
            title="Lyrics updated",
            message="Artist - Title",
            data={"item_id": "abc"},
        )
    """

    type: NotificationType
    title: str
    message: str
    data: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime | None = None

    def __post_init__(self) -> None:
        """Set timestamp if not provided."""
        if self.timestamp is None:
            self.timestamp = datetime.now(UTC)


@dataclass
class NotificationResult:
    """Result of sending a notification."""

    success: bool
    provider_name: str
    notification_type: NotificationType
    error: str | None = None


class INotificationProvider(ABC):
    """Interface for notification providers (the event sink).

    Each provider must:
    1. Have a unique name
    2. Declare which notification types it supports
    3. Implement send() to actually deliver the notification
    4. Implement is_configured()
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique name for this provider."""
        pass

    @property
    @abstractmethod
    def supported_types(self) -> list[NotificationType]:
        """List of notification types this provider can handle.

        Return empty list to support ALL types.
        """
        pass

    @abstractmethod
    async def send(self, notification: Notification) -> NotificationResult:
        """Send a notification through this provider.

        Args:
            notification: The notification to send

        Returns:
            NotificationResult indicating success/failure
        """
        pass

    @abstractmethod
    async def is_configured(self) -> bool:
        """Check if this provider is properly configured."""
        pass

    def supports(self, notification_type: NotificationType) -> bool:
        """Check if this provider supports a notification type.

        Args:
            notification_type: Type to check

        Returns:
            True if supported (or if provider supports all types)
        """
        supported = self.supported_types
        return len(supported) == 0 or notification_type in supported


__all__ = [
    "INotificationProvider",
    "Notification",
    "NotificationResult",
    "NotificationType",
]
