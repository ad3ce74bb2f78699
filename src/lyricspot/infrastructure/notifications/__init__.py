"""Notification providers (event sinks)."""

from lyricspot.infrastructure.notifications.inapp_provider import InProcessEventSink

__all__ = ["InProcessEventSink"]
