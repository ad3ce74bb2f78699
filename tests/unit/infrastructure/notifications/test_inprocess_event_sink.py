"""Tests for InProcessEventSink."""

import pytest

from lyricspot.domain.ports.notification import Notification, NotificationType
from lyricspot.infrastructure.notifications.inapp_provider import InProcessEventSink


def lyrics_event(item_id: str) -> Notification:
    return Notification(
        type=NotificationType.LYRICS_UPDATED,
        title="Lyrics updated",
        message="Artist - Title",
        data={"item_id": item_id},
    )


class TestInProcessEventSink:
    """Test history and subscriber fan-out."""

    @pytest.mark.asyncio
    async def test_send_records_history(self):
        sink = InProcessEventSink()

        result = await sink.send(lyrics_event("a"))

        assert result.success
        assert result.provider_name == "inprocess"
        assert result.notification_type == NotificationType.LYRICS_UPDATED
        assert [n.data["item_id"] for n in sink.history] == ["a"]

    @pytest.mark.asyncio
    async def test_history_is_bounded(self):
        sink = InProcessEventSink(history_size=2)
        for item_id in ("a", "b", "c"):
            await sink.send(lyrics_event(item_id))
        assert [n.data["item_id"] for n in sink.history] == ["b", "c"]

    @pytest.mark.asyncio
    async def test_subscribers_receive_events(self):
        sink = InProcessEventSink()
        first = sink.subscribe()
        second = sink.subscribe()

        await sink.send(lyrics_event("a"))

        assert (await first.get()).data == {"item_id": "a"}
        assert (await second.get()).data == {"item_id": "a"}

    @pytest.mark.asyncio
    async def test_full_queue_drops_oldest(self):
        sink = InProcessEventSink(queue_size=2)
        queue = sink.subscribe()
        for item_id in ("a", "b", "c"):
            await sink.send(lyrics_event(item_id))

        received = [queue.get_nowait().data["item_id"] for _ in range(queue.qsize())]
        assert received == ["b", "c"]

    @pytest.mark.asyncio
    async def test_unsubscribe(self):
        sink = InProcessEventSink()
        queue = sink.subscribe()
        sink.unsubscribe(queue)
        sink.unsubscribe(queue)

        await sink.send(lyrics_event("a"))

        assert queue.empty()

    @pytest.mark.asyncio
    async def test_supports_every_type(self):
        sink = InProcessEventSink()
        assert await sink.is_configured()
        assert sink.supports(NotificationType.LYRICS_UPDATED)
        assert lyrics_event("a").timestamp is not None
