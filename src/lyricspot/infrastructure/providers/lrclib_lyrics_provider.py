"""LRCLIB lyrics provider - ILyricsProvider implementation."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from lyricspot.domain.entities import LyricsMatch
from lyricspot.domain.ports import ILyricsProvider
from lyricspot.infrastructure.providers.metadata_providers import PROVIDER_ERRORS

if TYPE_CHECKING:
    from lyricspot.infrastructure.integrations.lrclib_client import LrclibClient

logger = logging.getLogger(__name__)


class LrclibLyricsProvider(ILyricsProvider):
    """LRCLIB exact lookup as lyrics source.

    Hey future me - get() is called MANY times per song by the lyrics engine (one per query
    variant), so misses log at DEBUG only. Real failures (timeouts, 5xx) log at WARNING.
    """

    def __init__(self, client: LrclibClient) -> None:
        self._client = client

    @property
    def name(self) -> str:
        return "lrclib"

    async def get(
        self,
        artist: str,
        title: str,
        album: str | None = None,
        duration_seconds: int | None = None,
    ) -> LyricsMatch | None:
        try:
            data = await self._client.get(artist, title, album, duration_seconds)
        except PROVIDER_ERRORS as e:
            logger.warning("LRCLIB lookup failed for '%s' / '%s': %s", artist, title, e)
            return None

        if data is None:
            logger.debug("LRCLIB miss for '%s' / '%s'", artist, title)
            return None

        synced = data.get("syncedLyrics")
        plain = data.get("plainLyrics")
        match = LyricsMatch(
            synced_lyrics=synced if isinstance(synced, str) else None,
            plain_lyrics=plain if isinstance(plain, str) else None,
        )
        if not match.has_synced and not match.has_plain:
            logger.debug("LRCLIB hit without lyrics content for '%s' / '%s'", artist, title)
            return None
        return match
