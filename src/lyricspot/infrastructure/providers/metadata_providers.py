"""Metadata providers - IMetadataProvider implementations.

Hey future me - these wrap the raw API clients for the metadata engine!

PRIORITY (fixed, see lifecycle.py):
1. ITunesMetadataProvider   - title + artist + album + ARTWORK in one request
2. MusicBrainzMetadataProvider - title + artist + album, no artwork, 1 req/sec

The engine takes the first non-empty result and does NOT merge fields across providers.

CONTRACT: search() never raises. Network errors, HTTP errors, garbage JSON → None
(logged at WARNING). The engine only sees "match" or "no match".
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import httpx

from lyricspot.domain.entities import MetadataMatch
from lyricspot.domain.exceptions import DomainException
from lyricspot.domain.ports import IMetadataProvider

if TYPE_CHECKING:
    from lyricspot.infrastructure.integrations.itunes_client import ITunesClient
    from lyricspot.infrastructure.integrations.musicbrainz_client import MusicBrainzClient

logger = logging.getLogger(__name__)

# Everything a client may throw at us that means "this provider can't help right now".
PROVIDER_ERRORS: tuple[type[Exception], ...] = (
    httpx.HTTPError,
    DomainException,
    ValueError,
    KeyError,
    TypeError,
)


def _text(value: Any) -> str | None:
    """Non-empty stripped string or None."""
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    return stripped or None


class ITunesMetadataProvider(IMetadataProvider):
    """iTunes Search as metadata source (first in priority)."""

    def __init__(self, client: ITunesClient) -> None:
        self._client = client

    @property
    def name(self) -> str:
        return "itunes"

    async def search(self, title: str, artist: str | None = None) -> MetadataMatch | None:
        term = f"{artist} {title}" if artist else title
        try:
            results = await self._client.search_songs(term, limit=1)
        except PROVIDER_ERRORS as e:
            logger.warning("iTunes search failed for '%s': %s", term, e)
            return None

        if not results:
            logger.debug("No iTunes results for '%s'", term)
            return None

        item = results[0]
        match = MetadataMatch(
            title=_text(item.get("trackName")),
            artist=_text(item.get("artistName")),
            album=_text(item.get("collectionName")),
            artwork_url=self._client.upgrade_artwork_url(_text(item.get("artworkUrl100"))),
        )
        return None if match.is_empty else match


class MusicBrainzMetadataProvider(IMetadataProvider):
    """MusicBrainz recording search as metadata source (fallback)."""

    def __init__(self, client: MusicBrainzClient) -> None:
        self._client = client

    @property
    def name(self) -> str:
        return "musicbrainz"

    async def search(self, title: str, artist: str | None = None) -> MetadataMatch | None:
        try:
            recordings = await self._client.search_recording(title, artist, limit=1)
        except PROVIDER_ERRORS as e:
            logger.warning("MusicBrainz search failed for '%s' / '%s': %s", artist, title, e)
            return None

        if not recordings:
            logger.debug("No MusicBrainz recordings for '%s' / '%s'", artist, title)
            return None

        recording = recordings[0]
        # artist-credit[0] is the primary artist, releases[0] the first release we know of
        credits = recording.get("artist-credit") or []
        releases = recording.get("releases") or []
        first_credit = credits[0] if credits and isinstance(credits[0], dict) else {}
        first_release = releases[0] if releases and isinstance(releases[0], dict) else {}

        match = MetadataMatch(
            title=_text(recording.get("title")),
            artist=_text(first_credit.get("name")),
            album=_text(first_release.get("title")),
        )
        return None if match.is_empty else match
