"""iTunes artist image provider - IArtistImageProvider implementation.

Hey future me - iTunes has NO artist photos in its public search API. What it does have is
album covers for every album BY an artist (attribute=artistTerm), and an album cover is a
decent avatar. Each hit gives us:
- thumbnail: the 100x100 (or 60x60) URL iTunes returns
- full size: same URL with the size token upgraded (600x600 by default)

Ranking/dedup is NOT done here - ArtistImageService owns that so every provider behaves the same.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from lyricspot.domain.ports import ArtistImageHit, IArtistImageProvider
from lyricspot.infrastructure.providers.metadata_providers import PROVIDER_ERRORS

if TYPE_CHECKING:
    from lyricspot.infrastructure.integrations.itunes_client import ITunesClient

logger = logging.getLogger(__name__)


class ITunesArtistImageProvider(IArtistImageProvider):
    """Album covers from iTunes as artist image candidates."""

    def __init__(self, client: ITunesClient) -> None:
        self._client = client

    @property
    def name(self) -> str:
        return "itunes"

    async def search(self, artist: str, limit: int) -> list[ArtistImageHit]:
        term = artist.strip()
        if not term:
            return []
        try:
            results = await self._client.search_artist_albums(term, limit=limit)
        except PROVIDER_ERRORS as e:
            logger.warning("iTunes artist image search failed for '%s': %s", term, e)
            return []

        hits: list[ArtistImageHit] = []
        for item in results:
            thumbnail = item.get("artworkUrl100") or item.get("artworkUrl60")
            if not isinstance(thumbnail, str) or not thumbnail:
                continue
            fullsize = self._client.upgrade_artwork_url(thumbnail)
            if not fullsize:
                continue
            collection_id = item.get("collectionId")
            hits.append(
                ArtistImageHit(
                    source_id=str(collection_id) if collection_id is not None else None,
                    thumbnail_url=thumbnail,
                    fullsize_url=fullsize,
                )
            )
        logger.debug("iTunes returned %d image hits for '%s'", len(hits), term)
        return hits
