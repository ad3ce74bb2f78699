"""iTunes Search API client.

Hey future me - iTunes Search is our RICHEST metadata source: one request gives title, artist,
album AND artwork. No API key, no auth. The catch: it's a fuzzy full-text search over a single
"term" param, so we just glue "artist title" together and take the top hit.

Endpoints we use:
- GET /search?term=...&entity=song&limit=1                 → song lookup (metadata)
- GET /search?term=...&media=music&entity=album&attribute=artistTerm → albums BY an artist
  (the album covers double as artist avatar candidates - iTunes has no artist photos)

Artwork URLs look like .../source/100x100bb.jpg - swap the size token to get bigger images.
The CDN renders whatever size you ask for (up to the master resolution).

Errors: non-2xx raises httpx.HTTPStatusError, unparseable JSON raises DecodeError.
Callers (providers) decide what that means - usually "no match".
"""

import logging
from typing import Any, cast

import httpx

from lyricspot.config.settings import ITunesSettings
from lyricspot.domain.exceptions import DecodeError

logger = logging.getLogger(__name__)

THUMBNAIL_SIZE_TOKEN = "100x100"


class ITunesClient:
    """HTTP client for the iTunes Search API."""

    MAX_LIMIT = 100

    def __init__(
        self,
        settings: ITunesSettings,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize iTunes client.

        Args:
            settings: iTunes configuration settings
            client: Optional pre-built client (tests inject a MockTransport one)
        """
        self.settings = settings
        self._client = client
        self._owns_client = client is None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.settings.base_url,
                headers={"Accept": "application/json"},
                timeout=self.settings.timeout,
                follow_redirects=True,
            )
        return self._client

    async def close(self) -> None:
        """Close HTTP client (only if we created it)."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    def upgrade_artwork_url(self, url: str | None) -> str | None:
        """Swap the 100x100 thumbnail token for the configured artwork size."""
        if not url:
            return None
        return url.replace(THUMBNAIL_SIZE_TOKEN, self.settings.artwork_size)

    async def _search(self, params: dict[str, Any]) -> list[dict[str, Any]]:
        if self.settings.country:
            params["country"] = self.settings.country
        client = await self._get_client()
        response = await client.get("/search", params=params)
        response.raise_for_status()
        try:
            data = response.json()
        except ValueError as e:
            raise DecodeError("itunes", str(e)) from e
        if not isinstance(data, dict):
            raise DecodeError("itunes", f"expected object, got {type(data).__name__}")
        results = data.get("results", [])
        if not isinstance(results, list):
            raise DecodeError("itunes", "'results' is not a list")
        return cast(list[dict[str, Any]], [r for r in results if isinstance(r, dict)])

    async def search_songs(self, term: str, limit: int = 1) -> list[dict[str, Any]]:
        """Search songs by free-text term.

        Args:
            term: Search text (usually "artist title")
            limit: Maximum number of results (1-100)

        Returns:
            List of raw iTunes track objects (trackName, artistName, collectionName, artworkUrl100...)

        Raises:
            httpx.HTTPError: If the request fails
            DecodeError: If the payload is not valid JSON
        """
        return await self._search(
            {
                "term": term,
                "entity": "song",
                "limit": min(max(limit, 1), self.MAX_LIMIT),
            }
        )

    async def search_artist_albums(self, artist: str, limit: int = 1) -> list[dict[str, Any]]:
        """Search albums attributed to an artist.

        Args:
            artist: Artist name
            limit: Maximum number of results (clamped to 1-100)

        Returns:
            List of raw iTunes collection objects (collectionId, artworkUrl100, artworkUrl60...)

        Raises:
            httpx.HTTPError: If the request fails
            DecodeError: If the payload is not valid JSON
        """
        return await self._search(
            {
                "term": artist,
                "media": "music",
                "entity": "album",
                "attribute": "artistTerm",
                "limit": min(max(limit, 1), self.MAX_LIMIT),
            }
        )
