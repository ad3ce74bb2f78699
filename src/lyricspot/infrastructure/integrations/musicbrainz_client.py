"""MusicBrainz HTTP client implementation with rate limiting."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any, cast

import httpx

from lyricspot.config.settings import MusicBrainzSettings
from lyricspot.domain.exceptions import DecodeError

logger = logging.getLogger(__name__)


class MusicBrainzClient:
    """HTTP client for MusicBrainz recording search with rate limiting."""

    # Hey future me, MusicBrainz is STRICT about rate limiting - 1 req/sec, NO EXCEPTIONS!
    # We track ONE timestamp: the slot of the most recent request. There's no lock because
    # this client is the only writer and _reserve_slot() has no await between read and write.
    # Each caller reserves the next free slot, THEN sleeps until it. Three concurrent calls
    # get slots t, t+1, t+2 and line up nicely - nobody sneaks in between.
    def __init__(
        self,
        settings: MusicBrainzSettings,
        client: httpx.AsyncClient | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """
        Initialize MusicBrainz client.

        Args:
            settings: MusicBrainz configuration settings
            client: Optional pre-built client (tests inject a MockTransport one)
            sleep: Sleep function (tests pass a recorder)
        """
        self.settings = settings
        self._client = client
        self._owns_client = client is None
        self._sleep = sleep
        self._last_request_time: float | None = None

    # Listen future me, MusicBrainz REQUIRES a User-Agent with app name, version AND contact.
    # Format: "AppName/Version ( contact )". Without it they answer 403.
    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            user_agent = (
                f"{self.settings.app_name}/{self.settings.app_version} "
                f"( {self.settings.contact} )"
            )
            self._client = httpx.AsyncClient(
                base_url=self.settings.base_url,
                headers={
                    "User-Agent": user_agent,
                    "Accept": "application/json",
                },
                timeout=self.settings.timeout,
            )
        return self._client

    async def close(self) -> None:
        """Close HTTP client (only if we created it)."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    def _reserve_slot(self) -> float:
        """Reserve the next request slot and return how long to wait for it."""
        now = asyncio.get_running_loop().time()
        if self._last_request_time is None:
            slot = now
        else:
            slot = max(now, self._last_request_time + self.settings.rate_limit_seconds)
        self._last_request_time = slot
        return slot - now

    async def _rate_limited_request(
        self, method: str, url: str, **kwargs: Any
    ) -> httpx.Response:
        """
        Make a rate-limited request to MusicBrainz API.

        Raises:
            httpx.HTTPError: If the request fails
        """
        delay = self._reserve_slot()
        if delay > 0:
            logger.debug("MusicBrainz throttle: waiting %.2fs", delay)
            await self._sleep(delay)
        client = await self._get_client()
        return await client.request(method, url, **kwargs)

    # Hey future me, MusicBrainz search uses Lucene query syntax. The quotes are IMPORTANT for
    # phrase matching - without them "The Beatles" becomes "the OR beatles". Embedded quotes
    # get escaped so a title like 12" Mix doesn't break the query.
    @staticmethod
    def build_recording_query(title: str, artist: str | None = None) -> str:
        """Build the Lucene query for a recording search."""

        def quote(value: str) -> str:
            return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'

        parts = [f"recording:{quote(title)}"]
        if artist:
            parts.append(f"artist:{quote(artist)}")
        return " AND ".join(parts)

    async def search_recording(
        self, title: str, artist: str | None = None, limit: int = 1
    ) -> list[dict[str, Any]]:
        """
        Search for recordings by title and (optionally) artist.

        Args:
            title: Track title
            artist: Artist name, None to search by title only
            limit: Maximum number of results

        Returns:
            List of raw recording objects (title, artist-credit, releases...)

        Raises:
            httpx.HTTPError: If the request fails
            DecodeError: If the payload is not valid JSON
        """
        response = await self._rate_limited_request(
            "GET",
            "/recording/",
            params={
                "query": self.build_recording_query(title, artist),
                "fmt": "json",
                "limit": limit,
            },
        )
        response.raise_for_status()
        try:
            data = response.json()
        except ValueError as e:
            raise DecodeError("musicbrainz", str(e)) from e
        if not isinstance(data, dict):
            raise DecodeError("musicbrainz", f"expected object, got {type(data).__name__}")
        recordings = data.get("recordings", [])
        if not isinstance(recordings, list):
            raise DecodeError("musicbrainz", "'recordings' is not a list")
        return cast(list[dict[str, Any]], recordings)
