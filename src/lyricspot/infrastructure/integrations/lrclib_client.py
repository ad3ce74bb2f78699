"""LRCLIB lyrics API client.

Hey future me - LRCLIB (lrclib.net) is a free, keyless, community lyrics DB with SYNCED (LRC)
lyrics. We use /api/get which is an EXACT lookup - it either finds the one track matching
artist + title (+ album + duration if given) or answers 404. That's why the lyrics engine has
to try so many query variants: a stray "(Remastered)" or a 1-second duration drift = 404.

Response (200):
    {"id": 123, "trackName": "...", "artistName": "...", "albumName": "...",
     "duration": 233.0, "instrumental": false,
     "plainLyrics": "...", "syncedLyrics": "[00:12.34]..."}

Timeouts are PER CALL (connect ~10s / total ~15s) - one slow request must not eat the
engine's whole 30s search budget.
"""

import logging
from typing import Any, cast

import httpx

from lyricspot.config.settings import LrclibSettings
from lyricspot.domain.exceptions import DecodeError

logger = logging.getLogger(__name__)


class LrclibClient:
    """HTTP client for the LRCLIB API."""

    def __init__(
        self,
        settings: LrclibSettings,
        connect_timeout: float = 10.0,
        total_timeout: float = 15.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize LRCLIB client.

        Args:
            settings: LRCLIB configuration settings
            connect_timeout: Connect timeout per call (seconds)
            total_timeout: Overall timeout per call (seconds)
            client: Optional pre-built client (tests inject a MockTransport one)
        """
        self.settings = settings
        self._timeout = httpx.Timeout(total_timeout, connect=connect_timeout)
        self._client = client
        self._owns_client = client is None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.settings.base_url,
                headers={
                    "User-Agent": self.settings.user_agent,
                    "Accept": "application/json",
                },
                timeout=self._timeout,
            )
        return self._client

    async def close(self) -> None:
        """Close HTTP client (only if we created it)."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def get(
        self,
        artist: str,
        title: str,
        album: str | None = None,
        duration: int | None = None,
    ) -> dict[str, Any] | None:
        """Exact lyrics lookup.

        Args:
            artist: Artist name
            title: Track title
            album: Album name, omitted from the query if None/empty
            duration: Track length in whole seconds, omitted if None/<= 0

        Returns:
            Raw LRCLIB track object, or None if not found (404)

        Raises:
            httpx.HTTPError: On network errors, timeouts and non-404 error statuses
            DecodeError: If the payload is not a JSON object
        """
        params: dict[str, Any] = {"artist_name": artist, "track_name": title}
        if album:
            params["album_name"] = album
        if duration is not None and duration > 0:
            params["duration"] = int(duration)

        client = await self._get_client()
        response = await client.get("/api/get", params=params, timeout=self._timeout)
        if response.status_code == 404:
            return None
        response.raise_for_status()
        try:
            data = response.json()
        except ValueError as e:
            raise DecodeError("lrclib", str(e)) from e
        if not isinstance(data, dict):
            raise DecodeError("lrclib", f"expected object, got {type(data).__name__}")
        return cast(dict[str, Any], data)
