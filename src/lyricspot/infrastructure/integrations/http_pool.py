"""Shared HTTP client pool for image/artwork downloads.

Hey future me - artwork and artist images come from arbitrary CDN hosts (mzstatic.com etc.),
so they don't get a per-API client like iTunes/MusicBrainz/LRCLIB do. Instead every download
goes through ONE shared httpx.AsyncClient so keep-alive connections get reused across a bulk
avatar refresh.

Usage:
    from lyricspot.infrastructure.integrations.http_pool import HttpClientPool

    client = await HttpClientPool.get_client()
    response = await client.get(artwork_url)

Don't forget to call HttpClientPool.close() at shutdown (see lifecycle.py)!
"""

import asyncio
import logging
from typing import ClassVar

import httpx

logger = logging.getLogger(__name__)


class HttpClientPool:
    """Singleton HTTP client pool for connection reuse.

    Features:
    - Lazy initialization (created on first use)
    - Safe first-use initialization via asyncio.Lock
    - Configurable limits (connections, timeouts)
    - Proper cleanup at shutdown
    """

    # CLASS VARIABLES - shared across all callers. _lock guards first-use creation.
    _client: ClassVar[httpx.AsyncClient | None] = None
    _lock: ClassVar[asyncio.Lock | None] = None

    DEFAULT_TIMEOUT: ClassVar[float] = 15.0
    DEFAULT_MAX_KEEPALIVE: ClassVar[int] = 10
    DEFAULT_MAX_CONNECTIONS: ClassVar[int] = 20
    USER_AGENT: ClassVar[str] = "LyricSpot/0.1.0"

    @classmethod
    def _ensure_lock(cls) -> asyncio.Lock:
        # Created lazily: asyncio.Lock should be born inside the running loop.
        if cls._lock is None:
            cls._lock = asyncio.Lock()
        return cls._lock

    @classmethod
    async def get_client(
        cls,
        timeout: float | None = None,
        max_keepalive: int | None = None,
        max_connections: int | None = None,
    ) -> httpx.AsyncClient:
        """Get the shared HTTP client instance.

        Config params only apply on the FIRST call.

        Args:
            timeout: Request timeout in seconds (default: 15.0)
            max_keepalive: Max idle connections to keep open (default: 10)
            max_connections: Max total concurrent connections (default: 20)

        Returns:
            Shared httpx.AsyncClient instance
        """
        async with cls._ensure_lock():
            if cls._client is None:
                effective_timeout = timeout or cls.DEFAULT_TIMEOUT
                effective_keepalive = max_keepalive or cls.DEFAULT_MAX_KEEPALIVE
                effective_max_conn = max_connections or cls.DEFAULT_MAX_CONNECTIONS

                cls._client = httpx.AsyncClient(
                    timeout=httpx.Timeout(effective_timeout),
                    limits=httpx.Limits(
                        max_keepalive_connections=effective_keepalive,
                        max_connections=effective_max_conn,
                    ),
                    headers={"User-Agent": cls.USER_AGENT},
                    http2=True,
                    # CDNs love redirects
                    follow_redirects=True,
                )
                logger.info(
                    "HTTP client pool initialized (timeout=%.1fs, keepalive=%d, max_conn=%d)",
                    effective_timeout,
                    effective_keepalive,
                    effective_max_conn,
                )
            return cls._client

    @classmethod
    async def close(cls) -> None:
        """Close the shared HTTP client and release all connections.

        After close(), get_client() creates a new client instance.
        """
        async with cls._ensure_lock():
            if cls._client is not None:
                await cls._client.aclose()
                cls._client = None
                logger.info("HTTP client pool closed")

    @classmethod
    def is_initialized(cls) -> bool:
        """Check if the client pool has been initialized."""
        return cls._client is not None
