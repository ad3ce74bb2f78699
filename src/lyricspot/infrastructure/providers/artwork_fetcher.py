"""Artwork download - IArtworkFetcher implementation."""

import logging

import httpx

from lyricspot.domain.ports import IArtworkFetcher
from lyricspot.infrastructure.integrations.http_pool import HttpClientPool

logger = logging.getLogger(__name__)

DEFAULT_MAX_BYTES = 2 * 1024 * 1024


class HttpArtworkFetcher(IArtworkFetcher):
    """Download artwork bytes through the shared HTTP pool.

    Hey future me - artwork goes straight into the library record (and artist avatar rows),
    so we refuse anything over max_bytes (2 MiB). A 600x600 JPEG is ~100 KB; something
    bigger is either a mistake or a CDN handing us the master file.

    We stream the body and bail out as soon as the limit is crossed - no point downloading
    40 MB just to throw it away.
    """

    def __init__(
        self,
        max_bytes: int = DEFAULT_MAX_BYTES,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._max_bytes = max_bytes
        self._client = client

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is not None:
            return self._client
        return await HttpClientPool.get_client()

    async def fetch(self, url: str) -> bytes | None:
        if not url:
            return None
        client = await self._get_client()
        try:
            async with client.stream("GET", url) as response:
                if response.status_code != 200:
                    logger.debug("Artwork download %s returned HTTP %d", url, response.status_code)
                    return None
                declared = response.headers.get("Content-Length")
                if declared and declared.isdigit() and int(declared) > self._max_bytes:
                    logger.info("Artwork too large (%s bytes declared): %s", declared, url)
                    return None
                chunks: list[bytes] = []
                total = 0
                async for chunk in response.aiter_bytes():
                    total += len(chunk)
                    if total > self._max_bytes:
                        logger.info("Artwork exceeded %d bytes, dropped: %s", self._max_bytes, url)
                        return None
                    chunks.append(chunk)
                return b"".join(chunks)
        except httpx.HTTPError as e:
            logger.warning("Artwork download failed for %s: %s", url, e)
            return None
