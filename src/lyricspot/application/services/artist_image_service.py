"""Artist Image Service - artist avatars from an image catalog.

Hey future me - three entry points, three different caching rules:
- best_image(artist): singleflight per normalized artist key. Ten artist cards rendering at
  once for "Jay Chou" / "jay  chou" produce ONE catalog search and ONE download.
- candidates(artist, limit): NOT coalesced - this is the user browsing a picker and each call
  may use a different limit. Ranked by the resolution baked into the URL ("...600x600bb.jpg").
- refresh_avatars(names): bulk refresh for the library. Runs through a ConcurrencyLimiter (3)
  so a 2000-artist library doesn't open 2000 connections. Locked avatars (user picked them)
  are never touched.
"""

import asyncio
import logging
import re
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from urllib.parse import urlparse

from lyricspot.domain.entities import ArtistAvatar, AvatarCandidate
from lyricspot.domain.exceptions import ConfigurationError, PersistenceError
from lyricspot.domain.ports import (
    ArtistImageHit,
    IArtistAvatarRepository,
    IArtistImageProvider,
    IArtworkFetcher,
)
from lyricspot.domain.value_objects.artist_normalization import normalize_artist_key
from lyricspot.infrastructure.concurrency_limiter import ConcurrencyLimiter
from lyricspot.infrastructure.request_coalescer import RequestCoalescer

logger = logging.getLogger(__name__)

DEFAULT_IMAGE_CONCURRENCY = 3
MIN_CANDIDATES = 1
MAX_CANDIDATES = 100

_RESOLUTION_RE = re.compile(r"(\d+)x(\d+)")


def parse_resolution(url: str) -> int:
    """Pixel count (W*H) from a "WxH" token in the URL's file name, 0 if none.

    Examples:
        >>> parse_resolution("https://x/a/600x600bb.jpg")
        360000
        >>> parse_resolution("https://x/a/cover.jpg")
        0
    """
    if not url:
        return 0
    stem = PurePosixPath(urlparse(url).path).stem
    match = _RESOLUTION_RE.search(stem)
    if match is None:
        return 0
    return int(match.group(1)) * int(match.group(2))


def _candidate_quality(hit: ArtistImageHit) -> int:
    return max(parse_resolution(hit.fullsize_url), parse_resolution(hit.thumbnail_url))


@dataclass
class AvatarRefreshResult:
    """Summary of a bulk avatar refresh."""

    updated: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)


class ArtistImageService:
    """Look up, rank and store artist images."""

    def __init__(
        self,
        provider: IArtistImageProvider,
        fetcher: IArtworkFetcher,
        avatar_repository: IArtistAvatarRepository | None = None,
        limiter: ConcurrencyLimiter | None = None,
    ) -> None:
        """Initialize artist image service.

        Args:
            provider: Artist image catalog
            fetcher: Downloads image bytes
            avatar_repository: Avatar persistence (needed for refresh/apply only)
            limiter: Shared limiter for bulk downloads (defaults to 3 permits)
        """
        self._provider = provider
        self._fetcher = fetcher
        self._avatars = avatar_repository
        self._limiter = limiter or ConcurrencyLimiter(DEFAULT_IMAGE_CONCURRENCY)
        self._coalescer: RequestCoalescer[str, bytes | None] = RequestCoalescer("artist-image")

    @property
    def limiter(self) -> ConcurrencyLimiter:
        """Limiter guarding bulk image downloads."""
        return self._limiter

    async def best_image(self, artist: str) -> bytes | None:
        """Top-ranked image for an artist (coalesced per normalized name)."""
        key = normalize_artist_key(artist)
        if not key:
            return None
        return await self._coalescer.submit(key, lambda: self._fetch_best(artist.strip()))

    async def _fetch_best(self, artist: str) -> bytes | None:
        try:
            hits = await self._provider.search(artist, 1)
        except Exception as e:
            logger.warning("Artist image search failed for %s: %s", artist, e)
            return None
        if not hits:
            logger.debug("No artist image for %s", artist)
            return None
        return await self._fetcher.fetch(hits[0].fullsize_url)

    async def candidates(self, artist: str, limit: int = 20) -> list[AvatarCandidate]:
        """Ranked, deduplicated image candidates for the picker UI.

        Args:
            artist: Artist name
            limit: Max provider results, clamped to 1..100

        Returns:
            Candidates sorted by resolution (highest first)
        """
        name = artist.strip()
        if not name:
            return []
        capped = min(max(limit, MIN_CANDIDATES), MAX_CANDIDATES)

        try:
            hits = await self._provider.search(name, capped)
        except Exception as e:
            logger.warning("Artist image search failed for %s: %s", name, e)
            return []

        by_url: dict[str, AvatarCandidate] = {}
        for hit in hits:
            if not hit.fullsize_url:
                continue
            candidate = AvatarCandidate(
                id=hit.source_id or hit.fullsize_url,
                thumbnail_url=hit.thumbnail_url,
                fullsize_url=hit.fullsize_url,
                quality=_candidate_quality(hit),
            )
            existing = by_url.get(hit.fullsize_url)
            if existing is None or candidate.quality > existing.quality:
                by_url[hit.fullsize_url] = candidate

        ranked = sorted(by_url.values(), key=lambda c: c.quality, reverse=True)
        logger.debug("Artist %s: %d hits → %d candidates", name, len(hits), len(ranked))
        return ranked

    def _require_repository(self) -> IArtistAvatarRepository:
        if self._avatars is None:
            raise ConfigurationError("ArtistImageService was built without an avatar repository")
        return self._avatars

    async def refresh_avatars(
        self, artist_names: list[str], force: bool = False
    ) -> AvatarRefreshResult:
        """Fetch and store images for many artists, at most N downloads at a time.

        Args:
            artist_names: Display names (duplicates by normalized key are merged)
            force: Also refresh unlocked avatars that already have an image

        Returns:
            Keys that were updated, skipped (locked / already present / no image) or failed
        """
        repository = self._require_repository()
        names_by_key: dict[str, str] = {}
        for name in artist_names:
            key = normalize_artist_key(name)
            if key and key not in names_by_key:
                names_by_key[key] = name.strip()

        result = AvatarRefreshResult()
        if not names_by_key:
            return result

        try:
            existing = await repository.get_by_keys(list(names_by_key))
        except PersistenceError as e:
            logger.warning("Could not load avatars for refresh: %s", e)
            result.failed.extend(names_by_key)
            return result

        targets: list[str] = []
        for key in names_by_key:
            avatar = existing.get(key)
            if avatar is not None and avatar.is_locked:
                result.skipped.append(key)
            elif avatar is not None and avatar.image_data is not None and not force:
                result.skipped.append(key)
            else:
                targets.append(key)

        async def refresh_one(key: str) -> None:
            async with self._limiter:
                data = await self.best_image(names_by_key[key])
            if data is None:
                result.skipped.append(key)
                return
            try:
                # User may have locked a picked image while we were downloading.
                current = await repository.get_by_key(key)
                if current is not None and current.is_locked:
                    result.skipped.append(key)
                    return
                await repository.upsert(
                    ArtistAvatar(
                        artist_key=key,
                        artist_name=names_by_key[key],
                        image_data=data,
                        source=self._provider.name,
                        is_locked=False,
                    )
                )
            except PersistenceError as e:
                logger.warning("Could not store avatar for %s: %s", key, e)
                result.failed.append(key)
                return
            result.updated.append(key)

        await asyncio.gather(*(refresh_one(key) for key in targets))

        logger.info(
            "Artist avatar refresh finished\n"
            "├─ requested: %d\n"
            "├─ updated: %d\n"
            "├─ skipped: %d\n"
            "└─ failed: %d",
            len(names_by_key),
            len(result.updated),
            len(result.skipped),
            len(result.failed),
        )
        return result

    async def apply_candidate(self, artist: str, candidate: AvatarCandidate) -> bool:
        """Download a user-picked candidate and store it LOCKED.

        Returns:
            True if stored, False if the download or the write failed
        """
        repository = self._require_repository()
        key = normalize_artist_key(artist)
        if not key:
            return False

        data = await self._fetcher.fetch(candidate.fullsize_url)
        if data is None:
            logger.warning("Could not download picked image for %s: %s", artist, candidate.id)
            return False

        try:
            await repository.upsert(
                ArtistAvatar(
                    artist_key=key,
                    artist_name=artist.strip(),
                    image_data=data,
                    source=self._provider.name,
                    is_locked=True,
                    source_id=candidate.id,
                )
            )
        except PersistenceError as e:
            logger.warning("Could not store picked avatar for %s: %s", artist, e)
            return False
        logger.info("Stored picked avatar for %s (%s)", artist, candidate.id)
        return True
