# Hey future me - this is the METADATA half of enrichment!
#
# Triggers: file import, playback start, the user's "fix metadata" button (manual/force).
# For one library item it decides IF we should ask the catalogs, asks them in a fixed order
# (iTunes first - it has artwork - then MusicBrainz), and merges the first hit into the record
# field by field through the overwrite policy.
#
# KEY INSIGHT: cooldown is ATTEMPT-driven. last_metadata_attempt_at is stamped before we even
# talk to a catalog, so an item that never matches is retried at most once per cache interval
# (default 24h) instead of on every single playback.
"""Metadata Enrichment Service - fills in title/artist/album/artwork from external catalogs."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING

from lyricspot.domain.entities import (
    EnrichmentPreferences,
    EnrichReason,
    LibraryItem,
    MetadataMatch,
    utc_now,
)
from lyricspot.domain.exceptions import PersistenceError
from lyricspot.domain.value_objects.overwrite_policy import (
    is_placeholder,
    is_unknown,
    should_overwrite,
)
from lyricspot.domain.value_objects.script_variants import (
    DEFAULT_TRADITIONAL_RATIO_THRESHOLD,
    normalize_script,
)
from lyricspot.infrastructure.observability.logging import correlation_scope
from lyricspot.infrastructure.request_coalescer import RequestCoalescer

if TYPE_CHECKING:
    from lyricspot.domain.ports import (
        IArtworkFetcher,
        IEnrichmentSettingsStore,
        ILibraryItemRepository,
        IMetadataProvider,
        IScriptNormalizer,
    )

logger = logging.getLogger(__name__)


@dataclass
class MetadataEnrichmentResult:
    """Outcome of one metadata enrichment call.

    skipped=True means we never asked a catalog (cooldown, nothing missing, item gone).
    """

    item_id: str
    updated_fields: list[str] = field(default_factory=list)
    source: str | None = None
    skipped: bool = False

    @property
    def changed(self) -> bool:
        """True if at least one field actually changed value."""
        return bool(self.updated_fields)


@dataclass(frozen=True)
class MetadataQuery:
    """What we send to the catalogs."""

    title: str
    artist: str | None


def needs_enrichment(
    item: LibraryItem,
    reason: EnrichReason,
    preferences: EnrichmentPreferences,
    now: datetime,
) -> bool:
    """Decide whether an item is worth a catalog lookup.

    manual/force always say yes. Otherwise the item must be missing something
    (placeholder title, unknown artist/album, no artwork) AND the last attempt
    must be older than the cache interval.
    """
    if reason.is_user_initiated:
        return True

    base_name = item.file_base_name
    missing_something = (
        is_placeholder(item.title, base_name)
        or is_unknown(item.artist)
        or is_unknown(item.album)
        or not item.has_artwork
    )
    if not missing_something:
        return False

    last_attempt = item.last_metadata_attempt_at
    if last_attempt is not None and now - last_attempt < preferences.cache_interval:
        return False
    return True


def build_query(item: LibraryItem) -> MetadataQuery:
    """Title falls back to the file base name, unknown artists are left out."""
    base_name = item.file_base_name
    title = base_name if is_placeholder(item.title, base_name) else item.title
    artist = None if is_unknown(item.artist) else item.artist
    return MetadataQuery(title=title, artist=artist)


class MetadataEnrichmentService:
    """Enrich library items with metadata from an ordered list of catalogs.

    Usage:
        service = MetadataEnrichmentService(repo, [itunes, musicbrainz], fetcher, opencc, store)
        result = await service.enrich(item_id, EnrichReason.PLAYBACK)
        if result.changed:
            ...

    Concurrent enrich() calls for the same item share ONE run (and one result).
    """

    def __init__(
        self,
        repository: ILibraryItemRepository,
        providers: Sequence[IMetadataProvider],
        artwork_fetcher: IArtworkFetcher,
        script_normalizer: IScriptNormalizer,
        settings_store: IEnrichmentSettingsStore,
        traditional_ratio_threshold: float = DEFAULT_TRADITIONAL_RATIO_THRESHOLD,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        """Initialize metadata enrichment service.

        Args:
            repository: Library item repository
            providers: Metadata catalogs in priority order (richest first)
            artwork_fetcher: Downloads cover art
            script_normalizer: Traditional/Simplified conversion
            settings_store: Persisted user preferences (threshold, cache hours)
            traditional_ratio_threshold: Ratio at which catalog text is simplified
            clock: Current time source (tests freeze it)
        """
        self._repository = repository
        self._providers = list(providers)
        self._artwork_fetcher = artwork_fetcher
        self._normalizer = script_normalizer
        self._settings_store = settings_store
        self._ratio_threshold = traditional_ratio_threshold
        self._clock = clock
        self._coalescer: RequestCoalescer[str, MetadataEnrichmentResult] = RequestCoalescer(
            "metadata"
        )

    @property
    def provider_names(self) -> list[str]:
        """Provider names in priority order."""
        return [provider.name for provider in self._providers]

    async def enrich(
        self, item_id: str, reason: EnrichReason = EnrichReason.IMPORT_FILE
    ) -> MetadataEnrichmentResult:
        """Enrich one item (coalesced per item id).

        Never raises for provider or persistence failures - the result just
        reports "nothing changed".
        """
        return await self._coalescer.submit(item_id, lambda: self._run(item_id, reason))

    async def _load_preferences(self) -> EnrichmentPreferences:
        try:
            return await self._settings_store.load()
        except PersistenceError as e:
            logger.warning("Could not load enrichment settings, using defaults: %s", e)
            return EnrichmentPreferences()

    async def _run(self, item_id: str, reason: EnrichReason) -> MetadataEnrichmentResult:
        with correlation_scope("meta", item_id):
            try:
                return await self._enrich_item(item_id, reason)
            except PersistenceError as e:
                # Attempt stamp may or may not have landed - either way we're done for now.
                logger.warning("Metadata enrichment for %s aborted: %s", item_id, e)
                return MetadataEnrichmentResult(item_id=item_id)

    async def _enrich_item(self, item_id: str, reason: EnrichReason) -> MetadataEnrichmentResult:
        item = await self._repository.get_by_id(item_id)
        if item is None:
            logger.debug("Item %s not found, skipping metadata enrichment", item_id)
            return MetadataEnrichmentResult(item_id=item_id, skipped=True)

        preferences = await self._load_preferences()
        now = self._clock()
        if not needs_enrichment(item, reason, preferences, now):
            logger.debug(
                "Skip metadata for %s (reason=%s: nothing missing or within %.0fh cooldown)",
                item_id,
                reason.value,
                preferences.cache_hours,
            )
            return MetadataEnrichmentResult(item_id=item_id, skipped=True)

        stamped = await self._repository.update(
            item_id, lambda i: setattr(i, "last_metadata_attempt_at", now)
        )
        if stamped is None:
            logger.debug("Item %s vanished before metadata attempt", item_id)
            return MetadataEnrichmentResult(item_id=item_id, skipped=True)

        query = build_query(item)
        logger.info(
            "Metadata enrichment start for %s: %s / %s (reason=%s)",
            item_id,
            query.artist or "Unknown",
            query.title,
            reason.value,
        )

        hit = await self._query_providers(query)
        if hit is None:
            logger.info("No metadata results for %s from %s", item_id, self.provider_names)
            return MetadataEnrichmentResult(item_id=item_id)

        source, match = hit
        return await self._apply_match(item_id, item, source, match, reason, preferences, now)

    async def _query_providers(self, query: MetadataQuery) -> tuple[str, MetadataMatch] | None:
        """First non-empty result wins. Fields are NOT merged across providers."""
        for provider in self._providers:
            try:
                match = await provider.search(query.title, query.artist)
            except Exception as e:
                # Providers shouldn't raise, but one broken adapter must not kill the chain.
                logger.warning("Metadata provider %s failed: %s", provider.name, e, exc_info=True)
                continue
            if match is not None and not match.is_empty:
                logger.info("Metadata hit from %s", provider.name)
                return provider.name, match
            logger.debug("Metadata miss from %s", provider.name)
        return None

    async def _download_artwork(self, item: LibraryItem, match: MetadataMatch) -> bytes | None:
        if item.has_artwork or not match.artwork_url:
            return None
        try:
            return await self._artwork_fetcher.fetch(match.artwork_url)
        except Exception as e:
            logger.warning("Artwork download failed for %s: %s", match.artwork_url, e)
            return None

    def _simplify(self, item_id: str, field_name: str, value: str) -> str:
        result = normalize_script(value, self._normalizer, self._ratio_threshold)
        if result.converted:
            logger.info(
                "Simplified %s for %s (traditional ratio %.2f)", field_name, item_id, result.ratio
            )
        return result.value

    async def _apply_match(
        self,
        item_id: str,
        snapshot: LibraryItem,
        source: str,
        match: MetadataMatch,
        reason: EnrichReason,
        preferences: EnrichmentPreferences,
        now: datetime,
    ) -> MetadataEnrichmentResult:
        artwork = await self._download_artwork(snapshot, match)
        threshold = preferences.correction_threshold
        updated_fields: list[str] = []

        # Hey future me, the mutator runs against the FRESH row inside the repo's transaction,
        # not against `snapshot` - a concurrent lyrics save between our read and this write
        # must survive. updated_fields is rebuilt from scratch in case the repo retries.
        def apply(item: LibraryItem) -> None:
            updated_fields.clear()
            base_name = item.file_base_name

            if match.title:
                title = self._simplify(item_id, "title", match.title)
                if title != item.title and should_overwrite(
                    item.title, title, reason, threshold, base_name
                ):
                    item.title = title
                    updated_fields.append("title")
            elif base_name and is_placeholder(item.title, base_name):
                title = self._simplify(item_id, "title", base_name)
                if title != item.title:
                    item.title = title
                    updated_fields.append("title")

            # Only the title is compared against the file name. An artist or album that
            # happens to equal it is still a curated value.
            if match.artist:
                artist = self._simplify(item_id, "artist", match.artist)
                if artist != item.artist and should_overwrite(
                    item.artist, artist, reason, threshold
                ):
                    item.artist = artist
                    updated_fields.append("artist")

            if match.album and match.album != item.album and should_overwrite(
                item.album, match.album, reason, threshold
            ):
                item.album = match.album
                updated_fields.append("album")

            # Artwork is only ever ADDED, never replaced.
            if item.artwork_data is None and artwork is not None:
                item.artwork_data = artwork
                updated_fields.append("artwork")

            if match.artwork_url and item.artwork_url is None:
                item.artwork_url = match.artwork_url

            if updated_fields:
                item.last_enriched_at = now
                item.metadata_source = source

        try:
            updated = await self._repository.update(item_id, apply)
        except PersistenceError as e:
            logger.warning("Metadata write-back failed for %s: %s", item_id, e)
            return MetadataEnrichmentResult(item_id=item_id, source=source)

        if updated is None:
            logger.debug("Item %s vanished before metadata write-back", item_id)
            return MetadataEnrichmentResult(item_id=item_id, source=source)

        if not updated_fields:
            logger.info("No field updated for %s from %s", item_id, source)
            return MetadataEnrichmentResult(item_id=item_id, source=source)

        logger.info(
            "Metadata updated for %s\n"
            "├─ source: %s\n"
            "├─ fields: %s\n"
            "└─ now: %s / %s / %s",
            item_id,
            source,
            ", ".join(updated_fields),
            updated.artist,
            updated.title,
            updated.album,
        )
        return MetadataEnrichmentResult(
            item_id=item_id, updated_fields=list(updated_fields), source=source
        )
