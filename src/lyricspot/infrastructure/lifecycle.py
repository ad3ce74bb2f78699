"""Startup/shutdown wiring - the composition root.

Hey future me - this is the ONE place that knows which concrete adapter backs which port.
Everything else takes interfaces. The embedding app (player, import pipeline, CLI) does:

    async with enrichment_lifespan() as services:
        await services.library.enrich_items(new_ids, EnrichReason.IMPORT_FILE)

Startup order:
1. Logging (so the rest of startup can log)
2. Lyrics directory validation (fail fast, not on the first save)
3. Database + tables
4. HTTP clients → providers → engines
Shutdown closes the HTTP clients, the shared pool and the DB engine, in that order.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import timedelta

from lyricspot.application.services import (
    ArtistImageService,
    LibraryEnrichmentService,
    LyricsEnrichmentService,
    MetadataEnrichmentService,
)
from lyricspot.config import Settings, get_settings
from lyricspot.domain.exceptions import ConfigurationError
from lyricspot.domain.ports import IEnrichmentSettingsStore
from lyricspot.infrastructure.concurrency_limiter import ConcurrencyLimiter
from lyricspot.infrastructure.integrations import (
    HttpClientPool,
    ITunesClient,
    LrclibClient,
    MusicBrainzClient,
)
from lyricspot.infrastructure.lyrics_store import FileLyricsStore
from lyricspot.infrastructure.notifications import InProcessEventSink
from lyricspot.infrastructure.observability import configure_logging
from lyricspot.infrastructure.persistence import (
    ArtistAvatarRepository,
    Database,
    DatabaseEnrichmentSettingsStore,
    LibraryItemRepository,
)
from lyricspot.infrastructure.providers import (
    HttpArtworkFetcher,
    ITunesArtistImageProvider,
    ITunesMetadataProvider,
    LrclibLyricsProvider,
    MusicBrainzMetadataProvider,
    OpenCCScriptNormalizer,
)

logger = logging.getLogger(__name__)


# Hey future me, this runs BEFORE anything tries to save lyrics. A read-only mount or a typo in
# LYRICSPOT_STORAGE__LYRICS_DIR should stop startup with a clear message, not surface as a
# PersistenceError warning on every single song.
def _validate_lyrics_dir(settings: Settings) -> None:
    """Ensure the lyrics directory exists and is writable."""
    lyrics_dir = settings.storage.lyrics_dir
    try:
        lyrics_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise ConfigurationError(
            f"Unable to create lyrics directory '{lyrics_dir}': {exc}. "
            "Set LYRICSPOT_STORAGE__LYRICS_DIR to a writable location."
        ) from exc

    probe = lyrics_dir / ".lyricspot_write_test"
    try:
        probe.write_bytes(b"test")
        probe.unlink()
    except OSError as exc:
        raise ConfigurationError(
            f"Lyrics directory '{lyrics_dir}' is not writable: {exc}."
        ) from exc
    logger.debug("Verified lyrics directory: %s", lyrics_dir)


@dataclass
class EnrichmentServices:
    """Everything the embedding app needs, wired and ready."""

    settings: Settings
    database: Database
    metadata: MetadataEnrichmentService
    lyrics: LyricsEnrichmentService
    artist_images: ArtistImageService
    library: LibraryEnrichmentService
    items: LibraryItemRepository
    avatars: ArtistAvatarRepository
    settings_store: IEnrichmentSettingsStore
    events: InProcessEventSink
    _clients: list[ITunesClient | MusicBrainzClient | LrclibClient] = field(default_factory=list)

    async def close(self) -> None:
        """Release HTTP connections and the database engine."""
        for client in self._clients:
            await client.close()
        await HttpClientPool.close()
        await self.database.close()
        logger.info("Enrichment services shut down")


async def build_enrichment_services(
    settings: Settings | None = None,
    configure_logs: bool = True,
) -> EnrichmentServices:
    """Build the default adapter graph.

    Args:
        settings: Settings to use (defaults to get_settings())
        configure_logs: Set up root logging (embedding apps with their own logging pass False)

    Returns:
        Wired EnrichmentServices; call close() (or use enrichment_lifespan) when done
    """
    settings = settings or get_settings()
    if configure_logs:
        configure_logging(
            log_level=settings.logging.level,
            json_format=settings.logging.json_format,
            app_name=settings.app_name,
        )

    _validate_lyrics_dir(settings)

    database = Database(settings)
    await database.create_tables()

    enrichment = settings.enrichment
    items = LibraryItemRepository(database)
    avatars = ArtistAvatarRepository(database)
    settings_store = DatabaseEnrichmentSettingsStore(database, defaults=enrichment.to_preferences())

    itunes_client = ITunesClient(settings.itunes)
    musicbrainz_client = MusicBrainzClient(settings.musicbrainz)
    lrclib_client = LrclibClient(
        settings.lrclib,
        connect_timeout=enrichment.lyrics_connect_timeout,
        total_timeout=enrichment.lyrics_total_timeout,
    )

    normalizer = OpenCCScriptNormalizer()
    artwork_fetcher = HttpArtworkFetcher(max_bytes=enrichment.artwork_max_bytes)
    events = InProcessEventSink()

    metadata = MetadataEnrichmentService(
        repository=items,
        providers=[
            ITunesMetadataProvider(itunes_client),
            MusicBrainzMetadataProvider(musicbrainz_client),
        ],
        artwork_fetcher=artwork_fetcher,
        script_normalizer=normalizer,
        settings_store=settings_store,
        traditional_ratio_threshold=enrichment.traditional_ratio_threshold,
    )
    lyrics = LyricsEnrichmentService(
        repository=items,
        metadata_service=metadata,
        lyrics_provider=LrclibLyricsProvider(lrclib_client),
        lyrics_store=FileLyricsStore(settings.storage.lyrics_dir),
        script_normalizer=normalizer,
        settings_store=settings_store,
        event_sink=events,
        cooldown=timedelta(seconds=enrichment.lyrics_cooldown_seconds),
        search_budget_seconds=enrichment.lyrics_search_budget_seconds,
        call_timeout_seconds=enrichment.lyrics_total_timeout,
        traditional_ratio_threshold=enrichment.traditional_ratio_threshold,
    )
    artist_images = ArtistImageService(
        provider=ITunesArtistImageProvider(itunes_client),
        fetcher=artwork_fetcher,
        avatar_repository=avatars,
        limiter=ConcurrencyLimiter(enrichment.artist_image_concurrency),
    )

    logger.info(
        "Enrichment services ready\n"
        "├─ metadata providers: %s\n"
        "├─ lyrics: %s (mode default: %s)\n"
        "├─ lyrics dir: %s\n"
        "└─ database: %s",
        ", ".join(metadata.provider_names),
        settings.lrclib.base_url,
        enrichment.lyrics_mode.value,
        settings.storage.lyrics_dir,
        settings.database.url,
    )

    return EnrichmentServices(
        settings=settings,
        database=database,
        metadata=metadata,
        lyrics=lyrics,
        artist_images=artist_images,
        library=LibraryEnrichmentService(metadata, lyrics),
        items=items,
        avatars=avatars,
        settings_store=settings_store,
        events=events,
        _clients=[itunes_client, musicbrainz_client, lrclib_client],
    )


@asynccontextmanager
async def enrichment_lifespan(
    settings: Settings | None = None,
    configure_logs: bool = True,
) -> AsyncGenerator[EnrichmentServices, None]:
    """Build services on enter, close them on exit."""
    services = await build_enrichment_services(settings, configure_logs=configure_logs)
    try:
        yield services
    finally:
        await services.close()
