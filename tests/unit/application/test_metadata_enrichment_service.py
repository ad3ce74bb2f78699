"""Tests for MetadataEnrichmentService."""

import asyncio

import pytest
from fakes import (
    FakeArtworkFetcher,
    FakeClock,
    FakeScriptNormalizer,
    RecordingMetadataProvider,
    make_item,
)

from lyricspot.application.services.metadata_enrichment_service import (
    MetadataEnrichmentService,
    build_query,
    needs_enrichment,
)
from lyricspot.domain.entities import EnrichmentPreferences, EnrichReason, MetadataMatch
from lyricspot.domain.exceptions import PersistenceError
from lyricspot.infrastructure.persistence import (
    InMemoryEnrichmentSettingsStore,
    InMemoryLibraryItemRepository,
)

ARTWORK_URL = "https://is1.example.com/image/600x600bb.jpg"


def placeholder_item(**overrides):
    values = {
        "id": "a",
        "title": "track07",
        "artist": "Unknown Artist",
        "album": "",
        "file_path": "/music/track07.mp3",
        "artwork_data": None,
    }
    values.update(overrides)
    return make_item(**values)


class FailingUpdateRepository(InMemoryLibraryItemRepository):
    """Fails every update after the first `ok_updates` ones."""

    def __init__(self, items, ok_updates: int) -> None:
        super().__init__(items)
        self.ok_updates = ok_updates

    async def update(self, item_id, mutator):
        if self.ok_updates <= 0:
            raise PersistenceError("database is locked")
        self.ok_updates -= 1
        return await super().update(item_id, mutator)


class RaisingMetadataProvider(RecordingMetadataProvider):
    async def search(self, title, artist=None):
        self.calls.append((title, artist))
        raise RuntimeError("adapter bug")


class TestNeedsEnrichment:
    """Test the skip decision."""

    def test_complete_item_is_skipped(self, clock: FakeClock):
        item = make_item(title="Real Song", artist="Real Artist", album="Real Album")
        assert not needs_enrichment(item, EnrichReason.PLAYBACK, EnrichmentPreferences(), clock())

    def test_missing_artwork_needs_enrichment(self, clock: FakeClock):
        item = make_item(title="Real Song", artwork_data=None)
        assert needs_enrichment(item, EnrichReason.PLAYBACK, EnrichmentPreferences(), clock())

    def test_recent_attempt_is_in_cooldown(self, clock: FakeClock):
        item = placeholder_item(last_metadata_attempt_at=clock())
        clock.advance(hours=23)
        assert not needs_enrichment(item, EnrichReason.PLAYBACK, EnrichmentPreferences(), clock())
        clock.advance(hours=2)
        assert needs_enrichment(item, EnrichReason.PLAYBACK, EnrichmentPreferences(), clock())

    @pytest.mark.parametrize("reason", [EnrichReason.MANUAL, EnrichReason.FORCE])
    def test_user_initiated_bypasses_everything(self, clock: FakeClock, reason: EnrichReason):
        item = make_item(title="Real Song", last_metadata_attempt_at=clock())
        assert needs_enrichment(item, reason, EnrichmentPreferences(), clock())


class TestBuildQuery:
    """Test query construction."""

    def test_placeholder_title_uses_file_name(self):
        query = build_query(placeholder_item())
        assert query.title == "track07"
        assert query.artist is None

    def test_real_values_pass_through(self):
        query = build_query(make_item(title="Real Song", artist="Real Artist"))
        assert (query.title, query.artist) == ("Real Song", "Real Artist")


class TestMetadataEnrichmentService:
    """Test MetadataEnrichmentService.enrich()."""

    @pytest.fixture
    def provider(self) -> RecordingMetadataProvider:
        return RecordingMetadataProvider(
            "provider-1",
            MetadataMatch(
                title="Real Song",
                artist="Real Artist",
                album="Real Album",
                artwork_url=ARTWORK_URL,
            ),
        )

    def make_service(
        self,
        repository,
        providers,
        artwork_fetcher: FakeArtworkFetcher,
        normalizer: FakeScriptNormalizer,
        settings_store,
        clock: FakeClock,
    ) -> MetadataEnrichmentService:
        return MetadataEnrichmentService(
            repository=repository,
            providers=providers,
            artwork_fetcher=artwork_fetcher,
            script_normalizer=normalizer,
            settings_store=settings_store,
            clock=clock,
        )

    @pytest.fixture
    def service_for(self, artwork_fetcher, normalizer, settings_store, clock):
        def build(repository, *providers, store=None):
            return self.make_service(
                repository,
                list(providers),
                artwork_fetcher,
                normalizer,
                store or settings_store,
                clock,
            )

        return build

    @pytest.mark.asyncio
    async def test_placeholder_item_is_filled_in(
        self, service_for, provider, artwork_fetcher, clock
    ):
        """Placeholder title/artist and missing artwork get replaced from the first hit."""
        repository = InMemoryLibraryItemRepository([placeholder_item()])
        service = service_for(repository, provider)

        result = await service.enrich("a", EnrichReason.IMPORT_FILE)

        assert result.changed
        assert result.source == "provider-1"
        assert set(result.updated_fields) == {"title", "artist", "album", "artwork"}
        item = await repository.get_by_id("a")
        assert item.title == "Real Song"
        assert item.artist == "Real Artist"
        assert item.album == "Real Album"
        assert item.has_artwork
        assert item.artwork_data == artwork_fetcher.data
        assert item.artwork_url == ARTWORK_URL
        assert item.metadata_source == "provider-1"
        assert item.last_enriched_at == clock.now
        assert item.last_metadata_attempt_at == clock.now
        assert provider.calls == [("track07", None)]

    @pytest.mark.asyncio
    async def test_curated_artist_survives_loose_match(self, service_for, clock):
        """A curated artist is kept when the catalog hit is only loosely similar."""
        item = make_item(
            id="b",
            title="Real Song",
            artist="Real Artist",
            album="Real Album",
            artwork_data=None,
        )
        repository = InMemoryLibraryItemRepository([item])
        provider = RecordingMetadataProvider(
            "provider-1",
            MetadataMatch(title="Real Song", artist="Real Artist Band", album="Real Album"),
        )
        service = service_for(repository, provider)

        result = await service.enrich("b", EnrichReason.IMPORT_FILE)

        assert not result.changed
        stored = await repository.get_by_id("b")
        assert stored.artist == "Real Artist"
        assert stored.last_enriched_at is None
        assert stored.metadata_source is None
        assert stored.last_metadata_attempt_at == clock.now

    @pytest.mark.asyncio
    async def test_artist_matching_file_name_is_not_a_placeholder(self, service_for):
        """Only the title counts as a placeholder when it equals the file base name."""
        item = make_item(
            id="c",
            title="Real Song",
            artist="Jay Chou",
            album="Unknown Album",
            file_path="/music/Jay Chou.mp3",
        )
        repository = InMemoryLibraryItemRepository([item])
        provider = RecordingMetadataProvider(
            "provider-1",
            MetadataMatch(title="Real Song", artist="Totally Different", album="Real Album"),
        )
        service = service_for(repository, provider)

        result = await service.enrich("c", EnrichReason.IMPORT_FILE)

        assert result.updated_fields == ["album"]
        stored = await repository.get_by_id("c")
        assert stored.artist == "Jay Chou"
        assert stored.album == "Real Album"

    @pytest.mark.asyncio
    async def test_lower_threshold_from_settings_store(self, service_for):
        item = make_item(
            id="b", title="Real Song", artist="Real Artist", album="Real Album", artwork_data=None
        )
        repository = InMemoryLibraryItemRepository([item])
        provider = RecordingMetadataProvider(
            "provider-1", MetadataMatch(artist="Real Artist Band")
        )
        store = InMemoryEnrichmentSettingsStore(EnrichmentPreferences(correction_threshold=0.6))
        service = service_for(repository, provider, store=store)

        result = await service.enrich("b", EnrichReason.PLAYBACK)

        assert result.updated_fields == ["artist"]
        assert (await repository.get_by_id("b")).artist == "Real Artist Band"

    @pytest.mark.asyncio
    async def test_manual_reason_overwrites_curated_values(self, service_for):
        item = make_item(id="c", title="My Title", artist="My Artist", album="My Album")
        repository = InMemoryLibraryItemRepository([item])
        provider = RecordingMetadataProvider(
            "provider-1", MetadataMatch(title="Other", artist="Someone", album="Elsewhere")
        )
        service = service_for(repository, provider)

        result = await service.enrich("c", EnrichReason.MANUAL)

        assert set(result.updated_fields) == {"title", "artist", "album"}

    @pytest.mark.asyncio
    async def test_cooldown_prevents_second_query(self, service_for, clock):
        repository = InMemoryLibraryItemRepository([placeholder_item()])
        provider = RecordingMetadataProvider("provider-1", None)
        service = service_for(repository, provider)

        first = await service.enrich("a", EnrichReason.PLAYBACK)
        clock.advance(hours=1)
        second = await service.enrich("a", EnrichReason.PLAYBACK)

        assert not first.skipped
        assert second.skipped
        assert len(provider.calls) == 1

        clock.advance(hours=24)
        await service.enrich("a", EnrichReason.PLAYBACK)
        assert len(provider.calls) == 2

    @pytest.mark.asyncio
    async def test_complete_item_is_not_queried(self, service_for):
        repository = InMemoryLibraryItemRepository([make_item()])
        provider = RecordingMetadataProvider("provider-1", None)
        service = service_for(repository, provider)

        result = await service.enrich("item-1", EnrichReason.IMPORT_FILE)

        assert result.skipped
        assert provider.calls == []
        assert (await repository.get_by_id("item-1")).last_metadata_attempt_at is None

    @pytest.mark.asyncio
    async def test_missing_item_is_skipped(self, service_for, provider):
        service = service_for(InMemoryLibraryItemRepository(), provider)
        result = await service.enrich("nope", EnrichReason.MANUAL)
        assert result.skipped
        assert provider.calls == []

    @pytest.mark.asyncio
    async def test_falls_through_to_next_provider(self, service_for):
        repository = InMemoryLibraryItemRepository([placeholder_item()])
        first = RecordingMetadataProvider("itunes", None)
        broken = RaisingMetadataProvider("broken")
        second = RecordingMetadataProvider("musicbrainz", MetadataMatch(title="Real Song"))
        service = service_for(repository, first, broken, second)

        result = await service.enrich("a", EnrichReason.IMPORT_FILE)

        assert result.source == "musicbrainz"
        assert len(first.calls) == len(broken.calls) == len(second.calls) == 1

    @pytest.mark.asyncio
    async def test_first_hit_wins_without_merging(self, service_for):
        repository = InMemoryLibraryItemRepository([placeholder_item()])
        first = RecordingMetadataProvider("itunes", MetadataMatch(title="Real Song"))
        second = RecordingMetadataProvider(
            "musicbrainz", MetadataMatch(title="Real Song", artist="Real Artist")
        )
        service = service_for(repository, first, second)

        result = await service.enrich("a", EnrichReason.IMPORT_FILE)

        assert result.source == "itunes"
        assert second.calls == []
        assert (await repository.get_by_id("a")).artist == "Unknown Artist"

    @pytest.mark.asyncio
    async def test_no_hit_changes_nothing(self, service_for, clock):
        repository = InMemoryLibraryItemRepository([placeholder_item()])
        service = service_for(repository, RecordingMetadataProvider("itunes", None))

        result = await service.enrich("a", EnrichReason.IMPORT_FILE)

        assert not result.changed
        assert result.source is None
        stored = await repository.get_by_id("a")
        assert stored.title == "track07"
        assert stored.last_metadata_attempt_at == clock.now

    @pytest.mark.asyncio
    async def test_traditional_catalog_values_are_simplified(self, service_for):
        repository = InMemoryLibraryItemRepository([placeholder_item()])
        provider = RecordingMetadataProvider(
            "itunes", MetadataMatch(title="後來", artist="劉若英")
        )
        service = service_for(repository, provider)

        await service.enrich("a", EnrichReason.IMPORT_FILE)

        stored = await repository.get_by_id("a")
        assert stored.title == "后来"
        assert stored.artist == "刘若英"

    @pytest.mark.asyncio
    async def test_title_falls_back_to_file_name(self, service_for):
        item = placeholder_item(title="", file_path="/music/後來.mp3")
        repository = InMemoryLibraryItemRepository([item])
        provider = RecordingMetadataProvider("itunes", MetadataMatch(artist="Real Artist"))
        service = service_for(repository, provider)

        result = await service.enrich("a", EnrichReason.IMPORT_FILE)

        assert "title" in result.updated_fields
        assert (await repository.get_by_id("a")).title == "后来"
        assert provider.calls == [("後來", None)]

    @pytest.mark.asyncio
    async def test_existing_artwork_is_never_replaced(self, service_for, artwork_fetcher):
        item = placeholder_item(artwork_data=b"mine")
        repository = InMemoryLibraryItemRepository([item])
        provider = RecordingMetadataProvider(
            "itunes", MetadataMatch(title="Real Song", artwork_url=ARTWORK_URL)
        )
        service = service_for(repository, provider)

        result = await service.enrich("a", EnrichReason.FORCE)

        assert "artwork" not in result.updated_fields
        assert artwork_fetcher.calls == []
        stored = await repository.get_by_id("a")
        assert stored.artwork_data == b"mine"
        # URL is still recorded, but doesn't count as a change
        assert stored.artwork_url == ARTWORK_URL

    @pytest.mark.asyncio
    async def test_failed_artwork_download_is_not_a_change(self, service_for, artwork_fetcher):
        artwork_fetcher.data = None
        item = make_item(artwork_data=None)
        repository = InMemoryLibraryItemRepository([item])
        provider = RecordingMetadataProvider(
            "itunes", MetadataMatch(title=item.title, artwork_url=ARTWORK_URL)
        )
        service = service_for(repository, provider)

        result = await service.enrich("item-1", EnrichReason.PLAYBACK)

        assert not result.changed
        assert (await repository.get_by_id("item-1")).last_enriched_at is None

    @pytest.mark.asyncio
    async def test_concurrent_calls_share_one_run(self, service_for, provider):
        repository = InMemoryLibraryItemRepository([placeholder_item()])
        service = service_for(repository, provider)

        results = await asyncio.gather(
            *(service.enrich("a", EnrichReason.PLAYBACK) for _ in range(5))
        )

        assert len(provider.calls) == 1
        assert all(r is results[0] for r in results)

    @pytest.mark.asyncio
    async def test_write_back_keeps_concurrent_lyrics_update(self, service_for):
        repository = InMemoryLibraryItemRepository([placeholder_item()])

        class LyricsSavingProvider(RecordingMetadataProvider):
            async def search(self, title, artist=None):
                await repository.update("a", lambda i: setattr(i, "lyrics_path", "/l/a.lrc"))
                return MetadataMatch(title="Real Song")

        service = service_for(repository, LyricsSavingProvider("itunes"))

        await service.enrich("a", EnrichReason.IMPORT_FILE)

        stored = await repository.get_by_id("a")
        assert stored.title == "Real Song"
        assert stored.lyrics_path == "/l/a.lrc"

    @pytest.mark.asyncio
    async def test_write_back_failure_is_absorbed(self, service_for, provider):
        repository = FailingUpdateRepository([placeholder_item()], ok_updates=1)
        service = service_for(repository, provider)

        result = await service.enrich("a", EnrichReason.IMPORT_FILE)

        assert not result.changed
        assert result.source == "provider-1"
        assert (await repository.get_by_id("a")).title == "track07"

    @pytest.mark.asyncio
    async def test_attempt_stamp_failure_is_absorbed(self, service_for, provider):
        repository = FailingUpdateRepository([placeholder_item()], ok_updates=0)
        service = service_for(repository, provider)

        result = await service.enrich("a", EnrichReason.IMPORT_FILE)

        assert not result.changed
        assert provider.calls == []
