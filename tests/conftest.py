"""Shared fixtures for lyricspot tests."""

import pytest
from fakes import (
    FakeArtworkFetcher,
    FakeClock,
    FakeLyricsStore,
    FakeMonotonic,
    FakeScriptNormalizer,
)

from lyricspot.infrastructure.notifications import InProcessEventSink
from lyricspot.infrastructure.persistence import (
    InMemoryEnrichmentSettingsStore,
    InMemoryLibraryItemRepository,
)


@pytest.fixture
def normalizer() -> FakeScriptNormalizer:
    return FakeScriptNormalizer()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def monotonic() -> FakeMonotonic:
    return FakeMonotonic()


@pytest.fixture
def settings_store() -> InMemoryEnrichmentSettingsStore:
    return InMemoryEnrichmentSettingsStore()


@pytest.fixture
def repository() -> InMemoryLibraryItemRepository:
    return InMemoryLibraryItemRepository()


@pytest.fixture
def artwork_fetcher() -> FakeArtworkFetcher:
    return FakeArtworkFetcher()


@pytest.fixture
def lyrics_store() -> FakeLyricsStore:
    return FakeLyricsStore()


@pytest.fixture
def event_sink() -> InProcessEventSink:
    return InProcessEventSink()
