"""Persistence layer: SQLAlchemy async models/repositories plus in-memory twins."""

from lyricspot.infrastructure.persistence.database import Database
from lyricspot.infrastructure.persistence.memory import (
    InMemoryArtistAvatarRepository,
    InMemoryLibraryItemRepository,
)
from lyricspot.infrastructure.persistence.repositories import (
    ArtistAvatarRepository,
    LibraryItemRepository,
)
from lyricspot.infrastructure.persistence.settings_store import (
    DatabaseEnrichmentSettingsStore,
    InMemoryEnrichmentSettingsStore,
)

__all__ = [
    "ArtistAvatarRepository",
    "Database",
    "DatabaseEnrichmentSettingsStore",
    "InMemoryArtistAvatarRepository",
    "InMemoryEnrichmentSettingsStore",
    "InMemoryLibraryItemRepository",
    "LibraryItemRepository",
]
