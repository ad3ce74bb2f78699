"""Domain ports (interfaces) for dependency inversion.

Hey future me - the engines in application/services ONLY talk to these interfaces.
Concrete adapters live in infrastructure/ and get wired in lifecycle.py.
Tests swap in fakes (see tests/conftest.py) - no network, no disk.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass

from lyricspot.domain.entities import (
    ArtistAvatar,
    EnrichmentPreferences,
    LibraryItem,
    LyricsMatch,
    MetadataMatch,
)
from lyricspot.domain.ports.notification import (
    INotificationProvider,
    Notification,
    NotificationResult,
    NotificationType,
)

# A mutator changes the item in place. The repository decides how "in place" maps to storage.
ItemMutator = Callable[[LibraryItem], None]


# Hey future me, update() takes a MUTATOR instead of a whole entity so the engines never
# write back a stale snapshot. The repo loads the current row, applies the mutator, persists -
# all in one transaction. Returns the updated item, or None if it vanished meanwhile.
class ILibraryItemRepository(ABC):
    """Repository interface for LibraryItem entities."""

    @abstractmethod
    async def add(self, item: LibraryItem) -> None:
        """Add a new library item."""
        pass

    @abstractmethod
    async def get_by_id(self, item_id: str) -> LibraryItem | None:
        """Get a library item by ID."""
        pass

    @abstractmethod
    async def update(self, item_id: str, mutator: ItemMutator) -> LibraryItem | None:
        """Apply a field mutation atomically.

        Args:
            item_id: Item to mutate
            mutator: Callable changing the item in place

        Returns:
            The updated item, or None if the item does not exist
        """
        pass

    @abstractmethod
    async def list_ids(self, limit: int = 1000, offset: int = 0) -> list[str]:
        """List item IDs in insertion order."""
        pass


class IArtistAvatarRepository(ABC):
    """Repository interface for ArtistAvatar entities (keyed by normalized artist name)."""

    @abstractmethod
    async def get_by_key(self, artist_key: str) -> ArtistAvatar | None:
        """Get an avatar by its normalized key."""
        pass

    @abstractmethod
    async def get_by_keys(self, artist_keys: list[str]) -> dict[str, ArtistAvatar]:
        """Get avatars for many keys at once (missing keys are simply absent)."""
        pass

    @abstractmethod
    async def upsert(self, avatar: ArtistAvatar) -> None:
        """Insert or replace an avatar."""
        pass

    @abstractmethod
    async def set_lock(self, artist_key: str, locked: bool) -> None:
        """Lock or unlock an avatar (locked = user choice, never auto-refreshed)."""
        pass

    @abstractmethod
    async def clear_image(self, artist_key: str) -> None:
        """Drop the image bytes but keep the row."""
        pass

    @abstractmethod
    async def delete_by_key(self, artist_key: str) -> None:
        """Delete an avatar."""
        pass

    @abstractmethod
    async def delete_by_keys(self, artist_keys: list[str]) -> None:
        """Delete many avatars."""
        pass


class IEnrichmentSettingsStore(ABC):
    """Persisted key/value enrichment preferences."""

    @abstractmethod
    async def load(self) -> EnrichmentPreferences:
        """Load current preferences (defaults for missing keys)."""
        pass

    @abstractmethod
    async def save(self, preferences: EnrichmentPreferences) -> None:
        """Persist preferences."""
        pass


class IMetadataProvider(ABC):
    """A metadata catalog. Consulted in a fixed priority order by the metadata engine."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Source name recorded as metadata_source (e.g. 'itunes')."""
        pass

    @abstractmethod
    async def search(self, title: str, artist: str | None = None) -> MetadataMatch | None:
        """Search for a recording.

        Implementations MUST NOT raise - network and decode failures return None.

        Args:
            title: Track title (never empty)
            artist: Artist name, None if unknown

        Returns:
            MetadataMatch or None if nothing was found
        """
        pass


class ILyricsProvider(ABC):
    """A lyrics catalog."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Source name recorded as lyrics_source (e.g. 'lrclib')."""
        pass

    @abstractmethod
    async def get(
        self,
        artist: str,
        title: str,
        album: str | None = None,
        duration_seconds: int | None = None,
    ) -> LyricsMatch | None:
        """Look up lyrics for one exact query tuple.

        Implementations MUST NOT raise - failures return None.
        """
        pass


class IArtworkFetcher(ABC):
    """Downloads image bytes."""

    @abstractmethod
    async def fetch(self, url: str) -> bytes | None:
        """Fetch image bytes; None on failure or oversized payload."""
        pass


@dataclass(frozen=True)
class ArtistImageHit:
    """Raw artist image search result, before ranking/dedup."""

    source_id: str | None
    thumbnail_url: str
    fullsize_url: str


class IArtistImageProvider(ABC):
    """Searches a catalog for artist images."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Source name recorded on ArtistAvatar.source."""
        pass

    @abstractmethod
    async def search(self, artist: str, limit: int) -> list[ArtistImageHit]:
        """Search images for an artist (empty list on failure)."""
        pass


# Hey future me, script conversion (Traditional <-> Simplified Chinese) is NOT our algorithm.
# We consume it through this port. Production uses OpenCC, tests use a tiny mapping table.
class IScriptNormalizer(ABC):
    """Traditional/Simplified Chinese script conversion capability."""

    @abstractmethod
    def to_simplified(self, text: str) -> str:
        """Convert to Simplified script (non-Chinese text passes through)."""
        pass

    @abstractmethod
    def to_traditional(self, text: str) -> str:
        """Convert to Traditional script (non-Chinese text passes through)."""
        pass


class ILyricsStore(ABC):
    """Durable lyrics payload storage, keyed by item id."""

    @abstractmethod
    async def save(self, item_id: str, content: str) -> str:
        """Durably write lyrics for an item.

        Returns:
            Location of the stored payload (recorded as lyrics_path)

        Raises:
            PersistenceError: If the write failed
        """
        pass

    @abstractmethod
    async def find_sidecar(self, audio_path: str) -> str | None:
        """Find an existing local .lrc file for an audio file (local-only mode)."""
        pass


__all__ = [
    "ArtistImageHit",
    "IArtistAvatarRepository",
    "IArtistImageProvider",
    "IArtworkFetcher",
    "IEnrichmentSettingsStore",
    "ILibraryItemRepository",
    "ILyricsProvider",
    "ILyricsStore",
    "IMetadataProvider",
    "INotificationProvider",
    "IScriptNormalizer",
    "ItemMutator",
    "Notification",
    "NotificationResult",
    "NotificationType",
]
