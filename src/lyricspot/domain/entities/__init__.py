"""Domain entities."""

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from enum import Enum
from pathlib import PurePath
from typing import ClassVar


def utc_now() -> datetime:
    """Get current UTC time."""
    return datetime.now(UTC)


# Hey future me, EnrichReason is the WHY of an enrichment call. import_file and playback are
# "background" triggers and respect every skip/cooldown rule. manual and force come from the
# user pressing a button - they bypass cooldowns AND the overwrite policy (user asked for it).
class EnrichReason(str, Enum):
    """Why an enrichment run was requested."""

    IMPORT_FILE = "import_file"
    PLAYBACK = "playback"
    MANUAL = "manual"
    FORCE = "force"

    @property
    def is_user_initiated(self) -> bool:
        """True for reasons that bypass skip, cooldown and overwrite rules."""
        return self in (EnrichReason.MANUAL, EnrichReason.FORCE)


class LyricsMode(str, Enum):
    """Where lyrics may come from."""

    ONLINE = "online"
    LOCAL_ONLY = "local_only"


@dataclass
class LibraryItem:
    """A song in the local library.

    Created by the import step, mutated in place by the enrichment engines,
    never deleted by them. `file_path` is only used to derive the file base name
    (placeholder title detection) and sidecar lyrics lookup.

    Timestamps:
    - last_metadata_attempt_at / last_lyrics_attempt_at: stamped on EVERY attempt
    - last_enriched_at: stamped only when a metadata field actually changed
    - last_lyrics_fetched_at: stamped when lyrics were durably saved
    """

    id: str
    title: str
    artist: str
    album: str
    file_path: str = ""
    duration: float = 0.0
    artwork_data: bytes | None = None
    artwork_url: str | None = None
    metadata_source: str | None = None
    last_enriched_at: datetime | None = None
    last_metadata_attempt_at: datetime | None = None
    lyrics_path: str | None = None
    lyrics_source: str | None = None
    last_lyrics_fetched_at: datetime | None = None
    last_lyrics_attempt_at: datetime | None = None

    @property
    def has_artwork(self) -> bool:
        """Check if embedded artwork is present."""
        return self.artwork_data is not None

    @property
    def has_lyrics(self) -> bool:
        """Check if a lyrics payload has been recorded."""
        return self.lyrics_path is not None

    @property
    def file_base_name(self) -> str:
        """File name without directory and extension ("" if no path)."""
        if not self.file_path:
            return ""
        return PurePath(self.file_path).stem


@dataclass(frozen=True)
class MetadataMatch:
    """Result of a metadata provider search.

    Every field is optional - providers return whatever they know.
    """

    title: str | None = None
    artist: str | None = None
    album: str | None = None
    artwork_url: str | None = None

    @property
    def is_empty(self) -> bool:
        """True if the provider knew nothing useful."""
        return not any((self.title, self.artist, self.album, self.artwork_url))


@dataclass(frozen=True)
class LyricsMatch:
    """Result of a lyrics provider lookup."""

    synced_lyrics: str | None = None
    plain_lyrics: str | None = None

    @property
    def has_synced(self) -> bool:
        """True if time-tagged lyrics with content are present."""
        return bool(self.synced_lyrics and self.synced_lyrics.strip())

    @property
    def has_plain(self) -> bool:
        """True if untagged lyrics with content are present."""
        return bool(self.plain_lyrics and self.plain_lyrics.strip())


@dataclass(frozen=True)
class AvatarCandidate:
    """One artist image option offered to the user.

    quality is the parsed pixel count (W*H) from the URL, 0 if unknown.
    """

    id: str
    thumbnail_url: str
    fullsize_url: str
    quality: int = 0


@dataclass
class ArtistAvatar:
    """Stored artist image keyed by the normalized artist name.

    is_locked means the user picked this image - bulk refreshes never touch it.
    """

    artist_key: str
    artist_name: str
    image_data: bytes | None = None
    source: str = "itunes"
    is_locked: bool = False
    source_id: str | None = None
    updated_at: datetime = field(default_factory=utc_now)


@dataclass(frozen=True)
class EnrichmentPreferences:
    """User-tunable enrichment settings (persisted key/value store).

    Out-of-range values are clamped, zero/None means "use default" (that's how
    an unset key reads back from the store).
    """

    DEFAULT_THRESHOLD: ClassVar[float] = 0.8
    DEFAULT_CACHE_HOURS: ClassVar[float] = 24.0
    MIN_THRESHOLD: ClassVar[float] = 0.5
    MAX_THRESHOLD: ClassVar[float] = 1.0
    MIN_CACHE_HOURS: ClassVar[float] = 1.0
    MAX_CACHE_HOURS: ClassVar[float] = 168.0

    lyrics_mode: LyricsMode = LyricsMode.ONLINE
    correction_threshold: float = DEFAULT_THRESHOLD
    cache_hours: float = DEFAULT_CACHE_HOURS

    def __post_init__(self) -> None:
        threshold = self.correction_threshold or self.DEFAULT_THRESHOLD
        hours = self.cache_hours or self.DEFAULT_CACHE_HOURS
        object.__setattr__(
            self,
            "correction_threshold",
            min(max(float(threshold), self.MIN_THRESHOLD), self.MAX_THRESHOLD),
        )
        object.__setattr__(
            self,
            "cache_hours",
            min(max(float(hours), self.MIN_CACHE_HOURS), self.MAX_CACHE_HOURS),
        )
        object.__setattr__(self, "lyrics_mode", LyricsMode(self.lyrics_mode))

    @property
    def cache_interval(self) -> timedelta:
        """Metadata cooldown as a timedelta."""
        return timedelta(hours=self.cache_hours)


__all__ = [
    "ArtistAvatar",
    "AvatarCandidate",
    "EnrichReason",
    "EnrichmentPreferences",
    "LibraryItem",
    "LyricsMatch",
    "LyricsMode",
    "MetadataMatch",
    "utc_now",
]
