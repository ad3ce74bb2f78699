"""Application settings (environment + .env) via pydantic-settings.

Hey future me - every knob lives here, grouped in nested sections. Env vars use the
LYRICSPOT_ prefix and "__" for nesting:

    LYRICSPOT_DATABASE__URL=sqlite+aiosqlite:///./music.db
    LYRICSPOT_ENRICHMENT__CORRECTION_THRESHOLD=0.9
    LYRICSPOT_MUSICBRAINZ__CONTACT=me@example.com
    LYRICSPOT_LOGGING__JSON_FORMAT=true

The enrichment section only holds DEFAULTS for the user-tunable values (lyrics mode,
threshold, cache hours). The live values come from the persisted settings store so users
can change them at runtime - see infrastructure/persistence/settings_store.py.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from lyricspot.domain.entities import EnrichmentPreferences, LyricsMode


class DatabaseSettings(BaseModel):
    """Database connection settings."""

    url: str = "sqlite+aiosqlite:///./lyricspot.db"
    echo: bool = False
    pool_pre_ping: bool = True


class EnrichmentSettings(BaseModel):
    """Enrichment engine tuning.

    Out-of-range values are CLAMPED, not rejected - same semantics as the
    persisted user settings (a bad env var shouldn't crash startup).
    """

    lyrics_mode: LyricsMode = LyricsMode.ONLINE
    correction_threshold: float = EnrichmentPreferences.DEFAULT_THRESHOLD
    cache_hours: float = EnrichmentPreferences.DEFAULT_CACHE_HOURS

    lyrics_cooldown_seconds: float = Field(default=300.0, ge=0)
    lyrics_search_budget_seconds: float = Field(default=30.0, gt=0)
    lyrics_connect_timeout: float = Field(default=10.0, gt=0)
    lyrics_total_timeout: float = Field(default=15.0, gt=0)
    artist_image_concurrency: int = Field(default=3, ge=1)
    artwork_max_bytes: int = Field(default=2 * 1024 * 1024, gt=0)
    traditional_ratio_threshold: float = Field(default=0.1, gt=0, le=1)

    @field_validator("correction_threshold", mode="after")
    @classmethod
    def _clamp_threshold(cls, value: float) -> float:
        return EnrichmentPreferences(correction_threshold=value).correction_threshold

    @field_validator("cache_hours", mode="after")
    @classmethod
    def _clamp_cache_hours(cls, value: float) -> float:
        return EnrichmentPreferences(cache_hours=value).cache_hours

    def to_preferences(self) -> EnrichmentPreferences:
        """Default preferences seeded from config."""
        return EnrichmentPreferences(
            lyrics_mode=self.lyrics_mode,
            correction_threshold=self.correction_threshold,
            cache_hours=self.cache_hours,
        )


class MusicBrainzSettings(BaseModel):
    """MusicBrainz API settings.

    MusicBrainz rejects requests without a proper User-Agent
    ("AppName/Version ( contact )"). Put a real contact here!
    """

    base_url: str = "https://musicbrainz.org/ws/2"
    app_name: str = "LyricSpot"
    app_version: str = "0.1.0"
    contact: str = "https://github.com/lyricspot/lyricspot"
    rate_limit_seconds: float = Field(default=1.0, ge=0)
    timeout: float = Field(default=15.0, gt=0)


class ITunesSettings(BaseModel):
    """iTunes Search API settings."""

    base_url: str = "https://itunes.apple.com"
    country: str | None = None
    artwork_size: str = "600x600"
    timeout: float = Field(default=15.0, gt=0)


class LrclibSettings(BaseModel):
    """LRCLIB lyrics API settings."""

    base_url: str = "https://lrclib.net"
    user_agent: str = "LyricSpot/0.1.0 (https://github.com/lyricspot/lyricspot)"


class StorageSettings(BaseModel):
    """Local storage paths."""

    lyrics_dir: Path = Path("./data/lyrics")


class LoggingSettings(BaseModel):
    """Logging settings."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    json_format: bool = False

    @field_validator("level", mode="before")
    @classmethod
    def _upper_level(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value


class Settings(BaseSettings):
    """Root settings object."""

    model_config = SettingsConfigDict(
        env_prefix="LYRICSPOT_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "lyricspot"
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    enrichment: EnrichmentSettings = Field(default_factory=EnrichmentSettings)
    musicbrainz: MusicBrainzSettings = Field(default_factory=MusicBrainzSettings)
    itunes: ITunesSettings = Field(default_factory=ITunesSettings)
    lrclib: LrclibSettings = Field(default_factory=LrclibSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


# Hey future me, lru_cache makes this a process-wide singleton. Tests that need different
# settings should build Settings(...) directly instead of fighting the cache (or call
# get_settings.cache_clear()).
@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
