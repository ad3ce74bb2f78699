"""Persisted enrichment preferences - IEnrichmentSettingsStore implementations.

Hey future me - these keys are SHARED with anything else that edits settings (a settings UI,
a CLI). Don't rename them! Values are stored as strings in app_settings:

    enrichment.lyrics.source         "lrclib" (online) | "localOnly"
    enrichment.correction.threshold  "0.85"   (0 / missing → default 0.8, clamped 0.5-1.0)
    enrichment.cache.hours           "48"     (0 / missing → default 24, clamped 1-168)

Clamping happens in EnrichmentPreferences itself, so a hand-edited row with "5.0" just reads
back as 1.0 instead of blowing up an engine.
"""

import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from lyricspot.domain.entities import EnrichmentPreferences, LyricsMode
from lyricspot.domain.exceptions import PersistenceError
from lyricspot.domain.ports import IEnrichmentSettingsStore
from lyricspot.infrastructure.persistence.database import Database
from lyricspot.infrastructure.persistence.models import AppSettingsModel

logger = logging.getLogger(__name__)

KEY_LYRICS_SOURCE = "enrichment.lyrics.source"
KEY_CORRECTION_THRESHOLD = "enrichment.correction.threshold"
KEY_CACHE_HOURS = "enrichment.cache.hours"

_MODE_TO_STORED = {LyricsMode.ONLINE: "lrclib", LyricsMode.LOCAL_ONLY: "localOnly"}
_STORED_TO_MODE = {stored: mode for mode, stored in _MODE_TO_STORED.items()}


def _parse_float(raw: str | None) -> float:
    """Stored float or 0.0 (= "use default") if missing/garbage."""
    if raw is None:
        return 0.0
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring non-numeric enrichment setting value %r", raw)
        return 0.0


class InMemoryEnrichmentSettingsStore(IEnrichmentSettingsStore):
    """Process-local preferences (tests, embedding without a DB)."""

    def __init__(self, preferences: EnrichmentPreferences | None = None) -> None:
        self._preferences = preferences or EnrichmentPreferences()

    async def load(self) -> EnrichmentPreferences:
        return self._preferences

    async def save(self, preferences: EnrichmentPreferences) -> None:
        self._preferences = preferences


class DatabaseEnrichmentSettingsStore(IEnrichmentSettingsStore):
    """Preferences stored in the app_settings key/value table."""

    CATEGORY = "enrichment"

    def __init__(self, db: Database, defaults: EnrichmentPreferences | None = None) -> None:
        """Initialize store.

        Args:
            db: Database
            defaults: Values used for keys that were never saved
        """
        self._db = db
        self._defaults = defaults or EnrichmentPreferences()

    async def load(self) -> EnrichmentPreferences:
        """Load current preferences (defaults for missing keys)."""
        keys = (KEY_LYRICS_SOURCE, KEY_CORRECTION_THRESHOLD, KEY_CACHE_HOURS)
        try:
            async with self._db.session_scope() as session:
                result = await session.execute(
                    select(AppSettingsModel).where(AppSettingsModel.key.in_(keys))
                )
                stored = {row.key: row.value for row in result.scalars().all()}
        except SQLAlchemyError as e:
            raise PersistenceError(f"Could not load enrichment settings: {e}") from e

        mode = _STORED_TO_MODE.get(stored.get(KEY_LYRICS_SOURCE) or "", self._defaults.lyrics_mode)
        threshold = _parse_float(stored.get(KEY_CORRECTION_THRESHOLD))
        hours = _parse_float(stored.get(KEY_CACHE_HOURS))
        return EnrichmentPreferences(
            lyrics_mode=mode,
            correction_threshold=threshold or self._defaults.correction_threshold,
            cache_hours=hours or self._defaults.cache_hours,
        )

    async def save(self, preferences: EnrichmentPreferences) -> None:
        """Persist preferences (upsert all three keys)."""
        values = {
            KEY_LYRICS_SOURCE: ("string", _MODE_TO_STORED[preferences.lyrics_mode]),
            KEY_CORRECTION_THRESHOLD: ("float", repr(preferences.correction_threshold)),
            KEY_CACHE_HOURS: ("float", repr(preferences.cache_hours)),
        }
        try:
            async with self._db.session_scope() as session:
                for key, (value_type, value) in values.items():
                    await session.merge(
                        AppSettingsModel(
                            key=key, value=value, value_type=value_type, category=self.CATEGORY
                        )
                    )
        except SQLAlchemyError as e:
            raise PersistenceError(f"Could not save enrichment settings: {e}") from e
        logger.info(
            "Enrichment settings saved\n"
            "├─ lyrics: %s\n"
            "├─ correction threshold: %.2f\n"
            "└─ cache: %.0fh",
            preferences.lyrics_mode.value,
            preferences.correction_threshold,
            preferences.cache_hours,
        )
