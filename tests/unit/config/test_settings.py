"""Tests for application settings."""

from pathlib import Path

import pytest

from lyricspot.config import EnrichmentSettings, Settings, get_settings
from lyricspot.domain.entities import EnrichmentPreferences, LyricsMode


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    # a developer's .env must not leak into these tests
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestEnrichmentSettings:
    """Test enrichment section clamping."""

    @pytest.mark.parametrize(
        "threshold,expected",
        [(0.2, 0.5), (0.85, 0.85), (3.0, 1.0), (0, EnrichmentPreferences.DEFAULT_THRESHOLD)],
    )
    def test_threshold_is_clamped(self, threshold: float, expected: float):
        assert EnrichmentSettings(correction_threshold=threshold).correction_threshold == expected

    @pytest.mark.parametrize("hours,expected", [(0.1, 1.0), (48, 48.0), (1000, 168.0)])
    def test_cache_hours_is_clamped(self, hours: float, expected: float):
        assert EnrichmentSettings(cache_hours=hours).cache_hours == expected

    def test_to_preferences(self):
        prefs = EnrichmentSettings(
            lyrics_mode=LyricsMode.LOCAL_ONLY, correction_threshold=0.9, cache_hours=6
        ).to_preferences()
        assert prefs == EnrichmentPreferences(
            lyrics_mode=LyricsMode.LOCAL_ONLY, correction_threshold=0.9, cache_hours=6
        )

    def test_defaults(self):
        settings = EnrichmentSettings()
        assert settings.lyrics_cooldown_seconds == 300.0
        assert settings.lyrics_search_budget_seconds == 30.0
        assert settings.artist_image_concurrency == 3
        assert settings.artwork_max_bytes == 2 * 1024 * 1024


class TestSettingsFromEnvironment:
    """Test env var loading."""

    def test_nested_env_vars(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("LYRICSPOT_DATABASE__URL", "sqlite+aiosqlite:///./other.db")
        monkeypatch.setenv("LYRICSPOT_ENRICHMENT__CORRECTION_THRESHOLD", "0.95")
        monkeypatch.setenv("LYRICSPOT_ENRICHMENT__LYRICS_MODE", "local_only")
        monkeypatch.setenv("LYRICSPOT_LOGGING__LEVEL", "debug")
        monkeypatch.setenv("LYRICSPOT_STORAGE__LYRICS_DIR", "/tmp/lyrics")

        settings = Settings()

        assert settings.database.url == "sqlite+aiosqlite:///./other.db"
        assert settings.enrichment.correction_threshold == 0.95
        assert settings.enrichment.lyrics_mode == LyricsMode.LOCAL_ONLY
        assert settings.logging.level == "DEBUG"
        assert settings.storage.lyrics_dir == Path("/tmp/lyrics")

    def test_dot_env_file(self, tmp_path: Path):
        (tmp_path / ".env").write_text("LYRICSPOT_ITUNES__COUNTRY=TW\n", encoding="utf-8")
        assert Settings().itunes.country == "TW"

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()

    def test_musicbrainz_user_agent_parts(self):
        settings = Settings()
        assert settings.musicbrainz.rate_limit_seconds == 1.0
        assert settings.musicbrainz.app_name == "LyricSpot"
