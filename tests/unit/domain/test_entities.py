"""Tests for domain entities and small value helpers."""

from datetime import timedelta

import pytest

from lyricspot.domain.entities import (
    EnrichmentPreferences,
    EnrichReason,
    LibraryItem,
    LyricsMatch,
    LyricsMode,
    MetadataMatch,
)
from lyricspot.domain.value_objects import normalize_artist_key


class TestEnrichReason:
    """Test EnrichReason."""

    @pytest.mark.parametrize(
        "reason,expected",
        [
            (EnrichReason.IMPORT_FILE, False),
            (EnrichReason.PLAYBACK, False),
            (EnrichReason.MANUAL, True),
            (EnrichReason.FORCE, True),
        ],
    )
    def test_is_user_initiated(self, reason: EnrichReason, expected: bool):
        assert reason.is_user_initiated is expected


class TestLibraryItem:
    """Test LibraryItem derived properties."""

    def test_file_base_name(self):
        item = LibraryItem(id="1", title="", artist="", album="", file_path="/m/a/track07.flac")
        assert item.file_base_name == "track07"

    def test_file_base_name_without_path(self):
        item = LibraryItem(id="1", title="", artist="", album="")
        assert item.file_base_name == ""

    def test_artwork_and_lyrics_flags(self):
        item = LibraryItem(id="1", title="t", artist="a", album="b")
        assert item.has_artwork is False
        assert item.has_lyrics is False
        item.artwork_data = b"x"
        item.lyrics_path = "/l/1.lrc"
        assert item.has_artwork is True
        assert item.has_lyrics is True


class TestMatches:
    """Test provider result objects."""

    def test_metadata_match_empty(self):
        assert MetadataMatch().is_empty is True
        assert MetadataMatch(album="A").is_empty is False

    def test_lyrics_match_whitespace_is_not_content(self):
        match = LyricsMatch(synced_lyrics="   ", plain_lyrics="words")
        assert match.has_synced is False
        assert match.has_plain is True


class TestEnrichmentPreferences:
    """Test EnrichmentPreferences clamping."""

    def test_defaults(self):
        prefs = EnrichmentPreferences()
        assert prefs.lyrics_mode == LyricsMode.ONLINE
        assert prefs.correction_threshold == 0.8
        assert prefs.cache_interval == timedelta(hours=24)

    def test_zero_means_default(self):
        prefs = EnrichmentPreferences(correction_threshold=0, cache_hours=0)
        assert prefs.correction_threshold == 0.8
        assert prefs.cache_hours == 24.0

    @pytest.mark.parametrize("raw,expected", [(0.1, 0.5), (1.7, 1.0), (0.65, 0.65)])
    def test_threshold_clamped(self, raw: float, expected: float):
        assert EnrichmentPreferences(correction_threshold=raw).correction_threshold == expected

    @pytest.mark.parametrize("raw,expected", [(0.2, 1.0), (500, 168.0), (12, 12.0)])
    def test_cache_hours_clamped(self, raw: float, expected: float):
        assert EnrichmentPreferences(cache_hours=raw).cache_hours == expected

    def test_lyrics_mode_from_string(self):
        prefs = EnrichmentPreferences(lyrics_mode="local_only")
        assert prefs.lyrics_mode is LyricsMode.LOCAL_ONLY


class TestNormalizeArtistKey:
    """Test normalize_artist_key()."""

    def test_trim_lower_collapse(self):
        assert normalize_artist_key("  Taylor \t  Swift ") == "taylor swift"

    def test_blank(self):
        assert normalize_artist_key("   ") == ""
