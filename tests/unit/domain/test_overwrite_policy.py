"""Tests for the field overwrite policy."""

import pytest

from lyricspot.domain.entities import EnrichReason
from lyricspot.domain.value_objects import (
    has_source_tag,
    is_placeholder,
    is_unknown,
    should_overwrite,
)


class TestIsUnknown:
    """Test is_unknown()."""

    @pytest.mark.parametrize(
        "value", [None, "", "   ", "Unknown", "unknown artist", " UNKNOWN ALBUM ", "未知", "未知艺术家"]
    )
    def test_sentinels(self, value):
        assert is_unknown(value) is True

    def test_real_value(self):
        assert is_unknown("Real Artist") is False


class TestIsPlaceholder:
    """Test is_placeholder()."""

    def test_equals_file_base_name(self):
        assert is_placeholder("track07", "track07") is True

    def test_file_base_name_compared_after_trim(self):
        assert is_placeholder("  track07 ", "track07") is True

    def test_no_base_name_given(self):
        assert is_placeholder("track07") is False

    def test_unknown_sentinel(self):
        assert is_placeholder("Unknown Artist", "song") is True

    def test_real_value(self):
        assert is_placeholder("Real Song", "track07") is False


class TestHasSourceTag:
    """Test has_source_tag()."""

    @pytest.mark.parametrize(
        "value",
        [
            "[51ape.com] Song",
            "(Official) Song",
            "Song http://example.org/x",
            "www.music-site Song",
            "Song - musicsite.cn",
        ],
    )
    def test_detects_scraped_junk(self, value: str):
        assert has_source_tag(value) is True

    @pytest.mark.parametrize("value", [None, "", "Real Song", "Song (Live)", "Mr. Brightside"])
    def test_clean_values(self, value):
        assert has_source_tag(value) is False


class TestShouldOverwrite:
    """Test should_overwrite() rule order."""

    @pytest.mark.parametrize("reason", [EnrichReason.MANUAL, EnrichReason.FORCE])
    def test_user_initiated_always_overwrites(self, reason: EnrichReason):
        assert should_overwrite("Curated Title", "Totally Different", reason, 0.8) is True

    def test_source_tag_overwrites(self):
        assert should_overwrite("[51ape.com] Song", "Song", EnrichReason.PLAYBACK, 0.8) is True

    def test_placeholder_overwrites(self):
        assert should_overwrite("track07", "Real Song", EnrichReason.IMPORT_FILE, 0.8, "track07")

    def test_none_current_overwrites(self):
        assert should_overwrite(None, "Real Song", EnrichReason.PLAYBACK, 0.8) is True

    def test_near_duplicate_overwrites(self):
        assert should_overwrite("real song", "Real Song!", EnrichReason.PLAYBACK, 0.8) is True

    def test_curated_value_survives_loose_match(self):
        assert (
            should_overwrite("Real Artist", "Real Artist Band", EnrichReason.IMPORT_FILE, 0.8)
            is False
        )

    def test_threshold_is_respected(self):
        # 0.6875 similarity passes a 0.6 threshold
        assert should_overwrite("Real Artist", "Real Artist Band", EnrichReason.PLAYBACK, 0.6)
