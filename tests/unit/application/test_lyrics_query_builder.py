"""Tests for lyrics query expansion."""

import pytest
from fakes import FakeScriptNormalizer

from lyricspot.application.services.lyrics_query_builder import (
    LyricsQuery,
    QueryCandidateBuilder,
    sanitize_query_text,
)


class TestSanitizeQueryText:
    """Test sanitize_query_text()."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("[51ape.com] Song_Name", "Song Name"),
            ("Artist - www.example.com", "Artist"),
            ("Song http://x.org/page", "Song"),
            ("AC/DC", "AC DC"),
            ("  plain  title ", "plain title"),
            ("", ""),
        ],
    )
    def test_sanitize(self, raw: str, expected: str):
        assert sanitize_query_text(raw) == expected


class TestQueryCandidateBuilder:
    """Test QueryCandidateBuilder."""

    @pytest.fixture
    def builder(self) -> QueryCandidateBuilder:
        return QueryCandidateBuilder(FakeScriptNormalizer())

    def test_script_candidates_order(self, builder: QueryCandidateBuilder):
        assert builder.script_candidates("劉若英") == ["刘若英", "劉若英"]

    def test_script_candidates_keeps_mixed_original(self, builder: QueryCandidateBuilder):
        # "後来" is neither fully simplified nor fully traditional
        assert builder.script_candidates("後来") == ["后来", "後來", "後来"]

    def test_script_candidates_latin_deduplicated(self, builder: QueryCandidateBuilder):
        assert builder.script_candidates("Real Song") == ["Real Song"]

    def test_album_duration_variants_loosest_first(self):
        variants = QueryCandidateBuilder.album_duration_variants("我等你", 250.7)
        assert variants == [("", 250), ("", 0), ("我等你", 250), ("我等你", 0)]

    def test_album_duration_variants_without_album(self):
        assert QueryCandidateBuilder.album_duration_variants("  ", 0) == [("", 0), ("", 0)]

    def test_strict_pass_simplified_then_traditional(self, builder: QueryCandidateBuilder):
        plan = builder.build("劉若英", "後來", "我等你", 250)
        assert plan is not None
        assert plan.strict == (
            LyricsQuery(artist="刘若英", title="后来"),
            LyricsQuery(artist="劉若英", title="後來"),
        )

    def test_strict_pass_single_entry_for_latin(self, builder: QueryCandidateBuilder):
        plan = builder.build("Real Artist", "Real Song", "", 0)
        assert plan is not None
        assert plan.strict == (LyricsQuery(artist="Real Artist", title="Real Song"),)
        assert plan.size == 1

    def test_exhaustive_product_order(self, builder: QueryCandidateBuilder):
        plan = builder.build("劉若英", "後來", "我等你", 250)
        assert plan is not None
        queries = list(plan.exhaustive())

        assert len(queries) == 2 * 2 * 4
        assert queries[0] == LyricsQuery("刘若英", "后来", "", 250)
        assert queries[1] == LyricsQuery("刘若英", "后来", "", 0)
        assert queries[-1] == LyricsQuery("劉若英", "後來", "我等你", 0)
        assert set(plan.strict) <= set(queries)
        assert plan.size == 16

    def test_build_sanitizes_input(self, builder: QueryCandidateBuilder):
        plan = builder.build("Artist", "[51ape.com] Song_Name", "", 0)
        assert plan is not None
        assert plan.strict[0] == LyricsQuery(artist="Artist", title="Song Name")

    @pytest.mark.parametrize("artist,title", [("", "Song"), ("Artist", "   "), ("---", "Song")])
    def test_build_returns_none_without_artist_or_title(
        self, builder: QueryCandidateBuilder, artist: str, title: str
    ):
        assert builder.build(artist, title, "", 0) is None
