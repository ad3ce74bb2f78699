"""Tests for Traditional/Simplified detection."""

import pytest
from fakes import FakeScriptNormalizer

from lyricspot.domain.value_objects import is_cjk, normalize_script, traditional_ratio


class TestIsCjk:
    """Test is_cjk()."""

    @pytest.mark.parametrize("char", ["後", "后", "㐀", "豈"])
    def test_ideographs(self, char: str):
        assert is_cjk(char) is True

    @pytest.mark.parametrize("char", ["a", "1", " ", "あ", "한"])
    def test_non_ideographs(self, char: str):
        assert is_cjk(char) is False


class TestTraditionalRatio:
    """Test traditional_ratio()."""

    def test_fully_traditional(self):
        assert traditional_ratio("後來", "后来") == 1.0

    def test_partial(self):
        # 4 ideographs, one changed
        assert traditional_ratio("我們走吧", "我们走吧") == pytest.approx(0.25)

    def test_ignores_non_cjk_characters(self):
        assert traditional_ratio("後 abc", "后 abc") == 1.0

    def test_no_cjk_is_zero(self):
        assert traditional_ratio("hello", "hello") == 0.0

    def test_length_mismatch_is_zero(self):
        assert traditional_ratio("後來", "后来了") == 0.0


class TestNormalizeScript:
    """Test normalize_script()."""

    @pytest.fixture
    def normalizer(self) -> FakeScriptNormalizer:
        return FakeScriptNormalizer()

    def test_converts_predominantly_traditional(self, normalizer: FakeScriptNormalizer):
        result = normalize_script("後來", normalizer)
        assert result.value == "后来"
        assert result.converted is True
        assert result.ratio == 1.0

    def test_low_ratio_left_alone(self, normalizer: FakeScriptNormalizer):
        # one changed ideograph out of eleven
        text = "後一二三四五六七八九十"
        result = normalize_script(text, normalizer)
        assert result.ratio == pytest.approx(1 / 11)
        assert result.converted is False
        assert result.value == text

    def test_exactly_at_threshold_converts(self, normalizer: FakeScriptNormalizer):
        text = "後一二三四五六七八九"
        result = normalize_script(text, normalizer)
        assert result.ratio == pytest.approx(0.1)
        assert result.converted is True

    def test_latin_text_untouched(self, normalizer: FakeScriptNormalizer):
        result = normalize_script("Real Song", normalizer)
        assert result.value == "Real Song"
        assert result.converted is False
