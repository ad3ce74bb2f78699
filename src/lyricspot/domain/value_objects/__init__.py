"""Domain value objects - pure functions and immutable values, no I/O."""

from lyricspot.domain.value_objects.artist_normalization import normalize_artist_key
from lyricspot.domain.value_objects.lrc import (
    LyricLine,
    current_line_index,
    decode_lrc_bytes,
    is_synced,
    parse_lrc,
)
from lyricspot.domain.value_objects.overwrite_policy import (
    UNKNOWN_SENTINELS,
    has_source_tag,
    is_placeholder,
    is_unknown,
    should_overwrite,
)
from lyricspot.domain.value_objects.script_variants import (
    DEFAULT_TRADITIONAL_RATIO_THRESHOLD,
    ScriptNormalization,
    is_cjk,
    normalize_script,
    traditional_ratio,
)
from lyricspot.domain.value_objects.text_similarity import edit_distance, normalize, similarity

__all__ = [
    "DEFAULT_TRADITIONAL_RATIO_THRESHOLD",
    "LyricLine",
    "ScriptNormalization",
    "UNKNOWN_SENTINELS",
    "current_line_index",
    "decode_lrc_bytes",
    "edit_distance",
    "has_source_tag",
    "is_cjk",
    "is_placeholder",
    "is_synced",
    "is_unknown",
    "normalize",
    "normalize_artist_key",
    "normalize_script",
    "parse_lrc",
    "should_overwrite",
    "similarity",
    "traditional_ratio",
]
