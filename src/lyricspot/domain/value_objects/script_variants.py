"""Traditional/Simplified Chinese detection on top of an injected script normalizer.

Hey future me - we never convert scripts ourselves (that's IScriptNormalizer's job).
What we DO own is the decision: "is this text predominantly Traditional?"

The ratio compares the text code point by code point with its Simplified conversion and
counts how many CJK ideographs changed. If the converter changed the length (multi-char
mappings), alignment is lost and we report 0 - better to leave text alone than to guess.
At >= 10% changed ideographs we store the Simplified version. Below that it's noise
(a single shared glyph like 後 in otherwise Simplified text).
"""

from dataclasses import dataclass

from lyricspot.domain.ports import IScriptNormalizer

DEFAULT_TRADITIONAL_RATIO_THRESHOLD = 0.1

# CJK Unified Ideographs, Extension A, Compatibility Ideographs
_CJK_RANGES: tuple[tuple[int, int], ...] = (
    (0x4E00, 0x9FFF),
    (0x3400, 0x4DBF),
    (0xF900, 0xFAFF),
)


def is_cjk(char: str) -> bool:
    """Check if a single character is a CJK ideograph."""
    code = ord(char)
    return any(start <= code <= end for start, end in _CJK_RANGES)


def traditional_ratio(original: str, simplified: str) -> float:
    """Fraction of CJK ideographs in `original` that differ in `simplified`.

    Returns:
        Ratio in [0, 1]; 0 when there are no CJK ideographs or lengths differ
    """
    if len(original) != len(simplified):
        return 0.0
    cjk_count = 0
    diff_count = 0
    for o, s in zip(original, simplified, strict=True):
        if is_cjk(o):
            cjk_count += 1
            if o != s:
                diff_count += 1
    if cjk_count == 0:
        return 0.0
    return diff_count / cjk_count


@dataclass(frozen=True)
class ScriptNormalization:
    """Outcome of normalize_script()."""

    value: str
    ratio: float
    converted: bool


def normalize_script(
    text: str,
    normalizer: IScriptNormalizer,
    threshold: float = DEFAULT_TRADITIONAL_RATIO_THRESHOLD,
) -> ScriptNormalization:
    """Convert text to Simplified if it is predominantly Traditional.

    Args:
        text: Title, artist or a whole lyrics payload
        normalizer: Script conversion capability
        threshold: Minimum traditional ratio that triggers conversion

    Returns:
        ScriptNormalization with the value to persist
    """
    simplified = normalizer.to_simplified(text)
    ratio = traditional_ratio(text, simplified)
    if ratio >= threshold:
        return ScriptNormalization(value=simplified, ratio=ratio, converted=True)
    return ScriptNormalization(value=text, ratio=ratio, converted=False)


__all__ = [
    "DEFAULT_TRADITIONAL_RATIO_THRESHOLD",
    "ScriptNormalization",
    "is_cjk",
    "normalize_script",
    "traditional_ratio",
]
