"""Decide whether an external candidate value may replace what the library already has.

Hey future me - this is the gatekeeper that protects curated tags from bad catalog matches!
Rules are evaluated IN ORDER, first match wins:

1. manual/force reason       → overwrite (the user asked for it)
2. current has a source tag  → overwrite ("[51ape.com] Song", "www.xyz.cn" = scraped junk)
3. current is a placeholder  → overwrite (empty, equals file base name, "Unknown Artist", "未知")
4. similarity >= threshold   → overwrite (only near-duplicates: casing, punctuation, suffixes)

Anything else keeps the current value. "Real Artist" vs "Real Artist Band" scores ~0.69,
under the default 0.8, so a curated artist survives a sloppy catalog hit.
"""

import re

from lyricspot.domain.entities import EnrichReason
from lyricspot.domain.value_objects.text_similarity import similarity

# Compared after trim + lowercase.
UNKNOWN_SENTINELS: frozenset[str] = frozenset(
    {
        "unknown",
        "unknown artist",
        "unknown album",
        "未知",
        "未知艺术家",
        "未知专辑",
    }
)

_LEADING_BRACKET_TAG_RE = re.compile(r"^\s*[\[\(\{].+[\]\)\}]\s*")
_URL_RE = re.compile(r"https?://|www\.")
_BARE_DOMAIN_RE = re.compile(r"\.(com|net|org|cn|jp|kr|io|me|tv)\b")


def is_unknown(value: str | None) -> bool:
    """Check if a value is empty or a recognized "unknown" sentinel."""
    if value is None:
        return True
    normalized = value.strip().lower()
    if not normalized:
        return True
    return normalized in UNKNOWN_SENTINELS


def is_placeholder(value: str | None, file_base_name: str | None = None) -> bool:
    """Check if a value is missing: empty, the file base name, or an unknown sentinel.

    Args:
        value: Current field value
        file_base_name: Audio file name without extension (None = don't compare)

    Returns:
        True if the value carries no real information
    """
    if value is None:
        return True
    trimmed = value.strip()
    if not trimmed:
        return True
    if file_base_name and trimmed == file_base_name:
        return True
    return is_unknown(trimmed)


def has_source_tag(value: str | None) -> bool:
    """Check for filename-scraped junk (leading bracket group, URL or bare domain)."""
    if not value:
        return False
    trimmed = value.strip()
    if not trimmed:
        return False
    return bool(
        _LEADING_BRACKET_TAG_RE.search(trimmed)
        or _URL_RE.search(trimmed)
        or _BARE_DOMAIN_RE.search(trimmed)
    )


def should_overwrite(
    current: str | None,
    candidate: str,
    reason: EnrichReason,
    threshold: float,
    file_base_name: str | None = None,
) -> bool:
    """Decide whether `candidate` replaces `current`.

    Args:
        current: What the library has now
        candidate: What the provider returned (already script-normalized)
        reason: Why enrichment runs
        threshold: Minimum similarity for near-duplicate correction
        file_base_name: Audio file name without extension

    Returns:
        True if the field should be overwritten
    """
    if reason.is_user_initiated:
        return True
    if has_source_tag(current):
        return True
    if is_placeholder(current, file_base_name):
        return True
    return similarity(current or "", candidate) >= threshold


__all__ = [
    "UNKNOWN_SENTINELS",
    "has_source_tag",
    "is_placeholder",
    "is_unknown",
    "should_overwrite",
]
