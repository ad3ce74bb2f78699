"""Text normalization and edit-distance similarity for metadata matching.

Hey future me - this is how we decide if "Real Song (Remastered)" and "real song" are
the SAME thing. normalize() throws away the noise (case, bracketed suffixes, "feat.",
punctuation), then similarity() is plain length-normalized Levenshtein on what's left.

There is NO special handling for very short strings. "ab" vs "ac" scores 0.5 which looks
harsh, but short titles are rare and the overwrite policy catches sentinels/junk before
similarity is even consulted.

Examples:
    >>> normalize("Hello (Live) feat. Someone!")
    'hello someone'
    >>> similarity("Real Song", "real song!")
    1.0
"""

import re

from rapidfuzz.distance import Levenshtein

# Non-greedy so "a (b) c (d)" only drops the two groups, not " c ".
_BRACKETED_RE = re.compile(r"\(.*?\)|\[.*?\]|\{.*?\}")
# Runs of non-alphanumerics. CJK ideographs are \w, so they survive.
# \w includes underscore, so it is added to the junk class explicitly.
_NON_ALNUM_RE = re.compile(r"[\W_]+")
_FEAT_TOKEN = "feat."


def normalize(text: str) -> str:
    """Normalize text for similarity comparison.

    Steps: lowercase, drop bracketed spans, drop "feat.", collapse every run of
    non-alphanumeric characters into one space, trim.

    Args:
        text: Raw title/artist/album value

    Returns:
        Normalized comparison string (may be empty)
    """
    value = text.lower()
    value = _BRACKETED_RE.sub("", value)
    value = value.replace(_FEAT_TOKEN, "")
    value = _NON_ALNUM_RE.sub(" ", value)
    return value.strip()


def edit_distance(a: str, b: str) -> int:
    """Levenshtein distance between two NORMALIZED strings.

    Backed by rapidfuzz. Memory use is O(min(|a|, |b|)).
    """
    return int(Levenshtein.distance(a, b))


def similarity(a: str, b: str) -> float:
    """Similarity score in [0, 1] after normalization.

    Returns 0.0 if either side normalizes to empty (including both empty -
    "nothing" never counts as a confident match). Identical normalized
    strings score 1.0.
    """
    left = normalize(a)
    right = normalize(b)
    if not left or not right:
        return 0.0
    if left == right:
        return 1.0
    distance = edit_distance(left, right)
    return 1.0 - distance / max(len(left), len(right))


__all__ = ["edit_distance", "normalize", "similarity"]
