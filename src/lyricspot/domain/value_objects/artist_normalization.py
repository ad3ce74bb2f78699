"""Artist name normalization for avatar keys and singleflight keys.

Hey future me - "  Taylor   Swift " and "taylor swift" must hit the SAME avatar row and
share ONE in-flight image lookup. That's all this does: trim, lowercase, collapse whitespace.
No prefix stripping ("The ", "DJ ") here - avatars are keyed by what the library shows.

Examples:
    >>> normalize_artist_key("  Taylor   Swift ")
    'taylor swift'
    >>> normalize_artist_key("   ")
    ''
"""

import re

_WHITESPACE_RE = re.compile(r"\s+")


def normalize_artist_key(artist: str) -> str:
    """Normalize an artist name into a lookup key ("" for blank input)."""
    trimmed = artist.strip().lower()
    if not trimmed:
        return ""
    return _WHITESPACE_RE.sub(" ", trimmed)


__all__ = ["normalize_artist_key"]
