"""Query expansion for exact-match lyrics lookups.

Hey future me - LRCLIB's /api/get only answers EXACT matches. A song tagged
"[51ape.com] 後來" by "劉若英" won't hit, but "后来" by "刘若英" will. So we expand one
(artist, title, album, duration) into an ordered matrix of variants and the lyrics engine
walks it until something hits.

Three axes:
1. Script variants (artist AND title): Simplified, Traditional, original - deduplicated
2. (album, duration) variants, loosest first: no album + duration, no album + no duration,
   then album + duration, album + no duration (only if album is known)
3. The cartesian product of the above

Plus a STRICT pass that goes first: (simplified artist, simplified title) and, only if
different, (traditional artist, traditional title) - both without album/duration.
Most hits happen right there.

Query text is sanitized before use: leading "[source]" tags, URLs, bare domains and
separator runs ("-", "_", "/") get stripped.
"""

import itertools
import re
from collections.abc import Iterator
from dataclasses import dataclass

from lyricspot.domain.ports import IScriptNormalizer

_LEADING_TAG_RE = re.compile(r"^\s*[\[\(\{][^\]\)\}]+[\]\)\}]\s*")
_URL_RE = re.compile(r"https?://\S+|www\.\S+")
_DOMAIN_RE = re.compile(r"\b[\w\-]+(\.[\w\-]+)+\b")
_SEPARATOR_RE = re.compile(r"[-_/]+")
_WHITESPACE_RE = re.compile(r"\s+")


def sanitize_query_text(text: str) -> str:
    """Strip source tags, URLs/domains and separators from query text.

    Examples:
        >>> sanitize_query_text("[51ape.com] Song_Name")
        'Song Name'
        >>> sanitize_query_text("Artist - www.example.com")
        'Artist'
    """
    value = text.strip()
    if not value:
        return value
    value = _LEADING_TAG_RE.sub("", value)
    value = _URL_RE.sub("", value)
    value = _DOMAIN_RE.sub("", value)
    value = _SEPARATOR_RE.sub(" ", value)
    value = _WHITESPACE_RE.sub(" ", value)
    return value.strip()


@dataclass(frozen=True)
class LyricsQuery:
    """One exact lookup tuple. album "" and duration 0 mean "omit from the request"."""

    artist: str
    title: str
    album: str = ""
    duration: int = 0


@dataclass(frozen=True)
class QueryPlan:
    """The full fallback search matrix for one song."""

    strict: tuple[LyricsQuery, ...]
    artist_variants: tuple[str, ...]
    title_variants: tuple[str, ...]
    album_duration_variants: tuple[tuple[str, int], ...]

    def exhaustive(self) -> Iterator[LyricsQuery]:
        """Cartesian product artist × title × (album, duration), in priority order.

        May yield tuples already in `strict` (or duplicates when duration is 0) -
        the caller's visited-set takes care of that.
        """
        for artist, title, (album, duration) in itertools.product(
            self.artist_variants, self.title_variants, self.album_duration_variants
        ):
            yield LyricsQuery(artist=artist, title=title, album=album, duration=duration)

    @property
    def size(self) -> int:
        """Upper bound of distinct lookups in this plan."""
        return len(set(self.strict) | set(self.exhaustive()))


class QueryCandidateBuilder:
    """Builds QueryPlans using an injected script normalizer."""

    def __init__(self, normalizer: IScriptNormalizer) -> None:
        self._normalizer = normalizer

    def script_candidates(self, text: str) -> list[str]:
        """Simplified, Traditional, original - sanitized, non-empty, deduplicated in that order."""
        simplified = self._normalizer.to_simplified(text)
        traditional = self._normalizer.to_traditional(text)

        ordered = [simplified]
        if traditional != simplified:
            ordered.append(traditional)
        if text not in (simplified, traditional):
            ordered.append(text)

        candidates: list[str] = []
        for value in ordered:
            cleaned = sanitize_query_text(value)
            if cleaned and cleaned not in candidates:
                candidates.append(cleaned)
        return candidates

    @staticmethod
    def album_duration_variants(album: str, duration: float) -> list[tuple[str, int]]:
        """Loosest-first (album, duration) combinations; "" / 0 = omitted."""
        seconds = max(int(duration), 0)
        variants: list[tuple[str, int]] = [("", seconds), ("", 0)]
        album = album.strip()
        if album:
            variants.extend([(album, seconds), (album, 0)])
        return variants

    def build(self, artist: str, title: str, album: str, duration: float) -> QueryPlan | None:
        """Build the search matrix for one song.

        Args:
            artist: Current (corrected) artist
            title: Current (corrected) title
            album: Current album ("" if unknown)
            duration: Track length in seconds (0 if unknown)

        Returns:
            QueryPlan, or None if artist or title sanitize to nothing
        """
        base_artist = sanitize_query_text(artist)
        base_title = sanitize_query_text(title)
        if not base_artist or not base_title:
            return None

        simplified = LyricsQuery(
            artist=sanitize_query_text(self._normalizer.to_simplified(base_artist)),
            title=sanitize_query_text(self._normalizer.to_simplified(base_title)),
        )
        traditional = LyricsQuery(
            artist=sanitize_query_text(self._normalizer.to_traditional(base_artist)),
            title=sanitize_query_text(self._normalizer.to_traditional(base_title)),
        )
        strict = [simplified]
        if traditional != simplified:
            strict.append(traditional)

        return QueryPlan(
            strict=tuple(q for q in strict if q.artist and q.title),
            artist_variants=tuple(self.script_candidates(base_artist)),
            title_variants=tuple(self.script_candidates(base_title)),
            album_duration_variants=tuple(self.album_duration_variants(album, duration)),
        )
