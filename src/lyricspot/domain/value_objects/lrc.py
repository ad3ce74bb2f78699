"""LRC (time-tagged lyrics) parsing.

Hey future me - LRC lines look like "[01:23.45]Some words". Things real files do:
- several tags on one line: "[00:10.00][01:10.00]Chorus" (same text, two timestamps)
- 1, 2 or 3 fraction digits: ".5" = 500ms, ".45" = 450ms, ".450" = 450ms
- ":" instead of "." before the fraction
- metadata tags like "[ar:Artist]" which don't match the time pattern and get ignored
- Chinese files in GB18030 or UTF-16 with BOM
"""

import codecs
import re
from dataclasses import dataclass

_TIME_TAG_RE = re.compile(r"\[(\d{1,2}):(\d{1,2})(?:[.:](\d{1,3}))?\]")

# Tried in order for BOM-less payloads; utf-8-sig also eats a UTF-8 BOM.
_ENCODINGS: tuple[str, ...] = ("utf-8-sig", "gb18030")


@dataclass(frozen=True)
class LyricLine:
    """One displayed lyric line."""

    timestamp: float
    text: str


def _fraction_to_ms(fraction: str | None) -> float:
    if not fraction:
        return 0.0
    if len(fraction) == 1:
        return int(fraction) * 100.0
    if len(fraction) == 2:
        return int(fraction) * 10.0
    return float(int(fraction))


def parse_lrc(content: str) -> list[LyricLine]:
    """Parse LRC text into lines sorted by timestamp.

    Lines without time tags and tags with empty text are skipped.

    Args:
        content: Raw LRC text

    Returns:
        Sorted list of LyricLine
    """
    lines: list[LyricLine] = []
    for raw_line in content.splitlines():
        matches = list(_TIME_TAG_RE.finditer(raw_line))
        if not matches:
            continue
        text = raw_line[matches[-1].end() :].strip()
        if not text:
            continue
        for match in matches:
            minutes = int(match.group(1))
            seconds = int(match.group(2))
            ms = _fraction_to_ms(match.group(3))
            lines.append(LyricLine(timestamp=minutes * 60 + seconds + ms / 1000, text=text))
    # sorted() is stable, so duplicate timestamps keep file order
    return sorted(lines, key=lambda line: line.timestamp)


def is_synced(content: str | None) -> bool:
    """Check if text carries at least one LRC time tag."""
    if not content:
        return False
    return _TIME_TAG_RE.search(content) is not None


def current_line_index(time: float, lines: list[LyricLine]) -> int | None:
    """Index of the line being sung at `time` (None before the first line)."""
    for index in range(len(lines) - 1, -1, -1):
        if time >= lines[index].timestamp:
            return index
    return None


def _candidate_encodings(data: bytes) -> tuple[str, ...]:
    # UTF-16/32 without a BOM would "successfully" decode almost any even-length
    # garbage, so they are only tried when the BOM says so.
    if data.startswith((codecs.BOM_UTF32_LE, codecs.BOM_UTF32_BE)):
        return ("utf-32",)
    if data.startswith((codecs.BOM_UTF16_LE, codecs.BOM_UTF16_BE)):
        return ("utf-16",)
    return _ENCODINGS


def decode_lrc_bytes(data: bytes) -> str | None:
    """Decode an LRC payload trying common encodings.

    Returns:
        Decoded text with surrounding newlines stripped, None if nothing fits
    """
    for encoding in _candidate_encodings(data):
        try:
            return data.decode(encoding).strip("\r\n")
        except UnicodeDecodeError:
            continue
    return None


__all__ = [
    "LyricLine",
    "current_line_index",
    "decode_lrc_bytes",
    "is_synced",
    "parse_lrc",
]
