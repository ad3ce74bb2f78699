"""File-based durable lyrics storage - ILyricsStore implementation.

Hey future me - fetched lyrics land in <lyrics_dir>/<item_id>.lrc. The write is ATOMIC:
we write "<id>.lrc.tmp" first, then os.replace() it over the target. A crash halfway through
leaves the old file (or nothing), never a truncated LRC that the player would choke on.

All filesystem work runs in asyncio.to_thread - a slow disk/NAS must not block the loop
while twenty other enrichment tasks are waiting on the network.
"""

import asyncio
import logging
import os
from pathlib import Path

from lyricspot.domain.exceptions import PersistenceError
from lyricspot.domain.ports import ILyricsStore
from lyricspot.domain.value_objects.lrc import decode_lrc_bytes

logger = logging.getLogger(__name__)

LYRICS_EXTENSION = ".lrc"
LYRICS_SUBDIR = "Lyrics"


class FileLyricsStore(ILyricsStore):
    """Stores one .lrc file per library item."""

    def __init__(self, lyrics_dir: Path | str) -> None:
        self._lyrics_dir = Path(lyrics_dir)

    @property
    def lyrics_dir(self) -> Path:
        """Directory holding fetched lyrics."""
        return self._lyrics_dir

    def path_for(self, item_id: str) -> Path:
        """Target path for an item's lyrics."""
        return self._lyrics_dir / f"{item_id}{LYRICS_EXTENSION}"

    def _write_atomic(self, target: Path, content: str) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = target.with_name(target.name + ".tmp")
        tmp_path.write_text(content, encoding="utf-8")
        os.replace(tmp_path, target)

    async def save(self, item_id: str, content: str) -> str:
        """Durably write lyrics for an item.

        Returns:
            Absolute path of the written file

        Raises:
            PersistenceError: If the write failed
        """
        target = self.path_for(item_id)
        try:
            await asyncio.to_thread(self._write_atomic, target, content)
        except OSError as e:
            raise PersistenceError(f"Could not write lyrics for {item_id}: {e}") from e
        logger.debug("Saved lyrics for %s to %s (%d chars)", item_id, target, len(content))
        return str(target.resolve())

    @staticmethod
    def _sidecar_candidates(audio_path: str) -> list[Path]:
        audio = Path(audio_path)
        stem = audio.stem
        return [
            audio.with_suffix(LYRICS_EXTENSION),
            audio.parent / LYRICS_SUBDIR / f"{stem}{LYRICS_EXTENSION}",
        ]

    async def find_sidecar(self, audio_path: str) -> str | None:
        """Find "<song>.lrc" next to the audio file, or in a "Lyrics/" subfolder."""
        if not audio_path:
            return None

        def _lookup() -> str | None:
            for candidate in self._sidecar_candidates(audio_path):
                if candidate.is_file():
                    return str(candidate)
            return None

        return await asyncio.to_thread(_lookup)

    async def read(self, path: str) -> str | None:
        """Read and decode an LRC file (None if missing or undecodable)."""
        try:
            data = await asyncio.to_thread(Path(path).read_bytes)
        except FileNotFoundError:
            return None
        except OSError as e:
            raise PersistenceError(f"Could not read lyrics file {path}: {e}") from e
        return decode_lrc_bytes(data)
