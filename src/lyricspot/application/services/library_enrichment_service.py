"""Library Enrichment Service - batch enrichment after an import.

Hey future me - an import of 500 files calls this ONCE with 500 ids. Every item gets its own
task; there's no ordering across items. The per-item engines already coalesce, throttle and
absorb provider errors, so this just fans out and collects. One item blowing up (a bug, not
a network error) is logged and reported in its outcome - the other 499 carry on.
"""

import asyncio
import logging
from collections.abc import Iterable
from dataclasses import dataclass

from lyricspot.application.services.lyrics_enrichment_service import (
    LyricsEnrichmentResult,
    LyricsEnrichmentService,
)
from lyricspot.application.services.metadata_enrichment_service import (
    MetadataEnrichmentResult,
    MetadataEnrichmentService,
)
from lyricspot.domain.entities import EnrichReason

logger = logging.getLogger(__name__)


@dataclass
class ItemEnrichmentOutcome:
    """Per-item result of a batch run."""

    item_id: str
    metadata: MetadataEnrichmentResult | None = None
    lyrics: LyricsEnrichmentResult | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        """True if the item was processed without an unexpected error."""
        return self.error is None


class LibraryEnrichmentService:
    """Fan out enrichment over many library items."""

    def __init__(
        self,
        metadata_service: MetadataEnrichmentService,
        lyrics_service: LyricsEnrichmentService,
    ) -> None:
        self._metadata_service = metadata_service
        self._lyrics_service = lyrics_service

    async def _enrich_one(
        self, item_id: str, reason: EnrichReason, include_lyrics: bool
    ) -> ItemEnrichmentOutcome:
        # Lyrics enrichment runs metadata first on its own - no need to call both.
        if include_lyrics:
            lyrics = await self._lyrics_service.enrich(item_id, reason)
            return ItemEnrichmentOutcome(item_id=item_id, lyrics=lyrics)
        metadata = await self._metadata_service.enrich(item_id, reason)
        return ItemEnrichmentOutcome(item_id=item_id, metadata=metadata)

    async def enrich_items(
        self,
        item_ids: Iterable[str],
        reason: EnrichReason = EnrichReason.IMPORT_FILE,
        include_lyrics: bool = False,
    ) -> list[ItemEnrichmentOutcome]:
        """Enrich many items concurrently, one independent task per item.

        Args:
            item_ids: Items to enrich (duplicates are processed once)
            reason: Trigger passed to every engine call
            include_lyrics: Also fetch lyrics (which chains metadata first)

        Returns:
            One outcome per distinct item id, in input order
        """
        unique_ids = list(dict.fromkeys(item_ids))
        if not unique_ids:
            return []

        logger.info(
            "Batch enrichment of %d item(s) (reason=%s, lyrics=%s)",
            len(unique_ids),
            reason.value,
            include_lyrics,
        )
        results = await asyncio.gather(
            *(self._enrich_one(item_id, reason, include_lyrics) for item_id in unique_ids),
            return_exceptions=True,
        )

        outcomes: list[ItemEnrichmentOutcome] = []
        for item_id, result in zip(unique_ids, results, strict=True):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                logger.error("Enrichment of %s failed: %s", item_id, result, exc_info=result)
                outcomes.append(ItemEnrichmentOutcome(item_id=item_id, error=str(result)))
            else:
                outcomes.append(result)

        failed = sum(1 for outcome in outcomes if not outcome.ok)
        logger.info(
            "Batch enrichment finished\n"
            "├─ items: %d\n"
            "└─ failed: %d",
            len(outcomes),
            failed,
        )
        return outcomes
