# Hey future me - this is the LYRICS half of enrichment, and it leans on the metadata half!
#
# Order matters: we run metadata enrichment FIRST (same reason) and re-read the item, because
# searching LRCLIB for "track07" by "Unknown Artist" is pointless. After metadata fixed things
# up we search with the corrected artist/title.
#
# The search itself is a two-phase walk over a QueryPlan (see lyrics_query_builder.py):
# 1. strict pass - simplified then traditional artist/title, no album/duration
# 2. exhaustive pass - every script variant × (album, duration) combination
# A visited-set guarantees each exact tuple is sent ONCE per run, and the exhaustive pass is
# capped by a wall-clock budget (default 30s) that starts at its first request.
#
# Synced lyrics win the instant they appear. Plain text is remembered and only used if the
# whole walk finds nothing synced.
"""Lyrics Enrichment Service - finds, normalizes and stores lyrics for library items."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from lyricspot.application.services.lyrics_query_builder import (
    LyricsQuery,
    QueryCandidateBuilder,
    QueryPlan,
)
from lyricspot.domain.entities import (
    EnrichmentPreferences,
    EnrichReason,
    LibraryItem,
    LyricsMode,
    utc_now,
)
from lyricspot.domain.exceptions import PersistenceError
from lyricspot.domain.ports import Notification, NotificationType
from lyricspot.domain.value_objects.script_variants import (
    DEFAULT_TRADITIONAL_RATIO_THRESHOLD,
    normalize_script,
)
from lyricspot.infrastructure.observability.logging import correlation_scope
from lyricspot.infrastructure.request_coalescer import RequestCoalescer

if TYPE_CHECKING:
    from lyricspot.application.services.metadata_enrichment_service import (
        MetadataEnrichmentService,
    )
    from lyricspot.domain.ports import (
        IEnrichmentSettingsStore,
        ILibraryItemRepository,
        ILyricsProvider,
        ILyricsStore,
        INotificationProvider,
        IScriptNormalizer,
    )

logger = logging.getLogger(__name__)

DEFAULT_LYRICS_COOLDOWN = timedelta(minutes=5)
DEFAULT_SEARCH_BUDGET_SECONDS = 30.0
DEFAULT_CALL_TIMEOUT_SECONDS = 15.0
LOCAL_SOURCE = "local"


@dataclass
class LyricsEnrichmentResult:
    """Outcome of one lyrics enrichment call."""

    item_id: str
    saved: bool = False
    synced: bool = False
    path: str | None = None
    source: str | None = None
    attempts: int = 0
    skipped: bool = False


@dataclass
class LyricsSearchOutcome:
    """What the query walk found (if anything)."""

    content: str | None = None
    synced: bool = False
    attempts: int = 0
    budget_exhausted: bool = False


@dataclass
class _SearchState:
    visited: set[LyricsQuery] = field(default_factory=set)
    attempts: int = 0
    synced_content: str | None = None
    plain_fallback: str | None = None


class LyricsEnrichmentService:
    """Fetch lyrics for library items from an exact-match lyrics provider.

    Usage:
        service = LyricsEnrichmentService(repo, metadata_service, lrclib, store, opencc, settings)
        result = await service.enrich(item_id, EnrichReason.PLAYBACK)

    Concurrent enrich() calls for the same item share ONE run.
    """

    def __init__(
        self,
        repository: ILibraryItemRepository,
        metadata_service: MetadataEnrichmentService,
        lyrics_provider: ILyricsProvider,
        lyrics_store: ILyricsStore,
        script_normalizer: IScriptNormalizer,
        settings_store: IEnrichmentSettingsStore,
        event_sink: INotificationProvider | None = None,
        cooldown: timedelta = DEFAULT_LYRICS_COOLDOWN,
        search_budget_seconds: float = DEFAULT_SEARCH_BUDGET_SECONDS,
        call_timeout_seconds: float = DEFAULT_CALL_TIMEOUT_SECONDS,
        traditional_ratio_threshold: float = DEFAULT_TRADITIONAL_RATIO_THRESHOLD,
        clock: Callable[[], datetime] = utc_now,
        monotonic: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize lyrics enrichment service.

        Args:
            repository: Library item repository
            metadata_service: Runs before every lyrics search
            lyrics_provider: Exact-match lyrics source (LRCLIB)
            lyrics_store: Durable payload storage
            script_normalizer: Traditional/Simplified conversion
            settings_store: Persisted preferences (lyrics mode)
            event_sink: Receives LYRICS_UPDATED after a successful save
            cooldown: Minimum gap between background attempts for one item
            search_budget_seconds: Wall-clock cap of the exhaustive pass
            call_timeout_seconds: Upper bound for a single provider call
            traditional_ratio_threshold: Ratio at which lyrics are simplified
            clock: Wall clock for timestamps
            monotonic: Monotonic clock for the search budget
        """
        self._repository = repository
        self._metadata_service = metadata_service
        self._provider = lyrics_provider
        self._store = lyrics_store
        self._normalizer = script_normalizer
        self._settings_store = settings_store
        self._event_sink = event_sink
        self._cooldown = cooldown
        self._budget = search_budget_seconds
        self._call_timeout = call_timeout_seconds
        self._ratio_threshold = traditional_ratio_threshold
        self._clock = clock
        self._monotonic = monotonic
        self._query_builder = QueryCandidateBuilder(script_normalizer)
        self._coalescer: RequestCoalescer[str, LyricsEnrichmentResult] = RequestCoalescer(
            "lyrics"
        )

    async def enrich(
        self, item_id: str, reason: EnrichReason = EnrichReason.PLAYBACK
    ) -> LyricsEnrichmentResult:
        """Fetch and store lyrics for one item (coalesced per item id)."""
        return await self._coalescer.submit(item_id, lambda: self._run(item_id, reason))

    async def _load_preferences(self) -> EnrichmentPreferences:
        try:
            return await self._settings_store.load()
        except PersistenceError as e:
            logger.warning("Could not load enrichment settings, using defaults: %s", e)
            return EnrichmentPreferences()

    def _in_cooldown(self, item: LibraryItem, now: datetime) -> bool:
        last_attempt = item.last_lyrics_attempt_at
        return last_attempt is not None and now - last_attempt < self._cooldown

    async def _run(self, item_id: str, reason: EnrichReason) -> LyricsEnrichmentResult:
        with correlation_scope("lyrics", item_id):
            try:
                return await self._enrich_item(item_id, reason)
            except PersistenceError as e:
                logger.warning("Lyrics enrichment for %s aborted: %s", item_id, e)
                return LyricsEnrichmentResult(item_id=item_id)

    async def _enrich_item(self, item_id: str, reason: EnrichReason) -> LyricsEnrichmentResult:
        item = await self._repository.get_by_id(item_id)
        if item is None:
            logger.debug("Item %s not found, skipping lyrics", item_id)
            return LyricsEnrichmentResult(item_id=item_id, skipped=True)

        now = self._clock()
        if not reason.is_user_initiated:
            if item.has_lyrics:
                logger.debug("Item %s already has lyrics", item_id)
                return LyricsEnrichmentResult(item_id=item_id, skipped=True)
            if self._in_cooldown(item, now):
                logger.debug("Lyrics for %s attempted recently, in cooldown", item_id)
                return LyricsEnrichmentResult(item_id=item_id, skipped=True)

        stamped = await self._repository.update(
            item_id, lambda i: setattr(i, "last_lyrics_attempt_at", now)
        )
        if stamped is None:
            return LyricsEnrichmentResult(item_id=item_id, skipped=True)

        preferences = await self._load_preferences()
        if preferences.lyrics_mode == LyricsMode.LOCAL_ONLY:
            return await self._use_local_sidecar(stamped)

        await self._metadata_service.enrich(item_id, reason)

        latest = await self._repository.get_by_id(item_id)
        if latest is None:
            logger.debug("Item %s vanished during metadata enrichment", item_id)
            return LyricsEnrichmentResult(item_id=item_id)

        plan = self._query_builder.build(
            latest.artist, latest.title, latest.album, latest.duration
        )
        if plan is None:
            logger.info("No usable artist/title for lyrics search on %s", item_id)
            return LyricsEnrichmentResult(item_id=item_id)

        logger.info(
            "Lyrics search start for %s: %s / %s (reason=%s, plan=%d queries)",
            item_id,
            latest.artist,
            latest.title,
            reason.value,
            plan.size,
        )
        outcome = await self.search(plan)
        if outcome.content is None:
            logger.info(
                "No lyrics found for %s after %d attempt(s)%s",
                item_id,
                outcome.attempts,
                " (budget exhausted)" if outcome.budget_exhausted else "",
            )
            return LyricsEnrichmentResult(item_id=item_id, attempts=outcome.attempts)

        return await self._save(latest, outcome.content, outcome)

    async def _fetch(self, query: LyricsQuery, state: _SearchState) -> bool:
        """One provider call. Returns True if synced lyrics were found."""
        state.visited.add(query)
        state.attempts += 1
        try:
            async with asyncio.timeout(self._call_timeout):
                match = await self._provider.get(
                    query.artist,
                    query.title,
                    album=query.album or None,
                    duration_seconds=query.duration or None,
                )
        except TimeoutError:
            logger.debug("Lyrics lookup timed out: %s", query)
            return False
        except Exception as e:
            logger.warning("Lyrics provider %s failed: %s", self._provider.name, e)
            return False

        if match is None:
            return False
        if match.has_synced:
            state.synced_content = match.synced_lyrics
            return True
        if match.has_plain and state.plain_fallback is None:
            state.plain_fallback = match.plain_lyrics
        return False

    async def search(self, plan: QueryPlan) -> LyricsSearchOutcome:
        """Walk the query plan until synced lyrics appear or the plan/budget runs out."""
        state = _SearchState()

        for query in plan.strict:
            if query in state.visited:
                continue
            if await self._fetch(query, state):
                return LyricsSearchOutcome(
                    content=state.synced_content, synced=True, attempts=state.attempts
                )

        started_at: float | None = None
        budget_exhausted = False
        for query in plan.exhaustive():
            if query in state.visited:
                continue
            if started_at is None:
                started_at = self._monotonic()
            elif self._monotonic() - started_at > self._budget:
                logger.info("Lyrics search budget of %.0fs exhausted", self._budget)
                budget_exhausted = True
                break
            if await self._fetch(query, state):
                return LyricsSearchOutcome(
                    content=state.synced_content, synced=True, attempts=state.attempts
                )

        return LyricsSearchOutcome(
            content=state.plain_fallback,
            synced=False,
            attempts=state.attempts,
            budget_exhausted=budget_exhausted,
        )

    async def _save(
        self, item: LibraryItem, content: str, outcome: LyricsSearchOutcome
    ) -> LyricsEnrichmentResult:
        item_id = item.id
        normalized = normalize_script(content, self._normalizer, self._ratio_threshold)
        if normalized.converted:
            logger.info(
                "Simplified lyrics for %s (traditional ratio %.2f)", item_id, normalized.ratio
            )

        try:
            path = await self._store.save(item_id, normalized.value)
        except PersistenceError as e:
            logger.warning("Lyrics save failed for %s: %s", item_id, e)
            await self._repository.update(
                item_id, lambda i: setattr(i, "last_lyrics_attempt_at", self._clock())
            )
            return LyricsEnrichmentResult(item_id=item_id, attempts=outcome.attempts)

        source = self._provider.name
        recorded = await self._record(item_id, path, source)
        if recorded is None:
            # File stays on disk. The next save for a re-imported item overwrites it.
            logger.debug(
                "Item %s vanished after lyrics save, leaving %s unreferenced", item_id, path
            )
            return LyricsEnrichmentResult(item_id=item_id, attempts=outcome.attempts)

        logger.info(
            "Lyrics saved for %s\n"
            "├─ source: %s (%s)\n"
            "├─ attempts: %d\n"
            "└─ path: %s",
            item_id,
            source,
            "synced" if outcome.synced else "plain",
            outcome.attempts,
            path,
        )
        await self._emit_updated(recorded)
        return LyricsEnrichmentResult(
            item_id=item_id,
            saved=True,
            synced=outcome.synced,
            path=path,
            source=source,
            attempts=outcome.attempts,
        )

    async def _record(self, item_id: str, path: str, source: str) -> LibraryItem | None:
        now = self._clock()

        def apply(item: LibraryItem) -> None:
            item.lyrics_path = path
            item.lyrics_source = source
            item.last_lyrics_fetched_at = now
            item.last_lyrics_attempt_at = now

        return await self._repository.update(item_id, apply)

    async def _use_local_sidecar(self, item: LibraryItem) -> LyricsEnrichmentResult:
        """Local-only mode: never touch the network, just look for "<song>.lrc"."""
        sidecar = await self._store.find_sidecar(item.file_path)
        if sidecar is None:
            logger.debug("Local-only mode: no sidecar lyrics for %s", item.id)
            return LyricsEnrichmentResult(item_id=item.id)

        recorded = await self._record(item.id, sidecar, LOCAL_SOURCE)
        if recorded is None:
            return LyricsEnrichmentResult(item_id=item.id)

        logger.info("Using local lyrics for %s: %s", item.id, sidecar)
        await self._emit_updated(recorded)
        return LyricsEnrichmentResult(
            item_id=item.id, saved=True, path=sidecar, source=LOCAL_SOURCE
        )

    async def _emit_updated(self, item: LibraryItem) -> None:
        if self._event_sink is None:
            return
        notification = Notification(
            type=NotificationType.LYRICS_UPDATED,
            title="Lyrics updated",
            message=f"{item.artist} - {item.title}",
            data={"item_id": item.id},
        )
        result = await self._event_sink.send(notification)
        if not result.success:
            logger.warning(
                "Event sink %s rejected lyrics update for %s: %s",
                result.provider_name,
                item.id,
                result.error,
            )
