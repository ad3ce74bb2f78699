"""Application services - the enrichment engines."""

from lyricspot.application.services.artist_image_service import (
    ArtistImageService,
    AvatarRefreshResult,
    parse_resolution,
)
from lyricspot.application.services.library_enrichment_service import (
    ItemEnrichmentOutcome,
    LibraryEnrichmentService,
)
from lyricspot.application.services.lyrics_enrichment_service import (
    LyricsEnrichmentResult,
    LyricsEnrichmentService,
    LyricsSearchOutcome,
)
from lyricspot.application.services.lyrics_query_builder import (
    LyricsQuery,
    QueryCandidateBuilder,
    QueryPlan,
    sanitize_query_text,
)
from lyricspot.application.services.metadata_enrichment_service import (
    MetadataEnrichmentResult,
    MetadataEnrichmentService,
    build_query,
    needs_enrichment,
)

__all__ = [
    "ArtistImageService",
    "AvatarRefreshResult",
    "ItemEnrichmentOutcome",
    "LibraryEnrichmentService",
    "LyricsEnrichmentResult",
    "LyricsEnrichmentService",
    "LyricsQuery",
    "LyricsSearchOutcome",
    "MetadataEnrichmentResult",
    "MetadataEnrichmentService",
    "QueryCandidateBuilder",
    "QueryPlan",
    "build_query",
    "needs_enrichment",
    "parse_resolution",
    "sanitize_query_text",
]
