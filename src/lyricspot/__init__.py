"""lyricspot - metadata and synced-lyrics enrichment for local music libraries."""

__version__ = "0.1.0"
