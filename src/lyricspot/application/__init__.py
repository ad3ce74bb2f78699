"""Application layer: enrichment engines and orchestration."""
