"""Infrastructure layer: concurrency primitives, HTTP integrations, adapters."""
