"""Settings and per-call configuration for the ingest pipeline."""
