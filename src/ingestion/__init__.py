"""
Ingestion Layer for the order-timeline pipeline.

This package turns raw back-office export files into canonical order events.

Key Components:
- source_detector: classifies a file into a SourceKind
- delimited_parser / sanitizer: CSV/TSV rows with PII removed or masked
- wide_table: prunes empty and duplicate columns per source bucket
- extractors: per-source row -> TimelineEvent transforms
- IngestOrchestrator: runs the whole pipeline for one set of files
"""
