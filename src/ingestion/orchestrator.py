"""
Ingest Orchestrator.

Top-level entry point: detects and parses every input file, routes its rows
into per-source buckets, then builds the wide tables, extracts events,
assembles per-order timelines and classifies and summarizes every order.

Each call is self-contained: nothing is cached or shared between calls.
"""

from __future__ import annotations

import logging
import re
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from pydantic import AliasChoices, BaseModel, Field

from src.configs.config import IngestConfig
from src.ingestion.delimited_parser import parse_delimited
from src.ingestion.extractors import EXTRACTORS
from src.ingestion.source_detector import SAMPLE_SIZE, detect_source_kind
from src.ingestion.wide_table import build_wide_table
from src.monitoring.logging import with_context
from src.schemas.ingest_result import IngestResult, IngestTables, WideTable
from src.schemas.order_event import SourceKind, TimelineEvent
from src.timeline.aggregator import build_timelines
from src.timeline.branch_classifier import classify_branch
from src.timeline.summary import build_order_summary

logger = logging.getLogger(__name__)

Row = Dict[str, Any]

# Unknown files with a status-like column are treated as domestic trackers.
_STATUS_LIKE_COLUMN = re.compile(r"status|scan|event", re.I)

# Bucket -> field of IngestTables
TABLE_FIELDS: Dict[SourceKind, str] = {
    SourceKind.MARKETPLACE_ORDERS: "orders",
    SourceKind.MARKETPLACE_TRANSACTIONS: "transactions",
    SourceKind.MARKETPLACE_PURCHASES: "purchases",
    SourceKind.INTERNATIONAL_SHIPMENT: "intl_shipments",
    SourceKind.DOMESTIC_SHIPMENT: "nat_shipments",
    SourceKind.CANCELLATIONS: "cancellations",
}


class InputFile(BaseModel):
    """
    One uploaded export: its file name and its text or raw UTF-8 bytes.

    Mappings may also use the upload keys ``fileName`` and ``fileBytes``.
    """

    name: str = Field(validation_alias=AliasChoices("name", "fileName"))
    content: Union[str, bytes] = Field(
        default="", validation_alias=AliasChoices("content", "fileBytes")
    )

    def text(self) -> str:
        """Decoded contents; a UTF-8 decoding failure propagates to the caller."""
        if isinstance(self.content, bytes):
            return self.content.decode("utf-8-sig")
        return self.content


@dataclass
class ParsedFile:
    name: str
    kind: SourceKind
    bucket: SourceKind
    rows: List[Row]


@dataclass
class BucketAccumulator:
    """Rows collected per source kind across all files of one call."""

    buckets: Dict[SourceKind, List[Row]] = field(
        default_factory=lambda: {kind: [] for kind in TABLE_FIELDS}
    )

    def add(self, kind: SourceKind, rows: Sequence[Row]) -> None:
        self.buckets[kind].extend(rows)

    def rows(self, kind: SourceKind) -> List[Row]:
        return self.buckets[kind]


def route_unknown(rows: Sequence[Row]) -> SourceKind:
    """Bucket for an unrecognised file: shipment-like if any column looks like a status."""
    for row in rows:
        if any(_STATUS_LIKE_COLUMN.search(key) for key in row):
            return SourceKind.DOMESTIC_SHIPMENT
    return SourceKind.MARKETPLACE_ORDERS


class IngestOrchestrator:
    """
    Coordinates one ingest call end to end.

    Responsibilities:
    - Detect, parse and sanitize each file (optionally on a worker pool)
    - Accumulate rows per source kind
    - Build wide tables and run the per-kind event extractors
    - Assemble timelines, classify branches and build order summaries
    """

    def __init__(self, config: Optional[IngestConfig] = None):
        self.config = config or IngestConfig.from_settings()
        self.logger = logger

    # ========================================================================
    # PARSING
    # ========================================================================

    def parse_file(self, file: InputFile, config: IngestConfig) -> ParsedFile:
        """Detect the kind of one file, parse it and choose its bucket."""
        text = file.text()
        kind = detect_source_kind(file.name, text[:SAMPLE_SIZE])
        rows = parse_delimited(text, mask=config.email_mask)

        bucket = route_unknown(rows) if kind is SourceKind.UNKNOWN else kind

        with_context(
            self.logger, stage="parse", source_kind=kind.value, file_name=file.name
        ).info(f"Parsed {file.name}: {len(rows)} rows -> {TABLE_FIELDS[bucket]}")
        return ParsedFile(name=file.name, kind=kind, bucket=bucket, rows=rows)

    def parse_files(
        self, files: Sequence[InputFile], config: IngestConfig
    ) -> List[ParsedFile]:
        """Parse all files; results are returned in input order."""
        if config.max_workers <= 1 or len(files) <= 1:
            return [self.parse_file(f, config) for f in files]

        results: List[tuple[int, ParsedFile]] = []
        with ThreadPoolExecutor(max_workers=config.max_workers) as ex:
            futs = {ex.submit(self.parse_file, f, config): i for i, f in enumerate(files)}
            for fut in as_completed(futs):
                results.append((futs[fut], fut.result()))
        # keep stable by sorting according to original order
        results.sort(key=lambda pair: pair[0])
        return [parsed for _, parsed in results]

    # ========================================================================
    # EXECUTION
    # ========================================================================

    def ingest(
        self,
        files: Sequence[Union[InputFile, Mapping[str, Any]]],
        config: Union[IngestConfig, Mapping[str, Any], None] = None,
    ) -> IngestResult:
        """
        Run the full pipeline over ``files``.

        Args:
            files: InputFile objects or ``{"name", "content"}`` mappings.
            config: Partial overrides, e.g. ``{"returnWindowDays": 45}``.

        Returns:
            IngestResult with tables, events, timelines and summaries.
        """
        cfg = self.config.merged(config)
        as_of = cfg.as_of or datetime.now(timezone.utc)
        inputs = [
            f if isinstance(f, InputFile) else InputFile.model_validate(f) for f in files
        ]

        accumulator = BucketAccumulator()
        for parsed in self.parse_files(inputs, cfg):
            accumulator.add(parsed.bucket, parsed.rows)

        tables: Dict[SourceKind, WideTable] = {
            kind: build_wide_table(accumulator.rows(kind)) for kind in TABLE_FIELDS
        }

        events: List[TimelineEvent] = []
        for kind, extractor in EXTRACTORS.items():
            events.extend(extractor(tables[kind].expanded_rows()))

        timeline = build_timelines(events)
        summaries = [
            build_order_summary(
                order_id,
                order_events,
                classify_branch(
                    order_events,
                    return_window_days=cfg.return_window_days,
                    as_of=as_of,
                ),
            )
            for order_id, order_events in timeline.items()
        ]

        self.logger.info(
            f"Ingested {len(inputs)} files: {len(events)} events, "
            f"{len(timeline)} orders",
            extra={
                "counts": {
                    "files": len(inputs),
                    "events": len(events),
                    "orders": len(timeline),
                    **{name: len(tables[kind]) for kind, name in TABLE_FIELDS.items()},
                }
            },
        )

        return IngestResult(
            tables=IngestTables(
                **{name: tables[kind] for kind, name in TABLE_FIELDS.items()}
            ),
            events=events,
            timeline=timeline,
            summaries=summaries,
        )


def ingest_files(
    files: Sequence[Union[InputFile, Mapping[str, Any]]],
    config: Union[IngestConfig, Mapping[str, Any], None] = None,
) -> IngestResult:
    """Convenience wrapper: one fresh orchestrator, one call."""
    return IngestOrchestrator().ingest(files, config)
