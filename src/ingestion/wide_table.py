"""
Wide-table builder.

Collapses a bucket of heterogeneous rows into one table that keeps every
useful column: columns that are empty in every row are dropped, and a column
whose values repeat an earlier column row-for-row is dropped in favour of the
earlier one.
"""

from __future__ import annotations

import hashlib
import json
import logging
from typing import Any, Dict, List, Mapping, Sequence

from src.ingestion.coercion import is_blank
from src.schemas.ingest_result import WideTable

logger = logging.getLogger(__name__)


def column_union(rows: Sequence[Mapping[str, Any]]) -> List[str]:
    """All column names across ``rows``, in first-seen order."""
    seen: Dict[str, None] = {}
    for row in rows:
        for key in row:
            seen.setdefault(key, None)
    return list(seen)


def fingerprint_column(rows: Sequence[Mapping[str, Any]], column: str) -> str:
    """Stable fingerprint of a column's full value vector (missing == null)."""
    values = [row.get(column) for row in rows]
    payload = json.dumps(values, ensure_ascii=False, default=str)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def build_wide_table(rows: Sequence[Mapping[str, Any]]) -> WideTable:
    """
    Build a pruned, deduplicated projection of ``rows``.

    Steps:
    1. Union of column names (first-seen order)
    2. Drop columns blank in every row
    3. Drop columns identical to an earlier retained column (first wins)
    4. Project every row onto the retained columns
    """
    if not rows:
        return WideTable()

    columns = column_union(rows)
    non_empty = [
        column
        for column in columns
        if any(not is_blank(row.get(column)) for row in rows)
    ]

    retained: List[str] = []
    duplicates: Dict[str, str] = {}
    by_fingerprint: Dict[str, str] = {}
    for column in non_empty:
        sig = fingerprint_column(rows, column)
        if sig in by_fingerprint:
            logger.debug(
                f"Dropping column {column!r}: duplicate of {by_fingerprint[sig]!r}"
            )
            duplicates[column] = by_fingerprint[sig]
            continue
        by_fingerprint[sig] = column
        retained.append(column)

    projected = [{column: row.get(column) for column in retained} for row in rows]

    logger.debug(
        f"Wide table: {len(retained)}/{len(columns)} columns kept, "
        f"{len(projected)} rows"
    )
    return WideTable(columns=retained, rows=projected, duplicates=duplicates)
