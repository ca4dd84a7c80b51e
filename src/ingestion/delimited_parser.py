"""
Delimited text parser.

Turns CSV/TSV export text into sanitized row dicts keyed by the header line.
No validation or type coercion happens here; extractors coerce later.
"""

from __future__ import annotations

import csv
import io
import logging
from typing import Any, Dict, List, Optional

from src.ingestion.sanitizer import DEFAULT_MASK, sanitize_pii

logger = logging.getLogger(__name__)

COMMA = ","
TAB = "\t"
_BOM = "\ufeff"


def detect_delimiter(text: str) -> str:
    """Pick tab when the first line has more tabs than commas, else comma."""
    first_line = text.lstrip(_BOM).split("\n", 1)[0]
    return TAB if first_line.count(TAB) > first_line.count(COMMA) else COMMA


def parse_delimited(
    text: str,
    delimiter: Optional[str] = None,
    *,
    mask: str = DEFAULT_MASK,
) -> List[Dict[str, Any]]:
    """
    Parse ``text`` into a list of sanitized records.

    Args:
        text: Whole file contents, already decoded.
        delimiter: Field delimiter; auto-detected from the first line if None.
        mask: Mask token used for email columns.

    Returns:
        One dict per non-empty data line. Missing trailing cells are left out
        of the dict; surplus cells beyond the header are discarded.
    """
    if not text:
        return []

    text = text.lstrip(_BOM)
    delimiter = delimiter or detect_delimiter(text)

    reader = csv.reader(io.StringIO(text, newline=""), delimiter=delimiter)
    headers: Optional[List[str]] = None
    rows: List[Dict[str, Any]] = []

    for cells in reader:
        if not cells or all(not c.strip() for c in cells):
            continue
        if headers is None:
            headers = [h.strip() for h in cells]
            continue

        record = {
            header: cell.strip() for header, cell in zip(headers, cells)
        }
        rows.append(sanitize_pii(record, mask))

    logger.debug(f"Parsed {len(rows)} rows (delimiter={delimiter!r})")
    return rows
