"""
Source File Detection.

Classifies an export file into a SourceKind from its file name, falling back
to sniffing header tokens in the first ~2KB of content. Detection is pure and
total: anything unrecognised is ``SourceKind.UNKNOWN``, never an error.
"""

from __future__ import annotations

import logging
import re

from src.schemas.order_event import SourceKind

logger = logging.getLogger(__name__)

SAMPLE_SIZE = 2048

# ---------------------------------------------------------------------------
# File name markers, checked in order (first match wins). "cancel" must
# precede "orders" ("cancelled_orders.csv" is a cancellation log) and
# "international" must precede "national", which it contains.
# ---------------------------------------------------------------------------

_FILENAME_MARKERS: list[tuple[str, SourceKind]] = [
    (r"transactions", SourceKind.MARKETPLACE_TRANSACTIONS),
    (r"cancel", SourceKind.CANCELLATIONS),
    (r"\borders\b|unshipped|sales data", SourceKind.MARKETPLACE_ORDERS),
    (r"purchase", SourceKind.MARKETPLACE_PURCHASES),
    (
        r"stackry|commercial invoice|international|\bawb\b",
        SourceKind.INTERNATIONAL_SHIPMENT,
    ),
    (r"national|courier|waybill|manifest", SourceKind.DOMESTIC_SHIPMENT),
]

_COMPILED_MARKERS = [(re.compile(p, re.I), kind) for p, kind in _FILENAME_MARKERS]


def _normalize_name(name: str) -> str:
    # Treat separators as word breaks so "amazon_orders-2025.txt" matches
    # the "orders" marker.
    return re.sub(r"[_\-.]+", " ", name.lower())


def detect_source_kind(name: str, sample: str | None = None) -> SourceKind:
    """
    Classify a file by name, then by header tokens in ``sample``.

    Header sniffing:
    - "order-id" and "sku" -> marketplace orders
    - "Transaction type" and "Order ID" -> marketplace transactions
    - "order id", "order date" and "asin" (any case) -> marketplace purchases
    """
    normalized = _normalize_name(name or "")
    for pattern, kind in _COMPILED_MARKERS:
        if pattern.search(normalized):
            logger.debug(f"Detected {kind.value} from file name {name!r}")
            return kind

    if sample:
        head = sample[:SAMPLE_SIZE]
        if "order-id" in head and "sku" in head:
            return SourceKind.MARKETPLACE_ORDERS
        if "Transaction type" in head and "Order ID" in head:
            return SourceKind.MARKETPLACE_TRANSACTIONS
        lowered = head.lower()
        if "order id" in lowered and "order date" in lowered and "asin" in lowered:
            return SourceKind.MARKETPLACE_PURCHASES

    return SourceKind.UNKNOWN
