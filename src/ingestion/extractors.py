"""
Event extractors.

One pure function per source kind, mapping that kind's wide-table rows to
TimelineEvents. Column names differ between exports (and between versions of
the same export), so each extractor probes an ordered list of candidate
columns. Rows without a usable order id or timestamp are skipped; this is
expected for summary lines, fee-only settlements and partial carrier scans.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterable, List, Mapping

from src.ingestion.coercion import (
    first_present,
    parse_timestamp,
    safe_int,
    strip_or_none,
    to_amount,
)
from src.schemas.order_event import (
    CancellationDetails,
    EventType,
    OrderedDetails,
    PaymentDetails,
    ShipmentDetails,
    SourceKind,
    TimelineEvent,
)

logger = logging.getLogger(__name__)

Row = Mapping[str, Any]

# ---------------------------------------------------------------------------
# Candidate columns
# ---------------------------------------------------------------------------

ORDER_ID_COLUMNS = ["order-id", "order id", "amazon-order-id", "Order ID"]
ORDER_DATE_COLUMNS = ["purchase-date", "purchase date", "order-date"]
ORDER_QTY_COLUMNS = ["quantity-purchased", "quantity"]
ORDER_SOURCE_COLUMNS = ["source", "sales-channel"]

TXN_ORDER_ID_COLUMNS = ["Order ID", "order-id"]
TXN_CURRENCY_COLUMNS = ["Currency", "currency"]

SHIPMENT_ID_COLUMNS = ["Order ID", "order-id", "orderId", "client reference", "reference"]
SHIPMENT_STATUS_COLUMNS = ["status", "Status", "event", "scan", "milestone"]
SHIPMENT_TIME_COLUMNS = ["date", "Date", "timestamp", "time", "event_time", "delivered_at"]
SHIPMENT_TRACKING_COLUMNS = ["awb", "AWB", "tracking number", "tracking_number"]

CANCEL_ID_COLUMNS = ["orderId", "Order ID", "order-id"]
CANCEL_DATE_COLUMNS = ["cancelDate", "Date", "cancelled_at"]
CANCEL_INITIATOR_COLUMNS = ["initiator", "Initiator"]
CANCEL_REASON_COLUMNS = ["reason", "Reason"]

DELIVERED_KEYWORDS = ("delivered", "pod")
TRANSIT_KEYWORDS = (
    "pickup",
    "in transit",
    "received",
    "handover",
    "forwarded",
    "out for delivery",
)


# ---------------------------------------------------------------------------
# Extractors
# ---------------------------------------------------------------------------


def events_from_orders(rows: Iterable[Row]) -> List[TimelineEvent]:
    """One ORDERED event per order row, dated by its purchase date."""
    out: List[TimelineEvent] = []
    skipped = 0
    for row in rows:
        order_id = first_present(row, ORDER_ID_COLUMNS)
        at = parse_timestamp(first_present(row, ORDER_DATE_COLUMNS))
        if not order_id or at is None:
            skipped += 1
            continue

        out.append(
            TimelineEvent(
                order_id=order_id,
                at=at,
                type=EventType.ORDERED,
                source=SourceKind.MARKETPLACE_ORDERS,
                details=OrderedDetails(
                    sku=strip_or_none(row.get("sku")),
                    qty=safe_int(first_present(row, ORDER_QTY_COLUMNS)),
                    source=_provenance(row),
                ),
            )
        )

    _log_skipped("orders", skipped)
    return out


def events_from_transactions(rows: Iterable[Row]) -> List[TimelineEvent]:
    """
    Settlement rows -> PAYMENT_RELEASED / REFUND_ISSUED.

    An "Order Payment" row only counts once its status says "released";
    refunds count regardless of status.
    """
    out: List[TimelineEvent] = []
    skipped = 0
    for row in rows:
        order_id = first_present(row, TXN_ORDER_ID_COLUMNS)
        at = parse_timestamp(row.get("Date"))
        if not order_id or at is None:
            skipped += 1
            continue

        txn_type = (strip_or_none(row.get("Transaction type")) or "").lower()
        status = (strip_or_none(row.get("Transaction Status")) or "").lower()
        currency = first_present(row, TXN_CURRENCY_COLUMNS)

        if "order payment" in txn_type and "released" in status:
            out.append(
                TimelineEvent(
                    order_id=order_id,
                    at=at,
                    type=EventType.PAYMENT_RELEASED,
                    source=SourceKind.MARKETPLACE_TRANSACTIONS,
                    amount=to_amount(row.get("Total")),
                    currency=currency,
                    details=PaymentDetails(
                        product_charges=to_amount(row.get("Total product charges")),
                        promotional_rebates=to_amount(
                            row.get("Total promotional rebates")
                        ),
                        amazon_fees=to_amount(row.get("Amazon fees")),
                        other=to_amount(row.get("Other")),
                    ),
                )
            )

        if "refund" in txn_type:
            out.append(
                TimelineEvent(
                    order_id=order_id,
                    at=at,
                    type=EventType.REFUND_ISSUED,
                    source=SourceKind.MARKETPLACE_TRANSACTIONS,
                    amount=to_amount(row.get("Total")),
                    currency=currency,
                )
            )

    _log_skipped("transactions", skipped)
    return out


def classify_shipment_status(status: str) -> EventType:
    """Map carrier status text to DELIVERED, IN_TRANSIT or SHIPMENT_CREATED."""
    lowered = status.lower()
    if any(word in lowered for word in DELIVERED_KEYWORDS):
        return EventType.DELIVERED
    if any(word in lowered for word in TRANSIT_KEYWORDS):
        return EventType.IN_TRANSIT
    return EventType.SHIPMENT_CREATED


def events_from_shipments(
    rows: Iterable[Row], source: SourceKind
) -> List[TimelineEvent]:
    """Carrier tracker rows (international or domestic) -> shipment events."""
    out: List[TimelineEvent] = []
    skipped = 0
    for row in rows:
        order_id = first_present(row, SHIPMENT_ID_COLUMNS)
        at = parse_timestamp(first_present(row, SHIPMENT_TIME_COLUMNS))
        if not order_id or at is None:
            skipped += 1
            continue

        status = first_present(row, SHIPMENT_STATUS_COLUMNS) or ""
        out.append(
            TimelineEvent(
                order_id=order_id,
                at=at,
                type=classify_shipment_status(status),
                source=source,
                details=ShipmentDetails(
                    status=status,
                    tracking_number=first_present(row, SHIPMENT_TRACKING_COLUMNS),
                ),
            )
        )

    _log_skipped(source.value, skipped)
    return out


def events_from_cancellations(rows: Iterable[Row]) -> List[TimelineEvent]:
    """One cancellation event per row; "customer" initiator vs everyone else."""
    out: List[TimelineEvent] = []
    skipped = 0
    for row in rows:
        order_id = first_present(row, CANCEL_ID_COLUMNS)
        at = parse_timestamp(first_present(row, CANCEL_DATE_COLUMNS))
        if not order_id or at is None:
            skipped += 1
            continue

        initiator = (first_present(row, CANCEL_INITIATOR_COLUMNS) or "").lower()
        out.append(
            TimelineEvent(
                order_id=order_id,
                at=at,
                type=(
                    EventType.CANCELLED_BY_CUSTOMER
                    if initiator == "customer"
                    else EventType.CANCELLED_BY_VENDOR
                ),
                source=SourceKind.CANCELLATIONS,
                details=CancellationDetails(
                    reason=first_present(row, CANCEL_REASON_COLUMNS)
                ),
            )
        )

    _log_skipped("cancellations", skipped)
    return out


# Source kind -> extractor. Purchases are tabulated but carry no events.
EXTRACTORS: Dict[SourceKind, Callable[[Iterable[Row]], List[TimelineEvent]]] = {
    SourceKind.MARKETPLACE_ORDERS: events_from_orders,
    SourceKind.MARKETPLACE_TRANSACTIONS: events_from_transactions,
    SourceKind.INTERNATIONAL_SHIPMENT: lambda rows: events_from_shipments(
        rows, SourceKind.INTERNATIONAL_SHIPMENT
    ),
    SourceKind.DOMESTIC_SHIPMENT: lambda rows: events_from_shipments(
        rows, SourceKind.DOMESTIC_SHIPMENT
    ),
    SourceKind.CANCELLATIONS: events_from_cancellations,
}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _provenance(row: Row) -> Any:
    for key in ORDER_SOURCE_COLUMNS:
        value = row.get(key)
        if isinstance(value, dict):
            return value
        if strip_or_none(value) is not None:
            return str(value).strip()
    return None


def _log_skipped(name: str, skipped: int) -> None:
    if skipped:
        logger.debug(f"{name}: skipped {skipped} rows without order id or date")
