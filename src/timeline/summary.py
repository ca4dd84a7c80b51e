"""
Per-order financial summary.

Sums released payments and issued refunds, flags near-zero totals and
normalizes the sales-channel provenance carried by the ORDERED event.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Any, List, Mapping, Optional, Sequence

from src.schemas.ingest_result import (
    OrderClass,
    OrderSummary,
    SalesChannel,
    SalesSource,
)
from src.schemas.order_event import (
    EventType,
    OrderBranch,
    OrderedDetails,
    TimelineEvent,
)

CENT = Decimal("0.01")

TINY_PAYMENT = "tiny_payment"
TINY_REFUND = "tiny_refund"

# Legacy combined strings ("flipkart_b2b", "Amazon.in") are matched by prefix.
_CHANNEL_PREFIXES: List[tuple[str, SalesChannel]] = [
    ("flipkart", SalesChannel.FLIPKART),
    ("amazon", SalesChannel.AMAZON_IN),
    ("poshace", SalesChannel.POSHACE),
    ("website", SalesChannel.WEBSITE),
]


def round_money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def sum_amounts(events: Sequence[TimelineEvent], event_type: EventType) -> Decimal:
    total = Decimal("0")
    for event in events:
        if event.type is event_type and event.amount is not None:
            total += event.amount
    return total


def _order_class_in(text: str) -> Optional[OrderClass]:
    if "b2b" in text:
        return OrderClass.B2B
    if "b2c" in text:
        return OrderClass.B2C
    return None


def resolve_sales_source(raw: Any) -> Optional[SalesSource]:
    """
    Normalize raw provenance into a SalesSource.

    Accepts the structured ``{"channel": ..., "orderClass": ...}`` shape or a
    legacy combined string. Unrecognized channels become ``other``; missing
    provenance yields None.
    """
    if raw is None:
        return None

    if isinstance(raw, Mapping):
        channel_value = str(raw.get("channel") or "").strip().lower()
        if not channel_value:
            return None
        try:
            channel = SalesChannel(channel_value)
        except ValueError:
            channel = SalesChannel.OTHER
        class_value = str(raw.get("orderClass") or raw.get("order_class") or "")
        order_class = _order_class_in(class_value.strip().lower())
        return SalesSource(channel=channel, order_class=order_class)

    text = str(raw).strip().lower()
    if not text:
        return None
    for prefix, channel in _CHANNEL_PREFIXES:
        if text.startswith(prefix):
            return SalesSource(channel=channel, order_class=_order_class_in(text))
    return SalesSource(channel=SalesChannel.OTHER)


def _ordered_source(events: Sequence[TimelineEvent]) -> Optional[SalesSource]:
    for event in events:
        if event.type is EventType.ORDERED:
            details = event.details
            if isinstance(details, OrderedDetails):
                return resolve_sales_source(details.source)
            return None
    return None


def build_order_summary(
    order_id: str,
    events: Sequence[TimelineEvent],
    branch: OrderBranch,
) -> OrderSummary:
    """
    Roll up one order's chronologically sorted timeline.

    ``events`` must be non-empty; ``firstSeen``/``lastSeen`` are its first and
    last timestamps.
    """
    if not events:
        raise ValueError(f"Order {order_id!r} has no events to summarize")

    paid = sum_amounts(events, EventType.PAYMENT_RELEASED)
    refunded = sum_amounts(events, EventType.REFUND_ISSUED)

    flags: List[str] = []
    if paid != 0 and abs(paid) < CENT:
        flags.append(TINY_PAYMENT)
    if refunded != 0 and abs(refunded) < CENT:
        flags.append(TINY_REFUND)

    return OrderSummary(
        order_id=order_id,
        first_seen=events[0].at,
        last_seen=events[-1].at,
        branch=branch,
        paid_to_date=round_money(paid),
        refunded_to_date=round_money(refunded),
        delta=round_money(paid - refunded),
        flags=flags,
        source=_ordered_source(events),
    )
