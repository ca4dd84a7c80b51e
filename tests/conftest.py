"""
Shared pytest fixtures for the order-timeline test suite.

Provides reusable factories for TimelineEvent objects and input files.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Optional

import pytest

from src.ingestion.orchestrator import InputFile
from src.schemas.order_event import EventType, SourceKind, TimelineEvent

T0 = datetime(2025, 8, 1, 10, 0, tzinfo=timezone.utc)

SOURCE_BY_TYPE = {
    EventType.ORDERED: SourceKind.MARKETPLACE_ORDERS,
    EventType.PAYMENT_RELEASED: SourceKind.MARKETPLACE_TRANSACTIONS,
    EventType.REFUND_ISSUED: SourceKind.MARKETPLACE_TRANSACTIONS,
    EventType.CANCELLED_BY_VENDOR: SourceKind.CANCELLATIONS,
    EventType.CANCELLED_BY_CUSTOMER: SourceKind.CANCELLATIONS,
}


@pytest.fixture
def as_of():
    """Fixed clock anchor, well inside the return window of T0 + a few days."""
    return T0 + timedelta(days=10)


@pytest.fixture
def make_event():
    """
    Return a function that creates TimelineEvent objects with sensible defaults.

    ``day`` offsets the timestamp from T0; the source defaults to the kind that
    normally emits the event type.

    Example:
        event = make_event(EventType.DELIVERED, day=3)
    """

    def _make_event(
        event_type: EventType,
        day: float = 0,
        order_id: str = "408-4870009-9733125",
        amount: Optional[str] = None,
        **kwargs,
    ) -> TimelineEvent:
        defaults = {
            "order_id": order_id,
            "at": T0 + timedelta(days=day),
            "type": event_type,
            "source": SOURCE_BY_TYPE.get(event_type, SourceKind.DOMESTIC_SHIPMENT),
            "amount": Decimal(amount) if amount is not None else None,
        }
        defaults.update(kwargs)
        return TimelineEvent(**defaults)

    return _make_event


@pytest.fixture
def make_file():
    """Return a function building an InputFile from a name and lines of text."""

    def _make_file(name: str, *lines: str) -> InputFile:
        return InputFile(name=name, content="\n".join(lines) + "\n")

    return _make_file
