# src/schemas/order_event.py
"""
Canonical Order Event Schema.

Order-lifecycle exports from heterogeneous back-office sources (marketplace
order reports, settlement transaction logs, shipment trackers, cancellation
logs) are reduced to a single event vocabulary. Every downstream consumer
(timeline assembly, branch classification, reconciliation, dashboards) reads
these models, so field names on the wire stay camelCase for compatibility.
"""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Dict, Literal, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
)


# ============================================================================
# ENUMS
# ============================================================================


class SourceKind(str, Enum):
    """Provenance of an input file, assigned once by the source detector."""

    MARKETPLACE_ORDERS = "amazon_orders_tsv"
    MARKETPLACE_TRANSACTIONS = "amazon_transactions_csv"
    MARKETPLACE_PURCHASES = "amazon_purchase_csv"
    INTERNATIONAL_SHIPMENT = "international_shipment"
    DOMESTIC_SHIPMENT = "national_shipment"
    CANCELLATIONS = "cancellations_csv"
    UNKNOWN = "unknown"


class EventType(str, Enum):
    """Closed set of lifecycle events an order can go through."""

    ORDERED = "ORDERED"
    SHIPMENT_CREATED = "SHIPMENT_CREATED"
    IN_TRANSIT = "IN_TRANSIT"
    DELIVERED = "DELIVERED"
    CANCELLED_BY_VENDOR = "CANCELLED_VENDOR"
    CANCELLED_BY_CUSTOMER = "CANCELLED_CUSTOMER"
    REFUND_ISSUED = "REFUND_ISSUED"
    PAYMENT_RELEASED = "PAYMENT_RELEASED"
    RETURN_WINDOW_LAPSED = "RETURN_WINDOW_LAPSED"


class OrderBranch(str, Enum):
    """Lifecycle classification of one order."""

    PAID = "paid"
    AWAITING_PAYMENT = "awaiting_payment"
    DELIVERED_THEN_REFUNDED = "delivered_then_refunded"
    CANCELLED_PRE_DELIVERY_REFUNDED = "cancelled_predelivery_refunded"
    CANCELLED_PRE_DELIVERY_PENDING_REFUND = "cancelled_predelivery_pending_refund"
    CANCELLED_AFTER_DELIVERY_REFUNDED = "cancelled_after_delivery_refunded"
    CANCELLED_AFTER_DELIVERY_PENDING_REFUND = "cancelled_after_delivery_pending_refund"
    SEND_TO_FBA = "send_to_fba"


# ============================================================================
# EVENT DETAILS (one shape per event family)
# ============================================================================


class OrderedDetails(BaseModel):
    """Line-item data carried by an ORDERED event."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["ordered"] = "ordered"
    sku: Optional[str] = None
    qty: Optional[int] = None
    # Raw provenance as found on the row: a legacy string such as
    # "flipkart_b2b" or a {"channel", "orderClass"} mapping.
    source: Union[str, Dict[str, Any], None] = None


class PaymentDetails(BaseModel):
    """Fee breakdown of a released settlement."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    kind: Literal["payment"] = "payment"
    product_charges: Decimal = Field(default=Decimal("0"), alias="productCharges")
    promotional_rebates: Decimal = Field(
        default=Decimal("0"), alias="promotionalRebates"
    )
    amazon_fees: Decimal = Field(default=Decimal("0"), alias="amazonFees")
    other: Decimal = Decimal("0")

    @field_serializer(
        "product_charges",
        "promotional_rebates",
        "amazon_fees",
        "other",
        when_used="json",
    )
    def serialize_decimal(self, v: Decimal) -> float:
        """Serialize Decimal to float for JSON compatibility."""
        return float(v)


class ShipmentDetails(BaseModel):
    """Carrier scan data attached to shipment events."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    kind: Literal["shipment"] = "shipment"
    status: str = ""
    tracking_number: Optional[str] = Field(default=None, alias="trackingNumber")


class CancellationDetails(BaseModel):
    """Reason recorded alongside a cancellation."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["cancellation"] = "cancellation"
    reason: Optional[str] = None


EventDetails = Annotated[
    Union[OrderedDetails, PaymentDetails, ShipmentDetails, CancellationDetails],
    Field(discriminator="kind"),
]


# ============================================================================
# TIMELINE EVENT
# ============================================================================


class TimelineEvent(BaseModel):
    """
    One normalized lifecycle event for one order.

    Immutable. ``at`` is always a timezone-aware UTC datetime so events from
    different sources compare chronologically.
    """

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "orderId": "408-4870009-9733125",
                "at": "2025-08-01T10:00:00Z",
                "type": "PAYMENT_RELEASED",
                "source": "amazon_transactions_csv",
                "amount": 1000.0,
                "currency": "INR",
            }
        },
    )

    order_id: str = Field(alias="orderId", min_length=1)
    at: datetime
    type: EventType
    source: SourceKind
    amount: Optional[Decimal] = None
    currency: Optional[str] = None
    details: Optional[EventDetails] = None

    @field_validator("order_id")
    @classmethod
    def validate_order_id(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("orderId cannot be blank")
        return v

    @field_validator("at")
    @classmethod
    def normalize_to_utc(cls, v: datetime) -> datetime:
        """Naive timestamps are taken as UTC; aware ones are converted."""
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)

    @field_serializer("amount", when_used="json")
    def serialize_amount(self, v: Optional[Decimal]) -> Optional[float]:
        """Serialize Decimal to float for JSON compatibility."""
        if v is None:
            return None
        return float(v)
