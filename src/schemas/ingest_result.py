# src/schemas/ingest_result.py
"""
Output models of an ingest call.

IngestResult is what the orchestrator hands back to its caller: the pruned
per-source wide tables, the flat event list, the per-order timelines and one
financial summary per order.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer

from src.schemas.order_event import OrderBranch, TimelineEvent


class SalesChannel(str, Enum):
    """Marketplace or storefront an order was placed through."""

    AMAZON_IN = "amazon_in"
    FLIPKART = "flipkart"
    POSHACE = "poshace"
    WEBSITE = "website"
    OTHER = "other"


class OrderClass(str, Enum):
    B2B = "b2b"
    B2C = "b2c"


class SalesSource(BaseModel):
    """Normalized sales-channel provenance of an order."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    channel: SalesChannel
    order_class: Optional[OrderClass] = Field(default=None, alias="orderClass")


class WideTable(BaseModel):
    """
    Denormalized projection of one source bucket.

    Only columns with at least one non-empty value survive, and a column whose
    values repeat an earlier column row-for-row is dropped.
    """

    columns: List[str] = Field(default_factory=list)
    rows: List[Dict[str, Any]] = Field(default_factory=list)
    # Dropped duplicate column -> retained column holding identical values.
    duplicates: Dict[str, str] = Field(default_factory=dict, exclude=True)

    def __len__(self) -> int:
        return len(self.rows)

    def expanded_rows(self) -> List[Dict[str, Any]]:
        """
        Rows with duplicate columns restored under their original names.

        Extractors read source-specific column names; a column dropped as a
        duplicate is still addressable here through the column it duplicated.
        """
        if not self.duplicates:
            return self.rows
        expanded = []
        for row in self.rows:
            record = dict(row)
            for dropped, kept in self.duplicates.items():
                record[dropped] = row.get(kept)
            expanded.append(record)
        return expanded

    def to_dataframe(self):
        """Convert the table to a pandas DataFrame in column order."""
        import pandas as pd

        return pd.DataFrame(self.rows, columns=self.columns)


class OrderSummary(BaseModel):
    """Per-order rollup derived from its timeline and branch."""

    model_config = ConfigDict(populate_by_name=True)

    order_id: str = Field(alias="orderId")
    first_seen: datetime = Field(alias="firstSeen")
    last_seen: datetime = Field(alias="lastSeen")
    branch: OrderBranch
    paid_to_date: Decimal = Field(alias="paidToDate")
    refunded_to_date: Decimal = Field(alias="refundedToDate")
    delta: Decimal
    flags: List[str] = Field(default_factory=list)
    source: Optional[SalesSource] = None

    @field_serializer("paid_to_date", "refunded_to_date", "delta", when_used="json")
    def serialize_decimal(self, v: Decimal) -> float:
        """Serialize Decimal to float for JSON compatibility."""
        return float(v)


class IngestTables(BaseModel):
    """The six per-source wide tables of one ingest call."""

    model_config = ConfigDict(populate_by_name=True)

    orders: WideTable = Field(default_factory=WideTable)
    transactions: WideTable = Field(default_factory=WideTable)
    purchases: WideTable = Field(default_factory=WideTable)
    intl_shipments: WideTable = Field(default_factory=WideTable, alias="intlShipments")
    nat_shipments: WideTable = Field(default_factory=WideTable, alias="natShipments")
    cancellations: WideTable = Field(default_factory=WideTable)


class IngestResult(BaseModel):
    """Consolidated output of one ingest call."""

    tables: IngestTables = Field(default_factory=IngestTables)
    events: List[TimelineEvent] = Field(default_factory=list)
    timeline: Dict[str, List[TimelineEvent]] = Field(default_factory=dict)
    summaries: List[OrderSummary] = Field(default_factory=list)

    def get_summary(self, order_id: str) -> Optional[OrderSummary]:
        for summary in self.summaries:
            if summary.order_id == order_id:
                return summary
        return None

    def summaries_dataframe(self):
        """
        Flatten order summaries into a pandas DataFrame.

        One row per order with the branch and source channel flattened to
        their string values, for dashboards and reconciliation exports.
        """
        import pandas as pd

        rows = []
        for summary in self.summaries:
            rows.append(
                {
                    "order_id": summary.order_id,
                    "first_seen": summary.first_seen,
                    "last_seen": summary.last_seen,
                    "branch": summary.branch.value,
                    "paid_to_date": float(summary.paid_to_date),
                    "refunded_to_date": float(summary.refunded_to_date),
                    "delta": float(summary.delta),
                    "flags": ", ".join(summary.flags),
                    "channel": summary.source.channel.value if summary.source else None,
                    "order_class": (
                        summary.source.order_class.value
                        if summary.source and summary.source.order_class
                        else None
                    ),
                }
            )

        return pd.DataFrame(
            rows,
            columns=[
                "order_id",
                "first_seen",
                "last_seen",
                "branch",
                "paid_to_date",
                "refunded_to_date",
                "delta",
                "flags",
                "channel",
                "order_class",
            ],
        )
