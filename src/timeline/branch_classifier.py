"""
Order branch classification.

Maps one order's timeline to exactly one OrderBranch. The rules form an
ordered decision table evaluated top to bottom; the first predicate that
holds decides the branch. Rules may overlap, so their order is part of the
contract (rule 4 can never fire behind rule 3; the order is kept as is).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional, Sequence

from src.schemas.order_event import EventType, OrderBranch, TimelineEvent

logger = logging.getLogger(__name__)

DEFAULT_RETURN_WINDOW_DAYS = 30


@dataclass(frozen=True)
class BranchFacts:
    """Most recent occurrence of each significant event type, plus the clock."""

    delivered: Optional[TimelineEvent]
    payment: Optional[TimelineEvent]
    refund: Optional[TimelineEvent]
    cancelled_by_vendor: Optional[TimelineEvent]
    cancelled_by_customer: Optional[TimelineEvent]
    as_of: datetime
    return_window_days: int

    @property
    def cancelled(self) -> bool:
        return (
            self.cancelled_by_vendor is not None
            or self.cancelled_by_customer is not None
        )

    @property
    def days_since_delivery(self) -> Optional[int]:
        if self.delivered is None:
            return None
        return (self.as_of - self.delivered.at).days


@dataclass(frozen=True)
class BranchRule:
    name: str
    predicate: Callable[[BranchFacts], bool]
    outcome: OrderBranch


@dataclass(frozen=True)
class BranchDecision:
    """Classification outcome and the rule that produced it."""

    branch: OrderBranch
    rule: str


def _return_window_lapsed(f: BranchFacts) -> bool:
    days = f.days_since_delivery
    return days is not None and days > f.return_window_days


BRANCH_RULES: Sequence[BranchRule] = (
    BranchRule(
        "refund_after_delivery",
        lambda f: f.delivered is not None
        and f.refund is not None
        and f.refund.at > f.delivered.at,
        OrderBranch.CANCELLED_AFTER_DELIVERY_REFUNDED,
    ),
    BranchRule(
        "delivered_unpaid",
        lambda f: f.delivered is not None and f.payment is None,
        OrderBranch.AWAITING_PAYMENT,
    ),
    BranchRule(
        "delivered_paid",
        lambda f: f.delivered is not None
        and f.payment is not None
        and f.refund is None,
        OrderBranch.PAID,
    ),
    BranchRule(
        "return_window_lapsed",
        lambda f: f.delivered is not None
        and f.refund is None
        and f.payment is not None
        and _return_window_lapsed(f),
        OrderBranch.SEND_TO_FBA,
    ),
    BranchRule(
        "customer_cancelled_refunded",
        lambda f: f.delivered is None
        and f.cancelled_by_customer is not None
        and f.refund is not None,
        OrderBranch.CANCELLED_PRE_DELIVERY_REFUNDED,
    ),
    BranchRule(
        "cancelled_pending_refund",
        lambda f: f.delivered is None and f.cancelled and f.refund is None,
        OrderBranch.CANCELLED_PRE_DELIVERY_PENDING_REFUND,
    ),
    BranchRule(
        "delivered_cancelled_pending_refund",
        lambda f: f.delivered is not None and f.cancelled and f.refund is None,
        OrderBranch.CANCELLED_AFTER_DELIVERY_PENDING_REFUND,
    ),
    BranchRule(
        "delivered_refunded",
        lambda f: f.delivered is not None and f.refund is not None,
        OrderBranch.DELIVERED_THEN_REFUNDED,
    ),
    BranchRule(
        "paid",
        lambda f: f.payment is not None,
        OrderBranch.PAID,
    ),
    BranchRule(
        "default",
        lambda f: True,
        OrderBranch.AWAITING_PAYMENT,
    ),
)


def latest_of(
    events: Sequence[TimelineEvent], event_type: EventType
) -> Optional[TimelineEvent]:
    """Most recent event of ``event_type``; the later one wins on equal times."""
    latest: Optional[TimelineEvent] = None
    for event in events:
        if event.type is event_type and (latest is None or event.at >= latest.at):
            latest = event
    return latest


def collect_facts(
    events: Sequence[TimelineEvent],
    *,
    return_window_days: int = DEFAULT_RETURN_WINDOW_DAYS,
    as_of: Optional[datetime] = None,
) -> BranchFacts:
    if as_of is None:
        as_of = datetime.now(timezone.utc)
    elif as_of.tzinfo is None:
        as_of = as_of.replace(tzinfo=timezone.utc)

    return BranchFacts(
        delivered=latest_of(events, EventType.DELIVERED),
        payment=latest_of(events, EventType.PAYMENT_RELEASED),
        refund=latest_of(events, EventType.REFUND_ISSUED),
        cancelled_by_vendor=latest_of(events, EventType.CANCELLED_BY_VENDOR),
        cancelled_by_customer=latest_of(events, EventType.CANCELLED_BY_CUSTOMER),
        as_of=as_of,
        return_window_days=return_window_days,
    )


def decide_branch(
    events: Sequence[TimelineEvent],
    *,
    return_window_days: int = DEFAULT_RETURN_WINDOW_DAYS,
    as_of: Optional[datetime] = None,
) -> BranchDecision:
    """
    Evaluate the rule table against ``events`` and report the matching rule.

    Args:
        events: One order's events (any order; the latest per type is used).
        return_window_days: Days after delivery before the return window lapses.
        as_of: Clock anchor for the return-window rule; wall-clock now if None.
    """
    facts = collect_facts(
        events, return_window_days=return_window_days, as_of=as_of
    )
    for rule in BRANCH_RULES:
        if rule.predicate(facts):
            return BranchDecision(branch=rule.outcome, rule=rule.name)

    # Unreachable: the last rule always holds.
    raise AssertionError("branch rule table is not exhaustive")


def classify_branch(
    events: Sequence[TimelineEvent],
    *,
    return_window_days: int = DEFAULT_RETURN_WINDOW_DAYS,
    as_of: Optional[datetime] = None,
) -> OrderBranch:
    """Classify one order's timeline into exactly one OrderBranch."""
    return decide_branch(
        events, return_window_days=return_window_days, as_of=as_of
    ).branch
