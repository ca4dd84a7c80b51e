"""Group events by order and sort each group chronologically."""

from __future__ import annotations

from typing import Dict, Iterable, List

from src.schemas.order_event import TimelineEvent


def _chronological_key(event: TimelineEvent):
    # Ties on ``at`` are broken by source and type so the order of input
    # files never changes the timeline.
    return (event.at, event.source.value, event.type.value)


def build_timelines(events: Iterable[TimelineEvent]) -> Dict[str, List[TimelineEvent]]:
    """
    Build the orderId -> events map, each list ascending by ``at``.

    No events are dropped.
    """
    by_order: Dict[str, List[TimelineEvent]] = {}
    for event in events:
        by_order.setdefault(event.order_id, []).append(event)

    for order_events in by_order.values():
        order_events.sort(key=_chronological_key)

    return by_order
