"""Outbound notification port.

Handlers collect ``NotificationEvent``s while they work and publish them
only after the unit of work has committed.  Delivery is fire-and-forget: a
failing dispatcher is logged and never undoes or fails the business
operation.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

ORDER_SUBMITTED = "ORDER_SUBMITTED"
QUOTE_SENT = "QUOTE_SENT"
QUOTE_APPROVED = "QUOTE_APPROVED"
QUOTE_DECLINED = "QUOTE_DECLINED"
QUOTE_REVISED = "QUOTE_REVISED"
ORDER_STATUS_CHANGED = "ORDER_STATUS_CHANGED"
ORDER_CANCELLED = "ORDER_CANCELLED"
FABRICATION_COMPLETE = "FABRICATION_COMPLETE"


@dataclass(frozen=True)
class NotificationEvent:
    event_type: str
    entity_type: str
    entity_id: str
    platform_id: str
    payload: dict = field(default_factory=dict)


class NotificationDispatcher(ABC):

    @abstractmethod
    def dispatch(self, event: NotificationEvent) -> None:
        """Hand one event to the delivery channel."""


def publish(dispatcher: NotificationDispatcher | None, events: list[NotificationEvent]) -> None:
    if dispatcher is None:
        return
    for event in events:
        try:
            dispatcher.dispatch(event)
        except Exception:
            logger.exception(
                "Failed to dispatch %s for %s %s", event.event_type, event.entity_type, event.entity_id
            )
