"""Application service: Void Line Item use case.

Voiding is a soft delete: the row stays for the audit trail and simply
stops counting toward totals.
"""

from __future__ import annotations

import logging

from ofe.application.add_line_item import assert_line_items_editable
from ofe.application.common import (
    STAFF_ROLES,
    Clock,
    get_order,
    recalculate_pricing,
    require_role,
    utc_now,
)
from ofe.application.dto import LineItemDTO, line_item_to_dto
from ofe.domain.exceptions import NotFoundError
from ofe.domain.model.actor import Actor
from ofe.domain.repository.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class VoidLineItemHandler:

    def __init__(self, uow: UnitOfWork, clock: Clock = utc_now) -> None:
        self._uow = uow
        self._clock = clock

    def handle(self, actor: Actor, line_item_id: str, reason: str) -> LineItemDTO:
        require_role(actor, STAFF_ROLES, "void line items")
        now = self._clock()

        with self._uow as uow:
            item = uow.line_items.get_by_id(line_item_id)
            if item is None or item.platform_id != actor.platform_id:
                raise NotFoundError(f"Line item {line_item_id} not found")
            order = get_order(uow, item.order_id, actor)
            assert_line_items_editable(order)

            item.void(reason, actor.id, now)
            uow.line_items.save(item)
            recalculate_pricing(uow, order, actor.id, now)
            uow.orders.save(order)
            uow.commit()

        logger.info("Line item %s voided: %s", item.line_item_code, item.void_reason)
        return line_item_to_dto(item)
