"""Application service: Update Line Item use case."""

from __future__ import annotations

import logging
from decimal import Decimal

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
from ofe.domain.model.line_item import BillingMode
from ofe.domain.model.value_objects import Money
from ofe.domain.repository.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class UpdateLineItemHandler:

    def __init__(self, uow: UnitOfWork, clock: Clock = utc_now) -> None:
        self._uow = uow
        self._clock = clock

    def handle(
        self,
        actor: Actor,
        line_item_id: str,
        quantity: Decimal | None = None,
        unit_rate: Money | None = None,
        unit: str | None = None,
        total: Money | None = None,
        notes: str | None = None,
        billing_mode: BillingMode | None = None,
    ) -> LineItemDTO:
        require_role(actor, STAFF_ROLES, "edit line items")
        now = self._clock()

        with self._uow as uow:
            item = uow.line_items.get_by_id(line_item_id)
            if item is None or item.platform_id != actor.platform_id:
                raise NotFoundError(f"Line item {line_item_id} not found")
            order = get_order(uow, item.order_id, actor)
            assert_line_items_editable(order)

            item.update(
                quantity=quantity,
                unit_rate=unit_rate,
                unit=unit,
                total=total,
                notes=notes,
                billing_mode=billing_mode,
            )
            uow.line_items.save(item)
            recalculate_pricing(uow, order, actor.id, now)
            uow.orders.save(order)
            uow.commit()

        logger.info("Line item %s updated (total %s)", item.line_item_code, item.total)
        return line_item_to_dto(item)
