"""Application service: Add Line Item use cases (catalog and custom).

Line items may only be added while the order is under pricing review.
Every addition recomputes the order's full pricing.
"""

from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal
from uuid import uuid4

from ofe.application.common import (
    STAFF_ROLES,
    Clock,
    get_order,
    recalculate_pricing,
    require_role,
    utc_now,
)
from ofe.application.dto import LineItemDTO, line_item_to_dto
from ofe.domain.exceptions import InvalidStateError, NotFoundError, ValidationError
from ofe.domain.model.actor import Actor
from ofe.domain.model.line_item import (
    BillingMode,
    LineItemCategory,
    LineItemType,
    OrderLineItem,
)
from ofe.domain.model.order import Order
from ofe.domain.model.value_objects import Money
from ofe.domain.repository.unit_of_work import UnitOfWork
from ofe.domain.service.code_generators import next_line_item_code

logger = logging.getLogger(__name__)


def assert_line_items_editable(order: Order) -> None:
    if not order.line_items_editable:
        raise InvalidStateError(
            f"Line items cannot be modified while order is {order.order_status.value}"
        )


def new_custom_line_item(
    uow: UnitOfWork,
    order: Order,
    description: str,
    category: LineItemCategory,
    added_by: str,
    at: datetime,
    total: Money | None = None,
    quantity: Decimal | None = None,
    unit: str | None = None,
    unit_rate: Money | None = None,
    notes: str | None = None,
    billing_mode: BillingMode = BillingMode.BILLABLE,
    reskin_request_id: str | None = None,
) -> OrderLineItem:
    """Build and save a custom line item without the review-status guard."""
    if not description or not description.strip():
        raise ValidationError("Line item description is required")
    if quantity is not None and quantity <= 0:
        raise ValidationError("Line item quantity must be positive")
    if total is None:
        if quantity is None or unit_rate is None:
            raise ValidationError("Custom line items need a total, or a quantity and unit rate")
        total = unit_rate * quantity

    item = OrderLineItem(
        id=str(uuid4()),
        platform_id=order.platform_id,
        order_id=order.id,
        line_item_code=next_line_item_code(uow.line_items, order.platform_id),
        line_item_type=LineItemType.CUSTOM,
        category=category,
        description=description.strip(),
        total=total,
        added_by=added_by,
        added_at=at,
        quantity=quantity,
        unit=unit,
        unit_rate=unit_rate,
        reskin_request_id=reskin_request_id,
        billing_mode=billing_mode,
        notes=notes,
    )
    uow.line_items.save(item)
    return item


class AddCatalogLineItemHandler:

    def __init__(self, uow: UnitOfWork, clock: Clock = utc_now) -> None:
        self._uow = uow
        self._clock = clock

    def handle(
        self,
        actor: Actor,
        order_id: str,
        service_type_id: str,
        quantity: Decimal,
        unit_rate: Money | None = None,
        notes: str | None = None,
        billing_mode: BillingMode = BillingMode.BILLABLE,
    ) -> LineItemDTO:
        require_role(actor, STAFF_ROLES, "add line items")
        if quantity <= 0:
            raise ValidationError("Line item quantity must be positive")
        now = self._clock()

        with self._uow as uow:
            order = get_order(uow, order_id, actor)
            assert_line_items_editable(order)

            service = uow.service_types.get_by_id(service_type_id)
            if service is None or service.platform_id != order.platform_id or not service.is_active:
                raise NotFoundError(f"Service type {service_type_id} not found")
            rate = unit_rate if unit_rate is not None else service.default_rate

            item = OrderLineItem(
                id=str(uuid4()),
                platform_id=order.platform_id,
                order_id=order.id,
                line_item_code=next_line_item_code(uow.line_items, order.platform_id),
                line_item_type=LineItemType.CATALOG,
                category=service.category,
                description=service.name,
                total=rate * quantity,
                added_by=actor.id,
                added_at=now,
                quantity=quantity,
                unit=service.unit,
                unit_rate=rate,
                service_type_id=service.id,
                billing_mode=billing_mode,
                notes=notes,
            )
            uow.line_items.save(item)
            recalculate_pricing(uow, order, actor.id, now)
            uow.orders.save(order)
            uow.commit()

        logger.info("Line item %s added to order %s", item.line_item_code, order.order_code)
        return line_item_to_dto(item)


class AddCustomLineItemHandler:

    def __init__(self, uow: UnitOfWork, clock: Clock = utc_now) -> None:
        self._uow = uow
        self._clock = clock

    def handle(
        self,
        actor: Actor,
        order_id: str,
        description: str,
        category: LineItemCategory,
        total: Money | None = None,
        quantity: Decimal | None = None,
        unit: str | None = None,
        unit_rate: Money | None = None,
        notes: str | None = None,
        billing_mode: BillingMode = BillingMode.BILLABLE,
    ) -> LineItemDTO:
        require_role(actor, STAFF_ROLES, "add line items")
        now = self._clock()

        with self._uow as uow:
            order = get_order(uow, order_id, actor)
            assert_line_items_editable(order)
            item = new_custom_line_item(
                uow,
                order,
                description,
                category,
                actor.id,
                now,
                total=total,
                quantity=quantity,
                unit=unit,
                unit_rate=unit_rate,
                notes=notes,
                billing_mode=billing_mode,
            )
            recalculate_pricing(uow, order, actor.id, now)
            uow.orders.save(order)
            uow.commit()

        logger.info("Line item %s added to order %s", item.line_item_code, order.order_code)
        return line_item_to_dto(item)
