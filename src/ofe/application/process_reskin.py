"""Application service: Process Reskin Request use case.

Turns a client's rebrand flag on an order item into a tracked reskin
request and charges the fabrication cost as a custom RESKIN line item.
"""

from __future__ import annotations

import logging
from uuid import uuid4

from ofe.application.add_line_item import new_custom_line_item
from ofe.application.common import (
    STAFF_ROLES,
    Clock,
    get_order,
    recalculate_pricing,
    require_role,
    utc_now,
)
from ofe.application.dto import LineItemDTO, ReskinDTO, line_item_to_dto, reskin_to_dto
from ofe.domain.exceptions import ConflictError, ValidationError
from ofe.domain.model.actor import Actor
from ofe.domain.model.line_item import LineItemCategory
from ofe.domain.model.reskin import ReskinRequest
from ofe.domain.model.value_objects import Money
from ofe.domain.repository.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class ProcessReskinHandler:

    def __init__(self, uow: UnitOfWork, clock: Clock = utc_now) -> None:
        self._uow = uow
        self._clock = clock

    def handle(
        self,
        actor: Actor,
        order_id: str,
        order_item_id: str,
        cost: Money,
        admin_notes: str | None = None,
    ) -> tuple[ReskinDTO, LineItemDTO]:
        require_role(actor, STAFF_ROLES, "process reskin requests")
        now = self._clock()

        with self._uow as uow:
            order = get_order(uow, order_id, actor)
            item = order.find_item(order_item_id)
            if not item.is_reskin_request:
                raise ValidationError("Order item is not a reskin request")
            if uow.reskins.get_by_order_item(item.id) is not None:
                raise ConflictError("Reskin request already processed for this order item")

            reskin = ReskinRequest(
                id=str(uuid4()),
                platform_id=order.platform_id,
                order_id=order.id,
                order_item_id=item.id,
                original_asset_id=item.asset_id,
                original_asset_name=item.asset_name,
                client_notes=item.reskin_notes or "",
                created_at=now,
                target_brand_id=item.reskin_target_brand_id,
                target_brand_custom=item.reskin_target_brand_custom,
                admin_notes=admin_notes,
            )
            uow.reskins.save(reskin)

            line_item = new_custom_line_item(
                uow,
                order,
                f"{item.asset_name} Rebrand ({reskin.target_brand_label})",
                LineItemCategory.RESKIN,
                actor.id,
                now,
                total=cost,
                notes=admin_notes,
                reskin_request_id=reskin.id,
            )
            recalculate_pricing(uow, order, actor.id, now)
            uow.orders.save(order)
            uow.commit()

        logger.info(
            "Reskin %s opened for %s on order %s (%s)",
            reskin.id, item.asset_name, order.order_code, line_item.line_item_code,
        )
        return reskin_to_dto(reskin), line_item_to_dto(line_item)
