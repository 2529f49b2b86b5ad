"""Application service: List Line Items use case (query)."""

from __future__ import annotations

from ofe.application.common import get_order, get_platform_config
from ofe.application.dto import LineItemDTO, line_item_to_dto
from ofe.domain.model.actor import Actor
from ofe.domain.model.line_item import LineItemsTotals
from ofe.domain.repository.unit_of_work import UnitOfWork


class ListLineItemsHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(
        self,
        actor: Actor,
        order_id: str,
        include_voided: bool = True,
    ) -> tuple[list[LineItemDTO], LineItemsTotals]:
        with self._uow as uow:
            order = get_order(uow, order_id, actor)
            items = uow.line_items.list_for_order(order.id)
            totals = LineItemsTotals.of(items, get_platform_config(uow, order.platform_id).currency)
            if not include_voided:
                items = [i for i in items if not i.is_voided]
            return [line_item_to_dto(i) for i in items], totals
