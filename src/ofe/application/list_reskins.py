"""Application service: List Reskin Requests for an order (query)."""

from __future__ import annotations

from ofe.application.common import get_order
from ofe.application.dto import ReskinDTO, reskin_to_dto
from ofe.domain.model.actor import Actor
from ofe.domain.repository.unit_of_work import UnitOfWork


class ListReskinsHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, actor: Actor, order_id: str) -> list[ReskinDTO]:
        with self._uow as uow:
            order = get_order(uow, order_id, actor)
            return [reskin_to_dto(r) for r in uow.reskins.list_for_order(order.id)]
