"""Application service: Show Order use case (query)."""

from __future__ import annotations

from ofe.application.common import get_order
from ofe.application.dto import OrderDTO, order_to_dto
from ofe.domain.model.actor import Actor
from ofe.domain.repository.unit_of_work import UnitOfWork


class ShowOrderHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, actor: Actor, order_id: str) -> OrderDTO:
        with self._uow as uow:
            return order_to_dto(get_order(uow, order_id, actor))
