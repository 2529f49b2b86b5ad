"""Application service: Inbound and Outbound Scan Progress queries.

Progress is always recomputed from the full list of scan events of one
direction; nothing is cached on the order.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from ofe.application.common import get_order
from ofe.application.dto import ScanProgressDTO, ScanProgressItemDTO
from ofe.domain.model.actor import Actor
from ofe.domain.model.order import Order
from ofe.domain.model.scan import ScanType, scanned_quantity
from ofe.domain.repository.unit_of_work import UnitOfWork


def percent(done: int, total: int) -> int:
    if total <= 0:
        return 100
    return int((Decimal(done) * 100 / Decimal(total)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def compute_scan_progress(uow: UnitOfWork, order: Order, scan_type: ScanType) -> ScanProgressDTO:
    events = uow.scans.list_for_order(order.id, scan_type)
    items = []
    for item in order.items:
        scanned = scanned_quantity(events, item.asset_id, scan_type)
        items.append(
            ScanProgressItemDTO(
                asset_id=item.asset_id,
                asset_name=item.asset_name,
                required_quantity=item.quantity,
                scanned_quantity=scanned,
                is_complete=scanned >= item.quantity,
            )
        )
    items_scanned = sum(min(i.scanned_quantity, i.required_quantity) for i in items)
    total_items = sum(i.required_quantity for i in items)
    return ScanProgressDTO(
        order_id=order.id,
        order_status=order.order_status.value,
        items_scanned=items_scanned,
        total_items=total_items,
        percent_complete=percent(items_scanned, total_items),
        items=items,
    )


def incomplete_items(progress: ScanProgressDTO) -> str:
    """'Chair (3/10), Stage (0/1)' for every item still short, or ''."""
    return ", ".join(
        f"{i.asset_name} ({i.scanned_quantity}/{i.required_quantity})"
        for i in progress.items
        if not i.is_complete
    )


class InboundProgressHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, actor: Actor, order_id: str) -> ScanProgressDTO:
        with self._uow as uow:
            return compute_scan_progress(uow, get_order(uow, order_id, actor), ScanType.INBOUND)


class OutboundProgressHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, actor: Actor, order_id: str) -> ScanProgressDTO:
        with self._uow as uow:
            return compute_scan_progress(uow, get_order(uow, order_id, actor), ScanType.OUTBOUND)
