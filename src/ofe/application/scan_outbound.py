"""Application service: Outbound Scan use case (assets leaving the warehouse)."""

from __future__ import annotations

import logging
from uuid import uuid4

from ofe.application.common import STAFF_ROLES, Clock, get_order, require_role, utc_now
from ofe.application.dto import AssetDTO, asset_to_dto
from ofe.application.scan_inbound import resolve_scanned_asset, scan_quantity
from ofe.domain.exceptions import ConflictError, InvalidStateError
from ofe.domain.model.actor import Actor
from ofe.domain.model.order import OrderStatus
from ofe.domain.model.scan import ScanEvent, ScanType, scanned_quantity
from ofe.domain.repository.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)

OUTBOUND_SCAN_STATUSES = frozenset({OrderStatus.IN_PREPARATION, OrderStatus.READY_FOR_DELIVERY})


class OutboundScanHandler:

    def __init__(self, uow: UnitOfWork, clock: Clock = utc_now) -> None:
        self._uow = uow
        self._clock = clock

    def handle(
        self,
        actor: Actor,
        order_id: str,
        qr_code: str,
        quantity: int | None = None,
        notes: str | None = None,
    ) -> AssetDTO:
        require_role(actor, STAFF_ROLES, "scan assets")
        now = self._clock()

        with self._uow as uow:
            order = get_order(uow, order_id, actor)
            if order.order_status not in OUTBOUND_SCAN_STATUSES:
                raise InvalidStateError(
                    f"Outbound scanning is not allowed while order is {order.order_status.value}"
                )
            asset, item = resolve_scanned_asset(uow, order, qr_code)
            qty = scan_quantity(asset, quantity)

            events = uow.scans.list_for_order(order.id, ScanType.OUTBOUND)
            already = scanned_quantity(events, asset.id, ScanType.OUTBOUND)
            if already + qty > item.quantity:
                raise ConflictError(
                    f"Cannot scan {qty} more of '{asset.name}': "
                    f"{already} of {item.quantity} already scanned out"
                )

            uow.scans.add(
                ScanEvent(
                    id=str(uuid4()),
                    order_id=order.id,
                    asset_id=asset.id,
                    scan_type=ScanType.OUTBOUND,
                    quantity=qty,
                    condition=asset.condition,
                    scanned_by=actor.id,
                    scanned_at=now,
                    notes=notes,
                )
            )
            asset.mark_scanned(actor.id, now)
            asset.dispatch(qty)
            uow.assets.save(asset)
            uow.commit()

        logger.info("Outbound scan on %s: %d x %s", order.order_code, qty, asset.name)
        return asset_to_dto(asset)
