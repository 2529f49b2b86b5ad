"""Application service: Inbound Scan use case.

Each physical scan of a returning asset is recorded as an immutable event,
updates the asset's condition and shelf count, and returns the order's
recomputed inbound progress.  Scans are not de-duplicated: a repeated
submission counts again, bounded by the quantity on the order.
"""

from __future__ import annotations

import logging
from uuid import uuid4

from ofe.application.common import STAFF_ROLES, Clock, get_order, require_role, utc_now
from ofe.application.dto import AssetDTO, ScanProgressDTO, asset_to_dto
from ofe.application.scan_progress import compute_scan_progress
from ofe.domain.exceptions import ConflictError, InvalidStateError, NotFoundError, ValidationError
from ofe.domain.model.actor import Actor
from ofe.domain.model.asset import Asset, AssetCondition, AssetStatus, TrackingMethod
from ofe.domain.model.order import Order, OrderItem, OrderStatus
from ofe.domain.model.scan import DiscrepancyReason, ScanEvent, ScanType, scanned_quantity
from ofe.domain.repository.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)

INBOUND_SCAN_STATUSES = frozenset({OrderStatus.AWAITING_RETURN, OrderStatus.RETURN_IN_TRANSIT})


def scan_quantity(asset: Asset, quantity: int | None) -> int:
    """INDIVIDUAL assets always scan one unit; BATCH scans must say how many."""
    if asset.tracking_method == TrackingMethod.INDIVIDUAL:
        if quantity not in (None, 1):
            raise ValidationError("Individually tracked assets are scanned one unit at a time")
        return 1
    if quantity is None or quantity < 1:
        raise ValidationError("Quantity is required for batch-tracked assets")
    return quantity


def resolve_scanned_asset(uow: UnitOfWork, order: Order, qr_code: str) -> tuple[Asset, OrderItem]:
    asset = uow.assets.get_by_qr_code(qr_code)
    if asset is None or asset.platform_id != order.platform_id:
        raise NotFoundError(f"No asset with QR code '{qr_code}'")
    if asset.status == AssetStatus.TRANSFORMED:
        replacement = uow.assets.get_by_id(asset.transformed_to) if asset.transformed_to else None
        hint = f"; scan '{replacement.qr_code}' instead" if replacement is not None else ""
        raise ValidationError(f"Asset '{asset.name}' has been reskinned{hint}")
    item = order.item_for_asset(asset.id)
    if item is None:
        raise ValidationError(f"Asset '{asset.name}' is not part of order {order.order_code}")
    return asset, item


class InboundScanHandler:

    def __init__(self, uow: UnitOfWork, clock: Clock = utc_now) -> None:
        self._uow = uow
        self._clock = clock

    def handle(
        self,
        actor: Actor,
        order_id: str,
        qr_code: str,
        condition: AssetCondition,
        quantity: int | None = None,
        notes: str | None = None,
        photos: list[str] | None = None,
        discrepancy_reason: DiscrepancyReason | None = None,
        refurb_days_estimate: int | None = None,
    ) -> tuple[AssetDTO, ScanProgressDTO]:
        require_role(actor, STAFF_ROLES, "scan assets")
        if refurb_days_estimate is not None and refurb_days_estimate < 0:
            raise ValidationError("Refurbishment estimate cannot be negative")
        now = self._clock()

        with self._uow as uow:
            order = get_order(uow, order_id, actor)
            if order.order_status not in INBOUND_SCAN_STATUSES:
                raise InvalidStateError(
                    f"Inbound scanning is not allowed while order is {order.order_status.value}"
                )
            asset, item = resolve_scanned_asset(uow, order, qr_code)
            qty = scan_quantity(asset, quantity)

            events = uow.scans.list_for_order(order.id, ScanType.INBOUND)
            already = scanned_quantity(events, asset.id, ScanType.INBOUND)
            if already + qty > item.quantity:
                raise ConflictError(
                    f"Cannot scan {qty} more of '{asset.name}': "
                    f"{already} of {item.quantity} already scanned"
                )

            uow.scans.add(
                ScanEvent(
                    id=str(uuid4()),
                    order_id=order.id,
                    asset_id=asset.id,
                    scan_type=ScanType.INBOUND,
                    quantity=qty,
                    condition=condition,
                    scanned_by=actor.id,
                    scanned_at=now,
                    notes=notes,
                    discrepancy_reason=discrepancy_reason,
                    photos=tuple(photos or ()),
                )
            )

            if condition != asset.condition:
                asset.record_condition(
                    condition, actor.id, now, notes, refurb_days_estimate, photos
                )
            elif refurb_days_estimate is not None and condition != AssetCondition.GREEN:
                asset.refurb_days_estimate = refurb_days_estimate
            asset.mark_scanned(actor.id, now)
            asset.receive(qty)
            uow.assets.save(asset)

            progress = compute_scan_progress(uow, order, ScanType.INBOUND)
            uow.commit()

        logger.info(
            "Inbound scan on %s: %d x %s (%s), %d%% complete",
            order.order_code, qty, asset.name, condition.value, progress.percent_complete,
        )
        return asset_to_dto(asset), progress
