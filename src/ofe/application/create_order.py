"""Application service: Submit Order use case.

Orchestrates the admission checks that span aggregates (asset lookup,
availability, maintenance feasibility), then lets the Order aggregate
validate its own invariants and stores it with an estimate.
"""

from __future__ import annotations

import logging
from uuid import uuid4

from ofe.application import notifications
from ofe.application.common import (
    Clock,
    availability_service,
    get_asset,
    get_platform_config,
    pricing_calculator,
    require_role,
    utc_now,
)
from ofe.application.dto import CreateOrderSpec, OrderDTO, order_to_dto
from ofe.application.notifications import NotificationDispatcher, NotificationEvent
from ofe.domain.exceptions import PermissionDeniedError, ValidationError
from ofe.domain.model.actor import Actor, ActorRole
from ofe.domain.model.asset import Asset, AssetStatus
from ofe.domain.model.order import Contact, Order, OrderItem, Venue, validate_event_dates
from ofe.domain.repository.unit_of_work import UnitOfWork
from ofe.domain.service.code_generators import next_order_code
from ofe.domain.service.feasibility_checker import FeasibilityChecker, needs_maintenance

logger = logging.getLogger(__name__)


class CreateOrderHandler:

    def __init__(
        self,
        uow: UnitOfWork,
        notifier: NotificationDispatcher | None = None,
        clock: Clock = utc_now,
    ) -> None:
        self._uow = uow
        self._notifier = notifier
        self._clock = clock

    def handle(self, actor: Actor, spec: CreateOrderSpec) -> OrderDTO:
        """Submit a new order.

        Steps:
        1. Resolve each requested asset (must exist, belong to the company
           and not be transformed).
        2. Check availability for every item; nothing is stored on failure.
        3. Check maintenance feasibility against the event start.
        4. Build the order with volume/weight snapshots and a fresh code.
        5. Store it in PRICING_REVIEW with an estimate.
        """
        require_role(
            actor, (ActorRole.CLIENT, ActorRole.ADMIN, ActorRole.LOGISTICS), "submit orders"
        )
        company_id = self._company_for(actor, spec)
        validate_event_dates(spec.event_start_date, spec.event_end_date)
        if not spec.items:
            raise ValidationError("Order must contain at least one item")
        now = self._clock()

        with self._uow as uow:
            assets: list[Asset] = []
            for item_spec in spec.items:
                if item_spec.quantity <= 0:
                    raise ValidationError("Item quantities must be positive")
                asset = get_asset(uow, item_spec.asset_id, actor.platform_id)
                if asset.company_id != company_id:
                    raise ValidationError(f"Asset '{asset.name}' does not belong to this company")
                if asset.status == AssetStatus.TRANSFORMED:
                    raise ValidationError(
                        f"Asset '{asset.name}' has been transformed and can no longer be ordered"
                    )
                assets.append(asset)

            availability_service(uow).check(
                [(asset, s.quantity) for asset, s in zip(assets, spec.items)],
                spec.event_start_date,
                spec.event_end_date,
            )

            feasibility = FeasibilityChecker(uow.assets, uow.platforms).check(
                actor.platform_id,
                [(s.asset_id, s.maintenance_decision) for s in spec.items],
                spec.event_start_date,
                now,
            )
            if not feasibility.feasible:
                logger.warning(
                    "Order for %s rejected: %d asset(s) cannot be refurbished in time",
                    company_id, len(feasibility.issues),
                )
                raise ValidationError(" ".join(issue.message for issue in feasibility.issues))

            items = [
                OrderItem(
                    id=str(uuid4()),
                    asset_id=asset.id,
                    asset_name=asset.name,
                    quantity=s.quantity,
                    volume_per_unit=asset.volume_per_unit,
                    weight_per_unit=asset.weight_per_unit,
                    from_collection_id=s.from_collection_id,
                    is_reskin_request=s.is_reskin_request,
                    reskin_target_brand_id=s.reskin_target_brand_id if s.is_reskin_request else None,
                    reskin_target_brand_custom=(
                        s.reskin_target_brand_custom if s.is_reskin_request else None
                    ),
                    reskin_notes=s.reskin_notes if s.is_reskin_request else None,
                    maintenance_decision=s.maintenance_decision,
                    refurb_days_snapshot=(
                        asset.refurb_days_estimate
                        if needs_maintenance(asset, s.maintenance_decision)
                        else None
                    ),
                )
                for asset, s in zip(assets, spec.items)
            ]

            order = Order.create(
                order_id=str(uuid4()),
                platform_id=actor.platform_id,
                order_code=next_order_code(uow.orders, now.date()),
                company_id=company_id,
                requester_id=actor.id,
                contact=Contact(spec.contact_name, spec.contact_email, spec.contact_phone),
                event_start_date=spec.event_start_date,
                event_end_date=spec.event_end_date,
                venue=Venue(
                    name=spec.venue_name,
                    city_id=spec.venue_city_id,
                    city_name=spec.venue_city_name,
                    address=spec.venue_address,
                ),
                items=items,
                created_at=now,
                trip_type=spec.trip_type,
                brand_id=spec.brand_id,
            )

            platform = get_platform_config(uow, actor.platform_id)
            order.set_pricing(
                pricing_calculator(uow).estimate(
                    platform_id=order.platform_id,
                    company_id=company_id,
                    volume=order.total_volume,
                    city_id=order.venue.city_id,
                    city_name=order.venue.city_name,
                    trip_type=order.trip_type,
                    margin_percent=platform.default_margin_percent,
                    calculated_by=actor.id,
                    at=now,
                )
            )
            uow.orders.save(order)
            uow.commit()

        logger.info("Order %s submitted by %s with %d item(s)", order.order_code, actor.id, len(items))
        notifications.publish(
            self._notifier,
            [
                NotificationEvent(
                    notifications.ORDER_SUBMITTED,
                    "ORDER",
                    order.id,
                    order.platform_id,
                    {"order_code": order.order_code, "company_id": company_id},
                )
            ],
        )
        return order_to_dto(order)

    @staticmethod
    def _company_for(actor: Actor, spec: CreateOrderSpec) -> str:
        if actor.role == ActorRole.CLIENT:
            if spec.company_id is not None and spec.company_id != actor.company_id:
                raise PermissionDeniedError("Clients can only submit orders for their own company")
            if actor.company_id is None:
                raise PermissionDeniedError("Client user is not linked to a company")
            return actor.company_id
        if not spec.company_id:
            raise ValidationError("Company is required")
        return spec.company_id
