"""Helpers shared by the application handlers.

Everything here operates on an open unit of work; none of it commits.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Callable

from ofe.domain.exceptions import NotFoundError, PermissionDeniedError
from ofe.domain.model.actor import Actor, ActorRole
from ofe.domain.model.asset import Asset
from ofe.domain.model.order import Order
from ofe.domain.model.platform import PlatformConfig
from ofe.domain.repository.unit_of_work import UnitOfWork
from ofe.domain.service.availability_service import AvailabilityService
from ofe.domain.service.feasibility_checker import platform_zone
from ofe.domain.service.pricing_calculator import PricingCalculator
from ofe.domain.service.transport_rate_resolver import RegionResolver

Clock = Callable[[], datetime]

STAFF_ROLES = (ActorRole.ADMIN, ActorRole.LOGISTICS)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def require_role(actor: Actor, roles: tuple[ActorRole, ...], action: str) -> None:
    if actor.role not in roles:
        raise PermissionDeniedError(f"{actor.role.value} users cannot {action}")


def get_order(uow: UnitOfWork, order_id: str, actor: Actor) -> Order:
    """Load an order visible to *actor*; other tenants' orders do not exist."""
    order = uow.orders.get_by_id(order_id)
    if order is None or order.deleted_at is not None or order.platform_id != actor.platform_id:
        raise NotFoundError(f"Order {order_id} not found")
    if actor.role == ActorRole.CLIENT and order.company_id != actor.company_id:
        raise NotFoundError(f"Order {order_id} not found")
    return order


def get_asset(uow: UnitOfWork, asset_id: str, platform_id: str) -> Asset:
    asset = uow.assets.get_by_id(asset_id)
    if asset is None or asset.deleted_at is not None or asset.platform_id != platform_id:
        raise NotFoundError(f"Asset {asset_id} not found")
    return asset


def get_platform_config(uow: UnitOfWork, platform_id: str) -> PlatformConfig:
    config = uow.platforms.get_config(platform_id)
    if config is None:
        raise NotFoundError("Platform not found")
    return config


def platform_today(uow: UnitOfWork, platform_id: str, now: datetime) -> date:
    """Calendar date of *now* in the platform's timezone."""
    config = get_platform_config(uow, platform_id)
    return now.astimezone(platform_zone(config.feasibility)).date()


def pricing_calculator(uow: UnitOfWork) -> PricingCalculator:
    return PricingCalculator(uow.pricing_configs, uow.transport_rates, RegionResolver(uow.cities))


def availability_service(uow: UnitOfWork) -> AvailabilityService:
    return AvailabilityService(uow.assets, uow.bookings, uow.self_bookings, uow.orders)


def recalculate_pricing(
    uow: UnitOfWork,
    order: Order,
    calculated_by: str,
    at: datetime,
    margin_override: Decimal | None = None,
    override_reason: str | None = None,
    vehicle_change_reason: str | None = None,
) -> None:
    """Recompute and store full pricing from the current ledger."""
    config = get_platform_config(uow, order.platform_id)
    breakdown = pricing_calculator(uow).full(
        order,
        uow.line_items.list_for_order(order.id),
        config.default_margin_percent,
        calculated_by,
        at,
        margin_override=margin_override,
        override_reason=override_reason,
        vehicle_change_reason=vehicle_change_reason,
    )
    order.set_pricing(breakdown)
