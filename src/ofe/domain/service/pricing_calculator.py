"""Domain service: hybrid order pricing.

Two formulas share the same building blocks:

* estimate (at submission): base operations + STANDARD transport, margin on
  that subtotal.
* full (during review): base operations + transport for the order's vehicle
  + catalog line items, margin on that subtotal, custom line items added
  after margin.

Intermediate figures keep full Decimal precision; each figure is rounded
(``ROUND_HALF_UP``) only as it is written into the breakdown.
"""

from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal

from ofe.domain.exceptions import NotFoundError, ValidationError
from ofe.domain.model.line_item import LineItemsTotals, OrderLineItem
from ofe.domain.model.order import Order
from ofe.domain.model.pricing import (
    BaseOperations,
    EstimateBreakdown,
    Margin,
    PricingBreakdown,
    TransportCharge,
    TripType,
    VehicleType,
)
from ofe.domain.model.value_objects import Money, round_money, round_volume
from ofe.domain.repository.pricing_repository import (
    PricingConfigRepository,
    TransportRateRepository,
)
from ofe.domain.service.pricing_config_resolver import resolve_warehouse_ops_rate
from ofe.domain.service.transport_rate_resolver import RegionResolver, lookup_transport_rate

logger = logging.getLogger(__name__)

MIN_REASON_LENGTH = 10


def require_reason(reason: str | None, what: str) -> str:
    """Return the stripped reason or raise if it is shorter than 10 characters."""
    stripped = (reason or "").strip()
    if len(stripped) < MIN_REASON_LENGTH:
        raise ValidationError(f"{what} must be at least {MIN_REASON_LENGTH} characters")
    return stripped


class PricingCalculator:

    def __init__(
        self,
        pricing_configs: PricingConfigRepository,
        transport_rates: TransportRateRepository,
        regions: RegionResolver,
    ) -> None:
        self._pricing_configs = pricing_configs
        self._transport_rates = transport_rates
        self._regions = regions

    # --- Estimate -------------------------------------------------------------

    def estimate(
        self,
        platform_id: str,
        company_id: str,
        volume: Decimal,
        city_id: str | None,
        city_name: str | None,
        trip_type: TripType,
        margin_percent: Decimal,
        calculated_by: str,
        at: datetime,
    ) -> EstimateBreakdown:
        ops_rate = resolve_warehouse_ops_rate(self._pricing_configs, platform_id, company_id)
        region = self._regions.resolve(city_id, city_name)
        rate = lookup_transport_rate(
            self._transport_rates, platform_id, company_id, region, trip_type, VehicleType.STANDARD
        )
        if rate is None:
            raise NotFoundError("Transport rate not found")

        base_total = ops_rate * volume
        subtotal = base_total + rate.rate
        margin_amount = subtotal.percent(margin_percent)
        total = subtotal + margin_amount

        return EstimateBreakdown(
            base_operations=_base_operations(volume, ops_rate, base_total),
            transport=TransportCharge(
                region=region,
                trip_type=trip_type,
                vehicle_type=VehicleType.STANDARD,
                system_rate=rate.rate.rounded(),
                final_rate=rate.rate.rounded(),
            ),
            logistics_subtotal=subtotal.rounded(),
            margin=Margin(percent=round_money(margin_percent), amount=margin_amount.rounded()),
            estimate_total=total.rounded(),
            calculated_at=at,
            calculated_by=calculated_by,
        )

    # --- Full pricing ---------------------------------------------------------

    def full(
        self,
        order: Order,
        line_items: list[OrderLineItem],
        default_margin_percent: Decimal,
        calculated_by: str,
        at: datetime,
        margin_override: Decimal | None = None,
        override_reason: str | None = None,
        vehicle_change_reason: str | None = None,
    ) -> PricingBreakdown:
        """Recompute the order's full pricing from current rates and ledger.

        A margin override already on the order's snapshot is carried forward
        unless a new one is supplied.  When the transport lookup comes back
        empty the previously stored ``final_rate`` is reused; with nothing
        stored the lookup failure is raised.
        """
        previous = order.pricing
        ops_rate = resolve_warehouse_ops_rate(
            self._pricing_configs, order.platform_id, order.company_id
        )
        region = self._regions.resolve(order.venue.city_id, order.venue.city_name)

        rate = lookup_transport_rate(
            self._transport_rates,
            order.platform_id,
            order.company_id,
            region,
            order.trip_type,
            order.vehicle_type,
        )
        if rate is not None:
            transport_rate = rate.rate
        elif previous is not None:
            logger.warning(
                "No transport rate for %s/%s/%s on order %s, keeping stored rate",
                region, order.trip_type.value, order.vehicle_type.value, order.order_code,
            )
            transport_rate = previous.transport.final_rate
        else:
            raise NotFoundError("Transport rate not found")

        margin = self._margin(previous, default_margin_percent, margin_override, override_reason)
        if vehicle_change_reason is None and previous is not None:
            vehicle_change_reason = previous.transport.vehicle_change_reason

        volume = order.total_volume
        totals = LineItemsTotals.of(line_items, ops_rate.currency)
        base_total = ops_rate * volume
        subtotal = base_total + transport_rate + totals.catalog_total
        margin_amount = subtotal.percent(margin.percent)
        final_total = subtotal + margin_amount + totals.custom_total

        return PricingBreakdown(
            base_operations=_base_operations(volume, ops_rate, base_total),
            transport=TransportCharge(
                region=region,
                trip_type=order.trip_type,
                vehicle_type=order.vehicle_type,
                system_rate=transport_rate.rounded(),
                final_rate=transport_rate.rounded(),
                vehicle_changed=order.vehicle_type != VehicleType.STANDARD,
                vehicle_change_reason=vehicle_change_reason,
            ),
            line_items=LineItemsTotals(
                catalog_total=totals.catalog_total.rounded(),
                custom_total=totals.custom_total.rounded(),
            ),
            logistics_subtotal=subtotal.rounded(),
            margin=Margin(
                percent=round_money(margin.percent),
                amount=margin_amount.rounded(),
                is_override=margin.is_override,
                override_reason=margin.override_reason,
            ),
            final_total=final_total.rounded(),
            calculated_at=at,
            calculated_by=calculated_by,
        )

    def require_transport_rate(
        self,
        order: Order,
        vehicle_type: VehicleType | None = None,
        trip_type: TripType | None = None,
    ) -> Money:
        """Rate for a prospective vehicle or trip type; raises when none is configured."""
        vehicle_type = vehicle_type or order.vehicle_type
        trip_type = trip_type or order.trip_type
        region = self._regions.resolve(order.venue.city_id, order.venue.city_name)
        rate = lookup_transport_rate(
            self._transport_rates,
            order.platform_id,
            order.company_id,
            region,
            trip_type,
            vehicle_type,
        )
        if rate is None:
            raise NotFoundError(
                f"Transport rate not found for {region} {trip_type.value} {vehicle_type.value}"
            )
        return rate.rate

    # --- Internal helpers -----------------------------------------------------

    @staticmethod
    def _margin(
        previous: EstimateBreakdown | PricingBreakdown | None,
        default_percent: Decimal,
        override: Decimal | None,
        override_reason: str | None,
    ) -> Margin:
        # Amount is filled in by the caller; only percent and provenance matter here.
        zero = Money.zero()
        if override is not None:
            if override < 0:
                raise ValidationError("Margin percent cannot be negative")
            reason = require_reason(override_reason, "Margin override reason")
            return Margin(percent=override, amount=zero, is_override=True, override_reason=reason)
        if previous is not None and previous.margin.is_override:
            return previous.margin
        return Margin(percent=default_percent, amount=zero)


def _base_operations(volume: Decimal, rate: Money, total: Money) -> BaseOperations:
    return BaseOperations(volume=round_volume(volume), rate=rate.rounded(), total=total.rounded())
