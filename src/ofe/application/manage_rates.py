"""Application services: maintain the rate tables pricing reads from.

Company-specific rows override the platform default row with the same key.
"""

from __future__ import annotations

import logging

from ofe.application.common import require_role
from ofe.domain.exceptions import ValidationError
from ofe.domain.model.actor import Actor, ActorRole
from ofe.domain.model.line_item import LineItemCategory
from ofe.domain.model.pricing import (
    City,
    PricingConfig,
    ServiceType,
    TransportRate,
    TripType,
    VehicleType,
)
from ofe.domain.model.value_objects import Money
from ofe.domain.repository.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)

_ADMIN_ONLY = (ActorRole.ADMIN,)


class SetWarehouseRateHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, actor: Actor, rate: Money, company_id: str | None = None) -> PricingConfig:
        require_role(actor, _ADMIN_ONLY, "change pricing configuration")
        config = PricingConfig(
            platform_id=actor.platform_id, warehouse_ops_rate=rate, company_id=company_id
        )
        with self._uow as uow:
            uow.pricing_configs.save(config)
            uow.commit()
        logger.info(
            "Warehouse ops rate for %s/%s set to %s",
            actor.platform_id, company_id or "default", rate,
        )
        return config


class SetTransportRateHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(
        self,
        actor: Actor,
        region: str,
        trip_type: TripType,
        vehicle_type: VehicleType,
        rate: Money,
        company_id: str | None = None,
    ) -> TransportRate:
        require_role(actor, _ADMIN_ONLY, "change transport rates")
        if not region or not region.strip():
            raise ValidationError("Region is required")
        transport_rate = TransportRate(
            platform_id=actor.platform_id,
            region=region.strip(),
            trip_type=trip_type,
            vehicle_type=vehicle_type,
            rate=rate,
            company_id=company_id,
        )
        with self._uow as uow:
            uow.transport_rates.save(transport_rate)
            uow.commit()
        logger.info(
            "Transport rate %s/%s/%s for %s set to %s",
            transport_rate.region, trip_type.value, vehicle_type.value,
            company_id or "default", rate,
        )
        return transport_rate


class AddCityHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, actor: Actor, city_id: str, name: str, region: str) -> City:
        require_role(actor, _ADMIN_ONLY, "manage cities")
        if not name.strip() or not region.strip():
            raise ValidationError("City name and region are required")
        city = City(id=city_id, platform_id=actor.platform_id, name=name.strip(), region=region.strip())
        with self._uow as uow:
            uow.cities.save(city)
            uow.commit()
        return city


class AddServiceTypeHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(
        self,
        actor: Actor,
        service_type_id: str,
        name: str,
        category: LineItemCategory,
        unit: str,
        default_rate: Money,
    ) -> ServiceType:
        require_role(actor, _ADMIN_ONLY, "manage service types")
        if not name.strip():
            raise ValidationError("Service type name is required")
        service_type = ServiceType(
            id=service_type_id,
            platform_id=actor.platform_id,
            name=name.strip(),
            category=category,
            unit=unit,
            default_rate=default_rate,
        )
        with self._uow as uow:
            uow.service_types.save(service_type)
            uow.commit()
        return service_type
