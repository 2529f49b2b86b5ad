"""JSON-document implementations of the rate-table repositories.

Rate rows are keyed by their natural key (platform, company, ...); the key
is stored alongside the row so saves replace the existing row.
"""

from __future__ import annotations

from ofe.domain.model.line_item import LineItemCategory
from ofe.domain.model.pricing import (
    City,
    PricingConfig,
    ServiceType,
    TransportRate,
    TripType,
    VehicleType,
)
from ofe.domain.repository.pricing_repository import (
    CityRepository,
    PricingConfigRepository,
    ServiceTypeRepository,
    TransportRateRepository,
)
from ofe.infrastructure.persistence.codec import money_from_raw, money_to_raw
from ofe.infrastructure.persistence.json_store import JsonTable


def _key(*parts) -> str:
    return "|".join("" if p is None else str(p) for p in parts)


class JsonPricingConfigRepository(JsonTable, PricingConfigRepository):
    table = "pricing_configs"

    def find(self, platform_id: str, company_id: str | None) -> PricingConfig | None:
        raw = self._find_raw("key", _key(platform_id, company_id))
        if raw is None or not raw.get("is_active", True):
            return None
        return PricingConfig(
            platform_id=raw["platform_id"],
            warehouse_ops_rate=money_from_raw(raw["warehouse_ops_rate"]),
            company_id=raw.get("company_id"),
            is_active=raw.get("is_active", True),
        )

    def save(self, config: PricingConfig) -> None:
        self._upsert(
            {
                "key": _key(config.platform_id, config.company_id),
                "platform_id": config.platform_id,
                "company_id": config.company_id,
                "warehouse_ops_rate": money_to_raw(config.warehouse_ops_rate),
                "is_active": config.is_active,
            },
            key="key",
        )


class JsonTransportRateRepository(JsonTable, TransportRateRepository):
    table = "transport_rates"

    def find(
        self,
        platform_id: str,
        company_id: str | None,
        region: str,
        trip_type: TripType,
        vehicle_type: VehicleType,
    ) -> TransportRate | None:
        raw = self._find_raw(
            "key", _key(platform_id, company_id, region, trip_type.value, vehicle_type.value)
        )
        if raw is None or not raw.get("is_active", True):
            return None
        return TransportRate(
            platform_id=raw["platform_id"],
            region=raw["region"],
            trip_type=TripType(raw["trip_type"]),
            vehicle_type=VehicleType(raw["vehicle_type"]),
            rate=money_from_raw(raw["rate"]),
            company_id=raw.get("company_id"),
            is_active=raw.get("is_active", True),
        )

    def save(self, rate: TransportRate) -> None:
        self._upsert(
            {
                "key": _key(
                    rate.platform_id,
                    rate.company_id,
                    rate.region,
                    rate.trip_type.value,
                    rate.vehicle_type.value,
                ),
                "platform_id": rate.platform_id,
                "company_id": rate.company_id,
                "region": rate.region,
                "trip_type": rate.trip_type.value,
                "vehicle_type": rate.vehicle_type.value,
                "rate": money_to_raw(rate.rate),
                "is_active": rate.is_active,
            },
            key="key",
        )


class JsonServiceTypeRepository(JsonTable, ServiceTypeRepository):
    table = "service_types"

    def get_by_id(self, service_type_id: str) -> ServiceType | None:
        raw = self._find_raw("id", service_type_id)
        if raw is None:
            return None
        return ServiceType(
            id=raw["id"],
            platform_id=raw["platform_id"],
            name=raw["name"],
            category=LineItemCategory(raw["category"]),
            unit=raw["unit"],
            default_rate=money_from_raw(raw["default_rate"]),
            is_active=raw.get("is_active", True),
        )

    def save(self, service_type: ServiceType) -> None:
        self._upsert(
            {
                "id": service_type.id,
                "platform_id": service_type.platform_id,
                "name": service_type.name,
                "category": service_type.category.value,
                "unit": service_type.unit,
                "default_rate": money_to_raw(service_type.default_rate),
                "is_active": service_type.is_active,
            }
        )


class JsonCityRepository(JsonTable, CityRepository):
    table = "cities"

    def get_by_id(self, city_id: str) -> City | None:
        raw = self._find_raw("id", city_id)
        if raw is None:
            return None
        return City(
            id=raw["id"],
            platform_id=raw["platform_id"],
            name=raw["name"],
            region=raw["region"],
        )

    def save(self, city: City) -> None:
        self._upsert(
            {
                "id": city.id,
                "platform_id": city.platform_id,
                "name": city.name,
                "region": city.region,
            }
        )
