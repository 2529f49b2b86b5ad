"""Abstract repositories for the rate tables used by pricing.

Lookups are exact matches on ``company_id`` (``None`` selects the platform
default row); the fallback order is decided by the resolvers.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from ofe.domain.model.pricing import (
    City,
    PricingConfig,
    ServiceType,
    TransportRate,
    TripType,
    VehicleType,
)


class PricingConfigRepository(ABC):

    @abstractmethod
    def find(self, platform_id: str, company_id: str | None) -> PricingConfig | None:
        """Return the active config row for exactly this platform/company."""

    @abstractmethod
    def save(self, config: PricingConfig) -> None:
        """Persist a config row, replacing the one with the same key."""


class TransportRateRepository(ABC):

    @abstractmethod
    def find(
        self,
        platform_id: str,
        company_id: str | None,
        region: str,
        trip_type: TripType,
        vehicle_type: VehicleType,
    ) -> TransportRate | None:
        """Return the active rate row for exactly this key."""

    @abstractmethod
    def save(self, rate: TransportRate) -> None:
        """Persist a rate row, replacing the one with the same key."""


class ServiceTypeRepository(ABC):

    @abstractmethod
    def get_by_id(self, service_type_id: str) -> ServiceType | None:
        """Return a service type by its ID, or None if not found."""

    @abstractmethod
    def save(self, service_type: ServiceType) -> None:
        """Persist a new or updated service type."""


class CityRepository(ABC):

    @abstractmethod
    def get_by_id(self, city_id: str) -> City | None:
        """Return a city by its ID, or None if not found."""

    @abstractmethod
    def save(self, city: City) -> None:
        """Persist a new or updated city."""
