"""Transport rate lookup and venue region resolution."""

from __future__ import annotations

import logging

from ofe.domain.model.pricing import TransportRate, TripType, VehicleType
from ofe.domain.repository.pricing_repository import CityRepository, TransportRateRepository

logger = logging.getLogger(__name__)

DEFAULT_REGION = "Dubai"

# Fallback for venues whose city is not in the cities table
REGION_KEYWORDS: dict[str, tuple[str, ...]] = {
    "Dubai": (
        "dubai", "dxb", "dubai marina", "downtown dubai", "jumeirah", "deira",
        "bur dubai", "business bay", "jbr", "jlt", "difc", "dubai mall",
    ),
    "Abu Dhabi": (
        "abu dhabi", "abudhabi", "adh", "mussafah", "khalifa city", "saadiyat",
        "yas island", "reem island", "corniche",
    ),
    "Al Ain": ("al ain", "alain"),
    "Sharjah": ("sharjah", "shj"),
    "Ajman": ("ajman", "ajm"),
    "Ras Al Khaimah": ("ras al khaimah", "ras al-khaimah", "rak"),
    "Umm Al Quwain": ("umm al quwain", "umm al-quwain", "uaq", "umm al quawain"),
    "Fujairah": ("fujairah", "fujaira", "fuj"),
}


def region_from_city_name(city_name: str | None) -> str:
    """Keyword match on a free-text city name; first region listed wins."""
    lowered = (city_name or "").lower().strip()
    if lowered:
        for region, keywords in REGION_KEYWORDS.items():
            if any(keyword in lowered for keyword in keywords):
                return region
    return DEFAULT_REGION


class RegionResolver:
    """Map a venue to its pricing region.

    The cities table is authoritative; a city id that is missing from it
    (or no id at all) falls back to keyword matching on the city name.
    """

    def __init__(self, cities: CityRepository) -> None:
        self._cities = cities

    def resolve(self, city_id: str | None, city_name: str | None = None) -> str:
        if city_id:
            city = self._cities.get_by_id(city_id)
            if city is not None:
                return city.region
            logger.warning("City %s not in cities table, matching on name %r", city_id, city_name)
        return region_from_city_name(city_name)


def lookup_transport_rate(
    repo: TransportRateRepository,
    platform_id: str,
    company_id: str | None,
    region: str,
    trip_type: TripType,
    vehicle_type: VehicleType,
) -> TransportRate | None:
    """Company-specific rate first, then the platform default, else None."""
    if company_id is not None:
        rate = repo.find(platform_id, company_id, region, trip_type, vehicle_type)
        if rate is not None:
            return rate
    return repo.find(platform_id, None, region, trip_type, vehicle_type)
