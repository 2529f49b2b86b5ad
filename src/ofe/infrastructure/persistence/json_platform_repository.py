"""JSON-document implementation of PlatformRepository.

Feasibility parameters are stored as a free-form object and parsed with
``FeasibilityConfig.from_raw()``, so a hand-edited bad value falls back to
its default instead of breaking every order of the platform.
"""

from __future__ import annotations

from decimal import Decimal

from ofe.domain.exceptions import ValidationError
from ofe.domain.model.actor import Actor, ActorRole
from ofe.domain.model.platform import DEFAULT_MARGIN_PERCENT, FeasibilityConfig, PlatformConfig
from ofe.domain.model.value_objects import DEFAULT_CURRENCY
from ofe.domain.repository.platform_repository import PlatformRepository
from ofe.infrastructure.persistence.json_store import JsonTable


class JsonPlatformRepository(JsonTable, PlatformRepository):
    table = "platforms"

    def get_config(self, platform_id: str) -> PlatformConfig | None:
        raw = self._find_raw("platform_id", platform_id)
        if raw is None:
            return None
        return PlatformConfig(
            platform_id=raw["platform_id"],
            default_margin_percent=Decimal(
                raw.get("default_margin_percent") or DEFAULT_MARGIN_PERCENT
            ),
            feasibility=FeasibilityConfig.from_raw(raw.get("feasibility")),
            currency=raw.get("currency", DEFAULT_CURRENCY),
        )

    def save_config(self, config: PlatformConfig) -> None:
        feasibility = config.feasibility
        self._upsert(
            {
                "platform_id": config.platform_id,
                "default_margin_percent": str(config.default_margin_percent),
                "currency": config.currency,
                "feasibility": {
                    "minimum_lead_hours": feasibility.minimum_lead_hours,
                    "exclude_weekends": feasibility.exclude_weekends,
                    "weekend_days": sorted(feasibility.weekend_days),
                    "timezone": feasibility.timezone,
                },
            },
            key="platform_id",
        )

    def get_system_actor(self, platform_id: str) -> Actor | None:
        for raw in self._document.setdefault("system_actors", []):
            if raw["platform_id"] == platform_id:
                return Actor(
                    id=raw["id"],
                    role=ActorRole.SYSTEM,
                    platform_id=raw["platform_id"],
                    name=raw.get("name", ""),
                )
        return None

    def save_system_actor(self, actor: Actor) -> None:
        if actor.role != ActorRole.SYSTEM:
            raise ValidationError("Only SYSTEM actors can be stored as platform system users")
        actors = self._document.setdefault("system_actors", [])
        raw = {"id": actor.id, "platform_id": actor.platform_id, "name": actor.name}
        for i, existing in enumerate(actors):
            if existing["platform_id"] == actor.platform_id:
                actors[i] = raw
                return
        actors.append(raw)
