"""Application service: Configure Platform use case.

Stores a platform's business parameters and makes sure it has the
synthetic SYSTEM user the scheduled sweep acts as.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from ofe.application.common import require_role
from ofe.domain.exceptions import ValidationError
from ofe.domain.model.actor import Actor, ActorRole
from ofe.domain.model.platform import FeasibilityConfig, PlatformConfig
from ofe.domain.repository.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class ConfigurePlatformHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(
        self,
        actor: Actor,
        default_margin_percent: Decimal,
        feasibility: dict | None,
        currency: str,
        system_actor_id: str,
    ) -> PlatformConfig:
        require_role(actor, (ActorRole.ADMIN,), "configure platforms")
        if default_margin_percent < 0:
            raise ValidationError("Default margin percent cannot be negative")

        config = PlatformConfig(
            platform_id=actor.platform_id,
            default_margin_percent=default_margin_percent,
            feasibility=FeasibilityConfig.from_raw(feasibility),
            currency=currency,
        )
        with self._uow as uow:
            uow.platforms.save_config(config)
            if uow.platforms.get_system_actor(actor.platform_id) is None:
                uow.platforms.save_system_actor(
                    Actor(
                        id=system_actor_id,
                        role=ActorRole.SYSTEM,
                        platform_id=actor.platform_id,
                        name="System",
                    )
                )
                logger.info("Created system user %s for platform %s", system_actor_id, actor.platform_id)
            uow.commit()

        logger.info(
            "Platform %s configured: margin %s%%, lead %gh",
            config.platform_id, config.default_margin_percent, config.feasibility.minimum_lead_hours,
        )
        return config
