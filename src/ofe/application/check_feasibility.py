"""Application service: Maintenance Feasibility query.

Lets a client see, before submitting, whether RED (and ORANGE fix-in-order)
assets can be refurbished before the event starts.
"""

from __future__ import annotations

from datetime import date

from ofe.application.common import Clock, utc_now
from ofe.domain.model.actor import Actor
from ofe.domain.model.order import MaintenanceDecision
from ofe.domain.repository.unit_of_work import UnitOfWork
from ofe.domain.service.feasibility_checker import FeasibilityChecker, FeasibilityResult


class CheckFeasibilityHandler:

    def __init__(self, uow: UnitOfWork, clock: Clock = utc_now) -> None:
        self._uow = uow
        self._clock = clock

    def handle(
        self,
        actor: Actor,
        items: list[tuple[str, MaintenanceDecision | None]],
        event_start_date: date,
    ) -> FeasibilityResult:
        with self._uow as uow:
            checker = FeasibilityChecker(uow.assets, uow.platforms)
            return checker.check(actor.platform_id, items, event_start_date, self._clock())
