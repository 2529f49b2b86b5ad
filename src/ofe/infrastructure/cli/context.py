"""Per-invocation state shared by the CLI commands."""

from __future__ import annotations

from dataclasses import dataclass

import click

from ofe.application.notifications import NotificationDispatcher
from ofe.domain.exceptions import DomainException
from ofe.domain.model.actor import Actor
from ofe.domain.model.value_objects import Money
from ofe.infrastructure import bootstrap
from ofe.infrastructure.config import Settings
from ofe.infrastructure.persistence.json_unit_of_work import JsonUnitOfWork


@dataclass
class CliContext:
    settings: Settings
    current_actor: Actor | None = None

    @property
    def actor(self) -> Actor:
        if self.current_actor is None:
            raise click.UsageError("--actor-id, --role and --platform are required for this command")
        return self.current_actor

    def uow(self) -> JsonUnitOfWork:
        return bootstrap.unit_of_work(self.settings)

    def notifier(self) -> NotificationDispatcher:
        return bootstrap.notifier()

    def money(self, value: str | None) -> Money | None:
        """Parse an amount in the default currency."""
        if value is None:
            return None
        try:
            return Money.of(value, self.settings.default_currency)
        except DomainException as exc:
            raise click.BadParameter(str(exc))


pass_ctx = click.make_pass_decorator(CliContext)
