"""Composition root: wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

from ofe.application.notifications import NotificationDispatcher
from ofe.infrastructure.config import Settings, get_settings
from ofe.infrastructure.notifications import LoggingNotificationDispatcher
from ofe.infrastructure.persistence.json_unit_of_work import JsonUnitOfWork


def unit_of_work(settings: Settings | None = None) -> JsonUnitOfWork:
    settings = settings or get_settings()
    return JsonUnitOfWork(settings.store_path)


def notifier() -> NotificationDispatcher:
    return LoggingNotificationDispatcher()


def system_actor_id(settings: Settings, platform_id: str) -> str:
    return f"{settings.system_user_email_prefix}@{platform_id}"
