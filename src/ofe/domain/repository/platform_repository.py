"""Abstract repository for per-platform configuration and system actors."""

from __future__ import annotations

from abc import ABC, abstractmethod

from ofe.domain.model.actor import Actor
from ofe.domain.model.platform import PlatformConfig


class PlatformRepository(ABC):

    @abstractmethod
    def get_config(self, platform_id: str) -> PlatformConfig | None:
        """Return the platform's business parameters, or None."""

    @abstractmethod
    def save_config(self, config: PlatformConfig) -> None:
        """Persist a platform's business parameters."""

    @abstractmethod
    def get_system_actor(self, platform_id: str) -> Actor | None:
        """Return the platform's synthetic SYSTEM actor, or None."""

    @abstractmethod
    def save_system_actor(self, actor: Actor) -> None:
        """Register the SYSTEM actor for ``actor.platform_id``."""
