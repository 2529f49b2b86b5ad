"""The acting user, as supplied by the (external) auth layer."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ActorRole(Enum):
    ADMIN = "ADMIN"
    LOGISTICS = "LOGISTICS"
    CLIENT = "CLIENT"
    SYSTEM = "SYSTEM"


@dataclass(frozen=True)
class Actor:
    id: str
    role: ActorRole
    platform_id: str
    company_id: str | None = None
    name: str = ""
