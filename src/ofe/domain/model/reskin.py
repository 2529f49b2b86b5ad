"""ReskinRequest aggregate: one rebrand job tied to one order item.

Status is derived from two nullable timestamps: both empty means pending,
``completed_at`` means complete, ``cancelled_at`` means cancelled.  The two
terminal states are mutually exclusive.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from ofe.domain.exceptions import InvalidStateError, ValidationError


class ReskinStatus(Enum):
    PENDING = "pending"
    COMPLETE = "complete"
    CANCELLED = "cancelled"


@dataclass
class ReskinRequest:
    id: str
    platform_id: str
    order_id: str
    order_item_id: str
    original_asset_id: str
    original_asset_name: str
    client_notes: str
    created_at: datetime
    target_brand_id: str | None = None
    target_brand_custom: str | None = None
    admin_notes: str | None = None
    new_asset_id: str | None = None
    new_asset_name: str | None = None
    completion_photos: list[str] = field(default_factory=list)
    completion_notes: str | None = None
    completed_at: datetime | None = None
    completed_by: str | None = None
    cancelled_at: datetime | None = None
    cancelled_by: str | None = None
    cancellation_reason: str | None = None

    @property
    def status(self) -> ReskinStatus:
        if self.cancelled_at is not None:
            return ReskinStatus.CANCELLED
        if self.completed_at is not None:
            return ReskinStatus.COMPLETE
        return ReskinStatus.PENDING

    @property
    def is_pending(self) -> bool:
        return self.status == ReskinStatus.PENDING

    @property
    def target_brand_label(self) -> str:
        return self.target_brand_custom or "Custom Brand"

    def complete(
        self,
        new_asset_id: str,
        new_asset_name: str,
        photos: list[str],
        by: str,
        at: datetime,
        notes: str | None = None,
    ) -> None:
        if self.completed_at is not None:
            raise InvalidStateError("Reskin request already completed")
        if self.cancelled_at is not None:
            raise InvalidStateError("Reskin request was cancelled")
        if not new_asset_name or not new_asset_name.strip():
            raise ValidationError("New asset name is required")
        if not photos:
            raise ValidationError("At least one completion photo is required")
        self.new_asset_id = new_asset_id
        self.new_asset_name = new_asset_name.strip()
        self.completion_photos = list(photos)
        self.completion_notes = notes
        self.completed_at = at
        self.completed_by = by

    def cancel(self, reason: str, by: str, at: datetime) -> None:
        if self.completed_at is not None:
            raise InvalidStateError("Cannot cancel completed reskin request")
        if self.cancelled_at is not None:
            raise InvalidStateError("Reskin request already cancelled")
        self.cancelled_at = at
        self.cancelled_by = by
        self.cancellation_reason = reason
