"""Asset aggregate: one physical inventory record.

``INDIVIDUAL`` assets are one row per physical unit; ``BATCH`` assets pool
identical units in one row.  ``available_quantity`` is the warehouse's
on-shelf count and is kept within ``[0, total_quantity]`` by every mutator.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal
from enum import Enum

from ofe.domain.exceptions import InvalidStateError, ValidationError


class TrackingMethod(Enum):
    INDIVIDUAL = "INDIVIDUAL"
    BATCH = "BATCH"


class AssetCondition(Enum):
    GREEN = "GREEN"
    ORANGE = "ORANGE"
    RED = "RED"


class AssetStatus(Enum):
    AVAILABLE = "AVAILABLE"
    BOOKED = "BOOKED"
    OUT = "OUT"
    MAINTENANCE = "MAINTENANCE"
    TRANSFORMED = "TRANSFORMED"


@dataclass(frozen=True)
class ConditionHistoryEntry:
    condition: AssetCondition
    notes: str | None
    updated_by: str
    timestamp: datetime
    photos: tuple[str, ...] = ()


@dataclass
class Asset:
    """Aggregate root for an inventory unit (or pool of units).

    Invariants:
    - ``0 <= available_quantity <= total_quantity``
    - a ``TRANSFORMED`` asset is never transformed again and is not orderable
    """

    id: str
    platform_id: str
    company_id: str
    name: str
    qr_code: str
    total_quantity: int
    available_quantity: int
    tracking_method: TrackingMethod = TrackingMethod.BATCH
    volume_per_unit: Decimal = Decimal("0")
    weight_per_unit: Decimal = Decimal("0")
    condition: AssetCondition = AssetCondition.GREEN
    status: AssetStatus = AssetStatus.AVAILABLE
    brand_id: str | None = None
    category: str = ""
    description: str = ""
    dimensions: dict = field(default_factory=dict)
    packaging: str | None = None
    handling_tags: list[str] = field(default_factory=list)
    images: list[str] = field(default_factory=list)
    condition_notes: str | None = None
    refurb_days_estimate: int | None = None
    transformed_from: str | None = None
    transformed_to: str | None = None
    condition_history: list[ConditionHistoryEntry] = field(default_factory=list)
    last_scanned_at: datetime | None = None
    last_scanned_by: str | None = None
    deleted_at: datetime | None = None

    def __post_init__(self) -> None:
        if self.total_quantity < 0:
            raise ValidationError("Asset total quantity cannot be negative")
        if not 0 <= self.available_quantity <= self.total_quantity:
            raise ValidationError(
                f"Available quantity {self.available_quantity} must be between "
                f"0 and total quantity {self.total_quantity}"
            )

    @property
    def is_orderable(self) -> bool:
        return self.deleted_at is None and self.status != AssetStatus.TRANSFORMED

    # --- Inventory movements --------------------------------------------------

    def apply_booking(self, remaining: int) -> None:
        """Reflect a newly created order booking on the shelf count.

        ``remaining`` is what is left free for the booked window after the
        booking; individual units and fully consumed pools become BOOKED.
        """
        self.available_quantity = max(0, min(remaining, self.total_quantity))
        if self.tracking_method == TrackingMethod.INDIVIDUAL or self.available_quantity == 0:
            self.status = AssetStatus.BOOKED
        else:
            self.status = AssetStatus.AVAILABLE

    def release_booking(self, quantity: int) -> None:
        """Give back units held by a booking that is being deleted."""
        self.available_quantity = min(self.total_quantity, self.available_quantity + quantity)
        if self.status == AssetStatus.BOOKED:
            self.status = AssetStatus.AVAILABLE

    def dispatch(self, quantity: int) -> None:
        """Units leave the warehouse on an outbound scan."""
        if quantity <= 0:
            raise ValidationError("Dispatch quantity must be positive")
        self.available_quantity = max(0, self.available_quantity - quantity)
        self.status = AssetStatus.OUT

    def mark_out(self) -> None:
        """The order carrying this asset has left the warehouse."""
        self.status = AssetStatus.OUT

    def receive(self, quantity: int) -> None:
        """Units come back on an inbound scan; the asset is shelf-ready again."""
        if quantity <= 0:
            raise ValidationError("Receive quantity must be positive")
        self.available_quantity = min(self.total_quantity, self.available_quantity + quantity)
        self.status = AssetStatus.AVAILABLE

    # --- Condition ------------------------------------------------------------

    def record_condition(
        self,
        condition: AssetCondition,
        updated_by: str,
        at: datetime,
        notes: str | None = None,
        refurb_days_estimate: int | None = None,
        photos: list[str] | None = None,
    ) -> None:
        """Change condition and append to the condition history.

        GREEN clears the refurbishment estimate; other conditions keep the
        existing one unless a new estimate is supplied.
        """
        self.condition = condition
        if condition == AssetCondition.GREEN:
            self.refurb_days_estimate = None
        elif refurb_days_estimate is not None:
            self.refurb_days_estimate = refurb_days_estimate
        self.condition_history.append(
            ConditionHistoryEntry(
                condition=condition,
                notes=notes,
                updated_by=updated_by,
                timestamp=at,
                photos=tuple(photos or ()),
            )
        )

    def mark_scanned(self, by: str, at: datetime) -> None:
        self.last_scanned_at = at
        self.last_scanned_by = by

    # --- Reskin lineage -------------------------------------------------------

    def reskinned_copy(
        self,
        new_id: str,
        new_name: str,
        new_qr_code: str,
        brand_id: str | None,
        images: list[str],
    ) -> Asset:
        """Build the rebranded asset: same physical specs, fresh identity."""
        return replace(
            self,
            id=new_id,
            name=new_name,
            qr_code=new_qr_code,
            brand_id=brand_id,
            images=list(images),
            dimensions=dict(self.dimensions),
            handling_tags=list(self.handling_tags),
            status=AssetStatus.AVAILABLE,
            condition=AssetCondition.GREEN,
            condition_notes=None,
            refurb_days_estimate=None,
            condition_history=[],
            transformed_from=self.id,
            transformed_to=None,
            last_scanned_at=None,
            last_scanned_by=None,
            deleted_at=None,
        )

    def mark_transformed(self, new_asset_id: str) -> None:
        if self.status == AssetStatus.TRANSFORMED:
            raise InvalidStateError(f"Asset '{self.name}' has already been transformed")
        if new_asset_id == self.id:
            raise ValidationError("An asset cannot be transformed into itself")
        self.status = AssetStatus.TRANSFORMED
        self.transformed_to = new_asset_id
