"""Order line items: the append-only charge ledger of an order.

Catalog items are priced from a service type (``quantity x unit_rate``);
custom items carry a caller-supplied total (e.g. reskin fabrication cost).
Voiding is a one-way soft delete that never touches ``total``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum

from ofe.domain.exceptions import ConflictError, ValidationError
from ofe.domain.model.value_objects import Money


class LineItemType(Enum):
    CATALOG = "CATALOG"
    CUSTOM = "CUSTOM"


class LineItemCategory(Enum):
    ASSEMBLY = "ASSEMBLY"
    EQUIPMENT = "EQUIPMENT"
    HANDLING = "HANDLING"
    RESKIN = "RESKIN"
    TRANSPORT = "TRANSPORT"
    OTHER = "OTHER"


class BillingMode(Enum):
    BILLABLE = "BILLABLE"
    NON_BILLABLE = "NON_BILLABLE"
    COMPLIMENTARY = "COMPLIMENTARY"


@dataclass
class OrderLineItem:
    """One priced charge row on an order.

    Never physically deleted: voided rows stay for the audit trail and are
    filtered out when totals are computed.
    """

    id: str
    platform_id: str
    order_id: str
    line_item_code: str
    line_item_type: LineItemType
    category: LineItemCategory
    description: str
    total: Money
    added_by: str
    added_at: datetime
    quantity: Decimal | None = None
    unit: str | None = None
    unit_rate: Money | None = None
    service_type_id: str | None = None
    reskin_request_id: str | None = None
    billing_mode: BillingMode = BillingMode.BILLABLE
    notes: str | None = None
    is_voided: bool = False
    voided_at: datetime | None = None
    voided_by: str | None = None
    void_reason: str | None = None

    @property
    def counts_toward_totals(self) -> bool:
        return not self.is_voided and self.billing_mode == BillingMode.BILLABLE

    def update(
        self,
        quantity: Decimal | None = None,
        unit_rate: Money | None = None,
        unit: str | None = None,
        total: Money | None = None,
        notes: str | None = None,
        billing_mode: BillingMode | None = None,
    ) -> None:
        """Apply an edit; catalog totals are always re-derived."""
        if self.is_voided:
            raise ConflictError("Cannot update voided line item")
        if quantity is not None and quantity <= 0:
            raise ValidationError("Line item quantity must be positive")

        if quantity is not None:
            self.quantity = quantity
        if unit_rate is not None:
            self.unit_rate = unit_rate
        if unit is not None:
            self.unit = unit
        if notes is not None:
            self.notes = notes
        if billing_mode is not None:
            self.billing_mode = billing_mode

        if self.line_item_type == LineItemType.CATALOG:
            if total is not None:
                raise ValidationError("Catalog line item totals are derived from quantity and rate")
            self.total = self.unit_rate * self.quantity  # type: ignore[operator]
        elif total is not None:
            self.total = total
        elif (quantity is not None or unit_rate is not None) and (
            self.quantity is not None and self.unit_rate is not None
        ):
            self.total = self.unit_rate * self.quantity

    def void(self, reason: str, by: str, at: datetime) -> None:
        if self.is_voided:
            raise ConflictError(f"Line item {self.line_item_code} is already voided")
        if not reason or not reason.strip():
            raise ValidationError("Void reason is required")
        self.is_voided = True
        self.voided_at = at
        self.voided_by = by
        self.void_reason = reason.strip()


@dataclass(frozen=True)
class LineItemsTotals:
    catalog_total: Money
    custom_total: Money

    @staticmethod
    def of(items: list[OrderLineItem], currency: str) -> LineItemsTotals:
        """Sum billable, non-voided rows by kind.  Always recomputed."""
        catalog = Money.zero(currency)
        custom = Money.zero(currency)
        for item in items:
            if not item.counts_toward_totals:
                continue
            if item.line_item_type == LineItemType.CATALOG:
                catalog = catalog + item.total
            else:
                custom = custom + item.total
        return LineItemsTotals(catalog_total=catalog, custom_total=custom)
