"""Order aggregate: the core of the domain.

The Order owns its items, both status histories and the pricing snapshot.
Status changes go through ``transition_to()`` / ``update_financial_status()``
which enforce the transition graphs; role rules and cross-aggregate guards
(asset condition, scanning, bookings) live in the application handlers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from ofe.domain.exceptions import InvalidStateError, ValidationError
from ofe.domain.model.pricing import Breakdown, TripType, VehicleType
from ofe.domain.model.value_objects import round_money, round_volume


class OrderStatus(Enum):
    DRAFT = "DRAFT"
    SUBMITTED = "SUBMITTED"
    PRICING_REVIEW = "PRICING_REVIEW"
    PENDING_APPROVAL = "PENDING_APPROVAL"
    QUOTED = "QUOTED"
    DECLINED = "DECLINED"
    CONFIRMED = "CONFIRMED"
    AWAITING_FABRICATION = "AWAITING_FABRICATION"
    IN_PREPARATION = "IN_PREPARATION"
    READY_FOR_DELIVERY = "READY_FOR_DELIVERY"
    IN_TRANSIT = "IN_TRANSIT"
    DELIVERED = "DELIVERED"
    IN_USE = "IN_USE"
    AWAITING_RETURN = "AWAITING_RETURN"
    RETURN_IN_TRANSIT = "RETURN_IN_TRANSIT"
    CLOSED = "CLOSED"
    CANCELLED = "CANCELLED"


class FinancialStatus(Enum):
    PENDING_QUOTE = "PENDING_QUOTE"
    QUOTE_SENT = "QUOTE_SENT"
    QUOTE_ACCEPTED = "QUOTE_ACCEPTED"
    PENDING_INVOICE = "PENDING_INVOICE"
    INVOICED = "INVOICED"
    PAID = "PAID"
    CANCELLED = "CANCELLED"


class MaintenanceDecision(Enum):
    FIX_IN_ORDER = "FIX_IN_ORDER"
    USE_AS_IS = "USE_AS_IS"


class CancellationReason(Enum):
    CLIENT_REQUESTED = "client_requested"
    ASSET_UNAVAILABLE = "asset_unavailable"
    PRICING_DISPUTE = "pricing_dispute"
    EVENT_CANCELLED = "event_cancelled"
    FABRICATION_FAILED = "fabrication_failed"
    OTHER = "other"


# ---------------------------------------------------------------------------
# Transition graphs and status sets
# ---------------------------------------------------------------------------

_S = OrderStatus

VALID_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    _S.DRAFT: frozenset({_S.SUBMITTED}),
    _S.SUBMITTED: frozenset({_S.PRICING_REVIEW}),
    _S.PRICING_REVIEW: frozenset({_S.PENDING_APPROVAL, _S.QUOTED}),
    _S.PENDING_APPROVAL: frozenset({_S.QUOTED, _S.PRICING_REVIEW}),
    # QUOTED is also the target of a quote revision after a price change
    _S.QUOTED: frozenset({_S.CONFIRMED, _S.AWAITING_FABRICATION, _S.DECLINED, _S.QUOTED}),
    _S.CONFIRMED: frozenset({_S.IN_PREPARATION, _S.QUOTED}),
    _S.AWAITING_FABRICATION: frozenset({_S.IN_PREPARATION, _S.QUOTED}),
    _S.IN_PREPARATION: frozenset({_S.READY_FOR_DELIVERY, _S.QUOTED}),
    _S.READY_FOR_DELIVERY: frozenset({_S.IN_TRANSIT}),
    _S.IN_TRANSIT: frozenset({_S.DELIVERED}),
    _S.DELIVERED: frozenset({_S.IN_USE}),
    _S.IN_USE: frozenset({_S.AWAITING_RETURN}),
    _S.AWAITING_RETURN: frozenset({_S.RETURN_IN_TRANSIT, _S.CLOSED}),
    _S.RETURN_IN_TRANSIT: frozenset({_S.CLOSED}),
    _S.CLOSED: frozenset(),
    _S.CANCELLED: frozenset(),
    _S.DECLINED: frozenset(),
}

TERMINAL_STATUSES = frozenset({_S.CLOSED, _S.CANCELLED, _S.DECLINED})

NON_CANCELLABLE_STATUSES = frozenset({
    _S.READY_FOR_DELIVERY,
    _S.IN_TRANSIT,
    _S.DELIVERED,
    _S.IN_USE,
    _S.AWAITING_RETURN,
    _S.RETURN_IN_TRANSIT,
    _S.CLOSED,
    _S.DECLINED,
    _S.CANCELLED,
})

LINE_ITEM_EDITABLE_STATUSES = frozenset({_S.PRICING_REVIEW, _S.PENDING_APPROVAL})

# Orders in these statuses own AssetBooking rows
BOOKING_HOLDING_STATUSES = frozenset({
    _S.CONFIRMED,
    _S.AWAITING_FABRICATION,
    _S.IN_PREPARATION,
    _S.READY_FOR_DELIVERY,
    _S.IN_TRANSIT,
    _S.DELIVERED,
    _S.IN_USE,
    _S.AWAITING_RETURN,
})

QUOTE_REVISABLE_STATUSES = frozenset({
    _S.QUOTED,
    _S.CONFIRMED,
    _S.AWAITING_FABRICATION,
    _S.IN_PREPARATION,
})

_F = FinancialStatus

FINANCIAL_TRANSITIONS: dict[FinancialStatus, frozenset[FinancialStatus]] = {
    _F.PENDING_QUOTE: frozenset({_F.QUOTE_SENT, _F.CANCELLED}),
    _F.QUOTE_SENT: frozenset({_F.QUOTE_ACCEPTED, _F.QUOTE_SENT, _F.CANCELLED}),
    _F.QUOTE_ACCEPTED: frozenset({_F.PENDING_INVOICE, _F.INVOICED, _F.QUOTE_SENT, _F.CANCELLED}),
    _F.PENDING_INVOICE: frozenset({_F.INVOICED, _F.CANCELLED}),
    _F.INVOICED: frozenset({_F.PAID, _F.CANCELLED}),
    _F.PAID: frozenset(),
    _F.CANCELLED: frozenset(),
}


# ---------------------------------------------------------------------------
# Value objects and child entities
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class StatusHistoryEntry:
    status: OrderStatus | FinancialStatus
    notes: str | None
    updated_by: str
    timestamp: datetime


@dataclass(frozen=True)
class Contact:
    name: str
    email: str
    phone: str = ""


@dataclass(frozen=True)
class Venue:
    name: str
    city_id: str | None = None
    city_name: str = ""
    address: str = ""


@dataclass(frozen=True)
class TimeWindow:
    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if self.end <= self.start:
            raise ValidationError("Time window end must be after its start")


@dataclass
class OrderItem:
    """One requested asset on an order, with volume/weight snapshots."""

    id: str
    asset_id: str
    asset_name: str
    quantity: int
    volume_per_unit: Decimal
    weight_per_unit: Decimal
    from_collection_id: str | None = None
    is_reskin_request: bool = False
    reskin_target_brand_id: str | None = None
    reskin_target_brand_custom: str | None = None
    reskin_notes: str | None = None
    maintenance_decision: MaintenanceDecision | None = None
    refurb_days_snapshot: int | None = None

    def __post_init__(self) -> None:
        if isinstance(self.quantity, bool) or not isinstance(self.quantity, int):
            raise ValidationError("Item quantity must be an integer")
        if self.quantity <= 0:
            raise ValidationError(f"Quantity for '{self.asset_name}' must be positive")

    @property
    def total_volume(self) -> Decimal:
        return self.volume_per_unit * self.quantity

    @property
    def total_weight(self) -> Decimal:
        return self.weight_per_unit * self.quantity

    def repoint(self, asset_id: str, asset_name: str) -> None:
        self.asset_id = asset_id
        self.asset_name = asset_name

    def clear_reskin(self) -> None:
        self.is_reskin_request = False
        self.reskin_target_brand_id = None
        self.reskin_target_brand_custom = None
        self.reskin_notes = None


# ---------------------------------------------------------------------------
# Aggregate root
# ---------------------------------------------------------------------------


@dataclass
class Order:
    """Aggregate root for rental orders.

    Use ``Order.create()`` for new orders; the plain constructor exists so
    repositories can reconstitute persisted orders without re-validating.
    """

    id: str
    platform_id: str
    order_code: str
    company_id: str
    requester_id: str
    contact: Contact
    event_start_date: date
    event_end_date: date
    venue: Venue
    items: list[OrderItem]
    created_at: datetime
    trip_type: TripType = TripType.ROUND_TRIP
    vehicle_type: VehicleType = VehicleType.STANDARD
    brand_id: str | None = None
    order_status: OrderStatus = OrderStatus.PRICING_REVIEW
    financial_status: FinancialStatus = FinancialStatus.PENDING_QUOTE
    job_number: str | None = None
    delivery_window: TimeWindow | None = None
    pickup_window: TimeWindow | None = None
    pricing: Breakdown | None = None
    tier_id: str | None = None
    status_history: list[StatusHistoryEntry] = field(default_factory=list)
    financial_history: list[StatusHistoryEntry] = field(default_factory=list)
    deleted_at: datetime | None = None

    # --- Factory (used for NEW orders only) -----------------------------------

    @staticmethod
    def create(
        order_id: str,
        platform_id: str,
        order_code: str,
        company_id: str,
        requester_id: str,
        contact: Contact,
        event_start_date: date,
        event_end_date: date,
        venue: Venue,
        items: list[OrderItem],
        created_at: datetime,
        trip_type: TripType = TripType.ROUND_TRIP,
        brand_id: str | None = None,
    ) -> Order:
        """Create a submitted order in PRICING_REVIEW, enforcing all invariants."""
        validate_event_dates(event_start_date, event_end_date)
        if not items:
            raise ValidationError("Order must contain at least one item")
        seen: set[str] = set()
        for item in items:
            if item.asset_id in seen:
                raise ValidationError(
                    f"Asset '{item.asset_name}' appears more than once in the order"
                )
            seen.add(item.asset_id)

        order = Order(
            id=order_id,
            platform_id=platform_id,
            order_code=order_code,
            company_id=company_id,
            requester_id=requester_id,
            contact=contact,
            event_start_date=event_start_date,
            event_end_date=event_end_date,
            venue=venue,
            items=list(items),
            created_at=created_at,
            trip_type=trip_type,
            brand_id=brand_id,
        )
        order.status_history.append(
            StatusHistoryEntry(OrderStatus.PRICING_REVIEW, "Order submitted", requester_id, created_at)
        )
        order.financial_history.append(
            StatusHistoryEntry(FinancialStatus.PENDING_QUOTE, "Order submitted", requester_id, created_at)
        )
        return order

    # --- State transitions ----------------------------------------------------

    def transition_to(
        self,
        new_status: OrderStatus,
        by: str,
        at: datetime,
        notes: str | None = None,
    ) -> None:
        """Move along the primary graph and record the change."""
        if self.is_terminal:
            raise InvalidStateError(
                f"Order {self.order_code} is {self.order_status.value} and cannot change status"
            )
        if new_status not in VALID_TRANSITIONS[self.order_status]:
            raise InvalidStateError(
                f"Cannot transition from {self.order_status.value} to {new_status.value}"
            )
        self.order_status = new_status
        self.status_history.append(StatusHistoryEntry(new_status, notes, by, at))

    def update_financial_status(
        self,
        new_status: FinancialStatus,
        by: str,
        at: datetime,
        notes: str | None = None,
    ) -> None:
        if new_status not in FINANCIAL_TRANSITIONS[self.financial_status]:
            raise InvalidStateError(
                f"Cannot change financial status from {self.financial_status.value} "
                f"to {new_status.value}"
            )
        self.financial_status = new_status
        self.financial_history.append(StatusHistoryEntry(new_status, notes, by, at))

    def cancel(self, reason: CancellationReason, notes: str | None, by: str, at: datetime) -> None:
        """Move both statuses to CANCELLED.

        Booking, reskin and line item cleanup is coordinated by the
        cancellation handler in the same unit of work.
        """
        if not self.can_cancel:
            raise InvalidStateError(
                f"Cannot cancel order in {self.order_status.value} status"
            )
        history_notes = f"{reason.value}: {notes}" if notes else reason.value
        self.order_status = OrderStatus.CANCELLED
        self.status_history.append(
            StatusHistoryEntry(OrderStatus.CANCELLED, history_notes, by, at)
        )
        if self.financial_status != FinancialStatus.CANCELLED:
            self.financial_status = FinancialStatus.CANCELLED
            self.financial_history.append(
                StatusHistoryEntry(FinancialStatus.CANCELLED, history_notes, by, at)
            )

    def revise_quote(self, by: str, at: datetime, notes: str) -> None:
        """Send the order back to QUOTED after its price changed post-quote."""
        if self.order_status not in QUOTE_REVISABLE_STATUSES:
            raise InvalidStateError(
                f"Cannot revise quote for order in {self.order_status.value} status"
            )
        self.transition_to(OrderStatus.QUOTED, by, at, notes)
        self.update_financial_status(FinancialStatus.QUOTE_SENT, by, at, notes)

    # --- Mutators guarded by status -------------------------------------------

    def change_vehicle(self, vehicle_type: VehicleType) -> None:
        if self.order_status not in LINE_ITEM_EDITABLE_STATUSES:
            raise InvalidStateError(
                f"Cannot change vehicle for order in {self.order_status.value} status"
            )
        self.vehicle_type = vehicle_type

    def change_trip_type(self, trip_type: TripType) -> None:
        if self.order_status not in LINE_ITEM_EDITABLE_STATUSES:
            raise InvalidStateError(
                f"Cannot change trip type for order in {self.order_status.value} status"
            )
        if trip_type == self.trip_type:
            raise ValidationError(f"Trip type is already {trip_type.value}")
        self.trip_type = trip_type

    def set_pricing(self, breakdown: Breakdown) -> None:
        self.pricing = breakdown

    def set_job_number(self, job_number: str) -> None:
        self._assert_not_terminal()
        if not job_number or not job_number.strip():
            raise ValidationError("Job number is required")
        self.job_number = job_number.strip()

    def set_time_windows(
        self,
        delivery_window: TimeWindow | None = None,
        pickup_window: TimeWindow | None = None,
    ) -> None:
        self._assert_not_terminal()
        if delivery_window is not None:
            self.delivery_window = delivery_window
        if pickup_window is not None:
            self.pickup_window = pickup_window
        if (
            self.delivery_window is not None
            and self.pickup_window is not None
            and self.pickup_window.start < self.delivery_window.end
        ):
            raise ValidationError("Pickup window must start after the delivery window ends")

    # --- Computed properties --------------------------------------------------

    @property
    def is_terminal(self) -> bool:
        return self.order_status in TERMINAL_STATUSES

    @property
    def can_cancel(self) -> bool:
        return self.order_status not in NON_CANCELLABLE_STATUSES

    @property
    def line_items_editable(self) -> bool:
        return self.order_status in LINE_ITEM_EDITABLE_STATUSES

    @property
    def holds_bookings(self) -> bool:
        return self.order_status in BOOKING_HOLDING_STATUSES

    @property
    def total_volume(self) -> Decimal:
        return round_volume(sum((i.total_volume for i in self.items), Decimal("0")))

    @property
    def total_weight(self) -> Decimal:
        return round_money(sum((i.total_weight for i in self.items), Decimal("0")))

    # --- Item lookups ---------------------------------------------------------

    def find_item(self, item_id: str) -> OrderItem:
        for item in self.items:
            if item.id == item_id:
                return item
        raise ValidationError(f"Item '{item_id}' not found in order {self.order_code}")

    def item_for_asset(self, asset_id: str) -> OrderItem | None:
        return next((i for i in self.items if i.asset_id == asset_id), None)

    # --- Internal helpers -----------------------------------------------------

    def _assert_not_terminal(self) -> None:
        if self.is_terminal:
            raise InvalidStateError(
                f"Order {self.order_code} is {self.order_status.value}"
            )


def validate_event_dates(start: date, end: date) -> None:
    if end < start:
        raise ValidationError("Event end date must be on or after the start date")
