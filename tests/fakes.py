"""In-memory fake repositories for testing.

These implement the same abstract interfaces as the JSON repositories
but keep everything in dicts.  Like the JSON store they hand out copies:
a change is only visible to later reads once it has been saved.
"""

from __future__ import annotations

import copy
from datetime import date, datetime, timezone
from decimal import Decimal

from ofe.application.approve_quote import ApproveQuoteHandler
from ofe.application.complete_outbound import CompleteOutboundHandler
from ofe.application.create_order import CreateOrderHandler
from ofe.application.dto import CreateOrderSpec, OrderDTO, OrderItemSpec
from ofe.application.notifications import NotificationDispatcher, NotificationEvent
from ofe.application.progress_status import ProgressOrderStatusHandler
from ofe.application.scan_outbound import OutboundScanHandler
from ofe.application.send_quote import SendQuoteHandler
from ofe.domain.exceptions import ConflictError
from ofe.domain.model.actor import Actor, ActorRole
from ofe.domain.model.asset import Asset, AssetCondition, TrackingMethod
from ofe.domain.model.booking import AssetBooking, SelfBooking, SelfBookingStatus
from ofe.domain.model.line_item import LineItemCategory, OrderLineItem
from ofe.domain.model.order import Contact, Order, OrderItem, OrderStatus, Venue
from ofe.domain.model.platform import FeasibilityConfig, PlatformConfig
from ofe.domain.model.pricing import (
    City,
    PricingConfig,
    ServiceType,
    TransportRate,
    TripType,
    VehicleType,
)
from ofe.domain.model.reskin import ReskinRequest
from ofe.domain.model.scan import ScanEvent
from ofe.domain.model.value_objects import Money
from ofe.domain.repository.asset_repository import AssetRepository
from ofe.domain.repository.booking_repository import BookingRepository
from ofe.domain.repository.line_item_repository import LineItemRepository
from ofe.domain.repository.order_repository import OrderRepository
from ofe.domain.repository.platform_repository import PlatformRepository
from ofe.domain.repository.pricing_repository import (
    CityRepository,
    PricingConfigRepository,
    ServiceTypeRepository,
    TransportRateRepository,
)
from ofe.domain.repository.reskin_repository import ReskinRepository
from ofe.domain.repository.scan_repository import ScanRepository
from ofe.domain.repository.self_booking_repository import SelfBookingRepository
from ofe.domain.repository.unit_of_work import UnitOfWork

_copy = copy.deepcopy


class FixedClock:
    """Deterministic clock; tests move time by assigning ``now``."""

    def __init__(self, now: datetime | None = None) -> None:
        self.now = now or datetime(2025, 3, 10, 8, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now


class FakeOrderRepository(OrderRepository):

    def __init__(self) -> None:
        self._store: dict[str, Order] = {}

    def get_by_id(self, order_id: str) -> Order | None:
        return _copy(self._store.get(order_id))

    def list_by_status(self, statuses) -> list[Order]:
        return [
            _copy(o) for o in self._store.values()
            if o.order_status in statuses and o.deleted_at is None
        ]

    def codes_with_prefix(self, prefix: str) -> list[str]:
        return [o.order_code for o in self._store.values() if o.order_code.startswith(prefix)]

    def save(self, order: Order) -> None:
        for other in self._store.values():
            if other.order_code == order.order_code and other.id != order.id:
                raise ConflictError(f"Order code {order.order_code} is already in use")
        self._store[order.id] = _copy(order)


class FakeAssetRepository(AssetRepository):

    def __init__(self, assets: list[Asset] | None = None) -> None:
        self._store: dict[str, Asset] = {}
        for a in assets or []:
            self._store[a.id] = _copy(a)

    def get_by_id(self, asset_id: str) -> Asset | None:
        return _copy(self._store.get(asset_id))

    def get_by_qr_code(self, qr_code: str) -> Asset | None:
        for a in self._store.values():
            if a.qr_code == qr_code:
                return _copy(a)
        return None

    def list_by_platform(self, platform_id: str) -> list[Asset]:
        return [
            _copy(a) for a in self._store.values()
            if a.platform_id == platform_id and a.deleted_at is None
        ]

    def save(self, asset: Asset) -> None:
        for other in self._store.values():
            if other.qr_code == asset.qr_code and other.id != asset.id:
                raise ConflictError(f"QR code '{asset.qr_code}' is already in use")
        self._store[asset.id] = _copy(asset)


class FakeBookingRepository(BookingRepository):

    def __init__(self) -> None:
        self._store: dict[str, AssetBooking] = {}

    def list_for_asset(self, asset_id: str) -> list[AssetBooking]:
        return [_copy(b) for b in self._store.values() if b.asset_id == asset_id]

    def list_for_order(self, order_id: str) -> list[AssetBooking]:
        return [_copy(b) for b in self._store.values() if b.order_id == order_id]

    def save(self, booking: AssetBooking) -> None:
        self._store[booking.id] = _copy(booking)

    def delete_for_order(self, order_id: str) -> list[AssetBooking]:
        deleted = self.list_for_order(order_id)
        for b in deleted:
            del self._store[b.id]
        return deleted


class FakeSelfBookingRepository(SelfBookingRepository):

    def __init__(self) -> None:
        self._store: dict[str, SelfBooking] = {}

    def get_by_id(self, self_booking_id: str) -> SelfBooking | None:
        return _copy(self._store.get(self_booking_id))

    def list_active_for_asset(self, asset_id: str) -> list[SelfBooking]:
        return [
            _copy(sb) for sb in self._store.values()
            if sb.status == SelfBookingStatus.ACTIVE
            and any(i.asset_id == asset_id for i in sb.items)
        ]

    def save(self, self_booking: SelfBooking) -> None:
        self._store[self_booking.id] = _copy(self_booking)


class FakeLineItemRepository(LineItemRepository):

    def __init__(self) -> None:
        self._store: dict[str, OrderLineItem] = {}

    def get_by_id(self, line_item_id: str) -> OrderLineItem | None:
        return _copy(self._store.get(line_item_id))

    def list_for_order(self, order_id: str) -> list[OrderLineItem]:
        return [_copy(i) for i in self._store.values() if i.order_id == order_id]

    def get_by_reskin_request(self, reskin_request_id: str) -> OrderLineItem | None:
        for i in self._store.values():
            if i.reskin_request_id == reskin_request_id:
                return _copy(i)
        return None

    def codes_for_platform(self, platform_id: str) -> list[str]:
        return [i.line_item_code for i in self._store.values() if i.platform_id == platform_id]

    def save(self, line_item: OrderLineItem) -> None:
        self._store[line_item.id] = _copy(line_item)


class FakeReskinRepository(ReskinRepository):

    def __init__(self) -> None:
        self._store: dict[str, ReskinRequest] = {}

    def get_by_id(self, reskin_id: str) -> ReskinRequest | None:
        return _copy(self._store.get(reskin_id))

    def get_by_order_item(self, order_item_id: str) -> ReskinRequest | None:
        for r in self._store.values():
            if r.order_item_id == order_item_id:
                return _copy(r)
        return None

    def list_for_order(self, order_id: str) -> list[ReskinRequest]:
        return [_copy(r) for r in self._store.values() if r.order_id == order_id]

    def save(self, reskin: ReskinRequest) -> None:
        self._store[reskin.id] = _copy(reskin)


class FakeScanRepository(ScanRepository):

    def __init__(self) -> None:
        self._events: list[ScanEvent] = []

    def list_for_order(self, order_id: str, scan_type=None) -> list[ScanEvent]:
        return [
            e for e in self._events
            if e.order_id == order_id and (scan_type is None or e.scan_type == scan_type)
        ]

    def add(self, event: ScanEvent) -> None:
        self._events.append(event)


class FakePricingConfigRepository(PricingConfigRepository):

    def __init__(self) -> None:
        self._store: dict[tuple, PricingConfig] = {}

    def find(self, platform_id: str, company_id: str | None) -> PricingConfig | None:
        config = self._store.get((platform_id, company_id))
        return config if config is not None and config.is_active else None

    def save(self, config: PricingConfig) -> None:
        self._store[(config.platform_id, config.company_id)] = config


class FakeTransportRateRepository(TransportRateRepository):

    def __init__(self) -> None:
        self._store: dict[tuple, TransportRate] = {}

    def find(self, platform_id, company_id, region, trip_type, vehicle_type) -> TransportRate | None:
        rate = self._store.get((platform_id, company_id, region, trip_type, vehicle_type))
        return rate if rate is not None and rate.is_active else None

    def save(self, rate: TransportRate) -> None:
        key = (rate.platform_id, rate.company_id, rate.region, rate.trip_type, rate.vehicle_type)
        self._store[key] = rate


class FakeServiceTypeRepository(ServiceTypeRepository):

    def __init__(self) -> None:
        self._store: dict[str, ServiceType] = {}

    def get_by_id(self, service_type_id: str) -> ServiceType | None:
        return self._store.get(service_type_id)

    def save(self, service_type: ServiceType) -> None:
        self._store[service_type.id] = service_type


class FakeCityRepository(CityRepository):

    def __init__(self) -> None:
        self._store: dict[str, City] = {}

    def get_by_id(self, city_id: str) -> City | None:
        return self._store.get(city_id)

    def save(self, city: City) -> None:
        self._store[city.id] = city


class FakePlatformRepository(PlatformRepository):

    def __init__(self) -> None:
        self._configs: dict[str, PlatformConfig] = {}
        self._system_actors: dict[str, Actor] = {}

    def get_config(self, platform_id: str) -> PlatformConfig | None:
        return self._configs.get(platform_id)

    def save_config(self, config: PlatformConfig) -> None:
        self._configs[config.platform_id] = config

    def get_system_actor(self, platform_id: str) -> Actor | None:
        return self._system_actors.get(platform_id)

    def save_system_actor(self, actor: Actor) -> None:
        self._system_actors[actor.platform_id] = actor


_REPOSITORIES = (
    "orders",
    "assets",
    "bookings",
    "self_bookings",
    "line_items",
    "reskins",
    "scans",
    "pricing_configs",
    "transport_rates",
    "service_types",
    "cities",
    "platforms",
)


class FakeUnitOfWork(UnitOfWork):
    """In-memory unit of work with snapshot rollback."""

    def __init__(self) -> None:
        self.orders = FakeOrderRepository()
        self.assets = FakeAssetRepository()
        self.bookings = FakeBookingRepository()
        self.self_bookings = FakeSelfBookingRepository()
        self.line_items = FakeLineItemRepository()
        self.reskins = FakeReskinRepository()
        self.scans = FakeScanRepository()
        self.pricing_configs = FakePricingConfigRepository()
        self.transport_rates = FakeTransportRateRepository()
        self.service_types = FakeServiceTypeRepository()
        self.cities = FakeCityRepository()
        self.platforms = FakePlatformRepository()
        self.commits = 0
        self._snapshot: dict | None = None

    def __enter__(self) -> FakeUnitOfWork:
        self._snapshot = self._take_snapshot()
        return self

    def commit(self) -> None:
        self.commits += 1
        self._snapshot = self._take_snapshot()

    def rollback(self) -> None:
        if self._snapshot is None:
            return
        for name, state in self._snapshot.items():
            getattr(self, name).__dict__.update(_copy(state))

    def _take_snapshot(self) -> dict:
        return {name: _copy(getattr(self, name).__dict__) for name in _REPOSITORIES}


class RecordingDispatcher(NotificationDispatcher):

    def __init__(self) -> None:
        self.events: list[NotificationEvent] = []

    def dispatch(self, event: NotificationEvent) -> None:
        self.events.append(event)

    def types(self) -> list[str]:
        return [e.event_type for e in self.events]


class FailingDispatcher(NotificationDispatcher):

    def dispatch(self, event: NotificationEvent) -> None:
        raise RuntimeError("mail server down")


# ---------------------------------------------------------------------------
# Builders shared by the handler tests
# ---------------------------------------------------------------------------

PLATFORM_ID = "plat-1"
COMPANY_ID = "comp-1"

ADMIN = Actor("admin-1", ActorRole.ADMIN, PLATFORM_ID, name="Ops Admin")
LOGISTICS = Actor("logi-1", ActorRole.LOGISTICS, PLATFORM_ID, name="Warehouse Lead")
CLIENT = Actor("client-1", ActorRole.CLIENT, PLATFORM_ID, company_id=COMPANY_ID, name="Event Planner")
OTHER_CLIENT = Actor("client-2", ActorRole.CLIENT, PLATFORM_ID, company_id="comp-2")
SYSTEM = Actor("system@plat-1", ActorRole.SYSTEM, PLATFORM_ID, name="System")

CHAIRS = "asset-chairs"
STAGE = "asset-stage"
BAR = "asset-bar"
ARCH = "asset-arch"


def make_asset(
    asset_id: str,
    name: str,
    qr_code: str,
    total: int = 1,
    tracking: TrackingMethod = TrackingMethod.BATCH,
    volume: str = "1",
    weight: str = "10",
    condition: AssetCondition = AssetCondition.GREEN,
    refurb_days: int | None = None,
    company_id: str = COMPANY_ID,
    platform_id: str = PLATFORM_ID,
) -> Asset:
    return Asset(
        id=asset_id,
        platform_id=platform_id,
        company_id=company_id,
        name=name,
        qr_code=qr_code,
        total_quantity=total,
        available_quantity=total,
        tracking_method=tracking,
        volume_per_unit=Decimal(volume),
        weight_per_unit=Decimal(weight),
        condition=condition,
        refurb_days_estimate=refurb_days,
    )


def default_assets() -> list[Asset]:
    return [
        make_asset(CHAIRS, "Gold Chiavari Chair", "QR-CHAIR", total=100, volume="0.05", weight="3"),
        make_asset(
            STAGE, "Modular Stage", "QR-STAGE",
            tracking=TrackingMethod.INDIVIDUAL, volume="8", weight="400",
        ),
        make_asset(
            BAR, "LED Bar Counter", "QR-BAR", total=2, volume="1.5",
            condition=AssetCondition.RED, refurb_days=2,
        ),
        make_asset(
            ARCH, "Floral Arch", "QR-ARCH", tracking=TrackingMethod.INDIVIDUAL, volume="2",
            condition=AssetCondition.ORANGE, refurb_days=3,
        ),
    ]


def seeded_uow(
    assets: list[Asset] | None = None,
    margin: str = "25",
    feasibility: FeasibilityConfig | None = None,
) -> FakeUnitOfWork:
    """A platform with rates, two cities, one service type and the default assets."""
    uow = FakeUnitOfWork()
    uow.platforms.save_config(
        PlatformConfig(
            PLATFORM_ID,
            default_margin_percent=Decimal(margin),
            feasibility=feasibility or FeasibilityConfig(),
        )
    )
    uow.platforms.save_system_actor(SYSTEM)
    uow.pricing_configs.save(PricingConfig(PLATFORM_ID, Money.of("50")))
    for region, trip, vehicle, rate in (
        ("Dubai", TripType.ROUND_TRIP, VehicleType.STANDARD, "300"),
        ("Dubai", TripType.ONE_WAY, VehicleType.STANDARD, "200"),
        ("Dubai", TripType.ROUND_TRIP, VehicleType.SEVEN_TON, "600"),
        ("Abu Dhabi", TripType.ROUND_TRIP, VehicleType.STANDARD, "500"),
    ):
        uow.transport_rates.save(TransportRate(PLATFORM_ID, region, trip, vehicle, Money.of(rate)))
    uow.cities.save(City("city-dxb", PLATFORM_ID, "Dubai", "Dubai"))
    uow.cities.save(City("city-auh", PLATFORM_ID, "Abu Dhabi", "Abu Dhabi"))
    uow.service_types.save(
        ServiceType(
            "svc-assembly", PLATFORM_ID, "Stage Assembly", LineItemCategory.ASSEMBLY,
            "hour", Money.of("100"),
        )
    )
    for asset in default_assets() if assets is None else assets:
        uow.assets.save(asset)
    return uow


def order_spec(
    *items: OrderItemSpec,
    start: date = date(2025, 3, 20),
    end: date = date(2025, 3, 21),
    city: str = "Dubai",
    city_id: str | None = None,
    company_id: str | None = None,
    trip_type: TripType = TripType.ROUND_TRIP,
) -> CreateOrderSpec:
    return CreateOrderSpec(
        event_start_date=start,
        event_end_date=end,
        venue_name="Madinat Arena",
        venue_city_name=city,
        venue_city_id=city_id,
        contact_name="Layla Haddad",
        contact_email="layla@example.com",
        items=list(items) or [OrderItemSpec(STAGE, 1)],
        company_id=company_id,
        trip_type=trip_type,
    )


def make_order(
    order_id: str = "order-1",
    order_code: str = "ORD-20250310-001",
    items: list[OrderItem] | None = None,
    status: OrderStatus = OrderStatus.PRICING_REVIEW,
    start: date = date(2025, 3, 20),
    end: date = date(2025, 3, 21),
    platform_id: str = PLATFORM_ID,
) -> Order:
    """An order built directly, bypassing the submission checks."""
    order = Order.create(
        order_id=order_id,
        platform_id=platform_id,
        order_code=order_code,
        company_id=COMPANY_ID,
        requester_id=CLIENT.id,
        contact=Contact("Layla Haddad", "layla@example.com"),
        event_start_date=start,
        event_end_date=end,
        venue=Venue("Madinat Arena", city_name="Dubai"),
        items=items or [make_item(STAGE, "Modular Stage", 1, "8")],
        created_at=datetime(2025, 3, 10, 8, 0, tzinfo=timezone.utc),
    )
    order.order_status = status
    return order


def make_item(asset_id: str, name: str, quantity: int, volume: str = "1", item_id: str | None = None) -> OrderItem:
    return OrderItem(
        id=item_id or f"item-{asset_id}",
        asset_id=asset_id,
        asset_name=name,
        quantity=quantity,
        volume_per_unit=Decimal(volume),
        weight_per_unit=Decimal("1"),
    )


def submit_order(
    uow: FakeUnitOfWork,
    clock: FixedClock,
    *items: OrderItemSpec,
    actor: Actor = CLIENT,
    notifier: NotificationDispatcher | None = None,
    **spec_kwargs,
) -> OrderDTO:
    return CreateOrderHandler(uow, notifier, clock).handle(actor, order_spec(*items, **spec_kwargs))


def confirmed_order(
    uow: FakeUnitOfWork,
    clock: FixedClock,
    *items: OrderItemSpec,
    **spec_kwargs,
) -> OrderDTO:
    """Submit, quote and approve an order."""
    dto = submit_order(uow, clock, *items, **spec_kwargs)
    SendQuoteHandler(uow, clock=clock).handle(LOGISTICS, dto.id)
    return ApproveQuoteHandler(uow, clock=clock).handle(CLIENT, dto.id)


def advance(
    uow: FakeUnitOfWork,
    clock: FixedClock,
    order_id: str,
    *statuses: OrderStatus,
    actor: Actor = LOGISTICS,
) -> OrderDTO:
    handler = ProgressOrderStatusHandler(uow, clock=clock)
    dto = None
    for status in statuses:
        dto = handler.handle(actor, order_id, status)
    return dto


def ship(
    uow: FakeUnitOfWork,
    clock: FixedClock,
    order_id: str,
    actor: Actor = LOGISTICS,
) -> OrderDTO:
    """Prepare a confirmed order, scan every unit out and mark it ready for delivery."""
    advance(uow, clock, order_id, OrderStatus.IN_PREPARATION, actor=actor)
    outbound = OutboundScanHandler(uow, clock)
    for item in uow.orders.get_by_id(order_id).items:
        asset = uow.assets.get_by_id(item.asset_id)
        quantity = None if asset.tracking_method == TrackingMethod.INDIVIDUAL else item.quantity
        outbound.handle(actor, order_id, asset.qr_code, quantity)
    return CompleteOutboundHandler(uow, clock=clock).handle(actor, order_id)
