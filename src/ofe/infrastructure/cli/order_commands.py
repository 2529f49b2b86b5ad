"""CLI commands for the Order aggregate."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation

import click

from ofe.application.approve_quote import ApproveQuoteHandler
from ofe.application.cancel_order import CancelOrderHandler
from ofe.application.check_feasibility import CheckFeasibilityHandler
from ofe.application.create_order import CreateOrderHandler
from ofe.application.decline_quote import DeclineQuoteHandler
from ofe.application.dto import CreateOrderSpec, OrderDTO, OrderItemSpec
from ofe.application.progress_status import ProgressOrderStatusHandler
from ofe.application.return_to_logistics import ReturnToLogisticsHandler
from ofe.application.send_quote import SendQuoteHandler
from ofe.application.show_order import ShowOrderHandler
from ofe.application.submit_for_approval import SubmitForApprovalHandler
from ofe.application.update_financial_status import UpdateFinancialStatusHandler
from ofe.application.update_logistics_details import UpdateLogisticsDetailsHandler
from ofe.application.update_trip_type import UpdateTripTypeHandler
from ofe.application.update_vehicle import UpdateVehicleHandler
from ofe.domain.exceptions import DomainException
from ofe.domain.model.order import (
    CancellationReason,
    FinancialStatus,
    MaintenanceDecision,
    OrderStatus,
    TimeWindow,
)
from ofe.domain.model.pricing import TripType, VehicleType
from ofe.infrastructure.cli.context import CliContext, pass_ctx

DATE = click.DateTime(formats=["%Y-%m-%d"])
DATETIME = click.DateTime(formats=["%Y-%m-%dT%H:%M", "%Y-%m-%d %H:%M"])


def parse_items(raw: str) -> list[tuple[str, int]]:
    """Parse 'asset-1:3,asset-2:5' into (asset_id, quantity) pairs."""
    pairs: list[tuple[str, int]] = []
    for pair in raw.split(","):
        pair = pair.strip()
        if ":" not in pair:
            raise click.BadParameter(
                f"Invalid item format '{pair}'. Expected 'AssetId:Quantity'."
            )
        asset_id, qty_str = pair.rsplit(":", 1)
        try:
            qty = int(qty_str)
        except ValueError:
            raise click.BadParameter(
                f"Invalid quantity '{qty_str}' for asset '{asset_id}'."
            )
        pairs.append((asset_id.strip(), qty))
    return pairs


def _decisions(fix: tuple[str, ...], use_as_is: tuple[str, ...]) -> dict[str, MaintenanceDecision]:
    decisions = {asset_id: MaintenanceDecision.USE_AS_IS for asset_id in use_as_is}
    decisions.update({asset_id: MaintenanceDecision.FIX_IN_ORDER for asset_id in fix})
    return decisions


def _parse_reskins(raw: tuple[str, ...]) -> dict[str, str]:
    """Parse repeated 'asset-1=Brand Name' options."""
    reskins: dict[str, str] = {}
    for entry in raw:
        if "=" not in entry:
            raise click.BadParameter(
                f"Invalid reskin '{entry}'. Expected 'AssetId=Target brand'."
            )
        asset_id, brand = entry.split("=", 1)
        reskins[asset_id.strip()] = brand.strip()
    return reskins


def parse_decimal(value: str | None, what: str) -> Decimal | None:
    if value is None:
        return None
    try:
        return Decimal(value)
    except InvalidOperation:
        raise click.BadParameter(f"Invalid {what} '{value}'.")


def _utc(value: datetime | None) -> datetime | None:
    return value.replace(tzinfo=timezone.utc) if value is not None else None


def display_order(dto: OrderDTO) -> None:
    """Shared formatting for displaying an order."""
    click.echo(f"Order {dto.order_code}  (status={dto.order_status}, financial={dto.financial_status})")
    click.echo(f"ID:       {dto.id}")
    click.echo(f"Company:  {dto.company_id}")
    click.echo(f"Event:    {dto.event_start_date} to {dto.event_end_date}")
    click.echo(f"Venue:    {dto.venue}")
    click.echo(f"Trip:     {dto.trip_type}  Vehicle: {dto.vehicle_type}")
    if dto.job_number:
        click.echo(f"Job:      {dto.job_number}")
    click.echo()
    click.echo(f"  {'Asset':<30} {'Qty':>5} {'Volume':>10}  {'Item ID'}")
    click.echo(f"  {'-'*70}")
    for item in dto.items:
        flags = " [reskin]" if item.is_reskin_request else ""
        click.echo(
            f"  {item.asset_name:<30} {item.quantity:>5} {item.total_volume:>10}  {item.id}{flags}"
        )
    click.echo(f"  {'-'*70}")
    click.echo(f"  {'Total volume (m3)':<36} {dto.total_volume:>10}")

    if dto.pricing is not None:
        p = dto.pricing
        click.echo()
        click.echo(f"  Pricing ({p.kind})")
        click.echo(f"    {'Base operations':<22} {p.base_operations:>16}")
        click.echo(f"    {'Transport':<22} {p.transport:>16}  ({p.region}, {p.vehicle_type})")
        if p.kind == "full":
            click.echo(f"    {'Catalog services':<22} {p.catalog_total:>16}")
            click.echo(f"    {'Custom charges':<22} {p.custom_total:>16}")
        click.echo(f"    {'Logistics subtotal':<22} {p.logistics_subtotal:>16}")
        click.echo(f"    {'Margin ' + p.margin_percent + '%':<22} {p.margin_amount:>16}")
        click.echo(f"    {'Total':<22} {p.total:>16}")


@click.command("create")
@click.option("--items", required=True, help="Items as 'AssetId:Qty,AssetId:Qty'.")
@click.option("--start", "start_date", required=True, type=DATE, help="Event start (YYYY-MM-DD).")
@click.option("--end", "end_date", required=True, type=DATE, help="Event end (YYYY-MM-DD).")
@click.option("--venue", required=True, help="Venue name.")
@click.option("--city", required=True, help="Venue city name.")
@click.option("--city-id", default=None, help="Venue city ID.")
@click.option("--address", default="", help="Venue address.")
@click.option("--contact-name", required=True, help="Contact person.")
@click.option("--contact-email", required=True, help="Contact email.")
@click.option("--contact-phone", default="", help="Contact phone.")
@click.option("--trip-type", type=click.Choice([t.value for t in TripType]),
              default=TripType.ROUND_TRIP.value, show_default=True)
@click.option("--brand", "brand_id", default=None, help="Brand ID.")
@click.option("--for-company", "company_id", default=None, help="Company (staff only).")
@click.option("--fix", multiple=True, help="Asset ID to refurbish before the event.")
@click.option("--use-as-is", multiple=True, help="Asset ID to send in its current condition.")
@click.option("--reskin", multiple=True, help="Rebrand request as 'AssetId=Target brand'.")
@pass_ctx
def order_create(
    ctx: CliContext,
    items: str,
    start_date: datetime,
    end_date: datetime,
    venue: str,
    city: str,
    city_id: str | None,
    address: str,
    contact_name: str,
    contact_email: str,
    contact_phone: str,
    trip_type: str,
    brand_id: str | None,
    company_id: str | None,
    fix: tuple[str, ...],
    use_as_is: tuple[str, ...],
    reskin: tuple[str, ...],
) -> None:
    """Submit a new order."""
    decisions = _decisions(fix, use_as_is)
    reskins = _parse_reskins(reskin)
    spec = CreateOrderSpec(
        event_start_date=start_date.date(),
        event_end_date=end_date.date(),
        venue_name=venue,
        venue_city_name=city,
        venue_city_id=city_id,
        venue_address=address,
        contact_name=contact_name,
        contact_email=contact_email,
        contact_phone=contact_phone,
        trip_type=TripType(trip_type),
        brand_id=brand_id,
        company_id=company_id,
        items=[
            OrderItemSpec(
                asset_id=asset_id,
                quantity=qty,
                maintenance_decision=decisions.get(asset_id),
                is_reskin_request=asset_id in reskins,
                reskin_target_brand_custom=reskins.get(asset_id),
            )
            for asset_id, qty in parse_items(items)
        ],
    )

    handler = CreateOrderHandler(ctx.uow(), notifier=ctx.notifier())

    try:
        dto = handler.handle(ctx.actor, spec)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    display_order(dto)


@click.command("show")
@click.option("--id", "order_id", required=True, help="Order ID to display.")
@click.option("--history", is_flag=True, default=False, help="Include status history.")
@pass_ctx
def order_show(ctx: CliContext, order_id: str, history: bool) -> None:
    """Show details of an existing order."""
    handler = ShowOrderHandler(ctx.uow())

    try:
        dto = handler.handle(ctx.actor, order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    display_order(dto)
    if history:
        click.echo()
        click.echo("  Status history")
        for h in dto.status_history:
            click.echo(f"    {h.timestamp}  {h.status:<22} {h.updated_by:<16} {h.notes or ''}")
        click.echo("  Financial history")
        for h in dto.financial_history:
            click.echo(f"    {h.timestamp}  {h.status:<22} {h.updated_by:<16} {h.notes or ''}")


@click.command("cancel")
@click.option("--id", "order_id", required=True, help="Order ID to cancel.")
@click.option("--reason", required=True, type=click.Choice([r.value for r in CancellationReason]))
@click.option("--notes", default=None, help="Free-text cancellation notes.")
@click.option("--no-notify", is_flag=True, default=False, help="Do not notify the client.")
@pass_ctx
def order_cancel(ctx: CliContext, order_id: str, reason: str, notes: str | None, no_notify: bool) -> None:
    """Cancel an order (releases bookings, cancels pending reskins)."""
    handler = CancelOrderHandler(ctx.uow(), notifier=ctx.notifier())

    try:
        result = handler.handle(ctx.actor, order_id, reason, notes, notify_client=not no_notify)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order {result.order_code} cancelled.")
    if result.cancelled_reskins:
        click.echo(f"{result.cancelled_reskins} pending reskin request(s) cancelled.")


@click.command("progress")
@click.option("--id", "order_id", required=True, help="Order ID.")
@click.option("--to", "new_status", required=True, type=click.Choice([s.value for s in OrderStatus]))
@click.option("--notes", default=None)
@pass_ctx
def order_progress(ctx: CliContext, order_id: str, new_status: str, notes: str | None) -> None:
    """Move an order along the fulfillment chain."""
    handler = ProgressOrderStatusHandler(ctx.uow(), notifier=ctx.notifier())

    try:
        dto = handler.handle(ctx.actor, order_id, OrderStatus(new_status), notes)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order {dto.order_code} is now {dto.order_status}.")


@click.command("submit-approval")
@click.option("--id", "order_id", required=True, help="Order ID.")
@click.option("--notes", default=None)
@pass_ctx
def order_submit_for_approval(ctx: CliContext, order_id: str, notes: str | None) -> None:
    """Hand a reviewed order to an admin for approval."""
    handler = SubmitForApprovalHandler(ctx.uow())

    try:
        dto = handler.handle(ctx.actor, order_id, notes)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order {dto.order_code} is now {dto.order_status}.")


@click.command("return-to-logistics")
@click.option("--id", "order_id", required=True, help="Order ID.")
@click.option("--reason", required=True, help="Why the order needs another review.")
@pass_ctx
def order_return_to_logistics(ctx: CliContext, order_id: str, reason: str) -> None:
    """Send an order awaiting approval back to pricing review."""
    handler = ReturnToLogisticsHandler(ctx.uow())

    try:
        dto = handler.handle(ctx.actor, order_id, reason)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order {dto.order_code} returned to {dto.order_status}.")


@click.command("quote")
@click.option("--id", "order_id", required=True, help="Order ID.")
@click.option("--margin-override", default=None, help="Margin percent override (admin).")
@click.option("--override-reason", default=None, help="Reason for the margin override.")
@pass_ctx
def order_quote(
    ctx: CliContext, order_id: str, margin_override: str | None, override_reason: str | None
) -> None:
    """Price the order in full and send the quote to the client."""
    handler = SendQuoteHandler(ctx.uow(), notifier=ctx.notifier())

    try:
        dto = handler.handle(
            ctx.actor,
            order_id,
            margin_override=parse_decimal(margin_override, "margin percent"),
            override_reason=override_reason,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    display_order(dto)


@click.command("approve")
@click.option("--id", "order_id", required=True, help="Order ID.")
@click.option("--notes", default=None)
@pass_ctx
def order_approve(ctx: CliContext, order_id: str, notes: str | None) -> None:
    """Accept a quote (books the assets)."""
    handler = ApproveQuoteHandler(ctx.uow(), notifier=ctx.notifier())

    try:
        dto = handler.handle(ctx.actor, order_id, notes)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Quote for {dto.order_code} approved. Order is now {dto.order_status}.")


@click.command("decline")
@click.option("--id", "order_id", required=True, help="Order ID.")
@click.option("--reason", required=True, help="Why the quote is declined.")
@pass_ctx
def order_decline(ctx: CliContext, order_id: str, reason: str) -> None:
    """Decline a quote."""
    handler = DeclineQuoteHandler(ctx.uow(), notifier=ctx.notifier())

    try:
        dto = handler.handle(ctx.actor, order_id, reason)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Quote for {dto.order_code} declined.")


@click.command("vehicle")
@click.option("--id", "order_id", required=True, help="Order ID.")
@click.option("--type", "vehicle_type", required=True, type=click.Choice([v.value for v in VehicleType]))
@click.option("--reason", required=True, help="Why the vehicle is changed.")
@pass_ctx
def order_vehicle(ctx: CliContext, order_id: str, vehicle_type: str, reason: str) -> None:
    """Change the transport vehicle and reprice."""
    handler = UpdateVehicleHandler(ctx.uow())

    try:
        dto = handler.handle(ctx.actor, order_id, VehicleType(vehicle_type), reason)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    display_order(dto)


@click.command("trip-type")
@click.option("--id", "order_id", required=True, help="Order ID.")
@click.option("--type", "trip_type", required=True, type=click.Choice([t.value for t in TripType]))
@click.option("--reason", required=True, help="Why the trip type is changed.")
@pass_ctx
def order_trip_type(ctx: CliContext, order_id: str, trip_type: str, reason: str) -> None:
    """Switch between one-way and round-trip transport and reprice."""
    handler = UpdateTripTypeHandler(ctx.uow())

    try:
        dto = handler.handle(ctx.actor, order_id, TripType(trip_type), reason)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    display_order(dto)


@click.command("financial")
@click.option("--id", "order_id", required=True, help="Order ID.")
@click.option("--to", "new_status", required=True, type=click.Choice([s.value for s in FinancialStatus]))
@click.option("--notes", default=None)
@pass_ctx
def order_financial(ctx: CliContext, order_id: str, new_status: str, notes: str | None) -> None:
    """Record invoicing progress."""
    handler = UpdateFinancialStatusHandler(ctx.uow())

    try:
        dto = handler.handle(ctx.actor, order_id, FinancialStatus(new_status), notes)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order {dto.order_code} financial status is now {dto.financial_status}.")


@click.command("logistics")
@click.option("--id", "order_id", required=True, help="Order ID.")
@click.option("--job-number", default=None)
@click.option("--delivery-start", type=DATETIME, default=None, help="UTC, YYYY-MM-DDTHH:MM.")
@click.option("--delivery-end", type=DATETIME, default=None)
@click.option("--pickup-start", type=DATETIME, default=None)
@click.option("--pickup-end", type=DATETIME, default=None)
@pass_ctx
def order_logistics(
    ctx: CliContext,
    order_id: str,
    job_number: str | None,
    delivery_start: datetime | None,
    delivery_end: datetime | None,
    pickup_start: datetime | None,
    pickup_end: datetime | None,
) -> None:
    """Set the job number and delivery/pickup windows."""
    if (delivery_start is None) != (delivery_end is None):
        raise click.ClickException("--delivery-start and --delivery-end go together")
    if (pickup_start is None) != (pickup_end is None):
        raise click.ClickException("--pickup-start and --pickup-end go together")

    handler = UpdateLogisticsDetailsHandler(ctx.uow())

    try:
        delivery = (
            TimeWindow(_utc(delivery_start), _utc(delivery_end)) if delivery_start else None
        )
        pickup = TimeWindow(_utc(pickup_start), _utc(pickup_end)) if pickup_start else None
        dto = handler.handle(ctx.actor, order_id, job_number, delivery, pickup)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Logistics details for {dto.order_code} updated.")


@click.command("feasibility")
@click.option("--items", required=True, help="Items as 'AssetId:Qty,AssetId:Qty'.")
@click.option("--start", "start_date", required=True, type=DATE, help="Event start (YYYY-MM-DD).")
@click.option("--fix", multiple=True, help="Asset ID to refurbish before the event.")
@click.option("--use-as-is", multiple=True, help="Asset ID to send in its current condition.")
@pass_ctx
def order_feasibility(
    ctx: CliContext,
    items: str,
    start_date: datetime,
    fix: tuple[str, ...],
    use_as_is: tuple[str, ...],
) -> None:
    """Check whether damaged assets can be refurbished before an event."""
    decisions = _decisions(fix, use_as_is)
    handler = CheckFeasibilityHandler(ctx.uow())

    try:
        result = handler.handle(
            ctx.actor,
            [(asset_id, decisions.get(asset_id)) for asset_id, _ in parse_items(items)],
            start_date.date(),
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if result.feasible:
        click.echo("Feasible: every asset can be ready in time.")
        return
    click.echo("Not feasible:")
    for issue in result.issues:
        click.echo(f"  [{issue.maintenance_mode}] {issue.message}")
