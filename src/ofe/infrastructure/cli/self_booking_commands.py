"""CLI commands for internal self-bookings."""

from __future__ import annotations

import click

from ofe.application.cancel_self_booking import CancelSelfBookingHandler
from ofe.application.create_self_booking import CreateSelfBookingHandler
from ofe.application.dto import SelfBookingDTO
from ofe.application.return_self_booking import ReturnSelfBookingHandler
from ofe.domain.exceptions import DomainException
from ofe.infrastructure.cli.context import CliContext, pass_ctx
from ofe.infrastructure.cli.order_commands import parse_items


def _display_self_booking(dto: SelfBookingDTO) -> None:
    click.echo(f"Self-booking {dto.id}  for {dto.booked_for}  (status={dto.status})")
    for asset_id, quantity, returned, status in dto.items:
        click.echo(f"  {asset_id:<38} {returned:>4}/{quantity:<4} returned  {status}")


@click.command("create")
@click.option("--for", "booked_for", required=True, help="Who takes the assets.")
@click.option("--items", required=True, help="Items as 'AssetId:Qty,AssetId:Qty'.")
@click.option("--reason", default=None)
@click.option("--job-reference", default=None)
@click.option("--notes", default=None)
@pass_ctx
def self_booking_create(
    ctx: CliContext,
    booked_for: str,
    items: str,
    reason: str | None,
    job_reference: str | None,
    notes: str | None,
) -> None:
    """Check assets out for internal use."""
    handler = CreateSelfBookingHandler(ctx.uow())

    try:
        dto = handler.handle(
            ctx.actor, booked_for, parse_items(items), reason, job_reference, notes
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_self_booking(dto)


@click.command("return")
@click.option("--id", "self_booking_id", required=True, help="Self-booking ID.")
@click.option("--qr", "qr_code", required=True, help="QR code of the returned asset.")
@click.option("--quantity", type=int, default=1, show_default=True)
@pass_ctx
def self_booking_return(ctx: CliContext, self_booking_id: str, qr_code: str, quantity: int) -> None:
    """Scan self-booked units back in."""
    handler = ReturnSelfBookingHandler(ctx.uow())

    try:
        dto = handler.handle(ctx.actor, self_booking_id, qr_code, quantity)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_self_booking(dto)


@click.command("cancel")
@click.option("--id", "self_booking_id", required=True, help="Self-booking ID.")
@pass_ctx
def self_booking_cancel(ctx: CliContext, self_booking_id: str) -> None:
    """Cancel an active self-booking."""
    handler = CancelSelfBookingHandler(ctx.uow())

    try:
        dto = handler.handle(ctx.actor, self_booking_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Self-booking {dto.id} cancelled.")
