"""CLI commands for warehouse QR scanning."""

from __future__ import annotations

import click

from ofe.application.complete_inbound import CompleteInboundHandler
from ofe.application.complete_outbound import CompleteOutboundHandler
from ofe.application.dto import ScanProgressDTO
from ofe.application.scan_inbound import InboundScanHandler
from ofe.application.scan_outbound import OutboundScanHandler
from ofe.application.scan_progress import InboundProgressHandler, OutboundProgressHandler
from ofe.domain.exceptions import DomainException
from ofe.domain.model.asset import AssetCondition
from ofe.domain.model.scan import DiscrepancyReason
from ofe.infrastructure.cli.context import CliContext, pass_ctx


def _display_progress(dto: ScanProgressDTO, direction: str = "Inbound") -> None:
    click.echo(
        f"{direction}: {dto.items_scanned}/{dto.total_items} units ({dto.percent_complete}%)"
    )
    for item in dto.items:
        mark = "x" if item.is_complete else " "
        click.echo(
            f"  [{mark}] {item.asset_name:<30} {item.scanned_quantity:>4}/{item.required_quantity}"
        )


@click.command("inbound")
@click.option("--order", "order_id", required=True, help="Order ID.")
@click.option("--qr", "qr_code", required=True, help="Scanned QR code.")
@click.option("--condition", required=True, type=click.Choice([c.value for c in AssetCondition]))
@click.option("--quantity", type=int, default=None, help="Units (batch assets).")
@click.option("--notes", default=None)
@click.option("--photo", "photos", multiple=True, help="Damage photo URL.")
@click.option("--discrepancy", type=click.Choice([d.value for d in DiscrepancyReason]), default=None)
@click.option("--refurb-days", type=int, default=None, help="Refurbishment estimate in days.")
@pass_ctx
def scan_inbound(
    ctx: CliContext,
    order_id: str,
    qr_code: str,
    condition: str,
    quantity: int | None,
    notes: str | None,
    photos: tuple[str, ...],
    discrepancy: str | None,
    refurb_days: int | None,
) -> None:
    """Scan an asset back into the warehouse."""
    handler = InboundScanHandler(ctx.uow())

    try:
        asset, progress = handler.handle(
            ctx.actor,
            order_id,
            qr_code,
            AssetCondition(condition),
            quantity=quantity,
            notes=notes,
            photos=list(photos),
            discrepancy_reason=DiscrepancyReason(discrepancy) if discrepancy else None,
            refurb_days_estimate=refurb_days,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Scanned '{asset.name}' in ({asset.condition}).")
    _display_progress(progress)


@click.command("outbound")
@click.option("--order", "order_id", required=True, help="Order ID.")
@click.option("--qr", "qr_code", required=True, help="Scanned QR code.")
@click.option("--quantity", type=int, default=None, help="Units (batch assets).")
@click.option("--notes", default=None)
@pass_ctx
def scan_outbound(
    ctx: CliContext, order_id: str, qr_code: str, quantity: int | None, notes: str | None
) -> None:
    """Scan an asset out of the warehouse."""
    handler = OutboundScanHandler(ctx.uow())

    try:
        asset = handler.handle(ctx.actor, order_id, qr_code, quantity=quantity, notes=notes)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Scanned '{asset.name}' out ({asset.available_quantity} left on the shelf).")


@click.command("progress")
@click.option("--order", "order_id", required=True, help="Order ID.")
@click.option("--outbound", is_flag=True, help="Show outbound instead of inbound progress.")
@pass_ctx
def scan_progress(ctx: CliContext, order_id: str, outbound: bool) -> None:
    """Show inbound (or outbound) scanning progress."""
    if outbound:
        handler = OutboundProgressHandler(ctx.uow())
    else:
        handler = InboundProgressHandler(ctx.uow())

    try:
        progress = handler.handle(ctx.actor, order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_progress(progress, "Outbound" if outbound else "Inbound")


@click.command("complete")
@click.option("--order", "order_id", required=True, help="Order ID.")
@pass_ctx
def scan_complete(ctx: CliContext, order_id: str) -> None:
    """Close the order once every item has been scanned back in."""
    handler = CompleteInboundHandler(ctx.uow(), notifier=ctx.notifier())

    try:
        dto = handler.handle(ctx.actor, order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order {dto.order_code} closed.")


@click.command("outbound-complete")
@click.option("--order", "order_id", required=True, help="Order ID.")
@pass_ctx
def scan_outbound_complete(ctx: CliContext, order_id: str) -> None:
    """Mark the order ready for delivery once every item has been scanned out."""
    handler = CompleteOutboundHandler(ctx.uow(), notifier=ctx.notifier())

    try:
        dto = handler.handle(ctx.actor, order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order {dto.order_code} ready for delivery.")
