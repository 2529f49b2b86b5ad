"""CLI commands for assets."""

from __future__ import annotations

import click

from ofe.application.create_asset import CreateAssetHandler
from ofe.application.dto import AssetDTO
from ofe.application.show_asset import ShowAssetHandler
from ofe.domain.exceptions import DomainException
from ofe.domain.model.asset import AssetCondition, TrackingMethod
from ofe.infrastructure.cli.context import CliContext, pass_ctx
from ofe.infrastructure.cli.order_commands import parse_decimal


def _display_asset(dto: AssetDTO) -> None:
    click.echo(f"Asset '{dto.name}'  ({dto.id})")
    click.echo(f"  QR:        {dto.qr_code}")
    click.echo(f"  Tracking:  {dto.tracking_method}")
    click.echo(f"  Quantity:  {dto.available_quantity}/{dto.total_quantity} available")
    click.echo(f"  Condition: {dto.condition}  Status: {dto.status}")
    if dto.refurb_days_estimate:
        click.echo(f"  Refurb:    {dto.refurb_days_estimate} day(s)")
    if dto.transformed_to:
        click.echo(f"  Transformed into {dto.transformed_to}")
    if dto.transformed_from:
        click.echo(f"  Rebranded from {dto.transformed_from}")


@click.command("create")
@click.option("--company", "company_id", required=True, help="Owning company ID.")
@click.option("--name", required=True)
@click.option("--qr", "qr_code", required=True, help="QR code (prefix for individual units).")
@click.option("--quantity", type=int, required=True)
@click.option("--tracking", type=click.Choice([t.value for t in TrackingMethod]),
              default=TrackingMethod.BATCH.value, show_default=True)
@click.option("--volume", default="0", help="Volume per unit (m3).")
@click.option("--weight", default="0", help="Weight per unit (kg).")
@click.option("--condition", type=click.Choice([c.value for c in AssetCondition]),
              default=AssetCondition.GREEN.value, show_default=True)
@click.option("--refurb-days", type=int, default=None)
@click.option("--brand", "brand_id", default=None)
@click.option("--category", default="")
@pass_ctx
def asset_create(
    ctx: CliContext,
    company_id: str,
    name: str,
    qr_code: str,
    quantity: int,
    tracking: str,
    volume: str,
    weight: str,
    condition: str,
    refurb_days: int | None,
    brand_id: str | None,
    category: str,
) -> None:
    """Register inventory."""
    handler = CreateAssetHandler(ctx.uow())

    try:
        assets = handler.handle(
            ctx.actor,
            company_id,
            name,
            qr_code,
            quantity,
            tracking_method=TrackingMethod(tracking),
            volume_per_unit=parse_decimal(volume, "volume"),
            weight_per_unit=parse_decimal(weight, "weight"),
            condition=AssetCondition(condition),
            refurb_days_estimate=refurb_days,
            brand_id=brand_id,
            category=category,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    for dto in assets:
        click.echo(f"Created asset {dto.id}  QR {dto.qr_code}  x{dto.total_quantity}")


@click.command("show")
@click.option("--ref", "asset_ref", required=True, help="Asset ID or QR code.")
@pass_ctx
def asset_show(ctx: CliContext, asset_ref: str) -> None:
    """Show an asset."""
    handler = ShowAssetHandler(ctx.uow())

    try:
        dto = handler.handle(ctx.actor, asset_ref)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_asset(dto)
