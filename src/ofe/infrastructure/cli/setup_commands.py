"""CLI commands for platform configuration and rate tables."""

from __future__ import annotations

import click

from ofe.application.configure_platform import ConfigurePlatformHandler
from ofe.application.manage_rates import (
    AddCityHandler,
    AddServiceTypeHandler,
    SetTransportRateHandler,
    SetWarehouseRateHandler,
)
from ofe.domain.exceptions import DomainException
from ofe.domain.model.line_item import LineItemCategory
from ofe.domain.model.pricing import TripType, VehicleType
from ofe.infrastructure import bootstrap
from ofe.infrastructure.cli.context import CliContext, pass_ctx
from ofe.infrastructure.cli.order_commands import parse_decimal


@click.command("platform")
@click.option("--margin", default="25", show_default=True, help="Default margin percent.")
@click.option("--lead-hours", type=float, default=24, show_default=True, help="Minimum lead time.")
@click.option("--include-weekends", is_flag=True, default=False, help="Count weekends as work days.")
@click.option("--weekend-days", default="6,7", show_default=True, help="ISO weekdays (Mon=1).")
@click.option("--timezone", "tz", default=None, help="Platform timezone (default from settings).")
@click.option("--currency", default=None, help="Currency (default from settings).")
@pass_ctx
def setup_platform(
    ctx: CliContext,
    margin: str,
    lead_hours: float,
    include_weekends: bool,
    weekend_days: str,
    tz: str | None,
    currency: str | None,
) -> None:
    """Configure the current platform."""
    try:
        days = [int(d) for d in weekend_days.split(",") if d.strip()]
    except ValueError:
        raise click.BadParameter(f"Invalid weekend days '{weekend_days}'.")

    handler = ConfigurePlatformHandler(ctx.uow())

    try:
        config = handler.handle(
            ctx.actor,
            default_margin_percent=parse_decimal(margin, "margin"),
            feasibility={
                "minimum_lead_hours": lead_hours,
                "exclude_weekends": not include_weekends,
                "weekend_days": days,
                "timezone": tz or ctx.settings.default_timezone,
            },
            currency=currency or ctx.settings.default_currency,
            system_actor_id=bootstrap.system_actor_id(ctx.settings, ctx.actor.platform_id),
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(
        f"Platform {config.platform_id} configured "
        f"(margin {config.default_margin_percent}%, lead {config.feasibility.minimum_lead_hours:g}h, "
        f"{config.feasibility.timezone})."
    )


@click.command("warehouse-rate")
@click.option("--rate", required=True, help="Warehouse operations rate per m3.")
@click.option("--for-company", "company_id", default=None, help="Company override.")
@pass_ctx
def setup_warehouse_rate(ctx: CliContext, rate: str, company_id: str | None) -> None:
    """Set the warehouse operations rate."""
    handler = SetWarehouseRateHandler(ctx.uow())

    try:
        config = handler.handle(ctx.actor, ctx.money(rate), company_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Warehouse rate for {company_id or 'platform default'}: {config.warehouse_ops_rate}")


@click.command("transport-rate")
@click.option("--region", required=True)
@click.option("--trip-type", type=click.Choice([t.value for t in TripType]), required=True)
@click.option("--vehicle", type=click.Choice([v.value for v in VehicleType]),
              default=VehicleType.STANDARD.value, show_default=True)
@click.option("--rate", required=True)
@click.option("--for-company", "company_id", default=None, help="Company override.")
@pass_ctx
def setup_transport_rate(
    ctx: CliContext, region: str, trip_type: str, vehicle: str, rate: str, company_id: str | None
) -> None:
    """Set a transport rate."""
    handler = SetTransportRateHandler(ctx.uow())

    try:
        transport_rate = handler.handle(
            ctx.actor, region, TripType(trip_type), VehicleType(vehicle), ctx.money(rate), company_id
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(
        f"Transport {transport_rate.region}/{trip_type}/{vehicle} for "
        f"{company_id or 'platform default'}: {transport_rate.rate}"
    )


@click.command("city")
@click.option("--id", "city_id", required=True)
@click.option("--name", required=True)
@click.option("--region", required=True)
@pass_ctx
def setup_city(ctx: CliContext, city_id: str, name: str, region: str) -> None:
    """Register a city and its transport region."""
    handler = AddCityHandler(ctx.uow())

    try:
        city = handler.handle(ctx.actor, city_id, name, region)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"City {city.name} ({city.id}) -> {city.region}")


@click.command("service-type")
@click.option("--id", "service_type_id", required=True)
@click.option("--name", required=True)
@click.option("--category", type=click.Choice([c.value for c in LineItemCategory]), required=True)
@click.option("--unit", required=True)
@click.option("--rate", required=True, help="Default unit rate.")
@pass_ctx
def setup_service_type(
    ctx: CliContext, service_type_id: str, name: str, category: str, unit: str, rate: str
) -> None:
    """Add a catalog service type."""
    handler = AddServiceTypeHandler(ctx.uow())

    try:
        service_type = handler.handle(
            ctx.actor, service_type_id, name, LineItemCategory(category), unit, ctx.money(rate)
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Service type {service_type.name}: {service_type.default_rate} per {service_type.unit}")
