"""CLI commands for order line items."""

from __future__ import annotations

import click

from ofe.application.add_line_item import AddCatalogLineItemHandler, AddCustomLineItemHandler
from ofe.application.dto import LineItemDTO
from ofe.application.list_line_items import ListLineItemsHandler
from ofe.application.update_line_item import UpdateLineItemHandler
from ofe.application.void_line_item import VoidLineItemHandler
from ofe.domain.exceptions import DomainException
from ofe.domain.model.line_item import BillingMode, LineItemCategory
from ofe.infrastructure.cli.context import CliContext, pass_ctx
from ofe.infrastructure.cli.order_commands import parse_decimal

BILLING_MODES = click.Choice([m.value for m in BillingMode])


def _display_line_item(dto: LineItemDTO) -> None:
    voided = f"  VOIDED ({dto.void_reason})" if dto.is_voided else ""
    qty = f"{dto.quantity} {dto.unit or ''} x {dto.unit_rate}" if dto.quantity and dto.unit_rate else ""
    click.echo(
        f"  {dto.line_item_code:<10} {dto.line_item_type:<8} {dto.category:<10} "
        f"{dto.description:<30} {qty:<28} {dto.total:>14} {dto.billing_mode}{voided}"
    )


@click.command("add")
@click.option("--order", "order_id", required=True, help="Order ID.")
@click.option("--service-type", default=None, help="Catalog service type ID.")
@click.option("--description", default=None, help="Description (custom items).")
@click.option("--category", type=click.Choice([c.value for c in LineItemCategory]), default=None)
@click.option("--quantity", default=None, help="Quantity.")
@click.option("--unit", default=None, help="Unit (custom items).")
@click.option("--unit-rate", default=None, help="Unit rate; catalog items default to the service rate.")
@click.option("--total", default=None, help="Total (custom items).")
@click.option("--billing", type=BILLING_MODES, default=BillingMode.BILLABLE.value, show_default=True)
@click.option("--notes", default=None)
@pass_ctx
def line_item_add(
    ctx: CliContext,
    order_id: str,
    service_type: str | None,
    description: str | None,
    category: str | None,
    quantity: str | None,
    unit: str | None,
    unit_rate: str | None,
    total: str | None,
    billing: str,
    notes: str | None,
) -> None:
    """Add a catalog (--service-type) or custom (--description) charge."""
    if bool(service_type) == bool(description):
        raise click.ClickException("Give either --service-type or --description")

    try:
        if service_type:
            if quantity is None:
                raise click.ClickException("--quantity is required for catalog items")
            dto = AddCatalogLineItemHandler(ctx.uow()).handle(
                ctx.actor,
                order_id,
                service_type,
                parse_decimal(quantity, "quantity"),
                unit_rate=ctx.money(unit_rate),
                notes=notes,
                billing_mode=BillingMode(billing),
            )
        else:
            if category is None:
                raise click.ClickException("--category is required for custom items")
            dto = AddCustomLineItemHandler(ctx.uow()).handle(
                ctx.actor,
                order_id,
                description,
                LineItemCategory(category),
                total=ctx.money(total),
                quantity=parse_decimal(quantity, "quantity"),
                unit=unit,
                unit_rate=ctx.money(unit_rate),
                notes=notes,
                billing_mode=BillingMode(billing),
            )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Line item {dto.line_item_code} added ({dto.id}).")
    _display_line_item(dto)


@click.command("update")
@click.option("--id", "line_item_id", required=True, help="Line item ID.")
@click.option("--quantity", default=None)
@click.option("--unit", default=None)
@click.option("--unit-rate", default=None)
@click.option("--total", default=None, help="New total (custom items only).")
@click.option("--billing", type=BILLING_MODES, default=None)
@click.option("--notes", default=None)
@pass_ctx
def line_item_update(
    ctx: CliContext,
    line_item_id: str,
    quantity: str | None,
    unit: str | None,
    unit_rate: str | None,
    total: str | None,
    billing: str | None,
    notes: str | None,
) -> None:
    """Edit a line item (catalog totals are re-derived)."""
    handler = UpdateLineItemHandler(ctx.uow())

    try:
        dto = handler.handle(
            ctx.actor,
            line_item_id,
            quantity=parse_decimal(quantity, "quantity"),
            unit_rate=ctx.money(unit_rate),
            unit=unit,
            total=ctx.money(total),
            notes=notes,
            billing_mode=BillingMode(billing) if billing else None,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_line_item(dto)


@click.command("void")
@click.option("--id", "line_item_id", required=True, help="Line item ID.")
@click.option("--reason", required=True, help="Why the charge is voided.")
@pass_ctx
def line_item_void(ctx: CliContext, line_item_id: str, reason: str) -> None:
    """Void a line item (kept for the audit trail)."""
    handler = VoidLineItemHandler(ctx.uow())

    try:
        dto = handler.handle(ctx.actor, line_item_id, reason)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Line item {dto.line_item_code} voided.")


@click.command("list")
@click.option("--order", "order_id", required=True, help="Order ID.")
@click.option("--active-only", is_flag=True, default=False, help="Hide voided items.")
@pass_ctx
def line_item_list(ctx: CliContext, order_id: str, active_only: bool) -> None:
    """List the charges of an order with their totals."""
    handler = ListLineItemsHandler(ctx.uow())

    try:
        items, totals = handler.handle(ctx.actor, order_id, include_voided=not active_only)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not items:
        click.echo("No line items.")
    for dto in items:
        _display_line_item(dto)
    click.echo(f"  Catalog total: {totals.catalog_total}")
    click.echo(f"  Custom total:  {totals.custom_total}")
