"""CLI commands for reskin (rebrand) requests."""

from __future__ import annotations

import click

from ofe.application.cancel_reskin import CANCEL_ORDER, CONTINUE, CancelReskinHandler
from ofe.application.complete_reskin import CompleteReskinHandler
from ofe.application.list_reskins import ListReskinsHandler
from ofe.application.process_reskin import ProcessReskinHandler
from ofe.domain.exceptions import DomainException
from ofe.infrastructure.cli.context import CliContext, pass_ctx


@click.command("process")
@click.option("--order", "order_id", required=True, help="Order ID.")
@click.option("--item", "order_item_id", required=True, help="Order item flagged for rebranding.")
@click.option("--cost", required=True, help="Fabrication cost.")
@click.option("--notes", default=None, help="Admin notes.")
@pass_ctx
def reskin_process(ctx: CliContext, order_id: str, order_item_id: str, cost: str, notes: str | None) -> None:
    """Open a reskin request and charge its cost to the order."""
    handler = ProcessReskinHandler(ctx.uow())

    try:
        reskin, line_item = handler.handle(ctx.actor, order_id, order_item_id, ctx.money(cost), notes)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Reskin request {reskin.id} opened for '{reskin.original_asset_name}'.")
    click.echo(f"Charged as {line_item.line_item_code}: {line_item.total}")


@click.command("complete")
@click.option("--id", "reskin_id", required=True, help="Reskin request ID.")
@click.option("--new-name", required=True, help="Name of the rebranded asset.")
@click.option("--photo", "photos", multiple=True, required=True, help="Completion photo URL.")
@click.option("--notes", default=None)
@pass_ctx
def reskin_complete(
    ctx: CliContext, reskin_id: str, new_name: str, photos: tuple[str, ...], notes: str | None
) -> None:
    """Record finished fabrication (creates the new asset)."""
    handler = CompleteReskinHandler(ctx.uow(), notifier=ctx.notifier())

    try:
        reskin, asset, all_complete = handler.handle(ctx.actor, reskin_id, new_name, list(photos), notes)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Reskin {reskin.id} complete.")
    click.echo(f"New asset '{asset.name}' ({asset.id}), QR {asset.qr_code}")
    if all_complete:
        click.echo("All reskins for this order are complete.")


@click.command("cancel")
@click.option("--id", "reskin_id", required=True, help="Reskin request ID.")
@click.option("--reason", required=True, help="Why the reskin is cancelled.")
@click.option("--cancel-order", is_flag=True, default=False, help="Cancel the whole order as well.")
@pass_ctx
def reskin_cancel(ctx: CliContext, reskin_id: str, reason: str, cancel_order: bool) -> None:
    """Cancel a pending reskin request."""
    handler = CancelReskinHandler(ctx.uow(), notifier=ctx.notifier())

    try:
        result = handler.handle(
            ctx.actor, reskin_id, reason, order_action=CANCEL_ORDER if cancel_order else CONTINUE
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Reskin {result.reskin.id} cancelled.")
    if result.order_action == CANCEL_ORDER:
        click.echo("Order cancelled.")
    elif result.quote_revised:
        click.echo("Quote revised and re-sent to the client.")


@click.command("list")
@click.option("--order", "order_id", required=True, help="Order ID.")
@pass_ctx
def reskin_list(ctx: CliContext, order_id: str) -> None:
    """List the reskin requests of an order."""
    handler = ListReskinsHandler(ctx.uow())

    try:
        reskins = handler.handle(ctx.actor, order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not reskins:
        click.echo("No reskin requests.")
        return
    for r in reskins:
        click.echo(
            f"  {r.id}  {r.original_asset_name:<30} -> {r.target_brand:<20} {r.status}"
        )
