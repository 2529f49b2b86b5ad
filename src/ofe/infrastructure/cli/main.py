from __future__ import annotations

from pathlib import Path

import click

from ofe.domain.model.actor import Actor, ActorRole
from ofe.infrastructure.cli.asset_commands import asset_create, asset_show
from ofe.infrastructure.cli.context import CliContext
from ofe.infrastructure.cli.line_item_commands import (
    line_item_add,
    line_item_list,
    line_item_update,
    line_item_void,
)
from ofe.infrastructure.cli.order_commands import (
    order_approve,
    order_cancel,
    order_create,
    order_decline,
    order_feasibility,
    order_financial,
    order_logistics,
    order_progress,
    order_quote,
    order_return_to_logistics,
    order_show,
    order_submit_for_approval,
    order_trip_type,
    order_vehicle,
)
from ofe.infrastructure.cli.reskin_commands import (
    reskin_cancel,
    reskin_complete,
    reskin_list,
    reskin_process,
)
from ofe.infrastructure.cli.scan_commands import (
    scan_complete,
    scan_inbound,
    scan_outbound,
    scan_outbound_complete,
    scan_progress,
)
from ofe.infrastructure.cli.self_booking_commands import (
    self_booking_cancel,
    self_booking_create,
    self_booking_return,
)
from ofe.infrastructure.cli.setup_commands import (
    setup_city,
    setup_platform,
    setup_service_type,
    setup_transport_rate,
    setup_warehouse_rate,
)
from ofe.infrastructure.cli.sweep_commands import sweep_run
from ofe.infrastructure.config import get_settings
from ofe.infrastructure.logging_config import configure_logging


@click.group()
@click.option("--data-dir", type=click.Path(file_okay=False, path_type=Path), default=None,
              help="Directory holding the JSON store (default: OFE_DATA_DIR or ./data).")
@click.option("--actor-id", envvar="OFE_ACTOR_ID", default=None, help="Acting user ID.")
@click.option("--role", type=click.Choice([r.value for r in ActorRole]), envvar="OFE_ROLE",
              default=None, help="Acting user role.")
@click.option("--platform", "platform_id", envvar="OFE_PLATFORM", default=None, help="Platform ID.")
@click.option("--company", "company_id", envvar="OFE_COMPANY", default=None,
              help="Company ID (client users).")
@click.pass_context
def cli(
    ctx: click.Context,
    data_dir: Path | None,
    actor_id: str | None,
    role: str | None,
    platform_id: str | None,
    company_id: str | None,
) -> None:
    """OFE: Order Fulfillment & Pricing Engine"""
    settings = get_settings()
    if data_dir is not None:
        settings = settings.model_copy(update={"data_dir": data_dir})
    configure_logging(settings.log_level)

    actor = None
    if actor_id and role and platform_id:
        actor = Actor(id=actor_id, role=ActorRole(role), platform_id=platform_id, company_id=company_id)
    ctx.obj = CliContext(settings=settings, current_actor=actor)


@cli.group()
def order() -> None:
    """Manage orders."""


@cli.group("line-item")
def line_item() -> None:
    """Manage order line items."""


@cli.group()
def reskin() -> None:
    """Manage reskin (rebrand) requests."""


@cli.group()
def scan() -> None:
    """Warehouse QR scanning."""


@cli.group()
def asset() -> None:
    """Manage assets."""


@cli.group("self-booking")
def self_booking() -> None:
    """Manage internal self-bookings."""


@cli.group()
def sweep() -> None:
    """Scheduled jobs."""


@cli.group()
def setup() -> None:
    """Platform configuration and rate tables."""


# Register subcommands
order.add_command(order_approve)
order.add_command(order_cancel)
order.add_command(order_create)
order.add_command(order_decline)
order.add_command(order_feasibility)
order.add_command(order_financial)
order.add_command(order_logistics)
order.add_command(order_progress)
order.add_command(order_quote)
order.add_command(order_return_to_logistics)
order.add_command(order_show)
order.add_command(order_submit_for_approval)
order.add_command(order_trip_type)
order.add_command(order_vehicle)
line_item.add_command(line_item_add)
line_item.add_command(line_item_list)
line_item.add_command(line_item_update)
line_item.add_command(line_item_void)
reskin.add_command(reskin_cancel)
reskin.add_command(reskin_complete)
reskin.add_command(reskin_list)
reskin.add_command(reskin_process)
scan.add_command(scan_complete)
scan.add_command(scan_inbound)
scan.add_command(scan_outbound)
scan.add_command(scan_outbound_complete)
scan.add_command(scan_progress)
asset.add_command(asset_create)
asset.add_command(asset_show)
self_booking.add_command(self_booking_cancel)
self_booking.add_command(self_booking_create)
self_booking.add_command(self_booking_return)
sweep.add_command(sweep_run)
setup.add_command(setup_city)
setup.add_command(setup_platform)
setup.add_command(setup_service_type)
setup.add_command(setup_transport_rate)
setup.add_command(setup_warehouse_rate)
