"""CLI command for the daily event-date sweep (run from cron)."""

from __future__ import annotations

import click

from ofe.application.event_date_sweep import EventDateSweepHandler
from ofe.infrastructure.cli.context import CliContext, pass_ctx


@click.command("run")
@pass_ctx
def sweep_run(ctx: CliContext) -> None:
    """Move delivered orders whose event started to IN_USE, and ended ones to AWAITING_RETURN."""
    result = EventDateSweepHandler(ctx.uow(), notifier=ctx.notifier()).handle()

    click.echo(f"Started: {len(result.started)}  Ended: {len(result.ended)}")
    for code in result.started:
        click.echo(f"  {code} -> IN_USE")
    for code in result.ended:
        click.echo(f"  {code} -> AWAITING_RETURN")
    if result.skipped_platforms:
        click.echo(f"Skipped platforms without a system user: {', '.join(result.skipped_platforms)}")
