"""End-to-end tests of the click CLI against a temporary JSON store."""

import re

import pytest
from click.testing import CliRunner

from ofe.infrastructure.cli.main import cli


@pytest.fixture
def run(tmp_path):
    runner = CliRunner()

    def invoke(role, *args, actor_id=None, company=None):
        options = ["--data-dir", str(tmp_path), "--platform", "plat-1"]
        if role is not None:
            options += ["--actor-id", actor_id or f"{role.lower()}-1", "--role", role]
        if company:
            options += ["--company", company]
        return runner.invoke(cli, options + list(args))

    return invoke


@pytest.fixture
def stage_id(run):
    """Configure a platform with rates and one stage asset; return its ID."""
    assert run("ADMIN", "setup", "platform").exit_code == 0
    assert run("ADMIN", "setup", "warehouse-rate", "--rate", "50").exit_code == 0
    result = run(
        "ADMIN", "setup", "transport-rate",
        "--region", "Dubai", "--trip-type", "ROUND_TRIP", "--rate", "300",
    )
    assert result.exit_code == 0, result.output
    result = run(
        "LOGISTICS", "asset", "create",
        "--company", "comp-1", "--name", "Modular Stage", "--qr", "QR-STAGE",
        "--quantity", "1", "--tracking", "INDIVIDUAL", "--volume", "8",
    )
    assert result.exit_code == 0, result.output
    return re.search(r"Created asset (\S+)", result.output).group(1)


def _create_order(run, asset_id):
    result = run(
        "CLIENT", "order", "create",
        "--items", f"{asset_id}:1",
        "--start", "2099-06-01", "--end", "2099-06-02",
        "--venue", "Madinat Arena", "--city", "Dubai",
        "--contact-name", "Layla Haddad", "--contact-email", "layla@example.com",
        company="comp-1",
    )
    assert result.exit_code == 0, result.output
    return result, re.search(r"ID:\s+(\S+)", result.output).group(1)


class TestCli:

    def test_setup_platform(self, run):
        result = run("ADMIN", "setup", "platform", "--margin", "20", "--lead-hours", "48")
        assert result.exit_code == 0, result.output
        assert "Platform plat-1 configured (margin 20%, lead 48h, Asia/Dubai)" in result.output

    def test_fractional_lead_hours(self, run):
        result = run("ADMIN", "setup", "platform", "--lead-hours", "1.5")
        assert result.exit_code == 0, result.output
        assert "lead 1.5h" in result.output

    def test_actor_required(self, run):
        result = run(None, "order", "show", "--id", "order-1")
        assert result.exit_code != 0
        assert "--actor-id, --role and --platform are required" in result.output

    def test_domain_errors_reported(self, run):
        result = run("LOGISTICS", "setup", "warehouse-rate", "--rate", "50")
        assert result.exit_code == 1
        assert "LOGISTICS users cannot change pricing configuration" in result.output

    def test_asset_show_by_qr(self, run, stage_id):
        result = run("LOGISTICS", "asset", "show", "--ref", "QR-STAGE")
        assert result.exit_code == 0, result.output
        assert stage_id in result.output
        assert "1/1 available" in result.output

    def test_order_lifecycle(self, run, stage_id):
        created, order_id = _create_order(run, stage_id)
        assert "PRICING_REVIEW" in created.output
        assert "Pricing (estimate)" in created.output
        assert "AED 875.00" in created.output

        quoted = run("LOGISTICS", "order", "quote", "--id", order_id)
        assert quoted.exit_code == 0, quoted.output
        assert "QUOTED" in quoted.output

        approved = run("CLIENT", "order", "approve", "--id", order_id, company="comp-1")
        assert approved.exit_code == 0, approved.output
        assert "Order is now CONFIRMED" in approved.output

        shown = run("LOGISTICS", "order", "show", "--id", order_id, "--history")
        assert "status=CONFIRMED" in shown.output
        assert "Status history" in shown.output

    def test_trip_type_change(self, run, stage_id):
        run(
            "ADMIN", "setup", "transport-rate",
            "--region", "Dubai", "--trip-type", "ONE_WAY", "--rate", "200",
        )
        _, order_id = _create_order(run, stage_id)
        result = run(
            "LOGISTICS", "order", "trip-type", "--id", order_id,
            "--type", "ONE_WAY", "--reason", "Client collects the stage",
        )
        assert result.exit_code == 0, result.output
        assert "Trip:     ONE_WAY" in result.output
        assert "AED 750.00" in result.output

    def test_outbound_scanning_gates_dispatch(self, run, stage_id):
        _, order_id = _create_order(run, stage_id)
        run("LOGISTICS", "order", "quote", "--id", order_id)
        run("CLIENT", "order", "approve", "--id", order_id, company="comp-1")
        prepared = run("LOGISTICS", "order", "progress", "--id", order_id, "--to", "IN_PREPARATION")
        assert prepared.exit_code == 0, prepared.output

        early = run("LOGISTICS", "scan", "outbound-complete", "--order", order_id)
        assert early.exit_code == 1
        assert "Outbound scanning incomplete" in early.output

        assert run("LOGISTICS", "scan", "outbound", "--order", order_id, "--qr", "QR-STAGE").exit_code == 0
        progress = run("LOGISTICS", "scan", "progress", "--order", order_id, "--outbound")
        assert "Outbound: 1/1 units (100%)" in progress.output

        done = run("LOGISTICS", "scan", "outbound-complete", "--order", order_id)
        assert done.exit_code == 0, done.output
        assert "ready for delivery" in done.output

    def test_unavailable_asset_rejected(self, run, stage_id):
        _, order_id = _create_order(run, stage_id)
        run("LOGISTICS", "order", "quote", "--id", order_id)
        run("CLIENT", "order", "approve", "--id", order_id, company="comp-1")

        result = run(
            "CLIENT", "order", "create",
            "--items", f"{stage_id}:1",
            "--start", "2099-06-01", "--end", "2099-06-02",
            "--venue", "Madinat Arena", "--city", "Dubai",
            "--contact-name", "Layla Haddad", "--contact-email", "layla@example.com",
            company="comp-1",
        )
        assert result.exit_code == 1
        assert "Insufficient availability" in result.output

    def test_bad_item_format(self, run, stage_id):
        result = run(
            "CLIENT", "order", "create",
            "--items", stage_id,
            "--start", "2099-06-01", "--end", "2099-06-02",
            "--venue", "Madinat Arena", "--city", "Dubai",
            "--contact-name", "Layla Haddad", "--contact-email", "layla@example.com",
            company="comp-1",
        )
        assert result.exit_code == 2
        assert "Expected 'AssetId:Quantity'" in result.output

    def test_sweep_runs_without_actor(self, run, stage_id):
        result = run(None, "sweep", "run")
        assert result.exit_code == 0, result.output
        assert "Started: 0  Ended: 0" in result.output
