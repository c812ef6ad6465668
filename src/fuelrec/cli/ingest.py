#!/usr/bin/env python3
"""
Import CLI - Card Export Upload Commands

Loads card-portal CSV exports and, unless told otherwise, re-runs matching
for every driver that gained rows.
"""

from pathlib import Path

import click

from ..ingest import ImportResult, import_fuel_logs, import_transactions, load_expense_rows, load_fuel_rows
from ..matching.service import MatchingService
from .context import get_database


def _echo_result(result: ImportResult, label: str, verbose: bool) -> None:
    click.echo(f"✅ Imported {result.transactions_created} {label}")
    click.echo(f"   Duplicates skipped: {result.duplicates_skipped}")
    if result.non_drivers_skipped:
        click.echo(f"   Non-driver lines skipped: {result.non_drivers_skipped}")
    if result.drivers_created:
        click.echo(f"   Drivers created: {result.drivers_created}")
    if result.validation_errors:
        click.echo(f"   Rows with problems: {len(result.validation_errors)}")
        if verbose:
            for error in result.validation_errors:
                click.echo(f"     - {error}")


def _run_matching(ctx: click.Context, upload_type: str, result: ImportResult) -> None:
    if not result.affected_driver_ids:
        return

    service = MatchingService(get_database(ctx))
    click.echo(f"Matching {len(result.affected_driver_ids)} affected driver(s)...")
    for driver_id in sorted(result.affected_driver_ids):
        matches = service.process_upload_matching(upload_type, driver_id)
        if matches is None:
            click.echo(f"⚠️  Matching failed for driver {driver_id}; upload kept", err=True)
        elif ctx.obj.get("verbose", False):
            click.echo(f"   Driver {driver_id}: {len(matches)} active matches")


@click.group(name="import")
def import_() -> None:
    """Card export upload commands."""
    pass


@import_.command()
@click.argument("csv_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--no-match", is_flag=True, help="Skip matching after the upload")
@click.pass_context
def transactions(ctx: click.Context, csv_file: Path, no_match: bool) -> None:
    """
    Import an expense-card statement export.

    Lines whose cardholder is not a known driver are skipped.

    Examples:
      fuelrec import transactions data/report.csv
      fuelrec import transactions data/report.csv --no-match
    """
    try:
        rows, errors = load_expense_rows(csv_file)
        result = import_transactions(get_database(ctx), rows, errors)
    except (OSError, ValueError) as e:
        click.echo(f"❌ Error importing {csv_file}: {e}", err=True)
        raise click.ClickException(str(e)) from e

    _echo_result(result, "transactions", ctx.obj.get("verbose", False))
    if not no_match:
        _run_matching(ctx, "transactions", result)


@import_.command(name="fuel-logs")
@click.argument("csv_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--no-match", is_flag=True, help="Skip matching after the upload")
@click.pass_context
def fuel_logs(ctx: click.Context, csv_file: Path, no_match: bool) -> None:
    """
    Import a fuel-card portal export.

    Drivers named in the export are created when they do not exist yet.

    Examples:
      fuelrec import fuel-logs data/fuel-report.csv
    """
    try:
        rows, errors = load_fuel_rows(csv_file)
        result = import_fuel_logs(get_database(ctx), rows, errors)
    except (OSError, ValueError) as e:
        click.echo(f"❌ Error importing {csv_file}: {e}", err=True)
        raise click.ClickException(str(e)) from e

    _echo_result(result, "fuel logs", ctx.obj.get("verbose", False))
    if not no_match:
        _run_matching(ctx, "fuel_logs", result)
