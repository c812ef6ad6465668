#!/usr/bin/env python3
"""
Admin CLI - Driver and Fuel Log Corrections

Driver listing and profile edits, deactivation, hand-entered fuel logs and
in-place fuel log corrections. Adding or editing a fuel log re-runs matching
for its driver unless ``--no-match`` is given.
"""

from typing import Any

import click
from sqlalchemy.exc import IntegrityError

from ..matching.errors import DriverNotFoundError
from ..matching.service import MatchingService
from ..store.admin import create_fuel_log, edit_driver, set_driver_active, update_fuel_log
from ..store.database import Database
from ..store.queries import list_drivers
from ..store.schema import Branch
from .context import get_database

_BRANCH_CHOICE = click.Choice([branch.value for branch in Branch], case_sensitive=False)


@click.group()
def drivers() -> None:
    """Driver management commands."""
    pass


@drivers.command(name="list")
@click.option("--all", "include_inactive", is_flag=True, help="Include deactivated drivers")
@click.pass_context
def list_(ctx: click.Context, include_inactive: bool) -> None:
    """List drivers with their ids."""
    database = get_database(ctx)
    with database.session_scope() as session:
        rows = [
            (d.id, d.name, d.alias, d.branch.value if d.branch else "-", d.is_active)
            for d in list_drivers(session, include_inactive=include_inactive)
        ]

    if not rows:
        click.echo("No drivers found")
        return

    for driver_id, name, alias, branch, active in rows:
        line = f"{driver_id}  {branch:<3}  {name}"
        if alias:
            line += f" (alias: {alias})"
        if not active:
            line += "  [inactive]"
        click.echo(line)


@drivers.command()
@click.argument("driver_id")
@click.option("--name", help="Display name")
@click.option("--alias", help="Alternate cardholder spelling ('' clears it)")
@click.option("--branch", type=_BRANCH_CHOICE, help="Operating branch")
@click.option("--last-four", "card_last_four", help="Card last four digits ('' clears it)")
@click.pass_context
def edit(
    ctx: click.Context,
    driver_id: str,
    name: str | None,
    alias: str | None,
    branch: str | None,
    card_last_four: str | None,
) -> None:
    """
    Edit a driver's profile.

    Examples:
      fuelrec drivers edit 6f1c... --alias "JON SMITH"
      fuelrec drivers edit 6f1c... --branch DEN --last-four 4821
    """
    if name is None and alias is None and branch is None and card_last_four is None:
        raise click.UsageError("Nothing to change; pass at least one option")

    try:
        with get_database(ctx).session_scope() as session:
            driver = edit_driver(
                session,
                driver_id,
                name=name,
                alias=alias,
                branch=Branch(branch.upper()) if branch else None,
                card_last_four=card_last_four,
            )
            label = driver.name
    except DriverNotFoundError as e:
        raise click.ClickException(str(e)) from e
    except ValueError as e:
        raise click.BadParameter(str(e)) from e

    click.echo(f"✅ Updated driver {label}")


def _set_active(ctx: click.Context, driver_id: str, active: bool) -> None:
    try:
        with get_database(ctx).session_scope() as session:
            label = set_driver_active(session, driver_id, active).name
    except DriverNotFoundError as e:
        raise click.ClickException(str(e)) from e
    click.echo(f"✅ {'Reactivated' if active else 'Deactivated'} driver {label}")


@drivers.command()
@click.argument("driver_id")
@click.pass_context
def deactivate(ctx: click.Context, driver_id: str) -> None:
    """Deactivate a driver; their records and matches are kept."""
    _set_active(ctx, driver_id, False)


@drivers.command()
@click.argument("driver_id")
@click.pass_context
def reactivate(ctx: click.Context, driver_id: str) -> None:
    """Reactivate a deactivated driver."""
    _set_active(ctx, driver_id, True)


@click.group(name="fuel-logs")
def fuel_logs() -> None:
    """Fuel log entry and correction commands."""
    pass


@fuel_logs.command(name="edit")
@click.argument("fuel_log_id")
@click.option("--date", "date_", help="Purchase date (YYYY-MM-DD or MM/DD/YYYY)")
@click.option("--cost", help="Purchase cost in dollars")
@click.option("--gallons", help="Gallons purchased")
@click.option("--seller-name", help="Seller name")
@click.option("--seller-state", help="Seller state")
@click.option("--vehicle", "vehicle_id", help="Vehicle id")
@click.option("--invoice", "invoice_number", help="Invoice number")
@click.option("--odometer", help="Odometer reading")
@click.option("--receipt", help="Receipt reference")
@click.option("--no-match", is_flag=True, help="Skip re-running matching for the driver")
@click.pass_context
def edit_fuel_log(ctx: click.Context, fuel_log_id: str, date_: str | None, no_match: bool, **fields: Any) -> None:
    """
    Correct a fuel log in place.

    Examples:
      fuelrec fuel-logs edit 9a2b... --gallons 18.25 --cost 52.10
    """
    changes = {name: value for name, value in fields.items() if value is not None}
    if date_ is not None:
        changes["date"] = date_
    if not changes:
        raise click.UsageError("Nothing to change; pass at least one field option")

    database = get_database(ctx)
    try:
        with database.session_scope() as session:
            driver_id = update_fuel_log(session, fuel_log_id, changes).driver_id
    except LookupError as e:
        raise click.ClickException(str(e)) from e
    except IntegrityError as e:
        raise click.ClickException("Edit would duplicate another fuel log (same vehicle, invoice and date)") from e
    except ValueError as e:
        raise click.BadParameter(str(e)) from e

    click.echo(f"✅ Updated fuel log {fuel_log_id}")

    if not no_match:
        _rematch(database, "fuel_log_edit", driver_id, "edit kept")


def _rematch(database: Database, upload_type: str, driver_id: str, kept: str) -> None:
    matches = MatchingService(database).process_upload_matching(upload_type, driver_id)
    if matches is None:
        click.echo(f"⚠️  Matching failed for driver {driver_id}; {kept}", err=True)
    else:
        click.echo(f"   Driver now has {len(matches)} active matches")


@fuel_logs.command(name="add")
@click.argument("driver_id")
@click.option("--vehicle", "vehicle_id", required=True, help="Vehicle id")
@click.option("--date", "date_", required=True, help="Purchase date (YYYY-MM-DD or MM/DD/YYYY)")
@click.option("--gallons", required=True, help="Gallons purchased")
@click.option("--seller-state", required=True, help="Seller state")
@click.option("--cost", help="Purchase cost in dollars (blank records 0)")
@click.option("--invoice", "invoice_number", help="Invoice number")
@click.option("--seller-name", help="Seller name")
@click.option("--odometer", help="Odometer reading")
@click.option("--receipt", help="Receipt reference")
@click.option("--no-match", is_flag=True, help="Skip re-running matching for the driver")
@click.pass_context
def add_fuel_log(ctx: click.Context, driver_id: str, date_: str, no_match: bool, **fields: Any) -> None:
    """
    Enter a fuel purchase by hand.

    Examples:
      fuelrec fuel-logs add 6f1c... --vehicle MHK-101 --date 2024-07-03 \\
        --gallons 18.25 --cost 52.10 --seller-state KS
    """
    entry = {name: value for name, value in fields.items() if value is not None}
    entry["date"] = date_

    database = get_database(ctx)
    try:
        with database.session_scope() as session:
            fuel_log_id = create_fuel_log(session, driver_id, entry).id
    except DriverNotFoundError as e:
        raise click.ClickException(str(e)) from e
    except IntegrityError as e:
        raise click.ClickException("A fuel log with the same vehicle, invoice and date already exists") from e
    except ValueError as e:
        raise click.BadParameter(str(e)) from e

    click.echo(f"✅ Added fuel log {fuel_log_id}")

    if not no_match:
        _rematch(database, "fuel_log_entry", driver_id, "entry kept")
