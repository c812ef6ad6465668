#!/usr/bin/env python3
"""
Main CLI Entry Point for Fuel Reconciliation

Provides the unified command-line interface for uploads and matching.
"""

import logging
import os

import click

from ..core.config import get_config, reload_config
from .context import get_database


@click.group()
@click.option(
    "--config-env",
    type=click.Choice(["development", "test", "production"]),
    help="Override environment configuration",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx: click.Context, config_env: str | None, verbose: bool, debug: bool) -> None:
    """
    Fuel Reconciliation - Fuel-Card and Expense-Card Matching

    Imports card-portal exports and pairs each driver's expense-card
    transactions with their fuel-card purchases.
    """
    ctx.ensure_object(dict)

    if config_env:
        os.environ["FUELREC_ENV"] = config_env
    if debug:
        os.environ["LOG_LEVEL"] = "DEBUG"

    try:
        config = reload_config() if (config_env or debug) else get_config()
    except ValueError as e:
        raise click.ClickException(str(e)) from e

    if debug:
        logging.getLogger().setLevel(logging.DEBUG)
        logging.getLogger("fuelrec").setLevel(logging.DEBUG)

    ctx.obj["verbose"] = verbose
    ctx.obj["debug"] = debug
    ctx.obj["config"] = config

    if verbose:
        click.echo(f"Environment: {config.environment.value}")
        click.echo(f"Data directory: {config.data_dir}")

    if debug:
        click.echo("Debug logging enabled")


@main.command()
def version() -> None:
    """Show version information."""
    from fuelrec import __author__, __version__

    click.echo(f"Fuel Reconciliation v{__version__}")
    click.echo(f"Author: {__author__}")


@main.command()
@click.pass_context
def config(ctx: click.Context) -> None:
    """Show current configuration (database credentials redacted)."""
    settings = ctx.obj["config"].to_dict()

    click.echo("Current Configuration:")
    click.echo(f"  Environment: {settings['environment']}")
    click.echo(f"  Data Directory: {settings['data_dir']}")
    click.echo(f"  Database URL: {settings['database']['url']}")
    click.echo(f"  Date Tolerance: {settings['matching']['date_tolerance_days']} days")
    click.echo(f"  Match Attempts: {settings['matching']['max_attempts']}")
    click.echo(f"  Debug Mode: {settings['debug']}")
    click.echo(f"  Log Level: {settings['log_level']}")


@main.group()
def db() -> None:
    """Database management commands."""
    pass


@db.command()
@click.pass_context
def init(ctx: click.Context) -> None:
    """Create the database tables if they do not exist."""
    database = get_database(ctx)
    click.echo(f"✅ Database ready: {database.engine.url.render_as_string(hide_password=True)}")


from .admin import drivers, fuel_logs  # noqa: E402
from .ingest import import_  # noqa: E402
from .matching import match  # noqa: E402

main.add_command(drivers)
main.add_command(fuel_logs)
main.add_command(import_)
main.add_command(match)


if __name__ == "__main__":
    main()
