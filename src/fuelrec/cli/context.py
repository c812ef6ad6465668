#!/usr/bin/env python3
"""Helpers shared by the CLI command modules."""

import click

from ..core.config import Config, get_config
from ..core.quarters import QuarterWindow
from ..store.database import Database


def get_database(ctx: click.Context) -> Database:
    """Database for the current invocation, with the schema in place."""
    obj = ctx.ensure_object(dict)
    database = obj.get("database")
    if database is None:
        config: Config = obj.get("config") or get_config()
        database = Database.from_config(config)
        database.create_schema()
        obj["database"] = database
    return database


def resolve_window(quarter: str | None, start: str | None, end: str | None) -> QuarterWindow | None:
    """
    Build the matching window from CLI options.

    ``--quarter`` wins over ``--start``/``--end``; with neither the run is
    not date-bounded.
    """
    if quarter:
        try:
            return QuarterWindow.from_quarter_string(quarter)
        except ValueError as e:
            raise click.BadParameter(str(e), param_hint="--quarter") from e

    if start or end:
        if not (start and end):
            raise click.UsageError("--start and --end must be given together")
        try:
            return QuarterWindow.from_dates(start, end)
        except ValueError as e:
            raise click.BadParameter(str(e), param_hint="--start/--end") from e

    return None
