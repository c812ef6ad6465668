#!/usr/bin/env python3
"""
Match CLI - Reconciliation Commands

Stands in for the back-office matching endpoint: run matching for a
driver, show the reconciliation for a window, and summarize active matches.
"""

from datetime import datetime
from pathlib import Path

import click

from ..core.currency import format_cents
from ..core.json_utils import format_json, write_json
from ..matching.errors import MatchingError
from ..matching.service import MatchingService
from .context import get_database, resolve_window

_window_options = [
    click.option("--quarter", help="Quarter to reconcile (YYYY-QN), e.g. 2024-Q3"),
    click.option("--start", help="Window start date (YYYY-MM-DD)"),
    click.option("--end", help="Window end date (YYYY-MM-DD)"),
]


def window_options(func):  # type: ignore[no-untyped-def]
    for option in reversed(_window_options):
        func = option(func)
    return func


@click.group()
def match() -> None:
    """Transaction / fuel log matching commands."""
    pass


@match.command()
@click.option("--driver", "driver_id", required=True, help="Driver ID")
@window_options
@click.option("--output", type=click.Path(dir_okay=False, path_type=Path), help="Write results as JSON")
@click.pass_context
def run(
    ctx: click.Context,
    driver_id: str,
    quarter: str | None,
    start: str | None,
    end: str | None,
    output: Path | None,
) -> None:
    """
    Recompute and save matches for one driver.

    Without a window every stored record of the driver is matched.

    Examples:
      fuelrec match run --driver 6f1c... --quarter 2024-Q3
      fuelrec match run --driver 6f1c... --start 2024-07-01 --end 2024-07-31 --output q3.json
    """
    window = resolve_window(quarter, start, end)
    service = MatchingService(get_database(ctx))

    if ctx.obj.get("verbose", False):
        click.echo(f"Driver: {driver_id}")
        click.echo(f"Window: {window or 'all dates'}")
        click.echo()

    try:
        matches = service.find_matches_for_driver(driver_id, window)
        statistics = service.get_statistics(driver_id)
    except MatchingError as e:
        click.echo(f"❌ Error during matching: {e}", err=True)
        raise click.ClickException(str(e)) from e

    click.echo(f"✅ Saved {len(matches)} matches for driver {driver_id}")
    click.echo(f"   Average confidence: {statistics.average_confidence * 100:.1f}%")

    if output:
        write_json(
            output,
            {
                "metadata": {
                    "driver_id": driver_id,
                    "window": str(window) if window else None,
                    "timestamp": datetime.now().strftime("%Y-%m-%d_%H-%M-%S"),
                },
                "summary": statistics.to_dict(),
                "matches": [m.to_dict() for m in matches],
            },
        )
        click.echo(f"   Results saved to: {output}")


@match.command()
@click.option("--driver", "driver_id", required=True, help="Driver ID")
@window_options
@click.pass_context
def show(ctx: click.Context, driver_id: str, quarter: str | None, start: str | None, end: str | None) -> None:
    """Show matched pairs and unmatched records for a driver."""
    window = resolve_window(quarter, start, end)
    service = MatchingService(get_database(ctx))

    try:
        report = service.get_reconciliation_report(driver_id, window)
    except MatchingError as e:
        raise click.ClickException(str(e)) from e

    click.echo(f"Reconciliation for driver {driver_id} ({report.window_label})")
    click.echo(f"\nMatched ({len(report.matches)}):")
    for m in report.matches:
        click.echo(f"  {m.transaction_id} <-> {m.fuel_log_id}  {m.match_type.value}  {m.confidence:.2f}")

    click.echo(f"\nUnmatched transactions ({len(report.unmatched_transactions)}):")
    for record in report.unmatched_transactions:
        click.echo(f"  {record.date}  {record.amount}  {record.supplier_name or '-'}  [{record.id}]")
    if report.unmatched_transactions:
        click.echo(f"  Total: {format_cents(sum(r.amount.to_cents() for r in report.unmatched_transactions))}")

    click.echo(f"\nUnmatched fuel logs ({len(report.unmatched_fuel_logs)}):")
    for record in report.unmatched_fuel_logs:
        click.echo(f"  {record.date}  {record.amount}  {record.supplier_name or '-'}  [{record.id}]")
    if report.unmatched_fuel_logs:
        click.echo(f"  Total: {format_cents(sum(r.amount.to_cents() for r in report.unmatched_fuel_logs))}")

    if report.skipped_records:
        click.echo(f"\nSkipped records ({len(report.skipped_records)}):")
        for warning in report.skipped_records:
            click.echo(f"  {warning}")


@match.command()
@click.option("--driver", "driver_id", required=True, help="Driver ID")
@click.option("--json", "as_json", is_flag=True, help="Print statistics as JSON")
@click.pass_context
def stats(ctx: click.Context, driver_id: str, as_json: bool) -> None:
    """Summarize a driver's active matches."""
    statistics = MatchingService(get_database(ctx)).get_statistics(driver_id)

    if as_json:
        click.echo(format_json(statistics.to_dict()))
        return

    click.echo(f"Match statistics for driver {driver_id}:")
    click.echo(f"  Total matches: {statistics.total_matches}")
    click.echo(f"  Matched transactions: {statistics.matched_transactions}")
    click.echo(f"  Matched fuel logs: {statistics.matched_fuel_logs}")
    click.echo(f"  Average confidence: {statistics.average_confidence:.3f}")
    for match_type, count in statistics.match_type_breakdown.items():
        click.echo(f"  {match_type}: {count}")
