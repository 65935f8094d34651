"""barakah hawl: countdown to the next hawl anniversary."""

from __future__ import annotations

from datetime import date, datetime

import click
from rich.table import Table

from barakah.core.cli.common import console
from barakah.zakat.hawl import HAWL_DAYS, HawlTracker
from barakah.zakat.hijri import to_hijri


@click.command()
@click.argument("start_date", type=click.DateTime(formats=["%Y-%m-%d"]))
@click.option("--today", type=click.DateTime(formats=["%Y-%m-%d"]), default=None, help="Evaluate as of this date.")
def hawl(start_date: datetime, today: datetime | None) -> None:
    """Show the hawl window that started on START_DATE (YYYY-MM-DD)."""
    now = today.date() if today else date.today()
    tracker = HawlTracker(start_date.date())
    info = tracker.info(now)

    table = Table(title="Hawl")
    table.add_column("Field")
    table.add_column("Value", justify="right")
    table.add_row("Start", info.start_date.isoformat())
    table.add_row("Next anniversary", f"{info.end_date.isoformat()} ({to_hijri(info.end_date)})")
    table.add_row("Days remaining", f"{tracker.days_remaining(now)} / {HAWL_DAYS}")
    table.add_row("Progress", f"{tracker.progress(now):.0%}")
    console.print(table)
