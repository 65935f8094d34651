"""barakah nisab: show the current nisab thresholds."""

from __future__ import annotations

from decimal import Decimal

import click
from rich.table import Table

from barakah.core.cli.common import build_normalizer, build_tracker, console, load_settings, money
from barakah.zakat.models import NisabBasis


@click.command()
@click.option("--currency", default=None, help="Currency to show thresholds in (default: configured base).")
@click.option("--gold-price", type=Decimal, default=None, help="Gold price per gram in USD.")
@click.option("--silver-price", type=Decimal, default=None, help="Silver price per gram in USD.")
@click.pass_context
def nisab(ctx: click.Context, currency: str | None, gold_price: Decimal | None, silver_price: Decimal | None) -> None:
    """Show gold and silver nisab thresholds."""
    settings = load_settings(ctx)
    normalizer = build_normalizer(settings, currency)
    base = normalizer.base_currency

    table = Table(title=f"Nisab ({base})")
    table.add_column("Basis")
    table.add_column("Grams", justify="right")
    table.add_column("Price / g (USD)", justify="right")
    table.add_column("Threshold", justify="right")

    for basis, price in ((NisabBasis.GOLD, gold_price), (NisabBasis.SILVER, silver_price)):
        tracker = build_tracker(settings, basis=basis, price_per_gram=price)
        table.add_row(
            basis.value,
            str(basis.grams),
            money(tracker.price_per_gram),
            money(tracker.threshold_in(base, normalizer), base),
        )

    console.print(table)
    for advisory in normalizer.advisories:
        console.print(f"[yellow]{advisory}[/yellow]")
