"""barakah calculate: run a calculation from a YAML or JSON file.

Input format::

    base_currency: USD
    items:
      - name: Cash on Hand
        amount: 10000
      - name: Short-term Investments
        amount: 20000
        answer: trading
        market_value: 22000
      - name: Bank Loan
        amount: 10000
        category: current_liabilities
        islamic_financing: false
      - name: Wedding set
        weight_grams: 40
        karat: 21k
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import click
import yaml
from rich.table import Table

from barakah.core.cli.common import build_normalizer, build_repository, build_tracker, console, load_settings, money
from barakah.core.config_schema import BarakahConfig
from barakah.core.exceptions import BarakahError
from barakah.zakat.calculator import DueMethod, ZakatResult
from barakah.zakat.models import CalculationRecord, LineItem
from barakah.zakat.session import ZakatSession

EXIT_UNRESOLVED = 2


def _load_input(path: str) -> dict[str, Any]:
    try:
        data = yaml.safe_load(Path(path).read_text())
    except yaml.YAMLError as e:
        raise click.ClickException(f"Cannot parse {path}: {e}") from e
    if not isinstance(data, dict) or not isinstance(data.get("items"), list):
        raise click.ClickException(f"{path} must contain an 'items' list")
    return data


def _add_entry(session: ZakatSession, entry: dict[str, Any]) -> LineItem:
    answer = entry.get("answer")
    market_value = entry.get("market_value")
    if "weight_grams" in entry:
        return session.add_gold(
            entry["weight_grams"],
            entry.get("karat", "24k"),
            entry.get("price_per_gram"),
            entry.get("currency"),
            name=entry.get("name"),
        )
    if "category" in entry:
        item = session.add_category_entry(
            entry["name"],
            entry["amount"],
            entry["category"],
            currency=entry.get("currency"),
            is_islamic_financing=entry.get("islamic_financing", False),
            description=entry.get("description", ""),
            term_type=entry.get("term_type"),
        )
        if market_value is not None and not answer:
            session.edit_item(item.id, market_value=market_value)
    else:
        item = session.add_item(
            entry["name"],
            entry["amount"],
            entry.get("currency"),
            market_value=None if answer else market_value,
        )
    if answer:
        session.answer(item.id, answer, market_value)
    return item


def _items_table(session: ZakatSession) -> Table:
    base = session.base_currency
    table = Table(title="Line items")
    table.add_column("Item")
    table.add_column("Amount", justify="right")
    table.add_column(f"Value ({base})", justify="right")
    table.add_column("Classification")
    for item in session.items:
        table.add_row(item.name, money(item.amount, item.currency), money(item.zakatable_value), item.classification.value)
    return table


def _summary_table(result: ZakatResult) -> Table:
    totals = result.totals
    currency = result.currency
    table = Table(title="Zakat")
    table.add_column("")
    table.add_column(currency, justify="right")
    table.add_row("Zakatable", money(totals.zakatable))
    table.add_row("Deductible", money(totals.deductible))
    table.add_row("Exempt", money(totals.exempt))
    table.add_row("Not deductible", money(totals.not_deductible))
    table.add_row("Net wealth", money(totals.net_wealth))
    table.add_row("Nisab", money(result.nisab_threshold))
    table.add_row("Meets nisab", "yes" if result.meets_nisab else "no")
    table.add_row(f"Rate ({result.calendar_type.value})", f"{result.rate * 100}%")
    table.add_row("Zakat due", f"[bold]{money(result.zakat_due)}[/bold]")
    return table


def _save_record(settings: BarakahConfig, session: ZakatSession, portfolio_name: str, entity_name: str) -> CalculationRecord:
    """Finalize the session into the named portfolio, creating the portfolio if needed."""
    repository = build_repository(settings)
    book = repository.load()
    portfolio = next((p for p in book.portfolios if p.name == portfolio_name), None)
    if portfolio is None:
        portfolio = book.create_portfolio(portfolio_name)
    record = session.finalize(entity_name=entity_name)
    book.save_calculation(portfolio.id, record)
    repository.save(book)
    return record


@click.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--currency", default=None, help="Base currency (overrides the file and config).")
@click.option("--calendar", type=click.Choice(["islamic", "western"]), default=None)
@click.option("--basis", type=click.Choice(["gold", "silver"]), default=None)
@click.option("--excess-only", is_flag=True, help="Charge only the wealth above nisab (distribution planning).")
@click.option("--json", "as_json", is_flag=True, help="Print the result as JSON.")
@click.option("--save", "portfolio_name", default=None, metavar="PORTFOLIO", help="Save the result to this portfolio (created if missing).")
@click.option("--entity", "entity_name", default="Personal", show_default=True, help="Entity name recorded with a saved result.")
@click.pass_context
def calculate(
    ctx: click.Context,
    file: str,
    currency: str | None,
    calendar: str | None,
    basis: str | None,
    excess_only: bool,
    as_json: bool,
    portfolio_name: str | None,
    entity_name: str,
) -> None:
    """Calculate zakat for the line items in FILE."""
    settings = load_settings(ctx)
    data = _load_input(file)
    method = DueMethod.EXCESS_OVER_NISAB if excess_only else DueMethod.FULL_NET_WEALTH

    try:
        session = ZakatSession(
            nisab=build_tracker(settings, basis=basis, calendar_type=calendar),
            normalizer=build_normalizer(settings, currency or data.get("base_currency")),
            method=method,
        )
        for entry in data["items"]:
            _add_entry(session, entry)
        result = session.calculate()
    except (BarakahError, KeyError) as e:
        raise click.ClickException(f"Invalid input: {e}") from e

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
    else:
        console.print(_items_table(session))
        console.print(_summary_table(result))
        for advisory in session.advisories:
            console.print(f"[yellow]{advisory}[/yellow]")

    pending = session.pending_clarifications
    if pending:
        click.echo(f"{len(pending)} item(s) still need clarification:", err=True)
        for item in pending:
            click.echo(f"  - {item.name}: {item.clarification_question}", err=True)
        if portfolio_name:
            click.echo("Nothing saved: resolve every item first.", err=True)
        ctx.exit(EXIT_UNRESOLVED)

    if portfolio_name:
        try:
            record = _save_record(settings, session, portfolio_name, entity_name)
        except BarakahError as e:
            raise click.ClickException(f"Could not save to {portfolio_name!r}: {e}") from e
        click.echo(f"Saved {record.id} to portfolio {portfolio_name!r}", err=True)
