"""Totals over classified line items.

Every total is in the base currency. Zakatable items count at their market
value when one was given; items still awaiting clarification are left out of
every total and reported separately so callers can block finalization.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, assert_never

from loguru import logger

from barakah.zakat.models import BusinessCategory, CategoryEntry, Classification, Company, LineItem


@dataclass
class ZakatTotals:
    """Aggregated totals for one calculation."""

    zakatable: Decimal = Decimal("0")
    deductible: Decimal = Decimal("0")
    exempt: Decimal = Decimal("0")
    not_deductible: Decimal = Decimal("0")
    unresolved_items: list[LineItem] = field(default_factory=list)
    by_category: dict[BusinessCategory, Decimal] = field(default_factory=dict)
    currency: str = "USD"

    @property
    def net_wealth(self) -> Decimal:
        return self.zakatable - self.deductible

    @property
    def unresolved_count(self) -> int:
        return len(self.unresolved_items)

    @property
    def is_resolved(self) -> bool:
        return not self.unresolved_items

    def to_dict(self) -> dict[str, Any]:
        return {
            "currency": self.currency,
            "zakatable": str(self.zakatable),
            "deductible": str(self.deductible),
            "exempt": str(self.exempt),
            "not_deductible": str(self.not_deductible),
            "net_wealth": str(self.net_wealth),
            "unresolved_count": self.unresolved_count,
            "unresolved_items": [item.name for item in self.unresolved_items],
            "by_category": {category.value: str(amount) for category, amount in self.by_category.items()},
        }


def _add(totals: ZakatTotals, item: LineItem) -> None:
    if isinstance(item, CategoryEntry):
        classification = effective_classification(item)
        totals.by_category[item.category] = totals.by_category.get(item.category, Decimal("0")) + item.converted_amount
    else:
        classification = item.classification

    match classification:
        case Classification.ZAKATABLE:
            totals.zakatable += item.zakatable_value
        case Classification.DEDUCTIBLE:
            totals.deductible += item.converted_amount
        case Classification.EXEMPT:
            totals.exempt += item.converted_amount
        case Classification.NOT_DEDUCTIBLE:
            totals.not_deductible += item.converted_amount
        case Classification.NEEDS_CLARIFICATION:
            totals.unresolved_items.append(item)
        case _:
            assert_never(classification)


def aggregate(items: Iterable[LineItem], currency: str = "USD") -> ZakatTotals:
    """Sum converted amounts per classification."""
    totals = ZakatTotals(currency=currency)
    for item in items:
        _add(totals, item)

    logger.debug(
        f"Aggregated: zakatable={totals.zakatable} deductible={totals.deductible} "
        f"net={totals.net_wealth} {currency} ({totals.unresolved_count} unresolved)"
    )
    return totals


def effective_classification(entry: CategoryEntry) -> Classification:
    """Only Islamic financing in current liabilities is ever deductible, whatever an entry was marked as."""
    return entry.restrict(entry.classification)


def aggregate_categories(entries: Iterable[CategoryEntry], currency: str = "USD") -> ZakatTotals:
    """Aggregate business balance-sheet entries, with per-category subtotals."""
    totals = ZakatTotals(currency=currency, by_category={category: Decimal("0") for category in BusinessCategory})
    for entry in entries:
        _add(totals, entry)
    return totals


def aggregate_company(company: Company) -> ZakatTotals:
    """Totals for a lightweight company balance sheet.

    Current liabilities and Islamic financing reduce the base; conventional
    debt is reported but never deducted.
    """
    totals = ZakatTotals(currency=company.currency)
    totals.zakatable = company.total_assets
    totals.deductible = company.current_liabilities + company.islamic_financing
    totals.not_deductible = company.conventional_debt
    return totals
