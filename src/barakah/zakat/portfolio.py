"""Portfolios and their saved calculation history.

``PortfolioBook`` is the in-memory model: portfolios, which one is active,
the records each owns and the companies a personal account tracks.
``PortfolioRepository`` persists a book through a ``KeyValueStore``, one
document per portfolio, so appending a record rewrites exactly one document.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Any

from loguru import logger

from barakah.core.exceptions import InvalidInputError, PortfolioNotFoundError, RecordNotFoundError
from barakah.core.storage import KeyValueStore
from barakah.core.utils.logging import audit_logger
from barakah.zakat.aggregator import aggregate_company
from barakah.zakat.calculator import ZakatDueCalculator
from barakah.zakat.currency import CurrencyNormalizer
from barakah.zakat.hijri import to_hijri
from barakah.zakat.models import (
    CalculationRecord,
    Company,
    EntityType,
    Portfolio,
    PortfolioType,
)
from barakah.zakat.nisab import NisabTracker

_EDITABLE_PORTFOLIO_FIELDS = {"name", "company_name", "industry_type"}


class PortfolioBook:
    """All portfolios of one user, at most one of them active."""

    def __init__(self, portfolios: list[Portfolio] | None = None, active_portfolio_id: str | None = None):
        self._portfolios: dict[str, Portfolio] = {p.id: p for p in portfolios or []}
        if active_portfolio_id is not None and active_portfolio_id not in self._portfolios:
            raise PortfolioNotFoundError(active_portfolio_id)
        self.active_portfolio_id = active_portfolio_id

    @property
    def portfolios(self) -> list[Portfolio]:
        return list(self._portfolios.values())

    @property
    def active_portfolio(self) -> Portfolio | None:
        if self.active_portfolio_id is None:
            return None
        return self._portfolios[self.active_portfolio_id]

    def get(self, portfolio_id: str) -> Portfolio:
        try:
            return self._portfolios[portfolio_id]
        except KeyError:
            raise PortfolioNotFoundError(portfolio_id) from None

    # === Portfolios ===

    def create_portfolio(
        self,
        name: str,
        portfolio_type: PortfolioType | str = PortfolioType.PERSONAL,
        company_name: str | None = None,
        industry_type: str | None = None,
    ) -> Portfolio:
        """Create a portfolio. The first one created becomes active."""
        portfolio = Portfolio(name=name, type=portfolio_type, company_name=company_name, industry_type=industry_type)
        self._portfolios[portfolio.id] = portfolio
        if self.active_portfolio_id is None:
            self.active_portfolio_id = portfolio.id
        logger.info(f"Created {portfolio.type.value} portfolio {portfolio.name!r}")
        return portfolio

    def update_portfolio(self, portfolio_id: str, **changes: Any) -> Portfolio:
        unknown = set(changes) - _EDITABLE_PORTFOLIO_FIELDS
        if unknown:
            raise InvalidInputError(f"Cannot update portfolio field(s): {', '.join(sorted(unknown))}")
        portfolio = self.get(portfolio_id)
        updated = replace(portfolio, **changes, updated_at=datetime.now())
        self._portfolios[portfolio_id] = updated
        return updated

    def delete_portfolio(self, portfolio_id: str) -> Portfolio:
        """Delete a portfolio and its records. Deleting the active one leaves none active."""
        portfolio = self._portfolios.pop(portfolio_id, None)
        if portfolio is None:
            raise PortfolioNotFoundError(portfolio_id)
        if self.active_portfolio_id == portfolio_id:
            self.active_portfolio_id = None
        audit_logger.info(f"Deleted portfolio {portfolio_id} ({len(portfolio.records)} record(s))")
        return portfolio

    def set_active(self, portfolio_id: str) -> Portfolio:
        portfolio = self.get(portfolio_id)
        self.active_portfolio_id = portfolio_id
        return portfolio

    # === Calculation records ===

    def save_calculation(self, portfolio_id: str, record: CalculationRecord) -> CalculationRecord:
        """Append a finalized record to a portfolio's history."""
        portfolio = self.get(portfolio_id)
        if any(r.id == record.id for r in portfolio.records):
            raise InvalidInputError(f"Record {record.id} is already saved")
        # Single assignment: readers see either the old list or the new one.
        portfolio.records = [*portfolio.records, record]
        portfolio.updated_at = datetime.now()
        audit_logger.info(
            f"Saved record {record.id} to {portfolio.name!r}: {record.entity_name} "
            f"due {record.zakat_due} {record.currency}"
        )
        return record

    def get_record(self, portfolio_id: str, record_id: str) -> CalculationRecord:
        for record in self.get(portfolio_id).records:
            if record.id == record_id:
                return record
        raise RecordNotFoundError(record_id)

    def mark_paid(self, portfolio_id: str, record_id: str, paid: bool = True) -> CalculationRecord:
        portfolio = self.get(portfolio_id)
        original = self.get_record(portfolio_id, record_id)
        updated = original.mark_paid(paid)
        portfolio.records = [updated if r.id == record_id else r for r in portfolio.records]
        portfolio.updated_at = datetime.now()
        audit_logger.info(f"Record {record_id} marked {'paid' if paid else 'unpaid'}")
        return updated

    def delete_calculation(self, portfolio_id: str, record_id: str) -> CalculationRecord:
        portfolio = self.get(portfolio_id)
        record = self.get_record(portfolio_id, record_id)
        portfolio.records = [r for r in portfolio.records if r.id != record_id]
        portfolio.updated_at = datetime.now()
        audit_logger.info(f"Deleted record {record_id} from {portfolio.name!r}")
        return record

    def history(self, portfolio_id: str, entity_name: str | None = None) -> list[CalculationRecord]:
        """Records newest first, optionally for one entity only."""
        records = self.get(portfolio_id).records
        if entity_name is not None:
            records = [r for r in records if r.entity_name == entity_name]
        return sorted(records, key=lambda r: r.date, reverse=True)

    # === Companies (personal accounts only) ===

    def add_company(self, portfolio_id: str, company: Company) -> Company:
        portfolio = self.get(portfolio_id)
        if portfolio.type is not PortfolioType.PERSONAL:
            raise InvalidInputError("Companies can only be tracked from a personal portfolio")
        portfolio.companies = [*portfolio.companies, company]
        portfolio.updated_at = datetime.now()
        return company

    def get_company(self, portfolio_id: str, company_id: str) -> Company:
        for company in self.get(portfolio_id).companies:
            if company.id == company_id:
                return company
        raise RecordNotFoundError(company_id)

    def update_company(self, portfolio_id: str, company_id: str, **changes: Any) -> Company:
        portfolio = self.get(portfolio_id)
        if "id" in changes:
            raise InvalidInputError("Company id cannot be changed")
        updated = replace(self.get_company(portfolio_id, company_id), **changes)
        portfolio.companies = [updated if c.id == company_id else c for c in portfolio.companies]
        portfolio.updated_at = datetime.now()
        return updated

    def remove_company(self, portfolio_id: str, company_id: str) -> Company:
        portfolio = self.get(portfolio_id)
        company = self.get_company(portfolio_id, company_id)
        portfolio.companies = [c for c in portfolio.companies if c.id != company_id]
        portfolio.updated_at = datetime.now()
        return company

    def company_record(
        self,
        portfolio_id: str,
        company_id: str,
        tracker: NisabTracker,
        normalizer: CurrencyNormalizer | None = None,
        now: datetime | None = None,
    ) -> CalculationRecord:
        """Calculate a company's zakat and return the (unsaved) record."""
        company = self.get_company(portfolio_id, company_id)
        totals = aggregate_company(company)
        normalizer = normalizer or CurrencyNormalizer(company.currency)
        threshold = tracker.threshold_in(company.currency, normalizer)
        result = ZakatDueCalculator(tracker).calculate(totals, threshold)
        moment = now or datetime.now()
        return CalculationRecord(
            entity_name=company.name,
            entity_type=EntityType.COMPANY,
            date=moment,
            total_assets=totals.zakatable,
            total_deductions=totals.deductible,
            net_wealth=totals.net_wealth,
            nisab_threshold=threshold,
            zakat_due=result.zakat_due,
            currency=company.currency,
            calendar_type=result.calendar_type,
            meets_nisab=result.meets_nisab,
            line_items_snapshot=(company.to_dict(),),
            hijri_date=str(to_hijri(moment)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "active_portfolio_id": self.active_portfolio_id,
            "portfolios": [p.to_dict() for p in self.portfolios],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PortfolioBook:
        return cls(
            portfolios=[Portfolio.from_dict(p) for p in data.get("portfolios", [])],
            active_portfolio_id=data.get("active_portfolio_id"),
        )


class PortfolioRepository:
    """Loads and saves a ``PortfolioBook`` through a key-value store."""

    STATE_KEY = "_state"

    def __init__(self, store: KeyValueStore):
        self.store = store

    def load(self) -> PortfolioBook:
        state = self.store.load(self.STATE_KEY, default={}) or {}
        portfolios = []
        for portfolio_id in state.get("order", []):
            data = self.store.load(portfolio_id)
            if data is None:
                logger.warning(f"Portfolio {portfolio_id} listed but missing from storage")
                continue
            portfolios.append(Portfolio.from_dict(data))
        active = state.get("active_portfolio_id")
        if active not in {p.id for p in portfolios}:
            active = None
        return PortfolioBook(portfolios, active)

    def save_portfolio(self, portfolio: Portfolio) -> None:
        self.store.save(portfolio.id, portfolio.to_dict())

    def save(self, book: PortfolioBook) -> None:
        """Write every portfolio, then the index; drop documents no longer in the book."""
        ids = [p.id for p in book.portfolios]
        for portfolio in book.portfolios:
            self.save_portfolio(portfolio)
        self.store.save(self.STATE_KEY, {"active_portfolio_id": book.active_portfolio_id, "order": ids})
        for key in self.store.keys():
            if key != self.STATE_KEY and key not in ids:
                self.store.delete(key)
        logger.debug(f"Saved {len(ids)} portfolio(s)")
