"""A single zakat calculation in progress.

The session owns the entered items, the base currency (through its
normalizer) and the nisab inputs. Everything that reads or changes that
state goes through it; there is no module-level state.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from loguru import logger

from barakah.core.exceptions import NisabConfigurationError, RecordNotFoundError, UnresolvedItemsError
from barakah.core.utils.logging import audit_logger
from barakah.zakat.aggregator import ZakatTotals, aggregate
from barakah.zakat.calculator import DueMethod, ZakatDueCalculator, ZakatResult
from barakah.zakat.clarification import ClarificationAnswer, ClarificationWorkflow, apply_answer
from barakah.zakat.classifier import (
    classify_category_entry,
    classify_line_item,
    create_category_entry,
    create_common_items,
    create_gold_item,
    create_line_item,
)
from barakah.zakat.currency import CurrencyNormalizer
from barakah.zakat.hijri import to_hijri
from barakah.zakat.models import (
    BusinessCategory,
    CalculationRecord,
    CategoryEntry,
    Classification,
    EntityType,
    GoldKarat,
    LineItem,
    NisabBasis,
    TermType,
    normalize_currency,
    to_decimal,
)
from barakah.zakat.nisab import NisabTracker
from barakah.zakat.providers.static import DEFAULT_GOLD_USD_PER_GRAM

Amount = Decimal | int | float | str


class ZakatSession:
    """Owns the items of one calculation and runs them through the pipeline.

    Args:
        base_currency: Currency totals are expressed in. Ignored when a
            ``normalizer`` is given (its base currency is used instead).
        nisab: Nisab inputs. Defaults to the reference gold price in USD.
        normalizer: Currency normalizer, e.g. one backed by a live provider.
        method: How the rate is applied above nisab.
    """

    def __init__(
        self,
        base_currency: str = "USD",
        nisab: NisabTracker | None = None,
        normalizer: CurrencyNormalizer | None = None,
        method: DueMethod = DueMethod.FULL_NET_WEALTH,
    ):
        self.normalizer = normalizer or CurrencyNormalizer(base_currency)
        self.nisab = nisab or NisabTracker(DEFAULT_GOLD_USD_PER_GRAM, currency="USD")
        self.method = DueMethod(method)
        self.items: list[LineItem] = []

    @property
    def base_currency(self) -> str:
        return self.normalizer.base_currency

    @property
    def category_entries(self) -> list[CategoryEntry]:
        return [item for item in self.items if isinstance(item, CategoryEntry)]

    @property
    def advisories(self) -> list[str]:
        return list(self.normalizer.advisories)

    # === Entry ===

    def add(self, item: LineItem) -> LineItem:
        """Add an already-built item, converting it into the base currency."""
        self.normalizer.normalize(item)
        self.items.append(item)
        logger.debug(f"Added {item.name!r} ({item.classification.value})")
        return item

    def add_item(
        self,
        name: str,
        amount: Amount,
        currency: str | None = None,
        market_value: Amount | None = None,
    ) -> LineItem:
        item = create_line_item(name, amount, currency or self.base_currency, market_value=market_value)
        return self.add(item)

    def add_gold(
        self,
        weight_grams: Amount,
        karat: GoldKarat | str = GoldKarat.K24,
        price_per_gram: Amount | None = None,
        currency: str | None = None,
        name: str | None = None,
    ) -> LineItem:
        """Add gold by weight and karat.

        Without an explicit price the nisab gold price (and its currency) is used.
        """
        if price_per_gram is None:
            if self.nisab.basis is not NisabBasis.GOLD:
                raise NisabConfigurationError("A gold price per gram is required when nisab is measured in silver")
            price_per_gram = self.nisab.price_per_gram
            currency = self.nisab.currency
        item = create_gold_item(weight_grams, karat, price_per_gram, currency or self.base_currency, name=name)
        return self.add(item)

    def add_common_items(self, currency: str | None = None) -> list[LineItem]:
        """Add the zero-amount manual-entry template, skipping names already present."""
        existing = {item.name.lower() for item in self.items}
        added = []
        for item in create_common_items(currency or self.base_currency):
            if item.name.lower() not in existing:
                added.append(self.add(item))
        return added

    def add_category_entry(
        self,
        name: str,
        amount: Amount,
        category: BusinessCategory | str,
        currency: str | None = None,
        is_islamic_financing: bool = False,
        description: str = "",
        term_type: TermType | str | None = None,
    ) -> CategoryEntry:
        entry = create_category_entry(
            name,
            amount,
            category,
            currency=currency or self.base_currency,
            is_islamic_financing=is_islamic_financing,
            description=description,
            term_type=term_type,
        )
        return self.add(entry)

    def get_item(self, item_id: str) -> LineItem:
        for item in self.items:
            if item.id == item_id:
                return item
        raise RecordNotFoundError(f"No line item with id {item_id!r}")

    def edit_item(
        self,
        item_id: str,
        *,
        name: str | None = None,
        amount: Amount | None = None,
        currency: str | None = None,
        market_value: Amount | None = None,
    ) -> LineItem:
        """Edit an item in place.

        A new name reclassifies the item and discards any earlier
        clarification answer. New amounts and currencies are validated before
        anything changes, then the item is reconverted from its own values.
        """
        item = self.get_item(item_id)
        new_amount = to_decimal(amount, f"{item.name} amount") if amount is not None else item.amount
        new_currency = normalize_currency(currency) if currency is not None else item.currency
        new_market = to_decimal(market_value, f"{item.name} market value") if market_value is not None else None

        if name is not None and name.strip() and name.strip() != item.name:
            item.name = name.strip()
            if isinstance(item, CategoryEntry):
                result = classify_category_entry(item.name, item.category, item.is_islamic_financing, item.term_type)
            else:
                result = classify_line_item(item.name)
            item.classification = result.classification
            item.islamic_ruling = result.islamic_ruling
            item.clarification_question = result.clarification_question
            item.clarification_answer = None
            item.market_value = None

        item.amount = new_amount
        item.currency = new_currency
        if new_market is not None:
            item.market_value = new_market
        self.normalizer.normalize(item)
        logger.debug(f"Edited {item.name!r}: {item.amount} {item.currency}")
        return item

    def remove_item(self, item_id: str) -> LineItem:
        item = self.get_item(item_id)
        self.items.remove(item)
        return item

    def reset(self) -> None:
        self.items.clear()
        logger.info("Session reset")

    def renormalize(self, new_base_currency: str) -> None:
        """Switch the base currency, reconverting every item from its original amount."""
        self.normalizer.renormalize(self.items, new_base_currency)

    # === Clarification ===

    @property
    def pending_clarifications(self) -> list[LineItem]:
        return [item for item in self.items if item.classification is Classification.NEEDS_CLARIFICATION]

    def start_clarification(self) -> ClarificationWorkflow:
        return ClarificationWorkflow(self.items, self.normalizer)

    def answer(
        self,
        item_id: str,
        answer: ClarificationAnswer | str,
        market_value: Amount | None = None,
    ) -> Classification:
        """Answer the clarification question of one specific item."""
        return apply_answer(self.get_item(item_id), answer, market_value, self.normalizer)

    # === Results ===

    def totals(self) -> ZakatTotals:
        return aggregate(self.items, self.base_currency)

    def threshold(self) -> Decimal:
        """Nisab threshold in the session's base currency."""
        return self.nisab.threshold_in(self.base_currency, self.normalizer)

    def calculate(self) -> ZakatResult:
        """Calculate with whatever is resolved so far; unresolved items are left out."""
        return ZakatDueCalculator(self.nisab, self.method).calculate(self.totals(), self.threshold())

    def finalize(
        self,
        entity_name: str = "Personal",
        entity_type: EntityType | str = EntityType.PERSONAL,
        now: datetime | None = None,
    ) -> CalculationRecord:
        """Snapshot the calculation as an immutable record.

        Raises:
            UnresolvedItemsError: If any item still needs clarification.
        """
        pending = self.pending_clarifications
        if pending:
            raise UnresolvedItemsError(pending)

        result = self.calculate()
        moment = now or datetime.now()
        record = CalculationRecord(
            entity_name=entity_name,
            entity_type=entity_type,
            date=moment,
            total_assets=result.totals.zakatable,
            total_deductions=result.totals.deductible,
            net_wealth=result.net_wealth,
            nisab_threshold=result.nisab_threshold,
            zakat_due=result.zakat_due,
            currency=self.base_currency,
            calendar_type=result.calendar_type,
            meets_nisab=result.meets_nisab,
            line_items_snapshot=tuple(item.to_dict() for item in self.items),
            hijri_date=str(to_hijri(moment)),
        )
        audit_logger.info(
            f"Finalized {record.id} for {entity_name}: net {record.net_wealth} {record.currency}, "
            f"due {record.zakat_due}"
        )
        return record
