"""Nisab threshold tracking."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import StrEnum
from typing import TYPE_CHECKING

from loguru import logger

from barakah.core.exceptions import InvalidInputError, NisabConfigurationError
from barakah.zakat.models import CalendarType, NisabBasis, NisabConfig, to_decimal

if TYPE_CHECKING:
    from barakah.zakat.currency import CurrencyNormalizer
    from barakah.zakat.providers.base import GoldPriceQuote, PriceRateProvider

NEAR_NISAB_RATIO = Decimal("0.90")


def compute_nisab(price_per_gram: Decimal | int | float | str, grams: Decimal | int | str = NisabBasis.GOLD.grams) -> Decimal:
    """Nisab threshold for a metal price per gram and a weight in grams.

    Raises:
        NisabConfigurationError: If either input is zero, negative or not a number.
    """
    try:
        price = to_decimal(price_per_gram, "price_per_gram", allow_negative=True)
        weight = to_decimal(grams, "grams", allow_negative=True)
    except InvalidInputError as e:
        raise NisabConfigurationError(str(e)) from e
    if price <= 0:
        raise NisabConfigurationError(f"Metal price per gram must be positive, got {price}")
    if weight <= 0:
        raise NisabConfigurationError(f"Nisab weight must be positive, got {weight}")
    return price * weight


def meets_nisab(net_wealth: Decimal | int | float | str, threshold: Decimal | int | float | str) -> bool:
    """Inclusive: wealth exactly at the threshold meets nisab."""
    return to_decimal(net_wealth, "net_wealth", allow_negative=True) >= to_decimal(threshold, "threshold")


class NisabStatus(StrEnum):
    BELOW = "below"
    NEAR = "near"
    ABOVE = "above"


@dataclass(frozen=True)
class NisabProgress:
    ratio: Decimal
    status: NisabStatus


def nisab_status(net_wealth: Decimal, threshold: Decimal) -> NisabProgress:
    """Where net wealth sits relative to nisab. ``ratio`` is clamped to 0..1."""
    net_wealth = to_decimal(net_wealth, "net_wealth", allow_negative=True)
    threshold = to_decimal(threshold, "threshold")
    if threshold == 0:
        raise NisabConfigurationError("Nisab threshold cannot be zero")
    ratio = min(Decimal("1"), max(Decimal("0"), net_wealth / threshold))
    if meets_nisab(net_wealth, threshold):
        status = NisabStatus.ABOVE
    elif ratio >= NEAR_NISAB_RATIO:
        status = NisabStatus.NEAR
    else:
        status = NisabStatus.BELOW
    return NisabProgress(ratio=ratio, status=status)


class NisabTracker:
    """Holds the nisab inputs; the threshold is recomputed on every read."""

    def __init__(
        self,
        price_per_gram: Decimal | int | float | str,
        basis: NisabBasis | str = NisabBasis.GOLD,
        currency: str = "USD",
        calendar_type: CalendarType | str = CalendarType.ISLAMIC,
    ):
        self._config = NisabConfig(price_per_gram, basis, calendar_type, currency)
        self.last_quote: GoldPriceQuote | None = None

    @classmethod
    def from_provider(
        cls,
        provider: PriceRateProvider,
        currency: str = "USD",
        calendar_type: CalendarType | str = CalendarType.ISLAMIC,
    ) -> NisabTracker:
        """Gold-basis tracker priced from a provider quote."""
        quote = provider.get_gold_price_per_gram(currency)
        tracker = cls(quote.price, NisabBasis.GOLD, currency, calendar_type)
        tracker.last_quote = quote
        return tracker

    @property
    def config(self) -> NisabConfig:
        return self._config

    @property
    def price_per_gram(self) -> Decimal:
        return self._config.price_per_gram

    @property
    def basis(self) -> NisabBasis:
        return self._config.basis

    @property
    def currency(self) -> str:
        return self._config.currency

    @property
    def calendar_type(self) -> CalendarType:
        return self._config.calendar_type

    @property
    def threshold(self) -> Decimal:
        return compute_nisab(self._config.price_per_gram, self._config.basis.grams)

    def update_price(self, price_per_gram: Decimal | int | float | str, currency: str | None = None) -> Decimal:
        """Set a new metal price (optionally in a new currency) and return the new threshold."""
        self._config = NisabConfig(
            price_per_gram, self.basis, self.calendar_type, currency or self.currency
        )
        logger.info(f"Nisab price updated: {self.price_per_gram} {self.currency}/g ({self.basis.value})")
        return self.threshold

    def set_basis(self, basis: NisabBasis | str, price_per_gram: Decimal | int | float | str | None = None) -> Decimal:
        """Switch metal and return the new threshold.

        Gold and silver prices differ, so changing the metal requires the new
        metal's price; it may be omitted only when the basis stays the same.

        Raises:
            NisabConfigurationError: If the basis changes without a price.
        """
        try:
            new_basis = NisabBasis(basis)
        except ValueError as e:
            raise NisabConfigurationError(f"Unknown nisab basis {basis!r}") from e
        if price_per_gram is None:
            if new_basis is not self.basis:
                raise NisabConfigurationError(
                    f"Switching nisab basis from {self.basis.value} to {new_basis.value} requires a price per gram"
                )
            price_per_gram = self.price_per_gram
        self._config = NisabConfig(price_per_gram, new_basis, self.calendar_type, self.currency)
        logger.info(f"Nisab basis set to {self.basis.value}")
        return self.threshold

    def set_calendar_type(self, calendar_type: CalendarType | str) -> None:
        self._config = NisabConfig(self.price_per_gram, self.basis, calendar_type, self.currency)

    def threshold_in(self, currency: str, normalizer: CurrencyNormalizer) -> Decimal:
        """The current threshold reconverted into ``currency``."""
        return normalizer.convert(self.threshold, self.currency, currency)

    def meets(self, net_wealth: Decimal) -> bool:
        result = meets_nisab(net_wealth, self.threshold)
        logger.debug(f"Nisab check: {net_wealth} vs {self.threshold} {self.currency} -> {result}")
        return result

    def status(self, net_wealth: Decimal) -> NisabProgress:
        return nisab_status(net_wealth, self.threshold)
