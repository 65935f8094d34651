"""Currency normalization.

Every line item keeps the amount and currency it was entered in; the
normalizer derives ``converted_amount`` in the session's base currency.
Conversion never fails because of a rate source: when the configured provider
errors, the static table answers and a non-fatal advisory is recorded.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal
from typing import Protocol, TypeVar, runtime_checkable

from loguru import logger

from barakah.core.exceptions import InvalidInputError
from barakah.zakat.currencies import STATIC_USD_RATES, SUPPORTED_CURRENCIES
from barakah.zakat.models import LineItem, normalize_currency, to_decimal

__all__ = [
    "STATIC_USD_RATES",
    "SUPPORTED_CURRENCIES",
    "CurrencyNormalizer",
    "RateProvider",
    "RateQuote",
    "StaticRateTable",
]

T = TypeVar("T", bound=LineItem)


@runtime_checkable
class RateProvider(Protocol):
    """Anything that can quote units of ``to_currency`` per one ``from_currency``."""

    def get_exchange_rate(self, from_currency: str, to_currency: str) -> Decimal: ...


class StaticRateTable:
    """Cross rates derived from a units-per-USD table."""

    name = "static"

    def __init__(self, usd_rates: dict[str, Decimal] | None = None):
        self.usd_rates = dict(usd_rates or STATIC_USD_RATES)

    def get_exchange_rate(self, from_currency: str, to_currency: str) -> Decimal:
        try:
            from_rate = self.usd_rates[from_currency.upper()]
            to_rate = self.usd_rates[to_currency.upper()]
        except KeyError as e:
            raise InvalidInputError(f"No static rate for currency {e.args[0]}") from e
        if from_currency.upper() == to_currency.upper():
            return Decimal("1")
        return to_rate / from_rate


@dataclass(frozen=True)
class RateQuote:
    rate: Decimal
    source: str
    is_fallback: bool = False
    advisory: str | None = None


class CurrencyNormalizer:
    """Converts amounts into a base currency.

    Args:
        base_currency: Currency all converted amounts are expressed in.
        provider: Optional live rate source. Failures fall back to ``fallback``.
        fallback: Rate table used when there is no provider or it fails.
    """

    def __init__(
        self,
        base_currency: str = "USD",
        provider: RateProvider | None = None,
        fallback: RateProvider | None = None,
    ):
        self.base_currency = normalize_currency(base_currency)
        self.provider = provider
        self.fallback = fallback or StaticRateTable()
        self.advisories: list[str] = []

    def rate(self, from_currency: str, to_currency: str) -> RateQuote:
        from_currency = normalize_currency(from_currency)
        to_currency = normalize_currency(to_currency)
        if from_currency == to_currency:
            return RateQuote(Decimal("1"), "identity")

        fallback_name = getattr(self.fallback, "name", type(self.fallback).__name__)
        if self.provider is None:
            return RateQuote(self.fallback.get_exchange_rate(from_currency, to_currency), fallback_name)

        source = getattr(self.provider, "name", type(self.provider).__name__)
        # Providers that fall back internally report it through their advisories.
        provider_advisories = getattr(self.provider, "advisories", None)
        seen = len(provider_advisories) if provider_advisories is not None else 0
        try:
            rate = to_decimal(self.provider.get_exchange_rate(from_currency, to_currency), "exchange rate")
            if rate == 0:
                raise InvalidInputError(f"{source} returned a zero rate for {from_currency}->{to_currency}")
        except Exception as e:
            advisory = f"Live rate {from_currency}->{to_currency} unavailable from {source}; using {fallback_name} rates"
            logger.warning(f"{advisory}: {e}")
            self._record(advisory)
            rate = self.fallback.get_exchange_rate(from_currency, to_currency)
            return RateQuote(rate, fallback_name, is_fallback=True, advisory=advisory)

        raised = list(getattr(self.provider, "advisories", None) or [])[seen:]
        if raised:
            latest = raised[-1]
            for advisory in raised:
                self._record(str(advisory))
            used = getattr(latest, "used_source", source)
            return RateQuote(rate, used, is_fallback=True, advisory=str(latest))
        return RateQuote(rate, source)

    def _record(self, advisory: str) -> None:
        if advisory not in self.advisories:
            self.advisories.append(advisory)

    def convert(self, amount: Decimal | int | float | str, from_currency: str, to_currency: str | None = None) -> Decimal:
        """Convert ``amount``. Converting a currency to itself returns the amount unchanged."""
        amount = to_decimal(amount, "amount", allow_negative=True)
        to_currency = to_currency or self.base_currency
        if normalize_currency(from_currency) == normalize_currency(to_currency):
            return amount
        quote = self.rate(from_currency, to_currency)
        converted = amount * quote.rate
        logger.debug(f"Converted {amount} {from_currency} -> {converted} {to_currency} ({quote.source})")
        return converted

    def normalize(self, item: T) -> T:
        """Recompute the item's converted values from its original amount and currency."""
        item.converted_amount = self.convert(item.amount, item.currency)
        if item.market_value is not None:
            item.converted_market_value = self.convert(item.market_value, item.currency)
        else:
            item.converted_market_value = None
        return item

    def renormalize(self, items: Iterable[T], new_base_currency: str) -> list[T]:
        """Switch the base currency and reconvert every item from its original values."""
        new_base = normalize_currency(new_base_currency)
        old_base = self.base_currency
        self.base_currency = new_base
        items = [self.normalize(item) for item in items]
        logger.info(f"Renormalized {len(items)} item(s) from {old_base} to {new_base}")
        return items
