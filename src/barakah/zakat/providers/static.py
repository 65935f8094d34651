"""Offline provider backed by the built-in price and rate tables."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from barakah.zakat.currency import StaticRateTable
from barakah.zakat.models import normalize_currency, to_decimal
from barakah.zakat.providers.base import GoldPriceQuote

DEFAULT_GOLD_USD_PER_GRAM = Decimal("88.50")
DEFAULT_SILVER_USD_PER_GRAM = Decimal("1.05")


class StaticPriceProvider:
    """Reference metal prices in USD, converted with the static rate table."""

    name = "static"

    def __init__(
        self,
        gold_usd_per_gram: Decimal | str = DEFAULT_GOLD_USD_PER_GRAM,
        silver_usd_per_gram: Decimal | str = DEFAULT_SILVER_USD_PER_GRAM,
        rates: StaticRateTable | None = None,
        as_of: datetime | None = None,
    ):
        self.gold_usd_per_gram = to_decimal(gold_usd_per_gram, "gold_usd_per_gram")
        self.silver_usd_per_gram = to_decimal(silver_usd_per_gram, "silver_usd_per_gram")
        self.rates = rates or StaticRateTable()
        self.as_of = as_of or datetime.now()

    def get_exchange_rate(self, from_currency: str, to_currency: str) -> Decimal:
        return self.rates.get_exchange_rate(normalize_currency(from_currency), normalize_currency(to_currency))

    def get_gold_price_per_gram(self, currency: str = "USD") -> GoldPriceQuote:
        currency = normalize_currency(currency)
        price = self.gold_usd_per_gram * self.get_exchange_rate("USD", currency)
        return GoldPriceQuote(price=price, currency=currency, as_of=self.as_of, source_count=1, source=self.name)

    def get_silver_price_per_gram(self, currency: str = "USD") -> Decimal:
        return self.silver_usd_per_gram * self.get_exchange_rate("USD", normalize_currency(currency))
