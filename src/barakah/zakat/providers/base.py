"""Provider boundary for metal prices and exchange rates."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Protocol, runtime_checkable


@dataclass(frozen=True)
class GoldPriceQuote:
    """Gold price per gram.

    Attributes:
        price: Price of one gram in ``currency``.
        currency: ISO code of ``price``.
        as_of: When the underlying observation was made.
        source_count: How many sources were averaged into ``price``.
        source: Name of the provider that produced the quote.
    """

    price: Decimal
    currency: str
    as_of: datetime
    source_count: int = 1
    source: str = "static"


@dataclass(frozen=True)
class ProviderAdvisory:
    """Non-fatal notice that a quote came from a fallback source."""

    message: str
    failed_source: str
    used_source: str
    occurred_at: datetime = field(default_factory=datetime.now)

    def __str__(self) -> str:
        return self.message


@runtime_checkable
class PriceRateProvider(Protocol):
    name: str

    def get_gold_price_per_gram(self, currency: str = "USD") -> GoldPriceQuote: ...

    def get_exchange_rate(self, from_currency: str, to_currency: str) -> Decimal: ...
