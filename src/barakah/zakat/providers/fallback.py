"""Provider chain that always answers.

The primary (usually live) provider is tried first. When it fails the last
value it successfully returned is used, and failing that the static tables.
Each fallback records a ``ProviderAdvisory`` so callers can show
"using cached price" without treating it as an error.
"""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

from loguru import logger

from barakah.core.utils.cache import Cache
from barakah.zakat.models import normalize_currency
from barakah.zakat.providers.base import GoldPriceQuote, PriceRateProvider, ProviderAdvisory
from barakah.zakat.providers.static import StaticPriceProvider


class FallbackPriceProvider:
    """Primary provider, then last-known values, then static tables."""

    name = "fallback"

    def __init__(
        self,
        primary: PriceRateProvider,
        fallback: StaticPriceProvider | None = None,
        last_known: Cache | None = None,
    ):
        self.primary = primary
        self.fallback = fallback or StaticPriceProvider()
        # Last-known values never expire for fallback purposes.
        self.last_known = last_known or Cache(ttl=timedelta(days=365))
        self.advisories: list[ProviderAdvisory] = []

    def _advise(self, message: str, used_source: str, error: Exception) -> None:
        advisory = ProviderAdvisory(message=message, failed_source=self.primary.name, used_source=used_source)
        self.advisories.append(advisory)
        logger.warning(f"{message} ({error})")

    def get_exchange_rate(self, from_currency: str, to_currency: str) -> Decimal:
        from_code = normalize_currency(from_currency)
        to_code = normalize_currency(to_currency)
        if from_code == to_code:
            return Decimal("1")
        key = f"fx_{from_code}_{to_code}"
        try:
            rate = self.primary.get_exchange_rate(from_code, to_code)
        except Exception as e:
            stale = self.last_known.get_stale(key)
            if stale is not None:
                rate, stored_at = stale
                self._advise(
                    f"Using cached {from_code}->{to_code} rate from {stored_at:%Y-%m-%d %H:%M}", "cache", e
                )
                return rate
            self._advise(f"Using static {from_code}->{to_code} rate", self.fallback.name, e)
            return self.fallback.get_exchange_rate(from_code, to_code)
        self.last_known.put(key, rate)
        return rate

    def get_gold_price_per_gram(self, currency: str = "USD") -> GoldPriceQuote:
        code = normalize_currency(currency)
        key = f"gold_{code}"
        try:
            quote = self.primary.get_gold_price_per_gram(code)
        except Exception as e:
            stale = self.last_known.get_stale(key)
            if stale is not None:
                quote, stored_at = stale
                self._advise(f"Using cached gold price from {stored_at:%Y-%m-%d %H:%M}", "cache", e)
                return quote
            self._advise("Using static gold price", self.fallback.name, e)
            return self.fallback.get_gold_price_per_gram(code)
        self.last_known.put(key, quote)
        return quote

    @property
    def last_advisory(self) -> ProviderAdvisory | None:
        return self.advisories[-1] if self.advisories else None

    def clear_advisories(self) -> list[ProviderAdvisory]:
        cleared, self.advisories = self.advisories, []
        return cleared
