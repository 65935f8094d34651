"""Live exchange rates over HTTP.

Rates come from an open exchange-rate endpoint that returns
``{"result": "success", "rates": {...}}`` for a base currency. Responses are
cached for a short TTL and a circuit breaker stops calling the endpoint after
repeated failures. Every failure surfaces as ``ProviderError``; turning that
into a fallback value is ``FallbackPriceProvider``'s job.
"""

from __future__ import annotations

import time
from datetime import datetime
from decimal import Decimal, InvalidOperation

import requests
from loguru import logger

from barakah.core.circuit_breaker import CircuitBreaker
from barakah.core.exceptions import ProviderError
from barakah.core.utils.cache import Cache
from barakah.zakat.models import normalize_currency
from barakah.zakat.providers.base import GoldPriceQuote
from barakah.zakat.providers.static import DEFAULT_GOLD_USD_PER_GRAM

DEFAULT_RATE_URL = "https://open.er-api.com/v6/latest/{base}"
REFERENCE_GOLD_SOURCE = "static"


class LiveRateProvider:
    """Exchange rates from a JSON endpoint.

    The endpoint carries no metal prices, so gold quotes are the USD reference
    price converted with live rates. Their ``source`` says so and ``as_of`` is
    the reference date, not the time of the request.

    Args:
        url_template: Endpoint with a ``{base}`` placeholder.
        timeout: Seconds before a request is abandoned.
        gold_usd_per_gram: Reference gold price, converted with live rates.
        gold_as_of: When the reference price was observed (construction time if omitted).
        session: ``requests.Session`` to use (a new one by default).
        circuit_breaker: Shared breaker; a private one is created if omitted.
        cache: Response cache; in-memory with a one-hour TTL if omitted.
    """

    name = "live"

    def __init__(
        self,
        url_template: str = DEFAULT_RATE_URL,
        timeout: float = 5.0,
        gold_usd_per_gram: Decimal | str = DEFAULT_GOLD_USD_PER_GRAM,
        gold_as_of: datetime | None = None,
        session: requests.Session | None = None,
        circuit_breaker: CircuitBreaker | None = None,
        cache: Cache | None = None,
    ):
        self.url_template = url_template
        self.timeout = timeout
        self.gold_usd_per_gram = Decimal(str(gold_usd_per_gram))
        self.gold_as_of = gold_as_of or datetime.now()
        self.session = session or requests.Session()
        self.circuit_breaker = circuit_breaker or CircuitBreaker()
        self.cache = cache or Cache()

    def _fail(self, message: str, started: float) -> ProviderError:
        self.circuit_breaker.record(self.name, success=False, duration=time.monotonic() - started)
        logger.debug(f"Live rate fetch failed: {message}")
        return ProviderError(message)

    def fetch_rates(self, base_currency: str) -> dict[str, Decimal]:
        """Rates for one unit of ``base_currency``, keyed by currency code."""
        base = normalize_currency(base_currency)
        cache_key = f"rates_{base}"
        cached = self.cache.get(cache_key)
        if cached is not None:
            return cached

        if not self.circuit_breaker.is_available(self.name):
            raise ProviderError(f"{self.name} circuit open; skipping live rate request")

        url = self.url_template.format(base=base)
        started = time.monotonic()
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as e:
            raise self._fail(f"Rate request to {url} failed: {e}", started) from e
        except ValueError as e:
            raise self._fail(f"Rate endpoint returned invalid JSON: {e}", started) from e

        if not isinstance(payload, dict) or payload.get("result") != "success":
            raise self._fail(f"Rate endpoint reported failure for {base}", started)
        raw_rates = payload.get("rates")
        if not isinstance(raw_rates, dict) or not raw_rates:
            raise self._fail(f"Rate endpoint returned no rates for {base}", started)

        try:
            rates = {str(code).upper(): Decimal(str(value)) for code, value in raw_rates.items()}
        except InvalidOperation as e:
            raise self._fail(f"Rate endpoint returned a non-numeric rate for {base}", started) from e

        self.circuit_breaker.record(self.name, success=True, duration=time.monotonic() - started)
        self.cache.put(cache_key, rates)
        logger.debug(f"Fetched {len(rates)} live rates for {base}")
        return rates

    def get_exchange_rate(self, from_currency: str, to_currency: str) -> Decimal:
        to_code = normalize_currency(to_currency)
        rates = self.fetch_rates(from_currency)
        rate = rates.get(to_code)
        if rate is None or rate <= 0:
            raise ProviderError(f"No live rate for {from_currency}->{to_code}")
        return rate

    def get_gold_price_per_gram(self, currency: str = "USD") -> GoldPriceQuote:
        currency = normalize_currency(currency)
        price = self.gold_usd_per_gram
        source = REFERENCE_GOLD_SOURCE
        if currency != "USD":
            price = price * self.get_exchange_rate("USD", currency)
            source = f"{REFERENCE_GOLD_SOURCE}+{self.name}-fx"
        return GoldPriceQuote(price=price, currency=currency, as_of=self.gold_as_of, source_count=1, source=source)
