"""Tests for barakah.zakat.providers."""

from datetime import datetime, timedelta
from decimal import Decimal

import pytest
import requests

from barakah.core.circuit_breaker import CircuitBreaker, CircuitBreakerConfig
from barakah.core.exceptions import ProviderError
from barakah.core.utils.cache import Cache
from barakah.zakat.currency import CurrencyNormalizer
from barakah.zakat.nisab import NisabTracker
from barakah.zakat.providers import (
    FallbackPriceProvider,
    GoldPriceQuote,
    LiveRateProvider,
    PriceRateProvider,
    ProviderAdvisory,
    StaticPriceProvider,
)

# ── Fakes ───────────────────────────────────────────────────────────


class FakeResponse:
    def __init__(self, payload=None, status_code=200, bad_json=False):
        self.payload = payload
        self.status_code = status_code
        self.bad_json = bad_json

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        if self.bad_json:
            raise ValueError("Expecting value")
        return self.payload


class FakeSession:
    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def get(self, url, timeout=None):
        self.calls.append((url, timeout))
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(response, Exception):
            raise response
        return response


class ScriptedProvider:
    """Primary provider whose availability the test controls."""

    name = "live"

    def __init__(self, rate=Decimal("0.90"), gold=Decimal("80")):
        self.rate = rate
        self.gold = gold
        self.down = False

    def get_exchange_rate(self, from_currency, to_currency):
        if self.down:
            raise ProviderError("timeout")
        return self.rate

    def get_gold_price_per_gram(self, currency="USD"):
        if self.down:
            raise ProviderError("timeout")
        return GoldPriceQuote(price=self.gold, currency=currency, as_of=datetime(2026, 3, 1), source="live")


SUCCESS = {"result": "success", "base_code": "USD", "rates": {"USD": 1, "EUR": 0.9, "GBP": 0.78}}

# ── StaticPriceProvider ─────────────────────────────────────────────


class TestStaticPriceProvider:
    def test_gold_usd(self):
        quote = StaticPriceProvider().get_gold_price_per_gram()
        assert quote.price == Decimal("88.50")
        assert quote.currency == "USD"
        assert quote.source == "static"

    def test_gold_in_other_currency(self):
        quote = StaticPriceProvider().get_gold_price_per_gram("eur")
        assert quote.currency == "EUR"
        assert quote.price == Decimal("88.50") * Decimal("0.92")

    def test_silver(self):
        assert StaticPriceProvider().get_silver_price_per_gram() == Decimal("1.05")

    def test_custom_prices(self):
        provider = StaticPriceProvider(gold_usd_per_gram="100", silver_usd_per_gram="2")
        assert provider.get_gold_price_per_gram().price == Decimal("100")
        assert provider.get_silver_price_per_gram() == Decimal("2")

    def test_protocol(self):
        assert isinstance(StaticPriceProvider(), PriceRateProvider)


# ── LiveRateProvider ────────────────────────────────────────────────


class TestLiveRateProvider:
    def test_fetches_rate(self):
        session = FakeSession(FakeResponse(SUCCESS))
        provider = LiveRateProvider(url_template="https://rates.test/{base}", timeout=2.0, session=session)
        assert provider.get_exchange_rate("USD", "EUR") == Decimal("0.9")
        assert session.calls == [("https://rates.test/USD", 2.0)]

    def test_responses_are_cached(self):
        session = FakeSession(FakeResponse(SUCCESS))
        provider = LiveRateProvider(session=session)
        provider.get_exchange_rate("USD", "EUR")
        provider.get_exchange_rate("USD", "GBP")
        assert len(session.calls) == 1

    def test_gold_priced_with_live_rate(self):
        provider = LiveRateProvider(session=FakeSession(FakeResponse(SUCCESS)))
        quote = provider.get_gold_price_per_gram("EUR")
        assert quote.price == Decimal("88.50") * Decimal("0.9")
        assert quote.source == "static+live-fx"

    def test_gold_quote_keeps_reference_date(self):
        as_of = datetime(2025, 1, 15)
        provider = LiveRateProvider(gold_as_of=as_of, session=FakeSession(FakeResponse(SUCCESS)))
        assert provider.get_gold_price_per_gram("EUR").as_of == as_of
        assert provider.get_gold_price_per_gram("USD").as_of == as_of

    def test_gold_in_usd_needs_no_request(self):
        session = FakeSession(FakeResponse(SUCCESS))
        provider = LiveRateProvider(session=session)
        quote = provider.get_gold_price_per_gram("USD")
        assert quote.price == Decimal("88.50")
        assert quote.source == "static"
        assert session.calls == []

    @pytest.mark.parametrize(
        "response",
        [
            requests.ConnectionError("refused"),
            FakeResponse(status_code=503),
            FakeResponse(bad_json=True),
            FakeResponse({"result": "error", "error-type": "unsupported-code"}),
            FakeResponse({"result": "success", "rates": {}}),
            FakeResponse({"result": "success", "rates": {"EUR": "n/a"}}),
        ],
    )
    def test_failures_raise_provider_error(self, response):
        provider = LiveRateProvider(session=FakeSession(response))
        with pytest.raises(ProviderError):
            provider.get_exchange_rate("USD", "EUR")

    def test_missing_currency(self):
        provider = LiveRateProvider(session=FakeSession(FakeResponse(SUCCESS)))
        with pytest.raises(ProviderError, match="No live rate"):
            provider.get_exchange_rate("USD", "JPY")

    def test_circuit_opens_after_failures(self):
        session = FakeSession(requests.Timeout("slow"))
        breaker = CircuitBreaker(CircuitBreakerConfig(failure_threshold=2, open_duration=60))
        provider = LiveRateProvider(session=session, circuit_breaker=breaker)

        for _ in range(2):
            with pytest.raises(ProviderError):
                provider.get_exchange_rate("USD", "EUR")
        with pytest.raises(ProviderError, match="circuit open"):
            provider.get_exchange_rate("USD", "EUR")
        assert len(session.calls) == 2
        assert breaker.get_status()["live"]["failures"] == 2

    def test_success_recorded(self):
        breaker = CircuitBreaker()
        provider = LiveRateProvider(session=FakeSession(FakeResponse(SUCCESS)), circuit_breaker=breaker)
        provider.get_exchange_rate("USD", "EUR")
        assert breaker.get_status()["live"]["successes"] == 1


# ── FallbackPriceProvider ───────────────────────────────────────────


class TestFallbackPriceProvider:
    def test_primary_answers(self):
        provider = FallbackPriceProvider(ScriptedProvider())
        assert provider.get_exchange_rate("USD", "EUR") == Decimal("0.90")
        assert provider.advisories == []
        assert provider.last_advisory is None

    def test_identity_skips_primary(self):
        primary = ScriptedProvider()
        primary.down = True
        provider = FallbackPriceProvider(primary)
        assert provider.get_exchange_rate("eur", "EUR") == Decimal("1")
        assert provider.advisories == []

    def test_static_when_nothing_cached(self):
        primary = ScriptedProvider()
        primary.down = True
        provider = FallbackPriceProvider(primary)
        assert provider.get_exchange_rate("USD", "EUR") == Decimal("0.92")
        advisory = provider.last_advisory
        assert isinstance(advisory, ProviderAdvisory)
        assert str(advisory) == "Using static USD->EUR rate"
        assert advisory.failed_source == "live"
        assert advisory.used_source == "static"

    def test_last_known_value_before_static(self):
        primary = ScriptedProvider()
        provider = FallbackPriceProvider(primary)
        provider.get_exchange_rate("USD", "EUR")
        primary.down = True
        assert provider.get_exchange_rate("USD", "EUR") == Decimal("0.90")
        assert provider.last_advisory.used_source == "cache"
        assert str(provider.last_advisory).startswith("Using cached USD->EUR rate from ")

    def test_expired_last_known_value_still_used(self):
        cache = Cache(ttl=timedelta(seconds=1))
        cache.put("fx_USD_EUR", Decimal("0.95"), now=datetime(2020, 1, 1))
        primary = ScriptedProvider()
        primary.down = True
        provider = FallbackPriceProvider(primary, last_known=cache)
        assert provider.get_exchange_rate("USD", "EUR") == Decimal("0.95")
        assert "2020-01-01 00:00" in str(provider.last_advisory)

    def test_gold_fallbacks(self):
        primary = ScriptedProvider()
        provider = FallbackPriceProvider(primary)
        primary.down = True
        assert provider.get_gold_price_per_gram().price == Decimal("88.50")
        assert str(provider.last_advisory) == "Using static gold price"

        primary.down = False
        provider.get_gold_price_per_gram()
        primary.down = True
        assert provider.get_gold_price_per_gram().price == Decimal("80")
        assert provider.last_advisory.used_source == "cache"

    def test_clear_advisories(self):
        primary = ScriptedProvider()
        primary.down = True
        provider = FallbackPriceProvider(primary)
        provider.get_exchange_rate("USD", "EUR")
        cleared = provider.clear_advisories()
        assert len(cleared) == 1
        assert provider.advisories == []

    def test_normalizer_surfaces_fallback_advisory(self):
        primary = ScriptedProvider()
        primary.down = True
        fallback = FallbackPriceProvider(primary)
        normalizer = CurrencyNormalizer("USD", provider=fallback)

        quote = normalizer.rate("USD", "EUR")
        assert quote.rate == Decimal("0.92")
        assert quote.is_fallback
        assert quote.source == "static"
        assert quote.advisory == "Using static USD->EUR rate"
        assert normalizer.advisories == ["Using static USD->EUR rate"]

        assert normalizer.convert(100, "USD", "EUR") == Decimal("92.00")
        assert normalizer.advisories == ["Using static USD->EUR rate"]

    def test_normalizer_over_healthy_fallback_reports_live(self):
        normalizer = CurrencyNormalizer("USD", provider=FallbackPriceProvider(ScriptedProvider()))
        quote = normalizer.rate("USD", "EUR")
        assert quote.source == "fallback"
        assert not quote.is_fallback
        assert quote.advisory is None
        assert normalizer.advisories == []

    def test_nisab_from_failing_live_source(self):
        primary = ScriptedProvider()
        primary.down = True
        provider = FallbackPriceProvider(primary)
        tracker = NisabTracker.from_provider(provider)
        assert tracker.threshold == Decimal("7522.50")
        assert provider.last_advisory is not None

    def test_live_provider_behind_fallback(self):
        session = FakeSession(requests.ConnectionError("offline"))
        provider = FallbackPriceProvider(LiveRateProvider(session=session))
        assert provider.get_exchange_rate("USD", "GBP") == Decimal("0.79")
        assert provider.last_advisory.failed_source == "live"
