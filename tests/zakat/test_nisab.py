"""Tests for barakah.zakat.nisab."""

from decimal import Decimal

import pytest

from barakah.core.exceptions import NisabConfigurationError
from barakah.zakat.currency import CurrencyNormalizer
from barakah.zakat.models import CalendarType, NisabBasis
from barakah.zakat.nisab import NisabStatus, NisabTracker, compute_nisab, meets_nisab, nisab_status
from barakah.zakat.providers import StaticPriceProvider


class TestComputeNisab:
    def test_gold(self):
        assert compute_nisab(Decimal("88.50")) == Decimal("7522.50")

    def test_silver(self):
        assert compute_nisab("1.05", NisabBasis.SILVER.grams) == Decimal("624.75")

    @pytest.mark.parametrize("price", [0, "-1", "not-a-price"])
    def test_invalid_price(self, price):
        with pytest.raises(NisabConfigurationError):
            compute_nisab(price)

    def test_invalid_weight(self):
        with pytest.raises(NisabConfigurationError, match="weight"):
            compute_nisab("88.50", 0)


class TestMeetsNisab:
    def test_inclusive_at_threshold(self):
        assert meets_nisab(Decimal("7522.50"), Decimal("7522.50"))

    def test_just_below(self):
        assert not meets_nisab(Decimal("7522.49"), Decimal("7522.50"))

    def test_negative_net_wealth(self):
        assert not meets_nisab(Decimal("-100"), Decimal("7522.50"))


class TestNisabStatus:
    def test_below(self):
        progress = nisab_status(Decimal("5000"), Decimal("7522.50"))
        assert progress.status is NisabStatus.BELOW
        assert Decimal("0.66") < progress.ratio < Decimal("0.67")

    def test_near(self):
        assert nisab_status(Decimal("7000"), Decimal("7522.50")).status is NisabStatus.NEAR

    def test_above_is_clamped(self):
        progress = nisab_status(Decimal("20000"), Decimal("7522.50"))
        assert progress.status is NisabStatus.ABOVE
        assert progress.ratio == Decimal("1")

    def test_negative_is_clamped(self):
        progress = nisab_status(Decimal("-500"), Decimal("7522.50"))
        assert progress.status is NisabStatus.BELOW
        assert progress.ratio == Decimal("0")

    def test_zero_threshold(self):
        with pytest.raises(NisabConfigurationError):
            nisab_status(Decimal("1"), Decimal("0"))


class TestNisabTracker:
    def test_threshold(self, gold_tracker):
        assert gold_tracker.threshold == Decimal("7522.50")
        assert gold_tracker.basis is NisabBasis.GOLD
        assert gold_tracker.currency == "USD"
        assert gold_tracker.calendar_type is CalendarType.ISLAMIC

    def test_update_price_recomputes(self, gold_tracker):
        assert gold_tracker.update_price("90") == Decimal("7650")
        assert gold_tracker.threshold == Decimal("7650")

    def test_update_price_with_currency(self, gold_tracker):
        gold_tracker.update_price("81.42", "eur")
        assert gold_tracker.currency == "EUR"
        assert gold_tracker.threshold == Decimal("6920.70")

    def test_invalid_update_keeps_previous_config(self, gold_tracker):
        with pytest.raises(NisabConfigurationError):
            gold_tracker.update_price(0)
        assert gold_tracker.threshold == Decimal("7522.50")

    def test_set_basis(self, gold_tracker):
        assert gold_tracker.set_basis("silver", "1.05") == Decimal("624.75")
        assert gold_tracker.basis is NisabBasis.SILVER

    def test_switching_basis_requires_price(self, gold_tracker):
        with pytest.raises(NisabConfigurationError, match="requires a price per gram"):
            gold_tracker.set_basis("silver")
        assert gold_tracker.basis is NisabBasis.GOLD
        assert gold_tracker.threshold == Decimal("7522.50")

    def test_same_basis_keeps_price(self, gold_tracker):
        assert gold_tracker.set_basis("gold") == Decimal("7522.50")

    def test_unknown_basis(self, gold_tracker):
        with pytest.raises(NisabConfigurationError, match="Unknown nisab basis"):
            gold_tracker.set_basis("platinum", "30")

    def test_set_calendar_type(self, gold_tracker):
        gold_tracker.set_calendar_type("western")
        assert gold_tracker.calendar_type is CalendarType.WESTERN
        assert gold_tracker.threshold == Decimal("7522.50")

    def test_threshold_in_other_currency(self, gold_tracker, normalizer):
        assert gold_tracker.threshold_in("EUR", normalizer) == Decimal("7522.50") * Decimal("0.92")
        assert gold_tracker.threshold_in("USD", normalizer) == Decimal("7522.50")

    def test_threshold_in_from_non_usd_tracker(self):
        tracker = NisabTracker("81.42", currency="EUR")
        normalizer = CurrencyNormalizer("EUR")
        assert tracker.threshold_in("EUR", normalizer) == Decimal("6920.70")

    def test_meets_and_status(self, gold_tracker):
        assert gold_tracker.meets(Decimal("10000"))
        assert not gold_tracker.meets(Decimal("5000"))
        assert gold_tracker.status(Decimal("7522.50")).status is NisabStatus.ABOVE

    def test_from_provider(self):
        tracker = NisabTracker.from_provider(StaticPriceProvider(), currency="EUR", calendar_type="western")
        assert tracker.price_per_gram == Decimal("88.50") * Decimal("0.92")
        assert tracker.currency == "EUR"
        assert tracker.calendar_type is CalendarType.WESTERN
        assert tracker.last_quote.source == "static"
