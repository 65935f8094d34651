"""Tests for barakah.core.utils.cache."""

import os
from datetime import datetime, timedelta
from decimal import Decimal

from barakah.core.utils.cache import Cache


class TestCache:
    def test_store_and_retrieve(self):
        cache = Cache()
        cache.put("rates_USD", {"EUR": Decimal("0.92")})
        assert cache.get("rates_USD") == {"EUR": Decimal("0.92")}

    def test_missing_key(self, tmp_dir):
        cache = Cache(cache_dir=tmp_dir)
        assert cache.get("nonexistent") is None
        assert cache.get_stale("nonexistent") is None

    def test_expired_entry_not_fresh(self):
        cache = Cache(ttl=timedelta(hours=1))
        stored = datetime(2026, 1, 1, 12, 0)
        cache.put("gold_USD", "quote", now=stored)
        assert cache.get("gold_USD", now=stored + timedelta(minutes=30)) == "quote"
        assert cache.get("gold_USD", now=stored + timedelta(hours=2)) is None

    def test_stale_entry_still_available(self):
        cache = Cache(ttl=timedelta(seconds=1))
        stored = datetime(2026, 1, 1, 12, 0)
        cache.put("gold_USD", "quote", now=stored)
        assert cache.get_stale("gold_USD") == ("quote", stored)

    def test_persists_across_instances(self, tmp_dir):
        Cache(cache_dir=tmp_dir).put("fx_USD_EUR", Decimal("0.91"))
        assert Cache(cache_dir=tmp_dir).get("fx_USD_EUR") == Decimal("0.91")

    def test_unsafe_key_is_sanitized(self, tmp_dir):
        cache = Cache(cache_dir=tmp_dir)
        cache.put("../escape/key", 1)
        assert cache.get("../escape/key") == 1
        assert all(name.endswith(".pkl") for name in os.listdir(tmp_dir))

    def test_clear_specific_key(self, tmp_dir):
        cache = Cache(cache_dir=tmp_dir)
        cache.put("keep", "data1")
        cache.put("remove", "data2")
        cache.clear("remove")
        assert cache.get("keep") == "data1"
        assert cache.get("remove") is None

    def test_clear_all(self, tmp_dir):
        cache = Cache(cache_dir=tmp_dir)
        cache.put("a", 1)
        cache.put("b", 2)
        cache.clear()
        assert cache.get("a") is None
        assert Cache(cache_dir=tmp_dir).get("b") is None

    def test_creates_directory(self, tmp_dir):
        cache_dir = os.path.join(tmp_dir, "nested", "cache")
        Cache(cache_dir=cache_dir)
        assert os.path.isdir(cache_dir)
