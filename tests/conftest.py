"""Shared test fixtures for barakah."""

import os
import tempfile
from decimal import Decimal

import pytest

from barakah.zakat.currency import CurrencyNormalizer
from barakah.zakat.nisab import NisabTracker
from barakah.zakat.session import ZakatSession


@pytest.fixture
def tmp_dir():
    """Provide a temporary directory that is cleaned up after the test."""
    with tempfile.TemporaryDirectory() as d:
        yield d


@pytest.fixture
def tmp_config_file(tmp_dir):
    """Create a temporary YAML config file."""
    import yaml

    config_data = {
        "paths": {
            "data_dir": os.path.join(tmp_dir, "data"),
            "cache_dir": os.path.join(tmp_dir, "cache"),
            "storage_dir": os.path.join(tmp_dir, "storage"),
        },
        "zakat": {
            "base_currency": "USD",
            "gold_price_per_gram": "88.50",
        },
    }
    config_path = os.path.join(tmp_dir, "config.yaml")
    with open(config_path, "w") as f:
        yaml.dump(config_data, f)
    return config_path


@pytest.fixture
def normalizer():
    """USD normalizer on the static rate table."""
    return CurrencyNormalizer("USD")


@pytest.fixture
def gold_tracker():
    """Gold nisab at $88.50/g -> $7,522.50."""
    return NisabTracker(Decimal("88.50"))


@pytest.fixture
def session(normalizer, gold_tracker):
    return ZakatSession(nisab=gold_tracker, normalizer=normalizer)
