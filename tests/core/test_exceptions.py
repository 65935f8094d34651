"""Tests for barakah.core.exceptions."""

import pytest

from barakah.core.exceptions import (
    APIError,
    BarakahError,
    ConfigurationError,
    InvalidAnswerError,
    InvalidInputError,
    NisabConfigurationError,
    PortfolioNotFoundError,
    ProviderError,
    RecordNotFoundError,
    UnresolvedItemsError,
)
from barakah.core.storage import StorageError, StorageKeyError
from barakah.zakat.models import LineItem


def test_hierarchy():
    """All exceptions should inherit from BarakahError."""
    for exc_cls in [
        ConfigurationError,
        InvalidInputError,
        InvalidAnswerError,
        NisabConfigurationError,
        UnresolvedItemsError,
        APIError,
        ProviderError,
        PortfolioNotFoundError,
        RecordNotFoundError,
        StorageError,
    ]:
        assert issubclass(exc_cls, BarakahError)


def test_value_error_compatibility():
    assert issubclass(InvalidInputError, ValueError)
    assert issubclass(InvalidAnswerError, ValueError)
    assert issubclass(NisabConfigurationError, ValueError)
    assert issubclass(NisabConfigurationError, ConfigurationError)


def test_key_error_compatibility():
    assert issubclass(PortfolioNotFoundError, KeyError)
    assert issubclass(RecordNotFoundError, KeyError)
    assert issubclass(StorageKeyError, KeyError)


def test_provider_error_is_api_error():
    assert issubclass(ProviderError, APIError)


def test_unresolved_items_error_carries_items():
    items = [LineItem(name="Mystery", amount=5), LineItem(name="Equipment", amount=7)]
    err = UnresolvedItemsError(items)
    assert err.count == 2
    assert err.items == items
    assert "2 item(s)" in str(err)
    assert "Mystery" in str(err)
    assert "Equipment" in str(err)


def test_catch_base():
    """Catching BarakahError should catch all subtypes."""
    with pytest.raises(BarakahError, match="rate limited"):
        raise ProviderError("rate limited")
