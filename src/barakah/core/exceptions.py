"""
Barakah exception hierarchy.

All barakah exceptions inherit from BarakahError, making it easy for consumers
to catch library-level errors while still distinguishing specific failure modes.
"""

from __future__ import annotations

from typing import Any


class BarakahError(Exception):
    """Base exception class for all barakah errors."""


class ConfigurationError(BarakahError):
    """Raised for configuration errors (missing keys, invalid values)."""


class InvalidInputError(BarakahError, ValueError):
    """Raised when an entry is rejected at the entry point (negative amount, empty name, unknown currency)."""


class InvalidAnswerError(InvalidInputError):
    """Raised when a clarification answer does not fit the item's question."""


class NisabConfigurationError(ConfigurationError, ValueError):
    """Raised when the nisab inputs cannot produce a meaningful threshold."""


class UnresolvedItemsError(BarakahError):
    """Raised when finalizing a calculation while items still need clarification.

    Attributes:
        count: Number of unresolved items.
        items: The offending items, in entry order.
    """

    def __init__(self, items: list[Any]):
        self.items = list(items)
        self.count = len(self.items)
        names = ", ".join(getattr(item, "name", str(item)) for item in self.items)
        super().__init__(f"{self.count} item(s) still need clarification: {names}")


class APIError(BarakahError):
    """Raised for API communication errors."""


class ProviderError(APIError):
    """Raised when a price or exchange-rate provider cannot answer."""


class PortfolioNotFoundError(BarakahError, KeyError):
    """Raised when a portfolio id is unknown."""


class RecordNotFoundError(BarakahError, KeyError):
    """Raised when a calculation record or company id is unknown."""
