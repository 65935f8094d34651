"""Metal price and exchange-rate providers."""

from .base import GoldPriceQuote, PriceRateProvider, ProviderAdvisory
from .fallback import FallbackPriceProvider
from .live import LiveRateProvider
from .static import StaticPriceProvider

__all__ = [
    "FallbackPriceProvider",
    "GoldPriceQuote",
    "LiveRateProvider",
    "PriceRateProvider",
    "ProviderAdvisory",
    "StaticPriceProvider",
]
