"""Shared setup logic for CLI commands."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from pathlib import Path

import click
from rich.console import Console

from barakah.core.circuit_breaker import CircuitBreaker, CircuitBreakerConfig
from barakah.core.config import Config
from barakah.core.config_schema import BarakahConfig
from barakah.core.exceptions import ConfigurationError
from barakah.core.storage import KeyValueStore, LocalStorage
from barakah.core.utils.cache import Cache
from barakah.zakat.currency import CurrencyNormalizer
from barakah.zakat.models import NisabBasis
from barakah.zakat.nisab import NisabTracker
from barakah.zakat.portfolio import PortfolioRepository
from barakah.zakat.providers import FallbackPriceProvider, LiveRateProvider, StaticPriceProvider

DEFAULT_CONFIG_PATH = Path.home() / ".barakah" / "config.yaml"

console = Console()


def load_settings(ctx: click.Context) -> BarakahConfig:
    """Load and validate config from ``--config`` or ~/.barakah/config.yaml."""
    config_file = (ctx.obj or {}).get("config_file") or str(DEFAULT_CONFIG_PATH)
    try:
        return Config(config_file=config_file).validated()
    except ConfigurationError as e:
        raise click.ClickException(str(e)) from e


def build_provider(settings: BarakahConfig) -> StaticPriceProvider | FallbackPriceProvider:
    """Static tables, or live rates with a static fallback when enabled."""
    static = StaticPriceProvider(
        gold_usd_per_gram=settings.zakat.gold_price_per_gram,
        silver_usd_per_gram=settings.zakat.silver_price_per_gram,
    )
    if not settings.providers.live_enabled:
        return static

    breaker = CircuitBreaker(
        CircuitBreakerConfig(
            failure_threshold=settings.providers.failure_threshold,
            open_duration=settings.providers.open_duration,
        )
    )
    live = LiveRateProvider(
        url_template=settings.providers.exchange_rate_url,
        timeout=settings.providers.timeout_seconds,
        gold_usd_per_gram=settings.zakat.gold_price_per_gram,
        gold_as_of=static.as_of,
        circuit_breaker=breaker,
    )
    cache_dir = settings.paths.cache_dir
    last_known = Cache(cache_dir=str(cache_dir)) if cache_dir else None
    return FallbackPriceProvider(live, static, last_known=last_known)


def build_normalizer(settings: BarakahConfig, base_currency: str | None = None) -> CurrencyNormalizer:
    provider = build_provider(settings)
    return CurrencyNormalizer(base_currency or settings.zakat.base_currency, provider=provider)


def build_tracker(
    settings: BarakahConfig,
    basis: str | None = None,
    calendar_type: str | None = None,
    price_per_gram: Decimal | None = None,
) -> NisabTracker:
    """Nisab tracker priced in USD from an explicit price or the configured one."""
    basis = NisabBasis(basis or settings.zakat.nisab_basis)
    calendar_type = calendar_type or settings.zakat.calendar_type
    if price_per_gram is None:
        price_per_gram = (
            settings.zakat.gold_price_per_gram if basis is NisabBasis.GOLD else settings.zakat.silver_price_per_gram
        )
    return NisabTracker(price_per_gram, basis, "USD", calendar_type)


def money(value: Decimal, currency: str = "") -> str:
    amount = f"{value.quantize(Decimal('0.01'), rounding=ROUND_HALF_UP):,}"
    return f"{amount} {currency}".strip()


def build_repository(settings: BarakahConfig) -> PortfolioRepository:
    """Portfolio repository in ``paths.storage_dir`` (``<data_dir>/storage`` if unset)."""
    storage_dir = settings.paths.storage_dir or settings.paths.data_dir / "storage"
    return PortfolioRepository(KeyValueStore(LocalStorage(base_path=str(storage_dir))))
