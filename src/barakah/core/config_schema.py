"""Pydantic models for config validation.

Opt-in schema validation for ``Config.config_data``.  Call
``Config.validated()`` to obtain a typed, validated ``BarakahConfig``
instance.  Dict-based access continues to work unchanged.
"""

from __future__ import annotations

from decimal import Decimal
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class PathsConfig(BaseModel):
    """File-system paths used by the engine."""

    data_dir: Path
    storage_dir: Path | None = None
    cache_dir: Path | None = None
    log_dir: Path | None = None

    @field_validator("data_dir", "storage_dir", "cache_dir", "log_dir", mode="before")
    @classmethod
    def _expand_user(cls, v: Any) -> Any:
        if isinstance(v, str):
            return Path(v).expanduser()
        if isinstance(v, Path):
            return v.expanduser()
        return v


class ZakatSettings(BaseModel):
    """Defaults for a new calculation session."""

    base_currency: str = "USD"
    calendar_type: Literal["islamic", "western"] = "islamic"
    nisab_basis: Literal["gold", "silver"] = "gold"
    gold_price_per_gram: Decimal = Field(default=Decimal("88.50"), gt=0)
    silver_price_per_gram: Decimal = Field(default=Decimal("1.05"), gt=0)

    @field_validator("base_currency", mode="before")
    @classmethod
    def _upper(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().upper()
        return v


class ProvidersConfig(BaseModel):
    """Live price/rate provider settings."""

    live_enabled: bool = False
    exchange_rate_url: str = "https://open.er-api.com/v6/latest/{base}"
    timeout_seconds: float = Field(default=5.0, gt=0)
    failure_threshold: int = Field(default=3, ge=1)
    open_duration: float = Field(default=300.0, ge=0)


class BarakahConfig(BaseModel):
    """Root configuration model.

    Uses ``extra="allow"`` so consumers can bolt on custom sections
    without touching this schema.
    """

    model_config = ConfigDict(extra="allow")

    paths: PathsConfig = PathsConfig(data_dir=Path("~/.barakah-data"))
    zakat: ZakatSettings = ZakatSettings()
    providers: ProvidersConfig = ProvidersConfig()
