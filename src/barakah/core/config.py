"""
Hierarchical configuration management.

Loads configuration from multiple sources with this precedence (highest wins):
    1. Environment variables (PREFIX_SECTION__KEY)
    2. Config file (YAML or JSON)
    3. Built-in defaults

Usage:
    config = Config(config_file="barakah.yaml")

    config.get("zakat.base_currency")      # dot-notation access
    config.get("providers.timeout_seconds")
    settings = config.validated()          # typed, validated view
"""

from __future__ import annotations

import copy
import json
import os
from typing import TYPE_CHECKING, Any

import yaml

from .exceptions import ConfigurationError

if TYPE_CHECKING:
    from .config_schema import BarakahConfig

_DEFAULT_ENV_PREFIX = "BARAKAH_"
_DEFAULT_DATA_DIR_NAME = ".barakah-data"

_ZAKAT_DEFAULTS: dict[str, Any] = {
    "base_currency": "USD",
    "calendar_type": "islamic",
    "nisab_basis": "gold",
    "gold_price_per_gram": "88.50",
    "silver_price_per_gram": "1.05",
}

_PROVIDER_DEFAULTS: dict[str, Any] = {
    "live_enabled": False,
    "exchange_rate_url": "https://open.er-api.com/v6/latest/{base}",
    "timeout_seconds": 5.0,
    "failure_threshold": 3,
    "open_duration": 300.0,
}


def _merge(target: dict, source: dict) -> None:
    """Recursively merge source into target; nested dicts merge, anything else replaces."""
    for key, value in source.items():
        if isinstance(target.get(key), dict) and isinstance(value, dict):
            _merge(target[key], value)
        else:
            target[key] = value


class Config:
    """
    Central configuration manager.

    Loads and merges configuration from defaults, a config file, and
    environment variables. Env vars use double-underscore to denote nesting:
    BARAKAH_ZAKAT__BASE_CURRENCY=EUR -> config["zakat"]["base_currency"] = "EUR"
    """

    def __init__(
        self,
        config_file: str | None = None,
        env_prefix: str = _DEFAULT_ENV_PREFIX,
        data_dir: str | None = None,
        defaults: dict[str, Any] | None = None,
    ):
        """
        Args:
            config_file: Path to YAML or JSON configuration file. A missing file is ignored.
            env_prefix: Prefix for environment variable overrides. Empty disables them.
            data_dir: Base directory for portfolios and caches. Defaults to ~/.barakah-data.
            defaults: Additional default values to merge (consumer-specific).
        """
        self.config_file = config_file
        self.env_prefix = env_prefix or ""
        self._data_dir = os.path.expanduser(data_dir or os.path.join("~", _DEFAULT_DATA_DIR_NAME))
        self.sources: list[str] = []

        self.config_data = self._defaults()
        if defaults:
            _merge(self.config_data, copy.deepcopy(defaults))
        if config_file and os.path.exists(config_file):
            _merge(self.config_data, self._read_file(config_file))
            self.sources.append(config_file)
        self._apply_env()

    def _defaults(self) -> dict[str, Any]:
        return {
            "paths": {
                "data_dir": self._data_dir,
                "storage_dir": os.path.join(self._data_dir, "storage"),
                "cache_dir": os.path.join(self._data_dir, "cache"),
            },
            "zakat": dict(_ZAKAT_DEFAULTS),
            "providers": dict(_PROVIDER_DEFAULTS),
        }

    @staticmethod
    def _read_file(path: str) -> dict[str, Any]:
        """Parse a YAML or JSON file. Other extensions contribute nothing."""
        ext = os.path.splitext(path)[1].lower()
        if ext not in (".yaml", ".yml", ".json"):
            return {}
        try:
            with open(path) as f:
                data = json.load(f) if ext == ".json" else yaml.safe_load(f)
        except (yaml.YAMLError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Cannot parse config file {path}: {e}") from e
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file {path} must contain a mapping at the top level")
        return data

    def _apply_env(self) -> None:
        if not self.env_prefix:
            return
        for env_key, env_value in os.environ.items():
            if env_key.startswith(self.env_prefix):
                self.set(env_key[len(self.env_prefix) :].lower().replace("__", "."), env_value)
                self.sources.append(f"${env_key}")

    def _parent(self, parts: list[str], create: bool) -> dict | None:
        node = self.config_data
        for part in parts[:-1]:
            child = node.get(part)
            if not isinstance(child, dict):
                if not create:
                    return None
                child = node[part] = {}
            node = child
        return node

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get a config value by dot-notation path.

        Args:
            key_path: e.g. "zakat.base_currency", "paths.storage_dir"
            default: Returned when key is not found.
        """
        parts = key_path.split(".")
        parent = self._parent(parts, create=False)
        if parent is None:
            return default
        return parent.get(parts[-1], default)

    def set(self, key_path: str, value: Any) -> None:
        """Set a config value by dot-notation path, creating intermediate dicts."""
        parts = key_path.split(".")
        self._parent(parts, create=True)[parts[-1]] = value

    def validated(self) -> BarakahConfig:
        """Return a typed, validated view of the current configuration.

        Raises:
            ConfigurationError: if any section fails validation.
        """
        from pydantic import ValidationError

        from .config_schema import BarakahConfig

        try:
            return BarakahConfig.model_validate(self.config_data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e

    def get_data_dir(self) -> str:
        """Return the resolved data directory path."""
        return os.path.expanduser(self.get("paths.data_dir", self._data_dir))

    def ensure_directories(self) -> None:
        """Create all configured directories if they don't exist."""
        for path_value in self.get("paths", {}).values():
            if isinstance(path_value, str):
                os.makedirs(os.path.expanduser(path_value), exist_ok=True)
