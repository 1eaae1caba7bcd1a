# ShopLedger - Sales & Expense Ledger with Business Insights for small shops
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Configuration helpers for ShopLedger.

This module is responsible for:
- loading the application configuration from a TOML file,
- exposing typed dataclasses used by the rest of the application.

The configuration is always passed explicitly to the functions that need it;
there is no module-level settings object.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

try:
    import tomllib  # Python 3.11+
except ModuleNotFoundError:  # pragma: no cover - fallback for older Python
    import tomli as tomllib  # type: ignore[import]

from .db import DatabaseConfig
from .engine import InsightsSettings

DEFAULT_CONFIG_FILE = "shop_ledger_config.toml"
DEFAULT_DB_PATH = "data/db/shop_ledger.sqlite"
DEFAULT_CURRENCY = "KSh"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class AppConfig:
    """
    Application-wide configuration for ShopLedger.

    This aggregates:
    - the shop identity and display currency,
    - the database configuration (where the shop's records are stored),
    - the tunable insights settings,
    - the default log level.
    """

    shop_name: str
    currency: str
    database: DatabaseConfig
    insights: InsightsSettings = field(default_factory=InsightsSettings)
    log_level: str = "WARNING"


def _load_toml(path: Path) -> dict[str, Any]:
    """
    Load a TOML file and return its content as a dictionary.

    Raises:
        FileNotFoundError: if the file does not exist.
        ValueError: if the TOML content cannot be parsed or is not a table.
    """
    if not path.is_file():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except Exception as exc:  # noqa: BLE001
        raise ValueError(f"Failed to parse TOML config file: {path}") from exc

    if not isinstance(data, dict):
        raise ValueError(f"Invalid TOML root type in {path}, expected a table.")

    return data


def _section(raw: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    section = raw.get(name) or {}
    if not isinstance(section, Mapping):
        return {}
    return section


def _positive_int(section: Mapping[str, Any], key: str, default: int) -> int:
    raw_value = section.get(key)
    if raw_value is None:
        return default
    try:
        value = int(raw_value)
    except (TypeError, ValueError) as exc:
        raise ValueError(
            f"Invalid value for 'insights.{key}' in the configuration. "
            "Expected an integer."
        ) from exc
    if value <= 0:
        raise ValueError(f"'insights.{key}' must be a positive integer, got {value}.")
    return value


def _parse_insights(raw: Mapping[str, Any]) -> InsightsSettings:
    """Extract the [insights] section, falling back to the defaults."""
    section = _section(raw, "insights")
    defaults = InsightsSettings()
    return InsightsSettings(
        slow_moving_days=_positive_int(section, "slow_moving_days", defaults.slow_moving_days),
        top_products_limit=_positive_int(
            section, "top_products_limit", defaults.top_products_limit
        ),
        forecast_window=_positive_int(section, "forecast_window", defaults.forecast_window),
        trend_chart_days=_positive_int(section, "trend_chart_days", defaults.trend_chart_days),
    )


def default_app_config(base_dir: Optional[Path] = None) -> AppConfig:
    """Configuration used when no TOML file is available."""
    base_dir = base_dir or Path.cwd()
    return AppConfig(
        shop_name="My Shop",
        currency=DEFAULT_CURRENCY,
        database=DatabaseConfig(engine="sqlite", path=(base_dir / DEFAULT_DB_PATH).resolve()),
    )


def load_app_config(config_path: Optional[str] = None) -> AppConfig:
    """
    Load the ShopLedger application configuration from a TOML file.

    Expected top-level sections in the TOML file
    --------------------------------------------
    [shop]
        Shop name and display currency.

    [database]
        Database engine and SQLite file path (one file per shop).

    [insights]
        Optional overrides of the insights settings (slow-moving threshold,
        top products limit, forecast window, trend chart length).

    [logging]
        Default log level.

    Notes
    -----
    - All file paths in the TOML are resolved relative to the directory of
      the TOML file itself.
    - When ``config_path`` is omitted and ``shop_ledger_config.toml`` does not
      exist in the current directory, built-in defaults are returned. An
      explicit path that does not exist is an error.

    Parameters
    ----------
    config_path : str, optional
        Path to the TOML configuration file.

    Returns
    -------
    AppConfig
        Parsed and validated application configuration.
    """
    if config_path is None:
        config_file = Path(DEFAULT_CONFIG_FILE).resolve()
        if not config_file.is_file():
            return default_app_config()
    else:
        config_file = Path(config_path).resolve()

    raw = _load_toml(config_file)
    base_dir = config_file.parent

    # 1) Shop section
    shop_section = _section(raw, "shop")
    shop_name = str(shop_section.get("name") or "My Shop")
    currency = str(shop_section.get("currency") or DEFAULT_CURRENCY)

    # 2) Database section
    database_section = _section(raw, "database")
    db_engine = str(database_section.get("engine") or "sqlite")
    db_path_raw = database_section.get("path") or DEFAULT_DB_PATH
    db_path = (base_dir / str(db_path_raw)).resolve()

    # 3) Insights settings
    insights = _parse_insights(raw)

    # 4) Logging
    logging_section = _section(raw, "logging")
    log_level = str(logging_section.get("level") or "WARNING").upper()
    if log_level not in LOG_LEVELS:
        raise ValueError(
            f"Invalid value for 'logging.level': {log_level!r}. "
            f"Expected one of: {', '.join(LOG_LEVELS)}."
        )

    return AppConfig(
        shop_name=shop_name,
        currency=currency,
        database=DatabaseConfig(engine=db_engine, path=db_path),
        insights=insights,
        log_level=log_level,
    )
