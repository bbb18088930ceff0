"""Runtime infrastructure for shinypenny.

This package provides process/runtime services including:
- Logging setup via get_logger()
- Path resolution via get_paths(), ProjectPaths
- User configuration via load_config()
- Exchange rates via ExchangeBuro and FrankfurterRateSource
- Bank code lookups via load_bank_table(), lookup_bank()

Usage:
    from shinypenny.runtime import get_logger, get_paths, load_config

    logger = get_logger(__name__)
    config = load_config()
"""

from shinypenny.runtime.bank_codes import BankEntry, load_bank_table, lookup_bank, parse_bank_table
from shinypenny.runtime.config import (
    CompanyConfig,
    Config,
    FontConfig,
    RateConfig,
    load_config,
    parse_config,
)
from shinypenny.runtime.exchange import ExchangeBuro, FrankfurterRateSource, RateSource
from shinypenny.runtime.logging import (
    DEFAULT_LOG_LEVEL,
    LOG_FORMAT,
    LOG_FORMAT_DEBUG,
    configure_logging,
    get_logger,
    set_log_level,
)
from shinypenny.runtime.paths import ProjectPaths, get_paths, set_config_override

__all__ = [
    # Logging
    "get_logger",
    "configure_logging",
    "set_log_level",
    "DEFAULT_LOG_LEVEL",
    "LOG_FORMAT",
    "LOG_FORMAT_DEBUG",
    # Config
    "Config",
    "CompanyConfig",
    "FontConfig",
    "RateConfig",
    "load_config",
    "parse_config",
    # Banks
    "BankEntry",
    "load_bank_table",
    "lookup_bank",
    "parse_bank_table",
    # Exchange rates
    "ExchangeBuro",
    "FrankfurterRateSource",
    "RateSource",
    # Paths
    "get_paths",
    "set_config_override",
    "ProjectPaths",
]
