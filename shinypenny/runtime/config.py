"""User configuration: payee name, IBAN, company profile, fonts and rate source."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from shinypenny.domain.bank import Iban
from shinypenny.runtime.bank_codes import BankEntry, parse_bank_table
from shinypenny.runtime.logging import get_logger
from shinypenny.runtime.paths import get_paths

logger = get_logger(__name__)

DEFAULT_REGULAR_FONT = "Vera.ttf"
DEFAULT_BOLD_FONT = "VeraBd.ttf"
DEFAULT_RATES_URL = "https://api.frankfurter.app"
DEFAULT_RATES_TIMEOUT = 10.0


@dataclass(frozen=True)
class CompanyConfig:
    name: str = ""
    address: str = ""
    image: Path | None = None


@dataclass(frozen=True)
class FontConfig:
    """TrueType font files; bare names are searched in reportlab's font path."""

    regular: str = DEFAULT_REGULAR_FONT
    bold: str = DEFAULT_BOLD_FONT


@dataclass(frozen=True)
class RateConfig:
    base_url: str = DEFAULT_RATES_URL
    timeout: float = DEFAULT_RATES_TIMEOUT


@dataclass(frozen=True)
class Config:
    name: str
    iban: Iban
    company: CompanyConfig = field(default_factory=CompanyConfig)
    fonts: FontConfig = field(default_factory=FontConfig)
    rates: RateConfig = field(default_factory=RateConfig)
    # Inline bank table; None means use the banks.toml next to the config file.
    banks: dict[str, BankEntry] | None = None


def _require_str(raw: dict[str, Any], key: str, section: str = "") -> str:
    value = raw.get(key)
    label = f"{section}.{key}" if section else key
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Config field '{label}' must be a non-empty string")
    return value.strip()


def _optional_str(raw: dict[str, Any], key: str, default: str = "") -> str:
    value = raw.get(key, default)
    if not isinstance(value, str):
        raise ValueError(f"Config field '{key}' must be a string")
    return value.strip()


def parse_config(raw: dict[str, Any], base_dir: Path | None = None) -> Config:
    """Build a Config from parsed TOML; relative paths resolve against ``base_dir``."""
    name = _require_str(raw, "name")
    try:
        iban = Iban.parse(_require_str(raw, "iban"))
    except ValueError as exc:
        raise ValueError(f"Config field 'iban': {exc}") from exc

    company_raw = raw.get("company", {})
    image: Path | None = None
    if company_raw.get("image"):
        image = Path(str(company_raw["image"])).expanduser()
        if base_dir is not None and not image.is_absolute():
            image = base_dir / image
    company = CompanyConfig(
        name=_optional_str(company_raw, "name"),
        address=_optional_str(company_raw, "address"),
        image=image,
    )

    fonts_raw = raw.get("fonts", {})
    fonts = FontConfig(
        regular=_optional_str(fonts_raw, "regular", DEFAULT_REGULAR_FONT),
        bold=_optional_str(fonts_raw, "bold", DEFAULT_BOLD_FONT),
    )

    rates_raw = raw.get("rates", {})
    rates = RateConfig(
        base_url=_optional_str(rates_raw, "base_url", DEFAULT_RATES_URL).rstrip("/"),
        timeout=float(rates_raw.get("timeout", DEFAULT_RATES_TIMEOUT)),
    )

    banks = parse_bank_table(raw["banks"]) if "banks" in raw else None
    return Config(name=name, iban=iban, company=company, fonts=fonts, rates=rates, banks=banks)


def load_config(config_path: Path | None = None) -> Config:
    """
    Load the user configuration from TOML.

    Args:
        config_path: Explicit file. If None, uses the configured default location.
    """
    try:
        import tomllib
    except ImportError:
        import tomli as tomllib  # type: ignore[no-redef]

    path = config_path if config_path is not None else get_paths().config_file
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, "rb") as f:
        raw = tomllib.load(f)

    logger.debug("Loaded config from %s", path)
    return parse_config(raw, base_dir=path.parent)
