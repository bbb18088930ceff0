"""Runtime loader for the bank code -> institute/BIC lookup table."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any

from shinypenny.runtime.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class BankEntry:
    """One financial institute as listed in the lookup table."""

    bank_code: str
    institute: str
    bic: str | None = None
    location: str | None = None


def parse_bank_table(raw: Mapping[str, Any]) -> dict[str, BankEntry]:
    """Build entries from a ``{bank_code: {institute, bic, location}}`` mapping."""
    table: dict[str, BankEntry] = {}
    for code, entry in raw.items():
        if not isinstance(entry, Mapping):
            raise ValueError(f"Bank table entry {code!r} must be a table")
        institute = str(entry.get("institute", "")).strip()
        if not institute:
            raise ValueError(f"Bank table entry {code!r} lacks an institute")
        bic = str(entry["bic"]).strip() if entry.get("bic") else None
        location = str(entry["location"]).strip() if entry.get("location") else None
        table[str(code).strip()] = BankEntry(str(code).strip(), institute, bic, location)
    return table


@lru_cache(maxsize=4)
def load_bank_table(table_path: str) -> dict[str, BankEntry]:
    """
    Load the bank lookup table from TOML.

    A missing file yields an empty table; lookups then return None.
    """
    try:
        import tomllib
    except ImportError:
        import tomli as tomllib  # type: ignore[no-redef]

    path = Path(table_path)
    if not path.exists():
        logger.debug("No bank table at %s", path)
        return {}

    with open(path, "rb") as f:
        config = tomllib.load(f)

    return parse_bank_table(config.get("banks", {}))


def lookup_bank(bank_code: str | None, table: Mapping[str, BankEntry]) -> BankEntry | None:
    """Find the institute owning ``bank_code``; None when unknown."""
    if bank_code is None:
        return None
    entry = table.get(bank_code)
    if entry is None:
        logger.info("Bank code %s not found in bank table", bank_code)
    return entry
