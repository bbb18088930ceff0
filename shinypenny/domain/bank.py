"""Bank account and company presentation data."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

# Position of the national bank code inside the IBAN, per country.
BANK_CODE_SLICES: dict[str, tuple[int, int]] = {
    "AT": (4, 9),
    "BE": (4, 7),
    "CH": (4, 9),
    "DE": (4, 12),
    "ES": (4, 8),
    "FR": (4, 9),
    "GB": (4, 8),
    "IT": (5, 10),
    "LI": (4, 9),
    "LU": (4, 7),
    "NL": (4, 8),
}

_IBAN_RE = re.compile(r"^[A-Z]{2}[0-9]{2}[A-Z0-9]{11,30}$")


@dataclass(frozen=True)
class Iban:
    """An ISO 13616 IBAN in electronic form (no spaces)."""

    value: str

    @classmethod
    def parse(cls, text: str) -> Iban:
        electronic = re.sub(r"\s+", "", text).upper()
        if not _IBAN_RE.match(electronic):
            raise ValueError(f"Not a valid IBAN: {text!r}")
        rearranged = electronic[4:] + electronic[:4]
        digits = "".join(str(int(ch, 36)) for ch in rearranged)
        if int(digits) % 97 != 1:
            raise ValueError(f"IBAN checksum mismatch: {text!r}")
        return cls(electronic)

    @property
    def country(self) -> str:
        return self.value[:2]

    @property
    def bank_code(self) -> str | None:
        """National bank code embedded in the IBAN, if the country is known."""
        bounds = BANK_CODE_SLICES.get(self.country)
        if bounds is None:
            return None
        start, end = bounds
        return self.value[start:end]

    def __str__(self) -> str:
        return " ".join(self.value[i : i + 4] for i in range(0, len(self.value), 4))


@dataclass(frozen=True)
class BankInfo:
    """Where the reimbursement is paid to."""

    # Full name of the bank account owner.
    name: str
    iban: Iban
    # Institute name and BIC, None when the bank code is not in the lookup table.
    institute: str | None = None
    bic: str | None = None

    def __post_init__(self) -> None:
        if not self.name.strip():
            raise ValueError("Bank field 'name' must not be empty")
        if not self.iban.value:
            raise ValueError("Bank field 'iban' must not be empty")


@dataclass(frozen=True)
class CompanyInfo:
    """Company name, address and an optional decoded logo image."""

    name: str = ""
    address: str = ""
    logo: Any = None

    @property
    def has_footer(self) -> bool:
        return bool(self.name or self.address)
