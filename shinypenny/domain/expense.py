"""Amounts in an arbitrary currency, optionally carrying a rate to EUR."""

from __future__ import annotations

import re
from dataclasses import dataclass, replace

from shinypenny.domain.errors import ParseError, RateUnavailable
from shinypenny.domain.money import Euro, decimal_from_text

EUR = "EUR"

# Active ISO 4217 alphabetic codes.
ISO_4217_CODES = frozenset(
    """
    AED AFN ALL AMD ANG AOA ARS AUD AWG AZN BAM BBD BDT BGN BHD BIF BMD BND BOB
    BRL BSD BTN BWP BYN BZD CAD CDF CHF CLP CNY COP CRC CUP CVE CZK DJF DKK DOP
    DZD EGP ERN ETB EUR FJD FKP GBP GEL GHS GIP GMD GNF GTQ GYD HKD HNL HTG HUF
    IDR ILS INR IQD IRR ISK JMD JOD JPY KES KGS KHR KMF KPW KRW KWD KYD KZT LAK
    LBP LKR LRD LSL LYD MAD MDL MGA MKD MMK MNT MOP MRU MUR MVR MWK MXN MYR MZN
    NAD NGN NIO NOK NPR NZD OMR PAB PEN PGK PHP PKR PLN PYG QAR RON RSD RUB RWF
    SAR SBD SCR SDG SEK SGD SHP SLE SOS SRD SSP STN SVC SYP SZL THB TJS TMT TND
    TOP TRY TTD TWD TZS UAH UGX USD UYU UZS VES VND VUV WST XAF XCD XCG XOF XPF
    YER ZAR ZMW ZWG
    """.split()
)

CURRENCY_SYMBOLS = {
    "$": "USD",
    "€": "EUR",
    "¥": "JPY",
    "£": "GBP",
}

_EXPENSE_RE = re.compile(
    r"^\s*([0-9]+(?:[,.][0-9]*)?)\s*([¥£€$]|[A-Z]{3})?\s*(?:@\s*([0-9]+(?:[,.][0-9]*)?)\s*)?$"
)


def parse_currency(token: str, field: str = "currency") -> str:
    """Map a currency symbol or ISO 4217 code to its code."""
    if token in CURRENCY_SYMBOLS:
        return CURRENCY_SYMBOLS[token]
    if token in ISO_4217_CODES:
        return token
    raise ParseError("unknown currency code", field=field, value=token)


@dataclass(frozen=True)
class Expense:
    """A value followed by a 3 letter ISO 4217 code or a currency symbol.

    ``rate`` is the number of EUR one unit of ``currency`` is worth.
    """

    amount: float
    currency: str = EUR
    rate: float | None = None

    @classmethod
    def parse(cls, text: str, field: str = "expense") -> Expense:
        match = _EXPENSE_RE.match(text)
        if match is None:
            raise ParseError("is not an acceptable expense value", field=field, value=text)
        amount = float(decimal_from_text(match.group(1), field))
        currency = parse_currency(match.group(2), field) if match.group(2) else EUR
        rate: float | None = None
        if match.group(3) is not None:
            if currency == EUR:
                raise ParseError("can't have EUR and a rate for converting to EUR", field=field, value=text)
            rate = float(decimal_from_text(match.group(3), field))
            if rate <= 0.0:
                raise ParseError("exchange rate must be positive", field=field, value=text)
        return cls(amount, currency, rate)

    @property
    def is_euro(self) -> bool:
        return self.currency == EUR

    def with_rate(self, rate: float) -> Expense:
        return replace(self, rate=rate)

    def as_euro(self) -> Euro:
        if self.is_euro:
            return Euro(self.amount)
        if self.rate is None:
            raise RateUnavailable("no exchange rate was resolved", value=str(self))
        return Euro(self.amount * self.rate)

    def __str__(self) -> str:
        text = f"{self.amount:.2f}"
        if self.is_euro:
            return text
        text = f"{text} {self.currency}"
        if self.rate is not None:
            text = f"{text} @ {self.rate:g} : {self.as_euro()}"
        return text
