"""Core domain models for reimbursement documents.

This package is pure: it performs no I/O and imports nothing outside the
standard library and itself.

- Euro, Percentage: tolerant money and scaled tax percentages
- Expense: an amount in any currency with an optional rate to EUR
- Record, Row, Totals: input lines, table rows and their sums
- aggregate(): two-phase validation and column-shape unification

Usage:
    from shinypenny.domain import Record, aggregate
"""

from shinypenny.domain.aggregate import Aggregation, RateLookup, aggregate, resolve_rates, validate_record
from shinypenny.domain.bank import BankInfo, CompanyInfo, Iban
from shinypenny.domain.errors import (
    FontLoadError,
    ImageDecodeError,
    InvertedAmounts,
    NoCatalogFound,
    NoPagesFound,
    ParseError,
    RateMismatch,
    RateUnavailable,
    RecordError,
    ShinyPennyError,
    TaxMismatch,
    UnsupportedFileKind,
)
from shinypenny.domain.expense import EUR, Expense
from shinypenny.domain.money import EPSILON, Euro, Percentage
from shinypenny.domain.record import Receipts, Record, Row, Totals

__all__ = [
    # Values
    "EPSILON",
    "EUR",
    "Euro",
    "Percentage",
    "Expense",
    # Records
    "Receipts",
    "Record",
    "Row",
    "Totals",
    "Aggregation",
    "RateLookup",
    "aggregate",
    "resolve_rates",
    "validate_record",
    # Presentation data
    "BankInfo",
    "CompanyInfo",
    "Iban",
    # Errors
    "ShinyPennyError",
    "RecordError",
    "ParseError",
    "RateMismatch",
    "RateUnavailable",
    "InvertedAmounts",
    "TaxMismatch",
    "UnsupportedFileKind",
    "NoPagesFound",
    "NoCatalogFound",
    "ImageDecodeError",
    "FontLoadError",
]
