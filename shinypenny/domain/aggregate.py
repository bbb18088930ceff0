"""Turn validated records into display rows and totals.

Aggregation runs in two phases. The first resolves every record to EUR,
validates it and collects the set of tax brackets used by the batch. The
second builds each row against the now fixed, ascending bracket list so every
row and the totals share the same column shape.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date
from typing import Protocol

from shinypenny.domain.errors import InvertedAmounts, RateMismatch, RecordError, TaxMismatch
from shinypenny.domain.expense import Expense
from shinypenny.domain.money import Euro, Percentage
from shinypenny.domain.record import Record, Row, Totals

logger = logging.getLogger(__name__)

RATE_TOLERANCE = 1e-6  # relative


class RateLookup(Protocol):
    """Anything that answers ``rate(when, currency)`` in EUR per currency unit."""

    def rate(self, when: date, currency: str) -> float: ...


@dataclass(frozen=True)
class ResolvedRecord:
    """A record whose netto and brutto both carry what they need to become EUR."""

    record: Record
    netto: Expense
    brutto: Expense
    delta: Euro


@dataclass(frozen=True)
class Aggregation:
    rows: tuple[Row, ...]
    totals: Totals
    brackets: tuple[Percentage, ...]


def _with_queried_rate(expense: Expense, when: date, rates: RateLookup) -> Expense:
    if expense.is_euro or expense.rate is not None:
        return expense
    return expense.with_rate(rates.rate(when, expense.currency))


def resolve_rates(record: Record, rates: RateLookup) -> tuple[Expense, Expense]:
    """Fill in missing exchange rates for netto and brutto.

    Two explicit rates must agree. A single explicit rate is reused for the
    other side when both sides use the same currency. Anything still missing
    is queried from ``rates``.
    """
    netto, brutto = record.netto, record.brutto

    if netto.rate is not None and brutto.rate is not None:
        if not math.isclose(netto.rate, brutto.rate, rel_tol=RATE_TOLERANCE):
            raise RateMismatch(
                f"netto rate {netto.rate:g} and brutto rate {brutto.rate:g} disagree",
                field="brutto",
                value=str(brutto),
            )
    elif netto.rate is not None and brutto.currency == netto.currency:
        logger.debug("Reusing netto exchange rate %g for brutto", netto.rate)
        brutto = brutto.with_rate(netto.rate)
    elif brutto.rate is not None and netto.currency == brutto.currency:
        logger.debug("Reusing brutto exchange rate %g for netto", brutto.rate)
        netto = netto.with_rate(brutto.rate)

    netto = _with_queried_rate(netto, record.date, rates)
    brutto = _with_queried_rate(brutto, record.date, rates)
    return netto, brutto


def validate_record(
    record: Record, rates: RateLookup, *, strict: bool = True, index: int | None = None
) -> ResolvedRecord:
    """Resolve a record to EUR and check brutto/netto/tax consistency."""
    netto, brutto = resolve_rates(record, rates)
    netto_eur = netto.as_euro()
    brutto_eur = brutto.as_euro()

    if brutto_eur < netto_eur and brutto_eur != netto_eur:
        raise InvertedAmounts(
            f"brutto {brutto_eur} EUR is smaller than netto {netto_eur} EUR",
            field="brutto",
            value=str(record.brutto),
        )

    delta = brutto_eur - netto_eur
    implied = netto_eur * record.tax
    if delta != implied:
        mismatch = TaxMismatch(
            f"brutto - netto = {delta} EUR but netto x {record.tax} % = {implied} EUR",
            field="tax",
            value=str(record.tax),
            index=index,
        )
        if strict:
            raise mismatch
        logger.warning("%s", mismatch)

    return ResolvedRecord(record=record, netto=netto, brutto=brutto, delta=delta)


def build_rows(resolved: Sequence[ResolvedRecord], brackets: Sequence[Percentage]) -> list[Row]:
    """Project resolved records onto the fixed bracket columns."""
    column = {percent: idx for idx, percent in enumerate(brackets)}
    rows: list[Row] = []
    for item in resolved:
        deltas = [Euro()] * len(brackets)
        deltas[column[item.record.tax]] = item.delta
        rows.append(
            Row(
                date=item.record.date,
                company=item.record.company,
                description=item.record.description,
                brutto=item.brutto,
                netto=item.netto,
                brackets=tuple(brackets),
                deltas=tuple(deltas),
            )
        )
    return rows


def aggregate(records: Iterable[Record], rates: RateLookup, *, strict: bool = True) -> Aggregation:
    """Validate all records and build rows plus totals.

    Raises the first ``RecordError`` encountered, annotated with the record
    index. With ``strict=False`` a ``TaxMismatch`` is only logged.
    """
    resolved: list[ResolvedRecord] = []
    seen: set[Percentage] = set()
    for index, record in enumerate(records):
        try:
            item = validate_record(record, rates, strict=strict, index=index)
        except RecordError as exc:
            raise exc.at_index(index)
        resolved.append(item)
        seen.add(record.tax)

    brackets = tuple(sorted(seen))
    rows = build_rows(resolved, brackets)

    totals = Totals(tax_total={percent: Euro() for percent in brackets})
    for row in rows:
        totals.add(row)

    logger.debug("Aggregated %d rows over %d tax brackets", len(rows), len(brackets))
    return Aggregation(rows=tuple(rows), totals=totals, brackets=brackets)
