"""Read expense records from CSV files.

Rows are positional (``date, description, company, netto, tax, brutto,
receipts``) unless the first row is a header naming every field, in which
case columns are mapped by name. Receipt paths are resolved relative to the
directory of the CSV file.
"""

from __future__ import annotations

import csv
from collections.abc import Iterator, Sequence
from pathlib import Path

from shinypenny.domain.errors import ParseError, RecordError
from shinypenny.domain.record import RECEIPT_ALIASES, RECORD_FIELDS, Record
from shinypenny.runtime import get_logger

logger = get_logger(__name__)


def _canonical(name: str) -> str:
    name = name.strip().lower()
    return "receipts" if name in RECEIPT_ALIASES else name


def detect_header(row: Sequence[str]) -> list[str] | None:
    """Canonical field names if ``row`` is a header row, else None."""
    names = [_canonical(cell) for cell in row]
    if set(names) == set(RECORD_FIELDS) and len(names) == len(RECORD_FIELDS):
        return names
    return None


def positional_fields(row: Sequence[str]) -> dict[str, str]:
    """Map a positional row onto field names.

    Surplus cells belong to the receipts column, so an unquoted
    comma separated receipt list still parses.
    """
    if len(row) < len(RECORD_FIELDS):
        raise ParseError(f"expected {len(RECORD_FIELDS)} columns, found {len(row)}", value=",".join(row))
    fields = dict(zip(RECORD_FIELDS[:-1], row))
    fields["receipts"] = ",".join(row[len(RECORD_FIELDS) - 1 :])
    return fields


def _rows(path: Path) -> Iterator[list[str]]:
    with open(path, encoding="utf-8-sig", newline="") as csvfile:
        for row in csv.reader(csvfile):
            if not any(cell.strip() for cell in row):
                continue
            yield row


def read_records(path: Path) -> list[Record]:
    """Parse every record of a CSV file; the first malformed record raises."""
    base_dir = path.parent
    header: list[str] | None = None
    records: list[Record] = []

    for line_index, row in enumerate(_rows(path)):
        if line_index == 0:
            header = detect_header(row)
            if header is not None:
                logger.debug("Using header mapping for %s: %s", path, header)
                continue
        index = len(records)
        try:
            if header is not None:
                if len(row) != len(header):
                    raise ParseError(f"expected {len(header)} columns, found {len(row)}", value=",".join(row))
                fields = dict(zip(header, row))
            else:
                fields = positional_fields(row)
            records.append(Record.from_fields(fields, base_dir=base_dir))
        except RecordError as exc:
            raise exc.at_index(index)

    logger.info("Read %d records from %s", len(records), path)
    return records


def record_from_values(values: Sequence[str], base_dir: Path | None = None) -> Record:
    """Build one record from positional values, as given on the command line."""
    return Record.from_fields(positional_fields(values), base_dir=base_dir)
