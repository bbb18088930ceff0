"""Input records, display rows and running totals."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path

from shinypenny.domain.errors import ParseError
from shinypenny.domain.expense import Expense
from shinypenny.domain.money import Euro, Percentage

RECORD_FIELDS = ("date", "description", "company", "netto", "tax", "brutto", "receipts")
RECEIPT_ALIASES = ("receipts", "receipt", "path", "paths")
DATE_FORMAT = "%Y-%m-%d"


@dataclass(frozen=True)
class Receipts:
    """An ordered set of receipt file paths."""

    paths: tuple[Path, ...] = ()

    @classmethod
    def from_paths(cls, paths: Iterable[str | Path]) -> Receipts:
        unique: dict[Path, None] = {}
        for path in paths:
            unique.setdefault(Path(path), None)
        return cls(tuple(unique))

    @classmethod
    def parse(cls, text: str, base_dir: Path | None = None, field: str = "receipts") -> Receipts:
        """Parse a comma separated list, resolving relative paths against ``base_dir``."""
        parts = [part.strip() for part in text.split(",")]
        paths: list[Path] = []
        for part in parts:
            if not part:
                continue
            path = Path(part).expanduser()
            if base_dir is not None and not path.is_absolute():
                path = base_dir / path
            paths.append(path)
        if not paths:
            raise ParseError("no receipt path given", field=field, value=text)
        return cls.from_paths(paths)

    def __iter__(self) -> Iterator[Path]:
        return iter(self.paths)

    def __len__(self) -> int:
        return len(self.paths)


def parse_date(text: str, field: str = "date") -> date:
    try:
        return date.fromisoformat(text.strip())
    except ValueError as exc:
        raise ParseError("is not a YYYY-MM-DD date", field=field, value=text) from exc


@dataclass(frozen=True)
class Record:
    """A record in the input csv data."""

    date: date
    description: str
    company: str
    netto: Expense
    tax: Percentage
    brutto: Expense
    receipts: Receipts

    @classmethod
    def from_fields(cls, fields: Mapping[str, str], base_dir: Path | None = None) -> Record:
        """Build a record from raw text fields keyed by field name.

        The receipts field may also be named ``receipt``, ``path`` or ``paths``.
        """
        receipts_text = next((fields[alias] for alias in RECEIPT_ALIASES if alias in fields), None)
        for name in RECORD_FIELDS[:-1]:
            if name not in fields:
                raise ParseError("missing field", field=name)
        if receipts_text is None:
            raise ParseError("missing field", field="receipts")

        return cls(
            date=parse_date(fields["date"]),
            description=fields["description"].strip(),
            company=fields["company"].strip(),
            netto=Expense.parse(fields["netto"], field="netto"),
            tax=Percentage.parse(fields["tax"], field="tax"),
            brutto=Expense.parse(fields["brutto"], field="brutto"),
            receipts=Receipts.parse(receipts_text, base_dir=base_dir),
        )


@dataclass(frozen=True)
class Row:
    """A table row to be displayed in the pdf table.

    ``deltas[i]`` is the tax amount for ``brackets[i]``; every row of one
    batch shares the same ``brackets``.
    """

    date: date
    company: str
    description: str
    brutto: Expense
    netto: Expense
    brackets: tuple[Percentage, ...]
    deltas: tuple[Euro, ...]

    def __post_init__(self) -> None:
        if len(self.brackets) != len(self.deltas):
            raise ValueError("brackets and deltas must have the same length")

    def tax_total(self) -> dict[Percentage, Euro]:
        return dict(zip(self.brackets, self.deltas))

    def cells(self) -> list[str]:
        """Display strings in header order."""
        return [
            self.date.strftime(DATE_FORMAT),
            self.company,
            self.description,
            str(self.netto),
            *(str(delta) for delta in self.deltas),
            str(self.brutto),
        ]

    def __iter__(self) -> Iterator[str]:
        return iter(self.cells())


@dataclass
class Totals:
    """Running sum of all rows, folded once per row in record order."""

    brutto: Euro = field(default_factory=Euro)
    netto: Euro = field(default_factory=Euro)
    tax_total: dict[Percentage, Euro] = field(default_factory=dict)

    def add(self, row: Row) -> None:
        self.brutto += row.brutto.as_euro()
        self.netto += row.netto.as_euro()
        for percent, absolute in zip(row.brackets, row.deltas):
            self.tax_total[percent] = self.tax_total.get(percent, Euro()) + absolute

    @property
    def brackets(self) -> tuple[Percentage, ...]:
        return tuple(sorted(self.tax_total))

    def sorted_deltas(self) -> tuple[Euro, ...]:
        return tuple(self.tax_total[percent] for percent in self.brackets)

    def cells(self) -> list[str]:
        """Display strings aligned with the row cells; the first three are empty."""
        return [
            "",
            "",
            "",
            f"€ {self.netto}",
            *(str(delta) for delta in self.sorted_deltas()),
            str(self.brutto),
        ]

    def __iter__(self) -> Iterator[str]:
        return iter(self.cells())
