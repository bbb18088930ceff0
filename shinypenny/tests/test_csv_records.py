"""Tests for reading expense records from CSV files."""

from __future__ import annotations

from datetime import date
from pathlib import Path

import pytest

from shinypenny.domain.errors import ParseError
from shinypenny.domain.money import Percentage
from shinypenny.importers import detect_header, read_records, record_from_values


def _write_csv(tmp_path: Path, content: str) -> Path:
    path = tmp_path / "expenses.csv"
    path.write_text(content, encoding="utf-8")
    return path


def test_positional_rows_skip_blank_lines(tmp_path: Path) -> None:
    path = _write_csv(
        tmp_path,
        "2024-03-01,Train ticket,DB,10.00,19%,11.90,tickets/db.pdf\n"
        "\n"
        "2024-03-02,Dinner,Trattoria,20 USD,7,21.40 USD @ 0.9,/abs/dinner.png\n",
    )

    records = read_records(path)

    assert len(records) == 2
    first, second = records
    assert first.date == date(2024, 3, 1)
    assert first.company == "DB"
    assert first.tax == Percentage.parse("19%")
    assert first.receipts.paths == (tmp_path / "tickets" / "db.pdf",)
    assert second.netto.currency == "USD"
    assert second.brutto.rate == pytest.approx(0.9)
    assert second.receipts.paths == (Path("/abs/dinner.png"),)


def test_header_maps_columns_by_name(tmp_path: Path) -> None:
    path = _write_csv(
        tmp_path,
        "Company,Date,Receipt,Netto,Tax,Brutto,Description\n"
        "ACME,2024-01-15,a.pdf,100,19%,119,Keyboard\n",
    )

    (record,) = read_records(path)

    assert record.company == "ACME"
    assert record.description == "Keyboard"
    assert record.date == date(2024, 1, 15)
    assert record.receipts.paths == (tmp_path / "a.pdf",)


def test_detect_header_needs_every_field() -> None:
    assert detect_header(["date", "description", "company", "netto", "tax", "brutto", "paths"]) is not None
    assert detect_header(["date", "description", "company", "netto", "tax", "brutto"]) is None
    assert detect_header(["2024-01-01", "x", "y", "1", "0", "1", "a.pdf"]) is None


def test_unquoted_receipt_list_collects_surplus_cells(tmp_path: Path) -> None:
    path = _write_csv(tmp_path, "2024-01-15,Hotel,Inn,100,7%,107,night1.pdf,night2.pdf, night1.pdf\n")

    (record,) = read_records(path)

    assert record.receipts.paths == (tmp_path / "night1.pdf", tmp_path / "night2.pdf")


def test_quoted_receipt_list(tmp_path: Path) -> None:
    path = _write_csv(tmp_path, '2024-01-15,Hotel,Inn,100,7%,107,"a.pdf, b.png"\n')

    (record,) = read_records(path)

    assert len(record.receipts) == 2


def test_bad_record_reports_its_index(tmp_path: Path) -> None:
    path = _write_csv(
        tmp_path,
        "2024-01-15,Hotel,Inn,100,7%,107,a.pdf\n"
        "15.01.2024,Hotel,Inn,100,7%,107,b.pdf\n",
    )

    with pytest.raises(ParseError) as excinfo:
        read_records(path)

    assert excinfo.value.index == 1
    assert excinfo.value.field == "date"
    assert "record 1" in str(excinfo.value)


def test_header_row_is_not_counted_as_a_record(tmp_path: Path) -> None:
    path = _write_csv(
        tmp_path,
        "date,description,company,netto,tax,brutto,receipts\n"
        "2024-01-15,Hotel,Inn,abc,7%,107,a.pdf\n",
    )

    with pytest.raises(ParseError) as excinfo:
        read_records(path)

    assert excinfo.value.index == 0
    assert excinfo.value.field == "netto"


def test_too_few_columns(tmp_path: Path) -> None:
    path = _write_csv(tmp_path, "2024-01-15,Hotel,Inn,100,7%\n")

    with pytest.raises(ParseError, match="expected 7 columns, found 5"):
        read_records(path)


def test_record_from_values() -> None:
    record = record_from_values(
        ["2024-02-29", "Books", "Shop", "12,50 €", "0.07", "13,38 €", "receipt.pdf"], base_dir=Path("/data")
    )

    assert record.netto.amount == pytest.approx(12.5)
    assert record.tax == Percentage.parse("7%")
    assert record.receipts.paths == (Path("/data/receipt.pdf"),)
