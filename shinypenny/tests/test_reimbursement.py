"""End-to-end tests of the reimbursement workflow with a fixed rate table."""

from __future__ import annotations

import io
from collections.abc import Callable
from datetime import date
from pathlib import Path
from typing import Any

import pytest
from PIL import Image
from pypdf import PdfReader

from shinypenny.application.reimbursement import (
    ReimbursementRequest,
    build_bank_info,
    build_reimbursement,
    compose_document,
    write_reimbursement,
)
from shinypenny.domain import BankInfo, CompanyInfo, Euro, Iban, Record, aggregate
from shinypenny.pdf import FontSet, summary_page
from shinypenny.runtime import parse_config
from shinypenny.runtime import paths as paths_module
from shinypenny.runtime.bank_codes import load_bank_table
from shinypenny.runtime.paths import ProjectPaths

IBAN = "DE89370400440532013000"
TODAY = date(2024, 5, 1)


def _config():
    return parse_config(
        {"name": "Jane Doe", "iban": IBAN, "banks": {"37040044": {"institute": "Commerzbank", "bic": "COBADEFFXXX"}}}
    )


def _record(receipts: str, *, netto: str = "100", tax: str = "19%", brutto: str = "119") -> Record:
    return Record.from_fields(
        {
            "date": "2024-04-02",
            "description": "Conference",
            "company": "PyCon",
            "netto": netto,
            "tax": tax,
            "brutto": brutto,
            "receipts": receipts,
        }
    )


def _bank() -> BankInfo:
    return BankInfo(name="Jane Doe", iban=Iban.parse(IBAN), institute="Commerzbank", bic="COBADEFFXXX")


def test_document_holds_summary_then_every_receipt_page(
    write_pdf: Callable[..., Path], write_png: Callable[..., Path], fonts: FontSet, rates: Any
) -> None:
    invoice = write_pdf("invoice.pdf", ["invoice 1", "invoice 2", "invoice 3"])
    scan = write_png("scan.png")
    records = [
        _record(str(invoice)),
        _record(str(scan), netto="10 USD", tax="0%", brutto="10 USD"),
    ]

    document, aggregation = compose_document(records, rates, _bank(), CompanyInfo(), fonts, today=TODAY)

    assert document.page_count == 5
    reader = PdfReader(io.BytesIO(document.to_bytes()))
    assert "invoice 1" in reader.pages[1].extract_text()
    assert "invoice 3" in reader.pages[3].extract_text()
    assert aggregation.totals.brutto == Euro(119.0 + 9.0)
    assert rates.calls == [(date(2024, 4, 2), "USD"), (date(2024, 4, 2), "USD")]


def test_records_with_several_receipts_get_a_separation_page(
    write_pdf: Callable[..., Path], write_png: Callable[..., Path], fonts: FontSet, rates: Any
) -> None:
    invoice = write_pdf("invoice.pdf", ["invoice 1", "invoice 2", "invoice 3"])
    scan = write_png("scan.png")
    single = write_pdf("single.pdf", ["single"])
    records = [_record(f"{invoice},{scan}"), _record(str(single))]

    document, _ = compose_document(records, rates, _bank(), CompanyInfo(), fonts, today=TODAY)

    # summary, separation, 3 invoice pages, scan, single
    assert document.page_count == 7
    reader = PdfReader(io.BytesIO(document.to_bytes()))
    assert float(reader.pages[1].mediabox.height) < 60.0
    assert "single" in reader.pages[6].extract_text()


def test_summary_page_draws_the_logo(fonts: FontSet, rates: Any) -> None:
    aggregation = aggregate([_record("x.pdf")], rates)
    company = CompanyInfo(name="ACME GmbH", address="Somestreet 1", logo=Image.new("RGB", (600, 300), "red"))

    page = summary_page(_bank(), company, aggregation.rows, aggregation.totals, fonts, today=TODAY)

    reader = PdfReader(io.BytesIO(page.to_bytes()))
    assert len(reader.pages) == 1
    assert "/XObject" in reader.pages[0]["/Resources"]
    assert float(reader.pages[0].mediabox.width) > float(reader.pages[0].mediabox.height)


def test_build_reimbursement_writes_the_file(
    tmp_path: Path, write_pdf: Callable[..., Path], make_rates: Callable[..., Any]
) -> None:
    invoice = write_pdf("invoice.pdf", ["invoice"])
    csv_file = tmp_path / "expenses.csv"
    csv_file.write_text(f"2024-04-02,Conference,PyCon,100,19%,119,{invoice.name}\n")
    output = tmp_path / "out" / "reimbursement.pdf"

    result = build_reimbursement(
        ReimbursementRequest(csv_file=csv_file, output=output, today=TODAY),
        config=_config(),
        rates=make_rates(),
    )

    assert result.status == "ok"
    assert result.output_path == output
    assert result.page_count == 2
    assert len(PdfReader(output).pages) == 2


def test_records_given_as_values(
    tmp_path: Path, write_pdf: Callable[..., Path], make_rates: Callable[..., Any]
) -> None:
    invoice = write_pdf("invoice.pdf", ["invoice"])
    values = ("2024-04-02", "Books", "Shop", "10", "7%", "10.70", str(invoice))

    output, page_count = write_reimbursement(
        ReimbursementRequest(records=(values, values), output=tmp_path / "r.pdf", today=TODAY),
        config=_config(),
        rates=make_rates(),
    )

    assert output.exists()
    assert page_count == 3


def test_tax_mismatch_is_reported_with_its_record(
    tmp_path: Path, write_pdf: Callable[..., Path], make_rates: Callable[..., Any]
) -> None:
    invoice = write_pdf("invoice.pdf", ["invoice"])
    values = ("2024-04-02", "Books", "Shop", "100", "19%", "120", str(invoice))
    request = ReimbursementRequest(records=(values,), output=tmp_path / "r.pdf", today=TODAY)

    result = build_reimbursement(request, config=_config(), rates=make_rates())

    assert result.status == "error"
    assert result.error is not None
    assert "record 0" in result.error
    assert not (tmp_path / "r.pdf").exists()


def test_lenient_mode_accepts_tax_mismatch(
    tmp_path: Path, write_pdf: Callable[..., Path], make_rates: Callable[..., Any]
) -> None:
    invoice = write_pdf("invoice.pdf", ["invoice"])
    values = ("2024-04-02", "Books", "Shop", "100", "19%", "120", str(invoice))
    request = ReimbursementRequest(records=(values,), output=tmp_path / "r.pdf", strict=False, today=TODAY)

    result = build_reimbursement(request, config=_config(), rates=make_rates())

    assert result.status == "ok"
    assert result.page_count == 2


def test_missing_receipt_is_an_error(tmp_path: Path, make_rates: Callable[..., Any]) -> None:
    values = ("2024-04-02", "Books", "Shop", "10", "7%", "10.70", str(tmp_path / "missing.pdf"))

    result = build_reimbursement(
        ReimbursementRequest(records=(values,), output=tmp_path / "r.pdf"), config=_config(), rates=make_rates()
    )

    assert result.status == "error"
    assert "missing.pdf" in (result.error or "")


def test_no_records_is_an_error(make_rates: Callable[..., Any]) -> None:
    result = build_reimbursement(ReimbursementRequest(), config=_config(), rates=make_rates())

    assert result.status == "error"
    assert "No records given" in (result.error or "")


def test_missing_config_file_is_an_error(tmp_path: Path) -> None:
    result = build_reimbursement(ReimbursementRequest(config_file=tmp_path / "absent.toml"))

    assert result.status == "error"
    assert "Config file not found" in (result.error or "")


def test_bank_info_from_inline_table() -> None:
    bank = build_bank_info(_config())

    assert bank.institute == "Commerzbank"
    assert bank.bic == "COBADEFFXXX"


def test_bank_info_from_table_next_to_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("SHINYPENNY_CONFIG", raising=False)
    monkeypatch.setattr(paths_module, "_paths", ProjectPaths(config_dir=tmp_path))
    (tmp_path / "banks.toml").write_text('[banks."37040044"]\ninstitute = "Commerzbank Köln"\n', encoding="utf-8")
    load_bank_table.cache_clear()

    bank = build_bank_info(parse_config({"name": "Jane Doe", "iban": IBAN}))

    assert bank.institute == "Commerzbank Köln"
    assert bank.bic is None
    load_bank_table.cache_clear()
