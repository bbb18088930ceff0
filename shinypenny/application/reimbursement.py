"""Reimbursement workflow: records in, one merged PDF out.

The summary page comes first; every record then contributes its receipts in
input order, preceded by a separation page when it has more than one.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Literal

from shinypenny.domain import (
    Aggregation,
    BankInfo,
    CompanyInfo,
    RateLookup,
    Record,
    RecordError,
    ShinyPennyError,
    aggregate,
)
from shinypenny.pdf import (
    DEFAULT_TITLE,
    FontSet,
    PageDocument,
    combine,
    load_fonts,
    load_image,
    load_receipt,
    separation_page,
    summary_page,
    write_document,
)
from shinypenny.runtime import (
    Config,
    ExchangeBuro,
    FrankfurterRateSource,
    get_logger,
    get_paths,
    load_bank_table,
    load_config,
    lookup_bank,
)

logger = get_logger(__name__)

ReimbursementStatus = Literal["ok", "error"]


@dataclass(frozen=True)
class ReimbursementRequest:
    """Inputs for building a reimbursement document."""

    csv_file: Path | None = None
    # Positional record values given directly, one tuple per record.
    records: tuple[tuple[str, ...], ...] = ()
    output: Path | None = None
    config_file: Path | None = None
    title: str = DEFAULT_TITLE
    learning_budget: bool = False
    strict: bool = True
    today: date | None = None


@dataclass(frozen=True)
class ReimbursementResult:
    """Outcome of the reimbursement workflow."""

    status: ReimbursementStatus
    output_path: Path | None = None
    page_count: int = 0
    error: str | None = None


def build_bank_info(config: Config) -> BankInfo:
    """Payee bank details; institute and BIC come from the bank table when listed."""
    table = config.banks
    if table is None:
        table = load_bank_table(str(get_paths().bank_table))
    entry = lookup_bank(config.iban.bank_code, table)
    return BankInfo(
        name=config.name,
        iban=config.iban,
        institute=entry.institute if entry else None,
        bic=entry.bic if entry else None,
    )


def build_company_info(config: Config) -> CompanyInfo:
    logo = load_image(config.company.image) if config.company.image is not None else None
    return CompanyInfo(name=config.company.name, address=config.company.address, logo=logo)


def collect_records(request: ReimbursementRequest) -> list[Record]:
    from shinypenny.importers import read_records, record_from_values

    records: list[Record] = []
    if request.csv_file is not None:
        records.extend(read_records(request.csv_file))
    for values in request.records:
        try:
            records.append(record_from_values(values, base_dir=Path.cwd()))
        except RecordError as exc:
            raise exc.at_index(len(records))
    return records


def compose_document(
    records: Sequence[Record],
    rates: RateLookup,
    bank: BankInfo,
    company: CompanyInfo,
    fonts: FontSet,
    *,
    title: str = DEFAULT_TITLE,
    learning_budget: bool = False,
    strict: bool = True,
    today: date | None = None,
) -> tuple[PageDocument, Aggregation]:
    """Aggregate ``records`` and merge the summary page with every receipt."""
    aggregation = aggregate(records, rates, strict=strict)
    documents = [
        summary_page(
            bank,
            company,
            aggregation.rows,
            aggregation.totals,
            fonts,
            brackets=aggregation.brackets,
            title=title,
            learning_budget=learning_budget,
            today=today,
        )
    ]
    for record in records:
        if len(record.receipts) > 1:
            documents.append(separation_page(record.description, fonts))
        for path in record.receipts:
            logger.debug("Adding receipt %s", path)
            documents.append(load_receipt(path))
    return combine(documents), aggregation


def write_reimbursement(
    request: ReimbursementRequest,
    config: Config | None = None,
    rates: RateLookup | None = None,
) -> tuple[Path, int]:
    """Run the whole workflow; returns the written file and its page count.

    Raises ``ShinyPennyError`` subclasses, ``ValueError`` for bad
    configuration and ``FileNotFoundError`` for missing inputs.
    """
    if config is None:
        config = load_config(request.config_file)
    records = collect_records(request)
    if not records:
        raise ValueError("No records given. Provide a CSV file or --record values.")

    if rates is None:
        rates = ExchangeBuro(FrankfurterRateSource(config.rates.base_url, config.rates.timeout))
    bank = build_bank_info(config)
    company = build_company_info(config)
    fonts = load_fonts(config.fonts.regular, config.fonts.bold)

    today = request.today or date.today()
    document, aggregation = compose_document(
        records,
        rates,
        bank,
        company,
        fonts,
        title=request.title,
        learning_budget=request.learning_budget,
        strict=request.strict,
        today=today,
    )
    output = request.output or get_paths().default_output(today.isoformat())
    page_count = document.page_count
    write_document(document, output)
    logger.info("Reimbursement of %s EUR over %d records", aggregation.totals.brutto, len(records))
    return output, page_count


def build_reimbursement(
    request: ReimbursementRequest,
    config: Config | None = None,
    rates: RateLookup | None = None,
) -> ReimbursementResult:
    """Run the workflow and return a structured result instead of raising."""
    try:
        output, page_count = write_reimbursement(request, config=config, rates=rates)
    except FileNotFoundError as exc:
        return ReimbursementResult(status="error", error=str(exc))
    except (ShinyPennyError, ValueError) as exc:
        logger.debug("Reimbursement failed", exc_info=True)
        return ReimbursementResult(status="error", error=str(exc))

    return ReimbursementResult(status="ok", output_path=output, page_count=page_count)

