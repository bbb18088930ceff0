"""Shared pytest fixtures for shinypenny tests."""

from __future__ import annotations

import io
from collections.abc import Callable, Sequence
from datetime import date
from pathlib import Path

import pytest
from PIL import Image
from reportlab.pdfgen.canvas import Canvas

from shinypenny.pdf.text import FontSet, load_fonts


class FixedRates:
    """Rate lookup answering from a table and counting the queries."""

    def __init__(self, rates: dict[str, float] | None = None) -> None:
        self.rates = rates or {}
        self.calls: list[tuple[date, str]] = []

    def rate(self, when: date, currency: str) -> float:
        self.calls.append((when, currency))
        if currency == "EUR":
            return 1.0
        return self.rates[currency]


def pdf_bytes(page_texts: Sequence[str], pagesize: tuple[float, float] = (595.0, 842.0)) -> bytes:
    """A PDF with one page per entry, each page showing its text in Helvetica."""
    buffer = io.BytesIO()
    canvas = Canvas(buffer, pagesize=pagesize)
    for text in page_texts:
        canvas.setFont("Helvetica", 14)
        canvas.drawString(72, 720, text)
        canvas.showPage()
    canvas.save()
    return buffer.getvalue()


def png_bytes(size: tuple[int, int] = (1654, 1169), color: str = "white") -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture(scope="session")
def fonts() -> FontSet:
    return load_fonts("Vera.ttf", "VeraBd.ttf")


@pytest.fixture
def rates() -> FixedRates:
    return FixedRates({"USD": 0.9, "GBP": 1.2})


@pytest.fixture
def make_rates() -> type[FixedRates]:
    return FixedRates


@pytest.fixture
def write_pdf(tmp_path: Path) -> Callable[..., Path]:
    def _write(name: str, page_texts: Sequence[str]) -> Path:
        path = tmp_path / name
        path.write_bytes(pdf_bytes(page_texts))
        return path

    return _write


@pytest.fixture
def write_png(tmp_path: Path) -> Callable[..., Path]:
    def _write(name: str, size: tuple[int, int] = (1654, 1169)) -> Path:
        path = tmp_path / name
        path.write_bytes(png_bytes(size))
        return path

    return _write


@pytest.fixture
def make_pdf() -> Callable[..., bytes]:
    return pdf_bytes


@pytest.fixture
def make_png() -> Callable[..., bytes]:
    return png_bytes
