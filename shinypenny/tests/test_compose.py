"""Tests for the label and value lines of the summary page."""

from __future__ import annotations

from datetime import date
from typing import Any

import pytest

from shinypenny.domain import BankInfo, CompanyInfo, Iban, Record, aggregate
from shinypenny.pdf import compose
from shinypenny.pdf.compose import BODY_SIZE, LABEL_VALUE_GAP, draw_labeled_value, summary_page
from shinypenny.pdf.text import FontSet


class _RecordingCanvas:
    def __init__(self) -> None:
        self.strings: list[tuple[str, str, float, float]] = []
        self._font = ""

    def saveState(self) -> None:
        pass

    def restoreState(self) -> None:
        pass

    def setFillColor(self, color: Any) -> None:
        pass

    def setFont(self, name: str, size: float) -> None:
        self._font = name

    def drawString(self, x: float, y: float, text: str) -> None:
        self.strings.append((text, self._font, x, y))


def test_value_follows_the_label_in_bold(fonts: FontSet) -> None:
    canvas = _RecordingCanvas()

    value_x = draw_labeled_value(canvas, (50.0, 600.0), "Employee:", "Jane Doe", fonts)

    expected_x = 50.0 + fonts.regular.width("Employee:", BODY_SIZE) + LABEL_VALUE_GAP
    assert value_x == pytest.approx(expected_x)
    assert canvas.strings == [
        ("Employee:", fonts.regular.name, 50.0, 600.0),
        ("Jane Doe", fonts.bold.name, pytest.approx(expected_x), 600.0),
    ]


@pytest.mark.parametrize("learning_budget, answer", [(True, "YES"), (False, "NO")])
def test_summary_always_states_the_learning_budget(
    fonts: FontSet, rates: Any, monkeypatch: pytest.MonkeyPatch, learning_budget: bool, answer: str
) -> None:
    drawn: list[tuple[str, str]] = []
    original = compose.draw_text

    def recording_draw_text(canvas, anchor, text, face, size, *args, **kwargs):
        drawn.append((text, face.name))
        return original(canvas, anchor, text, face, size, *args, **kwargs)

    monkeypatch.setattr(compose, "draw_text", recording_draw_text)
    record = Record.from_fields(
        {
            "date": "2024-04-02",
            "description": "Conference",
            "company": "PyCon",
            "netto": "100",
            "tax": "19%",
            "brutto": "119",
            "receipts": "x.pdf",
        }
    )
    aggregation = aggregate([record], rates)
    bank = BankInfo(name="Jane Doe", iban=Iban.parse("DE89370400440532013000"))

    summary_page(
        bank,
        CompanyInfo(),
        aggregation.rows,
        aggregation.totals,
        fonts,
        learning_budget=learning_budget,
        today=date(2024, 5, 1),
    )

    assert ("Employee:", fonts.regular.name) in drawn
    assert ("Date:", fonts.regular.name) in drawn
    assert ("2024-05-01", fonts.bold.name) in drawn
    index = drawn.index(("Learning Budget:", fonts.regular.name))
    assert drawn[index + 1] == (answer, fonts.bold.name)
