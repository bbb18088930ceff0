"""Tests for Euro and Percentage parsing and arithmetic."""

from __future__ import annotations

import pytest

from shinypenny.domain.errors import ParseError
from shinypenny.domain.money import EPSILON, Euro, Percentage


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("12", 12.0),
        ("12.50", 12.5),
        ("12,50", 12.5),
        ("12.", 12.0),
        (" 7.99 € ", 7.99),
        ("7.99EUR", 7.99),
        ("0", 0.0),
    ],
)
def test_euro_parse_accepts_common_notations(text: str, expected: float) -> None:
    assert Euro.parse(text).amount == pytest.approx(expected)


@pytest.mark.parametrize("text", ["", "abc", "-3", "12 USD", "1.2.3", "€12"])
def test_euro_parse_rejects_garbage(text: str) -> None:
    with pytest.raises(ParseError) as excinfo:
        Euro.parse(text, field="netto")

    assert excinfo.value.field == "netto"
    assert excinfo.value.value == text


def test_euro_equality_tolerates_half_a_cent() -> None:
    assert Euro(1.0) == Euro(1.0 + EPSILON / 2)
    assert Euro(1.0) != Euro(1.0 + EPSILON * 2)
    assert Euro(1.0).approx_eq(Euro(1.0 + EPSILON / 2))
    assert not Euro(1.0).approx_eq(Euro(1.1))


def test_euro_ordering_uses_raw_amount() -> None:
    assert Euro(1.0) < Euro(1.001)
    assert Euro(2.0) > Euro(1.0)
    assert sorted([Euro(3.0), Euro(1.0), Euro(2.0)])[0].amount == 1.0


def test_euro_rounding_to_whole_cents() -> None:
    assert Euro(1.234).floor_whole_cents().amount == pytest.approx(1.23)
    assert Euro(1.231).ceil_whole_cents().amount == pytest.approx(1.24)


def test_euro_sum_and_display() -> None:
    total = sum([Euro(1.10), Euro(2.20), Euro(3.30)])

    assert isinstance(total, Euro)
    assert str(total) == "6.60"
    assert str(Euro(3.0) - Euro(0.5)) == "2.50"


def test_euro_times_percentage() -> None:
    assert Euro(100.0) * Percentage.parse("19%") == Euro(19.0)
    assert Euro(19.0) * Percentage.parse("5%") == Euro(0.95)


@pytest.mark.parametrize("text", ["5", "5%", "0.05", "5 %", "5,0%", "0,05"])
def test_percentage_forms_agree(text: str) -> None:
    assert Percentage.parse(text).scaled == 50_000


def test_percentage_bare_values_at_one_and_above_are_points() -> None:
    assert Percentage.parse("1") == Percentage.parse("1%")
    assert Percentage.parse("100").scaled == 1_000_000
    assert Percentage.parse("0.5").scaled == 500_000


def test_percentage_keeps_sub_point_precision() -> None:
    assert Percentage.parse("5.263%").scaled == 52_630
    assert str(Percentage.parse("5.263%")) == "5.26"


@pytest.mark.parametrize("text", ["101%", "150", "-5", "five", ""])
def test_percentage_rejects_out_of_range_and_garbage(text: str) -> None:
    with pytest.raises(ParseError):
        Percentage.parse(text)


def test_percentage_orders_and_hashes_by_value() -> None:
    values = [Percentage.parse("19%"), Percentage.parse("7%"), Percentage.parse("0")]

    assert [str(p) for p in sorted(values)] == ["0.00", "7.00", "19.00"]
    assert len({Percentage.parse("7%"), Percentage.parse("0.07")}) == 1
    assert Percentage.parse("7%").fraction == pytest.approx(0.07)
