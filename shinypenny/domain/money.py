"""Euro amounts and tax percentages.

``Euro`` wraps a float and compares with a tolerance of half a cent, because
amounts derive from rounded decimal user input. ``Percentage`` is stored as an
integer scaled by 1e6 so it can be used as a dict key and sort key.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from decimal import ROUND_HALF_EVEN, Decimal, InvalidOperation
from functools import total_ordering

from shinypenny.domain.errors import ParseError

EPSILON = 0.005  # don't care about less than half a cent up or down
PERCENTAGE_SCALE = 1_000_000

_EURO_RE = re.compile(r"^\s*([0-9]+(?:[,.][0-9]*)?)\s*(?:€|EUR)?\s*$")
_PERCENTAGE_RE = re.compile(r"^\s*([0-9]+(?:[,.][0-9]+)?)\s*(%)?\s*$")


def decimal_from_text(fragment: str, field: str) -> Decimal:
    """Convert a captured number to ``Decimal``, the first comma acting as decimal point."""
    normalized = fragment.replace(",", ".", 1)
    if normalized.endswith("."):
        normalized += "0"
    try:
        return Decimal(normalized)
    except InvalidOperation as exc:
        raise ParseError("not a decimal number", field=field, value=fragment) from exc


@total_ordering
@dataclass(frozen=True, eq=False)
class Euro:
    """An amount in EUR."""

    amount: float = 0.0

    @classmethod
    def parse(cls, text: str, field: str = "euro") -> Euro:
        match = _EURO_RE.match(text)
        if match is None:
            raise ParseError("is not an acceptable euro value", field=field, value=text)
        return cls(float(decimal_from_text(match.group(1), field)))

    def approx_eq(self, other: Euro, margin: float = EPSILON) -> bool:
        return abs(self.amount - other.amount) <= margin

    def floor_whole_cents(self) -> Euro:
        return Euro(math.floor(self.amount * 100.0) / 100.0)

    def ceil_whole_cents(self) -> Euro:
        return Euro(math.ceil(self.amount * 100.0) / 100.0)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Euro):
            return NotImplemented
        return abs(self.amount - other.amount) < EPSILON

    def __lt__(self, other: Euro) -> bool:
        if not isinstance(other, Euro):
            return NotImplemented
        return self.amount < other.amount

    # Tolerance equality is not transitive, so Euro must not be used as a key.
    __hash__ = None  # type: ignore[assignment]

    def __add__(self, other: Euro) -> Euro:
        if not isinstance(other, Euro):
            return NotImplemented
        return Euro(self.amount + other.amount)

    def __radd__(self, other: object) -> Euro:
        # sum() starts from the integer 0
        if other == 0:
            return self
        return NotImplemented

    def __sub__(self, other: Euro) -> Euro:
        if not isinstance(other, Euro):
            return NotImplemented
        return Euro(self.amount - other.amount)

    def __mul__(self, other: Percentage) -> Euro:
        if not isinstance(other, Percentage):
            return NotImplemented
        return Euro(self.amount * other.scaled / PERCENTAGE_SCALE)

    def __str__(self) -> str:
        return f"{self.amount:.2f}"

    def __repr__(self) -> str:
        return f"Euro({self.amount:.8f})"


def interpret_bare_fraction(value: Decimal) -> Decimal:
    """Interpret a percentage written without a ``%`` suffix.

    Values of 1 or greater are taken as percentage points and divided by 100,
    values below 1 are taken as a fraction as-is. So ``"5"`` and ``"0.05"``
    both mean 5 %, ``"1"`` means 1 % like ``"1%"``, and ``"0.5"`` means 50 %.
    Tax rates of 100 % or more do not occur in practice.
    """
    if value >= 1:
        return value / 100
    return value


@dataclass(frozen=True, order=True)
class Percentage:
    """A fraction in ``[0, 1]`` multiplied by 1e6."""

    scaled: int = 0

    @classmethod
    def parse(cls, text: str, field: str = "tax") -> Percentage:
        match = _PERCENTAGE_RE.match(text)
        if match is None:
            raise ParseError("is not an acceptable percentage value", field=field, value=text)
        value = decimal_from_text(match.group(1), field)
        if match.group(2) is not None:
            fraction = value / 100
        else:
            fraction = interpret_bare_fraction(value)
        if fraction > 1:
            raise ParseError("percentage exceeds 100 %", field=field, value=text)
        scaled = (fraction * PERCENTAGE_SCALE).quantize(Decimal(1), rounding=ROUND_HALF_EVEN)
        return cls(int(scaled))

    @property
    def fraction(self) -> float:
        return self.scaled / PERCENTAGE_SCALE

    @property
    def points(self) -> float:
        return self.scaled * (100.0 / PERCENTAGE_SCALE)

    def __str__(self) -> str:
        return f"{self.points:.2f}"

    def __repr__(self) -> str:
        return f"Percentage({self.points:.8f}%)"
