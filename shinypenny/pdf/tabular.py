"""Tables with a gray header, data rows and an optional sum row.

Geometry is tracked by ``RenderState`` in PDF points with the origin at the
bottom left; the vertical cursor moves down the page as rows are emitted.
Drawing goes through a ``Surface`` so layouts can be recorded in tests.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from reportlab.lib.colors import Color
from reportlab.lib.units import mm
from reportlab.pdfgen.canvas import Canvas

from shinypenny.pdf.constants import BLACK, GRAY, ROW_HEIGHT, WHITE
from shinypenny.pdf.text import FontFace, FontSet
from shinypenny.runtime import get_logger

logger = get_logger(__name__)

# Fraction of the row height between the row top and the text baseline.
BASELINE_FRACTION = 0.87


class Alignment(Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"

    def start_x(self, left: float, right: float, width: float) -> float:
        if self is Alignment.LEFT:
            return left
        if self is Alignment.CENTER:
            return (left + right - width) / 2.0
        return right - width


@dataclass(frozen=True)
class RenderStyle:
    font: FontFace
    size: float
    foreground: Color = BLACK
    background: Color = WHITE
    alignment: Alignment = Alignment.RIGHT


@dataclass(frozen=True)
class RenderStyleSet:
    header: RenderStyle
    data: RenderStyle
    sum: RenderStyle

    @classmethod
    def default(cls, fonts: FontSet) -> RenderStyleSet:
        return cls(
            header=RenderStyle(fonts.regular, 11.0, BLACK, GRAY, Alignment.RIGHT),
            data=RenderStyle(fonts.regular, 11.0, BLACK, GRAY, Alignment.RIGHT),
            sum=RenderStyle(fonts.bold, 12.0, BLACK, WHITE, Alignment.RIGHT),
        )


class Surface(Protocol):
    """The drawing operations a table needs."""

    def line(self, x1: float, y1: float, x2: float, y2: float) -> None: ...

    def fill_rect(self, x: float, y: float, width: float, height: float, color: Color) -> None: ...

    def text(self, x: float, y: float, text: str, style: RenderStyle) -> None: ...


class CanvasSurface:
    """``Surface`` backed by a reportlab canvas."""

    def __init__(self, canvas: Canvas) -> None:
        self.canvas = canvas

    def line(self, x1: float, y1: float, x2: float, y2: float) -> None:
        self.canvas.line(x1, y1, x2, y2)

    def fill_rect(self, x: float, y: float, width: float, height: float, color: Color) -> None:
        self.canvas.saveState()
        self.canvas.setFillColor(color)
        self.canvas.rect(x, y, width, height, stroke=0, fill=1)
        self.canvas.restoreState()

    def text(self, x: float, y: float, text: str, style: RenderStyle) -> None:
        self.canvas.saveState()
        self.canvas.setFillColor(style.foreground)
        self.canvas.setFont(style.font.name, style.size)
        self.canvas.drawString(x, y, text)
        self.canvas.restoreState()


class ColumnWidthSet:
    """Column widths in points."""

    def __init__(self, widths: Iterable[float]) -> None:
        self.widths = [float(width) for width in widths]

    @classmethod
    def from_mm(cls, widths_mm: Iterable[float]) -> ColumnWidthSet:
        return cls(width * mm for width in widths_mm)

    def __len__(self) -> int:
        return len(self.widths)

    @property
    def total(self) -> float:
        return sum(self.widths)

    def bounds(self, anchor_x: float) -> list[float]:
        """Column boundaries: the anchor followed by each column's right edge."""
        bounds = [anchor_x]
        for width in self.widths:
            bounds.append(bounds[-1] + width)
        return bounds


class RenderState:
    """Cursor over a table's row and column grid."""

    def __init__(self, anchor_y: float, row_height: float, hbounds: Sequence[float]) -> None:
        if len(hbounds) < 2:
            raise ValueError("a table needs at least two column boundaries")
        self.vstart = anchor_y
        self.vcursor = anchor_y
        self.vstep = row_height
        self.hbounds = list(hbounds)
        self.hcursor = 0

    def current_row_y_range(self) -> tuple[float, float]:
        return (self.vcursor, self.vcursor - self.vstep)

    def current_column_left(self) -> float:
        return self.hbounds[self.hcursor]

    def current_column_x_range(self) -> tuple[float, float]:
        return (self.hbounds[self.hcursor], self.hbounds[self.hcursor + 1])

    def table_x_range(self) -> tuple[float, float]:
        return (self.hbounds[0], self.hbounds[-1])

    def baseline(self) -> float:
        return self.vcursor - self.vstep * BASELINE_FRACTION

    def advance_to_next_row(self) -> None:
        self.vcursor -= self.vstep

    def advance_vertically(self, points: float) -> None:
        self.vcursor -= points

    def advance_to_next_column(self) -> None:
        self.hcursor += 1

    def reset_column(self) -> None:
        self.hcursor = 0


class SummableTabular:
    """A table of text rows under a header, optionally followed by a sum row."""

    def __init__(self, header: Sequence[str], widths: ColumnWidthSet) -> None:
        if len(header) != len(widths):
            raise ValueError(f"{len(header)} header cells for {len(widths)} columns")
        self.header = list(header)
        self.widths = widths

    def render(
        self,
        surface: Surface,
        anchor: tuple[float, float],
        rows: Iterable[Sequence[str]],
        styles: RenderStyleSet,
        sums: Sequence[str] | None = None,
        row_height: float = ROW_HEIGHT,
    ) -> float:
        """Draw the table with its top-left corner at ``anchor``.

        Returns the vertical position below the last drawn rule.
        """
        anchor_x, anchor_y = anchor
        state = RenderState(anchor_y, row_height, self.widths.bounds(anchor_x))

        self._render_header(surface, state, styles.header)
        for row in rows:
            self._hline(surface, state)
            self._render_row(surface, state, row, styles.data)
            state.advance_to_next_row()

        state.reset_column()
        for _ in state.hbounds:
            x = state.current_column_left()
            surface.line(x, state.vstart, x, state.vcursor)
            state.advance_to_next_column()
        self._hline(surface, state)

        if sums is not None:
            if len(sums) != len(self.header):
                raise ValueError(f"{len(sums)} sum cells for {len(self.header)} columns")
            state.reset_column()
            for value in sums:
                logger.debug("Sum cell: %s", value)
                self._render_cell(surface, state, value, styles.sum)
                state.advance_to_next_column()
            state.advance_to_next_row()
            self._hline(surface, state)
            state.advance_vertically(2.0)
            self._hline(surface, state)
        return state.vcursor

    def _hline(self, surface: Surface, state: RenderState) -> None:
        left, right = state.table_x_range()
        surface.line(left, state.vcursor, right, state.vcursor)

    def _render_header(self, surface: Surface, state: RenderState, style: RenderStyle) -> None:
        left, right = state.table_x_range()
        top, bottom = state.current_row_y_range()
        surface.fill_rect(left, bottom, right - left, top - bottom, style.background)
        self._hline(surface, state)
        self._render_row(surface, state, self.header, style)
        state.advance_to_next_row()
        self._hline(surface, state)
        state.advance_vertically(1.0)
        self._hline(surface, state)

    def _render_row(self, surface: Surface, state: RenderState, row: Sequence[str], style: RenderStyle) -> None:
        if len(row) != len(self.header):
            raise ValueError(f"row has {len(row)} cells, expected {len(self.header)}")
        state.reset_column()
        for value in row:
            self._render_cell(surface, state, value, style)
            state.advance_to_next_column()

    def _render_cell(self, surface: Surface, state: RenderState, text: str, style: RenderStyle) -> None:
        if not text:
            return
        left, right = state.current_column_x_range()
        width = style.font.width(text, style.size)
        x = style.alignment.start_x(left, right, width)
        if x < left or x + width > right:
            logger.warning("Detected overlap due to overly long text: %r", text)
        surface.text(x, state.baseline(), text, style)
