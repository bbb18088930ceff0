"""Build the generated pages: summary, separation and image pages.

Every builder draws on a reportlab canvas and returns the result as a
``PageDocument`` ready for merging.
"""

from __future__ import annotations

import io
from collections.abc import Callable, Sequence
from datetime import date

from PIL import Image
from reportlab.lib.colors import Color
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen.canvas import Canvas

from shinypenny.domain.bank import BankInfo, CompanyInfo
from shinypenny.domain.money import Percentage
from shinypenny.domain.record import Row, Totals
from shinypenny.pdf.constants import (
    BLACK,
    DARKGRAY,
    DIN_A4_HEIGHT,
    DIN_A4_WIDTH,
    FIXED_COLUMNS_MM,
    GRAY,
    LOGO_DPI,
    LOGO_HEIGHT_FRACTION,
    MAX_IMAGE_SCALE,
    MIN_IMAGE_SCALE,
    RECEIPT_DPI,
    SEPARATION_HEIGHT,
    TAX_COLUMN_MM,
)
from shinypenny.pdf.document import PageDocument
from shinypenny.pdf.receipts import jpeg_bytes
from shinypenny.pdf.tabular import (
    Alignment,
    CanvasSurface,
    ColumnWidthSet,
    RenderStyle,
    RenderStyleSet,
    SummableTabular,
)
from shinypenny.pdf.text import FontFace, FontSet
from shinypenny.runtime import get_logger

logger = get_logger(__name__)

DEFAULT_TITLE = "Application for reimbursement of expenses"
TITLE_SIZE = 11.0 * 5.0 / 3.0
BODY_SIZE = 12.0
FOOTER_SIZE = 12.0 * 3.0 / 4.0
SEPARATION_LABEL_SIZE = 20.0
BANK_LINE_STEP = 20.0
LABEL_VALUE_GAP = 10.0
FOOTER_RULE_Y = 30.0
FOOTER_TEXT_X = 30.0


def render_page(width: float, height: float, draw: Callable[[Canvas], None], title: str = "") -> PageDocument:
    """Draw a single page and load it as a page document."""
    buffer = io.BytesIO()
    canvas = Canvas(buffer, pagesize=(width, height))
    if title:
        canvas.setTitle(title)
    draw(canvas)
    canvas.showPage()
    canvas.save()
    return PageDocument.from_bytes(buffer.getvalue(), source=title or "<generated>")


def draw_text(
    canvas: Canvas,
    anchor: tuple[float, float],
    text: str,
    face: FontFace,
    size: float,
    alignment: Alignment = Alignment.LEFT,
    color: Color = BLACK,
) -> float:
    """Draw ``text`` aligned against the anchor x; returns its measured width."""
    x, y = anchor
    width = face.width(text, size)
    start = alignment.start_x(x, x, width)
    canvas.saveState()
    canvas.setFillColor(color)
    canvas.setFont(face.name, size)
    canvas.drawString(start, y, text)
    canvas.restoreState()
    return width


def draw_labeled_value(
    canvas: Canvas, anchor: tuple[float, float], label: str, value: str, fonts: FontSet, size: float = BODY_SIZE
) -> float:
    """Regular ``label`` followed by the bold ``value``; returns the x where the value starts."""
    x, y = anchor
    label_width = draw_text(canvas, anchor, label, fonts.regular, size)
    value_x = x + label_width + LABEL_VALUE_GAP
    draw_text(canvas, (value_x, y), value, fonts.bold, size)
    return value_x


def clamp_scale(scale: float, label: str) -> float:
    clamped = min(max(scale, MIN_IMAGE_SCALE), MAX_IMAGE_SCALE)
    if clamped != scale:
        logger.warning("Clamping %s scale from %.3f to %.3f", label, scale, clamped)
    return clamped


def image_size_points(img: Image.Image, dpi: float) -> tuple[float, float]:
    width_px, height_px = img.size
    return (width_px * 72.0 / dpi, height_px * 72.0 / dpi)


def table_columns(brackets: Sequence[Percentage]) -> tuple[list[str], ColumnWidthSet]:
    """Header cells and widths: the fixed columns plus one column per tax bracket."""
    header = ["Date", "Company", "Description", "Netto €"]
    widths = [
        FIXED_COLUMNS_MM["date"],
        FIXED_COLUMNS_MM["company"],
        FIXED_COLUMNS_MM["description"],
        FIXED_COLUMNS_MM["netto"],
    ]
    for percentage in brackets:
        header.append(f"{percentage} %")
        widths.append(TAX_COLUMN_MM)
    header.append("Brutto €")
    widths.append(FIXED_COLUMNS_MM["brutto"])
    return header, ColumnWidthSet.from_mm(widths)


def draw_logo(canvas: Canvas, logo: Image.Image, page_width: float, page_height: float) -> None:
    """Place the logo centered near the top edge, scaled to a fraction of the page height."""
    width, height = image_size_points(logo, LOGO_DPI)
    scale = clamp_scale(page_height * LOGO_HEIGHT_FRACTION / height, "logo")
    scaled_width, scaled_height = width * scale, height * scale
    x = (page_width - scaled_width) / 2.0
    y = page_height - scaled_height
    canvas.drawImage(ImageReader(io.BytesIO(jpeg_bytes(logo))), x, y, width=scaled_width, height=scaled_height)


def summary_page(
    bank: BankInfo,
    company: CompanyInfo,
    rows: Sequence[Row],
    totals: Totals,
    fonts: FontSet,
    *,
    brackets: Sequence[Percentage] | None = None,
    title: str = DEFAULT_TITLE,
    learning_budget: bool = False,
    today: date | None = None,
) -> PageDocument:
    """The cover page: heading, applicant, expense table, payout bank and footer."""
    brackets = totals.brackets if brackets is None else tuple(brackets)
    today = today or date.today()
    width, height = DIN_A4_WIDTH, DIN_A4_HEIGHT
    header, widths = table_columns(brackets)

    def draw(canvas: Canvas) -> None:
        if company.logo is not None:
            draw_logo(canvas, company.logo, width, height)

        draw_text(canvas, (width * 0.5, height * 0.80), title, fonts.bold, TITLE_SIZE, Alignment.CENTER)
        draw_labeled_value(canvas, (width * 0.10, height * 0.75), "Employee:", bank.name, fonts)
        draw_labeled_value(canvas, (width * 0.50, height * 0.75), "Date:", today.isoformat(), fonts)
        budget = "YES" if learning_budget else "NO"
        draw_labeled_value(canvas, (width * 0.10, height * 0.70), "Learning Budget:", budget, fonts)

        table = SummableTabular(header, widths)
        anchor_x = (width - widths.total) / 2.0 if width > widths.total else 0.0
        bottom = table.render(
            CanvasSurface(canvas),
            (anchor_x, height * 0.68),
            (row.cells() for row in rows),
            RenderStyleSet.default(fonts),
            sums=totals.cells(),
        )
        logger.debug("Table ends at y=%.1f", bottom)

        _draw_bank_block(canvas, bank, totals, fonts, (width * 0.25, height * 0.25))
        if company.has_footer:
            _draw_footer(canvas, company, fonts, width)

    logger.info("Rendering summary page with %d rows and %d tax brackets", len(rows), len(brackets))
    return render_page(width, height, draw, title=title)


def _draw_bank_block(
    canvas: Canvas, bank: BankInfo, totals: Totals, fonts: FontSet, anchor: tuple[float, float]
) -> None:
    x, y = anchor
    lines = [
        ("Name:", bank.name),
        ("Institute:", bank.institute or ""),
        ("IBAN:", str(bank.iban)),
        ("BIC:", bank.bic or ""),
        ("Reimbursement:", f"{totals.brutto} €"),
    ]
    for label, value in lines:
        draw_text(canvas, (x, y), label, fonts.regular, BODY_SIZE, Alignment.RIGHT)
        draw_text(canvas, (x + LABEL_VALUE_GAP, y), value, fonts.bold, BODY_SIZE)
        y -= BANK_LINE_STEP


def _draw_footer(canvas: Canvas, company: CompanyInfo, fonts: FontSet, page_width: float) -> None:
    canvas.saveState()
    canvas.setStrokeColor(DARKGRAY)
    canvas.line(0, FOOTER_RULE_Y, page_width, FOOTER_RULE_Y)
    canvas.restoreState()
    draw_text(canvas, (FOOTER_TEXT_X, FOOTER_RULE_Y - 10), company.name, fonts.bold, FOOTER_SIZE, color=DARKGRAY)
    draw_text(canvas, (FOOTER_TEXT_X, FOOTER_RULE_Y - 20), company.address, fonts.regular, FOOTER_SIZE, color=DARKGRAY)


def separation_page(label: str, fonts: FontSet) -> PageDocument:
    """A thin gray strip carrying ``label``, placed before a record's receipts."""
    width, height = DIN_A4_WIDTH, SEPARATION_HEIGHT

    def draw(canvas: Canvas) -> None:
        canvas.saveState()
        canvas.setFillColor(GRAY)
        canvas.rect(0, 0, width, height, stroke=0, fill=1)
        canvas.restoreState()
        draw_text(
            canvas, (width * 0.5, height * 0.20), label, fonts.regular, SEPARATION_LABEL_SIZE, Alignment.CENTER
        )

    logger.debug("Rendering separation page for %r", label)
    return render_page(width, height, draw, title=label)


def image_page(img: Image.Image) -> PageDocument:
    """One page sized to the image at 200 dpi, scaled to the landscape A4 width."""
    width, height = image_size_points(img, RECEIPT_DPI)
    scale = clamp_scale(DIN_A4_WIDTH / width, "image")
    page_width, page_height = width * scale, height * scale
    data = jpeg_bytes(img)

    def draw(canvas: Canvas) -> None:
        canvas.drawImage(ImageReader(io.BytesIO(data)), 0, 0, width=page_width, height=page_height)

    logger.debug("Rendering %dx%d px image at scale %.3f", img.size[0], img.size[1], scale)
    return render_page(page_width, page_height, draw)
