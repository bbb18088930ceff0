"""PDF generation, receipt loading and document merging."""

from shinypenny.pdf.compose import DEFAULT_TITLE, image_page, separation_page, summary_page
from shinypenny.pdf.document import PageDocument, write_document
from shinypenny.pdf.merge import combine
from shinypenny.pdf.receipts import load_image, load_receipt, sniff_kind
from shinypenny.pdf.tabular import (
    Alignment,
    ColumnWidthSet,
    RenderState,
    RenderStyle,
    RenderStyleSet,
    SummableTabular,
)
from shinypenny.pdf.text import FontFace, FontSet, TTFMeasure, TextMeasure, load_font, load_fonts

__all__ = [
    "DEFAULT_TITLE",
    "Alignment",
    "ColumnWidthSet",
    "FontFace",
    "FontSet",
    "PageDocument",
    "RenderState",
    "RenderStyle",
    "RenderStyleSet",
    "SummableTabular",
    "TTFMeasure",
    "TextMeasure",
    "combine",
    "image_page",
    "load_font",
    "load_fonts",
    "load_image",
    "load_receipt",
    "separation_page",
    "sniff_kind",
    "summary_page",
    "write_document",
]
