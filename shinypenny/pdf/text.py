"""Text measurement used for every alignment decision.

All layout code asks a ``TextMeasure`` for widths and subtracts exactly that
value, so center/right alignment is consistent across the page.
"""

from __future__ import annotations

import unicodedata
from dataclasses import dataclass
from typing import Protocol

import uharfbuzz as hb
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFError, TTFont, TTFOpenFile

from shinypenny.domain.errors import FontLoadError
from shinypenny.runtime import get_logger

logger = get_logger(__name__)

# Sub-units per point used while summing glyph advances.
HIGH_PRECISION = 256
# Extra right padding, as a fraction of the font size.
RIGHT_PADDING = 0.25


class TextMeasure(Protocol):
    def measure(self, text: str, size: float) -> float: ...


class TTFMeasure:
    """Shaped advance width for a TrueType font.

    Text is NFC normalized and shaped with HarfBuzz, so kerning pairs and
    glyph substitutions count. The font scale is ``HIGH_PRECISION`` units per
    point, so the summed integer advances divide back to points exactly.
    """

    def __init__(self, font_data: bytes) -> None:
        self._face = hb.Face(hb.Blob(font_data))
        self._fonts: dict[int, hb.Font] = {}
        self._cache: dict[tuple[str, float], float] = {}

    def _font(self, scale: int) -> hb.Font:
        font = self._fonts.get(scale)
        if font is None:
            font = hb.Font(self._face)
            font.scale = (scale, scale)
            self._fonts[scale] = font
        return font

    def advance_subunits(self, text: str, size: float) -> int:
        buf = hb.Buffer()
        buf.add_str(unicodedata.normalize("NFC", text))
        buf.guess_segment_properties()
        hb.shape(self._font(round(size * HIGH_PRECISION)), buf)
        return sum(position.x_advance for position in buf.glyph_positions)

    def measure(self, text: str, size: float) -> float:
        key = (text, float(size))
        width = self._cache.get(key)
        if width is None:
            width = self.advance_subunits(text, size) / HIGH_PRECISION + size * RIGHT_PADDING
            self._cache[key] = width
        return width


@dataclass(frozen=True)
class FontFace:
    """A registered font: the name used when drawing plus its measurement."""

    name: str
    measure: TextMeasure

    def width(self, text: str, size: float) -> float:
        return self.measure.measure(text, size)


@dataclass(frozen=True)
class FontSet:
    regular: FontFace
    bold: FontFace


def load_font(name: str, path: str) -> FontFace:
    """Register a TrueType font with reportlab under ``name``.

    Bare file names are searched in reportlab's font search path, which
    contains the bundled Bitstream Vera fonts.
    """
    try:
        font = TTFont(name, path)
        filename, handle = TTFOpenFile(path)
        with handle:
            data = handle.read()
    except (TTFError, OSError) as exc:
        raise FontLoadError(f"Failed to load font {path}: {exc}") from exc
    pdfmetrics.registerFont(font)
    logger.debug("Registered font %s from %s", name, filename)
    return FontFace(name=name, measure=TTFMeasure(data))


def load_fonts(regular_path: str, bold_path: str) -> FontSet:
    return FontSet(
        regular=load_font("ShinyPenny-Regular", regular_path),
        bold=load_font("ShinyPenny-Bold", bold_path),
    )
