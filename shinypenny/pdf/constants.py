"""Page geometry and colors shared by the page builders."""

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.units import mm

# DIN A4 in landscape orientation, in points.
DIN_A4_WIDTH, DIN_A4_HEIGHT = landscape(A4)

ROW_HEIGHT = 20.0
SEPARATION_HEIGHT = 20 * mm

# Magnification range allowed for receipt images and the company logo.
MIN_IMAGE_SCALE = 0.25
MAX_IMAGE_SCALE = 4.0

RECEIPT_DPI = 200.0
LOGO_DPI = 300.0
LOGO_HEIGHT_FRACTION = 0.19
JPEG_QUALITY = 80

BLACK = colors.Color(0, 0, 0)
WHITE = colors.Color(1, 1, 1)
DARKGRAY = colors.Color(0.5, 0.5, 0.5)
GRAY = colors.Color(0.7, 0.7, 0.7)

FIXED_COLUMNS_MM = {
    "date": 22.0,
    "company": 40.0,
    "description": 60.0,
    "netto": 45.0,
    "brutto": 45.0,
}
TAX_COLUMN_MM = 14.0
