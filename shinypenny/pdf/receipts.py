"""Load receipt files as page documents.

PDF receipts are loaded as-is; raster images are placed on a generated page.
The kind of a file is sniffed from its content, the extension only decides
when the content is not recognized.
"""

from __future__ import annotations

import io
from pathlib import Path
from typing import Literal

from PIL import Image, ImageOps, UnidentifiedImageError

from shinypenny.domain.errors import ImageDecodeError, UnsupportedFileKind
from shinypenny.pdf.constants import JPEG_QUALITY
from shinypenny.pdf.document import PageDocument
from shinypenny.runtime import get_logger

logger = get_logger(__name__)

FileKind = Literal["pdf", "image"]

MAGIC_LENGTH = 16
PDF_MAGIC = b"%PDF"
IMAGE_EXTENSIONS = frozenset({"png", "jpeg", "jpg", "webp", "bmp"})


def sniff_kind(data: bytes, path: Path) -> FileKind:
    """Classify file content as ``"pdf"`` or ``"image"``."""
    if len(data) < MAGIC_LENGTH:
        raise UnsupportedFileKind(f"File is too short to identify: {path}")
    if data.startswith(PDF_MAGIC):
        return "pdf"
    try:
        with Image.open(io.BytesIO(data)):
            return "image"
    except (UnidentifiedImageError, OSError):
        pass

    extension = path.suffix.lower().lstrip(".")
    logger.warning("Could not recognize content of %s, falling back to its extension", path)
    if extension in IMAGE_EXTENSIONS:
        return "image"
    if extension == "pdf":
        return "pdf"
    raise UnsupportedFileKind(f"Unsupported file type: {path}")


def decode_image(data: bytes, label: str) -> Image.Image:
    """Decode image bytes with EXIF orientation applied."""
    try:
        img = Image.open(io.BytesIO(data))
        img.load()
    except (UnidentifiedImageError, OSError, ValueError) as exc:
        raise ImageDecodeError(f"Could not decode image {label}: {exc}") from exc
    return ImageOps.exif_transpose(img)


def load_image(path: Path) -> Image.Image:
    return decode_image(path.read_bytes(), str(path))


def jpeg_bytes(img: Image.Image, quality: int = JPEG_QUALITY) -> bytes:
    buffer = io.BytesIO()
    img.convert("RGB").save(buffer, format="JPEG", quality=quality)
    return buffer.getvalue()


def load_receipt(path: Path) -> PageDocument:
    """Load one receipt file as a page document."""
    data = path.read_bytes()
    kind = sniff_kind(data, path)
    logger.debug("Loading %s receipt %s", kind, path)
    if kind == "pdf":
        return PageDocument.from_bytes(data, source=str(path))

    from shinypenny.pdf.compose import image_page

    return image_page(decode_image(data, str(path)))
