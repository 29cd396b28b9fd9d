"""Barcode label generation for variant SKUs.

Generates Code128 barcode images via python-barcode and lays them out on
thermal label stock with reportlab: product name on top, barcode in the
middle, SKU underneath.  One label per page, page size equal to the
label size.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from io import BytesIO
from pathlib import Path
from typing import NamedTuple

import barcode
from barcode.writer import ImageWriter
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen.canvas import Canvas

from config import settings

logger = logging.getLogger(__name__)

NAME_FONT = "Helvetica"
SKU_FONT = "Helvetica-Bold"
ELLIPSIS = "..."


# ---------------------------------------------------------------------------
# Label sizes
# ---------------------------------------------------------------------------


class LabelSize(NamedTuple):
    title: str
    width_mm: float
    height_mm: float
    name_font_size: float
    sku_font_size: float
    spacing_mm: float
    barcode_height_ratio: float


LABEL_SIZES: dict[str, LabelSize] = {
    "label-small": LabelSize("50 x 25mm Label", 50, 25, 6, 7, 0.4, 0.55),
    "label-medium": LabelSize("100 x 30mm Label", 100, 30, 8, 9, 0.5, 0.6),
    "label-large": LabelSize("100 x 50mm Label", 100, 50, 10, 11, 0.6, 0.65),
}


def get_label_size(key: str | None = None) -> LabelSize:
    """Look up a label size, defaulting to the configured one.

    Raises ValueError for an unknown size.
    """
    key = key or settings.label_size
    try:
        return LABEL_SIZES[key]
    except KeyError:
        msg = f"Unknown label size {key!r}; expected one of {', '.join(LABEL_SIZES)}"
        raise ValueError(msg) from None


def fit_text(text: str, font: str, font_size: float, max_width: float) -> str:
    """Truncate *text* with an ellipsis so it fits in *max_width* points."""
    if stringWidth(text, font, font_size) <= max_width:
        return text
    trimmed = text
    while trimmed and stringWidth(trimmed + ELLIPSIS, font, font_size) > max_width:
        trimmed = trimmed[:-1]
    return trimmed + ELLIPSIS


# ---------------------------------------------------------------------------
# Barcode image generation
# ---------------------------------------------------------------------------


def generate_barcode_image(sku: str) -> bytes:
    """Generate a Code128 barcode as PNG bytes for the given SKU."""
    code128 = barcode.get("code128", sku, writer=ImageWriter())
    buffer = BytesIO()
    code128.write(buffer, options={
        "module_width": 0.3,
        "module_height": 8.0,
        "quiet_zone": 1.0,
        "write_text": False,
    })
    return buffer.getvalue()


# ---------------------------------------------------------------------------
# Drawing
# ---------------------------------------------------------------------------


def _draw_label(c: Canvas, size: LabelSize, sku: str, name: str) -> None:
    width = size.width_mm * mm
    height = size.height_mm * mm
    spacing = size.spacing_mm * mm
    usable_w = width - 2 * spacing
    usable_h = height - 2 * spacing

    text_h = size.name_font_size + size.sku_font_size + 2 * spacing
    barcode_h = min(usable_h * size.barcode_height_ratio, usable_h - text_h, usable_w * 0.25)

    content_h = size.name_font_size + spacing + barcode_h + spacing + size.sku_font_size
    top = height - (height - content_h) / 2

    # Product name on top
    y = top - size.name_font_size
    if name:
        c.setFont(NAME_FONT, size.name_font_size)
        c.drawCentredString(width / 2, y, fit_text(name, NAME_FONT, size.name_font_size, usable_w))

    # Barcode in the middle
    y -= spacing + barcode_h
    img = ImageReader(BytesIO(generate_barcode_image(sku)))
    c.drawImage(
        img,
        spacing,
        y,
        width=usable_w,
        height=barcode_h,
        preserveAspectRatio=True,
        anchor="c",
    )

    # SKU underneath
    y -= spacing + size.sku_font_size
    c.setFont(SKU_FONT, size.sku_font_size)
    c.drawCentredString(width / 2, y, sku)


# ---------------------------------------------------------------------------
# Label documents
# ---------------------------------------------------------------------------


def render_labels(
    labels: Iterable[Mapping[str, str]],
    label_size: str | None = None,
) -> bytes:
    """Render one label per page for each ``{"sku", "name"}`` mapping.

    Returns the raw PDF content as *bytes*.
    """
    size = get_label_size(label_size)
    buffer = BytesIO()
    c = Canvas(buffer, pagesize=(size.width_mm * mm, size.height_mm * mm))

    count = 0
    for label in labels:
        if count:
            c.showPage()
        _draw_label(c, size, label["sku"], label.get("name", ""))
        count += 1

    c.save()
    logger.debug("Rendered %d labels (%s)", count, size.title)
    return buffer.getvalue()


def create_label_sheet(
    labels: Iterable[Mapping[str, str]],
    output_path: str,
    label_size: str | None = None,
) -> str:
    """Write the labels PDF to *output_path*, creating parent directories.

    Returns the *output_path* string.
    """
    labels = list(labels)
    content = render_labels(labels, label_size)
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content)
    logger.info("Label sheet saved to %s (%d labels)", output_path, len(labels))
    return output_path


def create_single_label(sku: str, name: str = "", label_size: str | None = None) -> bytes:
    """Create a single label as PDF bytes."""
    return render_labels([{"sku": sku, "name": name}], label_size)
