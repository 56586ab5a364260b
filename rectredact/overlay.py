"""
Overlay Painting - Cover redacted regions with opaque fills
"""

import logging
from typing import Optional, Tuple

import pikepdf

from .config import RedactionConfig
from .geometry import PdfBox

logger = logging.getLogger(__name__)

WATERMARK_FONT = "/RedactWatermarkFont"


def _fmt(value: float) -> str:
    """Format a number the way PDF operands expect (no exponent)"""
    text = f"{value:.4f}".rstrip("0").rstrip(".")
    return "0" if text in ("", "-0") else text


def _fill_ops(box: PdfBox, color: Tuple[float, float, float]) -> str:
    r, g, b = color
    return (f"{_fmt(r)} {_fmt(g)} {_fmt(b)} rg\n"
            f"{_fmt(box.x)} {_fmt(box.y)} {_fmt(box.width)} {_fmt(box.height)} re\n"
            f"f\n")


def overlay_operators(box: PdfBox, config: Optional[RedactionConfig] = None) -> bytes:
    """Build the content-stream fragment painting the cover for a box"""
    config = config or RedactionConfig()
    ops = "q\n"
    if config.under_fill is not None:
        ops += _fill_ops(box, config.under_fill)
    ops += _fill_ops(box, config.fill)
    ops += "Q\n"
    return ops.encode("ascii")


def isolate_page_content(pdf: pikepdf.Pdf, page: pikepdf.Page) -> None:
    """Wrap the current page content in q/Q so its graphics state cannot leak"""
    page.contents_add(pikepdf.Stream(pdf, b"q\n"), prepend=True)
    page.contents_add(pikepdf.Stream(pdf, b"\nQ\n"), prepend=False)


def paint_overlay(pdf: pikepdf.Pdf,
                  page: pikepdf.Page,
                  box: PdfBox,
                  config: Optional[RedactionConfig] = None,
                  isolate: bool = True) -> bool:
    """
    Paint a white then black filled rectangle over a box

    Pass isolate=False when the page content was already wrapped by
    isolate_page_content; the overlay stream itself is balanced, so later
    overlays on the same page need no further wrapping.

    Returns:
        True if something was drawn, False for an empty box
    """
    if box.is_empty:
        logger.warning("Skipping overlay for empty box %s", box)
        return False

    if isolate:
        isolate_page_content(pdf, page)
    page.contents_add(pikepdf.Stream(pdf, overlay_operators(box, config)), prepend=False)
    logger.debug("Painted overlay at %s", box)
    return True


def _ensure_watermark_font(pdf: pikepdf.Pdf, page: pikepdf.Page) -> None:
    if "/Resources" not in page.obj:
        page.obj.Resources = pikepdf.Dictionary()
    resources = page.obj.Resources
    if "/Font" not in resources:
        resources.Font = pikepdf.Dictionary()
    if WATERMARK_FONT not in resources.Font:
        resources.Font[WATERMARK_FONT] = pdf.make_indirect(pikepdf.Dictionary(
            Type=pikepdf.Name.Font,
            Subtype=pikepdf.Name.Type1,
            BaseFont=pikepdf.Name.Helvetica,
            Encoding=pikepdf.Name.WinAnsiEncoding,
        ))


def _escape_literal(text: str) -> str:
    return text.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")


def stamp_watermark(pdf: pikepdf.Pdf,
                    page: pikepdf.Page,
                    label: str,
                    page_height: float) -> None:
    """Write a small grey label near the top-left corner of a page"""
    _ensure_watermark_font(pdf, page)
    ops = (f"q\nBT\n{WATERMARK_FONT} 10 Tf\n0.5 0.5 0.5 rg\n"
           f"50 {_fmt(page_height - 30)} Td\n({_escape_literal(label)}) Tj\nET\nQ\n")
    page.contents_add(pikepdf.Stream(pdf, ops.encode("latin-1", "replace")), prepend=False)
