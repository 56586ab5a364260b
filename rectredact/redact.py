"""
Redaction Application Module - Apply viewport rectangles to a PDF
"""

import io
import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator, List, Mapping, Optional, Set, Tuple, Union

import fitz  # PyMuPDF
import pikepdf

from .config import RedactionConfig
from .errors import (
    DocumentLoadError,
    InvalidRectangleError,
    SerializationError,
    StreamDecodeError,
)
from .geometry import PdfBox, Rectangle, viewport_to_pdf
from .overlay import paint_overlay, stamp_watermark
from .sanitize import sanitize_document
from .streams import content_streams, rewrite_stream
from .textobj import ScanState
from .utils import viewport_to_page_rect

logger = logging.getLogger(__name__)

RectangleLike = Union[Rectangle, Mapping[str, Any]]


@dataclass
class RedactionResult:
    """
    Outcome of a redaction call

    Unpacks as (pdf_bytes, removed_objects).
    """
    pdf_bytes: bytes
    removed_objects: int
    rectangles_applied: int = 0
    rectangles_skipped: int = 0
    overlay_only: int = 0
    pages_modified: List[int] = field(default_factory=list)

    def __iter__(self) -> Iterator[Any]:
        yield self.pdf_bytes
        yield self.removed_objects


def load_document(pdf_bytes: bytes) -> pikepdf.Pdf:
    """
    Parse PDF bytes into a mutable document

    Raises:
        DocumentLoadError: if the bytes are not a readable PDF
    """
    try:
        return pikepdf.open(io.BytesIO(pdf_bytes))
    except (pikepdf.PdfError, OSError, ValueError, TypeError) as e:
        raise DocumentLoadError(f"Cannot open PDF: {e}") from e


def serialize_document(pdf: pikepdf.Pdf, config: Optional[RedactionConfig] = None) -> bytes:
    """
    Write a document back to bytes

    Raises:
        SerializationError: if the document cannot be written
    """
    config = config or RedactionConfig()
    buffer = io.BytesIO()
    try:
        pdf.save(buffer, compress_streams=config.compress_streams)
    except (pikepdf.PdfError, OSError, ValueError) as e:
        raise SerializationError(f"Cannot write redacted PDF: {e}") from e
    return buffer.getvalue()


def page_size(page: pikepdf.Page) -> Tuple[float, float]:
    """Width and height of a page's media box in PDF units"""
    x0, y0, x1, y1 = (float(v) for v in page.mediabox)
    return abs(x1 - x0), abs(y1 - y0)


def _coerce_rectangle(item: RectangleLike) -> Rectangle:
    if isinstance(item, Rectangle):
        return item
    if isinstance(item, Mapping):
        return Rectangle.from_dict(item)
    raise InvalidRectangleError(f"Unsupported rectangle type: {type(item).__name__}")


def _get_page(pdf: pikepdf.Pdf, page_index: int) -> pikepdf.Page:
    if page_index < 0 or page_index >= len(pdf.pages):
        raise InvalidRectangleError(
            f"Page index {page_index} out of range (document has {len(pdf.pages)} pages)"
        )
    return pdf.pages[page_index]


def _excise_text(page: pikepdf.Page,
                 page_index: int,
                 box: PdfBox,
                 config: RedactionConfig) -> Tuple[int, int]:
    """
    Remove text objects inside a box from every content stream of a page

    Returns:
        Tuple of (text objects removed, streams that could not be processed)
    """
    state = ScanState.for_config(config) if config.carry_state_across_streams else None
    removed = 0
    failed = 0

    for stream_index, stream in enumerate(content_streams(page)):
        try:
            removed += rewrite_stream(stream, box, config, state)
        except StreamDecodeError as e:
            failed += 1
            logger.warning("Page %d: content stream %d left unmodified: %s",
                           page_index, stream_index, e)

    return removed, failed


def _apply(pdf: pikepdf.Pdf,
           rectangles: Iterable[RectangleLike],
           config: RedactionConfig,
           excise: bool) -> RedactionResult:
    result = RedactionResult(pdf_bytes=b"", removed_objects=0)
    painted_pages: Set[int] = set()
    page_heights = {}

    for number, item in enumerate(rectangles):
        # Validate before touching the document so a bad rectangle mutates nothing
        try:
            rect = _coerce_rectangle(item)
            page = _get_page(pdf, rect.page_index)
            width, height = page_size(page)
            box = viewport_to_pdf(rect, width, height)
        except InvalidRectangleError as e:
            logger.error("Skipping rectangle %d: %s", number, e)
            result.rectangles_skipped += 1
            continue

        logger.debug("Rectangle %d on page %d maps to %s", number, rect.page_index, box)

        if excise:
            try:
                removed, failed = _excise_text(page, rect.page_index, box, config)
                result.removed_objects += removed
                if failed:
                    result.overlay_only += 1
            except Exception:
                logger.exception("Page %d: text removal failed for rectangle %d, "
                                 "falling back to overlay", rect.page_index, number)
                result.overlay_only += 1

        try:
            isolate = rect.page_index not in painted_pages
            if paint_overlay(pdf, page, box, config, isolate=isolate):
                painted_pages.add(rect.page_index)
                page_heights[rect.page_index] = height
        except (pikepdf.PdfError, ValueError) as e:
            logger.error("Page %d: could not paint overlay for rectangle %d: %s",
                         rect.page_index, number, e)

        result.rectangles_applied += 1

    if config.watermark:
        for page_index in sorted(painted_pages):
            stamp_watermark(pdf, pdf.pages[page_index], config.watermark,
                            page_heights[page_index])

    result.pages_modified = sorted(painted_pages)
    return result


def apply_redactions(pdf_bytes: bytes,
                     rectangles: Iterable[RectangleLike],
                     config: Optional[RedactionConfig] = None) -> RedactionResult:
    """
    Redact viewport rectangles from a PDF

    For each rectangle, text objects anchored inside it are removed from the
    page's content streams and an opaque cover is painted over it. Problems
    with a single rectangle or stream are logged and do not stop the others.

    Args:
        pdf_bytes: Input document
        rectangles: Rectangles in viewport pixels, applied in order
        config: Engine options

    Returns:
        RedactionResult with the redacted bytes and removed-object count

    Raises:
        DocumentLoadError: if the input cannot be parsed
        SerializationError: if the output cannot be written
    """
    config = config or RedactionConfig()

    with load_document(pdf_bytes) as pdf:
        result = _apply(pdf, rectangles, config, excise=True)
        if config.sanitize:
            sanitize_document(pdf)
        result.pdf_bytes = serialize_document(pdf, config)

    logger.info("Applied %d rectangles, removed %d text objects (%d skipped, %d overlay only)",
                result.rectangles_applied, result.removed_objects,
                result.rectangles_skipped, result.overlay_only)
    return result


def apply_overlays_only(pdf_bytes: bytes,
                        rectangles: Iterable[RectangleLike],
                        config: Optional[RedactionConfig] = None) -> RedactionResult:
    """
    Paint covers without touching content streams

    The underlying text stays extractable; use apply_redactions to remove it.
    """
    config = config or RedactionConfig()

    with load_document(pdf_bytes) as pdf:
        result = _apply(pdf, rectangles, config, excise=False)
        if config.sanitize:
            sanitize_document(pdf)
        result.pdf_bytes = serialize_document(pdf, config)

    logger.info("Painted %d overlays (%d skipped)",
                result.rectangles_applied, result.rectangles_skipped)
    return result


def preview_redactions(pdf_bytes: bytes,
                       rectangles: Iterable[RectangleLike],
                       highlight_color: Tuple[float, float, float] = (1.0, 1.0, 0.0)) -> bytes:
    """
    Create a preview PDF showing what will be redacted (highlighted, not removed)

    Args:
        pdf_bytes: Input document
        rectangles: Rectangles in viewport pixels
        highlight_color: RGB color for highlighting (default: yellow)

    Returns:
        Preview document bytes
    """
    try:
        doc = fitz.open(stream=pdf_bytes, filetype="pdf")
    except (RuntimeError, ValueError) as e:
        raise DocumentLoadError(f"Cannot open PDF: {e}") from e

    try:
        for number, item in enumerate(rectangles):
            try:
                rect = _coerce_rectangle(item)
                if rect.page_index < 0 or rect.page_index >= len(doc):
                    raise InvalidRectangleError(f"Page index {rect.page_index} out of range")
                page = doc[rect.page_index]
                area = viewport_to_page_rect(rect, page)
            except InvalidRectangleError as e:
                logger.error("Skipping preview of rectangle %d: %s", number, e)
                continue

            if area.is_empty:
                continue

            annot = page.add_rect_annot(area)
            annot.set_colors(stroke=highlight_color, fill=highlight_color)
            annot.set_opacity(0.5)
            annot.update()

        return doc.tobytes()
    finally:
        doc.close()
