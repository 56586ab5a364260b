"""
Rectangle Redactor - Remove PDF content under rectangles drawn in a browser

Rectangles drawn over a rendered page are mapped to PDF space; text objects
anchored inside them are cut out of the page's content streams and an
opaque cover is painted on top.
"""

__version__ = "1.0.0"
__author__ = "PDF Redactor"
__email__ = ""

from .config import RedactionConfig
from .errors import (
    RedactionError,
    DocumentLoadError,
    InvalidRectangleError,
    StreamDecodeError,
    SerializationError,
)
from .geometry import Rectangle, PdfBox, viewport_to_pdf, pdf_to_viewport, anchor_in_box
from .redact import apply_redactions, apply_overlays_only, preview_redactions, RedactionResult
from .sanitize import sanitize_document, sanitize_file
from .utils import validate_pdf, get_pdf_info, verify_redaction, load_rectangles

__all__ = [
    "RedactionConfig",
    "RedactionError",
    "DocumentLoadError",
    "InvalidRectangleError",
    "StreamDecodeError",
    "SerializationError",
    "Rectangle",
    "PdfBox",
    "viewport_to_pdf",
    "pdf_to_viewport",
    "anchor_in_box",
    "apply_redactions",
    "apply_overlays_only",
    "preview_redactions",
    "RedactionResult",
    "sanitize_document",
    "sanitize_file",
    "validate_pdf",
    "get_pdf_info",
    "verify_redaction",
    "load_rectangles",
]
