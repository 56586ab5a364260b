"""
Utility functions for PDF redaction
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Tuple, Union

import fitz  # PyMuPDF

from .errors import InvalidRectangleError
from .geometry import Rectangle

logger = logging.getLogger(__name__)


COLORS = {
    "black": (0.0, 0.0, 0.0),
    "white": (1.0, 1.0, 1.0),
    "red": (1.0, 0.0, 0.0),
    "blue": (0.0, 0.0, 1.0),
    "green": (0.0, 1.0, 0.0),
    "gray": (0.5, 0.5, 0.5),
    "grey": (0.5, 0.5, 0.5),
}


def get_color(name: str) -> Tuple[float, float, float]:
    """
    Convert a color name to an RGB tuple
    """
    return COLORS.get(name.lower(), COLORS["black"])


def load_rectangles(path: Union[str, Path]) -> List[Dict[str, Any]]:
    """
    Load redaction rectangles from a JSON file

    The file holds either a list of rectangle objects or the browser
    client's payload, an object with a "redactions" list.

    Raises:
        InvalidRectangleError: if the file is not valid JSON of either shape
    """
    try:
        with open(path, "r") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise InvalidRectangleError(f"{path} is not valid JSON: {e}") from e

    if isinstance(data, dict):
        data = data.get("redactions")
    if not isinstance(data, list):
        raise InvalidRectangleError(
            f"{path} must contain a list of rectangles or a 'redactions' list"
        )
    return data


def validate_pdf(pdf_path: Union[str, Path]) -> bool:
    """
    Validate that a file is a readable PDF

    Args:
        pdf_path: Path to PDF file

    Returns:
        True if valid PDF, False otherwise
    """
    try:
        with fitz.open(pdf_path) as doc:
            return doc.is_pdf and len(doc) > 0
    except (RuntimeError, ValueError, OSError) as e:
        logger.debug("%s is not a readable PDF: %s", pdf_path, e)
        return False


def get_pdf_info(pdf_path: Union[str, Path]) -> Dict[str, Any]:
    """
    Get page count and page sizes of a PDF

    Args:
        pdf_path: Path to PDF file

    Returns:
        Dictionary with PDF information
    """
    info = {
        "valid": False,
        "pages": 0,
        "encrypted": False,
        "page_sizes": [],
        "file_size": 0,
    }

    try:
        info["file_size"] = Path(pdf_path).stat().st_size
        with fitz.open(pdf_path) as doc:
            info["valid"] = True
            info["pages"] = len(doc)
            info["encrypted"] = doc.is_encrypted
            info["page_sizes"] = [(page.rect.width, page.rect.height) for page in doc]
    except (RuntimeError, ValueError, OSError) as e:
        info["error"] = str(e)

    return info


def viewport_to_page_rect(rect: Rectangle, page: fitz.Page) -> fitz.Rect:
    """
    Map a viewport rectangle onto a PyMuPDF page rectangle

    PyMuPDF pages share the viewport's top-left origin, so only the scale
    changes.
    """
    if rect.viewport_width <= 0 or rect.viewport_height <= 0:
        raise InvalidRectangleError("Viewport size must be positive")

    sx = page.rect.width / rect.viewport_width
    sy = page.rect.height / rect.viewport_height
    return fitz.Rect(rect.x * sx, rect.y * sy,
                     (rect.x + rect.width) * sx, (rect.y + rect.height) * sy)


def verify_redaction(pdf_bytes: bytes, rectangles: Iterable[Any]) -> List[str]:
    """
    Check a redacted document for text still extractable inside rectangles

    Text under an overlay is hidden but stays in the file unless its text
    object was removed from the content stream.

    Args:
        pdf_bytes: Redacted document
        rectangles: The rectangles that were redacted

    Returns:
        One message per rectangle that still has text under it
    """
    remaining = []

    with fitz.open(stream=pdf_bytes, filetype="pdf") as doc:
        for number, item in enumerate(rectangles):
            try:
                rect = item if isinstance(item, Rectangle) else Rectangle.from_dict(item)
            except InvalidRectangleError as e:
                logger.debug("Not verifying rectangle %d: %s", number, e)
                continue
            if rect.page_index < 0 or rect.page_index >= len(doc):
                continue

            page = doc[rect.page_index]
            area = viewport_to_page_rect(rect, page)
            text = page.get_text("text", clip=area).strip()
            if text:
                remaining.append(f"page {rect.page_index}, rectangle {number}: {text!r}")

    return remaining


def format_file_size(size_bytes: int) -> str:
    """
    Format file size in human-readable format

    Args:
        size_bytes: Size in bytes

    Returns:
        Formatted size string
    """
    for unit in ['B', 'KB', 'MB', 'GB']:
        if size_bytes < 1024.0:
            return f"{size_bytes:.1f} {unit}"
        size_bytes /= 1024.0
    return f"{size_bytes:.1f} TB"
