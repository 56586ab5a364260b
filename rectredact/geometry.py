"""
Coordinate Mapping - Convert browser viewport rectangles to PDF space

The browser renders a page into a canvas whose origin is the top-left corner
and whose unit is the device pixel. PDF user space has its origin at the
bottom-left corner and is measured in page units. Everything downstream of
this module works in PDF space.
"""

import math
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Tuple

from .errors import InvalidRectangleError


# Accepted spellings for each rectangle field (browser payload uses camelCase)
_FIELD_ALIASES = {
    "page_index": ("pageIndex", "page_index", "page"),
    "x": ("x",),
    "y": ("y",),
    "width": ("width", "w"),
    "height": ("height", "h"),
    "viewport_width": ("viewportWidth", "viewport_width"),
    "viewport_height": ("viewportHeight", "viewport_height"),
}


@dataclass
class Rectangle:
    """A redaction request drawn over a rendered page (viewport pixels)"""
    page_index: int
    x: float
    y: float
    width: float
    height: float
    viewport_width: float
    viewport_height: float

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Rectangle":
        """
        Build a rectangle from a JSON-style mapping

        Raises:
            InvalidRectangleError: if a field is missing, not numeric or not finite
        """
        values: Dict[str, Any] = {}
        for field_name, aliases in _FIELD_ALIASES.items():
            for alias in aliases:
                if alias in data:
                    values[field_name] = data[alias]
                    break
            else:
                raise InvalidRectangleError(f"Rectangle is missing '{aliases[0]}'")

        try:
            page_index = values.pop("page_index")
            if isinstance(page_index, float) and not page_index.is_integer():
                raise ValueError(f"page index {page_index} is not a whole number")
            rect = cls(page_index=int(page_index),
                       **{k: float(v) for k, v in values.items()})
        except (TypeError, ValueError, OverflowError) as e:
            raise InvalidRectangleError(f"Malformed rectangle {dict(data)!r}: {e}") from e

        _check_finite(rect)
        return rect

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pageIndex": self.page_index,
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "viewportWidth": self.viewport_width,
            "viewportHeight": self.viewport_height,
        }


@dataclass
class PdfBox:
    """A box in PDF user space (bottom-left origin)"""
    x: float
    y: float
    width: float
    height: float

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    def as_tuple(self) -> Tuple[float, float, float, float]:
        return (self.x, self.y, self.width, self.height)


def _check_finite(rect: Rectangle) -> None:
    for name in ("x", "y", "width", "height", "viewport_width", "viewport_height"):
        value = getattr(rect, name)
        if not math.isfinite(value):
            raise InvalidRectangleError(f"Rectangle {name} must be finite, got {value}")


def viewport_to_pdf(rect: Rectangle, page_width: float, page_height: float) -> PdfBox:
    """
    Map a viewport rectangle onto a page of the given size

    Degenerate rectangles (zero or negative size) are mapped as-is; only a
    zero-sized viewport, which makes the scale undefined, and non-finite
    values are rejected.

    Args:
        rect: Rectangle in viewport pixels
        page_width: Page width in PDF units
        page_height: Page height in PDF units

    Returns:
        The rectangle in PDF space
    """
    _check_finite(rect)
    if rect.viewport_width <= 0 or rect.viewport_height <= 0:
        raise InvalidRectangleError(
            f"Viewport size must be positive, got "
            f"{rect.viewport_width}x{rect.viewport_height}"
        )

    pdf_x = (rect.x / rect.viewport_width) * page_width
    pdf_y = page_height - ((rect.y + rect.height) / rect.viewport_height) * page_height
    pdf_width = (rect.width / rect.viewport_width) * page_width
    pdf_height = (rect.height / rect.viewport_height) * page_height

    return PdfBox(pdf_x, pdf_y, pdf_width, pdf_height)


def pdf_to_viewport(box: PdfBox,
                    page_width: float,
                    page_height: float,
                    viewport_width: float,
                    viewport_height: float,
                    page_index: int = 0) -> Rectangle:
    """Inverse of viewport_to_pdf"""
    width = (box.width / page_width) * viewport_width
    height = (box.height / page_height) * viewport_height
    x = (box.x / page_width) * viewport_width
    y = ((page_height - box.y) / page_height) * viewport_height - height

    return Rectangle(page_index, x, y, width, height, viewport_width, viewport_height)


def padding_for(font_size: float, config: Optional[Any] = None) -> float:
    ratio = config.padding_ratio if config is not None else 0.5
    minimum = config.min_padding if config is not None else 5.0
    return max(font_size * ratio, minimum)


def text_band_for(font_size: float, config: Optional[Any] = None) -> float:
    ratio = config.text_band_ratio if config is not None else 1.2
    return font_size * ratio


def anchor_in_box(ax: float, ay: float, box: PdfBox, font_size: float,
                  config: Optional[Any] = None) -> bool:
    """
    Test whether a text anchor falls inside the padded redaction box

    The box is grown by a font-dependent padding on every side and by the
    height of a line of text on top. Only the anchor point is tested, not
    the glyph bounding box.
    """
    padding = padding_for(font_size, config)
    text_band = text_band_for(font_size, config)

    in_x = box.x - padding <= ax <= box.x + box.width + padding
    in_y = box.y - padding <= ay <= box.y + box.height + text_band + padding
    return in_x and in_y
