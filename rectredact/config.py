"""
Configuration for the redaction engine
"""

from typing import Optional, Tuple


class RedactionConfig:
    """Tunable parameters for text excision and overlay painting"""

    def __init__(self, **overrides):
        # Font size assumed until a Tf operator is seen
        self.default_font_size = 12.0

        # Containment padding: max(font_size * padding_ratio, min_padding)
        self.padding_ratio = 0.5
        self.min_padding = 5.0

        # Vertical band above the anchor covered by glyphs (ascender + descender)
        self.text_band_ratio = 1.2

        # Overlay colours as RGB floats; under_fill=None skips the white layer
        self.fill: Tuple[float, float, float] = (0.0, 0.0, 0.0)
        self.under_fill: Optional[Tuple[float, float, float]] = (1.0, 1.0, 1.0)

        # Thread one matrix state through every content stream of a page
        self.carry_state_across_streams = False

        # Label stamped on every page that received an overlay
        self.watermark: Optional[str] = None

        # Scrub metadata, actions and attachments before saving
        self.sanitize = False

        self.compress_streams = True

        for key, value in overrides.items():
            if not hasattr(self, key):
                raise TypeError(f"Unknown redaction option: {key}")
            setattr(self, key, value)

    def __repr__(self):
        options = ", ".join(f"{k}={v!r}" for k, v in sorted(vars(self).items()))
        return f"RedactionConfig({options})"
