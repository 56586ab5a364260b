#!/usr/bin/env python3
"""
Example usage of the Rectangle Redactor library

This script builds a sample document, redacts rectangles as a browser
client would send them (pixels of a page rendered at scale 1.5), and
checks what is left under them.
"""

import logging
import os
import tempfile

try:
    import fitz  # PyMuPDF
    from rectredact import (
        RedactionConfig,
        apply_overlays_only,
        apply_redactions,
        get_pdf_info,
        verify_redaction,
        viewport_to_pdf,
        Rectangle,
    )
    DEPS_AVAILABLE = True
except ImportError as e:
    print(f"Dependencies not available: {e}")
    print("Install with: pip install -e .")
    DEPS_AVAILABLE = False


PAGE_WIDTH, PAGE_HEIGHT = 612, 792
SCALE = 1.5

# What a browser canvas at scale 1.5 reports for a Letter page
VIEWPORT = {"viewportWidth": PAGE_WIDTH * SCALE, "viewportHeight": PAGE_HEIGHT * SCALE}

REDACTIONS = [
    # SSN line on page 1
    dict(pageIndex=0, x=108, y=219, width=375, height=27, **VIEWPORT),
    # Credit card line on page 2
    dict(pageIndex=1, x=108, y=189, width=420, height=27, **VIEWPORT),
    # Page that does not exist: skipped and logged
    dict(pageIndex=7, x=0, y=0, width=10, height=10, **VIEWPORT),
]


def create_sample_pdf() -> bytes:
    """Create a sample PDF with sensitive content"""
    doc = fitz.open()

    pages = [
        [
            "CONFIDENTIAL DOCUMENT",
            "Employee Information:",
            "Name: John Q. Public",
            "SSN: 123-45-6789",
            "Email: john.public@company.com",
        ],
        [
            "Additional Information",
            "Date of Birth: 01/15/1980",
            "Credit Card: 4532 1234 5678 9012",
            "Address: 123 Main St, Anytown, ST 12345",
        ],
    ]

    for lines in pages:
        page = doc.new_page(width=PAGE_WIDTH, height=PAGE_HEIGHT)
        y_pos = 100
        for line in lines:
            page.insert_text((72, y_pos), line, fontsize=12)
            y_pos += 20

    data = doc.tobytes()
    doc.close()
    return data


def example_coordinate_mapping():
    """Show where viewport rectangles land in PDF space"""
    print("\n=== Coordinate Mapping Example ===")

    for item in REDACTIONS[:2]:
        rect = Rectangle.from_dict(item)
        box = viewport_to_pdf(rect, PAGE_WIDTH, PAGE_HEIGHT)
        print(f"  page {rect.page_index}: viewport ({rect.x:g}, {rect.y:g}, "
              f"{rect.width:g}x{rect.height:g}) -> PDF ({box.x:g}, {box.y:g}, "
              f"{box.width:g}x{box.height:g})")


def example_redaction():
    """Redact rectangles and verify nothing is left under them"""
    print("\n=== Redaction Example ===")

    pdf_bytes = create_sample_pdf()

    visual = apply_overlays_only(pdf_bytes, REDACTIONS)
    remaining = verify_redaction(visual.pdf_bytes, REDACTIONS)
    print(f"Overlay only: {len(remaining)} rectangles still have text underneath")

    config = RedactionConfig(watermark="REDACTED DOCUMENT", sanitize=True)
    result = apply_redactions(pdf_bytes, REDACTIONS, config)
    print(f"Removed {result.removed_objects} text objects, "
          f"skipped {result.rectangles_skipped} rectangles")

    remaining = verify_redaction(result.pdf_bytes, REDACTIONS)
    if remaining:
        print(f"⚠️  Warning: {len(remaining)} rectangles still have text underneath:")
        for item in remaining:
            print(f"   - {item}")
    else:
        print("✓ Verification passed: no text found under redacted areas")

    with tempfile.TemporaryDirectory() as temp_dir:
        output_pdf = os.path.join(temp_dir, "redacted_output.pdf")
        with open(output_pdf, "wb") as f:
            f.write(result.pdf_bytes)

        info = get_pdf_info(output_pdf)
        print(f"Output: {info['pages']} pages, {info['file_size']} bytes")


def main():
    """Run all examples"""
    print("Rectangle Redactor - Example Usage")
    print("=" * 40)

    if not DEPS_AVAILABLE:
        return

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    example_coordinate_mapping()
    example_redaction()

    print("\n" + "=" * 40)
    print("All examples completed successfully!")
    print("\nFor command-line usage, try:")
    print("rectredact --help")


if __name__ == "__main__":
    main()
