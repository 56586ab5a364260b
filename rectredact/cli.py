#!/usr/bin/env python3
"""
Rectangle Redactor CLI - Remove content under rectangles drawn on rendered pages
"""

import logging
import sys
from pathlib import Path

import click

from .config import RedactionConfig
from .errors import RedactionError
from .geometry import Rectangle, viewport_to_pdf
from .redact import apply_overlays_only, apply_redactions
from .sanitize import sanitize_file
from .utils import (
    COLORS,
    format_file_size,
    get_color,
    load_rectangles,
    validate_pdf,
    verify_redaction,
)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@click.command()
@click.argument("input_pdf", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("output_pdf", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--rects", required=True, type=click.Path(exists=True, dir_okay=False, path_type=Path),
              help="JSON file with viewport rectangles")
@click.option("--fill", default="black", type=click.Choice(sorted(COLORS)), help="Fill color for redacted areas")
@click.option("--visual-only", is_flag=True, help="Only paint covers, keep content streams untouched")
@click.option("--carry-state", is_flag=True, help="Carry text position across the content streams of a page")
@click.option("--watermark", default=None, help="Label stamped on every redacted page")
@click.option("--sanitize", "do_sanitize", is_flag=True, help="Also remove metadata, attachments and thumbnails")
@click.option("--verify", is_flag=True, help="Check the output for text left under the rectangles")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
def redact(input_pdf, output_pdf, rects, fill, visual_only, carry_state, watermark,
           do_sanitize, verify, verbose):
    """
    Redact rectangles drawn over rendered pages of a PDF.

    Rectangles are given in the pixel space of the rendered page image,
    each with the size of that image:

    \b
    [{"pageIndex": 0, "x": 100, "y": 90, "width": 80, "height": 20,
      "viewportWidth": 918, "viewportHeight": 1188}]
    """
    _configure_logging(verbose)

    try:
        if not validate_pdf(input_pdf):
            click.echo(f"Error: {input_pdf} is not a valid PDF file", err=True)
            sys.exit(1)

        rectangles = load_rectangles(rects)
        if verbose:
            click.echo(f"Loaded {len(rectangles)} rectangles from {rects}")

        config = RedactionConfig(
            fill=get_color(fill),
            carry_state_across_streams=carry_state,
            watermark=watermark,
            sanitize=do_sanitize,
        )

        pdf_bytes = input_pdf.read_bytes()
        if visual_only:
            result = apply_overlays_only(pdf_bytes, rectangles, config)
        else:
            result = apply_redactions(pdf_bytes, rectangles, config)

        output_pdf.write_bytes(result.pdf_bytes)

        if result.rectangles_skipped:
            click.echo(f"Warning: skipped {result.rectangles_skipped} invalid rectangles", err=True)
        if result.overlay_only:
            click.echo(f"Warning: {result.overlay_only} rectangles were only covered, "
                       f"text removal failed", err=True)

        if verify:
            remaining = verify_redaction(result.pdf_bytes, rectangles)
            if remaining:
                click.echo(f"Warning: found text under {len(remaining)} rectangles:", err=True)
                for r in remaining:
                    click.echo(f"  - {r}", err=True)
            else:
                click.echo("✓ Verification passed: no text found under redacted areas")

        if verbose:
            click.echo(f"Output size: {format_file_size(len(result.pdf_bytes))}")
        click.echo(f"✓ Redaction complete: {output_pdf} "
                   f"({result.removed_objects} text objects removed)")

    except (RedactionError, OSError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@click.command()
@click.argument("input_pdf", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("output_pdf", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
def sanitize(input_pdf, output_pdf, verbose):
    """
    Sanitize PDF metadata and embedded content without redacting anything.
    """
    _configure_logging(verbose)

    try:
        removed = sanitize_file(str(input_pdf), str(output_pdf))
        click.echo(f"✓ Sanitization complete: {output_pdf} ({removed} items removed)")
    except RedactionError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@click.command(name="map")
@click.argument("x", type=float)
@click.argument("y", type=float)
@click.argument("width", type=float)
@click.argument("height", type=float)
@click.option("--page-width", required=True, type=float, help="Page width in PDF units")
@click.option("--page-height", required=True, type=float, help="Page height in PDF units")
@click.option("--viewport-width", required=True, type=float, help="Rendered page width in pixels")
@click.option("--viewport-height", required=True, type=float, help="Rendered page height in pixels")
def map_rect(x, y, width, height, page_width, page_height, viewport_width, viewport_height):
    """
    Print the PDF-space box for a viewport rectangle.
    """
    rect = Rectangle(0, x, y, width, height, viewport_width, viewport_height)
    try:
        box = viewport_to_pdf(rect, page_width, page_height)
    except RedactionError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(f"x={box.x:g} y={box.y:g} width={box.width:g} height={box.height:g}")


@click.group()
def cli():
    """Rectangle Redactor - Remove content under rectangles drawn on rendered pages"""
    pass


# Add commands to the group
cli.add_command(redact)
cli.add_command(sanitize)
cli.add_command(map_rect)


if __name__ == "__main__":
    cli()
