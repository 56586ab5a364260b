"""
PDF Sanitization Module - Scrub metadata and hidden payloads after redaction

Redaction removes what is drawn on a page; a document can still leak the
same information through its info dictionary, XMP packet, attachments or
page thumbnails rendered before redaction.
"""

import logging

import pikepdf

from .errors import DocumentLoadError, SerializationError

logger = logging.getLogger(__name__)


def _remove_metadata(pdf: pikepdf.Pdf) -> int:
    """
    Remove the document info dictionary and XMP metadata

    Returns:
        Number of metadata items removed
    """
    removed_count = 0

    info = pdf.docinfo
    info_keys = list(info.keys())
    for key in info_keys:
        del info[key]
    if info_keys:
        removed_count += len(info_keys)
        logger.debug("Removed %d document info entries", len(info_keys))

    if "/Metadata" in pdf.Root:
        del pdf.Root["/Metadata"]
        removed_count += 1
        logger.debug("Removed XMP metadata stream")

    return removed_count


def _remove_javascript_and_actions(pdf: pikepdf.Pdf) -> int:
    """
    Remove JavaScript and automatic actions

    Returns:
        Number of items removed
    """
    removed_count = 0

    for key in ("/OpenAction", "/AA", "/JS", "/JavaScript"):
        if key in pdf.Root:
            del pdf.Root[key]
            removed_count += 1
            logger.debug("Removed %s", key)

    if "/Names" in pdf.Root and "/JavaScript" in pdf.Root.Names:
        del pdf.Root.Names["/JavaScript"]
        removed_count += 1

    for page in pdf.pages:
        for key in ("/AA", "/A"):
            if key in page.obj:
                del page.obj[key]
                removed_count += 1

    return removed_count


def _remove_embedded_files(pdf: pikepdf.Pdf) -> int:
    """
    Remove embedded files and file attachment annotations

    Returns:
        Number of embedded files removed
    """
    removed_count = 0

    if "/Names" in pdf.Root:
        names = pdf.Root.Names
        if "/EmbeddedFiles" in names:
            tree = names.EmbeddedFiles
            if "/Names" in tree:
                # Name tree leaves alternate key, value
                removed_count += len(tree.Names) // 2
            else:
                removed_count += 1
            del names["/EmbeddedFiles"]

        if len(names.keys()) == 0:
            del pdf.Root["/Names"]

    for page in pdf.pages:
        if "/Annots" not in page.obj:
            continue

        annots = page.obj.Annots
        kept = [annot for annot in annots
                if annot.get("/Subtype") != pikepdf.Name.FileAttachment]
        removed_count += len(annots) - len(kept)

        if kept:
            page.obj.Annots = pikepdf.Array(kept)
        else:
            del page.obj["/Annots"]

    if removed_count:
        logger.debug("Removed %d embedded files", removed_count)
    return removed_count


def _remove_thumbnails_and_pieceinfo(pdf: pikepdf.Pdf) -> int:
    """
    Remove page thumbnails and piece info

    Thumbnails are pre-rendered images of the page and may show the
    content that has just been covered.

    Returns:
        Number of items removed
    """
    removed_count = 0

    for page in pdf.pages:
        for key in ("/Thumb", "/PieceInfo"):
            if key in page.obj:
                del page.obj[key]
                removed_count += 1

    if "/PieceInfo" in pdf.Root:
        del pdf.Root["/PieceInfo"]
        removed_count += 1

    if removed_count:
        logger.debug("Removed %d thumbnail/pieceinfo items", removed_count)
    return removed_count


def sanitize_document(pdf: pikepdf.Pdf) -> int:
    """
    Scrub an open document in place

    Returns:
        Total number of items removed
    """
    total_removed = 0
    total_removed += _remove_metadata(pdf)
    total_removed += _remove_javascript_and_actions(pdf)
    total_removed += _remove_embedded_files(pdf)
    total_removed += _remove_thumbnails_and_pieceinfo(pdf)

    logger.info("Sanitization removed %d items", total_removed)
    return total_removed


def sanitize_file(input_path: str, output_path: str) -> int:
    """
    Sanitize a PDF file without redacting anything

    Returns:
        Total number of items removed

    Raises:
        DocumentLoadError: if the input cannot be opened
        SerializationError: if the output cannot be written
    """
    try:
        pdf = pikepdf.open(input_path)
    except (pikepdf.PdfError, OSError) as e:
        raise DocumentLoadError(f"Cannot open {input_path}: {e}") from e

    with pdf:
        removed = sanitize_document(pdf)
        try:
            pdf.save(output_path, compress_streams=True)
        except (pikepdf.PdfError, OSError) as e:
            raise SerializationError(f"Cannot write {output_path}: {e}") from e

    return removed
