"""
Stream Rewriting - Read, redact and replace page content streams
"""

import logging
from typing import List, Optional

import pikepdf

from .config import RedactionConfig
from .errors import StreamDecodeError
from .geometry import PdfBox
from .textobj import ScanState, redact_text_objects
from .tokenizer import decode_stream, encode_stream

logger = logging.getLogger(__name__)


def content_streams(page: pikepdf.Page) -> List[pikepdf.Object]:
    """
    Return the content streams of a page in drawing order

    /Contents may be a single stream or an array of streams. Streams are
    returned as shared objects: a stream that several pages reference
    through the same indirect /Contents is rewritten for all of them.
    """
    contents = page.obj.get("/Contents")
    if contents is None:
        return []
    if isinstance(contents, pikepdf.Array):
        return [item for item in contents if isinstance(item, pikepdf.Stream)]
    if isinstance(contents, pikepdf.Stream):
        return [contents]
    return []


def read_stream_text(stream: pikepdf.Stream) -> str:
    """
    Decode a content stream to text

    Raises:
        StreamDecodeError: if the stream has no declared length or its
            filters cannot be decoded
    """
    if stream.get("/Length") is None:
        raise StreamDecodeError("Content stream has no /Length")

    try:
        data = stream.read_bytes()
    except pikepdf.PdfError as e:
        raise StreamDecodeError(f"Cannot decode content stream: {e}") from e

    return decode_stream(data)


def write_stream_text(stream: pikepdf.Stream, text: str) -> int:
    """
    Replace the content of a stream

    pikepdf keeps /Length in step with the new data.

    Returns:
        Number of bytes written
    """
    data = encode_stream(text)
    # Written unfiltered; compression is applied again when the document is saved
    stream.write(data)
    return len(data)


def rewrite_stream(stream: pikepdf.Stream,
                   box: PdfBox,
                   config: Optional[RedactionConfig] = None,
                   state: Optional[ScanState] = None) -> int:
    """
    Remove text objects inside a box from one content stream

    The stream is only touched when the redacted text differs from the
    original.

    Returns:
        Number of text objects removed
    """
    original = read_stream_text(stream)
    redacted, removed = redact_text_objects(original, box, config, state)

    if redacted == original:
        return 0

    size = write_stream_text(stream, redacted)
    logger.debug("Rewrote content stream (%d -> %d bytes, %d text objects removed)",
                 len(original), size, removed)
    return removed
