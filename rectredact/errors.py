"""
Exceptions raised by the redaction engine
"""


class RedactionError(Exception):
    """Base class for all redaction errors"""


class DocumentLoadError(RedactionError):
    """Input bytes could not be parsed as a PDF document"""


class InvalidRectangleError(RedactionError):
    """A rectangle points at a page that does not exist or is malformed"""


class StreamDecodeError(RedactionError):
    """A content stream could not be read, decoded or re-encoded"""


class SerializationError(RedactionError):
    """The redacted document could not be written back to bytes"""
