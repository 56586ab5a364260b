"""
Content Stream Tokenizer - Split page content streams into instructions

A content stream is a postfix language: operands first, then the operator
keyword. Each Token holds one operator together with the operands and
whitespace that precede it, exactly as they appear in the source, so joining
the raw text of every token gives back the original stream.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple, Union

from .errors import StreamDecodeError


# Content-stream operators are ASCII; string payloads are arbitrary bytes.
# Latin-1 maps every byte to exactly one character and back.
STREAM_ENCODING = "latin-1"

WHITESPACE = "\x00\t\n\x0c\r "
DELIMITERS = "()<>[]{}/%"
_BOUNDARY = WHITESPACE + DELIMITERS

_NUMBER = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)")
_INLINE_IMAGE_END = re.compile(r"[\x00\t\n\x0c\r ]EI(?=[\x00\t\n\x0c\r ]|$)")


class TokenKind(Enum):
    TRANSFORM = "transform"
    BEGIN_TEXT = "begin_text"
    END_TEXT = "end_text"
    TEXT_POSITION = "text_position"
    TEXT_SHOW = "text_show"
    FONT = "font"
    PASSTHROUGH = "passthrough"


_OPERATOR_KINDS = {
    "cm": TokenKind.TRANSFORM,
    "BT": TokenKind.BEGIN_TEXT,
    "ET": TokenKind.END_TEXT,
    "Tm": TokenKind.TEXT_POSITION,
    "Td": TokenKind.TEXT_POSITION,
    "TD": TokenKind.TEXT_POSITION,
    "TL": TokenKind.TEXT_POSITION,
    "Tj": TokenKind.TEXT_SHOW,
    "TJ": TokenKind.TEXT_SHOW,
    "'": TokenKind.TEXT_SHOW,
    '"': TokenKind.TEXT_SHOW,
    "Tf": TokenKind.FONT,
}


@dataclass
class Token:
    """One instruction of a content stream"""
    raw: str        # source text, leading whitespace and operands included
    operator: str   # empty for trailing text after the last operator
    kind: TokenKind
    operands: str   # the part of raw before the operator keyword


def classify(operator: str) -> TokenKind:
    return _OPERATOR_KINDS.get(operator, TokenKind.PASSTHROUGH)


def decode_stream(data: bytes) -> str:
    """Decode raw (already decompressed) stream bytes to text"""
    return data.decode(STREAM_ENCODING)


def encode_stream(text: str) -> bytes:
    """Encode tokenizer output back to stream bytes"""
    try:
        return text.encode(STREAM_ENCODING)
    except UnicodeEncodeError as e:
        raise StreamDecodeError(f"Content stream cannot be re-encoded: {e}") from e


def _skip_regular(text: str, i: int) -> int:
    n = len(text)
    while i < n and text[i] not in _BOUNDARY:
        i += 1
    return i


def _skip_comment(text: str, i: int) -> int:
    n = len(text)
    while i < n and text[i] not in "\r\n":
        i += 1
    return i


def _skip_string(text: str, i: int) -> int:
    """Skip a literal string starting at '(' (balanced parentheses, escapes)"""
    n = len(text)
    depth = 0
    while i < n:
        c = text[i]
        if c == "\\":
            i += 2
            continue
        if c == "(":
            depth += 1
        elif c == ")":
            depth -= 1
            if depth == 0:
                return i + 1
        i += 1
    return n


def _skip_hex(text: str, i: int) -> int:
    end = text.find(">", i + 1)
    return len(text) if end == -1 else end + 1


def _skip_nested(text: str, i: int, opener: str, closer: str) -> int:
    """Skip an array or dictionary, including strings nested inside it"""
    n = len(text)
    depth = 0
    while i < n:
        if text.startswith(opener, i):
            depth += 1
            i += len(opener)
        elif text.startswith(closer, i):
            depth -= 1
            i += len(closer)
            if depth == 0:
                return i
        elif text[i] == "(":
            i = _skip_string(text, i)
        elif text.startswith("<<", i):
            i = _skip_nested(text, i, "<<", ">>")
        elif text[i] == "<":
            i = _skip_hex(text, i)
        elif text[i] == "%":
            i = _skip_comment(text, i)
        else:
            i += 1
    return n


def _next_lexeme(text: str, i: int) -> Optional[Tuple[str, int, int]]:
    """
    Find the next lexeme at or after position i

    Returns:
        (kind, start, end) or None at end of text. kind is one of
        'number', 'name', 'string', 'array', 'dict', 'comment', 'operator'
        or 'other'.
    """
    n = len(text)
    while i < n and text[i] in WHITESPACE:
        i += 1
    if i >= n:
        return None

    start = i
    c = text[i]
    if c == "%":
        return "comment", start, _skip_comment(text, i)
    if c == "(":
        return "string", start, _skip_string(text, i)
    if text.startswith("<<", i):
        return "dict", start, _skip_nested(text, i, "<<", ">>")
    if c == "<":
        return "string", start, _skip_hex(text, i)
    if c == "[":
        return "array", start, _skip_nested(text, i, "[", "]")
    if c == "/":
        return "name", start, _skip_regular(text, i + 1)
    if c in DELIMITERS:
        # Stray closing delimiter or brace
        return "other", start, i + 1

    end = _skip_regular(text, i)
    word = text[start:end]
    if _NUMBER.fullmatch(word):
        return "number", start, end
    if word in ("true", "false", "null"):
        return "other", start, end
    return "operator", start, end


def _skip_inline_image(text: str, i: int) -> int:
    """Skip from just after BI to the end of the matching EI"""
    while True:
        lexeme = _next_lexeme(text, i)
        if lexeme is None:
            return len(text)
        kind, start, end = lexeme
        i = end
        if kind == "operator" and text[start:end] == "ID":
            break

    # A single whitespace byte separates ID from the image data
    match = _INLINE_IMAGE_END.search(text, i + 1)
    return match.end() if match else len(text)


def tokenize(text: str) -> List[Token]:
    """
    Split decoded content-stream text into instruction tokens

    Inline images (BI ... ID <data> EI) come out as a single passthrough
    token so their binary payload is never inspected.
    """
    tokens = []
    token_start = 0
    i = 0

    while True:
        lexeme = _next_lexeme(text, i)
        if lexeme is None:
            break
        kind, start, end = lexeme
        i = end
        if kind != "operator":
            continue

        operator = text[start:end]
        if operator == "BI":
            end = _skip_inline_image(text, end)
            i = end
            operator = "EI"

        tokens.append(Token(
            raw=text[token_start:end],
            operator=operator,
            kind=classify(operator),
            operands=text[token_start:start],
        ))
        token_start = end

    if token_start < len(text):
        trailing = text[token_start:]
        tokens.append(Token(trailing, "", TokenKind.PASSTHROUGH, trailing))

    return tokens


def parse_operands(source: Union[Token, str]) -> List[float]:
    """
    Extract the numeric operands of an instruction

    Names, strings and arrays are skipped; numbers inside an array are
    not operands of the instruction itself.
    """
    text = source.operands if isinstance(source, Token) else source
    numbers = []
    i = 0

    while True:
        lexeme = _next_lexeme(text, i)
        if lexeme is None:
            break
        kind, start, end = lexeme
        i = end
        if kind == "number":
            numbers.append(float(text[start:end]))

    return numbers
