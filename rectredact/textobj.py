"""
Text Object Redactor - Drop BT/ET blocks whose anchor falls in a box

Walks the tokens of one content stream while tracking a simplified
transformation matrix. Every text object (BT ... ET) is buffered; when it
closes it is either written back untouched or replaced by a single comment
line if any of its positioning or text-showing instructions resolved to an
anchor inside the padded redaction box.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from .config import RedactionConfig
from .geometry import PdfBox, anchor_in_box
from .tokenizer import Token, TokenKind, parse_operands, tokenize

logger = logging.getLogger(__name__)

IDENTITY = (1.0, 0.0, 0.0, 1.0, 0.0, 0.0)

# Written in place of a removed text object
REMOVAL_MARKER = "% redacted text object\n"

Matrix = Tuple[float, float, float, float, float, float]


def multiply(m: Sequence[float], n: Sequence[float]) -> Matrix:
    """Compose the 2x3 affine matrix n into the current matrix m"""
    a, b, c, d, e, f = m
    na, nb, nc, nd, ne, nf = n
    return (
        a * na + c * nb,
        b * na + d * nb,
        a * nc + c * nd,
        b * nc + d * nd,
        a * ne + c * nf + e,
        b * ne + d * nf + f,
    )


@dataclass
class ScanState:
    """
    Positioning context threaded through one or more stream scans

    A fresh state per stream reproduces the per-stream reset; passing the
    same state to consecutive scans carries the matrix across the streams
    of a page.
    """
    matrix: Matrix = IDENTITY
    font_size: float = 12.0
    in_text_object: bool = False
    skip: bool = False
    pending: List[str] = field(default_factory=list)

    @classmethod
    def for_config(cls, config: Optional[RedactionConfig] = None) -> "ScanState":
        config = config or RedactionConfig()
        return cls(font_size=float(config.default_font_size))

    @property
    def anchor(self) -> Tuple[float, float]:
        return self.matrix[4], self.matrix[5]


def _update_position(state: ScanState, token: Token) -> None:
    """Apply a text-positioning operator to the state matrix"""
    operands = parse_operands(token)
    a, b, c, d, e, f = state.matrix

    if token.operator == "Tm":
        if len(operands) >= 6:
            state.matrix = tuple(operands[-6:])
    elif token.operator in ("Td", "TD"):
        if len(operands) >= 2:
            state.matrix = (a, b, c, d, e + operands[-2], f + operands[-1])
    elif token.operator == "TL":
        if operands:
            state.matrix = (a, b, c, d, e, f - operands[-1])


def _process_token(token: Token, state: ScanState, box: PdfBox,
                   config: RedactionConfig, output: List[str]) -> int:
    """Feed one token through the state machine; returns objects removed"""
    kind = token.kind

    if kind == TokenKind.BEGIN_TEXT:
        if state.in_text_object:
            # Nested BT is invalid; keep what was buffered so far
            output.extend(state.pending)
        state.in_text_object = True
        state.pending = [token.raw]
        state.skip = False
        return 0

    if not state.in_text_object:
        if kind == TokenKind.TRANSFORM:
            operands = parse_operands(token)
            if len(operands) >= 6:
                state.matrix = multiply(state.matrix, operands[-6:])
        output.append(token.raw)
        return 0

    if kind == TokenKind.END_TEXT:
        removed = 0
        if state.skip:
            # Keep the whitespace that preceded BT so line structure survives
            first = state.pending[0]
            leading = first[:len(first) - len(first.lstrip())]
            output.append(leading + REMOVAL_MARKER)
            removed = 1
        else:
            output.extend(state.pending)
            output.append(token.raw)
        state.in_text_object = False
        state.pending = []
        state.skip = False
        return removed

    state.pending.append(token.raw)

    if kind == TokenKind.FONT:
        operands = parse_operands(token)
        if operands:
            state.font_size = operands[-1]
    elif kind == TokenKind.TEXT_POSITION:
        _update_position(state, token)
        _check_anchor(state, box, config)
    elif kind == TokenKind.TEXT_SHOW:
        _check_anchor(state, box, config)

    return 0


def _check_anchor(state: ScanState, box: PdfBox, config: RedactionConfig) -> None:
    if state.skip:
        return
    ax, ay = state.anchor
    if anchor_in_box(ax, ay, box, state.font_size, config):
        logger.debug("Text anchor (%.2f, %.2f) inside redaction box %s", ax, ay, box)
        state.skip = True


def redact_text_objects(text: str,
                        box: PdfBox,
                        config: Optional[RedactionConfig] = None,
                        state: Optional[ScanState] = None) -> Tuple[str, int]:
    """
    Remove text objects anchored inside a box from decoded stream text

    Args:
        text: Decoded content stream
        box: Redaction box in PDF space
        config: Containment parameters
        state: Positioning context; a new one is created when omitted

    Returns:
        Tuple of (rewritten text, number of text objects removed)
    """
    config = config or RedactionConfig()
    if state is None:
        state = ScanState.for_config(config)

    output: List[str] = []
    removed = 0

    for token in tokenize(text):
        removed += _process_token(token, state, box, config, output)

    if state.in_text_object:
        # Unterminated BT at end of stream: write it back untouched
        output.extend(state.pending)
        state.in_text_object = False
        state.pending = []
        state.skip = False

    return "".join(output), removed
