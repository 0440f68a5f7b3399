"""
Page layout arithmetic for rendered and signed documents.

This module decides *where* every line of text goes; it knows nothing
about PDF objects. ``pdf_composer`` draws whatever these functions
return.

Coordinates are PDF user-space points on an A4 page with the origin at
the bottom-left corner, so "further down the page" means a smaller y.

The signature page is laid out dynamically: the signature block starts
below the last wrapped hash line, and the warning block below the last
wrapped signature line. Larger keys produce longer signatures and push
everything beneath them further down instead of overlapping it.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import List, Sequence, Tuple

Color = Tuple[float, float, float]

PAGE_SIZE: Tuple[float, float] = (595, 842)  # A4
MARGIN_LEFT = 50
INDENT_LEFT = 60
BULLET_LEFT = 70

BLACK: Color = (0, 0, 0)
DARK_GREY: Color = (0.3, 0.3, 0.3)
LIGHT_GREY: Color = (0.5, 0.5, 0.5)
TITLE_BLUE: Color = (0.2, 0.4, 0.8)
SEAL_RED: Color = (0.8, 0.2, 0.2)
WARNING_ORANGE: Color = (0.8, 0.4, 0)
VERIFY_GREEN: Color = (0.2, 0.6, 0.2)

# Rendered document body
CONTENT_TOP = 680
CONTENT_LINE_PITCH = 20
CONTENT_MIN_Y = 100

# Signature page
HASH_LABEL_Y = 630
HASH_CHARS_PER_LINE = 64
SIGNATURE_CHARS_PER_LINE = 80
WRAPPED_LINE_PITCH = 12
LABEL_TO_FIRST_LINE = 15
BLOCK_GAP = 20


@dataclass(frozen=True)
class TextLine:
    text: str
    x: float
    y: float
    size: float
    bold: bool = False
    color: Color = BLACK


@dataclass(frozen=True)
class TextBlock:
    """A named group of lines that must not overlap any other block."""

    name: str
    lines: Tuple[TextLine, ...]

    @property
    def top(self) -> float:
        """Highest point reached by any glyph (baseline + font size)."""
        return max(line.y + line.size for line in self.lines)

    @property
    def bottom(self) -> float:
        """Lowest baseline in the block."""
        return min(line.y for line in self.lines)


@dataclass(frozen=True)
class PageLayout:
    blocks: Tuple[TextBlock, ...]

    def block(self, name: str) -> TextBlock:
        for block in self.blocks:
            if block.name == name:
                return block
        raise KeyError(name)

    @property
    def lines(self) -> List[TextLine]:
        return [line for block in self.blocks for line in block.lines]


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------


def wrap_fixed_width(text: str, width: int) -> List[str]:
    """
    Split ``text`` into chunks of at most ``width`` characters.

    Hashes and base64 signatures have no natural break points, so this
    is a hard character split. Empty text still occupies one line.
    """
    if width < 1:
        raise ValueError("width must be positive")
    if not text:
        return [""]
    return [text[i:i + width] for i in range(0, len(text), width)]


def _wrapped_block(
    name: str,
    *,
    label: str,
    label_y: float,
    label_size: float,
    values: Sequence[str],
    value_size: float,
) -> TextBlock:
    lines = [
        TextLine(label, MARGIN_LEFT, label_y, label_size, True, DARK_GREY)
    ]
    for index, value in enumerate(values):
        lines.append(
            TextLine(
                value,
                INDENT_LEFT,
                label_y - LABEL_TO_FIRST_LINE - index * WRAPPED_LINE_PITCH,
                value_size,
                False,
                DARK_GREY,
            )
        )
    return TextBlock(name, tuple(lines))


def next_block_y(label_y: float, wrapped_line_count: int) -> float:
    """
    Baseline of the block that follows a wrapped block.

    Leaves room for every wrapped line plus a fixed gap, whatever the
    number of lines turned out to be.
    """
    return (
        label_y
        - LABEL_TO_FIRST_LINE
        - wrapped_line_count * WRAPPED_LINE_PITCH
        - BLOCK_GAP
    )


# ------------------------------------------------------------------
# Rendered document
# ------------------------------------------------------------------


def content_line_capacity() -> int:
    """Number of body lines that fit on a rendered page."""
    return (CONTENT_TOP - CONTENT_MIN_Y) // CONTENT_LINE_PITCH + 1


def document_layout(
    title: str,
    content: str,
    *,
    generated_on: datetime,
    system_name: str,
) -> PageLayout:
    """
    Lay out a single rendered page.

    Body lines flow down from ``CONTENT_TOP`` at a fixed pitch. Lines
    that would fall below ``CONTENT_MIN_Y`` are dropped; callers that
    need more room must split their content themselves. Only newline
    characters separate lines; form feeds and carriage returns stay in
    the line text.
    """
    body: List[TextLine] = []
    y = CONTENT_TOP
    for text in content.split("\n") if content else ():
        if y < CONTENT_MIN_Y:
            break
        body.append(TextLine(text, MARGIN_LEFT, y, 11))
        y -= CONTENT_LINE_PITCH

    blocks = [
        TextBlock(
            "title",
            (TextLine(title, MARGIN_LEFT, 750, 20, True, TITLE_BLUE),),
        ),
        TextBlock(
            "date",
            (
                TextLine(
                    f"Date: {generated_on.strftime('%d/%m/%Y')}",
                    MARGIN_LEFT,
                    720,
                    12,
                    False,
                    DARK_GREY,
                ),
            ),
        ),
    ]
    if body:
        blocks.append(TextBlock("content", tuple(body)))
    blocks.append(
        TextBlock(
            "footer",
            (
                TextLine(
                    f"Document generated by {system_name} - "
                    "Digital Signature System",
                    MARGIN_LEFT,
                    50,
                    8,
                    False,
                    LIGHT_GREY,
                ),
            ),
        )
    )
    return PageLayout(tuple(blocks))


# ------------------------------------------------------------------
# Signature page
# ------------------------------------------------------------------


def display_timestamp(timestamp: str) -> str:
    """``2026-01-15T10:30:00.000Z`` -> ``2026-01-15 10:30:00``."""
    return timestamp.replace("T", " ")[:19]


def signature_page_layout(
    *,
    signer: str,
    timestamp: str,
    document_hash: str,
    signature: str,
    system_name: str,
) -> PageLayout:
    """
    Lay out the appended signature page.

    Fixed header lines come first. The hash block starts at
    ``HASH_LABEL_Y``; the signature block and the warning block are
    each positioned from the wrapped line count of the block above.
    """
    hash_lines = wrap_fixed_width(document_hash, HASH_CHARS_PER_LINE)
    signature_lines = wrap_fixed_width(signature, SIGNATURE_CHARS_PER_LINE)

    signature_label_y = next_block_y(HASH_LABEL_Y, len(hash_lines))
    warning_y = next_block_y(signature_label_y, len(signature_lines))

    blocks = (
        TextBlock(
            "title",
            (TextLine("DIGITAL SIGNATURE", 200, 750, 24, True, SEAL_RED),),
        ),
        TextBlock(
            "statement",
            (
                TextLine(
                    "This document has been digitally signed",
                    MARGIN_LEFT,
                    700,
                    14,
                    True,
                ),
            ),
        ),
        TextBlock(
            "signer",
            (TextLine(f"Signed by: {signer}", MARGIN_LEFT, 670, 12),),
        ),
        TextBlock(
            "timestamp",
            (
                TextLine(
                    f"Date and time: {display_timestamp(timestamp)}",
                    MARGIN_LEFT,
                    650,
                    12,
                ),
            ),
        ),
        _wrapped_block(
            "hash",
            label="SHA-256 hash:",
            label_y=HASH_LABEL_Y,
            label_size=10,
            values=hash_lines,
            value_size=9,
        ),
        _wrapped_block(
            "signature",
            label="Digital signature:",
            label_y=signature_label_y,
            label_size=10,
            values=signature_lines,
            value_size=8,
        ),
        TextBlock(
            "warnings",
            (
                TextLine(
                    "IMPORTANT:", MARGIN_LEFT, warning_y, 12, True,
                    WARNING_ORANGE,
                ),
                TextLine(
                    "- Do not modify this document after signing",
                    BULLET_LEFT,
                    warning_y - 20,
                    10,
                ),
                TextLine(
                    "- Any modification will invalidate the digital "
                    "signature",
                    BULLET_LEFT,
                    warning_y - 40,
                    10,
                ),
                TextLine(
                    "- Verify the signature using the matching public key",
                    BULLET_LEFT,
                    warning_y - 60,
                    10,
                ),
            ),
        ),
        TextBlock(
            "verification",
            (
                TextLine(
                    "VERIFICATION:", MARGIN_LEFT, warning_y - 100, 12, True,
                    VERIFY_GREEN,
                ),
                TextLine(
                    f"To verify this signature, use the {system_name} "
                    "verification system",
                    MARGIN_LEFT,
                    warning_y - 120,
                    10,
                ),
            ),
        ),
    )
    return PageLayout(blocks)
