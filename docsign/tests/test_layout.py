"""
Layout arithmetic tests.

Coverage matrix:

  wrap_fixed_width      hard character split, empty → one line
  Content truncation    body capped at a fixed line count, deterministic
  Signature page        blocks strictly top-to-bottom, no overlap
  Dynamic offsets       longer signature pushes warnings further down
"""

from datetime import datetime, timezone

import pytest

from docsign.app.services.layout import (
    BLOCK_GAP,
    CONTENT_MIN_Y,
    HASH_LABEL_Y,
    LABEL_TO_FIRST_LINE,
    WRAPPED_LINE_PITCH,
    PageLayout,
    content_line_capacity,
    display_timestamp,
    document_layout,
    signature_page_layout,
    wrap_fixed_width,
)
from docsign.app.services.crypto import sign_message
from docsign.tests.fixtures.keys import large_key_pair, signer_key_pair

GENERATED_ON = datetime(2026, 1, 15, tzinfo=timezone.utc)
HASH = "ab" * 32
TIMESTAMP = "2026-01-15T10:30:00.123Z"


def _signature_layout(signature: str, document_hash: str = HASH) -> PageLayout:
    return signature_page_layout(
        signer="Jane Doe",
        timestamp=TIMESTAMP,
        document_hash=document_hash,
        signature=signature,
        system_name="AgroIA",
    )


def _assert_no_overlap(layout: PageLayout) -> None:
    for upper, lower in zip(layout.blocks, layout.blocks[1:]):
        assert upper.bottom > lower.top, (upper.name, lower.name)


# ---------------------------------------------------------------------------
# wrap_fixed_width
# ---------------------------------------------------------------------------

def test_wrap_splits_on_exact_width():
    assert wrap_fixed_width("abcdefgh", 3) == ["abc", "def", "gh"]
    assert wrap_fixed_width("abcdef", 3) == ["abc", "def"]


def test_wrap_of_empty_text_occupies_one_line():
    assert wrap_fixed_width("", 64) == [""]


def test_wrap_rejects_non_positive_width():
    with pytest.raises(ValueError):
        wrap_fixed_width("abc", 0)


def test_sha256_hash_fits_on_one_line():
    assert len(wrap_fixed_width(HASH, 64)) == 1


# ---------------------------------------------------------------------------
# Rendered document
# ---------------------------------------------------------------------------

def test_content_lines_flow_down_at_fixed_pitch():
    layout = document_layout(
        "Contract",
        "Line one\nLine two",
        generated_on=GENERATED_ON,
        system_name="AgroIA",
    )
    body = layout.block("content").lines

    assert [line.text for line in body] == ["Line one", "Line two"]
    assert body[0].y - body[1].y == 20
    assert layout.block("date").lines[0].text == "Date: 15/01/2026"
    assert "AgroIA" in layout.block("footer").lines[0].text


def test_overflowing_content_is_truncated_deterministically():
    content = "\n".join(f"line {i}" for i in range(500))

    runs = [
        document_layout(
            "Long", content, generated_on=GENERATED_ON, system_name="AgroIA"
        ).block("content")
        for _ in range(3)
    ]

    counts = {len(block.lines) for block in runs}
    assert counts == {content_line_capacity()}
    assert content_line_capacity() == 30
    assert runs[0].lines[-1].text == "line 29"
    assert runs[0].bottom >= CONTENT_MIN_Y


def test_body_stays_above_footer():
    content = "\n".join("x" for _ in range(100))
    layout = document_layout(
        "T", content, generated_on=GENERATED_ON, system_name="AgroIA"
    )
    _assert_no_overlap(layout)


def test_empty_content_has_no_body_block():
    layout = document_layout(
        "T", "", generated_on=GENERATED_ON, system_name="AgroIA"
    )
    assert [block.name for block in layout.blocks] == [
        "title", "date", "footer",
    ]


def test_only_newlines_split_content():
    layout = document_layout(
        "T", "a\x0cb\nc\r\n", generated_on=GENERATED_ON, system_name="AgroIA"
    )

    assert [line.text for line in layout.block("content").lines] == [
        "a\x0cb", "c\r", "",
    ]


# ---------------------------------------------------------------------------
# Signature page
# ---------------------------------------------------------------------------

def test_display_timestamp_drops_fraction_and_zone():
    assert display_timestamp(TIMESTAMP) == "2026-01-15 10:30:00"


def test_default_signature_page_blocks_do_not_overlap():
    signature = sign_message("m", signer_key_pair().private_key)
    _assert_no_overlap(_signature_layout(signature))


def test_large_key_signature_page_blocks_do_not_overlap():
    signature = sign_message("m", large_key_pair().private_key)
    layout = _signature_layout(signature)

    assert len(layout.block("signature").lines) - 1 == 9
    _assert_no_overlap(layout)


def test_block_offsets_account_for_wrapped_line_counts():
    signature = "A" * 800  # ten 80-char lines
    long_hash = "f" * 200  # four 64-char lines
    layout = _signature_layout(signature, long_hash)

    hash_lines = len(layout.block("hash").lines) - 1
    signature_lines = len(layout.block("signature").lines) - 1
    assert (hash_lines, signature_lines) == (4, 10)

    signature_label_y = layout.block("signature").lines[0].y
    warning_y = layout.block("warnings").lines[0].y

    assert signature_label_y == (
        HASH_LABEL_Y
        - LABEL_TO_FIRST_LINE
        - hash_lines * WRAPPED_LINE_PITCH
        - BLOCK_GAP
    )
    assert warning_y == (
        signature_label_y
        - LABEL_TO_FIRST_LINE
        - signature_lines * WRAPPED_LINE_PITCH
        - BLOCK_GAP
    )
    _assert_no_overlap(layout)


def test_longer_signature_moves_later_blocks_down():
    short_layout = _signature_layout("A" * 344)
    long_layout = _signature_layout("A" * 684)

    assert (
        short_layout.block("signature").top
        == long_layout.block("signature").top
    )
    assert (
        long_layout.block("warnings").top
        < short_layout.block("warnings").top
    )
    assert (
        long_layout.block("verification").bottom
        < short_layout.block("verification").bottom
    )


def test_every_line_within_each_block_descends():
    layout = _signature_layout("A" * 684)
    for block in layout.blocks:
        ys = [line.y for line in block.lines]
        assert ys == sorted(ys, reverse=True), block.name
