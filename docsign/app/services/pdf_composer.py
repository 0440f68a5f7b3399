"""
PDF rendering and signature page composition using pikepdf.

Two operations:
- ``render_document`` builds a fresh one-page PDF from a title and text.
- ``append_signature_page`` loads an existing PDF and adds exactly one
  page describing a signature.

Text is drawn with the standard Type1 fonts (Helvetica and
Helvetica-Bold, WinAnsi encoded), so no font files are embedded.
Characters outside WinAnsi are rendered as ``?``.

Trust boundary:
- The signature page is presentational. Nothing ever reads it back;
  verification relies on the detached SignatureInfo record only.
"""

from __future__ import annotations

import io
import logging
from datetime import datetime
from typing import List, Optional

import pikepdf
from pikepdf import (
    ContentStreamInstruction,
    Dictionary,
    Name,
    Operator,
    Stream,
    String,
)

from docsign.app.core.config import get_settings
from docsign.app.schemas.signature import SignatureInfo
from docsign.app.services.layout import (
    PAGE_SIZE,
    PageLayout,
    TextLine,
    document_layout,
    signature_page_layout,
)
from docsign.app.services.records import utc_now

logger = logging.getLogger(__name__)

REGULAR_FONT = Name("/F1")
BOLD_FONT = Name("/F2")


class DocumentFormatError(RuntimeError):
    """Raised when input bytes are not a parseable PDF document."""


# ------------------------------------------------------------------
# Internal helpers
# ------------------------------------------------------------------


def _font_resources(pdf: pikepdf.Pdf) -> Dictionary:
    def standard_font(base_font: str) -> pikepdf.Object:
        return pdf.make_indirect(
            Dictionary(
                Type=Name.Font,
                Subtype=Name.Type1,
                BaseFont=Name(base_font),
                Encoding=Name.WinAnsiEncoding,
            )
        )

    return Dictionary(
        Font=Dictionary(
            F1=standard_font("/Helvetica"),
            F2=standard_font("/Helvetica-Bold"),
        )
    )


def _encode_text(text: str) -> String:
    return String(text.encode("cp1252", errors="replace"))


def _text_instructions(line: TextLine) -> List[ContentStreamInstruction]:
    return [
        ContentStreamInstruction([], Operator("BT")),
        ContentStreamInstruction(
            [BOLD_FONT if line.bold else REGULAR_FONT, line.size],
            Operator("Tf"),
        ),
        ContentStreamInstruction(list(line.color), Operator("rg")),
        ContentStreamInstruction([line.x, line.y], Operator("Td")),
        ContentStreamInstruction([_encode_text(line.text)], Operator("Tj")),
        ContentStreamInstruction([], Operator("ET")),
    ]


def _add_layout_page(pdf: pikepdf.Pdf, layout: PageLayout) -> None:
    """Append one A4 page and draw every line of ``layout`` on it."""
    instructions: List[ContentStreamInstruction] = []
    for line in layout.lines:
        instructions.extend(_text_instructions(line))

    page = pdf.add_blank_page(page_size=PAGE_SIZE)
    page.Resources = _font_resources(pdf)
    page.Contents = pdf.make_indirect(
        Stream(pdf, pikepdf.unparse_content_stream(instructions))
    )


def _save(pdf: pikepdf.Pdf) -> bytes:
    buffer = io.BytesIO()
    pdf.save(buffer)
    return buffer.getvalue()


# ------------------------------------------------------------------
# Public API
# ------------------------------------------------------------------


def render_document(
    title: str,
    content: str,
    *,
    now: Optional[datetime] = None,
    system_name: Optional[str] = None,
) -> bytes:
    """
    Render a one-page PDF with a title, a date line, body text and a
    footer.

    Body text beyond the page capacity is truncated, not an error.
    """
    layout = document_layout(
        title,
        content,
        generated_on=now or utc_now(),
        system_name=system_name or get_settings().system_name,
    )

    with pikepdf.new() as pdf:
        _add_layout_page(pdf, layout)
        return _save(pdf)


def append_signature_page(
    pdf_bytes: bytes,
    signature_info: SignatureInfo,
    *,
    system_name: Optional[str] = None,
) -> bytes:
    """
    Return a copy of ``pdf_bytes`` with one signature page appended.

    Raises:
        DocumentFormatError:
            If ``pdf_bytes`` is not a parseable PDF or exceeds the
            configured size limit.
    """
    settings = get_settings()

    if not isinstance(pdf_bytes, (bytes, bytearray)) or not pdf_bytes:
        raise DocumentFormatError("Document buffer is empty")

    if len(pdf_bytes) > settings.max_pdf_size_bytes:
        raise DocumentFormatError(
            f"Document exceeds {settings.max_pdf_size_mb} MB limit"
        )

    layout = signature_page_layout(
        signer=signature_info.signer,
        timestamp=signature_info.timestamp,
        document_hash=signature_info.hash,
        signature=signature_info.signature,
        system_name=system_name or settings.system_name,
    )

    try:
        with pikepdf.open(io.BytesIO(bytes(pdf_bytes))) as pdf:
            page_count = len(pdf.pages)
            _add_layout_page(pdf, layout)
            signed_bytes = _save(pdf)
    except pikepdf.PdfError as exc:
        raise DocumentFormatError(
            f"Input is not a parseable PDF document: {exc}"
        ) from exc

    logger.debug(
        "signature_page_appended",
        extra={"pages_before": page_count, "pages_after": page_count + 1},
    )
    return signed_bytes
