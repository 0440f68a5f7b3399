"""
Document signing orchestration.

Pipeline (strictly in this order):
    digest the received bytes
    -> compose ``hash|signer|timestamp``
    -> RSA-sign the message
    -> append the signature page
    -> assemble SignatureInfo and CertificateInfo

Signing is all-or-nothing. Any failure raises before a result object
exists, so a caller never receives a signed buffer alongside an error.
The private key is used for the single ``sign_message`` call and is
not referenced by anything returned from here.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from docsign.app.schemas.signature import SignedDocument
from docsign.app.services.crypto import load_public_key, sign_message
from docsign.app.services.message import compose_signature_message
from docsign.app.services.pdf_composer import append_signature_page
from docsign.app.services.records import (
    build_certificate_info,
    build_signature_record,
    format_timestamp,
    utc_now,
)
from docsign.app.utils.hashing import compute_document_hash

logger = logging.getLogger(__name__)


def sign_document(
    pdf_bytes: bytes,
    signer_name: str,
    private_key_pem: str,
    public_key_pem: str,
    *,
    now: Optional[datetime] = None,
) -> SignedDocument:
    """
    Sign a PDF buffer on behalf of ``signer_name``.

    Args:
        pdf_bytes:
            The complete document to sign. The whole buffer is the
            signed payload.
        signer_name:
            Free-text identity; not checked against any directory.
        private_key_pem:
            PEM RSA private key used once and then discarded.
        public_key_pem:
            PEM RSA public key copied into the record for verifiers.
        now:
            Signing instant; defaults to the current UTC time.

    Raises:
        ValueError:
            If ``signer_name`` is blank.
        KeyFormatError:
            If either key cannot be parsed.
        DocumentFormatError:
            If ``pdf_bytes`` is not a parseable PDF.
    """
    if not signer_name or not signer_name.strip():
        raise ValueError("signer_name must not be empty")

    # Fail on a bad public key before doing any work; the record would
    # otherwise be unverifiable.
    load_public_key(public_key_pem)

    signed_at = now or utc_now()
    timestamp = format_timestamp(signed_at)

    document_hash = compute_document_hash(pdf_bytes)
    message = compose_signature_message(document_hash, signer_name, timestamp)
    signature = sign_message(message, private_key_pem)

    signature_info = build_signature_record(
        signer=signer_name,
        document_hash=document_hash,
        signature=signature,
        public_key=public_key_pem,
        timestamp=timestamp,
    )

    signed_pdf_bytes = append_signature_page(pdf_bytes, signature_info)

    certificate_info = build_certificate_info(signer_name, now=signed_at)

    logger.info(
        "document_signed",
        extra={"signer": signer_name, "document_hash": document_hash},
    )

    return SignedDocument(
        signed_pdf_bytes=signed_pdf_bytes,
        signature_info=signature_info,
        certificate_info=certificate_info,
    )
