"""
Signature record assembly.

Pure construction of the detached records that accompany a signed
document. No I/O happens here; the caller supplies the signing instant.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

from docsign.app.core.config import get_settings
from docsign.app.schemas.signature import (
    CertificateInfo,
    SignatureInfo,
    SignedDocument,
    VerificationBundle,
)

VERIFICATION_INSTRUCTIONS = {
    "howToVerify": (
        "Submit this whole file to the signature verification service"
    ),
    "warning": (
        "This file holds the information needed to verify the "
        "authenticity of the signed document"
    ),
}


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(moment: datetime) -> str:
    """
    Render an instant as ISO-8601 UTC with millisecond precision.

    Example: ``2026-01-15T10:30:00.000Z``. Naive datetimes are taken
    to be UTC already.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return (
        moment.strftime("%Y-%m-%dT%H:%M:%S")
        + f".{moment.microsecond // 1000:03d}Z"
    )


def build_signature_record(
    *,
    signer: str,
    document_hash: str,
    signature: str,
    public_key: str,
    timestamp: str,
) -> SignatureInfo:
    return SignatureInfo(
        signer=signer,
        timestamp=timestamp,
        hash=document_hash,
        signature=signature,
        public_key=public_key,
    )


def build_certificate_info(
    signer: str,
    *,
    now: datetime,
    issuer: Optional[str] = None,
    validity_days: Optional[int] = None,
) -> CertificateInfo:
    """
    Describe the signer as a self-asserted certificate.

    The window starts at ``now`` and lasts ``validity_days`` (one year
    by default). Nothing in this record is signed.
    """
    settings = get_settings()
    if issuer is None:
        issuer = settings.certificate_issuer
    if validity_days is None:
        validity_days = settings.certificate_validity_days

    return CertificateInfo(
        issuer=issuer,
        subject=f"CN={signer}",
        valid_from=format_timestamp(now),
        valid_to=format_timestamp(now + timedelta(days=validity_days)),
    )


def build_verification_bundle(
    *,
    document_name: str,
    signed: SignedDocument,
    now: Optional[datetime] = None,
) -> VerificationBundle:
    """Package the records of a signed document into a portable file."""
    return VerificationBundle(
        document_name=document_name,
        signed_at=format_timestamp(now or utc_now()),
        signature_info=signed.signature_info,
        certificate_info=signed.certificate_info,
        instructions=dict(VERIFICATION_INSTRUCTIONS),
    )
