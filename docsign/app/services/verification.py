"""
Signature record verification.

Verification is a function of the SignatureInfo record alone. The
signed PDF is never consulted: its signature page is presentational,
so stripping or corrupting that page does not change the verdict.

Malformed records are reported as ``is_valid=False`` like any other
failed verification. Callers that must tell "malformed record" apart
from "bad signature" validate the record shape themselves.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Mapping, Optional, Union

from pydantic import ValidationError

from docsign.app.schemas.signature import (
    SignatureInfo,
    VerificationDetails,
    VerificationResult,
)
from docsign.app.services.crypto import verify_message
from docsign.app.services.message import compose_signature_message
from docsign.app.services.records import format_timestamp, utc_now

logger = logging.getLogger(__name__)

VALID_MESSAGE = "The digital signature is valid and authentic"
INVALID_MESSAGE = "The digital signature is not valid or has been altered"
MALFORMED_MESSAGE = "The signature record is incomplete or malformed"


def extract_signature_info(payload: Mapping[str, Any]) -> SignatureInfo:
    """
    Pull a SignatureInfo out of a user-supplied JSON object.

    Accepts either a bare record or a verification bundle that nests
    the record under ``signatureInfo``.

    Raises:
        ValueError:
            If neither shape is present (pydantic's ValidationError is a
            ValueError subclass).
    """
    if not isinstance(payload, Mapping):
        raise ValueError("Signature data must be a JSON object")

    nested = payload.get("signatureInfo", payload.get("signature_info"))
    if isinstance(nested, Mapping):
        return SignatureInfo.model_validate(nested)

    return SignatureInfo.model_validate(payload)


def _details(
    raw: Union[SignatureInfo, Mapping[str, Any], Any],
    verified_at: str,
) -> VerificationDetails:
    if isinstance(raw, SignatureInfo):
        return VerificationDetails(
            signer=raw.signer,
            timestamp=raw.timestamp,
            hash=raw.hash,
            verified_at=verified_at,
        )

    def text(key: str) -> Optional[str]:
        value = raw.get(key) if isinstance(raw, Mapping) else None
        return value if isinstance(value, str) else None

    return VerificationDetails(
        signer=text("signer"),
        timestamp=text("timestamp"),
        hash=text("hash"),
        verified_at=verified_at,
    )


def verify_signature(
    info: Union[SignatureInfo, Mapping[str, Any]],
    *,
    now: Optional[datetime] = None,
) -> VerificationResult:
    """
    Verify a detached signature record.

    Rebuilds ``hash|signer|timestamp`` from the record with the same
    composer the signer used and checks it against the record's public
    key. Never raises.
    """
    verified_at = format_timestamp(now or utc_now())

    if isinstance(info, SignatureInfo):
        record = info
    else:
        try:
            record = extract_signature_info(info)
        except ValueError as exc:
            logger.info(
                "signature_record_malformed", extra={"reason": str(exc)}
            )
            return VerificationResult(
                is_valid=False,
                message=MALFORMED_MESSAGE,
                verification_details=_details(info, verified_at),
            )

    message = compose_signature_message(
        record.hash, record.signer, record.timestamp
    )
    is_valid = verify_message(message, record.signature, record.public_key)

    if is_valid:
        logger.info("signature_verified", extra={"signer": record.signer})
    else:
        logger.info(
            "signature_verification_failed", extra={"signer": record.signer}
        )

    return VerificationResult(
        is_valid=is_valid,
        message=VALID_MESSAGE if is_valid else INVALID_MESSAGE,
        verification_details=_details(record, verified_at),
    )
