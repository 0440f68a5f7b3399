"""
Signature record schemas.

Defines the structures that cross the sign/verify boundary. The wire
form keeps the camelCase field names of the records already issued to
users (``publicKey``, ``validFrom``, ``isValid`` ...); Python code uses
snake_case attributes. Both spellings are accepted on input.

Only ``SignatureInfo`` carries cryptographic weight. ``CertificateInfo``
is descriptive and is neither signed nor chained to a root of trust.
"""

from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _RecordModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_wire(self) -> dict:
        """Serialize using the public camelCase field names."""
        return self.model_dump(mode="json", by_alias=True)


# ---------------------------------------------------------------------------
# Key material
# ---------------------------------------------------------------------------


class KeyPair(_RecordModel):
    """PEM-encoded RSA key pair. Never persisted by this service."""

    public_key: str = Field(..., description="SubjectPublicKeyInfo PEM")
    private_key: str = Field(..., description="PKCS#1 RSA private key PEM")


class UserKeyPair(KeyPair):
    """Key pair issued for a named user, as offered for download."""

    user_name: str
    generated: str = Field(..., description="ISO-8601 generation instant")


# ---------------------------------------------------------------------------
# Signature record (the only state needed for verification)
# ---------------------------------------------------------------------------


class SignatureInfo(_RecordModel):
    """
    Detached verification record.

    ``signature`` is valid for ``public_key`` over exactly
    ``hash|signer|timestamp``. Changing any of those three fields
    invalidates it. There is no expiry.
    """

    signer: str = Field(..., description="Free-text signer identity")
    timestamp: str = Field(..., description="ISO-8601 signing instant")
    hash: str = Field(
        ...,
        description="Hex SHA-256 of the document before the signature page",
    )
    signature: str = Field(..., description="Base64 RSA signature")
    public_key: str = Field(..., description="PEM public key")


class CertificateInfo(_RecordModel):
    """Self-asserted certificate description. Informational only."""

    issuer: str
    subject: str
    valid_from: str
    valid_to: str


class SignedDocument(BaseModel):
    """Result of signing: the new PDF plus its detached records."""

    signed_pdf_bytes: bytes
    signature_info: SignatureInfo
    certificate_info: CertificateInfo

    model_config = ConfigDict(
        frozen=True,
        ser_json_bytes="base64",
        val_json_bytes="base64",
    )


# ---------------------------------------------------------------------------
# Verification
# ---------------------------------------------------------------------------


class VerificationDetails(_RecordModel):
    signer: Optional[str] = None
    timestamp: Optional[str] = None
    hash: Optional[str] = None
    verified_at: str


class VerificationResult(_RecordModel):
    """
    Pass/fail verdict for a signature record.

    A failed verification is a normal outcome and is reported here
    with ``is_valid=False``, never raised.
    """

    is_valid: bool
    message: str
    verification_details: VerificationDetails


class VerificationBundle(_RecordModel):
    """
    Downloadable verification file distributed next to a signed PDF.

    Carries everything needed to verify the signature later without
    access to this service's state.
    """

    document_name: str
    signed_at: str
    signature_info: SignatureInfo
    certificate_info: CertificateInfo
    instructions: Dict[str, str] = Field(default_factory=dict)


__all__ = [
    "KeyPair",
    "UserKeyPair",
    "SignatureInfo",
    "CertificateInfo",
    "SignedDocument",
    "VerificationDetails",
    "VerificationResult",
    "VerificationBundle",
]
