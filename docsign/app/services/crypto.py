"""
RSA signature engine.

Digest-then-sign: messages are UTF-8 encoded and signed with RSASSA
PKCS#1 v1.5 over SHA-256. Signatures travel as standard base64.

Error policy:
- Signing with an unparseable private key raises KeyFormatError.
- Verification never raises for string inputs. A malformed signature,
  an unparseable key, a key mismatch and a tampered message all yield
  ``False``; callers only need the verdict.
"""

from __future__ import annotations

import base64
import binascii
import logging

from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa

logger = logging.getLogger(__name__)


class KeyFormatError(RuntimeError):
    """Raised when key text is not a PEM-encoded RSA key."""


# ------------------------------------------------------------------
# Key loading
# ------------------------------------------------------------------


def _pem_bytes(key_pem: str) -> bytes:
    if not isinstance(key_pem, str) or not key_pem.strip():
        raise KeyFormatError("Key must be a non-empty PEM string")
    return key_pem.strip().encode("ascii", errors="strict")


def load_private_key(private_key_pem: str) -> rsa.RSAPrivateKey:
    """
    Parse an unencrypted PEM RSA private key (PKCS#1 or PKCS#8).
    """
    try:
        key = serialization.load_pem_private_key(
            _pem_bytes(private_key_pem),
            password=None,
        )
    except KeyFormatError:
        raise
    except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
        raise KeyFormatError(
            f"Failed to parse private key: {exc}"
        ) from exc

    if not isinstance(key, rsa.RSAPrivateKey):
        raise KeyFormatError(
            f"Expected an RSA private key, got {type(key).__name__}"
        )
    return key


def load_public_key(public_key_pem: str) -> rsa.RSAPublicKey:
    """
    Parse a PEM RSA public key (SubjectPublicKeyInfo or PKCS#1).
    """
    try:
        key = serialization.load_pem_public_key(_pem_bytes(public_key_pem))
    except KeyFormatError:
        raise
    except (ValueError, UnsupportedAlgorithm) as exc:
        raise KeyFormatError(
            f"Failed to parse public key: {exc}"
        ) from exc

    if not isinstance(key, rsa.RSAPublicKey):
        raise KeyFormatError(
            f"Expected an RSA public key, got {type(key).__name__}"
        )
    return key


# ------------------------------------------------------------------
# Sign / verify
# ------------------------------------------------------------------


def sign_message(message: str, private_key_pem: str) -> str:
    """
    Sign ``message`` and return the base64-encoded signature.

    Raises:
        KeyFormatError:
            If ``private_key_pem`` is not a usable RSA private key.
    """
    private_key = load_private_key(private_key_pem)

    signature = private_key.sign(
        message.encode("utf-8"),
        padding.PKCS1v15(),
        hashes.SHA256(),
    )
    return base64.b64encode(signature).decode("ascii")


def verify_message(
    message: str,
    signature_b64: str,
    public_key_pem: str,
) -> bool:
    """
    Check a base64 signature over ``message`` with ``public_key_pem``.

    Returns ``False`` instead of raising for every invalid input.
    """
    try:
        public_key = load_public_key(public_key_pem)
        signature = base64.b64decode(signature_b64, validate=True)
        public_key.verify(
            signature,
            message.encode("utf-8"),
            padding.PKCS1v15(),
            hashes.SHA256(),
        )
    except InvalidSignature:
        return False
    except KeyFormatError as exc:
        logger.debug(
            "signature_verification_bad_key", extra={"reason": str(exc)}
        )
        return False
    except (binascii.Error, ValueError, TypeError) as exc:
        logger.debug(
            "signature_verification_bad_input", extra={"reason": str(exc)}
        )
        return False

    return True
