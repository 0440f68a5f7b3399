"""
RSA key pair generation.

Key pairs are generated on demand and handed straight back to the
caller. Nothing is cached or persisted here; the private key leaves
this module exactly once, inside the returned object.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from docsign.app.core.config import get_settings
from docsign.app.schemas.signature import KeyPair, UserKeyPair
from docsign.app.services.records import format_timestamp, utc_now

logger = logging.getLogger(__name__)

RSA_PUBLIC_EXPONENT = 65537

KEY_BUNDLE_WARNING = "KEEP THE PRIVATE KEY SAFE AND NEVER SHARE IT"
KEY_BUNDLE_INSTRUCTIONS = {
    "publicKey": "Share this key so others can verify your signatures",
    "privateKey": "Never share this key. Use it only to sign documents",
}


def generate_key_pair(key_size: Optional[int] = None) -> KeyPair:
    """
    Generate a fresh RSA key pair in PEM text form.

    The private key is PKCS#1 (``BEGIN RSA PRIVATE KEY``), the public
    key SubjectPublicKeyInfo (``BEGIN PUBLIC KEY``). Backend failures
    (entropy, algorithm) propagate unchanged.
    """
    if key_size is None:
        key_size = get_settings().rsa_key_size

    private_key = rsa.generate_private_key(
        public_exponent=RSA_PUBLIC_EXPONENT,
        key_size=key_size,
    )

    private_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.TraditionalOpenSSL,
        encryption_algorithm=serialization.NoEncryption(),
    )
    public_pem = private_key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )

    logger.debug("key_pair_generated", extra={"key_size": key_size})

    return KeyPair(
        public_key=public_pem.decode("ascii"),
        private_key=private_pem.decode("ascii"),
    )


def generate_user_key_pair(
    user_name: str,
    *,
    now: Optional[datetime] = None,
    key_size: Optional[int] = None,
) -> UserKeyPair:
    """Generate a key pair labelled with the user it was issued for."""
    key_pair = generate_key_pair(key_size)

    return UserKeyPair(
        user_name=user_name,
        public_key=key_pair.public_key,
        private_key=key_pair.private_key,
        generated=format_timestamp(now or utc_now()),
    )


def export_key_bundle(user_key_pair: UserKeyPair) -> dict:
    """
    Build the downloadable key file offered to a user.

    This is the only place the private key is deliberately serialized.
    """
    bundle = user_key_pair.to_wire()
    bundle["warning"] = KEY_BUNDLE_WARNING
    bundle["instructions"] = dict(KEY_BUNDLE_INSTRUCTIONS)
    return bundle
