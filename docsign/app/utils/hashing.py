"""
Cryptographic primitives for document integrity.

Current scope:
- Deterministic SHA-256 hashing of raw document bytes (pre-signing)

Explicit non-scope:
- PDF parsing or manipulation
- Digital signature application (handled in services.crypto)

IMPORTANT DESIGN RULE:
- This module hashes bytes, and bytes only.
"""

import hashlib
from typing import Union


def compute_document_hash(document_bytes: Union[bytes, bytearray]) -> str:
    """
    Compute the integrity hash of a document buffer.

    The hash anchors the signature: it is the first component of the
    signed message and the value rendered on the signature page.

    Args:
        document_bytes:
            The exact document bytes as received, before any signature
            page is appended.

    Returns:
        64 lowercase hex characters (SHA-256), without algorithm prefix.
    """
    if not isinstance(document_bytes, (bytes, bytearray)):
        raise TypeError(
            "compute_document_hash expects bytes, "
            f"got {type(document_bytes).__name__}"
        )

    return hashlib.sha256(document_bytes).hexdigest()


digest = compute_document_hash
