"""
Composition of the signed message.

The signer and the verifier must build byte-identical messages. Both
go through ``compose_signature_message``; nothing else may join these
fields.
"""

SIGNATURE_MESSAGE_SEPARATOR = "|"


def compose_signature_message(
    document_hash: str,
    signer: str,
    timestamp: str,
) -> str:
    """Return ``hash|signer|timestamp`` in that fixed order."""
    return SIGNATURE_MESSAGE_SEPARATOR.join(
        (document_hash, signer, timestamp)
    )
