"""
INFT Hashing Utilities

Keccak-256 helpers producing the metadata hash committed on-chain by the
token contract. This is Ethereum's original Keccak, not NIST SHA3-256.
"""

from Crypto.Hash import keccak


def keccak256(data: bytes) -> str:
    """Return the 0x-prefixed Keccak-256 hex digest of data."""
    digest = keccak.new(digest_bits=256)
    digest.update(data)
    return "0x" + digest.hexdigest()


def metadata_hash(text: str) -> str:
    """Hash the UTF-8 encoding of serialized metadata."""
    return keccak256(text.encode('utf-8'))
