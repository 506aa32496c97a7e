"""
INFT - Cryptographic Operations Module

This module provides cryptographic utilities for INFT metadata including:
- Encryption key generation
- Payload codecs (placeholder base64 and AES-256-GCM)
- Keccak-256 metadata hashing

Dependencies:
- pycryptodome: AES-GCM, Keccak and secure random bytes
"""

from .exceptions import (
    CryptoError,
    InvalidKeyError,
    CodecError,
    DecodeError,
)

from .codec import (
    EncryptionMethod,
    PayloadCodec,
    Base64Codec,
    AESGCMCodec,
    generate_encryption_key,
    get_codec,
    key_to_hex,
    key_from_hex,
)

from .hashing import keccak256, metadata_hash

__all__ = [
    # Exceptions
    "CryptoError",
    "InvalidKeyError",
    "CodecError",
    "DecodeError",

    # Codecs
    "EncryptionMethod",
    "PayloadCodec",
    "Base64Codec",
    "AESGCMCodec",
    "generate_encryption_key",
    "get_codec",
    "key_to_hex",
    "key_from_hex",

    # Hashing
    "keccak256",
    "metadata_hash",
]
