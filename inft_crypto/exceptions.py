"""
Cryptographic Exceptions for INFT

This module defines custom exceptions for payload encoding, hashing and key handling.
"""


class CryptoError(Exception):
    """Base exception for all cryptographic errors."""
    pass


class InvalidKeyError(CryptoError):
    """Raised when an encryption key is invalid or malformed."""
    pass


class CodecError(CryptoError):
    """Raised when payload encoding fails."""
    pass


class DecodeError(CodecError):
    """Raised when a payload cannot be decoded back to its plaintext."""
    pass
