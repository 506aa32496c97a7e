"""
INFT Payload Codec

This module turns serialized agent metadata into the opaque payload that is
written to storage, and back again.

Two codecs are provided:
- Base64Codec: reversible encoding used by the demo frontend. It does NOT
  provide confidentiality; the key is accepted and ignored.
- AESGCMCodec: AES-256-GCM authenticated encryption keyed by the 32-byte
  per-record encryption key.
"""

import base64
import binascii
import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Union

from Crypto.Cipher import AES
from Crypto.Random import get_random_bytes

from .exceptions import CodecError, DecodeError, InvalidKeyError


ENCRYPTION_KEY_SIZE = 32
GCM_NONCE_SIZE = 12
GCM_TAG_SIZE = 16

logger = logging.getLogger(__name__)


class EncryptionMethod(str, Enum):
    """Payload encoding methods."""
    BASE64 = "base64"
    AES_256_GCM = "aes_256_gcm"


def generate_encryption_key() -> bytes:
    """Generate a random 32-byte encryption key."""
    return get_random_bytes(ENCRYPTION_KEY_SIZE)


class PayloadCodec(ABC):
    """Abstract base class for payload codecs."""

    @abstractmethod
    def encrypt(self, data: bytes, key: bytes) -> bytes:
        """Encode plaintext bytes into a storable payload."""
        pass

    @abstractmethod
    def decrypt(self, data: bytes, key: bytes) -> bytes:
        """Decode a stored payload back into plaintext bytes."""
        pass

    @abstractmethod
    def get_method(self) -> EncryptionMethod:
        """Get encoding method identifier."""
        pass


class Base64Codec(PayloadCodec):
    """Placeholder codec: base64 text of the plaintext, key unused."""

    def encrypt(self, data: bytes, key: bytes) -> bytes:
        return base64.b64encode(data)

    def decrypt(self, data: bytes, key: bytes) -> bytes:
        try:
            return base64.b64decode(data, validate=True)
        except (binascii.Error, ValueError) as e:
            raise DecodeError(f"Payload is not valid base64: {e}")

    def get_method(self) -> EncryptionMethod:
        return EncryptionMethod.BASE64


class AESGCMCodec(PayloadCodec):
    """AES-256-GCM codec producing nonce || tag || ciphertext envelopes."""

    def encrypt(self, data: bytes, key: bytes) -> bytes:
        self._check_key(key)

        nonce = get_random_bytes(GCM_NONCE_SIZE)
        cipher = AES.new(key, AES.MODE_GCM, nonce=nonce)
        ciphertext, tag = cipher.encrypt_and_digest(data)

        return nonce + tag + ciphertext

    def decrypt(self, data: bytes, key: bytes) -> bytes:
        self._check_key(key)

        if len(data) < GCM_NONCE_SIZE + GCM_TAG_SIZE:
            raise DecodeError(f"Encrypted payload too short: {len(data)} bytes")

        nonce = data[:GCM_NONCE_SIZE]
        tag = data[GCM_NONCE_SIZE:GCM_NONCE_SIZE + GCM_TAG_SIZE]
        ciphertext = data[GCM_NONCE_SIZE + GCM_TAG_SIZE:]

        cipher = AES.new(key, AES.MODE_GCM, nonce=nonce)
        try:
            return cipher.decrypt_and_verify(ciphertext, tag)
        except ValueError:
            raise DecodeError("Payload authentication failed (wrong key or corrupted data)")

    def get_method(self) -> EncryptionMethod:
        return EncryptionMethod.AES_256_GCM

    def _check_key(self, key: bytes) -> None:
        if len(key) != ENCRYPTION_KEY_SIZE:
            raise InvalidKeyError(
                f"AES-256 key must be {ENCRYPTION_KEY_SIZE} bytes, got {len(key)}"
            )


_CODECS = {
    EncryptionMethod.BASE64: Base64Codec,
    EncryptionMethod.AES_256_GCM: AESGCMCodec,
}


def get_codec(method: Union[str, EncryptionMethod] = EncryptionMethod.BASE64) -> PayloadCodec:
    """
    Get a codec instance for an encoding method.

    Args:
        method: Method name or EncryptionMethod value

    Returns:
        PayloadCodec instance

    Raises:
        CodecError: If the method is unknown
    """
    try:
        method = EncryptionMethod(method)
    except ValueError:
        raise CodecError(f"Unknown encryption method: {method}")

    if method == EncryptionMethod.BASE64:
        logger.debug("Using base64 placeholder codec; payloads are not confidential")

    return _CODECS[method]()


def key_to_hex(key: bytes) -> str:
    """Encode an encryption key as lowercase hex."""
    return key.hex()


def key_from_hex(key_hex: str) -> bytes:
    """
    Decode a hex encryption key.

    Raises:
        InvalidKeyError: If the key is not a valid hex string
    """
    if not isinstance(key_hex, str):
        raise InvalidKeyError(f"Encryption key must be a hex string, got {type(key_hex).__name__}")
    if key_hex.startswith(('0x', '0X')):
        key_hex = key_hex[2:]
    try:
        return bytes.fromhex(key_hex)
    except (ValueError, TypeError):
        raise InvalidKeyError(f"Encryption key is not valid hex: {key_hex!r}")
