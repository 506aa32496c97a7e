"""
Tests for INFT Payload Codec Module

Tests encryption key generation, the base64 placeholder codec, AES-256-GCM
envelopes, codec selection, and hex key handling.
"""

import base64

import pytest

from inft_crypto.codec import (
    AESGCMCodec,
    Base64Codec,
    EncryptionMethod,
    generate_encryption_key,
    get_codec,
    key_from_hex,
    key_to_hex,
)
from inft_crypto.exceptions import CodecError, CryptoError, DecodeError, InvalidKeyError


PLAINTEXT = b'{"model":"GPT-4","description":"Advanced AI language model"}'


class TestKeyGeneration:
    """Test encryption key generation and hex handling."""

    def test_key_is_32_bytes(self):
        key = generate_encryption_key()
        assert isinstance(key, bytes)
        assert len(key) == 32

    def test_keys_are_random(self):
        assert generate_encryption_key() != generate_encryption_key()

    def test_hex_round_trip(self):
        key = generate_encryption_key()
        key_hex = key_to_hex(key)

        assert len(key_hex) == 64
        assert key_from_hex(key_hex) == key

    def test_hex_accepts_0x_prefix(self):
        assert key_from_hex("0x" + "11" * 32) == b"\x11" * 32

    def test_invalid_hex_rejected(self):
        with pytest.raises(InvalidKeyError, match="not valid hex"):
            key_from_hex("not-a-key")

    @pytest.mark.parametrize("key", [None, b"\x11" * 32, 1234])
    def test_non_string_key_rejected(self, key):
        with pytest.raises(InvalidKeyError, match="must be a hex string"):
            key_from_hex(key)


class TestBase64Codec:
    """Test the placeholder base64 codec."""

    def test_output_is_base64_text(self):
        codec = Base64Codec()
        encoded = codec.encrypt(PLAINTEXT, generate_encryption_key())

        assert encoded == base64.b64encode(PLAINTEXT)

    def test_decrypt_restores_plaintext(self):
        codec = Base64Codec()
        key = generate_encryption_key()

        assert codec.decrypt(codec.encrypt(PLAINTEXT, key), key) == PLAINTEXT

    def test_key_is_not_used(self):
        codec = Base64Codec()
        encoded = codec.encrypt(PLAINTEXT, generate_encryption_key())

        # Any key decodes the payload: no confidentiality
        assert codec.decrypt(encoded, generate_encryption_key()) == PLAINTEXT

    def test_malformed_payload(self):
        with pytest.raises(DecodeError, match="not valid base64"):
            Base64Codec().decrypt(b"***not base64***", b"\x00" * 32)

    def test_method(self):
        assert Base64Codec().get_method() == EncryptionMethod.BASE64


class TestAESGCMCodec:
    """Test AES-256-GCM envelopes."""

    def test_round_trip(self):
        codec = AESGCMCodec()
        key = generate_encryption_key()

        envelope = codec.encrypt(PLAINTEXT, key)

        assert PLAINTEXT not in envelope
        assert len(envelope) == 12 + 16 + len(PLAINTEXT)
        assert codec.decrypt(envelope, key) == PLAINTEXT

    def test_fresh_nonce_per_encryption(self):
        codec = AESGCMCodec()
        key = generate_encryption_key()

        assert codec.encrypt(PLAINTEXT, key) != codec.encrypt(PLAINTEXT, key)

    def test_wrong_key_fails_authentication(self):
        codec = AESGCMCodec()
        envelope = codec.encrypt(PLAINTEXT, generate_encryption_key())

        with pytest.raises(DecodeError, match="authentication failed"):
            codec.decrypt(envelope, generate_encryption_key())

    def test_tampered_ciphertext(self):
        codec = AESGCMCodec()
        key = generate_encryption_key()
        envelope = bytearray(codec.encrypt(PLAINTEXT, key))
        envelope[-1] ^= 0x01

        with pytest.raises(DecodeError):
            codec.decrypt(bytes(envelope), key)

    def test_truncated_envelope(self):
        with pytest.raises(DecodeError, match="too short"):
            AESGCMCodec().decrypt(b"\x00" * 10, generate_encryption_key())

    def test_short_key_rejected(self):
        with pytest.raises(InvalidKeyError, match="32 bytes"):
            AESGCMCodec().encrypt(PLAINTEXT, b"\x01" * 16)


class TestCodecSelection:
    """Test codec lookup by method."""

    def test_default_is_base64(self):
        assert isinstance(get_codec(), Base64Codec)

    @pytest.mark.parametrize("method,codec_class", [
        ("base64", Base64Codec),
        ("aes_256_gcm", AESGCMCodec),
        (EncryptionMethod.AES_256_GCM, AESGCMCodec),
    ])
    def test_lookup(self, method, codec_class):
        assert isinstance(get_codec(method), codec_class)

    def test_unknown_method(self):
        with pytest.raises(CodecError, match="Unknown encryption method"):
            get_codec("rot13")

    def test_exception_hierarchy(self):
        assert issubclass(DecodeError, CodecError)
        assert issubclass(CodecError, CryptoError)
        assert issubclass(InvalidKeyError, CryptoError)
