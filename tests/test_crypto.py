"""
Tests for value classification, key derivation and decryption.

Uses Python's unittest module and cryptography's AESGCM directly to build
independent ciphertexts.
"""

from __future__ import annotations

import base64
import hashlib
import os
import unittest

from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from envbee_sdk.crypto.decryptor import (
    ENCRYPTED_PREFIX,
    Decryptor,
    EncryptedValue,
    PlainValue,
    derive_key,
    encrypt_value,
    parse_value,
)
from envbee_sdk.errors import ConfigurationError, DecryptionError


def seal(plaintext: str, key: bytes) -> str:
    """Encrypt with AESGCM directly, in the wire format."""
    nonce = os.urandom(12)
    sealed = AESGCM(key).encrypt(nonce, plaintext.encode(), None)
    return ENCRYPTED_PREFIX + base64.b64encode(nonce + sealed).decode()


class TestParseValue(unittest.TestCase):
    """Tests for the plain/encrypted classification."""

    def test_plain_string(self) -> None:
        self.assertEqual(parse_value("db.prod"), PlainValue("db.prod"))

    def test_non_string_values_are_plain(self) -> None:
        for raw in (None, 42, 3.5, True, {"a": 1}, ["x"]):
            self.assertEqual(parse_value(raw), PlainValue(raw))

    def test_marked_string(self) -> None:
        self.assertEqual(
            parse_value(ENCRYPTED_PREFIX + "QUJD"),
            EncryptedValue(payload="QUJD"),
        )

    def test_marker_must_be_prefix(self) -> None:
        raw = "value envbee:enc:v1:QUJD"
        self.assertEqual(parse_value(raw), PlainValue(raw))


class TestDeriveKey(unittest.TestCase):
    """Tests for key derivation."""

    def test_passphrase_is_hashed(self) -> None:
        self.assertEqual(
            derive_key("my passphrase"),
            hashlib.sha256(b"my passphrase").digest(),
        )

    def test_raw_key_used_as_is(self) -> None:
        key = os.urandom(32)
        self.assertEqual(derive_key(key), key)

    def test_wrong_length_raw_key_rejected(self) -> None:
        for length in (0, 16, 31, 33, 64):
            with self.assertRaises(ConfigurationError):
                derive_key(os.urandom(length))

    def test_wrong_type_rejected(self) -> None:
        with self.assertRaises(ConfigurationError):
            derive_key(12345)  # type: ignore[arg-type]


class TestDecryptor(unittest.TestCase):
    """Tests for Decryptor."""

    def test_plain_value_without_key(self) -> None:
        """Test plain values pass through when no key is configured."""
        self.assertEqual(Decryptor().maybe_decrypt("db.prod"), "db.prod")

    def test_plain_value_with_key(self) -> None:
        """Test plain values pass through when a key is configured."""
        self.assertEqual(Decryptor("k").maybe_decrypt("db.prod"), "db.prod")
        self.assertIsNone(Decryptor("k").maybe_decrypt(None))

    def test_decrypt_with_passphrase(self) -> None:
        """Test decrypting a value sealed with the SHA-256 of the passphrase."""
        raw = seal("s3cr3t-password", hashlib.sha256(b"passphrase").digest())
        self.assertEqual(Decryptor("passphrase").maybe_decrypt(raw), "s3cr3t-password")

    def test_decrypt_with_raw_key(self) -> None:
        key = os.urandom(32)
        raw = seal("value", key)
        self.assertEqual(Decryptor(key).maybe_decrypt(raw), "value")

    def test_round_trip(self) -> None:
        """Test encrypt_value output decrypts to the original."""
        for secret in ("short", "a much longer passphrase " * 10, os.urandom(32)):
            for plaintext in ("", "x", "multi\nline ✓ value", "y" * 5000):
                decryptor = Decryptor(secret)
                self.assertEqual(
                    decryptor.maybe_decrypt(encrypt_value(plaintext, secret)),
                    plaintext,
                )

    def test_encrypt_value_uses_fresh_nonce(self) -> None:
        self.assertNotEqual(encrypt_value("v", "k"), encrypt_value("v", "k"))

    def test_missing_key(self) -> None:
        """Test encrypted values fail without a configured key."""
        with self.assertRaises(DecryptionError) as cm:
            Decryptor().maybe_decrypt(encrypt_value("v", "k"))

        self.assertIn("missing encryption key", str(cm.exception))

    def test_wrong_key(self) -> None:
        """Test a wrong key fails authentication."""
        raw = encrypt_value("value", "right key")

        with self.assertRaisesRegex(DecryptionError, "(?i)decrypt") as cm:
            Decryptor("wrong key").maybe_decrypt(raw)

        self.assertIn("authentication failed", str(cm.exception))
        self.assertIsNotNone(cm.exception.cause)

    def test_tampered_ciphertext(self) -> None:
        raw = encrypt_value("value", "k")
        blob = bytearray(base64.b64decode(raw[len(ENCRYPTED_PREFIX):]))
        blob[13] ^= 0x01
        tampered = ENCRYPTED_PREFIX + base64.b64encode(bytes(blob)).decode()

        with self.assertRaises(DecryptionError):
            Decryptor("k").maybe_decrypt(tampered)

    def test_invalid_base64(self) -> None:
        with self.assertRaisesRegex(DecryptionError, "invalid base64"):
            Decryptor("k").maybe_decrypt(ENCRYPTED_PREFIX + "not base64!!")

    def test_payload_too_short(self) -> None:
        short = ENCRYPTED_PREFIX + base64.b64encode(b"x" * 27).decode()
        with self.assertRaisesRegex(DecryptionError, "too short"):
            Decryptor("k").maybe_decrypt(short)

    def test_bad_key_fails_at_construction(self) -> None:
        with self.assertRaises(ConfigurationError):
            Decryptor(b"too short")

    def test_has_key(self) -> None:
        self.assertFalse(Decryptor().has_key)
        self.assertTrue(Decryptor("k").has_key)


if __name__ == "__main__":
    unittest.main()
