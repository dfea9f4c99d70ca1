"""
Transparent decryption of secure variable values.

Secure values are delivered as:

    envbee:enc:v1:<base64(nonce || ciphertext || tag)>

where nonce is 12 bytes and tag is the 16-byte AES-GCM authentication tag.
Values are classified by their shape, not by the variable type reported
by the service, so an encrypted value is never returned as-is.

Key Derivation:
    - str secret: SHA-256 digest of its UTF-8 bytes (passphrase)
    - bytes secret of exactly 32 bytes: used as the AES-256 key
    - any other bytes length: ConfigurationError at construction
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import logging
import os
from dataclasses import dataclass
from typing import Any

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from envbee_sdk.errors import ConfigurationError, DecryptionError

logger = logging.getLogger(__name__)

ENCRYPTED_PREFIX = "envbee:enc:v1:"
KEY_LENGTH = 32
NONCE_LENGTH = 12
TAG_LENGTH = 16


@dataclass(frozen=True)
class PlainValue:
    """A value that is returned to the caller unchanged."""

    value: Any


@dataclass(frozen=True)
class EncryptedValue:
    """A value carrying the encryption marker; payload is the base64 text."""

    payload: str


def parse_value(raw: Any) -> PlainValue | EncryptedValue:
    """
    Classify a raw value as plain or encrypted by its shape.

    Args:
        raw: Value as returned by the service (any JSON type).

    Returns:
        EncryptedValue if raw is a string starting with the marker,
        PlainValue otherwise.
    """
    if isinstance(raw, str) and raw.startswith(ENCRYPTED_PREFIX):
        return EncryptedValue(payload=raw[len(ENCRYPTED_PREFIX):])
    return PlainValue(value=raw)


def derive_key(secret: str | bytes) -> bytes:
    """
    Derive the 32-byte AES key from a configured encryption secret.

    Raises:
        ConfigurationError: If secret is bytes of the wrong length, or
            neither str nor bytes.
    """
    if isinstance(secret, str):
        return hashlib.sha256(secret.encode("utf-8")).digest()
    if isinstance(secret, (bytes, bytearray)):
        if len(secret) != KEY_LENGTH:
            raise ConfigurationError(
                f"Encryption key must be exactly {KEY_LENGTH} bytes, got {len(secret)}"
            )
        return bytes(secret)
    raise ConfigurationError(
        f"Encryption key must be str or bytes, got {type(secret).__name__}"
    )


def encrypt_value(plaintext: str, secret: str | bytes) -> str:
    """
    Encrypt a value into the envbee wire format.

    Args:
        plaintext: Text to encrypt.
        secret: Encryption secret (passphrase or 32 raw bytes).

    Returns:
        "envbee:enc:v1:" followed by base64(nonce || ciphertext || tag).
    """
    nonce = os.urandom(NONCE_LENGTH)
    # AESGCM appends the tag to the ciphertext
    sealed = AESGCM(derive_key(secret)).encrypt(nonce, plaintext.encode("utf-8"), None)
    return ENCRYPTED_PREFIX + base64.b64encode(nonce + sealed).decode("ascii")


class Decryptor:
    """
    Decrypts marked values, passes everything else through.

    Example:
        decryptor = Decryptor("my passphrase")
        decryptor.maybe_decrypt("db.prod")                  # "db.prod"
        decryptor.maybe_decrypt("envbee:enc:v1:q83v...")    # plaintext

    A Decryptor without a key still handles plain values; it only fails
    when asked to decrypt a marked value.
    """

    def __init__(self, secret: str | bytes | None = None) -> None:
        """
        Args:
            secret: Encryption secret, or None if none was configured.

        Raises:
            ConfigurationError: If the secret cannot yield a 32-byte key.
        """
        self._key = derive_key(secret) if secret is not None else None

    @property
    def has_key(self) -> bool:
        return self._key is not None

    def maybe_decrypt(self, raw: Any) -> Any:
        """
        Return the plaintext for raw, decrypting if it is marked as encrypted.

        Raises:
            DecryptionError: If raw is encrypted and no key is configured,
                the payload is malformed, or authentication fails.
        """
        parsed = parse_value(raw)
        if isinstance(parsed, PlainValue):
            return parsed.value
        return self.decrypt(parsed)

    def decrypt(self, encrypted: EncryptedValue) -> str:
        """Decrypt an EncryptedValue with the configured key."""
        if self._key is None:
            raise DecryptionError("Cannot decrypt value: missing encryption key")

        try:
            blob = base64.b64decode(encrypted.payload, validate=True)
        except (binascii.Error, ValueError) as e:
            raise DecryptionError("Failed to decrypt value: invalid base64 payload", e)

        if len(blob) < NONCE_LENGTH + TAG_LENGTH:
            raise DecryptionError("Failed to decrypt value: payload too short")

        nonce = blob[:NONCE_LENGTH]
        ciphertext_and_tag = blob[NONCE_LENGTH:]

        try:
            plaintext = AESGCM(self._key).decrypt(nonce, ciphertext_and_tag, None)
        except InvalidTag as e:
            logger.error("Decryption failed: authentication tag mismatch")
            raise DecryptionError("Failed to decrypt value: authentication failed", e)

        try:
            return plaintext.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecryptionError("Failed to decrypt value: plaintext is not UTF-8", e)
