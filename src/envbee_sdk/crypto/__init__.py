"""
AES-256-GCM handling for secure variable values.
"""

from envbee_sdk.crypto.decryptor import (
    ENCRYPTED_PREFIX,
    Decryptor,
    EncryptedValue,
    PlainValue,
    derive_key,
    encrypt_value,
    parse_value,
)

__all__ = [
    "Decryptor",
    "PlainValue",
    "EncryptedValue",
    "parse_value",
    "derive_key",
    "encrypt_value",
    "ENCRYPTED_PREFIX",
]
