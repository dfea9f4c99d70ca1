"""
envbee SDK - Python client for the envbee configuration service.

Fetches named configuration values over signed HTTP requests, keeps the
last value of each variable in a local cache to survive outages, and
decrypts secure values transparently.

Key Features:
    - HMAC-SHA256 signed requests
    - Per-credential persistent fallback cache (SQLite)
    - Transparent AES-256-GCM decryption of secure values
    - Configuration from arguments, ENVBEE_* variables or YAML

Usage:
    from envbee_sdk import envbee_init

    envbee = envbee_init(key="...", secret="...", enc_key="...")
    db_host = envbee.get("DB_HOST")
"""

__version__ = "0.1.0"

from envbee_sdk.client import ConfigClient, envbee_init
from envbee_sdk.config.credentials import Credentials
from envbee_sdk.errors import (
    AuthenticationError,
    ConfigurationError,
    DecryptionError,
    EnvbeeError,
    NetworkError,
    ProtocolError,
)

__all__ = [
    "__version__",
    "ConfigClient",
    "Credentials",
    "envbee_init",
    # Errors
    "EnvbeeError",
    "ConfigurationError",
    "NetworkError",
    "ProtocolError",
    "AuthenticationError",
    "DecryptionError",
]
