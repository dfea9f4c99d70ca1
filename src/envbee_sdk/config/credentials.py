"""
API credentials for the envbee service.

Credentials are fixed for the lifetime of a client. The API key and secret
are mandatory and checked up front so a misconfigured client fails before
any network access. The encryption secret is optional and only needed
when secure values are read.

Environment Variables:
    ENVBEE_API_KEY     - API key
    ENVBEE_API_SECRET  - API secret
    ENVBEE_ENC_KEY     - Encryption passphrase
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field

from envbee_sdk.errors import MISSING_KEY_AND_SECRET, ConfigurationError
from envbee_sdk.storage.cache_store import namespace_for

logger = logging.getLogger(__name__)

ENV_API_KEY = "ENVBEE_API_KEY"
ENV_API_SECRET = "ENVBEE_API_SECRET"
ENV_ENC_KEY = "ENVBEE_ENC_KEY"


@dataclass(frozen=True)
class Credentials:
    """
    API key, API secret and optional encryption secret.

    Secrets are left out of repr() so credentials can be logged safely.

    An empty encryption secret is treated as no encryption secret.

    Raises:
        ConfigurationError: If api_key or api_secret is missing or empty.
    """

    api_key: str
    api_secret: str = field(repr=False)
    encryption_secret: str | bytes | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if not self.api_key or not self.api_secret:
            logger.error("API key or secret is missing.")
            raise ConfigurationError(MISSING_KEY_AND_SECRET)
        if not self.encryption_secret:
            # An empty secret means no key, never a key derived from "".
            object.__setattr__(self, "encryption_secret", None)

    @property
    def namespace(self) -> str:
        """Cache namespace for these credentials."""
        return namespace_for(self.api_key)

    @classmethod
    def resolve(
        cls,
        api_key: str | None = None,
        api_secret: str | None = None,
        encryption_secret: str | bytes | None = None,
    ) -> Credentials:
        """
        Build credentials from arguments, falling back to the environment.

        Explicit arguments win; each argument left as None is read from its
        ENVBEE_* environment variable.
        """
        if api_key is None:
            api_key = os.environ.get(ENV_API_KEY)
        if api_secret is None:
            api_secret = os.environ.get(ENV_API_SECRET)
        if encryption_secret is None:
            encryption_secret = os.environ.get(ENV_ENC_KEY) or None

        return cls(
            api_key=api_key or "",
            api_secret=api_secret or "",
            encryption_secret=encryption_secret,
        )
