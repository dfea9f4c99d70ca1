"""
HMAC request signing for the envbee API.

Every request carries an Authorization header of the form:

    HMAC <timestamp>:<hex hmac-sha256>

The HMAC is keyed with the API secret and computed over, in order:
    1. The current time as epoch milliseconds (decimal string)
    2. The literal HTTP verb "GET"
    3. The request path, including the query string
    4. The hex MD5 digest of the empty JSON object "{}"

This byte sequence is what the service verifies. Changing any part of it
breaks compatibility.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
import time

logger = logging.getLogger(__name__)

SIGNED_METHOD = "GET"
EMPTY_BODY = "{}"
EMPTY_BODY_HASH = hashlib.md5(EMPTY_BODY.encode()).hexdigest()


def current_timestamp() -> str:
    """Return the current time as a decimal string of epoch milliseconds."""
    return str(int(time.time() * 1000))


class RequestSigner:
    """
    Computes the per-request Authorization header.

    Example:
        signer = RequestSigner()
        header = signer.sign("/v1/variables?offset=0", "my-api-secret")
        # "HMAC 1718030000000:5f0c..."
    """

    def sign(self, path: str, secret: str, timestamp: str | None = None) -> str:
        """
        Build the Authorization header value for a request path.

        Args:
            path: Request path including query string (e.g. "/v1/variables?limit=1").
            secret: The API secret used as HMAC key.
            timestamp: Epoch milliseconds as a string. Defaults to now.

        Returns:
            Header value "HMAC <timestamp>:<hex digest>".
        """
        if timestamp is None:
            timestamp = current_timestamp()

        logger.debug(f"Signing request path: {path}")

        mac = hmac.new(secret.encode(), digestmod=hashlib.sha256)
        mac.update(timestamp.encode())
        mac.update(SIGNED_METHOD.encode())
        mac.update(path.encode())
        mac.update(EMPTY_BODY_HASH.encode())

        return f"HMAC {timestamp}:{mac.hexdigest()}"
