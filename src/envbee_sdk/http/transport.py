"""
Authenticated HTTP transport for the envbee API.

Issues signed GET requests and classifies responses:
    - 200: JSON body is returned
    - 401/403: AuthenticationError
    - any other status: ProtocolError carrying status and body
    - no response at all: NetworkError chained to the requests exception

No retries are attempted and no timeout is imposed beyond what the
underlying requests session does by default.
"""

from __future__ import annotations

import logging
import time
from typing import Any
from urllib.parse import parse_qsl, urlencode, urlsplit

import requests

from envbee_sdk import __version__
from envbee_sdk.errors import AuthenticationError, NetworkError, ProtocolError
from envbee_sdk.http.signer import RequestSigner

logger = logging.getLogger(__name__)

API_KEY_HEADER = "x-api-key"
CLIENT_HEADER = "x-envbee-client"
CLIENT_NAME = "envbee-python-sdk"


def build_path(path: str, query_params: dict[str, Any] | None = None) -> str:
    """
    Merge query parameters into a request path.

    Parameters already present in the path are kept unless overridden by
    query_params. Parameters whose value is None are omitted.

    Args:
        path: Request path, optionally with a query string.
        query_params: Extra parameters; these win on key collision.

    Returns:
        The path with the merged, url-encoded query string.
    """
    parts = urlsplit(path)
    merged: dict[str, Any] = dict(parse_qsl(parts.query, keep_blank_values=True))
    for key, value in (query_params or {}).items():
        if value is not None:
            merged[key] = value

    if not merged:
        return parts.path
    return f"{parts.path}?{urlencode(merged)}"


class AuthenticatedHttpClient:
    """
    HTTP client that signs every request with the API secret.

    Attributes:
        api_key: API key sent in the identity header.
        signer: RequestSigner used for the Authorization header.
        session: requests.Session used for all requests.

    Example:
        client = AuthenticatedHttpClient("key", "secret")
        data = client.fetch_json("https://api.envbee.dev", "/v1/variables", {"limit": 1})
    """

    def __init__(
        self,
        api_key: str,
        api_secret: str,
        signer: RequestSigner | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.api_key = api_key
        self._api_secret = api_secret
        self.signer = signer or RequestSigner()
        self.session = session or requests.Session()

    def close(self) -> None:
        """Close the underlying requests session."""
        self.session.close()

    def _build_headers(self, signed_path: str) -> dict[str, str]:
        """Build request headers, including the HMAC Authorization header."""
        return {
            "Content-Type": "application/json",
            API_KEY_HEADER: self.api_key,
            CLIENT_HEADER: f"{CLIENT_NAME}/{__version__}",
            "Authorization": self.signer.sign(signed_path, self._api_secret),
        }

    def fetch_json(
        self,
        base_url: str,
        path: str,
        query_params: dict[str, Any] | None = None,
    ) -> Any:
        """
        Issue a signed GET request and return the decoded JSON body.

        Args:
            base_url: Service root, e.g. "https://api.envbee.dev".
            path: Endpoint path, optionally with a query string.
            query_params: Query parameters merged into the path.

        Returns:
            The parsed JSON response body.

        Raises:
            NetworkError: If no response was received.
            AuthenticationError: If the service returned 401 or 403.
            ProtocolError: If the service returned any other non-200 status,
                or a 200 response whose body is not JSON.
        """
        signed_path = build_path(path, query_params)
        url = f"{base_url.rstrip('/')}{signed_path}"

        logger.debug(f"Sending request: GET {signed_path}")
        start_time = time.time()

        try:
            response = self.session.get(url, headers=self._build_headers(signed_path))
        except requests.exceptions.RequestException as e:
            logger.error(f"Request to {url} failed: {e}")
            raise NetworkError(f"Failed to connect to envbee: {e}", url=url) from e

        duration_ms = (time.time() - start_time) * 1000
        logger.info(
            f"API call: GET {signed_path} -> {response.status_code} ({duration_ms:.0f}ms)"
        )

        if response.status_code == 200:
            try:
                return response.json()
            except ValueError as e:
                raise ProtocolError(
                    "Invalid JSON in response body",
                    status_code=response.status_code,
                    body=response.text,
                ) from e

        raise self._classify_error(response)

    def _classify_error(self, response: requests.Response) -> ProtocolError:
        """Turn a non-200 response into the matching ProtocolError."""
        try:
            body: Any = response.json()
        except ValueError:
            body = response.text

        message = None
        if isinstance(body, dict):
            message = body.get("message")
        if not message:
            message = f"Request failed with status {response.status_code}"

        logger.error(
            f"Request failed. Status code: {response.status_code}. Error: {message}"
        )

        error_class = (
            AuthenticationError if response.status_code in (401, 403) else ProtocolError
        )
        return error_class(str(message), status_code=response.status_code, body=body)
