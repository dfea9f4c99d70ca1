"""
envbee configuration client.

ConfigClient ties together signed HTTP access, the fallback cache and
transparent decryption:

    get(name):
        1. Fetch the value from the service.
        2. On success, write the raw payload to the cache (best effort),
           decrypt if needed and return.
        3. On NetworkError or ProtocolError, serve the cached payload
           (decrypted if needed), or re-raise if nothing is cached.

    get_variables(offset, limit):
        Plain pass-through of the list endpoint. No cache, no decryption.

Decryption errors always reach the caller; they are never answered from
the cache. Authentication failures (401/403) propagate unless the client
was built with fallback_on_auth_error=True.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any
from urllib.parse import quote

from envbee_sdk.config.credentials import Credentials
from envbee_sdk.config.settings import DEFAULT_API_URL, Settings
from envbee_sdk.crypto.decryptor import Decryptor
from envbee_sdk.errors import (
    AuthenticationError,
    ConfigurationError,
    NetworkError,
    ProtocolError,
)
from envbee_sdk.http.transport import AuthenticatedHttpClient
from envbee_sdk.storage.cache_store import CacheStore

logger = logging.getLogger(__name__)

VARIABLES_ENDPOINT = "/v1/variables"
VARIABLE_VALUE_ENDPOINT = "/v1/variables-values-by-name/{name}/content"


class ConfigClient:
    """
    Client for reading envbee variables.

    Example:
        client = ConfigClient(Credentials("key", "secret", "passphrase"))
        db_host = client.get("DB_HOST")
        page = client.get_variables(offset=0, limit=50)

    Attributes:
        credentials: Credentials this client signs requests with.
        api_url: Root URL of the envbee API.
        cache_store: Fallback cache, scoped to the credentials' namespace.
        fallback_on_auth_error: Serve cached values on 401/403 responses.
    """

    def __init__(
        self,
        credentials: Credentials,
        api_url: str = DEFAULT_API_URL,
        cache_store: CacheStore | None = None,
        http_client: AuthenticatedHttpClient | None = None,
        fallback_on_auth_error: bool = False,
    ) -> None:
        """
        Build a client. No network access happens here.

        Args:
            credentials: Validated API credentials.
            api_url: Root URL of the envbee API.
            cache_store: Cache to use. Defaults to the credentials' namespace
                in the default cache directory.
            http_client: Transport to use. Defaults to a new
                AuthenticatedHttpClient for the credentials.
            fallback_on_auth_error: Serve cached values on 401/403.

        Raises:
            ConfigurationError: If the encryption secret is malformed, or the
                cache store belongs to a different namespace.
        """
        if cache_store is not None and cache_store.namespace != credentials.namespace:
            raise ConfigurationError(
                "Cache store namespace does not match the credentials' namespace"
            )

        self.credentials = credentials
        self.api_url = api_url.rstrip("/")
        self.fallback_on_auth_error = fallback_on_auth_error
        self.decryptor = Decryptor(credentials.encryption_secret)
        self.cache_store = cache_store or CacheStore.open(credentials.namespace)
        self.http_client = http_client or AuthenticatedHttpClient(
            credentials.api_key, credentials.api_secret
        )

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        credentials: Credentials | None = None,
    ) -> ConfigClient:
        """
        Build a client from loaded Settings.

        Args:
            settings: Settings from load_config().
            credentials: Explicit credentials; defaults to those in settings.
        """
        if credentials is None:
            credentials = Credentials.resolve(
                settings.api_key, settings.api_secret, settings.enc_key
            )

        client = cls(
            credentials,
            api_url=settings.api_url,
            cache_store=CacheStore.open(credentials.namespace, Path(settings.cache_dir)),
            fallback_on_auth_error=settings.fallback_on_auth_error,
        )
        client.set_log_level(settings.log_level)
        return client

    def close(self) -> None:
        """Release the transport's pooled connections."""
        self.http_client.close()

    def __enter__(self) -> ConfigClient:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def get(self, name: str) -> Any:
        """
        Get the value of a variable by name.

        Args:
            name: Variable name.

        Returns:
            The (decrypted) variable value.

        Raises:
            DecryptionError: If the value is encrypted and cannot be decrypted.
            NetworkError: If the service is unreachable and nothing is cached.
            ProtocolError: If the service returned an error and nothing is cached.
            AuthenticationError: If the credentials were rejected (see
                fallback_on_auth_error).
        """
        logger.debug(f"Fetching value for variable: {name}")
        path = VARIABLE_VALUE_ENDPOINT.format(name=quote(name, safe=""))

        try:
            payload = self.http_client.fetch_json(self.api_url, path)
        except (NetworkError, ProtocolError) as e:
            if isinstance(e, AuthenticationError) and not self.fallback_on_auth_error:
                raise
            return self._get_from_cache(name, e)

        self.cache_store.set(name, payload)
        return self.decryptor.maybe_decrypt(_extract_value(payload))

    def _get_from_cache(self, name: str, fetch_error: Exception) -> Any:
        """Serve a cached value after a failed fetch, or re-raise the failure."""
        cached = self.cache_store.get(name)
        if cached is None:
            logger.error(f"No cached value for '{name}' after failed fetch: {fetch_error}")
            raise fetch_error

        logger.warning(f"Serving cached value for '{name}' after failed fetch: {fetch_error}")
        return self.decryptor.maybe_decrypt(_extract_value(cached))

    def get_variables(
        self,
        offset: int | None = None,
        limit: int | None = None,
    ) -> dict[str, Any]:
        """
        List variables, one page at a time.

        Args:
            offset: Number of variables to skip.
            limit: Maximum number of variables to return.

        Returns:
            The service response, {"data": [...], "metadata": {...}},
            unmodified. Values are not decrypted.

        Raises:
            NetworkError: If the service is unreachable.
            ProtocolError: If the service returned an error.
        """
        logger.debug(f"Fetching variables (offset={offset}, limit={limit})")
        return self.http_client.fetch_json(
            self.api_url,
            VARIABLES_ENDPOINT,
            {"offset": offset, "limit": limit},
        )

    def set_log_level(self, level: str | int) -> None:
        """
        Set the log level of all envbee_sdk loggers.

        Args:
            level: Level name ("DEBUG", "info", ...) or logging constant.

        Raises:
            ConfigurationError: If the level name is unknown.
        """
        if isinstance(level, str):
            resolved = logging.getLevelName(level.upper())
            if not isinstance(resolved, int):
                raise ConfigurationError(f"Invalid log level: {level}")
            level = resolved
        logging.getLogger("envbee_sdk").setLevel(level)


def _extract_value(payload: Any) -> Any:
    """Pull the value out of a single-variable response."""
    if isinstance(payload, dict):
        return payload.get("value")
    return payload


def envbee_init(
    key: str | None = None,
    secret: str | None = None,
    enc_key: str | bytes | None = None,
    api_url: str | None = None,
    cache_dir: Path | str | None = None,
    fallback_on_auth_error: bool = False,
) -> ConfigClient:
    """
    Create a ConfigClient from arguments and ENVBEE_* environment variables.

    Arguments take priority; ENVBEE_API_KEY, ENVBEE_API_SECRET,
    ENVBEE_ENC_KEY and ENVBEE_API_URL fill in anything left as None.

    Raises:
        ConfigurationError: If key or secret is missing, or enc_key is malformed.
    """
    credentials = Credentials.resolve(key, secret, enc_key)
    if api_url is None:
        api_url = os.environ.get("ENVBEE_API_URL") or DEFAULT_API_URL

    return ConfigClient(
        credentials,
        api_url=api_url,
        cache_store=CacheStore.open(credentials.namespace, cache_dir),
        fallback_on_auth_error=fallback_on_auth_error,
    )
