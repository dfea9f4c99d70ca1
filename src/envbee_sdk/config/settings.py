"""
Configuration settings management for the envbee SDK.

Settings are loaded from ~/.envbee/config.yaml by default (path overridable
with ENVBEE_CONFIG) and then overridden by ENVBEE_* environment variables.

Example config.yaml:
    envbee:
      api_url: https://api.envbee.dev
      cache_dir: ~/.envbee/cache
      log_level: INFO
      fallback_on_auth_error: false
      api_key: my-key
"""

from __future__ import annotations

import os
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from envbee_sdk.errors import ConfigurationError
from envbee_sdk.storage.cache_store import DEFAULT_CACHE_DIR

DEFAULT_API_URL = "https://api.envbee.dev"
DEFAULT_CONFIG_DIR = Path.home() / ".envbee"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.yaml"

VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass
class Settings:
    """
    Complete envbee SDK configuration.

    Attributes:
        api_url: Root URL of the envbee API.
        cache_dir: Directory for the fallback cache databases.
        log_level: Logging verbosity for the envbee_sdk logger.
        fallback_on_auth_error: Serve cached values when the service rejects
            the credentials. Off by default so auth failures are never hidden.
        api_key: API key (usually from ENVBEE_API_KEY).
        api_secret: API secret (usually from ENVBEE_API_SECRET).
        enc_key: Encryption passphrase (usually from ENVBEE_ENC_KEY).
    """

    api_url: str = DEFAULT_API_URL
    cache_dir: str = str(DEFAULT_CACHE_DIR)
    log_level: str = "INFO"
    fallback_on_auth_error: bool = False
    api_key: str | None = None
    api_secret: str | None = None
    enc_key: str | None = None


def get_config_path() -> Path:
    """
    Get the configuration file path.

    Returns:
        ENVBEE_CONFIG if set, otherwise ~/.envbee/config.yaml.
    """
    env_path = os.environ.get("ENVBEE_CONFIG")
    if env_path:
        return Path(env_path)
    return DEFAULT_CONFIG_FILE


def load_config(config_path: Path | None = None) -> Settings:
    """
    Load configuration from YAML file and environment.

    A missing file is not an error: defaults plus environment are used.

    Raises:
        ConfigurationError: If the file cannot be read, is not valid YAML,
            or yields invalid settings.
    """
    if config_path is None:
        config_path = get_config_path()

    settings = Settings()

    if config_path.exists():
        try:
            with open(config_path) as f:
                config_data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in config file: {e}") from e
        except OSError as e:
            raise ConfigurationError(f"Cannot read config file: {e}") from e

        if not isinstance(config_data, dict):
            raise ConfigurationError("Config file must contain a mapping")

        settings = _apply_config_data(settings, config_data)

    settings = _apply_environment_overrides(settings)

    _validate_config(settings)

    return settings


def save_config(settings: Settings, config_path: Path | None = None) -> None:
    """
    Save configuration to YAML file.

    The API secret and encryption key are never written.

    Raises:
        ConfigurationError: If the configuration cannot be written.
    """
    if config_path is None:
        config_path = get_config_path()

    config_path.parent.mkdir(parents=True, exist_ok=True)

    try:
        with open(config_path, "w") as f:
            yaml.safe_dump(
                _settings_to_dict(settings), f, default_flow_style=False, sort_keys=False
            )
    except OSError as e:
        raise ConfigurationError(f"Cannot write config file: {e}") from e


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in {"1", "true", "yes", "on"}


def _apply_config_data(settings: Settings, data: dict[str, Any]) -> Settings:
    """Apply configuration data from parsed YAML to settings."""
    envbee_data = data.get("envbee")
    if envbee_data is None:
        envbee_data = {}
    elif not isinstance(envbee_data, dict):
        raise ConfigurationError("Config section 'envbee' must be a mapping")

    if "api_url" in envbee_data:
        settings.api_url = str(envbee_data["api_url"])
    if "cache_dir" in envbee_data:
        settings.cache_dir = str(Path(str(envbee_data["cache_dir"])).expanduser())
    if "log_level" in envbee_data:
        settings.log_level = str(envbee_data["log_level"]).upper()
    if "fallback_on_auth_error" in envbee_data:
        settings.fallback_on_auth_error = _parse_bool(envbee_data["fallback_on_auth_error"])
    if "api_key" in envbee_data:
        settings.api_key = str(envbee_data["api_key"])
    if "api_secret" in envbee_data:
        settings.api_secret = str(envbee_data["api_secret"])
    if "enc_key" in envbee_data:
        settings.enc_key = str(envbee_data["enc_key"])

    return settings


def _apply_environment_overrides(settings: Settings) -> Settings:
    """Apply environment variable overrides to settings."""
    env_map: dict[str, tuple[str, Callable[[str], Any]]] = {
        "ENVBEE_API_URL": ("api_url", str),
        "ENVBEE_CACHE_DIR": ("cache_dir", lambda x: str(Path(x).expanduser())),
        "ENVBEE_LOG_LEVEL": ("log_level", lambda x: x.upper()),
        "ENVBEE_FALLBACK_ON_AUTH_ERROR": ("fallback_on_auth_error", _parse_bool),
        "ENVBEE_API_KEY": ("api_key", str),
        "ENVBEE_API_SECRET": ("api_secret", str),
        "ENVBEE_ENC_KEY": ("enc_key", str),
    }

    for env_var, (attr, converter) in env_map.items():
        value = os.environ.get(env_var)
        if value is not None:
            setattr(settings, attr, converter(value))

    return settings


def _validate_config(settings: Settings) -> None:
    """
    Validate configuration settings.

    Raises:
        ConfigurationError: If configuration is invalid.
    """
    if settings.log_level not in VALID_LOG_LEVELS:
        raise ConfigurationError(
            f"Invalid log_level: {settings.log_level}. "
            f"Must be one of: {', '.join(sorted(VALID_LOG_LEVELS))}"
        )

    if not settings.api_url.startswith(("http://", "https://")):
        raise ConfigurationError(
            f"Invalid api_url: {settings.api_url}. Must start with http:// or https://"
        )


def _settings_to_dict(settings: Settings) -> dict[str, Any]:
    """Convert Settings to a dictionary for YAML serialization."""
    data: dict[str, Any] = {
        "api_url": settings.api_url,
        "cache_dir": settings.cache_dir,
        "log_level": settings.log_level,
        "fallback_on_auth_error": settings.fallback_on_auth_error,
    }
    if settings.api_key:
        data["api_key"] = settings.api_key
    return {"envbee": data}
