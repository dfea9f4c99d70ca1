"""
Configuration management for the envbee SDK.

This module handles loading and validating settings from YAML and the
environment, and resolving the API credentials a client is built with.
"""

from envbee_sdk.config.credentials import Credentials
from envbee_sdk.config.settings import (
    DEFAULT_API_URL,
    Settings,
    load_config,
    save_config,
)

__all__ = [
    # Settings
    "Settings",
    "load_config",
    "save_config",
    "DEFAULT_API_URL",
    # Credentials
    "Credentials",
]
