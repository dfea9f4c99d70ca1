"""Tests for configuration modules (settings and credentials)."""

import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

import yaml

from envbee_sdk.config.credentials import Credentials
from envbee_sdk.config.settings import (
    DEFAULT_API_URL,
    DEFAULT_CONFIG_FILE,
    Settings,
    _apply_environment_overrides,
    _settings_to_dict,
    _validate_config,
    get_config_path,
    load_config,
    save_config,
)
from envbee_sdk.errors import ConfigurationError
from envbee_sdk.storage.cache_store import namespace_for


class TestSettings(unittest.TestCase):
    """Tests for the Settings dataclass."""

    def test_defaults(self) -> None:
        settings = Settings()

        self.assertEqual(settings.api_url, DEFAULT_API_URL)
        self.assertEqual(settings.api_url, "https://api.envbee.dev")
        self.assertEqual(settings.log_level, "INFO")
        self.assertFalse(settings.fallback_on_auth_error)
        self.assertIsNone(settings.api_key)


class TestConfigPath(unittest.TestCase):
    """Tests for config path resolution."""

    @patch.dict(os.environ, {}, clear=True)
    def test_default_path(self) -> None:
        self.assertEqual(get_config_path(), DEFAULT_CONFIG_FILE)

    @patch.dict(os.environ, {"ENVBEE_CONFIG": "/tmp/custom.yaml"}, clear=True)
    def test_env_path(self) -> None:
        self.assertEqual(get_config_path(), Path("/tmp/custom.yaml"))


class TestLoadConfig(unittest.TestCase):
    """Tests for load_config and save_config."""

    def setUp(self) -> None:
        self.temp_dir = tempfile.TemporaryDirectory()
        self.config_path = Path(self.temp_dir.name) / "config.yaml"

    def tearDown(self) -> None:
        self.temp_dir.cleanup()

    @patch.dict(os.environ, {}, clear=True)
    def test_missing_file_uses_defaults(self) -> None:
        settings = load_config(self.config_path)
        self.assertEqual(settings.api_url, DEFAULT_API_URL)

    @patch.dict(os.environ, {}, clear=True)
    def test_load_from_yaml(self) -> None:
        self.config_path.write_text(
            yaml.safe_dump(
                {
                    "envbee": {
                        "api_url": "https://api.example.test",
                        "cache_dir": "/tmp/envbee-cache",
                        "log_level": "debug",
                        "fallback_on_auth_error": True,
                        "api_key": "file-key",
                    }
                }
            )
        )

        settings = load_config(self.config_path)

        self.assertEqual(settings.api_url, "https://api.example.test")
        self.assertEqual(settings.cache_dir, "/tmp/envbee-cache")
        self.assertEqual(settings.log_level, "DEBUG")
        self.assertTrue(settings.fallback_on_auth_error)
        self.assertEqual(settings.api_key, "file-key")

    @patch.dict(
        os.environ,
        {
            "ENVBEE_API_URL": "https://env.example.test",
            "ENVBEE_API_KEY": "env-key",
            "ENVBEE_FALLBACK_ON_AUTH_ERROR": "yes",
        },
        clear=True,
    )
    def test_environment_overrides_file(self) -> None:
        self.config_path.write_text(
            "envbee:\n  api_url: https://file.example.test\n  api_key: file-key\n"
        )

        settings = load_config(self.config_path)

        self.assertEqual(settings.api_url, "https://env.example.test")
        self.assertEqual(settings.api_key, "env-key")
        self.assertTrue(settings.fallback_on_auth_error)

    def test_invalid_yaml(self) -> None:
        self.config_path.write_text("envbee: [unclosed")
        with self.assertRaises(ConfigurationError):
            load_config(self.config_path)

    def test_non_mapping_yaml(self) -> None:
        self.config_path.write_text("- a\n- b\n")
        with self.assertRaises(ConfigurationError):
            load_config(self.config_path)

    def test_non_mapping_envbee_section(self) -> None:
        """Test a scalar or list 'envbee' section is rejected."""
        for text in ("envbee: api_url\n", "envbee:\n  - a\n", "envbee: 3\n"):
            self.config_path.write_text(text)
            with self.assertRaises(ConfigurationError):
                load_config(self.config_path)

    @patch.dict(os.environ, {}, clear=True)
    def test_empty_envbee_section_uses_defaults(self) -> None:
        self.config_path.write_text("envbee:\n")
        self.assertEqual(load_config(self.config_path).api_url, DEFAULT_API_URL)

    @patch.dict(os.environ, {}, clear=True)
    def test_save_round_trip_omits_secrets(self) -> None:
        settings = Settings(
            api_url="https://api.example.test",
            api_key="k",
            api_secret="super-secret",
            enc_key="enc-secret",
        )

        save_config(settings, self.config_path)
        text = self.config_path.read_text()
        loaded = load_config(self.config_path)

        self.assertNotIn("super-secret", text)
        self.assertNotIn("enc-secret", text)
        self.assertEqual(loaded.api_url, "https://api.example.test")
        self.assertEqual(loaded.api_key, "k")
        self.assertIsNone(loaded.api_secret)


class TestValidation(unittest.TestCase):
    """Tests for settings validation and environment overrides."""

    def test_invalid_log_level(self) -> None:
        with self.assertRaises(ConfigurationError):
            _validate_config(Settings(log_level="LOUD"))

    def test_invalid_api_url(self) -> None:
        with self.assertRaises(ConfigurationError):
            _validate_config(Settings(api_url="ftp://api.example.test"))

    @patch.dict(os.environ, {"ENVBEE_LOG_LEVEL": "warning"}, clear=True)
    def test_log_level_env_uppercased(self) -> None:
        self.assertEqual(_apply_environment_overrides(Settings()).log_level, "WARNING")

    def test_settings_to_dict_shape(self) -> None:
        data = _settings_to_dict(Settings())
        self.assertIn("envbee", data)
        self.assertNotIn("api_secret", data["envbee"])


class TestCredentials(unittest.TestCase):
    """Tests for Credentials."""

    def test_namespace(self) -> None:
        self.assertEqual(Credentials("k", "s").namespace, namespace_for("k"))

    @patch.dict(os.environ, {"ENVBEE_ENC_KEY": ""}, clear=True)
    def test_empty_enc_key_env_is_none(self) -> None:
        self.assertIsNone(Credentials.resolve("k", "s").encryption_secret)

    def test_empty_enc_key_is_none(self) -> None:
        self.assertIsNone(Credentials("k", "s", "").encryption_secret)
        self.assertIsNone(Credentials("k", "s", b"").encryption_secret)
        self.assertIsNone(Credentials.resolve("k", "s", "").encryption_secret)

    def test_frozen(self) -> None:
        credentials = Credentials("k", "s")
        with self.assertRaises(AttributeError):
            credentials.api_key = "other"  # type: ignore[misc]


if __name__ == "__main__":
    unittest.main()
