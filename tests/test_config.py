"""Tests for configuration manager and settings."""
import os
import unittest
import tempfile
import shutil
from pathlib import Path
from unittest import mock

from finsight.config import AppSettings, Config, ConfigManager
from finsight.utils.exceptions import ConfigurationError


class TestConfigManager(unittest.TestCase):
    """Test ConfigManager functionality."""

    def setUp(self):
        """Set up test fixtures."""
        self.test_dir = Path(tempfile.mkdtemp())
        self.config_manager = ConfigManager(env_file=self.test_dir / ".env")

    def tearDown(self):
        """Clean up test fixtures."""
        shutil.rmtree(self.test_dir, ignore_errors=True)

    def test_load_from_environment(self):
        """Test values come from environment variables."""
        env = {
            "FINSIGHT_BACKEND_URL": "sqlite:///data/finsight.db",
            "FINSIGHT_SERVICE_KEY": "service-key",
            "GEMINI_API_KEY": "gemini-key",
            "FINSIGHT_STORAGE_ROOT": str(self.test_dir / "objects"),
        }
        with mock.patch.dict(os.environ, env, clear=True):
            config = self.config_manager.load_config()

        self.assertEqual(config.service_key, "service-key")
        self.assertEqual(config.gemini_api_key, "gemini-key")
        self.assertEqual(config.database_path, Path("data/finsight.db"))
        self.assertEqual(config.storage_path, self.test_dir / "objects")

    def test_load_from_env_file(self):
        """Test a .env file fills in missing variables."""
        (self.test_dir / ".env").write_text(
            "FINSIGHT_BACKEND_URL=/tmp/finsight.db\n"
            "FINSIGHT_SERVICE_KEY=from-file\n"
            "GEMINI_API_KEY=file-gemini\n"
        )
        with mock.patch.dict(os.environ, {}, clear=True):
            config = self.config_manager.load_config()

        self.assertEqual(config.service_key, "from-file")
        self.assertEqual(config.database_path, Path("/tmp/finsight.db"))

    def test_validate_config_valid(self):
        """Test validation with valid config."""
        config = Config("db.sqlite", "service-key", "gemini-key")

        is_valid, message = self.config_manager.validate_config(config)
        self.assertTrue(is_valid)

    def test_validate_config_missing_values(self):
        """Test each missing secret is reported."""
        cases = [
            (Config("", "key", "gemini"), "Backend URL"),
            (Config("db", "", "gemini"), "service key"),
            (Config("db", "key", ""), "Gemini API key"),
        ]
        for config, expected in cases:
            is_valid, message = self.config_manager.validate_config(config)
            self.assertFalse(is_valid)
            self.assertIn(expected, message)

    def test_require_valid(self):
        """Test invalid configuration raises a server configuration error."""
        with self.assertRaises(ConfigurationError) as context:
            self.config_manager.require_valid(Config("db", "key", ""))
        self.assertTrue(str(context.exception).startswith("Server configuration error"))


class TestAppSettings(unittest.TestCase):
    """Test AppSettings loading."""

    def test_packaged_defaults(self):
        """Test the bundled config.yaml."""
        settings = AppSettings.load()

        self.assertEqual(settings.chunk_size, 1000)
        self.assertEqual(settings.embedding_batch_size, 5)
        self.assertEqual(settings.match_threshold, 0.5)
        self.assertEqual(settings.match_count, 5)
        self.assertEqual(settings.temperature, 0.0)
        self.assertEqual(settings.max_answer_tokens, 500)
        self.assertEqual(settings.signed_url_seconds, 3600)
        self.assertEqual(settings.token_ttl_hours, 168)
        self.assertIn("image/png", settings.receipt_allowed_types)

    def test_missing_file(self):
        """Test a missing configuration file."""
        with self.assertRaises(FileNotFoundError):
            AppSettings.load(Path("/nonexistent/config.yaml"))


if __name__ == "__main__":
    unittest.main()
