import json
import os
import tempfile
import unittest
from pathlib import Path

from career_data_api.settings import get_settings
from career_data_api.user_config import load_user_config


class TestSettings(unittest.TestCase):
    def setUp(self) -> None:
        """Create a temporary user settings file."""
        self.tmpdir = tempfile.TemporaryDirectory()
        self.config_path = Path(self.tmpdir.name) / "user_settings.json"
        os.environ["CAREER_SETTINGS_FILE"] = str(self.config_path)
        self._saved_env = {
            key: os.environ.pop(key) for key in ("LLM_PROVIDER", "LLM_MODEL") if key in os.environ
        }
        get_settings.cache_clear()

    def tearDown(self) -> None:
        """Clean up temporary settings."""
        get_settings.cache_clear()
        if "CAREER_SETTINGS_FILE" in os.environ:
            del os.environ["CAREER_SETTINGS_FILE"]
        os.environ.update(self._saved_env)
        self.tmpdir.cleanup()

    def test_load_user_config(self) -> None:
        """Test loading user config from the settings file."""
        config = {"llm_provider": "openai", "max_tokens": 2000}
        self.config_path.write_text(json.dumps(config), encoding="utf-8")
        self.assertEqual(load_user_config(None), config)

    def test_load_drops_unknown_keys(self) -> None:
        """Test secrets and unknown keys in the file never become settings."""
        self.config_path.write_text(
            json.dumps({"log_level": "DEBUG", "anthropic_api_key": "sk-test"}), encoding="utf-8"
        )
        self.assertEqual(load_user_config(None), {"log_level": "DEBUG"})

    def test_invalid_file_reads_as_empty(self) -> None:
        """Test a corrupt settings file is ignored."""
        self.config_path.write_text("{not json", encoding="utf-8")
        self.assertEqual(load_user_config(None), {})

    def test_settings_override_from_user_config(self) -> None:
        """Test settings load values from user config."""
        self.config_path.write_text(
            json.dumps({"max_tokens": 1500, "llm_model": "claude-test"}), encoding="utf-8"
        )
        settings = get_settings()
        self.assertEqual(settings.max_tokens, 1500)
        self.assertEqual(settings.llm_model, "claude-test")

    def test_environment_sets_database_url(self) -> None:
        """Test DATABASE_URL maps onto the SQL URL setting."""
        os.environ["DATABASE_URL"] = "sqlite:///tmp/other.db"
        try:
            self.assertEqual(get_settings().sql_db_url, "sqlite:///tmp/other.db")
        finally:
            del os.environ["DATABASE_URL"]


if __name__ == "__main__":
    unittest.main()
