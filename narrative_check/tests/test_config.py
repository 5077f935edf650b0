"""Tests for the configuration module."""

import os
import tempfile
import unittest
from unittest.mock import patch

from narrative_check.config import DEFAULT_SUBREDDITS, Config


class TestConfig(unittest.TestCase):
    """Test cases for the Config class."""

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.config_path = os.path.join(self.temp_dir.name, "config.yaml")
        self.env_path = os.path.join(self.temp_dir.name, ".env")

        with open(self.config_path, "w", encoding="utf-8") as f:
            f.write("""
client_id: from-yaml
log_file: logs/narrative.log
search:
  raw_candidate_cap: 50
  window_days: 30
  unknown_key: ignored
summarizer:
  model: sonar
  api_key: from-yaml
rate_limit:
  max_requests_per_minute: 30
""")

    def tearDown(self):
        self.temp_dir.cleanup()

    def test_defaults(self):
        config = Config()

        self.assertEqual(config.search.subreddits, DEFAULT_SUBREDDITS)
        self.assertEqual(config.search.raw_candidate_cap, 200)
        self.assertEqual(config.search.window_days, 90)
        self.assertEqual(config.search.citation_limit, 10)
        self.assertFalse(config.summarizer.is_active)

    @patch.dict(os.environ, {"REDDIT_CLIENT_ID": "env-id", "REDDIT_CLIENT_SECRET": "env-secret"}, clear=True)
    def test_from_files_merges_yaml(self):
        config = Config.from_files(self.config_path, self.env_path)

        self.assertEqual(config.client_id, "env-id")
        self.assertEqual(config.client_secret, "env-secret")
        self.assertEqual(config.log_file, "logs/narrative.log")
        self.assertEqual(config.search.raw_candidate_cap, 50)
        self.assertEqual(config.search.window_days, 30)
        self.assertEqual(config.search.min_score, 5)
        self.assertEqual(config.summarizer.model, "sonar")
        self.assertEqual(config.rate_limit.max_requests_per_minute, 30)

    @patch.dict(os.environ, {}, clear=True)
    def test_secrets_are_env_only(self):
        config = Config.from_files(self.config_path, self.env_path)

        self.assertEqual(config.client_id, "")
        self.assertEqual(config.summarizer.api_key, "")
        self.assertFalse(config.summarizer.enabled)

    @patch.dict(os.environ, {}, clear=True)
    def test_dotenv_file(self):
        with open(self.env_path, "w", encoding="utf-8") as f:
            f.write("REDDIT_CLIENT_ID=dotenv-id\nPERPLEXITY_API_KEY=pplx\n")

        config = Config.from_files(None, self.env_path)

        self.assertEqual(config.client_id, "dotenv-id")
        self.assertTrue(config.summarizer.is_active)

    def test_validate(self):
        config = Config(client_id="id", client_secret="secret")
        self.assertEqual(config.validate(), [])

        config.search.subreddits = []
        config.search.page_size = 500
        config.summarizer.enabled = True
        errors = config.validate()

        self.assertIn("No subreddits specified in configuration", errors)
        self.assertIn("search.page_size must be between 1 and 100", errors)
        self.assertIn("Summarizer enabled but PERPLEXITY_API_KEY is not set", errors)

    def test_validate_missing_credentials(self):
        errors = Config().validate()

        self.assertIn("Missing REDDIT_CLIENT_ID in environment", errors)
        self.assertIn("Missing REDDIT_CLIENT_SECRET in environment", errors)


if __name__ == "__main__":
    unittest.main()
