import os
import unittest
from unittest.mock import patch

import support  # noqa: F401

from resumeflow.core.config import load_settings  # noqa: E402


class SettingsTests(unittest.TestCase):
    def test_defaults_apply_when_environment_is_empty(self):
        with patch.dict(os.environ, {}, clear=True):
            loaded = load_settings()
        self.assertEqual(loaded.default_credits, 5)
        self.assertFalse(loaded.refund_on_failure)
        self.assertTrue(loaded.rate_limit_enabled)
        self.assertIsNone(loaded.cors_allow_origin_regex)
        self.assertIn("http://localhost:3000", loaded.cors_allowed_origins)
        self.assertEqual(loaded.completion_model, "gpt-4o")
        self.assertEqual(loaded.razorpay_currency, "INR")

    def test_blank_and_malformed_values_fall_back_to_defaults(self):
        env = {
            "DEFAULT_CREDITS": "lots",
            "COMPLETION_TIMEOUT_S": "  ",
            "CORS_ALLOWED_ORIGINS": " , ,",
            "CORS_ALLOW_ORIGIN_REGEX": "   ",
        }
        with patch.dict(os.environ, env, clear=True):
            loaded = load_settings()
        self.assertEqual(loaded.default_credits, 5)
        self.assertEqual(loaded.completion_timeout_s, 60.0)
        self.assertIn("http://localhost:5173", loaded.cors_allowed_origins)
        self.assertIsNone(loaded.cors_allow_origin_regex)

    def test_values_are_parsed_from_environment(self):
        env = {
            "DEFAULT_CREDITS": "-3",
            "REFUND_ON_FAILURE": "Yes",
            "CORS_ALLOWED_ORIGINS": "https://resumeflow.app, https://www.resumeflow.app",
            "OPENAI_API_KEY": "sk-fallback",
            "EXTRACTION_TIMEOUT_S": "2.5",
            "RAZORPAY_CURRENCY": "usd",
        }
        with patch.dict(os.environ, env, clear=True):
            loaded = load_settings()
        self.assertEqual(loaded.default_credits, 0)
        self.assertTrue(loaded.refund_on_failure)
        self.assertEqual(loaded.cors_allowed_origins, ("https://resumeflow.app", "https://www.resumeflow.app"))
        self.assertEqual(loaded.completion_api_key, "sk-fallback")
        self.assertEqual(loaded.extraction_timeout_s, 2.5)
        self.assertEqual(loaded.razorpay_currency, "USD")

    def test_non_positive_timeout_is_rejected(self):
        with patch.dict(os.environ, {"EXTRACTION_TIMEOUT_S": "0"}, clear=True):
            with self.assertRaises(RuntimeError):
                load_settings()


if __name__ == "__main__":
    unittest.main()
