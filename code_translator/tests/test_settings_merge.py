"""
/**
 * @file code_translator/tests/test_settings_merge.py
 * @description 配置合并与密钥解析单元测试。
 */
"""

import json
import os
import tempfile
import unittest
from unittest.mock import patch

from code_translator.config.settings import MISSING_API_KEY_WARNING, Settings, reload_settings
from fakes import clean_env


class TestSettingsMerge(unittest.TestCase):
    def _write(self, path, data):
        with open(path, "w") as f:
            json.dump(data, f)

    def test_merge_base_and_local(self):
        with tempfile.TemporaryDirectory() as tmp:
            base_path = os.path.join(tmp, "config.json")
            local_path = os.path.join(tmp, "config.local.json")
            example_path = os.path.join(tmp, "config.example.json")

            self._write(base_path, {
                "api_keys": {"openai": "a"},
                "models": {"translation": "m1"},
                "endpoints": {"completion": "https://x.example.com"},
            })
            self._write(local_path, {"api_keys": {"openai": "b"}})
            self._write(example_path, {})

            s = reload_settings(base_path=base_path, local_path=local_path, example_path=example_path)
            self.assertEqual(s.api_keys.get("openai"), "b")
            self.assertEqual(s.translation_model, "m1")
            self.assertEqual(s.completion_endpoint, "https://x.example.com")

    def test_example_used_when_base_missing(self):
        with tempfile.TemporaryDirectory() as tmp:
            example_path = os.path.join(tmp, "config.example.json")
            self._write(example_path, {"endpoints": {"completion": "https://example.invalid"}, "parameters": {"debounce_ms": 250}})
            s = reload_settings(
                base_path=os.path.join(tmp, "missing.json"),
                local_path=os.path.join(tmp, "missing.local.json"),
                example_path=example_path,
            )
            self.assertEqual(s.completion_endpoint, "https://example.invalid")
            self.assertAlmostEqual(s.debounce_seconds, 0.25)

    def test_config_corrupted(self):
        fd, path = tempfile.mkstemp()
        os.close(fd)
        with open(path, "w") as f:
            f.write("{invalid json")
        try:
            s = reload_settings(base_path=path, local_path=path, example_path=path)
            self.assertIsInstance(s.raw, dict)
        finally:
            os.remove(path)

    def test_defaults(self):
        s = Settings(raw={})
        self.assertEqual(s.translation_model, "gpt-4o-mini")
        self.assertAlmostEqual(s.temperature, 0.3)
        self.assertEqual(s.max_tokens, 2048)
        self.assertAlmostEqual(s.debounce_seconds, 1.0)
        self.assertIn("{source_language}", s.system_prompt)
        self.assertIn("{target_language}", s.system_prompt)

    def test_bad_parameter_types_fall_back(self):
        s = Settings(raw={"parameters": {"temperature": "hot", "max_tokens": None}})
        self.assertAlmostEqual(s.temperature, 0.3)
        self.assertEqual(s.max_tokens, 2048)

    def test_env_key_wins_over_config(self):
        env = clean_env()
        env["OPENAI_API_KEY"] = "from-env"
        with patch.dict(os.environ, env, clear=True):
            s = Settings(raw={"api_keys": {"openai": "from-config"}})
            self.assertEqual(s.resolve_openai_key(), "from-env")
            self.assertIsNone(s.api_key_warning)

    def test_missing_key_warns(self):
        with patch.dict(os.environ, clean_env(), clear=True):
            s = Settings(raw={"api_keys": {"openai": ""}})
            self.assertIsNone(s.resolve_openai_key())
            self.assertEqual(s.api_key_warning, MISSING_API_KEY_WARNING)

    def test_auth_url_trailing_slash(self):
        with patch.dict(os.environ, clean_env(), clear=True):
            s = Settings(raw={"endpoints": {"auth": "https://proj.supabase.co/"}, "api_keys": {"auth_anon": "k"}})
            self.assertEqual(s.resolve_auth_url(), "https://proj.supabase.co")
            self.assertEqual(s.resolve_auth_key(), "k")


if __name__ == "__main__":
    unittest.main()
