"""
/**
 * @file code_translator/config/settings.py
 * @description 配置加载与合并（config.json + config.local.json），环境变量优先解析密钥。
 */
"""

from __future__ import annotations

import hashlib
import json
import logging
import os
import threading
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional


REPO_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
CONFIG_PATH = os.path.join(REPO_ROOT, "config.json")
CONFIG_LOCAL_PATH = os.path.join(REPO_ROOT, "config.local.json")
CONFIG_EXAMPLE_PATH = os.path.join(REPO_ROOT, "config.example.json")

DEFAULT_COMPLETION_ENDPOINT = "https://api.openai.com/v1/chat/completions"
DEFAULT_TRANSLATION_MODEL = "gpt-4o-mini"
DEFAULT_SYSTEM_PROMPT = (
    "You are a code translator. Translate the provided code from {source_language} to {target_language}. "
    "Only respond with the translated code, no explanations or additional text."
)
MISSING_API_KEY_WARNING = "Please add your OpenAI API key to continue"

logger = logging.getLogger("config_loader")


def _load_json(path: str) -> Dict[str, Any]:
    try:
        with open(path, "r") as f:
            value = json.load(f)
            return value if isinstance(value, dict) else {}
    except FileNotFoundError:
        return {}


def _merge_dicts(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            base[key] = _merge_dicts(base[key], value)
        else:
            base[key] = value
    return base


def _as_float(value: Any, default: float) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _as_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


@dataclass(frozen=True)
class Settings:
    raw: Dict[str, Any]

    @property
    def endpoints(self) -> Dict[str, str]:
        value = self.raw.get("endpoints", {})
        return value if isinstance(value, dict) else {}

    @property
    def models(self) -> Dict[str, str]:
        value = self.raw.get("models", {})
        return value if isinstance(value, dict) else {}

    @property
    def api_keys(self) -> Dict[str, str]:
        value = self.raw.get("api_keys", {})
        return value if isinstance(value, dict) else {}

    @property
    def prompts(self) -> Dict[str, str]:
        value = self.raw.get("prompts", {})
        return value if isinstance(value, dict) else {}

    @property
    def parameters(self) -> Dict[str, Any]:
        value = self.raw.get("parameters", {})
        return value if isinstance(value, dict) else {}

    @property
    def languages(self) -> List[Dict[str, Any]]:
        value = self.raw.get("languages", [])
        return [x for x in value if isinstance(x, dict)] if isinstance(value, list) else []

    @property
    def completion_endpoint(self) -> str:
        value = self.endpoints.get("completion")
        return value if isinstance(value, str) and value else DEFAULT_COMPLETION_ENDPOINT

    @property
    def translation_model(self) -> str:
        value = self.models.get("translation")
        return value if isinstance(value, str) and value else DEFAULT_TRANSLATION_MODEL

    @property
    def system_prompt(self) -> str:
        value = self.prompts.get("system")
        return value if isinstance(value, str) and value else DEFAULT_SYSTEM_PROMPT

    @property
    def temperature(self) -> float:
        return _as_float(self.parameters.get("temperature"), 0.3)

    @property
    def max_tokens(self) -> int:
        return _as_int(self.parameters.get("max_tokens"), 2048)

    @property
    def debounce_seconds(self) -> float:
        return _as_int(self.parameters.get("debounce_ms"), 1000) / 1000.0

    @property
    def request_timeout(self) -> float:
        return _as_float(self.parameters.get("request_timeout"), 60.0)

    def resolve_openai_key(self) -> Optional[str]:
        return (
            os.getenv("OPENAI_API_KEY")
            or os.getenv("VITE_OPENAI_API_KEY")
            or (self.api_keys.get("openai") if isinstance(self.api_keys.get("openai"), str) else None)
            or None
        )

    def resolve_auth_url(self) -> Optional[str]:
        value = os.getenv("SUPABASE_URL") or self.endpoints.get("auth")
        return value.rstrip("/") if isinstance(value, str) and value else None

    def resolve_auth_key(self) -> Optional[str]:
        return (
            os.getenv("SUPABASE_ANON_KEY")
            or (self.api_keys.get("auth_anon") if isinstance(self.api_keys.get("auth_anon"), str) else None)
            or None
        )

    @property
    def api_key_warning(self) -> Optional[str]:
        return None if self.resolve_openai_key() else MISSING_API_KEY_WARNING


_CACHED_SETTINGS: Optional[Settings] = None
_CACHED_PATHS: tuple = ()
_LAST_LOAD_TIME = 0.0
_CONFIG_HASH = ""
_SETTINGS_LOCK = threading.Lock()


def _deep_diff(d1: Dict[str, Any], d2: Dict[str, Any], path="") -> list:
    diffs = []
    for k in set(d1.keys()) | set(d2.keys()):
        p = f"{path}.{k}" if path else k
        if k not in d1:
            diffs.append(f"Added: {p}")
        elif k not in d2:
            diffs.append(f"Removed: {p}")
        elif isinstance(d1[k], dict) and isinstance(d2[k], dict):
            diffs.extend(_deep_diff(d1[k], d2[k], p))
        elif d1[k] != d2[k]:
            # api keys must not end up in the log
            shown = "***" if "key" in p.lower() else f"{d1[k]} -> {d2[k]}"
            diffs.append(f"Changed: {p} ({shown})")
    return diffs


def reload_settings(
    base_path: str = CONFIG_PATH,
    local_path: str = CONFIG_LOCAL_PATH,
    example_path: str = CONFIG_EXAMPLE_PATH,
) -> Settings:
    global _CACHED_SETTINGS, _CACHED_PATHS, _LAST_LOAD_TIME, _CONFIG_HASH

    paths = (base_path, local_path, example_path)
    with _SETTINGS_LOCK:
        now = time.time()
        # Debounce: 500ms, only for the same set of files
        if _CACHED_SETTINGS and paths == _CACHED_PATHS and (now - _LAST_LOAD_TIME < 0.5):
            return _CACHED_SETTINGS

        try:
            # 1. Load
            base_cfg = _load_json(base_path)
            if not base_cfg.get("endpoints") and os.path.exists(example_path):
                base_cfg = _merge_dicts(_load_json(example_path), base_cfg)

            local_cfg = _load_json(local_path)
            merged = _merge_dicts(base_cfg, local_cfg)

            # 2. Hash Check
            new_hash = hashlib.md5(json.dumps(merged, sort_keys=True).encode("utf-8")).hexdigest()

            if _CACHED_SETTINGS and new_hash == _CONFIG_HASH:
                _CACHED_PATHS = paths
                _LAST_LOAD_TIME = now
                return _CACHED_SETTINGS

            # 3. Log Changes
            is_reload = _CACHED_SETTINGS is not None
            if is_reload:
                diffs = _deep_diff(_CACHED_SETTINGS.raw, merged)
                if diffs:
                    logger.info(f"Config changes detected: {'; '.join(diffs)}")

            # 4. Update
            _CACHED_SETTINGS = Settings(raw=merged)
            _CACHED_PATHS = paths
            _CONFIG_HASH = new_hash
            _LAST_LOAD_TIME = now

            if is_reload:
                logger.info("Configuration reloaded successfully.")

        except (OSError, ValueError) as e:
            logger.error(f"Failed to reload config: {e}. Keeping old config.")
            if not _CACHED_SETTINGS:
                logger.warning("Initializing with empty settings due to load failure.")
                _CACHED_SETTINGS = Settings(raw={})

    return _CACHED_SETTINGS


def load_settings() -> Settings:
    """
    Get current settings. Lazy loads on first call.
    Subsequent reloads are handled by the file watcher calling reload_settings().
    """
    if _CACHED_SETTINGS is None:
        return reload_settings()
    return _CACHED_SETTINGS
