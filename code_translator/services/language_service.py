"""
/**
 * @file code_translator/services/language_service.py
 * @description 语言列表服务：内置静态列表，可由配置覆盖。
 */
"""

from __future__ import annotations

from typing import List, Optional, Sequence

from code_translator.config import Settings, load_settings
from code_translator.models.language_model import Language


# 默认语言列表；第一项为默认源语言，第二项为默认目标语言
DEFAULT_LANGUAGES: List[Language] = [
    Language("Python", "python"),
    Language("JavaScript", "javascript"),
    Language("TypeScript", "typescript"),
    Language("Java", "java"),
    Language("C++", "cpp"),
    Language("C#", "csharp"),
    Language("Go", "go"),
    Language("Rust", "rust"),
    Language("Ruby", "ruby"),
    Language("PHP", "php"),
    Language("Swift", "swift"),
    Language("Kotlin", "kotlin"),
]


def list_languages(settings: Optional[Settings] = None) -> List[Language]:
    s = settings or load_settings()
    configured = [lang for lang in (Language.from_dict(x) for x in s.languages) if lang is not None]
    # fewer than two entries cannot fill both selectors
    if len(configured) >= 2:
        return configured
    return list(DEFAULT_LANGUAGES)


def find_language(key: str, languages: Sequence[Language]) -> Optional[Language]:
    """Looks a language up by editor key first, then by display name (case-insensitive)."""
    wanted = (key or "").strip().lower()
    if not wanted:
        return None
    for lang in languages:
        if lang.value.lower() == wanted:
            return lang
    for lang in languages:
        if lang.name.lower() == wanted:
            return lang
    return None
