"""
/**
 * @file code_translator/services/translation_service.py
 * @description 代码翻译服务：构造指令并调用补全服务，失败统一抛出 TranslationError。
 */
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from code_translator.services.completion_client_service import CompletionClient


logger = logging.getLogger(__name__)

GENERIC_FAILURE_MESSAGE = "Failed to translate code"


class TranslationError(RuntimeError):
    """Single failure signal for every way a translation call can go wrong."""

    def __init__(self, message: str = GENERIC_FAILURE_MESSAGE):
        super().__init__(message)


def build_translation_messages(
    code: str,
    source_language: str,
    target_language: str,
    system_prompt: str,
) -> List[Dict[str, str]]:
    instruction = system_prompt.replace("{source_language}", source_language).replace(
        "{target_language}", target_language
    )
    return [
        {"role": "system", "content": instruction},
        {"role": "user", "content": code},
    ]


def translate_code(
    code: str,
    source_language: str,
    target_language: str,
    model: Optional[str] = None,
    client: Optional[CompletionClient] = None,
) -> str:
    if not (code or "").strip():
        return ""
    h = client or CompletionClient()
    messages = build_translation_messages(code, source_language, target_language, h.settings.system_prompt)
    result = h.call_chat(messages, model=model)
    if isinstance(result, dict) and result.get("status") == "success":
        output = result.get("output")
        return output if isinstance(output, str) else ""
    logger.error(f"Translation error ({source_language} -> {target_language}): {result}")
    raise TranslationError()
