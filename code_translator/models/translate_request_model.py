"""
/**
 * @file code_translator/models/translate_request_model.py
 * @description 代码翻译请求模型（Pydantic）。
 */
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel


class TranslateRequest(BaseModel):
    code: str
    source_language: str
    target_language: str
    model: Optional[str] = None
