"""
/**
 * @file code_translator/models/__init__.py
 * @description 数据模型导出。
 */
"""

from .language_model import Language
from .session_models import AuthUser, ClientMessage, ToastMessage
from .translate_request_model import TranslateRequest

__all__ = ["Language", "TranslateRequest", "AuthUser", "ClientMessage", "ToastMessage"]
