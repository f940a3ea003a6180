"""
/**
 * @file code_translator/services/__init__.py
 * @description 业务服务层导出。
 */
"""

from .auth_service import AuthError, AuthProvider, AuthStateMirror, SupabaseAuthProvider
from .completion_client_service import CompletionClient
from .debounce_service import Debouncer
from .entitlement_service import Decision, EntitlementGate
from .language_service import find_language, list_languages
from .session_service import TranslatorSession
from .translation_service import TranslationError, translate_code

__all__ = [
    "AuthError",
    "AuthProvider",
    "AuthStateMirror",
    "SupabaseAuthProvider",
    "CompletionClient",
    "Debouncer",
    "Decision",
    "EntitlementGate",
    "find_language",
    "list_languages",
    "TranslatorSession",
    "TranslationError",
    "translate_code",
]
