"""
/**
 * @file code_translator/services/entitlement_service.py
 * @description 免费额度闸门：匿名会话仅允许一次翻译，之后要求登录。
 */
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class Decision(str, Enum):
    ALLOW = "allow"
    REQUIRE_SIGN_IN = "require_sign_in"


class EntitlementGate:
    """
    Tracks the single free translation of an anonymous session.

    Anonymous callers are allowed until a translation has succeeded. The
    newest allowed anonymous call holds the reservation; an older call that is
    still running loses it and can no longer set the flag. Authenticated
    callers are never blocked. The flag lives as long as the gate; it is not
    persisted.
    """

    def __init__(self):
        self.has_used_free_translation = False
        self._reserved_by: Optional[int] = None

    @property
    def reserved(self) -> bool:
        return self._reserved_by is not None

    def check(self, authenticated: bool, request_id: int = 0) -> Decision:
        if authenticated:
            return Decision.ALLOW
        if self.has_used_free_translation:
            return Decision.REQUIRE_SIGN_IN
        self._reserved_by = request_id
        return Decision.ALLOW

    def record_success(self, authenticated: bool, request_id: int = 0) -> None:
        if self._reserved_by is not None and self._reserved_by == request_id:
            self._reserved_by = None
            self.has_used_free_translation = True
        elif not authenticated and self._reserved_by is None:
            self.has_used_free_translation = True

    def release(self, request_id: int = 0) -> None:
        if self._reserved_by == request_id:
            self._reserved_by = None
