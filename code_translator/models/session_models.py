"""
/**
 * @file code_translator/models/session_models.py
 * @description 会话模型：WebSocket 客户端消息、提示消息、认证用户。
 */
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel


ClientMessageType = Literal[
    "edit",
    "set_source_language",
    "set_target_language",
    "open_sign_in",
    "close_sign_in",
    "auth",
    "sign_out",
]


class ClientMessage(BaseModel):
    """One event sent by the browser over the session socket."""

    type: ClientMessageType
    text: Optional[str] = None
    value: Optional[str] = None
    event: Optional[str] = None
    access_token: Optional[str] = None


class ToastMessage(BaseModel):
    type: Literal["toast"] = "toast"
    level: Literal["success", "error"]
    message: str


@dataclass(frozen=True)
class AuthUser:
    id: str
    email: str

    def to_dict(self) -> Dict[str, str]:
        return {"id": self.id, "email": self.email}

    @classmethod
    def from_payload(cls, data: Any) -> Optional["AuthUser"]:
        if not isinstance(data, dict):
            return None
        user_id = data.get("id")
        if not isinstance(user_id, str) or not user_id:
            return None
        email = data.get("email")
        return cls(id=user_id, email=email if isinstance(email, str) else "")
