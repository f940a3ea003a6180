"""
/**
 * @file code_translator/models/language_model.py
 * @description 编程语言选项：显示名称 + 编辑器语法高亮标识（不可变）。
 */
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class Language:
    name: str
    value: str

    def to_dict(self) -> Dict[str, str]:
        return {"name": self.name, "value": self.value}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Optional["Language"]:
        name = str(data.get("name", "") or "").strip()
        value = str(data.get("value", "") or "").strip()
        if not name or not value:
            return None
        return cls(name=name, value=value)
