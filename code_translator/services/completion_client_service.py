"""
/**
 * @file code_translator/services/completion_client_service.py
 * @description OpenAI 兼容 Chat Completions 调用封装（requests）。
 */
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import requests

from code_translator.config import Settings, load_settings


class CompletionClient:
    def __init__(self, settings: Optional[Settings] = None):
        # settings are fetched dynamically unless pinned
        self._initial_settings = settings

    @property
    def settings(self) -> Settings:
        return self._initial_settings or load_settings()

    @property
    def api_key(self) -> Optional[str]:
        return self.settings.resolve_openai_key()

    def _get_headers(self, api_key: Optional[str] = None) -> Dict[str, str]:
        key = api_key or self.api_key
        if not key:
            raise ValueError("Missing API key. Set OPENAI_API_KEY or config.local.json")
        return {"Authorization": f"Bearer {key}", "Content-Type": "application/json"}

    def _extract_content(self, data: Any) -> str:
        """Returns the first choice's message text; raises ValueError when the shape is wrong."""
        if not isinstance(data, dict):
            raise ValueError("Response is not a JSON object")
        choices = data.get("choices")
        if not isinstance(choices, list) or not choices:
            raise ValueError("Response has no choices")
        first = choices[0]
        message = first.get("message") if isinstance(first, dict) else None
        if not isinstance(message, dict):
            raise ValueError("Response choice has no message")
        content = message.get("content")
        if content is None:
            return ""
        if not isinstance(content, str):
            raise ValueError("Response message content is not text")
        return content

    def call_chat(
        self,
        messages: List[Dict[str, str]],
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> Dict[str, Any]:
        s = self.settings
        payload = {
            "model": model or s.translation_model,
            "messages": messages,
            "temperature": s.temperature if temperature is None else temperature,
            "max_tokens": s.max_tokens if max_tokens is None else max_tokens,
        }
        try:
            response = requests.post(
                s.completion_endpoint,
                headers=self._get_headers(),
                json=payload,
                timeout=s.request_timeout,
            )
            if response.status_code == 200:
                return {"status": "success", "output": self._extract_content(response.json())}
            return {"status": "error", "code": response.status_code, "message": response.text}
        except (requests.RequestException, ValueError) as e:
            return {"status": "error", "message": str(e)}
