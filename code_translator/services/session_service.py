"""
/**
 * @file code_translator/services/session_service.py
 * @description 翻译会话控制器：显式状态 + 事件转换（输入、防抖触发、认证推送、登出）。
 */
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional

from code_translator.config import Settings, load_settings
from code_translator.models.language_model import Language
from code_translator.models.session_models import AuthUser, ToastMessage
from code_translator.services.auth_service import AuthError, AuthProvider, AuthStateMirror
from code_translator.services.completion_client_service import CompletionClient
from code_translator.services.debounce_service import Debouncer
from code_translator.services.entitlement_service import Decision, EntitlementGate
from code_translator.services.language_service import find_language, list_languages
from code_translator.services.translation_service import TranslationError, translate_code
from code_translator.utils import is_blank


logger = logging.getLogger(__name__)

Sender = Callable[[Dict[str, Any]], Awaitable[None]]

TRANSLATION_FAILED = "Translation failed. Please try again."
SIGNED_OUT_OK = "Signed out successfully"
SIGN_OUT_FAILED = "Sign out failed. Please try again."


@dataclass
class TranslatorState:
    source_language: Language
    target_language: Language
    source_code: str = ""
    translated_code: str = ""
    is_translating: bool = False
    is_auth_modal_open: bool = False
    user: Optional[AuthUser] = None
    auth_status: str = "unknown"
    api_key_warning: Optional[str] = None
    languages: List[Language] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": "state",
            "source_language": self.source_language.to_dict(),
            "target_language": self.target_language.to_dict(),
            "source_code": self.source_code,
            "translated_code": self.translated_code,
            "is_translating": self.is_translating,
            "is_auth_modal_open": self.is_auth_modal_open,
            "user": self.user.to_dict() if self.user else None,
            "auth_status": self.auth_status,
            "api_key_warning": self.api_key_warning,
            "languages": [lang.to_dict() for lang in self.languages],
        }


class TranslatorSession:
    """
    Top-level controller for one browser page.

    All transitions run on the event loop thread. Network calls happen in
    worker threads; their results come back through _on_settled and are only
    rendered when their sequence number is the latest one issued.
    """

    def __init__(
        self,
        send: Sender,
        auth_provider: AuthProvider,
        settings: Optional[Settings] = None,
        client: Optional[CompletionClient] = None,
        languages: Optional[List[Language]] = None,
    ):
        self._send = send
        # settings are fetched dynamically unless pinned
        self._initial_settings = settings
        self.client = client or CompletionClient(settings=settings)
        langs = languages or list_languages(self.settings)
        self.state = TranslatorState(
            source_language=langs[0],
            target_language=langs[1],
            api_key_warning=self.settings.api_key_warning,
            languages=langs,
        )
        self.gate = EntitlementGate()
        self.auth = AuthStateMirror(auth_provider)
        self.auth.add_listener(self._on_auth_change)
        self._debouncer = Debouncer(self.settings.debounce_seconds, self._on_settled)
        self._latest_request: Optional[int] = None
        self._in_flight = 0
        self._started = False
        self._background: set = set()

    @property
    def settings(self) -> Settings:
        return self._initial_settings or load_settings()

    @property
    def debouncer(self) -> Debouncer:
        return self._debouncer

    async def start(self) -> None:
        await self.auth.start()
        self._started = True
        if self.state.api_key_warning:
            logger.warning(self.state.api_key_warning)
        await self.publish()

    async def stop(self) -> None:
        self._started = False
        self.auth.stop()
        await self._debouncer.close()
        for task in list(self._background):
            task.cancel()

    async def publish(self) -> None:
        self.state.api_key_warning = self.settings.api_key_warning
        await self._send(self.state.to_dict())

    async def toast(self, level: str, message: str) -> None:
        await self._send(ToastMessage(level=level, message=message).model_dump())

    # --- user events ---

    async def on_edit(self, text: str) -> None:
        self.state.source_code = text or ""
        if is_blank(text):
            self._debouncer.cancel_pending()
            # late responses must not refill a cleared panel
            self._latest_request = None
            self.state.translated_code = ""
        else:
            self._debouncer.delay = self.settings.debounce_seconds
            self._debouncer.schedule(self.state.source_code)
        await self.publish()

    async def on_source_language(self, key: str) -> None:
        lang = find_language(key, self.state.languages)
        if lang is None:
            await self.toast("error", f"Unknown language: {key}")
            return
        self.state.source_language = lang
        self._retranslate()
        await self.publish()

    async def on_target_language(self, key: str) -> None:
        lang = find_language(key, self.state.languages)
        if lang is None:
            await self.toast("error", f"Unknown language: {key}")
            return
        self.state.target_language = lang
        self._retranslate()
        await self.publish()

    async def open_sign_in(self) -> None:
        self.state.is_auth_modal_open = True
        await self.publish()

    async def close_sign_in(self) -> None:
        self.state.is_auth_modal_open = False
        await self.publish()

    async def on_auth_event(self, event: str, access_token: Optional[str] = None) -> None:
        try:
            await asyncio.to_thread(self.auth.provider.handle_auth_event, event, access_token)
        except AuthError as e:
            logger.warning(f"Auth event {event} rejected: {e}")
            await self.toast("error", "Sign in failed. Please try again.")

    async def sign_out(self) -> None:
        try:
            await self.auth.sign_out()
        except AuthError as e:
            logger.error(f"Sign out failed: {e}")
            await self.toast("error", SIGN_OUT_FAILED)
            return
        await self.toast("success", SIGNED_OUT_OK)

    # --- internal transitions ---

    def _retranslate(self) -> None:
        if not is_blank(self.state.source_code):
            self._debouncer.delay = self.settings.debounce_seconds
            self._debouncer.schedule(self.state.source_code)

    def _on_auth_change(self, user: Optional[AuthUser]) -> None:
        self.state.user = user
        self.state.auth_status = self.auth.status.value
        if user is not None:
            self.state.is_auth_modal_open = False
        if self._started:
            task = asyncio.ensure_future(self.publish())
            self._background.add(task)
            task.add_done_callback(self._background_done)

    def _background_done(self, task: asyncio.Future) -> None:
        self._background.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.warning(f"State push failed: {task.exception()!r}")

    async def _on_settled(self, seq: int, text: str) -> None:
        if is_blank(text):
            self.state.translated_code = ""
            await self.publish()
            return

        authenticated = self.auth.authenticated
        if self.gate.check(authenticated, seq) == Decision.REQUIRE_SIGN_IN:
            logger.info("Free translation used, asking for sign in")
            # output of an older call no longer matches the editor
            self._latest_request = None
            self.state.is_auth_modal_open = True
            await self.publish()
            return

        self._latest_request = seq
        self._in_flight += 1
        self.state.is_translating = True
        await self.publish()

        source_name = self.state.source_language.name
        target_name = self.state.target_language.name
        try:
            result = await asyncio.to_thread(translate_code, text, source_name, target_name, None, self.client)
        except TranslationError:
            self.gate.release(seq)
            self._finish_call()
            await self.toast("error", TRANSLATION_FAILED)
            await self.publish()
            return
        except asyncio.CancelledError:
            self.gate.release(seq)
            self._finish_call()
            raise

        self._finish_call()
        if seq == self._latest_request:
            self.state.translated_code = result
            self.gate.record_success(authenticated, seq)
        else:
            logger.debug(f"Discarding stale translation #{seq} (latest #{self._latest_request})")
            self.gate.release(seq)
        await self.publish()

    def _finish_call(self) -> None:
        self._in_flight = max(0, self._in_flight - 1)
        self.state.is_translating = self._in_flight > 0
