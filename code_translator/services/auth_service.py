"""
/**
 * @file code_translator/services/auth_service.py
 * @description 认证：托管认证服务（Supabase GoTrue）封装 + 本地会话镜像。
 */
"""

from __future__ import annotations

import asyncio
import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional

import requests

from code_translator.config import Settings, load_settings
from code_translator.models.session_models import AuthUser


logger = logging.getLogger(__name__)

AuthListener = Callable[[str, Optional[AuthUser]], None]

SIGNED_IN = "SIGNED_IN"
SIGNED_OUT = "SIGNED_OUT"
TOKEN_REFRESHED = "TOKEN_REFRESHED"
USER_UPDATED = "USER_UPDATED"
INITIAL_SESSION = "INITIAL_SESSION"

TOKEN_EVENTS = {SIGNED_IN, TOKEN_REFRESHED, USER_UPDATED, INITIAL_SESSION}


class AuthError(RuntimeError):
    pass


@dataclass(frozen=True)
class AuthSession:
    user: AuthUser
    access_token: str


class Subscription:
    def __init__(self, provider: "AuthProvider", listener: AuthListener):
        self._provider = provider
        self._listener = listener
        self.active = True

    def unsubscribe(self) -> None:
        if self.active:
            self._provider._remove_listener(self._listener)
            self.active = False


class AuthProvider:
    """
    Capability handed to a session: fetch the current session, subscribe to
    session-change pushes, sign out. Subclasses implement the backend calls and
    call _notify() whenever the session changes.
    """

    def __init__(self):
        self._listeners: List[AuthListener] = []
        self._listeners_lock = threading.Lock()

    def get_session(self) -> Optional[AuthSession]:
        raise NotImplementedError

    def sign_out(self) -> None:
        raise NotImplementedError

    def handle_auth_event(self, event: str, access_token: Optional[str] = None) -> None:
        """Accepts a session change reported by the browser-side auth widget."""
        raise NotImplementedError

    def on_auth_state_change(self, listener: AuthListener) -> Subscription:
        with self._listeners_lock:
            self._listeners.append(listener)
        return Subscription(self, listener)

    def _remove_listener(self, listener: AuthListener) -> None:
        with self._listeners_lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def _notify(self, event: str, session: Optional[AuthSession]) -> None:
        with self._listeners_lock:
            listeners = list(self._listeners)
        user = session.user if session else None
        for listener in listeners:
            listener(event, user)


class SupabaseAuthProvider(AuthProvider):
    def __init__(self, settings: Optional[Settings] = None, access_token: Optional[str] = None):
        super().__init__()
        self._initial_settings = settings
        self._access_token = access_token or None
        self._session: Optional[AuthSession] = None
        self._lock = threading.Lock()

    @property
    def settings(self) -> Settings:
        return self._initial_settings or load_settings()

    @property
    def configured(self) -> bool:
        return bool(self.settings.resolve_auth_url() and self.settings.resolve_auth_key())

    def _get_headers(self, access_token: Optional[str] = None) -> Dict[str, str]:
        key = self.settings.resolve_auth_key()
        if not key:
            raise AuthError("Auth provider is not configured. Set SUPABASE_URL and SUPABASE_ANON_KEY")
        headers = {"apikey": key, "Content-Type": "application/json"}
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"
        return headers

    def _url(self, path: str) -> str:
        base = self.settings.resolve_auth_url()
        if not base:
            raise AuthError("Auth provider is not configured. Set SUPABASE_URL and SUPABASE_ANON_KEY")
        return f"{base}/auth/v1/{path}"

    def fetch_user(self, access_token: str) -> Optional[AuthUser]:
        """Resolves an access token to its user; None when the provider rejects the token."""
        try:
            response = requests.get(
                self._url("user"),
                headers=self._get_headers(access_token),
                timeout=self.settings.request_timeout,
            )
        except requests.RequestException as e:
            raise AuthError(f"Auth provider unreachable: {e}") from e
        if response.status_code in (401, 403):
            return None
        if response.status_code != 200:
            raise AuthError(f"Auth provider error {response.status_code}: {response.text}")
        try:
            return AuthUser.from_payload(response.json())
        except ValueError as e:
            raise AuthError(f"Malformed auth provider response: {e}") from e

    def get_session(self) -> Optional[AuthSession]:
        with self._lock:
            if self._session is not None:
                return self._session
            token = self._access_token
        if not token or not self.configured:
            return None
        user = self.fetch_user(token)
        with self._lock:
            if user is None:
                self._access_token = None
                return None
            self._session = AuthSession(user=user, access_token=token)
            return self._session

    def handle_auth_event(self, event: str, access_token: Optional[str] = None) -> None:
        if event == SIGNED_OUT or (event in TOKEN_EVENTS and not access_token):
            self._clear()
            self._notify(SIGNED_OUT, None)
            return
        if event not in TOKEN_EVENTS:
            raise AuthError(f"Unsupported auth event: {event}")
        user = self.fetch_user(access_token)
        if user is None:
            self._clear()
            self._notify(SIGNED_OUT, None)
            return
        session = AuthSession(user=user, access_token=access_token)
        with self._lock:
            self._access_token = access_token
            self._session = session
        self._notify(event, session)

    def sign_out(self) -> None:
        with self._lock:
            token = self._access_token
        if token:
            try:
                response = requests.post(
                    self._url("logout"),
                    headers=self._get_headers(token),
                    timeout=self.settings.request_timeout,
                )
            except requests.RequestException as e:
                raise AuthError(f"Auth provider unreachable: {e}") from e
            # an already expired token is as good as signed out
            if response.status_code not in (200, 204, 401, 403):
                raise AuthError(f"Sign out failed {response.status_code}: {response.text}")
        self._clear()
        self._notify(SIGNED_OUT, None)

    def _clear(self) -> None:
        with self._lock:
            self._access_token = None
            self._session = None


class AuthStatus(str, Enum):
    UNKNOWN = "unknown"
    ANONYMOUS = "anonymous"
    AUTHENTICATED = "authenticated"


class AuthStateMirror:
    """
    Local cache of the provider's session.

    start() fetches the session once and subscribes; every provider push
    replaces the cached user. Pushes coming from worker threads are marshalled
    onto the mirror's event loop so listeners always run on the loop thread.
    """

    def __init__(self, provider: AuthProvider, loop: Optional[asyncio.AbstractEventLoop] = None):
        self.provider = provider
        self.status = AuthStatus.UNKNOWN
        self.user: Optional[AuthUser] = None
        self._loop = loop
        self._subscription: Optional[Subscription] = None
        self._listeners: List[Callable[[Optional[AuthUser]], None]] = []

    @property
    def authenticated(self) -> bool:
        return self.status == AuthStatus.AUTHENTICATED

    def add_listener(self, listener: Callable[[Optional[AuthUser]], None]) -> None:
        self._listeners.append(listener)

    async def start(self) -> None:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        self._subscription = self.provider.on_auth_state_change(self._on_provider_change)
        try:
            session = await asyncio.to_thread(self.provider.get_session)
        except AuthError as e:
            logger.warning(f"Initial session fetch failed: {e}")
            session = None
        # a push that arrived during the fetch wins over the fetched session
        if self.status == AuthStatus.UNKNOWN:
            self._apply(session.user if session else None)

    def stop(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    async def sign_out(self) -> None:
        await asyncio.to_thread(self.provider.sign_out)

    def _on_provider_change(self, event: str, user: Optional[AuthUser]) -> None:
        logger.info(f"Auth state change: {event}")
        loop = self._loop
        if loop is None or loop.is_closed():
            self._apply(user)
            return
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is loop:
            self._apply(user)
        else:
            loop.call_soon_threadsafe(self._apply, user)

    def _apply(self, user: Optional[AuthUser]) -> None:
        self.user = user
        self.status = AuthStatus.AUTHENTICATED if user else AuthStatus.ANONYMOUS
        for listener in list(self._listeners):
            listener(user)
