import asyncio
import os
import threading
import unittest
from unittest.mock import MagicMock, patch

import requests

from code_translator.config import Settings
from code_translator.models.session_models import AuthUser
from code_translator.services.auth_service import (
    SIGNED_IN,
    SIGNED_OUT,
    AuthError,
    AuthStateMirror,
    AuthStatus,
    SupabaseAuthProvider,
)
from fakes import FakeAuthProvider, clean_env, make_settings


def _response(status_code=200, payload=None):
    resp = MagicMock()
    resp.status_code = status_code
    resp.text = ""
    resp.json.return_value = payload
    return resp


USER_PAYLOAD = {"id": "user-1", "email": "ada@example.com", "aud": "authenticated"}


class TestSupabaseAuthProvider(unittest.TestCase):
    def setUp(self):
        env = patch.dict(os.environ, clean_env(), clear=True)
        env.start()
        self.addCleanup(env.stop)

    @patch("code_translator.services.auth_service.requests.get")
    def test_get_session_verifies_token_once(self, mock_get):
        mock_get.return_value = _response(payload=USER_PAYLOAD)
        provider = SupabaseAuthProvider(settings=make_settings(), access_token="tok")

        session = provider.get_session()
        self.assertEqual(session.user, AuthUser(id="user-1", email="ada@example.com"))
        provider.get_session()

        mock_get.assert_called_once()
        args, kwargs = mock_get.call_args
        self.assertEqual(args[0], "https://auth.example.com/auth/v1/user")
        self.assertEqual(kwargs["headers"]["apikey"], "anon-key")
        self.assertEqual(kwargs["headers"]["Authorization"], "Bearer tok")

    @patch("code_translator.services.auth_service.requests.get")
    def test_rejected_token_is_anonymous(self, mock_get):
        mock_get.return_value = _response(status_code=401)
        provider = SupabaseAuthProvider(settings=make_settings(), access_token="expired")
        self.assertIsNone(provider.get_session())

    def test_no_token_or_not_configured(self):
        self.assertIsNone(SupabaseAuthProvider(settings=make_settings()).get_session())
        unconfigured = SupabaseAuthProvider(settings=Settings(raw={}), access_token="tok")
        self.assertFalse(unconfigured.configured)
        self.assertIsNone(unconfigured.get_session())
        with self.assertRaises(AuthError):
            unconfigured.handle_auth_event(SIGNED_IN, "tok")

    @patch("code_translator.services.auth_service.requests.get")
    def test_sign_in_event_pushes_user(self, mock_get):
        mock_get.return_value = _response(payload=USER_PAYLOAD)
        provider = SupabaseAuthProvider(settings=make_settings())
        events = []
        provider.on_auth_state_change(lambda event, user: events.append((event, user)))

        provider.handle_auth_event(SIGNED_IN, "fresh")

        self.assertEqual(events, [(SIGNED_IN, AuthUser(id="user-1", email="ada@example.com"))])
        self.assertEqual(provider.get_session().access_token, "fresh")

    @patch("code_translator.services.auth_service.requests.get")
    def test_provider_unreachable(self, mock_get):
        mock_get.side_effect = requests.ConnectionError("down")
        provider = SupabaseAuthProvider(settings=make_settings())
        with self.assertRaises(AuthError):
            provider.handle_auth_event(SIGNED_IN, "tok")

    @patch("code_translator.services.auth_service.requests.post")
    @patch("code_translator.services.auth_service.requests.get")
    def test_sign_out(self, mock_get, mock_post):
        mock_get.return_value = _response(payload=USER_PAYLOAD)
        mock_post.return_value = _response(status_code=204)
        provider = SupabaseAuthProvider(settings=make_settings(), access_token="tok")
        provider.get_session()
        events = []
        provider.on_auth_state_change(lambda event, user: events.append((event, user)))

        provider.sign_out()

        self.assertEqual(mock_post.call_args[0][0], "https://auth.example.com/auth/v1/logout")
        self.assertEqual(events, [(SIGNED_OUT, None)])
        self.assertIsNone(provider.get_session())

    @patch("code_translator.services.auth_service.requests.post")
    def test_sign_out_failure_keeps_session(self, mock_post):
        mock_post.return_value = _response(status_code=500)
        provider = SupabaseAuthProvider(settings=make_settings())
        with patch("code_translator.services.auth_service.requests.get", return_value=_response(payload=USER_PAYLOAD)):
            provider.handle_auth_event(SIGNED_IN, "tok")
            with self.assertRaises(AuthError):
                provider.sign_out()
            self.assertIsNotNone(provider.get_session())

    def test_unsubscribe(self):
        provider = FakeAuthProvider()
        events = []
        sub = provider.on_auth_state_change(lambda event, user: events.append(event))
        sub.unsubscribe()
        sub.unsubscribe()
        provider.push(AuthUser(id="x", email="x@example.com"))
        self.assertEqual(events, [])


class TestAuthStateMirror(unittest.IsolatedAsyncioTestCase):
    async def test_start_fetches_once_and_subscribes(self):
        provider = FakeAuthProvider(user=AuthUser(id="u", email="u@example.com"))
        mirror = AuthStateMirror(provider)
        self.assertEqual(mirror.status, AuthStatus.UNKNOWN)

        await mirror.start()

        self.assertEqual(provider.get_session_calls, 1)
        self.assertEqual(mirror.status, AuthStatus.AUTHENTICATED)
        self.assertEqual(mirror.user.email, "u@example.com")
        self.assertEqual(provider.listener_count, 1)

        mirror.stop()
        self.assertEqual(provider.listener_count, 0)

    async def test_push_from_worker_thread_lands_on_loop(self):
        provider = FakeAuthProvider()
        mirror = AuthStateMirror(provider)
        seen = []
        mirror.add_listener(lambda user: seen.append((threading.get_ident(), user)))
        await mirror.start()
        self.assertEqual(mirror.status, AuthStatus.ANONYMOUS)

        await asyncio.to_thread(provider.push, AuthUser(id="u", email="u@example.com"))
        await asyncio.sleep(0)

        self.assertEqual(mirror.status, AuthStatus.AUTHENTICATED)
        self.assertEqual(seen[-1][0], threading.get_ident())

        provider.push(None)
        self.assertEqual(mirror.status, AuthStatus.ANONYMOUS)
        self.assertIsNone(mirror.user)


if __name__ == "__main__":
    unittest.main()
