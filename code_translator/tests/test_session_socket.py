import unittest
from unittest.mock import patch

from fastapi.testclient import TestClient

from code_translator.main import app
from fakes import FakeAuthProvider, make_settings


class TestSessionSocket(unittest.TestCase):
    def setUp(self):
        self.client = TestClient(app)
        self.provider = FakeAuthProvider()
        p1 = patch("code_translator.controllers.session_controller.get_auth_provider", return_value=self.provider)
        p2 = patch("code_translator.services.session_service.load_settings", return_value=make_settings(debounce_ms=1000))
        p1.start()
        p2.start()
        self.addCleanup(p1.stop)
        self.addCleanup(p2.stop)

    def test_initial_state_and_controls(self):
        with self.client.websocket_connect("/ws/session") as ws:
            state = ws.receive_json()
            self.assertEqual(state["type"], "state")
            self.assertEqual(state["auth_status"], "anonymous")
            self.assertFalse(state["is_auth_modal_open"])

            ws.send_json({"type": "open_sign_in"})
            self.assertTrue(ws.receive_json()["is_auth_modal_open"])

            ws.send_json({"type": "set_target_language", "value": "rust"})
            self.assertEqual(ws.receive_json()["target_language"], {"name": "Rust", "value": "rust"})

            ws.send_json({"type": "edit", "text": "   "})
            state = ws.receive_json()
            self.assertEqual(state["source_code"], "   ")
            self.assertEqual(state["translated_code"], "")

        self.assertEqual(self.provider.listener_count, 0)

    def test_malformed_messages_keep_socket_open(self):
        with self.client.websocket_connect("/ws/session") as ws:
            ws.receive_json()
            ws.send_text("{not json")
            toast = ws.receive_json()
            self.assertEqual(toast, {"type": "toast", "level": "error", "message": "Unsupported message"})

            ws.send_json({"type": "explode"})
            self.assertEqual(ws.receive_json()["type"], "toast")

            ws.send_json({"type": "close_sign_in"})
            self.assertEqual(ws.receive_json()["type"], "state")

    def test_auth_push_updates_state(self):
        with self.client.websocket_connect("/ws/session") as ws:
            ws.receive_json()
            ws.send_json({"type": "auth", "event": "SIGNED_IN", "access_token": "tok"})
            state = ws.receive_json()
            self.assertEqual(state["auth_status"], "authenticated")
            self.assertEqual(state["user"]["email"], "dev@example.com")


if __name__ == "__main__":
    unittest.main()
