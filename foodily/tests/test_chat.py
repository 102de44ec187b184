from __future__ import annotations

from unittest.mock import patch

from fastapi.testclient import TestClient

from foodily.app import app
from foodily.chat.models import MAX_TURNS, ConversationState
from foodily.chat.routes import FALLBACK_REPLY

client = TestClient(app)


def _login_user(c):
    c.post("/auth/login", json={"username": "user", "password": "user123"})


class TestConversationState:
    def test_add_exchange(self):
        state = ConversationState()
        state.add_exchange("hi", "hello")
        assert state.as_messages() == [
            {"role": "user", "content": "hi"},
            {"role": "assistant", "content": "hello"},
        ]

    def test_keeps_last_turns_only(self):
        state = ConversationState()
        for i in range(5):
            state.add_exchange(f"q{i}", f"a{i}")
        assert len(state.turns) == MAX_TURNS
        assert state.turns[0].content == "q2"
        assert state.turns[-1].content == "a4"


class TestChatEndpoint:
    def test_requires_login(self):
        c = TestClient(app)
        resp = c.post("/chat", json={"message": "hello"})
        assert resp.status_code == 401

    @patch("foodily.chat.routes.chat_reply", return_value="Try the laksa!")
    def test_answer(self, mock_reply):
        c = TestClient(app)
        _login_user(c)
        resp = c.post("/chat", json={"message": "Something spicy?"})
        assert resp.status_code == 200
        assert resp.json() == {"type": "answer", "message": "Try the laksa!"}
        mock_reply.assert_called_once_with("Something spicy?", [])

    @patch("foodily.chat.routes.chat_reply", return_value=None)
    def test_fallback_when_model_unavailable(self, mock_reply):
        c = TestClient(app)
        _login_user(c)
        resp = c.post("/chat", json={"message": "hello"})
        assert resp.json() == {"type": "fallback", "message": FALLBACK_REPLY}

    def test_empty_message_rejected(self):
        c = TestClient(app)
        _login_user(c)
        assert c.post("/chat", json={"message": ""}).status_code == 422


class TestConversationSession:
    @patch("foodily.chat.routes.chat_reply")
    def test_history_carried_between_turns(self, mock_reply):
        c = TestClient(app)
        _login_user(c)
        mock_reply.return_value = "Noted, you like spicy food."
        c.post("/chat", json={"message": "I love spicy food"})

        mock_reply.return_value = "Go for Sichuan hot pot."
        c.post("/chat", json={"message": "Dinner idea?"})

        history = mock_reply.call_args.args[1]
        assert history == [
            {"role": "user", "content": "I love spicy food"},
            {"role": "assistant", "content": "Noted, you like spicy food."},
        ]

    @patch("foodily.chat.routes.chat_reply")
    def test_fallback_does_not_store_turn(self, mock_reply):
        c = TestClient(app)
        _login_user(c)
        mock_reply.return_value = None
        c.post("/chat", json={"message": "lost message"})

        mock_reply.return_value = "Hi!"
        c.post("/chat", json={"message": "hello"})
        assert mock_reply.call_args.args[1] == []

    @patch("foodily.chat.routes.chat_reply", return_value="Sure.")
    def test_reset_clears_history(self, mock_reply):
        c = TestClient(app)
        _login_user(c)
        c.post("/chat", json={"message": "first"})
        assert c.delete("/chat").json() == {"status": "ok"}

        c.post("/chat", json={"message": "second"})
        assert mock_reply.call_args.args[1] == []
        assert c.get("/auth/me").status_code == 200
