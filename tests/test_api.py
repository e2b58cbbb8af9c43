from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from qbjs_chat.api import deps
from qbjs_chat.main import app


class _StubClient:
    def generate(self, prompt_messages, user_prompt: str) -> str:
        return '{"code": "SCREEN 12\\nPRINT \\"hi\\""}'


@pytest.fixture()
def client(monkeypatch: pytest.MonkeyPatch) -> TestClient:
    monkeypatch.setattr(deps.chat_flow, "_client", _StubClient())
    return TestClient(app)


def test_health(client: TestClient) -> None:
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"
    assert r.json()["examples"] > 0


def test_examples_search(client: TestClient) -> None:
    r = client.get("/examples", params={"q": "fractal", "limit": 3})
    assert r.status_code == 200
    body = r.json()
    assert body[0]["description"] == "Fractal Fern"
    assert body[0]["score"] > 0


def test_chat_then_transcript_then_clear(client: TestClient) -> None:
    r = client.post("/chat", json={"session_id": "api-1", "user_message": "draw a fern"})
    assert r.status_code == 200
    assert r.json() == {"session_id": "api-1", "ok": True, "code": 'SCREEN 12\nPRINT "hi"', "error": None}

    r = client.get("/sessions/api-1/messages")
    assert [m["role"] for m in r.json()["messages"]] == ["user", "system"]

    r = client.delete("/sessions/api-1")
    assert r.json()["cleared"] is True
    assert client.get("/sessions/api-1/messages").json()["messages"] == []


def test_chat_rejects_empty_message(client: TestClient) -> None:
    r = client.post("/chat", json={"session_id": "api-2", "user_message": ""})
    assert r.status_code == 422


def test_chat_rejects_whitespace_only_message(client: TestClient) -> None:
    r = client.post("/chat", json={"session_id": "api-3", "user_message": "   "})
    assert r.status_code == 422


def test_chat_message_is_stripped(client: TestClient) -> None:
    r = client.post("/chat", json={"session_id": "api-4", "user_message": "  draw a fern  "})
    assert r.status_code == 200
    messages = client.get("/sessions/api-4/messages").json()["messages"]
    assert messages[0]["text"] == "draw a fern"


def test_chat_without_api_key_reports_failure(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.setattr(deps.chat_flow, "_client", None)
    client = TestClient(app)

    r = client.post("/chat", json={"session_id": "api-5", "user_message": "draw a fern"})

    assert r.status_code == 200
    body = r.json()
    assert body["ok"] is False
    assert "GEMINI_API_KEY" in body["error"]
    roles = [m["role"] for m in client.get("/sessions/api-5/messages").json()["messages"]]
    assert roles == ["user", "error"]
