from __future__ import annotations

from typing import List, Optional, Sequence

import pytest

from qbjs_chat.config import Settings
from qbjs_chat.core.chat_flow import ChatFlow
from qbjs_chat.llm.errors import BackendContractError, BackendUnavailableError
from qbjs_chat.models.example import Example
from qbjs_chat.models.message import PromptMessage


class FakeClient:
    def __init__(self, replies: Optional[List[object]] = None) -> None:
        self.replies = list(replies or ['{"code": "PRINT 1"}'])
        self.calls: List[tuple] = []

    def generate(self, prompt_messages: Sequence[PromptMessage], user_prompt: str) -> str:
        self.calls.append((list(prompt_messages), user_prompt))
        reply = self.replies.pop(0) if len(self.replies) > 1 else self.replies[0]
        if isinstance(reply, Exception):
            raise reply
        return str(reply)


def _flow(client: FakeClient, corpus: List[Example], **overrides) -> ChatFlow:
    settings = Settings(**overrides)
    return ChatFlow(client=client, corpus=corpus, settings=settings)


def test_successful_turn_records_user_and_system(mock_samples: List[Example]) -> None:
    client = FakeClient(['{"code": "SCREEN 12\\nPRINT 1"}'])
    flow = _flow(client, mock_samples)

    result = flow.handle_turn("s1", "  Tetris  ")

    assert result.ok
    assert result.code == "SCREEN 12\nPRINT 1"
    assert result.error is None

    messages = flow.transcripts.messages("s1")
    assert [(m.role, m.text) for m in messages] == [("user", "Tetris"), ("system", "SCREEN 12\nPRINT 1")]

    prompt, user_prompt = client.calls[0]
    assert user_prompt == "Tetris"
    assert prompt[0].role == "system"
    assert prompt[1].content == "Tetris"
    assert prompt[3].content == "For when you think Tetris is too easy"


def test_second_turn_carries_history(mock_samples: List[Example]) -> None:
    client = FakeClient(['{"code": "PRINT 1"}', '{"code": "PRINT 2"}'])
    flow = _flow(client, mock_samples)

    flow.handle_turn("s1", "draw a bouncing ball")
    flow.handle_turn("s1", "make it red")

    prompt, _ = client.calls[1]
    assert prompt[-2].role == "user"
    assert prompt[-2].content == "draw a bouncing ball"
    assert prompt[-1].role == "assistant"
    assert prompt[-1].content == '{"code": "PRINT 1"}'


def test_contract_violation_is_recorded_as_error(mock_samples: List[Example]) -> None:
    client = FakeClient(['{"program": "PRINT 1"}', '{"code": "PRINT 2"}'])
    flow = _flow(client, mock_samples)

    result = flow.handle_turn("s1", "fern")
    assert not result.ok
    assert result.code is None
    assert "unusable" in (result.error or "")
    assert [m.role for m in flow.transcripts.messages("s1")] == ["user", "error"]

    flow.handle_turn("s1", "fern again")
    prompt, _ = client.calls[1]
    # failed turn never becomes a history pair
    assert all(m.content != "fern" for m in prompt)


@pytest.mark.parametrize(
    "error",
    [BackendUnavailableError("network down"), BackendContractError("Gemini returned an empty response.")],
)
def test_backend_errors_do_not_raise(mock_samples: List[Example], error: Exception) -> None:
    flow = _flow(FakeClient([error]), mock_samples)
    result = flow.handle_turn("s1", "lorenz")
    assert not result.ok
    assert result.error
    assert flow.transcripts.messages("s1")[-1].role == "error"


def test_empty_message_is_rejected(mock_samples: List[Example]) -> None:
    flow = _flow(FakeClient(), mock_samples)
    with pytest.raises(ValueError):
        flow.handle_turn("s1", "   ")


def test_prompt_respects_budget_setting(mock_samples: List[Example]) -> None:
    client = FakeClient()
    flow = _flow(client, mock_samples, prompt_budget_chars=10)
    flow.handle_turn("s1", "tetris")
    prompt, _ = client.calls[0]
    assert len(prompt) == 1


def test_search_examples_uses_retrieval_limit(mock_samples: List[Example]) -> None:
    flow = _flow(FakeClient(), mock_samples, retrieval_limit=2)
    assert len(flow.search_examples("")) == 2
    assert [s.example.description for s in flow.search_examples("tetris", 1)] == ["Tetris"]


def test_sessions_are_isolated(mock_samples: List[Example]) -> None:
    flow = _flow(FakeClient(), mock_samples)
    flow.handle_turn("a", "fern")
    assert flow.transcripts.messages("b") == []


def test_missing_api_key_becomes_failed_turn(monkeypatch: pytest.MonkeyPatch, mock_samples: List[Example]) -> None:
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    flow = ChatFlow(client=None, corpus=mock_samples, settings=Settings())

    result = flow.handle_turn("s-key", "Tetris")

    assert not result.ok
    assert result.error.startswith("Code generation failed:")
    assert [m.role for m in flow.transcripts.messages("s-key")] == ["user", "error"]
