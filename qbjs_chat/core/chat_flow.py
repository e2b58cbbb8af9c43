# Role: Orchestrator for one conversation turn. It glues together:
# transcript snapshot, example ranking, prompt budgeting, the Gemini call, reply-contract checks, and persistence
# of the turn (accepted code as a "system" entry, failures as an "error" entry).

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

import qbjs_chat.config as config
from qbjs_chat.core.samples import load_samples
from qbjs_chat.core.transcript_store import TranscriptStore
from qbjs_chat.llm.errors import BackendContractError, BackendError, BackendUnavailableError
from qbjs_chat.llm.gemini_client import GeminiClient
from qbjs_chat.llm.response_parser import parse_code_response
from qbjs_chat.models.example import Example, ScoredExample
from qbjs_chat.models.message import PromptMessage
from qbjs_chat.prompts.prompt_assembler import assemble
from qbjs_chat.prompts.system_prompt import build_system_prompt
from qbjs_chat.retrieval.ranker import ExampleRanker


@dataclass(frozen=True)
class TurnResponse:
    session_id: str
    ok: bool
    code: Optional[str] = None
    error: Optional[str] = None


class ChatFlow:
    def __init__(
        self,
        client: Optional[GeminiClient] = None,
        transcripts: Optional[TranscriptStore] = None,
        ranker: Optional[ExampleRanker] = None,
        corpus: Optional[Sequence[Example]] = None,
        settings: Optional[config.Settings] = None,
    ) -> None:
        # Key line: dependencies are injectable for testing/mocking; the client is created lazily so ranking
        # and transcript endpoints work without GEMINI_API_KEY.
        self.settings = settings or config.load_settings()
        self._client = client
        self.transcripts = transcripts or TranscriptStore(
            max_messages=self.settings.max_transcript_messages,
            session_ttl_minutes=self.settings.session_ttl_minutes,
        )
        self.ranker = ranker or ExampleRanker()
        self.corpus: Sequence[Example] = corpus if corpus is not None else load_samples(self.settings.samples_path)

    def _get_client(self) -> GeminiClient:
        if self._client is None:
            try:
                self._client = GeminiClient(model=self.settings.gemini_model, temperature=self.settings.temperature)
            except RuntimeError as e:
                # Missing API key: surfaces as an ordinary failed turn, not a crash.
                raise BackendUnavailableError(str(e)) from e
        return self._client

    def search_examples(self, query: str, limit: Optional[int] = None) -> List[ScoredExample]:
        return self.ranker.rank_scored(query, self.corpus, self.settings.retrieval_limit if limit is None else limit)

    def build_prompt(self, session_id: str, user_message: str) -> List[PromptMessage]:
        # 1) Snapshot the transcript (the current message is not in it yet)
        # 2) Rank examples for this request
        # 3) Pack system + examples + history under the character budget
        history = self.transcripts.messages(session_id)
        ranked = self.ranker.rank(user_message, self.corpus, self.settings.retrieval_limit)
        return assemble(
            build_system_prompt(),
            ranked,
            history,
            self.settings.prompt_budget_chars,
            max_history_pairs=self.settings.history_pairs,
        )

    def handle_turn(self, session_id: str, user_message: str) -> TurnResponse:
        # 1) Build the prompt from the pre-turn transcript
        # 2) Call the backend and enforce the {"code": ...} contract
        # 3) Record user + system(code) on success, user + error(message) on failure
        user_message = (user_message or "").strip()
        if not user_message:
            raise ValueError("user_message must be non-empty.")

        prompt_messages = self.build_prompt(session_id, user_message)

        if config.DEBUG:
            print("\n--- CHAT FLOW ---")
            print("SESSION:", session_id)
            print("USER MESSAGE:", user_message)
            print("PROMPT MESSAGES:", len(prompt_messages))
            print("-----------------\n")

        try:
            raw = self._get_client().generate(prompt_messages, user_message)
            code = parse_code_response(raw)
        except BackendContractError as e:
            if config.DEBUG:
                print("!!! CONTRACT VIOLATION !!!", repr(e), (e.raw_text or "")[:300])
            return self._record_failure(session_id, user_message, f"The model returned an unusable reply: {e}")
        except BackendError as e:
            if config.DEBUG:
                print("!!! BACKEND ERROR !!!", repr(e))
            return self._record_failure(session_id, user_message, f"Code generation failed: {e}")

        self.transcripts.add_message(session_id, role="user", text=user_message)
        self.transcripts.add_message(session_id, role="system", text=code)
        return TurnResponse(session_id=session_id, ok=True, code=code)

    def _record_failure(self, session_id: str, user_message: str, message: str) -> TurnResponse:
        self.transcripts.add_message(session_id, role="user", text=user_message)
        self.transcripts.add_message(session_id, role="error", text=message)
        return TurnResponse(session_id=session_id, ok=False, error=message)
