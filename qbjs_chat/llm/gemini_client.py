# Role: Minimal wrapper around the Gemini API. Centralizes model name, temperature, structured-output config and
# error translation, so the rest of the code calls a single method: generate(prompt_messages, user_prompt).

import os
from typing import Any, Dict, List, Optional, Sequence

from google import genai

from qbjs_chat.llm.errors import BackendContractError, BackendUnavailableError
from qbjs_chat.models.message import PromptMessage
from qbjs_chat.prompts.system_prompt import CODE_RESPONSE_SCHEMA

# Prompt roles -> Gemini content roles (system goes to system_instruction instead).
_ROLE_MAP = {"user": "user", "assistant": "model"}


class GeminiClient:
    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        temperature: float = 0.7,
        max_output_tokens: int = 8192,
    ) -> None:
        # Key lines:
        # - Reads secrets from env (no secrets in code).
        # - Model and temperature are configurable for experiments.
        self.api_key = api_key or os.getenv("GEMINI_API_KEY")
        if not self.api_key:
            raise RuntimeError("Missing GEMINI_API_KEY in environment or .env")

        self.model_name = model or os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
        self.temperature = temperature
        self.max_output_tokens = max_output_tokens

        self.client = genai.Client(api_key=self.api_key)

    def _build_request(self, prompt_messages: Sequence[PromptMessage], user_prompt: str) -> Dict[str, Any]:
        system_parts: List[str] = []
        contents: List[Dict[str, Any]] = []

        for msg in prompt_messages:
            if msg.role == "system":
                system_parts.append(msg.content)
                continue
            contents.append({"role": _ROLE_MAP[msg.role], "parts": [{"text": msg.content}]})

        contents.append({"role": "user", "parts": [{"text": user_prompt}]})

        config: Dict[str, Any] = {
            "temperature": self.temperature,
            "max_output_tokens": self.max_output_tokens,
            "response_mime_type": "application/json",
            "response_schema": CODE_RESPONSE_SCHEMA,
        }
        if system_parts:
            config["system_instruction"] = "\n\n".join(system_parts)

        return {"model": self.model_name, "contents": contents, "config": config}

    def generate(self, prompt_messages: Sequence[PromptMessage], user_prompt: str) -> str:
        # 1) Validate prompt
        # 2) Call Gemini with the assembled context + live user turn (one request, no session kept)
        # 3) Validate a response body exists; shape is checked by response_parser
        if not user_prompt or not user_prompt.strip():
            raise ValueError("Prompt must be non-empty.")

        request = self._build_request(prompt_messages, user_prompt.strip())

        try:
            resp = self.client.models.generate_content(**request)
        except Exception as e:
            raise BackendUnavailableError(f"Gemini API call failed: {e}") from e

        text = getattr(resp, "text", None)
        if not text:
            raise BackendContractError("Gemini returned an empty response.")

        return text.strip()
