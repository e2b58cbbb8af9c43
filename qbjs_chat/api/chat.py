# Role: Thin HTTP adapter for the chat endpoint. Validates request/response shapes and delegates the entire
# conversation turn to ChatFlow (business logic lives in core, not in the API layer).

from typing import Optional

from fastapi import APIRouter
from pydantic import BaseModel, field_validator

from qbjs_chat.api.deps import chat_flow

router = APIRouter(tags=["chat"])


class ChatRequest(BaseModel):
    session_id: str
    user_message: str

    @field_validator("user_message")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        # Key line: whitespace-only input is rejected here (422), not deep in the orchestrator.
        value = value.strip()
        if not value:
            raise ValueError("user_message must not be blank")
        return value


class ChatResponse(BaseModel):
    session_id: str
    ok: bool
    code: Optional[str] = None
    error: Optional[str] = None


@router.post("/chat", response_model=ChatResponse)
def chat(req: ChatRequest) -> ChatResponse:
    # 1) Forward (session_id, user_message) to the orchestrator
    # 2) Backend failures come back as ok=False + error (already recorded in the transcript)
    result = chat_flow.handle_turn(req.session_id, req.user_message)
    return ChatResponse(session_id=result.session_id, ok=result.ok, code=result.code, error=result.error)
