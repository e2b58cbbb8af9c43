# Role: Transcript endpoints for the UI: read the current session history or clear it.
# Does NOT change any flow logic.

from typing import List

from fastapi import APIRouter
from pydantic import BaseModel

from qbjs_chat.api.deps import chat_flow
from qbjs_chat.models.message import ChatMessage

router = APIRouter(tags=["sessions"])


class TranscriptSnapshot(BaseModel):
    session_id: str
    messages: List[ChatMessage]


@router.get("/sessions/{session_id}/messages", response_model=TranscriptSnapshot)
def get_messages(session_id: str) -> TranscriptSnapshot:
    return TranscriptSnapshot(session_id=session_id, messages=chat_flow.transcripts.messages(session_id))


@router.delete("/sessions/{session_id}")
def clear_session(session_id: str) -> dict:
    chat_flow.transcripts.clear(session_id)
    return {"session_id": session_id, "cleared": True}
