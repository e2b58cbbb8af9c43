# Role: Read-only view of example retrieval, for checking which demonstrations a request would pull in.

from typing import List

from fastapi import APIRouter, Query
from pydantic import BaseModel

from qbjs_chat.api.deps import chat_flow

router = APIRouter(tags=["examples"])


class RankedExample(BaseModel):
    description: str
    code: str
    score: float


@router.get("/examples", response_model=List[RankedExample])
def search_examples(
    q: str = Query(default=""),
    limit: int = Query(default=12, ge=0, le=100),
) -> List[RankedExample]:
    ranked = chat_flow.search_examples(q, limit)
    return [
        RankedExample(description=s.example.description, code=s.example.code, score=s.score)
        for s in ranked
    ]
