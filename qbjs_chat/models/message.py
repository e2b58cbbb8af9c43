# Role: Chat message schemas. ChatMessage is one transcript entry owned by the caller (user request,
# accepted code reply, or error). PromptMessage is one role-tagged unit of the prompt sent to the model.

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, Field

ChatRole = Literal["user", "system", "error"]
PromptRole = Literal["system", "user", "assistant"]


class ChatMessage(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    role: ChatRole
    text: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class PromptMessage(BaseModel):
    role: PromptRole
    content: str
