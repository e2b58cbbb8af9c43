# Role: In-memory transcript store. Owns the per-session list of ChatMessage entries:
# create/get by session_id, append messages, enforce bounded history, and cleanup expired sessions.

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Dict, List

from qbjs_chat.models.message import ChatMessage, ChatRole


@dataclass
class Transcript:
    session_id: str
    messages: List[ChatMessage] = field(default_factory=list)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class TranscriptStore:
    def __init__(self, max_messages: int = 40, session_ttl_minutes: int = 60) -> None:
        self._transcripts: Dict[str, Transcript] = {}
        self._max_messages = max(2, max_messages)
        self._ttl = timedelta(minutes=session_ttl_minutes)
        self._lock = threading.Lock()

    def get_or_create(self, session_id: str) -> Transcript:
        # Reuse existing transcript or initialize a fresh one.
        with self._lock:
            transcript = self._transcripts.get(session_id)
            if transcript is None:
                transcript = Transcript(session_id=session_id)
                self._transcripts[session_id] = transcript
            return transcript

    def messages(self, session_id: str) -> List[ChatMessage]:
        # Key line: callers get a snapshot; later appends don't leak into a prompt being built.
        return list(self.get_or_create(session_id).messages)

    def add_message(self, session_id: str, role: ChatRole, text: str) -> ChatMessage:
        # 1) Append message
        # 2) Update last-seen timestamp
        # 3) Trim to last N messages (keeps prompts small + bounded memory)
        transcript = self.get_or_create(session_id)
        message = ChatMessage(role=role, text=text)
        with self._lock:
            transcript.messages.append(message)
            transcript.updated_at = datetime.now(timezone.utc)
            if len(transcript.messages) > self._max_messages:
                transcript.messages = transcript.messages[-self._max_messages :]
        return message

    def clear(self, session_id: str) -> None:
        with self._lock:
            self._transcripts.pop(session_id, None)

    def cleanup_expired(self) -> int:
        # Role: drop inactive sessions to avoid unbounded growth (best for long-running servers).
        now = datetime.now(timezone.utc)
        with self._lock:
            to_delete = [sid for sid, t in self._transcripts.items() if (now - t.updated_at) > self._ttl]
            for sid in to_delete:
                del self._transcripts[sid]
        return len(to_delete)
