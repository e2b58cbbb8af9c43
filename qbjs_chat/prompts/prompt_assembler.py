# Role: Packs the system instruction, ranked few-shot examples and recent accepted turns into an ordered list of
# role-tagged prompt messages that stays under a character budget. Examples are trimmed first, then history;
# the system message is never trimmed. Every (user, assistant) pair is kept or dropped as a whole.

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import List, Sequence

import qbjs_chat.config as config
from qbjs_chat.models.example import Example
from qbjs_chat.models.message import ChatMessage, PromptMessage

DEFAULT_HISTORY_PAIRS = 3


@dataclass(frozen=True)
class PromptPair:
    user: str
    assistant: str

    @property
    def size(self) -> int:
        return len(self.user) + len(self.assistant)

    def to_messages(self) -> List[PromptMessage]:
        return [
            PromptMessage(role="user", content=self.user),
            PromptMessage(role="assistant", content=self.assistant),
        ]


def serialize_code(code: str) -> str:
    # Key line: demonstrations use the same {"code": ...} shape the model must reply with.
    return json.dumps({"code": code}, ensure_ascii=False)


def format_example_pairs(examples: Sequence[Example]) -> List[PromptPair]:
    pairs: List[PromptPair] = []
    for ex in examples:
        if not ex.description or not ex.code:
            continue
        pairs.append(PromptPair(user=ex.description, assistant=serialize_code(ex.code)))
    return pairs


def extract_history_pairs(history: Sequence[ChatMessage], max_pairs: int = DEFAULT_HISTORY_PAIRS) -> List[PromptPair]:
    # 1) Walk the transcript looking for user -> system adjacency (a request and its accepted code)
    # 2) Orphan user turns and error entries never form a pair
    # 3) Keep only the most recent max_pairs, oldest first
    if max_pairs <= 0:
        return []

    pairs: List[PromptPair] = []
    i = 0
    while i < len(history) - 1:
        current, following = history[i], history[i + 1]
        if current.role == "user" and following.role == "system":
            pairs.append(PromptPair(user=current.text, assistant=serialize_code(following.text)))
            i += 2
        else:
            i += 1

    return pairs[-max_pairs:]


def _total(pairs: Sequence[PromptPair]) -> int:
    return sum(p.size for p in pairs)


def assemble(
    system_prompt: str,
    ranked_examples: Sequence[Example],
    history: Sequence[ChatMessage],
    size_budget_chars: int,
    max_history_pairs: int = DEFAULT_HISTORY_PAIRS,
) -> List[PromptMessage]:
    """
    Build [system] + [example pairs, rank order] + [history pairs, oldest to newest].

    Budget policy, in order:
    - system content always counts and is always emitted;
    - example pairs are added in rank order while system + examples + history fit,
      stopping at the first pair that doesn't;
    - if system + examples + history still overflows, history shrinks to the newest
      pair, and is dropped if even that overflows.
    """
    example_pairs = format_example_pairs(ranked_examples)
    history_pairs = extract_history_pairs(history, max_history_pairs)
    history_size = _total(history_pairs)

    running = len(system_prompt)
    kept_examples: List[PromptPair] = []
    for pair in example_pairs:
        if running + pair.size + history_size > size_budget_chars:
            break
        kept_examples.append(pair)
        running += pair.size

    if running + history_size > size_budget_chars and history_pairs:
        history_pairs = history_pairs[-1:]
        history_size = _total(history_pairs)
        if running + history_size > size_budget_chars:
            history_pairs = []
            history_size = 0

    if config.DEBUG:
        print("\n--- PROMPT ASSEMBLER ---")
        print("BUDGET:", size_budget_chars, "USED:", running + history_size)
        print("EXAMPLES kept/offered:", len(kept_examples), "/", len(example_pairs))
        print("HISTORY pairs kept:", len(history_pairs))
        print("------------------------\n")

    messages = [PromptMessage(role="system", content=system_prompt)]
    for pair in kept_examples:
        messages.extend(pair.to_messages())
    for pair in history_pairs:
        messages.extend(pair.to_messages())
    return messages
