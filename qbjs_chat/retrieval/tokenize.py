# Role: Shared text utilities for retrieval. Lower-cases and splits text into word tokens, and turns a free-text
# request into search terms by dropping function words and task-framing verbs ("draw", "generate", ...).

from __future__ import annotations

import re
from typing import List

_TOKEN_RE = re.compile(r"\w+")

# Function words plus the verbs people use to frame a request; neither says anything about WHAT to draw.
STOPWORDS = frozenset(
    {
        "a",
        "an",
        "the",
        "and",
        "or",
        "but",
        "if",
        "of",
        "to",
        "in",
        "on",
        "at",
        "by",
        "for",
        "from",
        "with",
        "into",
        "about",
        "as",
        "is",
        "are",
        "was",
        "were",
        "be",
        "been",
        "it",
        "its",
        "this",
        "that",
        "these",
        "those",
        "some",
        "any",
        "i",
        "me",
        "my",
        "we",
        "us",
        "our",
        "you",
        "your",
        "can",
        "could",
        "would",
        "should",
        "will",
        "please",
        "want",
        "need",
        "like",
        "how",
        "what",
        "which",
        "using",
        "use",
        "generate",
        "create",
        "make",
        "show",
        "draw",
        "display",
        "code",
        "program",
    }
)


def tokenize(text: str) -> List[str]:
    return _TOKEN_RE.findall((text or "").lower())


def normalize_phrase(text: str) -> str:
    # Key line: whitespace/case-insensitive form used for "description equals query" checks.
    return " ".join((text or "").lower().split())


def search_terms(query: str) -> List[str]:
    """
    Turn a request into de-duplicated search terms.

    1) Drop one-character tokens and stop words.
    2) If nothing survives, search with the whole unfiltered request instead
       (a non-empty request never becomes an empty search).
    """
    tokens = tokenize(query)
    terms = [t for t in tokens if len(t) > 1 and t not in STOPWORDS]

    if not terms:
        terms = tokens
    if not terms:
        phrase = normalize_phrase(query)
        terms = [phrase] if phrase else []

    return list(dict.fromkeys(terms))
