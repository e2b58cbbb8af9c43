# Role: Tokenized view of the example corpus (term counts, document frequencies, vocabulary) plus a small
# thread-safe cache that rebuilds it only when the corpus it was built from changes.

from __future__ import annotations

import threading
from collections import Counter
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from qbjs_chat.models.example import Example
from qbjs_chat.retrieval.tokenize import normalize_phrase, tokenize


@dataclass(frozen=True, eq=False)
class ExampleIndex:
    examples: Tuple[Example, ...]
    term_counts: Tuple[Counter, ...]
    doc_lengths: Tuple[int, ...]
    avg_doc_length: float
    doc_freq: Dict[str, int]
    vocabulary: Tuple[str, ...]
    phrases: Tuple[str, ...]

    def __len__(self) -> int:
        return len(self.examples)


def build_index(corpus: Sequence[Example]) -> ExampleIndex:
    # Only descriptions are indexed; code text never participates in matching.
    term_counts: List[Counter] = []
    doc_lengths: List[int] = []
    phrases: List[str] = []
    doc_freq: Counter = Counter()

    for ex in corpus:
        tokens = tokenize(ex.description)
        counts = Counter(tokens)
        term_counts.append(counts)
        doc_lengths.append(len(tokens))
        phrases.append(normalize_phrase(ex.description))
        doc_freq.update(counts.keys())

    avg = (sum(doc_lengths) / len(doc_lengths)) if doc_lengths else 0.0

    return ExampleIndex(
        examples=tuple(corpus),
        term_counts=tuple(term_counts),
        doc_lengths=tuple(doc_lengths),
        avg_doc_length=avg,
        doc_freq=dict(doc_freq),
        vocabulary=tuple(sorted(doc_freq)),
        phrases=tuple(phrases),
    )


@dataclass(frozen=True, eq=False)
class CorpusFingerprint:
    length: int
    first: Optional[Example]
    last: Optional[Example]

    @classmethod
    def of(cls, corpus: Sequence[Example]) -> "CorpusFingerprint":
        if not corpus:
            return cls(length=0, first=None, last=None)
        return cls(length=len(corpus), first=corpus[0], last=corpus[-1])

    def matches(self, other: "CorpusFingerprint") -> bool:
        # Key line: identity checks only (is), never a deep comparison of the corpus.
        return self.length == other.length and self.first is other.first and self.last is other.last


class IndexCache:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._fingerprint: Optional[CorpusFingerprint] = None
        self._index: Optional[ExampleIndex] = None
        self._builds = 0

    def get(self, corpus: Sequence[Example]) -> ExampleIndex:
        # 1) Fingerprint the corpus (length + first/last element identity)
        # 2) Reuse the cached index on a match
        # 3) Otherwise build and swap under the lock so concurrent callers never see a half-built pair
        fingerprint = CorpusFingerprint.of(corpus)
        with self._lock:
            if self._index is not None and self._fingerprint is not None and self._fingerprint.matches(fingerprint):
                return self._index

            index = build_index(corpus)
            self._fingerprint = fingerprint
            self._index = index
            self._builds += 1
            return index

    @property
    def builds(self) -> int:
        """Number of index builds so far (diagnostic; a cache hit does not count)."""
        return self._builds

    def clear(self) -> None:
        with self._lock:
            self._fingerprint = None
            self._index = None
