# Role: Ranks few-shot examples against a free-text request. Typo-tolerant (one edit per token) matching over
# descriptions, BM25-style term weighting with a coverage boost, duplicate collapsing, deterministic ordering.

from __future__ import annotations

import math
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from rapidfuzz import process
from rapidfuzz.distance import Levenshtein

import qbjs_chat.config as config
from qbjs_chat.models.example import Example, ScoredExample
from qbjs_chat.retrieval.index import ExampleIndex, IndexCache, build_index
from qbjs_chat.retrieval.tokenize import normalize_phrase, search_terms

DEFAULT_LIMIT = 12

MAX_EDITS = 1
EXACT_WEIGHT = 1.0
FUZZY_WEIGHT = 0.5

# BM25 constants
K1 = 1.2
B = 0.75

IndexProvider = Callable[[Sequence[Example]], ExampleIndex]


def _term_variants(term: str, index: ExampleIndex) -> Dict[str, float]:
    # Vocabulary terms within MAX_EDITS of the query term, mapped to their match weight.
    variants: Dict[str, float] = {}
    for choice, distance, _ in process.extract(
        term,
        index.vocabulary,
        scorer=Levenshtein.distance,
        score_cutoff=MAX_EDITS,
        limit=None,
    ):
        variants[choice] = EXACT_WEIGHT if distance == 0 else FUZZY_WEIGHT
    return variants


def _idf(matching_docs: int, total_docs: int) -> float:
    return math.log(1.0 + (total_docs - matching_docs + 0.5) / (matching_docs + 0.5))


def _score_positions(terms: Sequence[str], index: ExampleIndex) -> Dict[int, float]:
    # 1) Per term: find exact + fuzzy vocabulary variants and which docs contain them
    # 2) Per doc: best variant wins (a term counts once per doc), weighted by BM25 tf/length and term idf
    # 3) Multiply by (1 + coverage) so docs matching more of the request float up
    if not terms or not index.examples:
        return {}

    total_docs = len(index)
    avg_len = index.avg_doc_length or 1.0
    totals: Dict[int, float] = {}
    matched_terms: Dict[int, int] = {}

    for term in terms:
        variants = _term_variants(term, index)
        if not variants:
            continue

        per_doc: Dict[int, float] = {}
        for pos, counts in enumerate(index.term_counts):
            best = 0.0
            for variant, weight in variants.items():
                tf = counts.get(variant, 0)
                if not tf:
                    continue
                norm = K1 * (1.0 - B + B * index.doc_lengths[pos] / avg_len)
                best = max(best, weight * tf * (K1 + 1.0) / (tf + norm))
            if best > 0.0:
                per_doc[pos] = best

        # Key line: one idf per query term, so an exact hit never scores below a fuzzy hit of the same term.
        idf = _idf(len(per_doc), total_docs)
        for pos, part in per_doc.items():
            totals[pos] = totals.get(pos, 0.0) + idf * part
            matched_terms[pos] = matched_terms.get(pos, 0) + 1

    scores: Dict[int, float] = {}
    for pos, total in totals.items():
        coverage = matched_terms[pos] / len(terms)
        scores[pos] = total * (1.0 + coverage)
    return scores


def _corpus_lookup(corpus: Sequence[Example]) -> Dict[Tuple[str, str], Tuple[int, Example]]:
    # identity -> (first position, object) in the caller's corpus
    lookup: Dict[Tuple[str, str], Tuple[int, Example]] = {}
    for pos, ex in enumerate(corpus):
        lookup.setdefault(ex.identity, (pos, ex))
    return lookup


def _merge_duplicates(
    candidates: Sequence[Tuple[int, float]],
    index: ExampleIndex,
    lookup: Dict[Tuple[str, str], Tuple[int, Example]],
) -> Dict[int, Tuple[Example, float]]:
    # Resolve each candidate against the caller's corpus; duplicates add up on the first occurrence.
    # Candidates with no counterpart in the corpus (stale cached index) are dropped.
    merged: Dict[int, Tuple[Example, float]] = {}
    for pos, score in candidates:
        resolved = lookup.get(index.examples[pos].identity)
        if resolved is None:
            continue
        first, example = resolved
        _, previous = merged.get(first, (example, 0.0))
        merged[first] = (example, previous + score)
    return merged


def rank_scored(
    query: str,
    corpus: Sequence[Example],
    limit: int = DEFAULT_LIMIT,
    *,
    index_provider: Optional[IndexProvider] = None,
) -> List[ScoredExample]:
    """
    Rank corpus examples for a request, returning at most `limit` scored, de-duplicated examples.

    Empty request or empty corpus: the first `limit` examples in corpus order (score 0.0, no scoring).
    Otherwise only examples whose description matches at least one search term are returned.
    Returned objects always come from `corpus` itself.
    """
    limit = max(0, int(limit))

    if not (query or "").strip() or not corpus:
        return [ScoredExample(example=ex, score=0.0) for ex in list(corpus)[:limit]]

    if limit == 0:
        return []

    index = (index_provider or build_index)(corpus)
    terms = search_terms(query)
    scores = _score_positions(terms, index)
    query_phrase = normalize_phrase(query)

    # Key line: exact-description matches sort ahead before the superset cut, so they can never be cut off.
    # Superset before de-dup so collapsed duplicates don't leave the result short.
    candidates = sorted(
        scores.items(),
        key=lambda item: (index.phrases[item[0]] != query_phrase, -item[1], item[0]),
    )[: 2 * limit]
    merged = _merge_duplicates(candidates, index, _corpus_lookup(corpus))

    ordered = sorted(
        merged.items(),
        key=lambda item: (normalize_phrase(item[1][0].description) != query_phrase, -item[1][1], item[0]),
    )[:limit]

    if config.DEBUG:
        print("\n--- EXAMPLE RANKER ---")
        print("QUERY:", query)
        print("TERMS:", terms)
        print("CANDIDATES:", len(candidates), "AFTER DEDUP:", len(merged))
        for pos, (example, score) in ordered:
            print(f"  {score:.3f}  #{pos}  {example.description[:60]}")
        print("----------------------\n")

    return [ScoredExample(example=example, score=score) for _, (example, score) in ordered]


def rank(query: str, corpus: Sequence[Example], limit: int = DEFAULT_LIMIT) -> List[Example]:
    return [scored.example for scored in rank_scored(query, corpus, limit)]


class ExampleRanker:
    """Ranker bound to an index cache, for callers that rank against the same corpus on every request."""

    def __init__(self, cache: Optional[IndexCache] = None) -> None:
        self.cache = cache or IndexCache()

    def rank_scored(self, query: str, corpus: Sequence[Example], limit: int = DEFAULT_LIMIT) -> List[ScoredExample]:
        return rank_scored(query, corpus, limit, index_provider=self.cache.get)

    def rank(self, query: str, corpus: Sequence[Example], limit: int = DEFAULT_LIMIT) -> List[Example]:
        return [scored.example for scored in self.rank_scored(query, corpus, limit)]
