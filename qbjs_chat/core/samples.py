# Role: Loads the few-shot corpus once per process. Accepts {description, code} records and the legacy
# {input, output} naming; a missing/broken file yields an empty corpus (the assistant still works, just
# without demonstrations).

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Any, List, Tuple, Union

import qbjs_chat.config as config
from qbjs_chat.models.example import Example


def parse_samples(payload: Any) -> Tuple[Example, ...]:
    if not isinstance(payload, list):
        return ()

    out: List[Example] = []
    for record in payload:
        if not isinstance(record, dict):
            continue
        out.append(Example.from_record(record))
    return tuple(out)


@lru_cache(maxsize=8)
def _load_cached(path: str) -> Tuple[Example, ...]:
    p = Path(path)
    try:
        payload = json.loads(p.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        if config.DEBUG:
            print(f"WARNING: could not load few-shot samples from {p}: {e}")
        return ()

    samples = parse_samples(payload)
    if config.DEBUG:
        print(f"Loaded {len(samples)} few-shot samples from {p}")
    return samples


def load_samples(path: Union[str, Path, None] = None) -> Tuple[Example, ...]:
    # Key line: the same tuple object comes back for the same path, so the ranker's index cache stays warm.
    target = Path(path) if path is not None else config.DEFAULT_SAMPLES_PATH
    return _load_cached(str(target.resolve()))
