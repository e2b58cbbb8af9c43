# Role: Central configuration module. Loads .env into environment variables and computes runtime flags (DEBUG).
# Importers read qbjs_chat.config.DEBUG to control debug output without threading flags through every call,
# and load_settings() for the retrieval / prompt-budget knobs.

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

DEBUG: bool = False

DEFAULT_SAMPLES_PATH = Path(__file__).resolve().parent / "data" / "samples.json"


def load_env() -> None:
    """
    Load .env into os.environ, then recompute DEBUG.
    This makes DEBUG correct even if load_env() is called after import.
    """
    global DEBUG
    load_dotenv()
    # Key line: accept common truthy values.
    DEBUG = os.getenv("DEBUG", "0").lower() in {"1", "true", "yes"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw.strip())
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    gemini_model: str = "gemini-2.5-flash"
    temperature: float = 0.7

    samples_path: Path = DEFAULT_SAMPLES_PATH

    # Retrieval + prompt budget
    retrieval_limit: int = 12
    prompt_budget_chars: int = 16000
    history_pairs: int = 3

    # Transcript store
    max_transcript_messages: int = 40
    session_ttl_minutes: int = 60


def load_settings() -> Settings:
    # Role: read tunables from env; bad values fall back to defaults instead of crashing startup.
    samples = os.getenv("QBJS_SAMPLES_PATH", "").strip()
    return Settings(
        gemini_model=os.getenv("GEMINI_MODEL", "").strip() or Settings.gemini_model,
        temperature=_env_float("GEMINI_TEMPERATURE", Settings.temperature),
        samples_path=Path(samples) if samples else DEFAULT_SAMPLES_PATH,
        retrieval_limit=_env_int("QBJS_RETRIEVAL_LIMIT", Settings.retrieval_limit),
        prompt_budget_chars=_env_int("QBJS_PROMPT_BUDGET_CHARS", Settings.prompt_budget_chars),
        history_pairs=_env_int("QBJS_HISTORY_PAIRS", Settings.history_pairs),
        max_transcript_messages=_env_int("QBJS_MAX_TRANSCRIPT_MESSAGES", Settings.max_transcript_messages),
        session_ttl_minutes=_env_int("QBJS_SESSION_TTL_MINUTES", Settings.session_ttl_minutes),
    )
