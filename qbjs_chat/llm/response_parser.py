# Role: Enforces the reply contract: a single JSON object with a string "code" field. Repairs the common
# violations (code fences, chatter around the object) before giving up with BackendContractError.

from __future__ import annotations

import json
import re
from typing import Any, Dict, Optional, Tuple

import qbjs_chat.config as config
from qbjs_chat.llm.errors import BackendContractError


def _strip_code_fences(text: str) -> str:
    # Role: remove markdown fences if model incorrectly wrapped JSON.
    if not text:
        return ""
    t = text.strip()

    if t.startswith("```"):
        t = re.sub(r"^\s*```(?:json)?\s*", "", t, flags=re.IGNORECASE)
        t = re.sub(r"\s*```\s*$", "", t)
    return t.strip()


def try_parse_json(text: str) -> Tuple[Optional[Any], Dict[str, Any]]:
    # 1) strict json.loads
    # 2) strip code fences
    # 3) extract {...} substring as last attempt
    raw = (text or "").strip()

    try:
        return json.loads(raw), {"repaired": False, "method": "strict"}
    except json.JSONDecodeError:
        pass

    cleaned = _strip_code_fences(raw)
    if cleaned != raw:
        try:
            return json.loads(cleaned), {"repaired": True, "method": "stripped_fences"}
        except json.JSONDecodeError:
            pass

    start = cleaned.find("{")
    end = cleaned.rfind("}")
    if start != -1 and end != -1 and end > start:
        candidate = cleaned[start : end + 1]
        try:
            return json.loads(candidate), {"repaired": True, "method": "extracted_braces"}
        except json.JSONDecodeError:
            return None, {"repaired": True, "method": "failed"}

    return None, {"repaired": False, "method": "failed"}


def parse_code_response(raw_text: str) -> str:
    parsed, meta = try_parse_json(raw_text)

    if meta.get("repaired") and config.DEBUG:
        print(f"WARNING: backend returned non-strict JSON (repaired={meta}).")

    if not isinstance(parsed, dict):
        raise BackendContractError("Backend response is not a JSON object.", raw_text=raw_text or "")

    code = parsed.get("code")
    if not isinstance(code, str):
        raise BackendContractError("Backend response is missing a string 'code' field.", raw_text=raw_text or "")

    return code
