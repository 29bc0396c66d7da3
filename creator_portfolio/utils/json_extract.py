from __future__ import annotations

"""Tolerant JSON extraction for free-text model output."""

import json
import logging
import re
from typing import Any, Optional

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```(?:json|JSON)?\s*\n?(.*?)\n?```", re.DOTALL)

_BRACKETS = {
    dict: ("{", "}"),
    list: ("[", "]"),
}


def strip_code_fences(text: str) -> str:
    """Return the body of the first markdown code fence, or the text unchanged."""
    match = _FENCE_RE.search(text)
    if match:
        return match.group(1).strip()
    return text.strip()


def _try_parse(text: str) -> Optional[Any]:
    try:
        return json.loads(text)
    except (json.JSONDecodeError, TypeError, ValueError):
        return None


def extract_json(text: Optional[str], expect: type = dict) -> Optional[Any]:
    """Pull a JSON object (or array) out of model output.

    Attempts in order: strict parse, parse of the fenced block, parse of the
    substring between the first opening and the last closing bracket. Returns
    None when nothing of the expected type can be recovered.
    """
    if expect not in _BRACKETS:
        raise ValueError(f"expect must be dict or list, got {expect!r}")
    if not text:
        return None

    candidates = [text.strip(), strip_code_fences(text)]

    opening, closing = _BRACKETS[expect]
    start = text.find(opening)
    end = text.rfind(closing)
    if start != -1 and end > start:
        candidates.append(text[start:end + 1])

    for candidate in candidates:
        data = _try_parse(candidate)
        if isinstance(data, expect):
            return data

    logger.debug(f"No JSON {expect.__name__} found in model output: {text[:200]!r}")
    return None
