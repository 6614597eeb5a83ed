"""
Pull a JSON object out of free-text model output.

Model replies are not guaranteed to be bare JSON: they may be wrapped in
prose or markdown fences. Strategies run from most to least precise:

1. the whole reply as bare JSON (fence text inside string values stays intact)
2. a fenced code block (```json ... ``` or ``` ... ```)
3. the first top-level balanced ``{...}`` span
4. a greedy match from the first ``{`` to the last ``}``
"""
import json
import logging
import re
from typing import Any, Dict, Optional

from ats_portal.llm.errors import ExtractionError

logger = logging.getLogger(__name__)

FENCED_BLOCK_RE = re.compile(r"```(?:json|JSON)?\s*(.*?)\s*```", re.DOTALL)
GREEDY_OBJECT_RE = re.compile(r"\{.*\}", re.DOTALL)


def _load_object(candidate: Optional[str]) -> Optional[Dict[str, Any]]:
    if not candidate:
        return None
    try:
        value = json.loads(candidate)
    except (json.JSONDecodeError, ValueError):
        return None
    return value if isinstance(value, dict) else None


def _from_fenced_block(text: str) -> Optional[Dict[str, Any]]:
    for match in FENCED_BLOCK_RE.finditer(text):
        parsed = _load_object(match.group(1))
        if parsed is not None:
            return parsed
    return None


def find_balanced_object(text: str) -> Optional[str]:
    """
    Return the first top-level balanced ``{...}`` substring, or None.
    
    Braces inside JSON string literals are ignored once inside the object.
    """
    depth = 0
    start = -1
    in_string = False
    escaped = False

    for index, char in enumerate(text):
        if depth > 0 and in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue

        if char == '"' and depth > 0:
            in_string = True
        elif char == "{":
            if depth == 0:
                start = index
            depth += 1
        elif char == "}" and depth > 0:
            depth -= 1
            if depth == 0:
                return text[start:index + 1]

    return None


def _from_balanced_span(text: str) -> Optional[Dict[str, Any]]:
    # A span that is not JSON (e.g. "{name}" in prose) moves the scan past its opening brace
    offset = 0
    while True:
        candidate = find_balanced_object(text[offset:])
        if candidate is None:
            return None
        parsed = _load_object(candidate)
        if parsed is not None:
            return parsed
        offset = text.index(candidate, offset) + 1


def _from_greedy_match(text: str) -> Optional[Dict[str, Any]]:
    match = GREEDY_OBJECT_RE.search(text)
    return _load_object(match.group(0)) if match else None


def _from_bare_text(text: str) -> Optional[Dict[str, Any]]:
    return _load_object(text.strip())


STRATEGIES = (
    ("bare_json", _from_bare_text),
    ("fenced_block", _from_fenced_block),
    ("balanced_span", _from_balanced_span),
    ("greedy_match", _from_greedy_match),
)


def extract_json(raw_text: str) -> Dict[str, Any]:
    """
    Extract the first well-formed JSON object from model output.
    
    Raises:
        ExtractionError: if no strategy yields a JSON object
    """
    if not raw_text or not isinstance(raw_text, str):
        raise ExtractionError("Empty AI response")

    for name, strategy in STRATEGIES:
        parsed = strategy(raw_text)
        if parsed is not None:
            logger.debug(f"JSON extracted from AI response via {name}")
            return parsed

    raise ExtractionError(f"No valid JSON object found in AI response: {raw_text[:100]!r}")
