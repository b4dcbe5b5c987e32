"""
JSON extraction helpers for generator output.

Locates the first balanced JSON object in free-form text and applies
best-effort repairs to common LLM formatting mistakes.
"""

import ast
import json
import logging
import re
from typing import Any

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```(?:json)?[ \t]*", re.IGNORECASE)
_JSON_LABEL_RE = re.compile(r"^\s*json\b\s*", re.IGNORECASE)

# Double-quoted JSON string literal, escapes included.
_STRING_RE = re.compile(r'"(?:\\.|[^"\\])*"', re.DOTALL)


def strip_code_fences(text: str) -> str:
    """
    Remove markdown code fences and a leading ``json`` label.

    Args:
        text: Raw generator output.

    Returns:
        Text without fence markers, stripped of surrounding whitespace.
    """
    cleaned = _FENCE_RE.sub("", text)
    cleaned = _JSON_LABEL_RE.sub("", cleaned)
    return cleaned.strip()


def find_json_object(text: str) -> str | None:
    """
    Locate the first top-level balanced ``{...}`` substring.

    Braces inside string literals and escaped quotes are ignored, so string
    values containing ``{`` or ``}`` do not shift the object boundary.

    Args:
        text: Text that may contain a JSON object.

    Returns:
        The object substring, or None if no balanced object starts at the
        first opening brace.
    """
    start = text.find("{")
    if start == -1:
        return None

    depth = 0
    in_string = False
    quote = ""
    escaped = False

    for i in range(start, len(text)):
        char = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == quote:
                in_string = False
            continue

        if char in ('"', "'") and _opens_string(text, i, char):
            in_string = True
            quote = char
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return text[start : i + 1]

    return None


def _opens_string(text: str, index: int, char: str) -> bool:
    """Decide whether a quote character starts a string literal."""
    if char == '"':
        return True
    # Apostrophes inside bare words ("don't") are not delimiters.
    previous = text[index - 1] if index > 0 else ""
    return not previous.isalnum()


def repair_json(json_str: str) -> str:
    """
    Attempt to fix common JSON issues from LLM output.

    Repairs are applied only outside string literals: curly quotes, trailing
    commas, Python literals and bare object keys. A document using single
    quotes throughout is converted to double quotes first.

    Args:
        json_str: Raw JSON string that may have issues.

    Returns:
        Cleaned JSON string.

    Raises:
        ValueError: If the input is empty or has an unterminated string.
    """
    result = json_str.strip()
    if not result:
        raise ValueError("Nothing to repair")

    # Python dict style output: single quotes only.
    if "'" in result and '"' not in result:
        result = result.replace("'", '"')

    parts: list[str] = []
    position = 0
    for match in _STRING_RE.finditer(result):
        parts.append(_repair_segment(result[position : match.start()]))
        parts.append(match.group(0))
        position = match.end()
    tail = result[position:]
    if '"' in tail:
        raise ValueError("Unterminated string literal")
    parts.append(_repair_segment(tail))

    return "".join(parts)


def _repair_segment(segment: str) -> str:
    """Repair a piece of JSON text known to lie outside string literals."""
    segment = (
        segment.replace("“", '"')
        .replace("”", '"')
        .replace("‘", "'")
        .replace("’", "'")
    )
    segment = re.sub(r",(\s*[}\]])", r"\1", segment)
    segment = re.sub(r"\bNone\b", "null", segment)
    segment = re.sub(r"\bTrue\b", "true", segment)
    segment = re.sub(r"\bFalse\b", "false", segment)
    # Quote bare keys ({foo: "bar"}); only right after { or , so values stay intact.
    return re.sub(
        r"([\{,]\s*)([A-Za-z_][A-Za-z0-9_\-]*)(\s*:)",
        r'\1"\2"\3',
        segment,
    )


def _coerce_to_json_types(obj: Any) -> Any:
    """Coerce a Python object to JSON-safe types.

    Used after the ``ast.literal_eval`` fallback so Python sentinels such as
    ``Ellipsis`` never leak into validation.
    """
    if obj is ...:
        return None
    if obj is None or isinstance(obj, (str, int, float, bool)):
        return obj
    if isinstance(obj, dict):
        return {str(k): _coerce_to_json_types(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple, set)):
        return [_coerce_to_json_types(v) for v in obj]
    return str(obj)


def parse_json_loose(raw: str) -> Any | None:
    """
    Parse JSON with best-effort repair.

    The repaired text is tried first, then the unrepaired text, then a
    Python-literal parse of the unrepaired text.

    Args:
        raw: Candidate JSON text.

    Returns:
        Parsed data, or None when every strategy fails.
    """
    if not raw:
        return None

    try:
        repaired = repair_json(raw)
    except ValueError as e:
        logger.warning(f"JSON repair failed, using unrepaired text: {e}")
        repaired = raw

    # ValueError covers JSONDecodeError and the int digit limit.
    for candidate in dict.fromkeys((repaired, raw)):
        try:
            return json.loads(candidate)
        except (ValueError, RecursionError):
            continue

    try:
        obj = ast.literal_eval(raw.strip())
    except (ValueError, SyntaxError, TypeError, MemoryError, RecursionError):
        return None

    if not isinstance(obj, (dict, list, tuple, set)):
        return None
    try:
        return json.loads(json.dumps(_coerce_to_json_types(obj)))
    except (ValueError, RecursionError):
        return None
