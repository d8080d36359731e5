"""
Log-safe truncation for node payloads (trigger input, node output, HTTP bodies).
Converts to string, trims if too long; on failure returns a placeholder.
No dependency on Node or Workflow to avoid circular imports.
"""

import json
from typing import Any, Optional

PLACEHOLDER = "<unserializable>"
ELLIPSIS = "…"

# Execution log previews shown next to each node step
SUMMARY_STRING_LIMIT = 120
SUMMARY_JSON_LIMIT = 200


def to_json(data: Any) -> str:
    """Compact JSON with the same separators a browser's JSON.stringify produces."""
    return json.dumps(data, separators=(",", ":"), ensure_ascii=False, default=str)


def _trim(s: str, max_string_len: int, words_around: int) -> str:
    if len(s) <= max_string_len:
        return s
    words = s.split()
    first = " ".join(words[:words_around]) if words else ""
    last = " ".join(words[-words_around:]) if words else ""
    result = f"{first}...<len={len(s)}>...{last}"
    # Minified JSON has no spaces, so the word trim keeps everything; fall back to char trim
    if len(result) > max_string_len:
        suffix = f"...<len={len(s)}>..."
        half = max(0, (max_string_len - len(suffix)) // 2)
        result = f"{s[:half]}{suffix}{s[-half:]}"
    return result


def log_safe_output(
    data: Any,
    max_string_len: int = 500,
    words_around: int = 20,
) -> str:
    """
    Produce a log-safe string: trim long strings, or try to stringify then trim.
    On conversion failure returns a fixed placeholder. Does not mutate the original.
    """
    if isinstance(data, str):
        return _trim(data, max_string_len, words_around)

    try:
        if isinstance(data, (dict, list)):
            s = json.dumps(data)
        else:
            s = str(data)
        return _trim(s, max_string_len, words_around)
    except Exception:
        return PLACEHOLDER


def summarize(data: Any) -> Optional[str]:
    """
    Short preview of a node payload for execution log entries.

    Strings are cut at 120 characters, anything else is serialized to JSON
    and cut at 200 characters. None stays None.
    """
    if data is None:
        return None
    if isinstance(data, str):
        if len(data) > SUMMARY_STRING_LIMIT:
            return data[:SUMMARY_STRING_LIMIT] + ELLIPSIS
        return data
    try:
        s = to_json(data)
    except (TypeError, ValueError):
        return str(data)
    if len(s) > SUMMARY_JSON_LIMIT:
        return s[:SUMMARY_JSON_LIMIT] + ELLIPSIS
    return s
