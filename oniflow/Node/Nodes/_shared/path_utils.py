"""
Deep path resolution for node payloads: "data.id", "items[0].name".
"""

import math
import re
from typing import Any, List

_SEGMENT_SPLIT = re.compile(r"\.|\[(\d+)\]")
_INDEX = re.compile(r"^\d+$")
LENGTH = "length"


def split_path(path: str) -> List[str]:
    return [part for part in _SEGMENT_SPLIT.split(path) if part]


def resolve_path(value: Any, path: str) -> Any:
    """
    Walk value along a dot/bracket path.

    Segments read dict keys, numeric segments also index lists, and
    "length" on a list or string gives its size. A None cursor, a missing
    key or an index on a non-list yields None. An empty path returns value
    unchanged.
    """
    if not path or value is None:
        return value
    cursor = value
    for part in split_path(path):
        if cursor is None:
            return None
        if isinstance(cursor, dict):
            cursor = cursor.get(part)
        elif isinstance(cursor, (list, tuple)) and _INDEX.match(part):
            index = int(part)
            cursor = cursor[index] if index < len(cursor) else None
        elif isinstance(cursor, (list, tuple, str)) and part == LENGTH:
            cursor = len(cursor)
        else:
            cursor = None
    return cursor


def is_falsy_scalar(value: Any) -> bool:
    """None, False, zero, NaN or "". Containers never count, even empty ones."""
    if value is None:
        return True
    if isinstance(value, (dict, list, tuple)):
        return False
    if isinstance(value, float) and math.isnan(value):
        return True
    return value in (False, 0, "")
