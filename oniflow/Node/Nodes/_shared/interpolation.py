"""
{{input}} / {{input.path}} placeholders used in node configuration strings.
"""

import re
from typing import Any

from ....log_safe import to_json
from .path_utils import resolve_path

INPUT_PATTERN = re.compile(r"\{\{input(?:\.([^}]+))?\}\}")
WHOLE_INPUT = "{{input}}"


def stringify(value: Any) -> str:
    """Strings verbatim, None as empty text, anything else as compact JSON."""
    if isinstance(value, str):
        return value
    if value is None:
        return ""
    return to_json(value)


def to_display_string(value: Any) -> str:
    """
    Text form used when comparing or showing scalar values:
    None is empty, booleans are lowercase, containers are JSON.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return to_json(value)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def interpolate(template: Any, input: Any) -> Any:
    """
    Replace {{input}} with the stringified input and {{input.path}} with the
    display string of the resolved path. Non-string templates are returned as-is.
    """
    if not template or not isinstance(template, str):
        return template

    def _replace(match: "re.Match[str]") -> str:
        path = match.group(1)
        if not path:
            return stringify(input)
        return to_display_string(resolve_path(input, path))

    return INPUT_PATTERN.sub(_replace, template)


def replace_whole_input(template: str, input: Any) -> str:
    """Replace only the bare {{input}} placeholder."""
    return template.replace(WHOLE_INPUT, stringify(input))
