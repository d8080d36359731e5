"""
Condition Node

Single Responsibility: Evaluate a field of the input against a value and
report a boolean verdict used for branch routing.
"""

import math
from typing import Any, Callable, Dict

import structlog

from ....Core import ConditionalNode, WorkflowNode
from ..._shared import is_falsy_scalar, resolve_path, to_display_string

logger = structlog.get_logger(__name__)

DEFAULT_OPERATOR = "exists"
PREVIEW_LIMIT = 100


def _to_number(value: Any) -> float:
    """Numeric cast that yields NaN for anything non-numeric."""
    if value is None or isinstance(value, (dict, list)):
        return math.nan
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, str) and not value.strip():
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return math.nan


OPERATORS: Dict[str, Callable[[Any, str, Any, str], bool]] = {
    "equals": lambda actual, actual_str, expected, expected_str: actual_str == expected_str,
    "notEquals": lambda actual, actual_str, expected, expected_str: actual_str != expected_str,
    "contains": lambda actual, actual_str, expected, expected_str: expected_str in actual_str,
    "notContains": lambda actual, actual_str, expected, expected_str: expected_str not in actual_str,
    "greaterThan": lambda actual, actual_str, expected, expected_str: _to_number(actual) > _to_number(expected),
    "lessThan": lambda actual, actual_str, expected, expected_str: _to_number(actual) < _to_number(expected),
    "exists": lambda actual, actual_str, expected, expected_str: actual is not None and actual != "",
    "empty": lambda actual, actual_str, expected, expected_str: is_falsy_scalar(actual),
}


class Condition(ConditionalNode):
    """
    Operators: equals, notEquals, contains, notContains, greaterThan,
    lessThan, exists, empty. Unknown operators evaluate to true.
    """

    @classmethod
    def identifier(cls) -> str:
        return "condition"

    @property
    def label(self) -> str:
        return "Condition"

    async def execute(self, ctx, node: WorkflowNode, input: Any) -> Any:
        config = node.config or {}
        field = config.get("field") or ""
        operator = config.get("operator") or DEFAULT_OPERATOR
        expected = config.get("value")
        if expected is None:
            expected = ""

        actual = resolve_path(input, field) if field else input
        actual_str = to_display_string(actual)
        expected_str = to_display_string(expected)

        evaluate = OPERATORS.get(operator)
        result = evaluate(actual, actual_str, expected, expected_str) if evaluate else True

        logger.debug(
            "Evaluated Condition",
            node_id=node.id,
            field=field or "(input)",
            operator=operator,
            result=result,
        )

        return {
            "_condition": True,
            "result": bool(result),
            "operator": operator,
            "actual": actual_str[:PREVIEW_LIMIT],
            "expected": expected_str[:PREVIEW_LIMIT],
            "field": field or "(input)",
        }
