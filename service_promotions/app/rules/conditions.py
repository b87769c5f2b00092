"""
Condition evaluation for the Promotions Service.

A condition compares one player attribute, addressed by a dot-delimited
path, against a literal through an operator. Values follow JSON semantics:
player data and rule literals are nulls, bools, numbers, strings, lists and
mappings.

Absence is never a match. When the addressed attribute is missing or null
every operator evaluates to False, ``neq`` and ``nin`` included.
"""

import json
import math
import re
from functools import lru_cache
from typing import Any, Callable, Dict, Mapping

from shared.errors import PatternError
from shared.logging import get_logger
from .models import Condition, ConditionOperator


class _Missing:
    """Sentinel for an unresolved attribute path."""

    def __repr__(self) -> str:
        return "MISSING"


MISSING = _Missing()

# Numeric string grammar: no digit separators, only the "Infinity" spelling
_DECIMAL_LITERAL = re.compile(r"[+-]?(Infinity|([0-9]+\.?[0-9]*|\.[0-9]+)([eE][+-]?[0-9]+)?)")
_RADIX_LITERAL = re.compile(r"0([xX][0-9a-fA-F]+|[oO][0-7]+|[bB][01]+)")


def resolve_field(data: Any, path: str) -> Any:
    """Walk ``data`` along a dot-delimited path.

    Mapping segments are looked up by key; list segments must be decimal
    indexes. Returns ``MISSING`` as soon as a segment cannot be resolved.
    """
    current = data
    for part in path.split("."):
        if isinstance(current, Mapping):
            if part not in current:
                return MISSING
            current = current[part]
        elif isinstance(current, list) and part.isdigit():
            index = int(part)
            if index >= len(current):
                return MISSING
            current = current[index]
        else:
            return MISSING
    return current


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def strict_equals(left: Any, right: Any) -> bool:
    """Equality without cross-type coercion (``1 != "1"``, ``True != 1``).

    Lists and mappings compare structurally, element by element.
    """
    if _is_number(left) and _is_number(right):
        return left == right
    if isinstance(left, list) and isinstance(right, list):
        return len(left) == len(right) and all(
            strict_equals(a, b) for a, b in zip(left, right)
        )
    if isinstance(left, Mapping) and isinstance(right, Mapping):
        return left.keys() == right.keys() and all(
            strict_equals(left[key], right[key]) for key in left
        )
    if type(left) is not type(right):
        return False
    return left == right


def to_number(value: Any) -> float:
    """Coerce a JSON value to a float, yielding NaN when it is not numeric."""
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if _is_number(value):
        return float(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0.0
        if _RADIX_LITERAL.fullmatch(text):
            return float(int(text, 0))
        if _DECIMAL_LITERAL.fullmatch(text):
            return float(text)
        return math.nan
    if isinstance(value, list):
        if not value:
            return 0.0
        if len(value) == 1:
            return to_number(value[0])
    return math.nan


def to_text(value: Any) -> str:
    """Stringify a JSON value the way a JSON runtime does."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, list):
        return ",".join("" if item is None else to_text(item) for item in value)
    if isinstance(value, Mapping):
        return json.dumps(value, default=str)
    return str(value)


@lru_cache(maxsize=256)
def compile_pattern(pattern: str) -> "re.Pattern[str]":
    """Compile and cache a condition pattern."""
    try:
        return re.compile(pattern)
    except re.error as e:
        raise PatternError(pattern, details={"error": str(e)}) from e


class ConditionEvaluator:
    """Evaluates single conditions against player data."""

    def __init__(self):
        self.logger = get_logger("promotions.conditions")
        self._operators: Dict[str, Callable[[Any, Any], bool]] = {
            ConditionOperator.EQ.value: strict_equals,
            ConditionOperator.NEQ.value: lambda actual, expected: not strict_equals(actual, expected),
            ConditionOperator.GT.value: lambda actual, expected: to_number(actual) > to_number(expected),
            ConditionOperator.GTE.value: lambda actual, expected: to_number(actual) >= to_number(expected),
            ConditionOperator.LT.value: lambda actual, expected: to_number(actual) < to_number(expected),
            ConditionOperator.LTE.value: lambda actual, expected: to_number(actual) <= to_number(expected),
            ConditionOperator.IN.value: self._is_member,
            ConditionOperator.NIN.value: self._is_not_member,
            ConditionOperator.CONTAINS.value: self._contains,
            ConditionOperator.REGEX.value: self._matches,
        }

    def evaluate(self, condition: Condition, player_data: Mapping[str, Any]) -> bool:
        """Evaluate a single condition."""
        actual = resolve_field(player_data, condition.field)
        if actual is MISSING or actual is None:
            return False

        handler = self._operators.get(condition.operator)
        if handler is None:
            self.logger.warning(
                "Unknown condition operator",
                operator=condition.operator,
                field=condition.field
            )
            return False

        try:
            return bool(handler(actual, condition.value))
        except PatternError as e:
            self.logger.warning(
                "Invalid condition pattern",
                field=condition.field,
                pattern=e.details.get("pattern"),
                error=e.details.get("error")
            )
            return False

    @staticmethod
    def _is_member(actual: Any, expected: Any) -> bool:
        if not isinstance(expected, list):
            return False
        return any(strict_equals(actual, item) for item in expected)

    @staticmethod
    def _is_not_member(actual: Any, expected: Any) -> bool:
        if not isinstance(expected, list):
            return False
        return not any(strict_equals(actual, item) for item in expected)

    @staticmethod
    def _contains(actual: Any, expected: Any) -> bool:
        return to_text(expected).lower() in to_text(actual).lower()

    @staticmethod
    def _matches(actual: Any, expected: Any) -> bool:
        return compile_pattern(to_text(expected)).search(to_text(actual)) is not None
