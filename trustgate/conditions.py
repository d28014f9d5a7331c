"""Evaluation of response conditions."""

from __future__ import annotations

from typing import Any

from trustgate.models import ResponseCondition


def _same(a: Any, b: Any) -> bool:
    return type(a) is type(b) and a == b


def _as_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    return None


def compare_numbers(a: Any, b: Any) -> int:
    """Return -1, 0 or 1 comparing two numbers; 0 if either is not a number."""
    x, y = _as_number(a), _as_number(b)
    if x is None or y is None:
        return 0
    if x < y:
        return -1
    if x > y:
        return 1
    return 0


def contains_value(value: Any, search_value: Any) -> bool:
    """Whether a string, list or mapping's values contain the search value."""
    if isinstance(value, str):
        return isinstance(search_value, str) and search_value in value
    if isinstance(value, list):
        return any(_same(item, search_value) for item in value)
    if isinstance(value, dict):
        return any(_same(item, search_value) for item in value.values())
    return False


def evaluate_condition(condition: ResponseCondition, value: Any) -> bool:
    """Evaluate a condition against a value; unknown operators are false."""
    op = condition.operator
    if op == "eq":
        return _same(value, condition.value)
    if op == "ne":
        return not _same(value, condition.value)
    if op == "gt":
        return compare_numbers(value, condition.value) > 0
    if op == "gte":
        return compare_numbers(value, condition.value) >= 0
    if op == "lt":
        return compare_numbers(value, condition.value) < 0
    if op == "lte":
        return compare_numbers(value, condition.value) <= 0
    if op == "contains":
        return contains_value(value, condition.value)
    if op == "not_contains":
        return not contains_value(value, condition.value)
    if op == "exists":
        return value is not None
    if op == "not_exists":
        return value is None
    return False