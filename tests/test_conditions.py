import pytest

from trustgate.conditions import compare_numbers, contains_value, evaluate_condition
from trustgate.models import ResponseCondition


def cond(operator, value=None):
    return ResponseCondition(field="f", operator=operator, value=value)


def test_eq_and_ne_are_type_strict():
    assert evaluate_condition(cond("eq", "a"), "a")
    assert not evaluate_condition(cond("eq", 1), 1.0)
    assert evaluate_condition(cond("ne", 1), 1.0)
    assert not evaluate_condition(cond("ne", "a"), "a")


@pytest.mark.parametrize(
    "operator, value, limit, expected",
    [
        ("gt", 5, 3, True),
        ("gt", 3, 3, False),
        ("gte", 3, 3.0, True),
        ("lt", 2.5, 3, True),
        ("lte", 4, 3, False),
    ],
)
def test_numeric_operators(operator, value, limit, expected):
    assert evaluate_condition(cond(operator, limit), value) == expected


def test_compare_numbers_antisymmetric():
    assert compare_numbers(1, 2) == -compare_numbers(2, 1)
    assert compare_numbers(7, 7.0) == compare_numbers("x", 7)


def test_compare_numbers_ignores_non_numbers():
    assert compare_numbers("1", 2) == compare_numbers(True, 5) == compare_numbers(2, 2)


def test_contains_on_string_list_and_dict():
    assert contains_value("hello world", "world")
    assert not contains_value("hello", 1)
    assert contains_value([1, "a"], "a")
    assert not contains_value([1], 1.0)
    assert contains_value({"k": "v"}, "v")
    assert not contains_value({"v": 1}, "v")
    assert not contains_value(42, 42)


def test_not_contains_is_negation():
    assert evaluate_condition(cond("not_contains", "z"), "abc")
    assert not evaluate_condition(cond("not_contains", "b"), "abc")


def test_exists_and_unknown_operator():
    assert evaluate_condition(cond("exists"), 0)
    assert evaluate_condition(cond("not_exists"), None)
    assert not evaluate_condition(cond("exists"), None)
    assert not evaluate_condition(cond("bogus", 1), 1)