import pytest

from app.constants.bot_engine import ConditionType
from app.core.conditions import evaluate_condition


def test_always_matches_without_input():
    """An always condition matches even with no input."""
    assert evaluate_condition(ConditionType.ALWAYS, None, None, {}) is True


@pytest.mark.parametrize(
    "value,text,expected",
    [
        ("sim", "SIM", True),
        ("sim", "  sim  ", True),
        ("sim", "sim!", False),
        ("", "", True),
    ],
)
def test_equals_is_trimmed_and_case_insensitive(value, text, expected):
    """Equals ignores surrounding whitespace and case."""
    assert evaluate_condition(ConditionType.EQUALS, value, text, {}) is expected


def test_contains_is_case_insensitive():
    """Contains ignores case."""
    assert evaluate_condition(ConditionType.CONTAINS, "plano", "Quero um PLANO novo", {})
    assert not evaluate_condition(ConditionType.CONTAINS, "plano", "suporte", {})


def test_regex_search_ignores_case():
    """Regex conditions search the input ignoring case."""
    assert evaluate_condition(ConditionType.REGEX, r"^\d{3}$", "123", {})
    assert evaluate_condition(ConditionType.REGEX, "ola", "OLA mundo", {})
    assert not evaluate_condition(ConditionType.REGEX, r"^\d{3}$", "12a", {})


def test_malformed_regex_never_matches():
    """An invalid pattern never matches."""
    assert evaluate_condition(ConditionType.REGEX, "([a-", "anything", {}) is False


def test_variable_presence_and_value():
    """Variable conditions check presence and, when given, the value."""
    variables = {"plan": "Premium", "age": 30}
    assert evaluate_condition(ConditionType.VARIABLE, "plan", None, variables)
    assert evaluate_condition(ConditionType.VARIABLE, "plan:premium", None, variables)
    assert evaluate_condition(ConditionType.VARIABLE, "age:30", None, variables)
    assert not evaluate_condition(ConditionType.VARIABLE, "plan:basic", None, variables)
    assert not evaluate_condition(ConditionType.VARIABLE, "missing", None, variables)
    assert not evaluate_condition(ConditionType.VARIABLE, "", None, variables)


def test_unknown_condition_type_is_false():
    """An unknown condition type never matches."""
    assert evaluate_condition("sometimes", "x", "x", {}) is False
