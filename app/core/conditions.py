"""Edge condition evaluation."""

from __future__ import annotations

import re
from typing import Any, Mapping, Optional

from app.constants.bot_engine import ConditionType


def evaluate_condition(
    condition_type: str,
    condition_value: Optional[str],
    input_value: Optional[str],
    variables: Mapping[str, Any],
) -> bool:
    """
    Decide whether an edge may be taken.

    Pure function; unknown condition types and malformed regexes never match.
    """
    text = input_value or ""
    expected = condition_value or ""

    if condition_type == ConditionType.ALWAYS:
        return True

    if condition_type == ConditionType.EQUALS:
        return text.strip().lower() == expected.strip().lower()

    if condition_type == ConditionType.CONTAINS:
        return expected.lower() in text.lower()

    if condition_type == ConditionType.REGEX:
        try:
            return re.search(expected, text, re.IGNORECASE) is not None
        except re.error:
            return False

    if condition_type == ConditionType.VARIABLE:
        return _evaluate_variable(expected, variables)

    return False


def _evaluate_variable(expected: str, variables: Mapping[str, Any]) -> bool:
    """`name` checks that the variable is set; `name:value` compares case-insensitively."""
    if not expected:
        return False
    name, sep, value = expected.partition(":")
    current = variables.get(name)
    if not sep:
        return current is not None
    if current is None:
        return False
    return str(current).lower() == value.lower()
