from app.core.templating import interpolate_variables


def test_replaces_known_variables():
    """Known placeholders are replaced."""
    result = interpolate_variables("Olá {{name}}, seu plano é {{plan}}.", {"name": "Ana", "plan": "Pro"})
    assert result == "Olá Ana, seu plano é Pro."


def test_unknown_placeholders_are_left_verbatim():
    """Unknown placeholders are kept as written."""
    assert interpolate_variables("Olá {{name}}", {}) == "Olá {{name}}"


def test_none_values_are_left_verbatim_and_others_stringified():
    """None values keep the placeholder and other values are stringified."""
    assert interpolate_variables("{{a}}-{{b}}", {"a": None, "b": 3}) == "{{a}}-3"


def test_empty_template():
    """An empty template renders empty."""
    assert interpolate_variables("", {"a": 1}) == ""
