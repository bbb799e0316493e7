"""`{{variable}}` interpolation for message templates."""

from __future__ import annotations

import re
from typing import Any, Mapping

PLACEHOLDER_RE = re.compile(r"\{\{(\w+)\}\}")


def interpolate_variables(template: str, variables: Mapping[str, Any]) -> str:
    """Replace `{{name}}` placeholders; unknown or unset names are left verbatim."""
    if not template:
        return template

    def _replace(match: re.Match[str]) -> str:
        value = variables.get(match.group(1))
        if value is None:
            return match.group(0)
        return str(value)

    return PLACEHOLDER_RE.sub(_replace, template)
