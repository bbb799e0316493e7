"""Validation of values collected by input nodes."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Optional, Sequence

from app.constants.bot_engine import ValidationType

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
DATE_RE = re.compile(r"^(\d{2}/\d{2}/\d{4}|\d{4}-\d{2}-\d{2})$")

INVALID_NUMBER = "Por favor, digite um número válido."
INVALID_EMAIL = "Por favor, digite um e-mail válido."
INVALID_PHONE = "Por favor, digite um telefone válido."
INVALID_DATE = "Por favor, digite uma data válida (dd/mm/aaaa)."
INVALID_OPTION = "Opção inválida. Escolha entre: {options}"


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    error: Optional[str] = None


VALID = ValidationResult(valid=True)


def validate_input(
    value: str,
    validation_type: Optional[str],
    options: Optional[Sequence[str]] = None,
) -> ValidationResult:
    """Check `value` against an input node's validation type; unknown types pass."""
    value = (value or "").strip()

    if not validation_type or validation_type == ValidationType.TEXT:
        return VALID

    if validation_type == ValidationType.NUMBER:
        try:
            number = float(value.replace(",", "."))
        except ValueError:
            return ValidationResult(False, INVALID_NUMBER)
        if not math.isfinite(number):
            return ValidationResult(False, INVALID_NUMBER)
        return VALID

    if validation_type == ValidationType.EMAIL:
        return VALID if EMAIL_RE.match(value) else ValidationResult(False, INVALID_EMAIL)

    if validation_type == ValidationType.PHONE:
        digits = re.sub(r"\D", "", value)
        if 10 <= len(digits) <= 13:
            return VALID
        return ValidationResult(False, INVALID_PHONE)

    if validation_type == ValidationType.DATE:
        return VALID if DATE_RE.match(value) else ValidationResult(False, INVALID_DATE)

    if validation_type == ValidationType.OPTION:
        if not options:
            return VALID
        normalized = value.lower()
        if any(str(opt).strip().lower() == normalized for opt in options):
            return VALID
        return ValidationResult(
            False, INVALID_OPTION.format(options=", ".join(str(o) for o in options))
        )

    return VALID
