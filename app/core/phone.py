"""Contact phone normalization."""

from __future__ import annotations

import re

_NON_DIGITS = re.compile(r"\D")

# Domestic numbers: area code + 8 or 9 digit subscriber number
DOMESTIC_LENGTHS = (10, 11)


def normalize_phone(phone: str, country_code: str = "55") -> str:
    """
    Strip everything but digits and prepend `country_code` to domestic-length
    numbers that do not already carry it.
    """
    digits = _NON_DIGITS.sub("", phone or "")
    if (
        country_code
        and not digits.startswith(country_code)
        and len(digits) in DOMESTIC_LENGTHS
    ):
        return f"{country_code}{digits}"
    return digits
