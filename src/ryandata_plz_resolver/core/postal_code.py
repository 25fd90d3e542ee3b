"""German postal code (PLZ) format utilities.

A PLZ is exactly five ASCII digits. Leading zeros are significant
("01067" is Dresden), so codes are always handled as strings.
"""

from __future__ import annotations

import re

# [0-9] rather than \d: \d would also accept non-ASCII digits
_PLZ_RE = re.compile(r"[0-9]{5}")


def is_valid_plz(value: str | None) -> bool:
    """Return True if *value* is exactly five ASCII digits (no trimming)."""
    return isinstance(value, str) and _PLZ_RE.fullmatch(value) is not None


def validate_plz(value: str | None) -> tuple[str | None, str | None]:
    """Validate a postal code after trimming surrounding whitespace.

    Args:
        value: The postal code string to validate.

    Returns:
        Tuple of (cleaned_value, error_message).
        cleaned_value is None if invalid.
        error_message is None if valid.
    """
    if not value or not isinstance(value, str):
        return None, "Missing or invalid postal code"

    cleaned = value.strip()
    if is_valid_plz(cleaned):
        return cleaned, None
    return None, f"Invalid postal code format: {value}"
