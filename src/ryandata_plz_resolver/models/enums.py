"""Resolution enumerations and constants."""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Taxonomy of errors surfaced in the form's error banner."""

    NOT_A_LOCALITY = "not_a_locality"
    INVALID_FORMAT = "invalid_format"
    INVALID_POSTAL_CODE = "invalid_postal_code"
    LOOKUP_FAILURE = "lookup_failure"


class FormField(str, Enum):
    """The two mutually dependent form fields."""

    LOCALITY = "locality"
    POSTAL_CODE = "postal_code"


# Key that commits a field; the form has no submit action so it is swallowed
COMMIT_KEY = "Enter"

VALIDATED_MESSAGE = "✓ Address validated successfully"
