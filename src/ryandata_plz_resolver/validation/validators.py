from __future__ import annotations

from abstract_validation_base import BaseValidator, ValidationResult

from ryandata_plz_resolver.core.postal_code import is_valid_plz


class PostalCodeFormatValidator(BaseValidator[str]):
    """Validates PLZ format (5 digits).

    This is a fast format validator that doesn't require
    external lookups - it only checks the format is correct.
    """

    @property
    def name(self) -> str:
        """Name of this validator."""
        return "plz_format"

    def validate(self, code: str) -> ValidationResult:
        """Validate the postal code format.

        Args:
            code: Postal code exactly as typed; surrounding whitespace is an error.

        Returns:
            ValidationResult with any format errors.
        """
        result = ValidationResult(is_valid=True)
        if not is_valid_plz(code):
            result.add_error("postal_code", f"Invalid postal code format: {code!r}", code)
        return result
