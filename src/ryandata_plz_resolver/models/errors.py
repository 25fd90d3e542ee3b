"""Resolution error classes.

Every failure the resolution engine can surface is built as a
RyanDataPlzError so it carries package identification in its context,
even though only the rendered message reaches the form.
"""

from __future__ import annotations

from pydantic_core import PydanticCustomError

from ryandata_plz_resolver.models.enums import ErrorKind

# Package identifier for error context
PACKAGE_NAME = "ryandata_plz_resolver"


class RyanDataPlzError(PydanticCustomError):
    """Custom exception for ryandata_plz_resolver that wraps Pydantic errors.

    Inherits from PydanticCustomError to stay compatible with Pydantic's
    error handling while providing package identification. The classmethod
    constructors below build the four error kinds of the taxonomy.
    """

    @classmethod
    def not_a_locality(cls, name: str) -> RyanDataPlzError:
        """No locality with exactly this name exists."""
        return cls(
            ErrorKind.NOT_A_LOCALITY.value,
            "{name} is not a locality in Germany.",
            {"package": PACKAGE_NAME, "name": name},
        )

    @classmethod
    def invalid_format(cls, code: str) -> RyanDataPlzError:
        """The postal code is not five digits."""
        return cls(
            ErrorKind.INVALID_FORMAT.value,
            "Postal code must be 5 digits",
            {"package": PACKAGE_NAME, "code": code},
        )

    @classmethod
    def invalid_postal_code(cls, code: str) -> RyanDataPlzError:
        """The postal code is well formed but unknown."""
        return cls(
            ErrorKind.INVALID_POSTAL_CODE.value,
            "Invalid postal code. Please enter a valid German postal code.",
            {"package": PACKAGE_NAME, "code": code},
        )

    @classmethod
    def lookup_failure(cls, subject: str, detail: str | None = None) -> RyanDataPlzError:
        """A lookup failed in transport or while parsing the response.

        Args:
            subject: What was being fetched ("locality" or "postal code").
            detail: Optional low-level reason, kept in the context only.
        """
        return cls(
            ErrorKind.LOOKUP_FAILURE.value,
            "Error fetching {subject} data. Please try again.",
            {"package": PACKAGE_NAME, "subject": subject, "detail": detail or ""},
        )

    @property
    def kind(self) -> ErrorKind:
        """The taxonomy entry this error belongs to."""
        return ErrorKind(self.type)
