"""Resolution models package.

Contains the lookup result models, the mutable form state containers,
the error taxonomy and shared constants.
"""

from __future__ import annotations

from ryandata_plz_resolver.models.enums import (
    COMMIT_KEY,
    VALIDATED_MESSAGE,
    ErrorKind,
    FormField,
)
from ryandata_plz_resolver.models.errors import PACKAGE_NAME, RyanDataPlzError
from ryandata_plz_resolver.models.locality import Locality, PostalCodeMatch
from ryandata_plz_resolver.models.state import EchoToken, FieldState, FormView, UiState

__all__ = [
    # Errors
    "PACKAGE_NAME",
    "RyanDataPlzError",
    # Enums and constants
    "ErrorKind",
    "FormField",
    "COMMIT_KEY",
    "VALIDATED_MESSAGE",
    # Lookup results
    "Locality",
    "PostalCodeMatch",
    # Form state
    "EchoToken",
    "FieldState",
    "UiState",
    "FormView",
]
