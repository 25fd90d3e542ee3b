"""ryandata-plz-resolver: keep a German locality and its postal code in agreement.

This package provides the engine behind a two-field address form:
- An async OpenPLZ lookup client (httpx)
- A per-form session that resolves locality -> postal code and back,
  with debouncing, stale-result protection and echo suppression
- A pure projection of the form state for rendering
- A small CLI (``ryandata-plz``)

Quick Start:
    >>> import asyncio
    >>> from ryandata_plz_resolver import AddressFormSession, OpenPlzClient
    >>> async def demo():
    ...     async with OpenPlzClient() as client:
    ...         async with AddressFormSession(client) as session:
    ...             session.edit_locality("Münster")
    ...             await session.settle()
    ...             return session.view()
    >>> view = asyncio.run(demo())
    >>> view.postal_code_widget  # "select": Münster has several codes
"""

from __future__ import annotations

from ryandata_plz_resolver.core import is_valid_plz, validate_plz
from ryandata_plz_resolver.debounce import Debouncer
from ryandata_plz_resolver.models import (
    PACKAGE_NAME,
    EchoToken,
    ErrorKind,
    FieldState,
    FormField,
    FormView,
    Locality,
    PostalCodeMatch,
    RyanDataPlzError,
    UiState,
)
from ryandata_plz_resolver.projector import is_validated, project_view
from ryandata_plz_resolver.protocols import LookupClientProtocol
from ryandata_plz_resolver.remote import OpenPlzClient, OpenPlzConfig
from ryandata_plz_resolver.service import AddressFormSession, check_agreement, exact_matches
from ryandata_plz_resolver.validation import PostalCodeFormatValidator

__version__ = "0.1.0"
__package_name__ = "ryandata-plz-resolver"

__all__ = [
    # Version
    "__version__",
    # Primary interface
    "AddressFormSession",
    "check_agreement",
    "exact_matches",
    "project_view",
    "is_validated",
    # Lookup client
    "OpenPlzClient",
    "OpenPlzConfig",
    "LookupClientProtocol",
    # Models
    "Locality",
    "PostalCodeMatch",
    "FieldState",
    "UiState",
    "FormView",
    "EchoToken",
    "FormField",
    # Errors
    "PACKAGE_NAME",
    "ErrorKind",
    "RyanDataPlzError",
    # Utilities
    "Debouncer",
    "PostalCodeFormatValidator",
    "is_valid_plz",
    "validate_plz",
]
