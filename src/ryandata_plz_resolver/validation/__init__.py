"""Field validation implementations."""

from ryandata_plz_resolver.validation.validators import PostalCodeFormatValidator

__all__ = ["PostalCodeFormatValidator"]
