"""Lookup result models.

Locality and PostalCodeMatch are immutable values produced only by the
lookup client. Locality validates straight from the OpenPLZ wire format.
"""

from __future__ import annotations

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class Locality(BaseModel):
    """A named place together with one of its postal codes."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",  # municipality, district, federalState, ...
    )

    name: str = Field(description="Locality name as returned by the service")
    postal_code: str = Field(
        description="Five-digit German postal code (PLZ)",
        validation_alias=AliasChoices("postalCode", "postal_code"),
        serialization_alias="postalCode",
    )

    @property
    def key(self) -> tuple[str, str]:
        """Identity used for deduplication."""
        return (self.name, self.postal_code)


class PostalCodeMatch(BaseModel):
    """A postal code and a representative locality for it."""

    model_config = ConfigDict(frozen=True)

    code: str
    name: str
