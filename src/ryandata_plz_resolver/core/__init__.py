"""Domain-agnostic helpers shared by the client and the engine."""

from __future__ import annotations

from ryandata_plz_resolver.core.postal_code import is_valid_plz, validate_plz

__all__ = ["is_valid_plz", "validate_plz"]
